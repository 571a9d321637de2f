"""Shared fixtures: canned SOAP documents and in-memory transports."""

import queue
from typing import List, Optional

import pytest

MESSAGES = "http://schemas.microsoft.com/exchange/services/2006/messages"
TYPES = "http://schemas.microsoft.com/exchange/services/2006/types"
SOAP = "http://schemas.xmlsoap.org/soap/envelope/"


def soap_document(body: str, header: str = "") -> bytes:
    """Wrap body content in a SOAP envelope with the EWS prefixes declared."""
    if not header:
        header = ('<soap:Header><t:ServerVersionInfo MajorVersion="15" MinorVersion="1" '
                  'MajorBuildNumber="2507" MinorBuildNumber="6" Version="V2017_07_11"/></soap:Header>')
    return (
        '<?xml version="1.0" encoding="utf-8"?>'
        f'<soap:Envelope xmlns:soap="{SOAP}" xmlns:m="{MESSAGES}" xmlns:t="{TYPES}">'
        f'{header}<soap:Body>{body}</soap:Body></soap:Envelope>'
    ).encode("utf-8")


def response_document(operation: str, *messages: str) -> bytes:
    """SOAP response for an operation with the given response messages."""
    return soap_document(
        f"<m:{operation}Response><m:ResponseMessages>{''.join(messages)}"
        f"</m:ResponseMessages></m:{operation}Response>"
    )


def message(operation: str, response_class: str = "Success", code: str = "NoError",
            text: Optional[str] = None, payload: str = "") -> str:
    """One response message element."""
    text_element = f"<m:MessageText>{text}</m:MessageText>" if text is not None else ""
    return (
        f'<m:{operation}ResponseMessage ResponseClass="{response_class}">'
        f"{text_element}<m:ResponseCode>{code}</m:ResponseCode>{payload}"
        f"</m:{operation}ResponseMessage>"
    )


@pytest.fixture
def soap():
    """Builders for canned SOAP documents."""
    class Builders:
        document = staticmethod(soap_document)
        response = staticmethod(response_document)
        message = staticmethod(message)
    return Builders


class FakeTransport:
    """Transport returning canned bodies and recording what was sent."""

    def __init__(self, responses: Optional[List[bytes]] = None, stream=None):
        self.responses = list(responses or [])
        self.requests: List[bytes] = []
        self.stream = stream
        self.stream_requests: List[bytes] = []
        self.read_timeout: Optional[float] = None
        self.open_error: Optional[Exception] = None

    def post(self, body, headers=None):
        self.requests.append(body)
        return self.responses.pop(0)

    def open_stream(self, body, headers, read_timeout):
        self.stream_requests.append(body)
        self.read_timeout = read_timeout
        if self.open_error is not None:
            raise self.open_error
        return self.stream


_CANCELLED = object()


class FakeResponseStream:
    """Response body fed from a queue by the test.

    Items put with :meth:`push` are bytes to deliver, ``b""`` for a clean end
    of stream, or an exception instance to raise from ``read``. An empty
    queue behaves like a stalled server.
    """

    def __init__(self):
        self.headers = {"Content-Type": "text/xml; charset=utf-8"}
        self._queue: "queue.Queue" = queue.Queue()
        self.cancelled = False
        self.closed = False

    def push(self, *items) -> None:
        for item in items:
            self._queue.put(item)

    def read(self, timeout):
        try:
            item = self._queue.get(timeout=timeout)
        except queue.Empty:
            raise TimeoutError(f"No data within {timeout}s") from None
        if item is _CANCELLED:
            raise ConnectionAbortedError("Stream cancelled")
        if isinstance(item, BaseException):
            raise item
        return item

    def cancel(self):
        self.cancelled = True
        self._queue.put(_CANCELLED)

    def close(self):
        self.closed = True


@pytest.fixture
def fake_stream():
    """Queue-backed streaming response body."""
    return FakeResponseStream()


@pytest.fixture
def fake_transport(fake_stream):
    """Transport whose streams come from ``fake_stream``."""
    return FakeTransport(stream=fake_stream)


def streaming_document(status: Optional[str] = None, subscription_id: Optional[str] = None,
                       response_class: str = "Success", code: str = "NoError", payload: str = "") -> bytes:
    """One GetStreamingEvents document carrying a status or a notification."""
    if status is not None:
        payload += f"<m:ConnectionStatus>{status}</m:ConnectionStatus>"
    elif subscription_id is not None:
        payload += (f"<m:Notifications><m:Notification><t:SubscriptionId>{subscription_id}</t:SubscriptionId>"
                    '<t:CreatedEvent><t:TimeStamp>2024-05-01T08:30:00Z</t:TimeStamp>'
                    '<t:ItemId Id="AAMkI1"/><t:ParentFolderId Id="AAMkF1"/></t:CreatedEvent>'
                    "</m:Notification></m:Notifications>")
    text = None if response_class == "Success" else "Streaming request failed."
    return response_document("GetStreamingEvents", message(
        "GetStreamingEvents", response_class, code, text=text, payload=payload))


@pytest.fixture
def unit():
    """Builder for streaming response documents."""
    return streaming_document
