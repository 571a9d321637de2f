"""HTTP transport for SOAP requests.

The service and the streaming connection depend only on the two protocols
below. :class:`RequestsTransport` implements them with requests; tests
substitute in-memory fakes.
"""

import logging
import socket
from contextlib import suppress
from typing import Iterator, Mapping, Optional, Protocol

import requests
from urllib3.exceptions import ReadTimeoutError

from .errors import ServiceRequestError

logger = logging.getLogger(__name__)

SOAP_CONTENT_TYPE = "text/xml; charset=utf-8"


class ResponseStream(Protocol):
    """Body of a long-lived response, read incrementally."""

    headers: Mapping[str, str]

    def read(self, timeout: float) -> bytes:
        """Next chunk of the body.

        Returns ``b""`` once the server has closed the body and raises
        :class:`TimeoutError` when nothing arrives within ``timeout``.
        """

    def cancel(self) -> None:
        """Interrupt a pending read from another thread."""

    def close(self) -> None:
        """Release the underlying connection."""


class Transport(Protocol):
    def post(self, body: bytes, headers: Optional[Mapping[str, str]] = None) -> bytes:
        """Send a request and return the complete response body."""

    def open_stream(self, body: bytes, headers: Optional[Mapping[str, str]], read_timeout: float) -> ResponseStream:
        """Send a request whose response body is consumed as a stream."""


class RequestsResponseStream:
    """:class:`ResponseStream` over a streamed ``requests`` response."""

    def __init__(self, response: requests.Response):
        self._response = response
        self._chunks: Iterator[bytes] = response.iter_content(chunk_size=None)
        self.headers = dict(response.headers)

    def read(self, timeout: float) -> bytes:
        # The read timeout was fixed when the request was sent
        try:
            return next(self._chunks, b"")
        except requests.exceptions.ConnectionError as e:
            if _is_read_timeout(e):
                raise TimeoutError(f"No data received within {timeout:g}s") from e
            raise
        except requests.exceptions.Timeout as e:
            raise TimeoutError(f"No data received within {timeout:g}s") from e

    def cancel(self) -> None:
        connection = getattr(self._response.raw, "connection", None)
        sock = getattr(connection, "sock", None)
        if sock is not None:
            with suppress(OSError):
                sock.shutdown(socket.SHUT_RDWR)

    def close(self) -> None:
        self._response.close()


def _is_read_timeout(error: requests.exceptions.ConnectionError) -> bool:
    return any(isinstance(arg, ReadTimeoutError) for arg in error.args)


class RequestsTransport:
    """Transport posting SOAP requests to one endpoint with a session.

    Args:
        url: Service endpoint
        username: User for basic authentication
        password: Password for basic authentication
        timeout: Seconds allowed for ordinary requests
        verify: Verify the server's TLS certificate
        session: Session to reuse; one is created if omitted
    """

    def __init__(
        self,
        url: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
        timeout: float = 100,
        verify: bool = True,
        session: Optional[requests.Session] = None,
    ):
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.verify = verify
        if username is not None:
            self.session.auth = (username, password or "")

    @classmethod
    def from_config(cls, service_config) -> "RequestsTransport":
        if not service_config.url:
            raise ServiceRequestError("No service URL configured")
        return cls(
            service_config.url,
            username=service_config.username,
            password=service_config.password,
            timeout=service_config.timeout_seconds,
            verify=service_config.verify_tls,
        )

    def _headers(self, headers: Optional[Mapping[str, str]]) -> dict:
        merged = {"Content-Type": SOAP_CONTENT_TYPE, "Accept": "text/xml"}
        merged.update(headers or {})
        return merged

    def post(self, body: bytes, headers: Optional[Mapping[str, str]] = None) -> bytes:
        try:
            response = self.session.post(self.url, data=body, headers=self._headers(headers), timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise ServiceRequestError(f"Request to {self.url} failed: {e}") from e
        logger.debug(f"POST {self.url} -> {response.status_code}")
        # SOAP faults arrive with status 500 and are read from the body
        if response.status_code == 500 and response.content:
            return response.content
        if not response.ok:
            raise ServiceRequestError(
                f"Request to {self.url} failed with HTTP {response.status_code}", status_code=response.status_code)
        return response.content

    def open_stream(self, body: bytes, headers: Optional[Mapping[str, str]], read_timeout: float) -> RequestsResponseStream:
        try:
            response = self.session.post(
                self.url,
                data=body,
                headers=self._headers(headers),
                timeout=(self.timeout, read_timeout),
                stream=True,
            )
        except requests.exceptions.RequestException as e:
            raise ServiceRequestError(f"Request to {self.url} failed: {e}") from e
        if not response.ok:
            status = response.status_code
            response.close()
            raise ServiceRequestError(f"Streaming request to {self.url} failed with HTTP {status}", status_code=status)
        return RequestsResponseStream(response)
