"""Unit tests for the requests-based transport."""

from unittest.mock import MagicMock

import pytest
import requests

from ewsync.config import ServiceConfig
from ewsync.errors import ServiceRequestError
from ewsync.transport import SOAP_CONTENT_TYPE, RequestsTransport

URL = "https://mail.example.com/EWS/Exchange.asmx"


def make_response(status_code: int, content: bytes = b"", chunks=()):
    response = MagicMock(spec=requests.Response)
    response.status_code = status_code
    response.ok = status_code < 400
    response.content = content
    response.headers = {"Content-Type": SOAP_CONTENT_TYPE}
    response.iter_content.return_value = iter(chunks)
    return response


@pytest.fixture
def session():
    return MagicMock(spec=requests.Session)


class TestPost:
    """Ordinary request and response."""

    def test_successful_post(self, session):
        """Test the body is posted as SOAP and the content returned."""
        session.post.return_value = make_response(200, b"<ok/>")
        transport = RequestsTransport(URL, timeout=30, session=session)

        assert transport.post(b"<request/>") == b"<ok/>"
        _, kwargs = session.post.call_args
        assert kwargs["data"] == b"<request/>"
        assert kwargs["headers"]["Content-Type"] == SOAP_CONTENT_TYPE
        assert kwargs["timeout"] == 30

    def test_fault_body_is_returned(self, session):
        """Test a 500 with a body is handed back for fault parsing."""
        session.post.return_value = make_response(500, b"<soap:Fault/>")
        transport = RequestsTransport(URL, session=session)
        assert transport.post(b"<request/>") == b"<soap:Fault/>"

    def test_http_error(self, session):
        """Test other HTTP failures raise with the status code."""
        session.post.return_value = make_response(401)
        transport = RequestsTransport(URL, session=session)
        with pytest.raises(ServiceRequestError) as excinfo:
            transport.post(b"<request/>")
        assert excinfo.value.status_code == 401

    def test_connection_error(self, session):
        """Test network failures raise ServiceRequestError."""
        session.post.side_effect = requests.exceptions.ConnectionError("refused")
        transport = RequestsTransport(URL, session=session)
        with pytest.raises(ServiceRequestError):
            transport.post(b"<request/>")

    def test_credentials(self, session):
        """Test basic credentials are set on the session."""
        transport = RequestsTransport(URL, username="ann", password="secret", session=session)
        assert transport.session.auth == ("ann", "secret")

    def test_from_config_requires_url(self):
        """Test a transport cannot be built without an endpoint."""
        with pytest.raises(ServiceRequestError):
            RequestsTransport.from_config(ServiceConfig())


class TestOpenStream:
    """Streamed responses."""

    def test_stream_reads_chunks(self, session):
        """Test chunks are read in order and end with an empty chunk."""
        session.post.return_value = make_response(200, chunks=[b"<a>", b"</a>"])
        transport = RequestsTransport(URL, timeout=30, session=session)

        stream = transport.open_stream(b"<request/>", None, 120)

        _, kwargs = session.post.call_args
        assert kwargs["stream"] is True
        assert kwargs["timeout"] == (30, 120)
        assert stream.read(120) == b"<a>"
        assert stream.read(120) == b"</a>"
        assert stream.read(120) == b""

    def test_read_timeout(self, session):
        """Test a requests read timeout surfaces as TimeoutError."""
        def stalled():
            raise requests.exceptions.ReadTimeout("read timed out")
            yield b""

        response = make_response(200)
        response.iter_content.return_value = stalled()
        session.post.return_value = response
        stream = RequestsTransport(URL, session=session).open_stream(b"<request/>", None, 0.5)

        with pytest.raises(TimeoutError):
            stream.read(0.5)

    def test_stream_http_error(self, session):
        """Test a failed streaming request is closed and raised."""
        response = make_response(503)
        session.post.return_value = response
        transport = RequestsTransport(URL, session=session)

        with pytest.raises(ServiceRequestError) as excinfo:
            transport.open_stream(b"<request/>", None, 120)
        assert excinfo.value.status_code == 503
        response.close.assert_called_once()
