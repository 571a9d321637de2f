"""Long-lived streaming connection.

One background thread owns the response stream and parses the documents the
server sends back to back. A single lock guards the state machine::

    Disconnected -> Connecting -> Connected -> Disconnected (terminal)

A read that sees nothing for twice the heartbeat interval ends the
connection with :attr:`DisconnectReason.TIMEOUT`. Whatever ends the
connection, the disconnect callback runs exactly once.
"""

import itertools
import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, List, Mapping, Optional

from ews_xml import XmlReader

from ..errors import StreamingConnectionError
from ..tracing import TraceFlags, TraceSink
from ..transport import ResponseStream, Transport

logger = logging.getLogger(__name__)

_connection_numbers = itertools.count(1)


class ConnectionState(str, Enum):
    DISCONNECTED = "Disconnected"
    CONNECTING = "Connecting"
    CONNECTED = "Connected"


class DisconnectReason(str, Enum):
    CLEAN = "Clean"
    USER_INITIATED = "UserInitiated"
    TIMEOUT = "Timeout"
    EXCEPTION = "Exception"


@dataclass(frozen=True)
class DisconnectEvent:
    reason: DisconnectReason
    exception: Optional[BaseException] = None


UnitReader = Callable[[XmlReader], Any]
ResponseHandler = Callable[[Any], None]
DisconnectHandler = Callable[[DisconnectEvent], None]


class StreamingConnection:
    """Background reader for a streaming response body.

    Args:
        transport: Opens the long-lived response stream
        request_body: Serialized request that starts the stream
        unit_reader: Parses one document with the cursor on its root element
        on_response: Receives every parsed document, on the background thread
        on_disconnect: Receives the single disconnect event
        heartbeat_seconds: Interval within which the server sends something
        headers: Extra HTTP headers for the request
        trace_sink: Destination of wire traces
    """

    def __init__(
        self,
        transport: Transport,
        request_body: bytes,
        unit_reader: UnitReader,
        on_response: ResponseHandler,
        on_disconnect: Optional[DisconnectHandler] = None,
        heartbeat_seconds: float = 60.0,
        headers: Optional[Mapping[str, str]] = None,
        trace_sink: Optional[TraceSink] = None,
    ):
        if heartbeat_seconds <= 0:
            raise ValueError("heartbeat_seconds must be positive")
        self._transport = transport
        self._request_body = request_body
        self._unit_reader = unit_reader
        self._on_response = on_response
        self._on_disconnect = on_disconnect
        self._read_timeout = 2 * heartbeat_seconds
        self._headers = dict(headers or {})
        self._trace_sink = trace_sink or TraceSink()

        self._lock = threading.Lock()
        self._cancelled = threading.Event()
        self._state = ConnectionState.DISCONNECTED
        self._finished = False
        self._stream: Optional[ResponseStream] = None
        self._thread: Optional[threading.Thread] = None
        self._trace_buffer: List[bytes] = []
        self._read_timed_out = False
        self.disconnect_event: Optional[DisconnectEvent] = None

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_connected(self) -> bool:
        return self._state == ConnectionState.CONNECTED

    @property
    def read_timeout(self) -> float:
        return self._read_timeout

    def connect(self) -> None:
        """Open the stream and start the background loop.

        Calling this on an open connection does nothing. Failures to open
        the stream are raised to the caller and leave the connection closed.

        Raises:
            StreamingConnectionError: If the connection was already closed
        """
        with self._lock:
            if self._state != ConnectionState.DISCONNECTED:
                return
            if self._finished:
                raise StreamingConnectionError("Connection is closed; create a new one to reconnect")
            self._state = ConnectionState.CONNECTING
            self._trace(TraceFlags.EWS_REQUEST, self._request_body)
            try:
                stream = self._transport.open_stream(self._request_body, self._headers, self._read_timeout)
            except BaseException:
                self._state = ConnectionState.DISCONNECTED
                self._finished = True
                raise
            self._trace(TraceFlags.EWS_RESPONSE_HTTP_HEADERS, stream.headers)
            self._stream = stream
            self._thread = threading.Thread(
                target=self._run,
                name=f"ewsync-streaming-{next(_connection_numbers)}",
                daemon=True,
            )
            self._state = ConnectionState.CONNECTED
            self._thread.start()
        logger.info(f"Streaming connection open, read timeout {self._read_timeout:g}s")

    def disconnect(self, reason: DisconnectReason = DisconnectReason.USER_INITIATED,
                   exception: Optional[BaseException] = None) -> bool:
        """Stop the background loop and release the stream.

        Only the first call has any effect. The loop is asked to stop, the
        call waits for it to exit (unless made from the loop itself, e.g.
        inside ``on_response``), and the disconnect callback runs.

        Returns:
            True if this call closed the connection
        """
        with self._lock:
            if self._state != ConnectionState.CONNECTED:
                return False
            self._state = ConnectionState.DISCONNECTED
            self._finished = True
            self._cancelled.set()
            stream, thread = self._stream, self._thread

        stream.cancel()
        if thread is not threading.current_thread():
            thread.join(self._read_timeout)
            if thread.is_alive():
                logger.warning(f"{thread.name} did not stop within {self._read_timeout:g}s")
        stream.close()
        self._notify_disconnect(DisconnectEvent(reason, exception))
        return True

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the background loop has exited."""
        thread = self._thread
        if thread is None:
            return True
        thread.join(timeout)
        return not thread.is_alive()

    # Background loop

    def _run(self) -> None:
        reason, error = DisconnectReason.CLEAN, None
        try:
            reader = XmlReader.from_stream(self._read_chunk)
            while not self._cancelled.is_set():
                if not reader.read():
                    break
                unit = self._unit_reader(reader)
                self._flush_trace()
                if self._cancelled.is_set():
                    break
                self._on_response(unit)
        except Exception as e:
            reason, error = self._classify_fault(e)
        finally:
            self._flush_trace()

        if not self._cancelled.is_set():
            if error is not None and reason == DisconnectReason.EXCEPTION:
                logger.error(f"Streaming connection failed: {error}")
            else:
                logger.info(f"Streaming connection ended: {reason.value}")
            self._disconnect_from_loop(reason, error)

    def _classify_fault(self, error: Exception):
        # A read failing because the caller is tearing the stream down is
        # the caller's disconnect, not a fault
        if self._cancelled.is_set():
            return DisconnectReason.USER_INITIATED, None
        # Only a stalled stream is a timeout; callbacks raising TimeoutError are faults
        if self._read_timed_out and isinstance(error, TimeoutError):
            return DisconnectReason.TIMEOUT, error
        return DisconnectReason.EXCEPTION, error

    def _disconnect_from_loop(self, reason: DisconnectReason, error: Optional[BaseException]) -> None:
        with self._lock:
            if self._state != ConnectionState.CONNECTED:
                return
            self._state = ConnectionState.DISCONNECTED
            self._finished = True
            self._cancelled.set()
            stream = self._stream
        stream.close()
        self._notify_disconnect(DisconnectEvent(reason, error))

    def _notify_disconnect(self, event: DisconnectEvent) -> None:
        self.disconnect_event = event
        if self._on_disconnect is None:
            return
        try:
            self._on_disconnect(event)
        except Exception:
            logger.exception("Disconnect handler raised")

    def _read_chunk(self) -> bytes:
        try:
            chunk = self._stream.read(self._read_timeout)
        except TimeoutError:
            self._read_timed_out = True
            raise
        if chunk and self._trace_sink.is_enabled_for(TraceFlags.EWS_RESPONSE):
            self._trace_buffer.append(chunk)
        return chunk

    def _flush_trace(self) -> None:
        if self._trace_buffer:
            self._trace(TraceFlags.EWS_RESPONSE, b"".join(self._trace_buffer))
            self._trace_buffer.clear()

    def _trace(self, flag: TraceFlags, payload) -> None:
        if payload and self._trace_sink.is_enabled_for(flag):
            self._trace_sink.trace(flag, payload)
