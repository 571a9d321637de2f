"""Wire tracing.

Trace output goes to the ``ewsync.trace`` logger at DEBUG level, so it is
routed and filtered like any other log record.
"""

import logging
from enum import IntFlag
from typing import Mapping, Optional, Union

TRACE_LOGGER_NAME = "ewsync.trace"


class TraceFlags(IntFlag):
    """Categories of wire traffic that can be traced."""
    NONE = 0
    EWS_REQUEST = 1
    EWS_RESPONSE = 2
    EWS_RESPONSE_HTTP_HEADERS = 4
    ALL = EWS_REQUEST | EWS_RESPONSE | EWS_RESPONSE_HTTP_HEADERS


class TraceSink:
    """Writes traced payloads for the enabled categories."""

    def __init__(self, flags: TraceFlags = TraceFlags.NONE, logger: Optional[logging.Logger] = None):
        self.flags = flags
        self.logger = logger or logging.getLogger(TRACE_LOGGER_NAME)

    @classmethod
    def from_config(cls, logging_config) -> "TraceSink":
        flags = TraceFlags.NONE
        if logging_config.trace_requests:
            flags |= TraceFlags.EWS_REQUEST
        if logging_config.trace_responses:
            flags |= TraceFlags.EWS_RESPONSE
        if logging_config.trace_http_headers:
            flags |= TraceFlags.EWS_RESPONSE_HTTP_HEADERS
        return cls(flags)

    def is_enabled_for(self, flag: TraceFlags) -> bool:
        return bool(self.flags & flag)

    def trace(self, flag: TraceFlags, payload: Union[bytes, str, Mapping[str, str]]) -> None:
        if not self.is_enabled_for(flag):
            return
        if isinstance(payload, bytes):
            text = payload.decode("utf-8", errors="replace")
        elif isinstance(payload, Mapping):
            text = "\n".join(f"{name}: {value}" for name, value in payload.items())
        else:
            text = payload
        self.logger.debug(f"<{flag.name}>\n{text}\n</{flag.name}>")
