"""Exception hierarchy for ewsync.

Malformed XML surfaces as :class:`ews_xml.XmlParseError`, which is re-exported
here so callers can catch everything from one module.
"""

from typing import TYPE_CHECKING, Optional

from ews_xml import XmlParseError

if TYPE_CHECKING:
    from .responses.envelope import ServiceResponse


class EwsError(Exception):
    """Base class for ewsync errors."""


class ServiceLocalError(EwsError):
    """Raised for failures detected on the client before or after a call."""


class ServiceValidationError(ServiceLocalError):
    """Raised when an argument or object state is invalid for the request."""


class ServiceRequestError(EwsError):
    """Raised when a request could not be completed at the transport level."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ServiceResponseError(EwsError):
    """Raised for a response message whose result is an error."""

    def __init__(self, response: "ServiceResponse"):
        self.response = response
        super().__init__(response.error_message or response.error_code or "Unknown service error")

    @property
    def error_code(self) -> Optional[str]:
        return self.response.error_code


class StreamingConnectionError(EwsError):
    """Raised for invalid use of a streaming connection."""


__all__ = [
    'EwsError',
    'XmlParseError',
    'ServiceLocalError',
    'ServiceValidationError',
    'ServiceRequestError',
    'ServiceResponseError',
    'StreamingConnectionError',
]
