"""Errors raised while reading or writing EWS XML."""

from typing import Optional


class XmlParseError(Exception):
    """Raised when a document is malformed or nodes arrive out of order.

    The cursor is not rewound; the read call that raised is aborted and the
    caller is expected to discard the reader.
    """

    def __init__(self, message: str, expected: Optional[str] = None, actual: Optional[str] = None):
        self.expected = expected
        self.actual = actual
        if expected is not None:
            message = f"{message} (expected {expected}, found {actual})"
        super().__init__(message)
