"""Value conversion helpers shared by the reader and the writer."""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional, Tuple

from .constants import BOOLEAN_FALSE_VALUES, BOOLEAN_TRUE_VALUES
from .errors import XmlParseError


class XmlUtils:
    """Tag name helpers."""

    @staticmethod
    def split_tag(tag: str) -> Tuple[str, str]:
        """Split a Clark-notation tag into ``(namespace, local_name)``.

        Args:
            tag: Tag such as ``{http://ns}Name`` or ``Name``

        Returns:
            Tuple of namespace URI (empty if none) and local name
        """
        if tag.startswith("{"):
            namespace, _, local = tag[1:].partition("}")
            return namespace, local
        return "", tag

    @staticmethod
    def qualify(namespace: str, local_name: str) -> str:
        """Build a Clark-notation tag."""
        return f"{{{namespace}}}{local_name}" if namespace else local_name


class ValueConverter:
    """Conversions between wire text and Python values."""

    @staticmethod
    def to_str(text: Optional[str]) -> Optional[str]:
        return text

    @staticmethod
    def to_bool(text: Optional[str]) -> Optional[bool]:
        if text is None:
            return None
        normalized = text.strip().lower()
        if normalized in BOOLEAN_TRUE_VALUES:
            return True
        if normalized in BOOLEAN_FALSE_VALUES:
            return False
        raise XmlParseError(f"Invalid boolean value {text!r}")

    @staticmethod
    def to_int(text: Optional[str]) -> Optional[int]:
        if text is None or not text.strip():
            return None
        try:
            return int(text.strip())
        except ValueError:
            raise XmlParseError(f"Invalid integer value {text!r}")

    @staticmethod
    def to_datetime(text: Optional[str]) -> Optional[datetime]:
        """Parse an ISO 8601 timestamp, treating a trailing ``Z`` as UTC.

        Naive values are assumed to be UTC, which is what the server sends
        when no offset is present.
        """
        if text is None or not text.strip():
            return None
        value = text.strip()
        if value.endswith("Z"):
            value = value[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(value)
        except ValueError:
            raise XmlParseError(f"Invalid date/time value {text!r}")
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed

    @staticmethod
    def format_value(value: Any) -> str:
        """Render a Python value the way the server expects it."""
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, datetime):
            if value.tzinfo is None:
                value = value.replace(tzinfo=timezone.utc)
            value = value.astimezone(timezone.utc)
            if value.microsecond:
                return value.strftime("%Y-%m-%dT%H:%M:%S.%fZ")
            return value.strftime("%Y-%m-%dT%H:%M:%SZ")
        if isinstance(value, Enum):
            return str(value.value)
        return str(value)
