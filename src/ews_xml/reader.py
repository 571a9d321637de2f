"""Forward-only XML cursor over EWS documents.

The cursor is fed incrementally so the same code reads a complete response
body and a long-lived streaming body that carries one document after another.
Parsing is delegated to defusedxml, which rejects entity expansion and
external references before any node reaches the caller.
"""

import logging
from collections import deque
from typing import Any, Callable, Deque, Dict, Iterable, Iterator, Optional, Tuple, Union

from defusedxml import DefusedXmlException
from defusedxml.ElementTree import DefusedXMLParser, ParseError

from .constants import FRAGMENT_ROOT, XmlNamespace
from .errors import XmlParseError
from .models import NodeType, XmlNode
from .utils import XmlUtils

logger = logging.getLogger(__name__)

ChunkSource = Union[bytes, str, Iterable[bytes], Callable[[], bytes]]
Namespace = Union[XmlNamespace, str, None]

_START = "start"
_END = "end"
_TEXT = "text"

_Event = Tuple[str, Optional[str], Any]


class _EventCollector:
    """Parser target that queues start, end and text events."""

    def __init__(self):
        self.events: Deque[_Event] = deque()
        self._text: list = []
        self._open_tag: Optional[str] = None

    def start(self, tag, attrib):
        self._flush_text()
        self.events.append((_START, tag, dict(attrib)))
        self._open_tag = tag

    def end(self, tag):
        self._flush_text(keep_whitespace=self._open_tag == tag)
        self.events.append((_END, tag, None))
        self._open_tag = None

    def data(self, data):
        self._text.append(data)

    def close(self):
        self._flush_text()

    def _flush_text(self, keep_whitespace: bool = False):
        if not self._text:
            return
        text = "".join(self._text)
        self._text.clear()
        # Whitespace between elements carries no information in EWS payloads;
        # whitespace that is the whole content of a leaf element is its value
        if keep_whitespace or text.strip():
            self.events.append((_TEXT, None, text))


class _DeclarationFilter:
    """Strips XML declarations and byte order marks from a byte stream.

    Several documents sent back to back can then be fed to a single parser
    underneath a synthetic root element. Markers split across chunk
    boundaries are held back until the next chunk arrives.
    """

    _DECLARATION = b"<?xml"
    _BOM = b"\xef\xbb\xbf"

    def __init__(self):
        self._pending = b""

    def feed(self, chunk: bytes) -> bytes:
        data = (self._pending + chunk).replace(self._BOM, b"")
        self._pending = b""
        output = []
        while True:
            start = data.find(self._DECLARATION)
            if start < 0:
                break
            end = data.find(b"?>", start)
            if end < 0:
                output.append(data[:start])
                self._pending = data[start:]
                return b"".join(output)
            output.append(data[:start])
            data = data[end + 2:]
        hold = self._partial_marker_length(data)
        if hold:
            self._pending = data[-hold:]
            data = data[:-hold]
        output.append(data)
        return b"".join(output)

    def flush(self) -> bytes:
        pending, self._pending = self._pending, b""
        return pending

    def _partial_marker_length(self, data: bytes) -> int:
        for marker in (self._DECLARATION, self._BOM):
            for size in range(min(len(marker) - 1, len(data)), 0, -1):
                if data.endswith(marker[:size]):
                    return size
        return 0


def _namespace_uri(namespace: Namespace) -> Optional[str]:
    if namespace is None:
        return None
    if isinstance(namespace, XmlNamespace):
        return namespace.value
    return namespace


class XmlReader:
    """Pull cursor positioned on one node at a time.

    Conventions shared by every reader built on top of this class:

    * A method that reads an element leaves the cursor on that element's end
      node, or on the start node itself when the element is empty.
    * ``read_start_element`` and ``read_element_value`` only advance when the
      cursor is not already on the requested start element.
    * ``is_end_element`` is also true for an empty start element, so loops of
      the form ``read(); ...; until is_end_element`` terminate on ``<X/>``.
    """

    def __init__(self, source: ChunkSource, fragments: bool = False):
        """Create a cursor.

        Args:
            source: Complete document (bytes or str), an iterable of byte
                chunks, or a callable returning the next chunk (``b""`` at
                end of stream)
            fragments: Accept several complete documents in sequence
        """
        self._collector = _EventCollector()
        self._parser = DefusedXMLParser(target=self._collector)
        self._fragments = fragments
        self._filter = _DeclarationFilter() if fragments else None
        self._chunks = self._chunk_iterator(source)
        self._pending: Deque[_Event] = deque()
        self._eof = False
        self._raw_depth = 0
        self._depth = 0
        self._node = XmlNode()

        if fragments:
            self._parser.feed(f"<{FRAGMENT_ROOT}>".encode("utf-8"))

    @classmethod
    def from_stream(cls, read_chunk: Callable[[], bytes]) -> "XmlReader":
        """Cursor over a body that carries documents back to back."""
        return cls(read_chunk, fragments=True)

    # Node properties

    @property
    def node(self) -> XmlNode:
        return self._node

    @property
    def node_type(self) -> NodeType:
        return self._node.node_type

    @property
    def local_name(self) -> str:
        return self._node.local_name

    @property
    def namespace_uri(self) -> str:
        return self._node.namespace_uri

    @property
    def is_empty_element(self) -> bool:
        return self._node.node_type == NodeType.ELEMENT and self._node.is_empty

    @property
    def value(self) -> Optional[str]:
        return self._node.value

    @property
    def attributes(self) -> Dict[str, str]:
        return self._node.attributes

    @property
    def has_attributes(self) -> bool:
        return bool(self._node.attributes)

    @property
    def depth(self) -> int:
        return self._node.depth

    # Navigation

    def read(self) -> bool:
        """Advance to the next node.

        Returns:
            False when the end of the input has been reached
        """
        event = self._next_event()
        if event is None:
            self._node = XmlNode()
            return False

        kind, tag, payload = event
        if kind == _START:
            namespace, local = XmlUtils.split_tag(tag)
            following = self._peek_event()
            is_empty = following is not None and following[0] == _END and following[1] == tag
            if is_empty:
                self._next_event()
            self._node = XmlNode(
                node_type=NodeType.ELEMENT,
                namespace_uri=namespace,
                local_name=local,
                attributes=payload,
                is_empty=is_empty,
                depth=self._depth + 1,
            )
            if not is_empty:
                self._depth += 1
        elif kind == _END:
            namespace, local = XmlUtils.split_tag(tag)
            self._node = XmlNode(
                node_type=NodeType.END_ELEMENT,
                namespace_uri=namespace,
                local_name=local,
                depth=self._depth,
            )
            self._depth -= 1
        else:
            self._node = XmlNode(node_type=NodeType.TEXT, value=payload, depth=self._depth + 1)
        return True

    def is_start_element(self, namespace: Namespace = None, local_name: Optional[str] = None) -> bool:
        if self._node.node_type != NodeType.ELEMENT:
            return False
        return self._matches(namespace, local_name)

    def is_end_element(self, namespace: Namespace, local_name: str) -> bool:
        is_end = self._node.node_type == NodeType.END_ELEMENT or self.is_empty_element
        return is_end and self._matches(namespace, local_name)

    def ensure_current_node_is_start_element(self, namespace: Namespace = None, local_name: Optional[str] = None) -> None:
        if not self.is_start_element(namespace, local_name):
            raise XmlParseError(
                "Unexpected node",
                expected=self._describe_expected("start element", namespace, local_name),
                actual=self._node.describe(),
            )

    def ensure_current_node_is_end_element(self, namespace: Namespace, local_name: str) -> None:
        if not self.is_end_element(namespace, local_name):
            raise XmlParseError(
                "Unexpected node",
                expected=self._describe_expected("end element", namespace, local_name),
                actual=self._node.describe(),
            )

    def read_start_element(self, namespace: Namespace, local_name: str) -> None:
        if not self.is_start_element(namespace, local_name):
            self.read_required()
            self.ensure_current_node_is_start_element(namespace, local_name)

    def read_end_element(self, namespace: Namespace, local_name: str) -> None:
        self.read_required()
        self.ensure_current_node_is_end_element(namespace, local_name)

    def read_end_element_if_necessary(self, namespace: Namespace, local_name: str) -> None:
        if not self.is_end_element(namespace, local_name):
            self.read_end_element(namespace, local_name)

    def skip_current_element(self) -> None:
        """Move past the subtree of the current start element.

        The cursor ends on the element's end node. Nothing happens for
        empty elements or when not positioned on a start element.
        """
        if self._node.node_type != NodeType.ELEMENT or self._node.is_empty:
            return
        target_depth = self._node.depth
        while True:
            self.read_required()
            if self._node.node_type == NodeType.END_ELEMENT and self._node.depth == target_depth:
                return

    def next_is_start_element(self, namespace: Namespace = None, local_name: Optional[str] = None) -> bool:
        """Whether the next node is a matching start element; nothing is consumed."""
        event = self._peek_event()
        if event is None or event[0] != _START:
            return False
        event_namespace, event_local = XmlUtils.split_tag(event[1])
        if local_name is not None and event_local != local_name:
            return False
        uri = _namespace_uri(namespace)
        return uri is None or event_namespace == uri

    def read_to_descendant(self, namespace: Namespace, local_name: str) -> bool:
        """Advance until a start element with the given name is reached."""
        while self.read():
            if self.is_start_element(namespace, local_name):
                return True
        return False

    # Values

    def read_attribute_value(self, name: str, converter: Optional[Callable[[str], Any]] = None) -> Any:
        """Value of an attribute of the current element, or None if absent."""
        value = self._node.attributes.get(name)
        if value is None or converter is None:
            return value
        return converter(value)

    def read_value(self) -> str:
        """Text content of the current element.

        The cursor ends on the element's end node. Elements that contain
        child elements cannot be read as a value.
        """
        self.ensure_current_node_is_start_element()
        if self._node.is_empty:
            return ""
        element = self._node
        self.read_required()
        value = ""
        if self._node.node_type == NodeType.TEXT:
            value = self._node.value or ""
            self.read_required()
        if self._node.node_type != NodeType.END_ELEMENT:
            raise XmlParseError(
                f"Element {element.local_name} does not contain a simple value",
                expected="text or end element",
                actual=self._node.describe(),
            )
        return value

    def read_element_value(
        self,
        namespace: Namespace = None,
        local_name: Optional[str] = None,
        converter: Optional[Callable[[str], Any]] = None,
    ) -> Any:
        """Read the text of a (possibly upcoming) element.

        Args:
            namespace: Expected namespace, or None for the current element
            local_name: Expected element name, or None for the current element
            converter: Optional conversion applied to the text

        Returns:
            Element text, converted if a converter was given
        """
        if local_name is not None:
            self.read_start_element(namespace, local_name)
        else:
            self.ensure_current_node_is_start_element()
        text = self.read_value()
        return converter(text) if converter else text

    # Internals

    def _matches(self, namespace: Namespace, local_name: Optional[str]) -> bool:
        if local_name is not None and self._node.local_name != local_name:
            return False
        uri = _namespace_uri(namespace)
        if uri is not None and self._node.namespace_uri != uri:
            return False
        return True

    def _describe_expected(self, kind: str, namespace: Namespace, local_name: Optional[str]) -> str:
        if local_name is None:
            return kind
        uri = _namespace_uri(namespace)
        return f"{kind} {XmlUtils.qualify(uri or '', local_name)}"

    def read_required(self) -> None:
        if not self.read():
            raise XmlParseError("Unexpected end of document")

    def _next_event(self) -> Optional[_Event]:
        if not self._fill():
            return None
        return self._pending.popleft()

    def _peek_event(self) -> Optional[_Event]:
        if not self._fill():
            return None
        return self._pending[0]

    def _fill(self) -> bool:
        while not self._pending:
            while not self._collector.events:
                if self._eof:
                    return False
                self._feed_next_chunk()
            event = self._collector.events.popleft()
            if self._fragments and not self._is_document_event(event):
                continue
            self._pending.append(event)
        return True

    def _is_document_event(self, event: _Event) -> bool:
        # Hides the synthetic root that wraps back to back documents
        kind = event[0]
        if kind == _START:
            self._raw_depth += 1
            return self._raw_depth > 1
        if kind == _END:
            self._raw_depth -= 1
            return self._raw_depth > 0
        return self._raw_depth > 0

    def _feed_next_chunk(self) -> None:
        chunk = next(self._chunks, b"")
        try:
            if chunk:
                if isinstance(chunk, str) and self._filter is not None:
                    chunk = chunk.encode("utf-8")
                if self._filter is not None:
                    chunk = self._filter.feed(chunk)
                if chunk:
                    self._parser.feed(chunk)
                return

            self._eof = True
            if self._filter is not None:
                remainder = self._filter.flush()
                if remainder:
                    self._parser.feed(remainder)
                self._parser.feed(f"</{FRAGMENT_ROOT}>".encode("utf-8"))
            self._parser.close()
        except (ParseError, DefusedXmlException) as e:
            self._eof = True
            raise XmlParseError(f"Malformed XML: {e}") from e

    @staticmethod
    def _chunk_iterator(source: ChunkSource) -> Iterator[Any]:
        if isinstance(source, (bytes, bytearray, str)):
            return iter([source])
        if callable(source):
            return iter(source, b"")
        return iter(source)
