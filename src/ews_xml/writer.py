"""XML writer mirroring the cursor's element vocabulary.

Documents are assembled with ElementTree; nothing here parses input, so the
standard library builder is sufficient.
"""

import xml.etree.ElementTree as ET
from typing import Any, List, Optional, Union

from .constants import NAMESPACE_PREFIXES, XmlNamespace
from .utils import ValueConverter, XmlUtils

Namespace = Union[XmlNamespace, str]

for _uri, _prefix in NAMESPACE_PREFIXES.items():
    ET.register_namespace(_prefix, _uri)


def _uri(namespace: Namespace) -> str:
    return namespace.value if isinstance(namespace, XmlNamespace) else namespace


class XmlWriter:
    """Streaming-style writer: start, attributes, children, end.

    More than one top-level element may be written; ``to_string`` then
    returns them concatenated, which is convenient for update fragments.
    """

    def __init__(self):
        self._roots: List[ET.Element] = []
        self._stack: List[ET.Element] = []

    @property
    def depth(self) -> int:
        return len(self._stack)

    def write_start_element(self, namespace: Namespace, local_name: str) -> None:
        tag = XmlUtils.qualify(_uri(namespace), local_name)
        if self._stack:
            element = ET.SubElement(self._stack[-1], tag)
        else:
            element = ET.Element(tag)
            self._roots.append(element)
        self._stack.append(element)

    def write_end_element(self) -> None:
        if not self._stack:
            raise ValueError("write_end_element called without an open element")
        self._stack.pop()

    def write_attribute_value(self, name: str, value: Any, namespace: Optional[Namespace] = None) -> None:
        """Set an attribute on the open element; None values are skipped."""
        if value is None:
            return
        if not self._stack:
            raise ValueError("Attributes can only be written inside an element")
        key = XmlUtils.qualify(_uri(namespace), name) if namespace else name
        self._stack[-1].set(key, ValueConverter.format_value(value))

    def write_value(self, value: Any, name: str = "") -> None:
        """Write text content into the open element.

        Args:
            value: Value to render; None writes nothing
            name: Name of the property being written, used in error messages
        """
        if value is None:
            return
        if not self._stack:
            raise ValueError(f"Value for {name or 'element'} written outside of an element")
        element = self._stack[-1]
        text = ValueConverter.format_value(value)
        if len(element):
            last = element[-1]
            last.tail = (last.tail or "") + text
        else:
            element.text = (element.text or "") + text

    def write_element_value(self, namespace: Namespace, local_name: str, value: Any) -> None:
        """Write ``<local_name>value</local_name>``; None values are skipped."""
        if value is None:
            return
        self.write_start_element(namespace, local_name)
        self.write_value(value, local_name)
        self.write_end_element()

    def write_element(self, namespace: Namespace, local_name: str, text: Optional[str] = None) -> None:
        """Write a complete element, empty unless ``text`` is given."""
        self.write_start_element(namespace, local_name)
        self.write_value(text, local_name)
        self.write_end_element()

    def to_string(self) -> str:
        if self._stack:
            raise ValueError(f"{len(self._stack)} element(s) still open")
        return "".join(ET.tostring(root, encoding="unicode") for root in self._roots)

    def to_bytes(self, xml_declaration: bool = True) -> bytes:
        """Serialize as UTF-8, with a declaration by default."""
        body = self.to_string().encode("utf-8")
        if xml_declaration:
            return b'<?xml version="1.0" encoding="utf-8"?>' + body
        return body
