"""Per-field configuration records and the typed accessor built on them."""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Callable, Optional

from ews_xml import ValueConverter, XmlNamespace


class FieldKind(str, Enum):
    """Wire representation of a field."""
    TEXT = "text"
    INT = "int"
    BOOL = "bool"
    DATETIME = "datetime"
    NODE = "node"
    NODE_LIST = "node_list"


_CONVERTERS = {
    FieldKind.TEXT: ValueConverter.to_str,
    FieldKind.INT: ValueConverter.to_int,
    FieldKind.BOOL: ValueConverter.to_bool,
    FieldKind.DATETIME: ValueConverter.to_datetime,
}


@dataclass(frozen=True)
class FieldSpec:
    """Configuration of one field of a property node.

    ``element`` is the wire name: an element name, or an attribute name when
    ``attribute`` is set. A ``text_content`` field holds the element's own
    text instead of a child element.
    """
    element: str
    kind: FieldKind = FieldKind.TEXT
    name: str = ""
    namespace: XmlNamespace = XmlNamespace.TYPES
    field_uri: Optional[str] = None
    factory: Optional[Callable[[], Any]] = None
    item_element: Optional[str] = None
    attribute: bool = False
    text_content: bool = False
    summary: bool = False
    patchable: bool = True
    read_only: bool = False
    create_default: bool = False

    @property
    def is_scalar(self) -> bool:
        return self.kind not in (FieldKind.NODE, FieldKind.NODE_LIST)

    def convert(self, text: Optional[str]) -> Any:
        """Convert wire text for scalar fields."""
        return _CONVERTERS[self.kind](text)

    def default(self) -> Any:
        if self.kind == FieldKind.NODE_LIST:
            return []
        if self.kind == FieldKind.NODE and self.create_default and self.factory is not None:
            return self.factory()
        return None


class Field:
    """Typed accessor for one field of a property node.

    Reads come from the node's value table; writes go through the node's
    ``set_field`` so change tracking applies to every assignment.
    """

    def __init__(self, element: str, kind: FieldKind = FieldKind.TEXT, **options):
        self.spec = FieldSpec(element=element, kind=kind, **options)

    def __set_name__(self, owner, name):
        self.spec = replace(self.spec, name=name)

    def __get__(self, instance, owner=None):
        if instance is None:
            return self
        return instance.get_field(self.spec.name)

    def __set__(self, instance, value):
        if self.spec.read_only:
            raise AttributeError(f"{type(instance).__name__}.{self.spec.name} is read-only")
        instance.set_field(self.spec.name, value)

    def __repr__(self) -> str:
        return f"Field({self.spec.name!r}, element={self.spec.element!r}, kind={self.spec.kind.value})"
