"""Base class for structured values that load from and write to XML.

Every concrete node declares its fields with :class:`~.fields.Field`. The
declarations form a name-to-handler table, so reading an element is a table
lookup rather than a chain of name comparisons, and writing follows the
declaration order.
"""

import logging
from typing import Any, Callable, ClassVar, Dict, List, Optional, Tuple, Union

from ews_xml import NodeType, XmlNamespace, XmlReader, XmlWriter

from .definitions import register_property_definition
from .fields import Field, FieldKind, FieldSpec

logger = logging.getLogger(__name__)

ChangeObserver = Callable[["PropertyNode"], None]


class PropertyNode:
    """Structured value with change tracking.

    Assignments through a field accessor (or :meth:`set_field`) compare the
    new value with the current one and notify observers once when it
    differs. Nested nodes forward their own changes to the node holding them.
    Loading from XML never notifies.
    """

    namespace: ClassVar[XmlNamespace] = XmlNamespace.TYPES
    element_name: ClassVar[str] = ""

    _field_specs: ClassVar[Dict[str, FieldSpec]] = {}
    _element_specs: ClassVar[Dict[str, FieldSpec]] = {}
    _attribute_specs: ClassVar[Tuple[FieldSpec, ...]] = ()
    _text_spec: ClassVar[Optional[FieldSpec]] = None

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        specs: Dict[str, FieldSpec] = {}
        for klass in reversed(cls.__mro__):
            for value in vars(klass).values():
                if isinstance(value, Field):
                    specs[value.spec.name] = value.spec
        for spec in specs.values():
            if spec.field_uri:
                register_property_definition(spec.field_uri, spec.name)
        cls._field_specs = specs
        cls._element_specs = {
            spec.element: spec for spec in specs.values()
            if not spec.attribute and not spec.text_content
        }
        cls._attribute_specs = tuple(spec for spec in specs.values() if spec.attribute)
        text_specs = [spec for spec in specs.values() if spec.text_content]
        cls._text_spec = text_specs[-1] if text_specs else None

    def __init__(self, **values):
        self._observers: List[ChangeObserver] = []
        self._values: Dict[str, Any] = {}
        self._dirty = False
        self._summary_only = False
        for spec in self._field_specs.values():
            self._store(spec.name, spec.default())
        for name, value in values.items():
            if name not in self._field_specs:
                raise TypeError(f"{type(self).__name__} has no field {name!r}")
            self._store(name, value)

    # Field access

    @classmethod
    def field_spec(cls, name: str) -> FieldSpec:
        try:
            return cls._field_specs[name]
        except KeyError:
            raise KeyError(f"{cls.__name__} has no field {name!r}") from None

    def get_field(self, name: str) -> Any:
        return self._values.get(name)

    def set_field(self, field: Union[str, FieldSpec], value: Any) -> bool:
        """Assign a field, notifying observers if the value changed.

        Returns:
            True if the assignment was a change
        """
        name = field.name if isinstance(field, FieldSpec) else field
        self.field_spec(name)
        current = self._values.get(name)
        if not self._is_change(current, value):
            return False
        if isinstance(current, PropertyNode):
            current.remove_observer(self._child_changed)
        self._store(name, value)
        self._field_changed(name)
        return True

    @staticmethod
    def _is_change(current: Any, value: Any) -> bool:
        if current is None:
            return value is not None
        if current is value:
            return False
        if type(current).__eq__ is object.__eq__:
            # No value semantics, so any new object counts as a change
            return True
        return current != value

    def _store(self, name: str, value: Any) -> None:
        self._values[name] = value
        if isinstance(value, PropertyNode):
            value.add_observer(self._child_changed)

    # Change notification

    @property
    def is_dirty(self) -> bool:
        return self._dirty

    def add_observer(self, observer: ChangeObserver) -> None:
        self._observers.append(observer)

    def remove_observer(self, observer: ChangeObserver) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    def changed(self) -> None:
        """Mark this node dirty and notify every observer once."""
        self._dirty = True
        for observer in list(self._observers):
            observer(self)

    def _field_changed(self, name: str) -> None:
        self.changed()

    def _child_changed(self, child: "PropertyNode") -> None:
        self.changed()

    def clear_change_log(self) -> None:
        """Forget pending changes here and in every nested node."""
        self._dirty = False
        for value in self._values.values():
            for node in self._nested_nodes(value):
                node.clear_change_log()

    @staticmethod
    def _nested_nodes(value: Any) -> List["PropertyNode"]:
        if isinstance(value, PropertyNode):
            return [value]
        if isinstance(value, list):
            return [item for item in value if isinstance(item, PropertyNode)]
        return []

    # Reading

    def load_from(self, reader: XmlReader, namespace: Optional[XmlNamespace] = None,
                  element_name: Optional[str] = None) -> None:
        """Populate this node from the element at (or after) the cursor.

        The cursor ends on the element's end node. Child elements that no
        field claims are skipped with their whole subtree.
        """
        self._load(reader, namespace, element_name, self.try_read_element)

    def patch_from(self, reader: XmlReader, namespace: Optional[XmlNamespace] = None,
                   element_name: Optional[str] = None) -> None:
        """Merge a partial representation into this node.

        Nested nodes that already exist are patched in place instead of
        being replaced.
        """
        self._load(reader, namespace, element_name, self.try_read_element_for_patch)

    def _load(self, reader: XmlReader, namespace: Optional[XmlNamespace], element_name: Optional[str],
              read_element: Callable[[XmlReader], bool]) -> None:
        namespace = namespace or self.namespace
        element_name = element_name or self.element_name
        reader.read_start_element(namespace, element_name)
        depth = reader.depth
        self.read_attributes(reader)
        if not reader.is_empty_element:
            while True:
                reader.read_required()
                if reader.is_start_element():
                    if not read_element(reader):
                        logger.debug(f"Skipping {reader.local_name} in {element_name}")
                        reader.skip_current_element()
                elif reader.node_type == NodeType.TEXT:
                    self.read_text_value(reader)
                elif reader.depth == depth and reader.is_end_element(namespace, element_name):
                    break
        self.loaded()

    def read_attributes(self, reader: XmlReader) -> None:
        for spec in self._attribute_specs:
            value = reader.read_attribute_value(spec.element)
            if value is not None:
                self._store(spec.name, spec.convert(value))

    def read_text_value(self, reader: XmlReader) -> None:
        if self._text_spec is not None:
            self._store(self._text_spec.name, self._text_spec.convert(reader.value))

    def try_read_element(self, reader: XmlReader) -> bool:
        """Read the child element under the cursor if a field claims it.

        Returns:
            False if the element is not recognised and must be skipped
        """
        spec = self._element_specs.get(reader.local_name)
        if spec is None:
            return False
        if self._summary_only and not spec.summary:
            return False
        self._store(spec.name, self._read_field(reader, spec))
        return True

    def try_read_element_for_patch(self, reader: XmlReader) -> bool:
        spec = self._element_specs.get(reader.local_name)
        if spec is None or not spec.patchable:
            return False
        current = self._values.get(spec.name)
        if spec.kind == FieldKind.NODE and isinstance(current, PropertyNode):
            current.patch_from(reader, spec.namespace, spec.element)
            return True
        self._store(spec.name, self._read_field(reader, spec))
        return True

    def _read_field(self, reader: XmlReader, spec: FieldSpec) -> Any:
        if spec.is_scalar:
            return reader.read_element_value(converter=spec.convert)
        if spec.kind == FieldKind.NODE:
            node = spec.factory()
            node.load_from(reader, spec.namespace, spec.element)
            return node
        items = []
        if not reader.is_empty_element:
            while True:
                reader.read()
                if reader.is_start_element(spec.namespace, spec.item_element):
                    item = spec.factory()
                    item.load_from(reader, spec.namespace, spec.item_element)
                    items.append(item)
                elif reader.is_start_element():
                    reader.skip_current_element()
                if reader.is_end_element(spec.namespace, spec.element):
                    break
        return items

    def loaded(self) -> None:
        """Called after the node's element has been consumed."""

    # Writing

    def write_to(self, writer: XmlWriter, namespace: Optional[XmlNamespace] = None,
                 element_name: Optional[str] = None) -> None:
        writer.write_start_element(namespace or self.namespace, element_name or self.element_name)
        self.write_attributes(writer)
        self.write_elements(writer)
        writer.write_end_element()

    def write_attributes(self, writer: XmlWriter) -> None:
        for spec in self._attribute_specs:
            writer.write_attribute_value(spec.element, self._values.get(spec.name))

    def write_elements(self, writer: XmlWriter) -> None:
        if self._text_spec is not None:
            writer.write_value(self._values.get(self._text_spec.name), self._text_spec.name)
        for spec in self._element_specs.values():
            self.write_field(writer, spec, self._values.get(spec.name))

    def write_field(self, writer: XmlWriter, spec: FieldSpec, value: Any) -> None:
        """Write one element field; None and empty values are omitted."""
        if value is None:
            return
        if spec.is_scalar:
            writer.write_element_value(spec.namespace, spec.element, value)
        elif spec.kind == FieldKind.NODE:
            if value.has_content():
                value.write_to(writer, spec.namespace, spec.element)
        elif value:
            writer.write_start_element(spec.namespace, spec.element)
            for item in value:
                item.write_to(writer, spec.namespace, spec.item_element)
            writer.write_end_element()

    def has_content(self) -> bool:
        """Whether the node is worth writing when nested in another."""
        return True

    def to_dict(self) -> Dict[str, Any]:
        """Plain representation of the field values, nested nodes included."""
        result = {}
        for name, value in self._values.items():
            if isinstance(value, PropertyNode):
                value = value.to_dict()
            elif isinstance(value, list):
                value = [item.to_dict() if isinstance(item, PropertyNode) else item for item in value]
            result[name] = value
        return result

    def __repr__(self) -> str:
        populated = ", ".join(f"{name}={value!r}" for name, value in self._values.items() if value is not None)
        return f"{type(self).__name__}({populated})"
