"""Service objects: items and folders with per-field update tracking."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional, Tuple, Type

from ews_xml import XmlNamespace, XmlReader, XmlWriter
from ews_xml import constants as xml_names

from ..errors import ServiceValidationError
from ..properties import DictionaryField, PropertyNode, ServiceId, find_property_definition

logger = logging.getLogger(__name__)

TYPES = XmlNamespace.TYPES


class BaseShape(str, Enum):
    """Server-side projection applied before additional properties."""
    ID_ONLY = "IdOnly"
    DEFAULT = "Default"
    ALL_PROPERTIES = "AllProperties"


@dataclass(frozen=True)
class PropertySet:
    """Projection requested for returned objects.

    Attributes:
        base_shape: Server-defined base projection
        additional_properties: Field URIs requested on top of the base shape
    """
    base_shape: BaseShape = BaseShape.ALL_PROPERTIES
    additional_properties: Tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def id_only(cls) -> "PropertySet":
        return cls(BaseShape.ID_ONLY)

    def write_to(self, writer: XmlWriter, element_name: str) -> None:
        writer.write_start_element(XmlNamespace.MESSAGES, element_name)
        writer.write_element_value(TYPES, xml_names.BASE_SHAPE, self.base_shape)
        if self.additional_properties:
            writer.write_start_element(TYPES, xml_names.ADDITIONAL_PROPERTIES)
            for field_uri in self.additional_properties:
                find_property_definition(field_uri).write_to(writer)
            writer.write_end_element()
        writer.write_end_element()


class ServiceObject(PropertyNode):
    """Item or folder as exchanged with the server.

    Besides the node-level dirty flag, a service object remembers which of
    its fields changed so that an update carries only those fields.
    """

    set_field_element_name: ClassVar[str] = xml_names.SET_ITEM_FIELD
    delete_field_element_name: ClassVar[str] = xml_names.DELETE_ITEM_FIELD
    id_field: ClassVar[str] = ""

    _registry: ClassVar[Dict[str, Type["ServiceObject"]]] = {}

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        element_name = cls.__dict__.get("element_name")
        if element_name:
            ServiceObject._registry[element_name] = cls

    def __init__(self, **values):
        self._changed_fields: Dict[str, None] = {}
        super().__init__(**values)

    @property
    def id(self) -> Optional[ServiceId]:
        return self.get_field(self.id_field) if self.id_field else None

    @property
    def changed_fields(self) -> List[str]:
        return list(self._changed_fields)

    @property
    def is_dirty(self) -> bool:
        return bool(self._changed_fields)

    def _field_changed(self, name: str) -> None:
        self._changed_fields[name] = None
        super()._field_changed(name)

    def _child_changed(self, child: PropertyNode) -> None:
        for name, value in self._values.items():
            if value is child:
                self._changed_fields[name] = None
        super()._child_changed(child)

    def clear_change_log(self) -> None:
        self._changed_fields.clear()
        super().clear_change_log()

    def load_from(self, reader: XmlReader, namespace: Optional[XmlNamespace] = None,
                  element_name: Optional[str] = None, summary_only: bool = False) -> None:
        """Load the object, optionally restricted to summary fields.

        Summary-only loading is what incremental item synchronization
        returns; fields outside the summary projection are skipped.
        """
        self._summary_only = summary_only
        try:
            super().load_from(reader, namespace, element_name)
        finally:
            self._summary_only = False

    def write_update(self, writer: XmlWriter) -> int:
        """Write one set or delete fragment per changed field.

        Dictionary fields contribute one fragment per touched key.

        Returns:
            Number of fragments written
        """
        count = 0
        for name in self._changed_fields:
            spec = self.field_spec(name)
            value = self._values.get(name)
            if isinstance(value, DictionaryField):
                count += value.serialize_update(writer, self, spec.element)
                continue
            if not spec.field_uri or spec.read_only:
                raise ServiceValidationError(f"{type(self).__name__}.{name} cannot be updated")
            definition = find_property_definition(spec.field_uri)
            if value is None:
                writer.write_start_element(TYPES, self.delete_field_element_name)
                definition.write_to(writer)
                writer.write_end_element()
            else:
                writer.write_start_element(TYPES, self.set_field_element_name)
                definition.write_to(writer)
                writer.write_start_element(TYPES, self.element_name)
                self.write_field(writer, spec, value)
                writer.write_end_element()
                writer.write_end_element()
            count += 1
        return count


def create_object_from_element_name(element_name: str, base: Type[ServiceObject]) -> ServiceObject:
    """Instantiate the registered class for an element name.

    Names with no registered subclass of ``base`` fall back to ``base``
    itself, so new server-side object types still load their common fields.
    """
    cls = ServiceObject._registry.get(element_name)
    if cls is None or not issubclass(cls, base):
        logger.debug(f"No {base.__name__} type registered for {element_name}, using {base.__name__}")
        cls = base
    return cls()
