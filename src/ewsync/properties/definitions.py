"""Field identities used in update fragments and error reports.

Every field declared with a ``field_uri`` is registered here when its class
is defined, so a field URI reported by the server can be mapped back to the
Python attribute that holds it.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional

from ews_xml import ValueConverter, XmlNamespace, XmlReader, XmlWriter
from ews_xml import constants as xml_names

TYPES = XmlNamespace.TYPES


@dataclass(frozen=True)
class PropertyDefinition:
    """A field addressed by its URI, such as ``item:Subject``."""
    field_uri: str
    name: Optional[str] = field(default=None, compare=False)

    def write_to(self, writer: XmlWriter) -> None:
        writer.write_start_element(TYPES, xml_names.FIELD_URI)
        writer.write_attribute_value(xml_names.FIELD_URI, self.field_uri)
        writer.write_end_element()


@dataclass(frozen=True)
class IndexedPropertyDefinition(PropertyDefinition):
    """One keyed entry of a dictionary field, such as one phone number."""
    field_index: str = ""

    def write_to(self, writer: XmlWriter) -> None:
        writer.write_start_element(TYPES, xml_names.INDEXED_FIELD_URI)
        writer.write_attribute_value(xml_names.FIELD_URI, self.field_uri)
        writer.write_attribute_value(xml_names.FIELD_INDEX, self.field_index)
        writer.write_end_element()


@dataclass(frozen=True)
class ExtendedPropertyDefinition:
    """MAPI property addressed by tag or by property set and name/id."""
    distinguished_property_set_id: Optional[str] = None
    property_set_id: Optional[str] = None
    property_tag: Optional[int] = None
    property_name: Optional[str] = None
    property_id: Optional[int] = None
    property_type: Optional[str] = None

    _ATTRIBUTES = (
        ("distinguished_property_set_id", "DistinguishedPropertySetId"),
        ("property_set_id", "PropertySetId"),
        ("property_tag", "PropertyTag"),
        ("property_name", "PropertyName"),
        ("property_id", "PropertyId"),
        ("property_type", "PropertyType"),
    )

    @classmethod
    def load_from(cls, reader: XmlReader) -> "ExtendedPropertyDefinition":
        tag = reader.read_attribute_value("PropertyTag")
        return cls(
            distinguished_property_set_id=reader.read_attribute_value("DistinguishedPropertySetId"),
            property_set_id=reader.read_attribute_value("PropertySetId"),
            property_tag=int(tag, 0) if tag else None,
            property_name=reader.read_attribute_value("PropertyName"),
            property_id=reader.read_attribute_value("PropertyId", ValueConverter.to_int),
            property_type=reader.read_attribute_value("PropertyType"),
        )

    def write_to(self, writer: XmlWriter) -> None:
        writer.write_start_element(TYPES, xml_names.EXTENDED_FIELD_URI)
        for attribute, wire_name in self._ATTRIBUTES:
            value = getattr(self, attribute)
            if attribute == "property_tag" and value is not None:
                value = f"0x{value:04x}"
            writer.write_attribute_value(wire_name, value)
        writer.write_end_element()


_REGISTRY: Dict[str, PropertyDefinition] = {}


def register_property_definition(field_uri: str, name: Optional[str] = None) -> PropertyDefinition:
    definition = _REGISTRY.get(field_uri)
    if definition is None:
        definition = PropertyDefinition(field_uri, name)
        _REGISTRY[field_uri] = definition
    return definition


def find_property_definition(field_uri: str) -> PropertyDefinition:
    """Definition registered for a URI, or an unnamed one for unknown URIs."""
    return _REGISTRY.get(field_uri) or PropertyDefinition(field_uri)
