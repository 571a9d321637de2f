"""Name resolution responses."""

from typing import List, Optional

from ews_xml import ValueConverter, XmlNamespace, XmlReader
from ews_xml import constants as xml_names

from ..objects import Contact
from ..properties import Field, FieldKind, Mailbox, PropertyNode
from .codes import ServiceError
from .envelope import ServiceResponse

MESSAGES = XmlNamespace.MESSAGES
TYPES = XmlNamespace.TYPES


class NameResolution(PropertyNode):
    """One candidate for an ambiguous name."""

    element_name = xml_names.RESOLUTION

    mailbox = Field(xml_names.MAILBOX, FieldKind.NODE, factory=Mailbox)
    contact = Field("Contact", FieldKind.NODE, factory=Contact)


class ResolveNamesResponse(ServiceResponse):
    """Candidates for a name; finding none is a valid, empty answer."""

    suppressed_error_codes = frozenset({ServiceError.ERROR_NAME_RESOLUTION_NO_RESULTS.value})

    def __init__(self):
        super().__init__()
        self.resolutions: List[NameResolution] = []
        self.total_count: Optional[int] = None
        self.includes_last_item_in_range = True

    def read_elements(self, reader: XmlReader) -> None:
        reader.read_start_element(MESSAGES, xml_names.RESOLUTION_SET)
        self.total_count = reader.read_attribute_value(xml_names.TOTAL_ITEMS_IN_VIEW, ValueConverter.to_int)
        includes_last = reader.read_attribute_value(xml_names.INCLUDES_LAST_ITEM_IN_RANGE_ATTR, ValueConverter.to_bool)
        if includes_last is not None:
            self.includes_last_item_in_range = includes_last
        if reader.is_empty_element:
            return
        while True:
            reader.read_required()
            if reader.is_start_element(TYPES, xml_names.RESOLUTION):
                resolution = NameResolution()
                resolution.load_from(reader)
                self.resolutions.append(resolution)
            elif reader.is_start_element():
                reader.skip_current_element()
            elif reader.is_end_element(MESSAGES, xml_names.RESOLUTION_SET):
                return

    def __len__(self) -> int:
        return len(self.resolutions)

    def __iter__(self):
        return iter(self.resolutions)
