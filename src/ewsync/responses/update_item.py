"""Update responses that echo the new version of the item."""

from ews_xml import XmlNamespace, XmlReader
from ews_xml import constants as xml_names

from ..objects import ServiceObject
from .envelope import ServiceResponse

MESSAGES = XmlNamespace.MESSAGES
TYPES = XmlNamespace.TYPES


class UpdateItemResponse(ServiceResponse):
    """Merges the server's copy of the updated item into the local one.

    The server returns the item id with its new change key, which is patched
    into the existing object so further updates are not rejected as stale.
    """

    def __init__(self, item: ServiceObject):
        super().__init__()
        self.item = item

    def read_elements(self, reader: XmlReader) -> None:
        if not reader.next_is_start_element(MESSAGES, xml_names.ITEMS):
            return
        reader.read_start_element(MESSAGES, xml_names.ITEMS)
        if reader.is_empty_element:
            return
        while True:
            reader.read_required()
            if reader.is_start_element(TYPES):
                self.item.patch_from(reader, TYPES, reader.local_name)
            elif reader.is_start_element():
                reader.skip_current_element()
            elif reader.is_end_element(MESSAGES, xml_names.ITEMS):
                return
