"""Readers for incremental synchronization responses.

A response carries the new sync state, whether the server returned the
last change in range, and a list of changes. Creates and updates carry the
object, deletes and read-flag changes only its id.
"""

import logging
from typing import ClassVar, Dict, Optional, Type

from ews_xml import ValueConverter, XmlNamespace, XmlParseError, XmlReader
from ews_xml import constants as xml_names

from ..objects import Folder, Item, PropertySet, ServiceObject, create_object_from_element_name
from ..properties import FolderId, ItemId, ServiceId
from ..responses import ServiceResponse
from .changes import Change, ChangeCollection, ChangeType, FolderChange, ItemChange

logger = logging.getLogger(__name__)

MESSAGES = XmlNamespace.MESSAGES
TYPES = XmlNamespace.TYPES

_CHANGE_TYPES: Dict[str, ChangeType] = {change_type.value: change_type for change_type in ChangeType}


class SyncResponse(ServiceResponse):
    """Common reader for item and folder synchronization."""

    includes_last_in_range_element: ClassVar[str] = ""
    summary_properties_only: ClassVar[bool] = False
    change_class: ClassVar[Type[Change]] = Change
    object_class: ClassVar[Type[ServiceObject]] = ServiceObject
    id_class: ClassVar[Type[ServiceId]] = ServiceId

    def __init__(self, property_set: Optional[PropertySet] = None):
        super().__init__()
        self.property_set = property_set or PropertySet()
        self.changes: ChangeCollection = ChangeCollection()

    def read_elements(self, reader: XmlReader) -> None:
        self.changes.sync_state = reader.read_element_value(MESSAGES, xml_names.SYNC_STATE)
        includes_last = reader.read_element_value(
            MESSAGES, self.includes_last_in_range_element, ValueConverter.to_bool)
        self.changes.more_changes_available = not includes_last

        reader.read_start_element(MESSAGES, xml_names.CHANGES)
        if reader.is_empty_element:
            return
        while True:
            reader.read_required()
            if reader.is_start_element():
                change_type = _CHANGE_TYPES.get(reader.local_name)
                if change_type is None:
                    logger.debug(f"Skipping unknown change {reader.local_name}")
                    reader.skip_current_element()
                else:
                    self.changes.add(self._read_change(reader, change_type))
            elif reader.is_end_element(MESSAGES, xml_names.CHANGES):
                return

    def _read_change(self, reader: XmlReader, change_type: ChangeType) -> Change:
        change = self.change_class(change_type)
        if reader.is_empty_element:
            raise XmlParseError(f"{change_type.value} change has no content")
        reader.read_required()
        reader.ensure_current_node_is_start_element()

        if change_type in (ChangeType.DELETE, ChangeType.READ_FLAG_CHANGE):
            service_id = self.id_class()
            service_id.load_from(reader, TYPES, reader.local_name)
            change.service_id = service_id
            if change_type == ChangeType.READ_FLAG_CHANGE:
                self._read_is_read(reader, change)
        else:
            service_object = create_object_from_element_name(reader.local_name, self.object_class)
            service_object.load_from(reader, TYPES, reader.local_name, summary_only=self.summary_properties_only)
            change.service_object = service_object

        self._finish_change(reader, change_type.value)
        return change

    def _read_is_read(self, reader: XmlReader, change: Change) -> None:
        raise XmlParseError(f"{ChangeType.READ_FLAG_CHANGE.value} is only valid for items")

    @staticmethod
    def _finish_change(reader: XmlReader, element_name: str) -> None:
        # Whatever follows the id or object inside the change is skipped
        while not reader.is_end_element(TYPES, element_name):
            reader.read_required()
            if reader.is_start_element():
                reader.skip_current_element()


class SyncFolderItemsResponse(SyncResponse):
    """Item synchronization; objects carry summary fields only."""

    includes_last_in_range_element = xml_names.INCLUDES_LAST_ITEM_IN_RANGE
    summary_properties_only = True
    change_class = ItemChange
    object_class = Item
    id_class = ItemId

    def _read_is_read(self, reader: XmlReader, change: ItemChange) -> None:
        change.is_read = reader.read_element_value(TYPES, xml_names.IS_READ, ValueConverter.to_bool)


class SyncFolderHierarchyResponse(SyncResponse):
    """Folder synchronization."""

    includes_last_in_range_element = xml_names.INCLUDES_LAST_FOLDER_IN_RANGE
    change_class = FolderChange
    object_class = Folder
    id_class = FolderId
