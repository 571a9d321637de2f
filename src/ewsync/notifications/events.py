"""Notification events delivered by subscriptions."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable, Dict, List, Optional

from ews_xml import ValueConverter, XmlNamespace, XmlReader
from ews_xml import constants as xml_names

from ..properties import FolderId, ItemId

TYPES = XmlNamespace.TYPES


class EventType(str, Enum):
    COPIED = "Copied"
    CREATED = "Created"
    DELETED = "Deleted"
    MODIFIED = "Modified"
    MOVED = "Moved"
    NEW_MAIL = "NewMail"
    STATUS = "Status"
    FREE_BUSY_CHANGED = "FreeBusyChanged"


EVENT_ELEMENTS: Dict[str, EventType] = {
    xml_names.COPIED_EVENT: EventType.COPIED,
    xml_names.CREATED_EVENT: EventType.CREATED,
    xml_names.DELETED_EVENT: EventType.DELETED,
    xml_names.MODIFIED_EVENT: EventType.MODIFIED,
    xml_names.MOVED_EVENT: EventType.MOVED,
    xml_names.NEW_MAIL_EVENT: EventType.NEW_MAIL,
    xml_names.STATUS_EVENT: EventType.STATUS,
    xml_names.FREE_BUSY_CHANGED_EVENT: EventType.FREE_BUSY_CHANGED,
}


@dataclass
class NotificationEvent:
    event_type: EventType
    timestamp: Optional[datetime] = None
    parent_folder_id: Optional[FolderId] = None
    old_parent_folder_id: Optional[FolderId] = None
    watermark: Optional[str] = None


@dataclass
class FolderEvent(NotificationEvent):
    """Event about a folder; moves and copies also carry the old id."""
    folder_id: Optional[FolderId] = None
    old_folder_id: Optional[FolderId] = None
    unread_count: Optional[int] = None


@dataclass
class ItemEvent(NotificationEvent):
    """Event about an item; moves and copies also carry the old id."""
    item_id: Optional[ItemId] = None
    old_item_id: Optional[ItemId] = None


@dataclass
class NotificationGroup:
    """Events of one subscription delivered together."""
    subscription_id: Optional[str] = None
    events: List[NotificationEvent] = field(default_factory=list)


def _read_folder_id(reader: XmlReader) -> FolderId:
    folder_id = FolderId()
    folder_id.load_from(reader, TYPES, reader.local_name)
    return folder_id


def _read_item_id(reader: XmlReader) -> ItemId:
    item_id = ItemId()
    item_id.load_from(reader, TYPES, reader.local_name)
    return item_id


# Child element -> (event attribute, reader)
_EVENT_FIELDS: Dict[str, tuple] = {
    xml_names.TIME_STAMP: ("timestamp", lambda reader: reader.read_element_value(converter=ValueConverter.to_datetime)),
    xml_names.WATERMARK: ("watermark", lambda reader: reader.read_element_value()),
    xml_names.ITEM_ID: ("item_id", _read_item_id),
    xml_names.OLD_ITEM_ID: ("old_item_id", _read_item_id),
    xml_names.FOLDER_ID: ("folder_id", _read_folder_id),
    xml_names.OLD_FOLDER_ID: ("old_folder_id", _read_folder_id),
    xml_names.PARENT_FOLDER_ID: ("parent_folder_id", _read_folder_id),
    xml_names.OLD_PARENT_FOLDER_ID: ("old_parent_folder_id", _read_folder_id),
    xml_names.UNREAD_COUNT: ("unread_count", lambda reader: reader.read_element_value(converter=ValueConverter.to_int)),
}

_FOLDER_ONLY = {"folder_id", "old_folder_id", "unread_count"}
_ITEM_ONLY = {"item_id", "old_item_id"}


def read_notification_event(reader: XmlReader, event_type: EventType) -> NotificationEvent:
    """Read the event element under the cursor.

    Whether the event concerns a folder or an item is decided by which id
    it carries. The cursor ends on the event's end node.
    """
    element_name = reader.local_name
    values: Dict[str, object] = {}
    if not reader.is_empty_element:
        while True:
            reader.read_required()
            if reader.is_start_element():
                handler = _EVENT_FIELDS.get(reader.local_name)
                if handler is None:
                    reader.skip_current_element()
                else:
                    attribute, read = handler
                    values[attribute] = read(reader)
            elif reader.is_end_element(TYPES, element_name):
                break

    if values.keys() & _FOLDER_ONLY:
        return FolderEvent(event_type, **{k: v for k, v in values.items() if k not in _ITEM_ONLY})
    return ItemEvent(event_type, **{k: v for k, v in values.items() if k not in _FOLDER_ONLY})


EventHandler = Callable[[NotificationEvent], None]
