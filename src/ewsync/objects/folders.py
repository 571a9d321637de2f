"""Folder types."""

from ews_xml import constants as xml_names

from ..properties import Field, FieldKind, FolderId
from .base import ServiceObject


class Folder(ServiceObject):
    """Generic folder; also used for folder types without a dedicated class."""

    element_name = "Folder"
    id_field = "folder_id"
    set_field_element_name = xml_names.SET_FOLDER_FIELD
    delete_field_element_name = xml_names.DELETE_FOLDER_FIELD

    folder_id = Field(xml_names.FOLDER_ID, FieldKind.NODE, factory=FolderId, field_uri="folder:FolderId",
                      summary=True, read_only=True)
    parent_folder_id = Field(xml_names.PARENT_FOLDER_ID, FieldKind.NODE, factory=FolderId,
                             field_uri="folder:ParentFolderId", summary=True, read_only=True)
    folder_class = Field("FolderClass", field_uri="folder:FolderClass", summary=True)
    display_name = Field("DisplayName", field_uri="folder:DisplayName", summary=True)
    total_count = Field("TotalCount", FieldKind.INT, field_uri="folder:TotalCount", summary=True, read_only=True)
    child_folder_count = Field("ChildFolderCount", FieldKind.INT, field_uri="folder:ChildFolderCount",
                               summary=True, read_only=True)
    unread_count = Field("UnreadCount", FieldKind.INT, field_uri="folder:UnreadCount", summary=True,
                         read_only=True)


class CalendarFolder(Folder):
    element_name = "CalendarFolder"


class ContactsFolder(Folder):
    element_name = "ContactsFolder"


class SearchFolder(Folder):
    element_name = "SearchFolder"


class TasksFolder(Folder):
    element_name = "TasksFolder"
