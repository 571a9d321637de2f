"""Server-assigned identifiers."""

from typing import Optional

from ews_xml import constants as xml_names

from .fields import Field
from .node import PropertyNode


class ServiceId(PropertyNode):
    """Opaque identifier plus the change key that versions it."""

    unique_id = Field(xml_names.ID, attribute=True)
    change_key = Field(xml_names.CHANGE_KEY, attribute=True)

    def __init__(self, unique_id: Optional[str] = None, change_key: Optional[str] = None):
        super().__init__(unique_id=unique_id, change_key=change_key)

    @property
    def is_valid(self) -> bool:
        return bool(self.unique_id)

    def same_id_and_change_key(self, other: "ServiceId") -> bool:
        return self.unique_id == other.unique_id and self.change_key == other.change_key

    def __str__(self) -> str:
        return self.unique_id or ""


class ItemId(ServiceId):
    element_name = xml_names.ITEM_ID


class FolderId(ServiceId):
    element_name = xml_names.FOLDER_ID


class DistinguishedFolderId(ServiceId):
    """Well-known folder such as ``inbox`` or ``contacts``."""

    element_name = xml_names.DISTINGUISHED_FOLDER_ID
