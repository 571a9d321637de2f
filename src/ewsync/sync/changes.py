"""Changes reported by incremental synchronization."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, Iterator, List, Optional, TypeVar

from ..objects import Folder, Item, ServiceObject
from ..properties import FolderId, ItemId, ServiceId


class ChangeType(str, Enum):
    CREATE = "Create"
    UPDATE = "Update"
    DELETE = "Delete"
    READ_FLAG_CHANGE = "ReadFlagChange"


@dataclass
class Change:
    """One change: a full object for creates and updates, else an id only."""
    change_type: ChangeType
    service_object: Optional[ServiceObject] = None
    service_id: Optional[ServiceId] = None

    @property
    def id(self) -> Optional[ServiceId]:
        if self.service_object is not None:
            return self.service_object.id
        return self.service_id


@dataclass
class ItemChange(Change):
    is_read: Optional[bool] = None

    @property
    def item(self) -> Optional[Item]:
        return self.service_object

    @property
    def item_id(self) -> Optional[ItemId]:
        return self.id


@dataclass
class FolderChange(Change):

    @property
    def folder(self) -> Optional[Folder]:
        return self.service_object

    @property
    def folder_id(self) -> Optional[FolderId]:
        return self.id


TChange = TypeVar("TChange", bound=Change)


@dataclass
class ChangeCollection(Generic[TChange]):
    """Changes of one synchronization call, in server order.

    ``sync_state`` is the opaque token to send with the next call and
    ``more_changes_available`` says whether that call is needed now.
    """
    changes: List[TChange] = field(default_factory=list)
    sync_state: Optional[str] = None
    more_changes_available: bool = False

    def add(self, change: TChange) -> None:
        self.changes.append(change)

    def __iter__(self) -> Iterator[TChange]:
        return iter(self.changes)

    def __len__(self) -> int:
        return len(self.changes)

    def __getitem__(self, index: int) -> TChange:
        return self.changes[index]
