"""Incremental synchronization of folder contents and hierarchies."""

from .changes import Change, ChangeCollection, ChangeType, FolderChange, ItemChange
from .responses import SyncFolderHierarchyResponse, SyncFolderItemsResponse, SyncResponse

__all__ = [
    'ChangeType',
    'Change',
    'ItemChange',
    'FolderChange',
    'ChangeCollection',
    'SyncResponse',
    'SyncFolderItemsResponse',
    'SyncFolderHierarchyResponse',
]
