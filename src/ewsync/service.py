"""Service facade: one method per supported operation."""

import logging
from typing import Callable, Iterable, Optional, TypeVar

from ews_xml import XmlReader

from . import builders
from .config import EwsyncConfig, create_default_config
from .errors import ServiceValidationError
from .notifications import (
    DisconnectEvent,
    StreamingConnection,
    StreamingSubscriptionConnection,
    read_streaming_unit,
)
from .objects import PropertySet, ServiceObject
from .properties import DistinguishedFolderId, FolderId, ServiceId
from .responses import (
    ResolveNamesResponse,
    ServiceErrorHandling,
    ServiceResponse,
    ServiceResponseCollection,
    UpdateItemResponse,
    read_response_collection,
    read_soap_response,
)
from .sync import ChangeCollection, SyncFolderHierarchyResponse, SyncFolderItemsResponse
from .tracing import TraceFlags, TraceSink
from .transport import RequestsTransport, Transport

logger = logging.getLogger(__name__)

TResponse = TypeVar("TResponse", bound=ServiceResponse)


class ExchangeService:
    """Entry point for synchronization, updates and notifications.

    Args:
        config: Configuration; defaults are used if omitted
        transport: Transport to send requests with; built from the service
            configuration if omitted
        trace_sink: Wire trace destination; built from the logging
            configuration if omitted
    """

    def __init__(self, config: Optional[EwsyncConfig] = None, transport: Optional[Transport] = None,
                 trace_sink: Optional[TraceSink] = None):
        self.config = config or create_default_config()
        self.transport = transport or RequestsTransport.from_config(self.config.service)
        self.trace_sink = trace_sink or TraceSink.from_config(self.config.logging)
        if self.config.streaming.trace_wire_bytes:
            self.trace_sink.flags |= TraceFlags.EWS_RESPONSE

    @property
    def version(self):
        return self.config.service.version

    def execute(
        self,
        body: bytes,
        response_element: str,
        message_element: str,
        factory: Callable[[int], TResponse],
        error_handling: ServiceErrorHandling = ServiceErrorHandling.THROW_ON_ERROR,
    ) -> ServiceResponseCollection[TResponse]:
        """Send a request and read its response messages."""
        self.trace_sink.trace(TraceFlags.EWS_REQUEST, body)
        content = self.transport.post(body)
        self.trace_sink.trace(TraceFlags.EWS_RESPONSE, content)
        reader = XmlReader(content)
        responses = read_soap_response(
            reader, lambda body_reader: read_response_collection(body_reader, response_element, message_element, factory))
        if error_handling == ServiceErrorHandling.THROW_ON_ERROR:
            responses.throw_if_error()
        return responses

    # Synchronization

    def sync_folder_items(
        self,
        folder_id: ServiceId,
        property_set: Optional[PropertySet] = None,
        sync_state: Optional[str] = None,
        max_changes: Optional[int] = None,
        ignored_item_ids: Iterable[ServiceId] = (),
    ) -> ChangeCollection:
        """Changes to the items of a folder since ``sync_state``.

        Call again with the returned ``sync_state`` while
        ``more_changes_available`` is true.
        """
        property_set = property_set or PropertySet()
        max_changes = max_changes or self.config.sync.max_changes_returned
        body = builders.sync_folder_items(
            folder_id, property_set, sync_state, max_changes, self.version, ignored_item_ids)
        responses = self.execute(
            body, "SyncFolderItemsResponse", "SyncFolderItemsResponseMessage",
            lambda index: SyncFolderItemsResponse(property_set))
        changes = responses[0].changes
        logger.info(f"Synchronized {len(changes)} item change(s), more available: {changes.more_changes_available}")
        return changes

    def sync_folder_hierarchy(
        self,
        folder_id: Optional[ServiceId] = None,
        property_set: Optional[PropertySet] = None,
        sync_state: Optional[str] = None,
    ) -> ChangeCollection:
        """Changes to the folder tree below ``folder_id`` (whole mailbox if omitted)."""
        property_set = property_set or PropertySet()
        body = builders.sync_folder_hierarchy(folder_id, property_set, sync_state, self.version)
        responses = self.execute(
            body, "SyncFolderHierarchyResponse", "SyncFolderHierarchyResponseMessage",
            lambda index: SyncFolderHierarchyResponse(property_set))
        changes = responses[0].changes
        logger.info(f"Synchronized {len(changes)} folder change(s), more available: {changes.more_changes_available}")
        return changes

    # Items

    def update_item(self, item: ServiceObject, conflict_resolution: str = "AutoResolve") -> Optional[UpdateItemResponse]:
        """Send the item's pending changes and clear its change log.

        Returns:
            The response, or None when the item had no changes
        """
        if not item.is_dirty:
            logger.debug("Item has no changes, nothing to update")
            return None
        body = builders.update_item(item, conflict_resolution, self.version)
        responses = self.execute(
            body, "UpdateItemResponse", "UpdateItemResponseMessage", lambda index: UpdateItemResponse(item))
        item.clear_change_log()
        return responses[0]

    # Name resolution

    def resolve_names(self, name: str, return_full_contact_data: bool = False) -> ResolveNamesResponse:
        """Candidates for a name; an empty response when nothing matches."""
        body = builders.resolve_names(name, return_full_contact_data, self.version)
        responses = self.execute(
            body, "ResolveNamesResponse", "ResolveNamesResponseMessage", lambda index: ResolveNamesResponse())
        return responses[0]

    # Notifications

    def create_streaming_connection(self, subscription_ids: Iterable[str] = (),
                                    lifetime_minutes: Optional[int] = None) -> StreamingSubscriptionConnection:
        lifetime = lifetime_minutes or self.config.streaming.connection_timeout_minutes
        return StreamingSubscriptionConnection(self, lifetime, subscription_ids)

    def create_streaming_events_connection(
        self,
        subscription_ids: Iterable[str],
        lifetime_minutes: int,
        on_response: Callable[[ServiceResponseCollection], None],
        on_disconnect: Optional[Callable[[DisconnectEvent], None]] = None,
    ) -> StreamingConnection:
        """Unopened connection streaming events for the given subscriptions."""
        body = builders.get_streaming_events(subscription_ids, lifetime_minutes, self.version)
        return StreamingConnection(
            self.transport,
            body,
            read_streaming_unit,
            on_response,
            on_disconnect,
            heartbeat_seconds=self.config.streaming.heartbeat_minutes * 60,
            trace_sink=self.trace_sink,
        )


def folder_id_from_name(name: str) -> ServiceId:
    """Distinguished folder for well-known names, otherwise a folder id."""
    if not name:
        raise ServiceValidationError("Folder name must not be empty")
    if name.isalpha() and name.islower():
        return DistinguishedFolderId(name)
    return FolderId(name)
