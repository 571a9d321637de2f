"""Push notifications over a long-lived streaming connection."""

from .connection import ConnectionState, DisconnectEvent, DisconnectReason, StreamingConnection
from .events import (
    EVENT_ELEMENTS,
    EventType,
    FolderEvent,
    ItemEvent,
    NotificationEvent,
    NotificationGroup,
    read_notification_event,
)
from .streaming_events import ConnectionStatus, GetStreamingEventsResponse, read_streaming_unit
from .subscription import StreamingSubscriptionConnection

__all__ = [
    'ConnectionState',
    'DisconnectReason',
    'DisconnectEvent',
    'StreamingConnection',

    'EventType',
    'EVENT_ELEMENTS',
    'NotificationEvent',
    'FolderEvent',
    'ItemEvent',
    'NotificationGroup',
    'read_notification_event',

    'ConnectionStatus',
    'GetStreamingEventsResponse',
    'read_streaming_unit',
    'StreamingSubscriptionConnection',
]
