"""Streaming subscription connection: events for a set of subscriptions."""

import logging
from typing import TYPE_CHECKING, Callable, Iterable, List, Optional

from ..errors import ServiceResponseError, ServiceValidationError, StreamingConnectionError
from ..responses import ServiceResponseCollection, ServiceResult
from .connection import DisconnectEvent, DisconnectReason, StreamingConnection
from .events import NotificationGroup
from .streaming_events import ConnectionStatus, GetStreamingEventsResponse

if TYPE_CHECKING:
    from ..service import ExchangeService

logger = logging.getLogger(__name__)

NotificationHandler = Callable[[NotificationGroup], None]
SubscriptionErrorHandler = Callable[[Optional[str], ServiceResponseError], None]
DisconnectHandler = Callable[[DisconnectEvent], None]


class StreamingSubscriptionConnection:
    """Delivers events for several subscriptions over one connection.

    Subscriptions can only be added or removed while the connection is
    closed. Handlers run on the connection's background thread.
    """

    def __init__(self, service: "ExchangeService", lifetime_minutes: int,
                 subscription_ids: Iterable[str] = ()):
        if not (1 <= lifetime_minutes <= 30):
            raise ServiceValidationError(f"lifetime_minutes must be between 1-30, got: {lifetime_minutes}")
        self._service = service
        self.lifetime_minutes = lifetime_minutes
        self._subscription_ids: List[str] = list(subscription_ids)
        self._connection: Optional[StreamingConnection] = None
        self.on_notification: List[NotificationHandler] = []
        self.on_subscription_error: List[SubscriptionErrorHandler] = []
        self.on_disconnect: List[DisconnectHandler] = []

    @property
    def subscription_ids(self) -> List[str]:
        return list(self._subscription_ids)

    @property
    def is_open(self) -> bool:
        return self._connection is not None and self._connection.is_connected

    def add_subscription(self, subscription_id: str) -> None:
        self._ensure_closed()
        if subscription_id not in self._subscription_ids:
            self._subscription_ids.append(subscription_id)

    def remove_subscription(self, subscription_id: str) -> None:
        self._ensure_closed()
        if subscription_id in self._subscription_ids:
            self._subscription_ids.remove(subscription_id)

    def _ensure_closed(self) -> None:
        if self.is_open:
            raise StreamingConnectionError("Subscriptions cannot be changed while the connection is open")

    def open(self) -> None:
        if self.is_open:
            return
        if not self._subscription_ids:
            raise ServiceValidationError("No subscriptions to open a connection for")
        connection = self._service.create_streaming_events_connection(
            self._subscription_ids, self.lifetime_minutes, self._handle_responses, self._handle_disconnect)
        self._connection = connection
        connection.connect()

    def close(self) -> None:
        if self._connection is not None:
            self._connection.disconnect(DisconnectReason.USER_INITIATED)

    def wait(self, timeout: Optional[float] = None) -> bool:
        connection = self._connection
        return connection.wait(timeout) if connection is not None else True

    def _handle_responses(self, responses: ServiceResponseCollection[GetStreamingEventsResponse]) -> None:
        for response in responses:
            if response.result == ServiceResult.ERROR:
                self._report_error(response)
                continue
            for group in response.notifications:
                for handler in list(self.on_notification):
                    handler(group)
            if response.connection_status == ConnectionStatus.CLOSED:
                logger.info("Server closed the streaming connection")
                self._connection.disconnect(DisconnectReason.CLEAN)

    def _report_error(self, response: GetStreamingEventsResponse) -> None:
        error = ServiceResponseError(response)
        failed: List[Optional[str]] = list(response.error_subscription_ids)
        request_failed = not failed
        if request_failed:
            # The whole request failed, so every subscription is affected
            failed = list(self._subscription_ids)
        for subscription_id in failed:
            logger.warning(f"Subscription {subscription_id} failed: {response.error_code}")
            for handler in list(self.on_subscription_error):
                handler(subscription_id, error)
        if request_failed:
            self._connection.disconnect(DisconnectReason.EXCEPTION, error)

    def _handle_disconnect(self, event: DisconnectEvent) -> None:
        for handler in list(self.on_disconnect):
            handler(event)
