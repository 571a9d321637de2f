"""Responses read from a streaming notification connection."""

import logging
from enum import Enum
from typing import List, Optional

from ews_xml import XmlNamespace, XmlReader
from ews_xml import constants as xml_names

from ..responses import ServiceResponse, ServiceResponseCollection, read_response_collection, read_soap_response
from .events import EVENT_ELEMENTS, EventType, NotificationGroup, read_notification_event

logger = logging.getLogger(__name__)

MESSAGES = XmlNamespace.MESSAGES
TYPES = XmlNamespace.TYPES

RESPONSE_ELEMENT = "GetStreamingEventsResponse"
MESSAGE_ELEMENT = "GetStreamingEventsResponseMessage"


class ConnectionStatus(str, Enum):
    OK = "OK"
    CLOSED = "Closed"


class GetStreamingEventsResponse(ServiceResponse):
    """One unit of a streaming body: notifications or a status report.

    Keep-alive status events are dropped; a group is kept even when all of
    its events were status events, so callers can see the subscription id.
    """

    def __init__(self):
        super().__init__()
        self.notifications: List[NotificationGroup] = []
        self.error_subscription_ids: List[str] = []
        self.connection_status: Optional[ConnectionStatus] = None

    def read_elements(self, reader: XmlReader) -> None:
        while reader.next_is_start_element(MESSAGES):
            reader.read_required()
            name = reader.local_name
            if name == xml_names.NOTIFICATIONS:
                self._read_notifications(reader)
            elif name == xml_names.ERROR_SUBSCRIPTION_IDS:
                self._read_error_subscription_ids(reader)
            elif name == xml_names.CONNECTION_STATUS:
                self.connection_status = ConnectionStatus(reader.read_value())
            else:
                reader.skip_current_element()

    def load_extra_error_details(self, reader: XmlReader, local_name: str) -> bool:
        if local_name == xml_names.ERROR_SUBSCRIPTION_IDS:
            self._read_error_subscription_ids(reader)
            return True
        return super().load_extra_error_details(reader, local_name)

    def _read_notifications(self, reader: XmlReader) -> None:
        if reader.is_empty_element:
            return
        while True:
            reader.read_required()
            if reader.is_start_element(MESSAGES, xml_names.NOTIFICATION):
                self.notifications.append(self._read_notification(reader))
            elif reader.is_start_element():
                reader.skip_current_element()
            elif reader.is_end_element(MESSAGES, xml_names.NOTIFICATIONS):
                return

    @staticmethod
    def _read_notification(reader: XmlReader) -> NotificationGroup:
        group = NotificationGroup()
        if reader.is_empty_element:
            return group
        while True:
            reader.read_required()
            if reader.is_start_element(TYPES, xml_names.SUBSCRIPTION_ID):
                group.subscription_id = reader.read_value()
            elif reader.is_start_element():
                event_type = EVENT_ELEMENTS.get(reader.local_name)
                if event_type is None:
                    reader.skip_current_element()
                    continue
                event = read_notification_event(reader, event_type)
                if event_type != EventType.STATUS:
                    group.events.append(event)
            elif reader.is_end_element(MESSAGES, xml_names.NOTIFICATION):
                return group

    def _read_error_subscription_ids(self, reader: XmlReader) -> None:
        if reader.is_empty_element:
            return
        while True:
            reader.read_required()
            if reader.is_start_element(None, xml_names.SUBSCRIPTION_ID):
                self.error_subscription_ids.append(reader.read_value())
            elif reader.is_start_element():
                reader.skip_current_element()
            elif reader.is_end_element(None, xml_names.ERROR_SUBSCRIPTION_IDS):
                return


def read_streaming_unit(reader: XmlReader) -> ServiceResponseCollection[GetStreamingEventsResponse]:
    """Read one complete document of a streaming notification body."""
    return read_soap_response(
        reader,
        lambda body: read_response_collection(
            body, RESPONSE_ELEMENT, MESSAGE_ELEMENT, lambda index: GetStreamingEventsResponse()),
    )
