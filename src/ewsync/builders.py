"""SOAP request documents for the supported operations."""

from typing import Callable, Iterable, Optional

from ews_xml import XmlNamespace, XmlWriter
from ews_xml import constants as xml_names

from .config import ExchangeVersion
from .errors import ServiceValidationError
from .objects import PropertySet, ServiceObject
from .properties import ServiceId

SOAP = XmlNamespace.SOAP
MESSAGES = XmlNamespace.MESSAGES
TYPES = XmlNamespace.TYPES

MAX_CHANGES_RANGE = (1, 512)
CONNECTION_TIMEOUT_RANGE = (1, 30)


def soap_request(version: ExchangeVersion, write_body: Callable[[XmlWriter], None]) -> bytes:
    """Wrap the operation element written by ``write_body`` in an envelope."""
    writer = XmlWriter()
    writer.write_start_element(SOAP, xml_names.ENVELOPE)
    writer.write_start_element(SOAP, xml_names.HEADER)
    writer.write_start_element(TYPES, xml_names.REQUEST_SERVER_VERSION)
    writer.write_attribute_value(xml_names.VERSION, version)
    writer.write_end_element()
    writer.write_end_element()
    writer.write_start_element(SOAP, xml_names.BODY)
    write_body(writer)
    writer.write_end_element()
    writer.write_end_element()
    return writer.to_bytes()


def _write_folder_id(writer: XmlWriter, element_name: str, folder_id: ServiceId) -> None:
    writer.write_start_element(MESSAGES, element_name)
    folder_id.write_to(writer, TYPES)
    writer.write_end_element()


def _validate_range(name: str, value: int, bounds) -> None:
    low, high = bounds
    if not (low <= value <= high):
        raise ServiceValidationError(f"{name} must be between {low}-{high}, got: {value}")


def sync_folder_items(
    folder_id: ServiceId,
    property_set: PropertySet,
    sync_state: Optional[str],
    max_changes: int,
    version: ExchangeVersion,
    ignored_item_ids: Iterable[ServiceId] = (),
) -> bytes:
    _validate_range("max_changes", max_changes, MAX_CHANGES_RANGE)

    def write_body(writer: XmlWriter) -> None:
        writer.write_start_element(MESSAGES, xml_names.SYNC_FOLDER_ITEMS)
        property_set.write_to(writer, xml_names.ITEM_SHAPE)
        _write_folder_id(writer, xml_names.SYNC_FOLDER_ID, folder_id)
        writer.write_element_value(MESSAGES, xml_names.SYNC_STATE, sync_state or None)
        ignored = list(ignored_item_ids)
        if ignored:
            writer.write_start_element(MESSAGES, xml_names.IGNORE)
            for item_id in ignored:
                item_id.write_to(writer, TYPES, xml_names.ITEM_ID)
            writer.write_end_element()
        writer.write_element_value(MESSAGES, xml_names.MAX_CHANGES_RETURNED, max_changes)
        writer.write_end_element()

    return soap_request(version, write_body)


def sync_folder_hierarchy(
    folder_id: Optional[ServiceId],
    property_set: PropertySet,
    sync_state: Optional[str],
    version: ExchangeVersion,
) -> bytes:
    def write_body(writer: XmlWriter) -> None:
        writer.write_start_element(MESSAGES, xml_names.SYNC_FOLDER_HIERARCHY)
        property_set.write_to(writer, xml_names.FOLDER_SHAPE)
        if folder_id is not None:
            _write_folder_id(writer, xml_names.SYNC_FOLDER_ID, folder_id)
        writer.write_element_value(MESSAGES, xml_names.SYNC_STATE, sync_state or None)
        writer.write_end_element()

    return soap_request(version, write_body)


def update_item(item: ServiceObject, conflict_resolution: str, version: ExchangeVersion,
                message_disposition: Optional[str] = "SaveOnly") -> bytes:
    """Update request carrying only the item's changed fields."""
    if item.id is None or not item.id.is_valid:
        raise ServiceValidationError("Only items loaded from the server can be updated")

    def write_body(writer: XmlWriter) -> None:
        writer.write_start_element(MESSAGES, xml_names.UPDATE_ITEM)
        writer.write_attribute_value(xml_names.CONFLICT_RESOLUTION, conflict_resolution)
        writer.write_attribute_value(xml_names.MESSAGE_DISPOSITION, message_disposition)
        writer.write_start_element(MESSAGES, xml_names.ITEM_CHANGES)
        writer.write_start_element(TYPES, xml_names.ITEM_CHANGE)
        item.id.write_to(writer, TYPES, xml_names.ITEM_ID)
        writer.write_start_element(TYPES, xml_names.UPDATES)
        item.write_update(writer)
        writer.write_end_element()
        writer.write_end_element()
        writer.write_end_element()
        writer.write_end_element()

    return soap_request(version, write_body)


def resolve_names(name: str, return_full_contact_data: bool, version: ExchangeVersion) -> bytes:
    if not name:
        raise ServiceValidationError("name to resolve must not be empty")

    def write_body(writer: XmlWriter) -> None:
        writer.write_start_element(MESSAGES, xml_names.RESOLVE_NAMES)
        writer.write_attribute_value(xml_names.RETURN_FULL_CONTACT_DATA, return_full_contact_data)
        writer.write_element_value(MESSAGES, xml_names.UNRESOLVED_ENTRY, name)
        writer.write_end_element()

    return soap_request(version, write_body)


def get_streaming_events(subscription_ids: Iterable[str], connection_timeout: int,
                         version: ExchangeVersion) -> bytes:
    ids = list(subscription_ids)
    if not ids:
        raise ServiceValidationError("At least one subscription id is required")
    _validate_range("connection_timeout", connection_timeout, CONNECTION_TIMEOUT_RANGE)

    def write_body(writer: XmlWriter) -> None:
        writer.write_start_element(MESSAGES, xml_names.GET_STREAMING_EVENTS)
        writer.write_start_element(MESSAGES, xml_names.SUBSCRIPTION_IDS)
        for subscription_id in ids:
            writer.write_element_value(TYPES, xml_names.SUBSCRIPTION_ID, subscription_id)
        writer.write_end_element()
        writer.write_element_value(MESSAGES, xml_names.CONNECTION_TIMEOUT, connection_timeout)
        writer.write_end_element()

    return soap_request(version, write_body)
