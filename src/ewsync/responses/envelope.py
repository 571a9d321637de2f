"""Per-message response envelope.

Every response message carries a result class and, unless it succeeded, an
error code and message. Operation-specific payloads are read by subclasses
through :meth:`ServiceResponse.read_elements`.
"""

import logging
from enum import Enum
from typing import Callable, ClassVar, Dict, FrozenSet, List, Optional, Union

from ews_xml import ValueConverter, XmlNamespace, XmlParseError, XmlReader
from ews_xml import constants as xml_names

from ..errors import ServiceResponseError
from ..properties import ExtendedPropertyDefinition, IndexedPropertyDefinition, find_property_definition
from ..properties.definitions import PropertyDefinition
from .codes import ServiceError, map_error_code_to_message

logger = logging.getLogger(__name__)

MESSAGES = XmlNamespace.MESSAGES
TYPES = XmlNamespace.TYPES

ErrorProperty = Union[PropertyDefinition, ExtendedPropertyDefinition]


class ServiceResult(str, Enum):
    SUCCESS = "Success"
    WARNING = "Warning"
    ERROR = "Error"


class ServiceErrorHandling(str, Enum):
    """What a multi-message call does with error responses."""
    RETURN_ERRORS = "ReturnErrors"
    THROW_ON_ERROR = "ThrowOnError"


class ServiceResponse:
    """Result of one response message.

    Subclasses add payload fields and override :meth:`read_elements`. The
    codes in ``suppressed_error_codes`` are errors the operation treats as a
    valid outcome; override :meth:`should_raise` for anything more involved.
    """

    suppressed_error_codes: ClassVar[FrozenSet[str]] = frozenset()

    def __init__(self):
        self.result = ServiceResult.SUCCESS
        self.error_code: Optional[str] = None
        self.error_message: Optional[str] = None
        self.error_details: Dict[str, str] = {}
        self.error_properties: List[ErrorProperty] = []

    @classmethod
    def from_error(cls, error_code: str, error_message: str, error_details: Optional[Dict[str, str]] = None) -> "ServiceResponse":
        """Error response built on the client, e.g. from a SOAP fault."""
        response = cls()
        response.result = ServiceResult.ERROR
        response.error_code = error_code
        response.error_message = error_message
        response.error_details = dict(error_details or {})
        return response

    @property
    def batch_processing_stopped(self) -> bool:
        """True when the server skipped this message after an earlier error."""
        return self.error_code == ServiceError.ERROR_BATCH_PROCESSING_STOPPED

    # Reading

    def load_from(self, reader: XmlReader, element_name: str) -> None:
        """Read one response message; the cursor ends on its end node."""
        reader.read_start_element(MESSAGES, element_name)
        result = reader.read_attribute_value(xml_names.RESPONSE_CLASS)
        try:
            self.result = ServiceResult(result)
        except ValueError:
            raise XmlParseError(f"Invalid {xml_names.RESPONSE_CLASS} {result!r} on {element_name}") from None

        if self.result == ServiceResult.SUCCESS:
            reader.read_element_value(MESSAGES, xml_names.RESPONSE_CODE)
            self._read_descriptive_link_key(reader)
            self.read_elements(reader)
            self._read_to_end(reader, element_name)
        elif self.result == ServiceResult.WARNING:
            self._read_message_text_and_code(reader)
            if self.batch_processing_stopped:
                self._read_to_end(reader, element_name)
            else:
                self.read_elements(reader)
                self._read_to_end(reader, element_name)
        else:
            self._read_message_text_and_code(reader)
            self._read_error_details(reader, element_name)

        self.loaded()

    def _read_message_text_and_code(self, reader: XmlReader) -> None:
        message = ""
        if reader.next_is_start_element(MESSAGES, xml_names.MESSAGE_TEXT):
            message = reader.read_element_value(MESSAGES, xml_names.MESSAGE_TEXT)
        self.error_code = reader.read_element_value(MESSAGES, xml_names.RESPONSE_CODE)
        self.error_message = map_error_code_to_message(self.error_code, message)
        self._read_descriptive_link_key(reader)

    @staticmethod
    def _read_descriptive_link_key(reader: XmlReader) -> None:
        # Informational only
        if reader.next_is_start_element(MESSAGES, xml_names.DESCRIPTIVE_LINK_KEY):
            reader.read_element_value(MESSAGES, xml_names.DESCRIPTIVE_LINK_KEY, ValueConverter.to_int)

    def _read_error_details(self, reader: XmlReader, element_name: str) -> None:
        while not reader.is_end_element(MESSAGES, element_name):
            reader.read_required()
            if reader.is_start_element() and not self.load_extra_error_details(reader, reader.local_name):
                reader.skip_current_element()

    @staticmethod
    def _read_to_end(reader: XmlReader, element_name: str) -> None:
        # Children nobody consumed are skipped whole
        while not reader.is_end_element(MESSAGES, element_name):
            reader.read_required()
            if reader.is_start_element():
                logger.debug(f"Skipping {reader.local_name} in {element_name}")
                reader.skip_current_element()

    def read_elements(self, reader: XmlReader) -> None:
        """Read the operation payload; the base envelope has none."""

    def load_extra_error_details(self, reader: XmlReader, local_name: str) -> bool:
        """Read one child of an error message.

        Returns:
            False if the element is not recognised and must be skipped
        """
        if local_name == xml_names.MESSAGE_XML:
            if not reader.is_empty_element:
                self._read_message_xml(reader)
            return True
        handler = self._ERROR_DETAIL_READERS.get(local_name)
        if handler is None:
            return False
        handler(self, reader)
        return True

    def _read_message_xml(self, reader: XmlReader) -> None:
        while True:
            reader.read_required()
            if reader.is_start_element():
                handler = self._ERROR_DETAIL_READERS.get(reader.local_name)
                if handler is None:
                    reader.skip_current_element()
                else:
                    handler(self, reader)
            elif reader.is_end_element(TYPES, xml_names.MESSAGE_XML) or reader.is_end_element(MESSAGES, xml_names.MESSAGE_XML):
                break

    def _read_value_detail(self, reader: XmlReader) -> None:
        name = reader.read_attribute_value(xml_names.NAME)
        value = reader.read_value()
        if name:
            self.error_details[name] = value

    def _read_field_uri(self, reader: XmlReader) -> None:
        field_uri = reader.read_attribute_value(xml_names.FIELD_URI)
        self.error_properties.append(find_property_definition(field_uri))
        reader.skip_current_element()

    def _read_indexed_field_uri(self, reader: XmlReader) -> None:
        self.error_properties.append(IndexedPropertyDefinition(
            reader.read_attribute_value(xml_names.FIELD_URI),
            field_index=reader.read_attribute_value(xml_names.FIELD_INDEX) or "",
        ))
        reader.skip_current_element()

    def _read_extended_field_uri(self, reader: XmlReader) -> None:
        self.error_properties.append(ExtendedPropertyDefinition.load_from(reader))
        reader.skip_current_element()

    _ERROR_DETAIL_READERS: ClassVar[Dict[str, Callable[["ServiceResponse", XmlReader], None]]] = {
        xml_names.VALUE: _read_value_detail,
        xml_names.FIELD_URI: _read_field_uri,
        xml_names.INDEXED_FIELD_URI: _read_indexed_field_uri,
        xml_names.EXTENDED_FIELD_URI: _read_extended_field_uri,
    }

    def loaded(self) -> None:
        """Called once the whole message has been read."""

    # Outcome

    def should_raise(self) -> bool:
        return self.result == ServiceResult.ERROR and self.error_code not in self.suppressed_error_codes

    def throw_if_error(self) -> None:
        """Raise :class:`ServiceResponseError` for unsuppressed errors."""
        if self.should_raise():
            raise ServiceResponseError(self)

    def __repr__(self) -> str:
        if self.result == ServiceResult.SUCCESS:
            return f"{type(self).__name__}(Success)"
        return f"{type(self).__name__}({self.result.value}, {self.error_code}: {self.error_message})"
