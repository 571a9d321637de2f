"""SOAP envelope handling for response bodies."""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional, TypeVar

from ews_xml import ValueConverter, XmlNamespace, XmlParseError, XmlReader
from ews_xml import constants as xml_names

from ..errors import ServiceResponseError
from .codes import ServiceError
from .envelope import ServiceResponse

logger = logging.getLogger(__name__)

SOAP = XmlNamespace.SOAP
ERRORS = XmlNamespace.ERRORS
TYPES = XmlNamespace.TYPES
MESSAGES = XmlNamespace.MESSAGES

T = TypeVar("T")


@dataclass
class ServerVersionInfo:
    """Version of the server that produced a response."""
    major_version: Optional[int] = None
    minor_version: Optional[int] = None
    major_build_number: Optional[int] = None
    minor_build_number: Optional[int] = None
    version: Optional[str] = None

    @classmethod
    def from_reader(cls, reader: XmlReader) -> "ServerVersionInfo":
        to_int = ValueConverter.to_int
        return cls(
            major_version=reader.read_attribute_value("MajorVersion", to_int),
            minor_version=reader.read_attribute_value("MinorVersion", to_int),
            major_build_number=reader.read_attribute_value("MajorBuildNumber", to_int),
            minor_build_number=reader.read_attribute_value("MinorBuildNumber", to_int),
            version=reader.read_attribute_value("Version"),
        )


@dataclass
class SoapFaultDetails:
    """Contents of a SOAP fault."""
    fault_code: Optional[str] = None
    fault_string: Optional[str] = None
    fault_actor: Optional[str] = None
    response_code: str = ServiceError.ERROR_INTERNAL_SERVER_ERROR.value
    message: Optional[str] = None
    exception_type: Optional[str] = None
    line_number: Optional[int] = None
    position_within_line: Optional[int] = None
    error_details: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def parse(cls, reader: XmlReader) -> "SoapFaultDetails":
        """Read a ``Fault`` element; the cursor ends on its end node."""
        details = cls()
        reader.ensure_current_node_is_start_element(SOAP, xml_names.FAULT)
        if reader.is_empty_element:
            return details
        while True:
            reader.read_required()
            if reader.is_start_element():
                name = reader.local_name
                if name == xml_names.FAULT_CODE:
                    details.fault_code = reader.read_value()
                elif name == xml_names.FAULT_STRING:
                    details.fault_string = reader.read_value()
                elif name == xml_names.FAULT_ACTOR:
                    details.fault_actor = reader.read_value()
                elif name == xml_names.DETAIL:
                    details._parse_detail(reader)
                else:
                    reader.skip_current_element()
            elif reader.is_end_element(SOAP, xml_names.FAULT):
                return details

    def _parse_detail(self, reader: XmlReader) -> None:
        if reader.is_empty_element:
            return
        while True:
            reader.read_required()
            if reader.is_start_element():
                name = reader.local_name
                if name == xml_names.RESPONSE_CODE:
                    self.response_code = reader.read_value()
                elif name == xml_names.EXCEPTION_MESSAGE:
                    self.message = reader.read_value()
                elif name == xml_names.EXCEPTION_TYPE:
                    self.exception_type = reader.read_value()
                elif name == xml_names.EXCEPTION_LINE_NUMBER:
                    self.line_number = ValueConverter.to_int(reader.read_value())
                elif name == xml_names.EXCEPTION_LINE_POSITION:
                    self.position_within_line = ValueConverter.to_int(reader.read_value())
                elif name == xml_names.MESSAGE_XML:
                    self._parse_message_xml(reader)
                else:
                    reader.skip_current_element()
            elif reader.is_end_element(None, xml_names.DETAIL):
                return

    def _parse_message_xml(self, reader: XmlReader) -> None:
        if reader.is_empty_element:
            return
        depth = reader.depth
        while True:
            reader.read_required()
            if reader.is_start_element(TYPES, xml_names.VALUE):
                name = reader.read_attribute_value(xml_names.NAME)
                value = reader.read_value()
                if name:
                    self.error_details[name] = value
            elif reader.is_start_element():
                reader.skip_current_element()
            elif reader.depth == depth and reader.is_end_element(None, xml_names.MESSAGE_XML):
                return

    def to_response(self) -> ServiceResponse:
        message = self.message or self.fault_string or "SOAP fault"
        return ServiceResponse.from_error(self.response_code, message, self.error_details)


def read_soap_response(reader: XmlReader, read_body: Callable[[XmlReader], T],
                       on_server_version: Optional[Callable[[ServerVersionInfo], None]] = None) -> T:
    """Read a SOAP envelope and hand its body content to ``read_body``.

    ``read_body`` is called with the cursor on the first element inside the
    body and must leave it on that element's end node.

    Raises:
        ServiceResponseError: If the body holds a SOAP fault
        XmlParseError: If the envelope is malformed
    """
    reader.read_start_element(SOAP, xml_names.ENVELOPE)
    reader.read_required()
    if reader.is_start_element(SOAP, xml_names.HEADER):
        _read_header(reader, on_server_version)
        reader.read_required()
    reader.ensure_current_node_is_start_element(SOAP, xml_names.BODY)
    if reader.is_empty_element:
        raise XmlParseError("SOAP body is empty")
    reader.read_required()
    reader.ensure_current_node_is_start_element()

    if reader.is_start_element(SOAP, xml_names.FAULT):
        details = SoapFaultDetails.parse(reader)
        logger.debug(f"SOAP fault {details.fault_code}: {details.response_code} {details.message}")
        raise ServiceResponseError(details.to_response())

    result = read_body(reader)
    reader.read_end_element(SOAP, xml_names.BODY)
    reader.read_end_element(SOAP, xml_names.ENVELOPE)
    return result


def _read_header(reader: XmlReader, on_server_version: Optional[Callable[[ServerVersionInfo], None]]) -> None:
    if reader.is_empty_element:
        return
    while True:
        reader.read_required()
        if reader.is_start_element(TYPES, xml_names.SERVER_VERSION_INFO):
            info = ServerVersionInfo.from_reader(reader)
            logger.debug(f"Server version {info.version} {info.major_version}.{info.minor_version}")
            if on_server_version is not None:
                on_server_version(info)
            reader.skip_current_element()
        elif reader.is_start_element():
            reader.skip_current_element()
        elif reader.is_end_element(SOAP, xml_names.HEADER):
            return
