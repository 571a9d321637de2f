"""Response envelopes and the readers for the SOAP layer around them."""

from .codes import ServiceError, map_error_code_to_message
from .collection import ServiceResponseCollection, read_response_collection
from .envelope import ServiceErrorHandling, ServiceResponse, ServiceResult
from .resolve_names import NameResolution, ResolveNamesResponse
from .soap import ServerVersionInfo, SoapFaultDetails, read_soap_response
from .update_item import UpdateItemResponse

__all__ = [
    'ServiceError',
    'ServiceErrorHandling',
    'ServiceResponse',
    'ServiceResult',
    'ServiceResponseCollection',
    'read_response_collection',
    'map_error_code_to_message',

    'ServerVersionInfo',
    'SoapFaultDetails',
    'read_soap_response',

    'NameResolution',
    'ResolveNamesResponse',
    'UpdateItemResponse',
]
