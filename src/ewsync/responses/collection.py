"""Collections of response messages."""

from typing import Callable, Generic, Iterator, List, Optional, TypeVar

from ews_xml import XmlNamespace, XmlReader
from ews_xml import constants as xml_names

from .envelope import ServiceResponse, ServiceResult

MESSAGES = XmlNamespace.MESSAGES

TResponse = TypeVar("TResponse", bound=ServiceResponse)


class ServiceResponseCollection(Generic[TResponse]):
    """Ordered responses of one call, one per request element."""

    def __init__(self, responses: Optional[List[TResponse]] = None):
        self._responses: List[TResponse] = list(responses or [])

    def add(self, response: TResponse) -> None:
        self._responses.append(response)

    @property
    def overall_result(self) -> ServiceResult:
        """Error if any response failed, else Warning if any warned."""
        results = {response.result for response in self._responses}
        if ServiceResult.ERROR in results:
            return ServiceResult.ERROR
        if ServiceResult.WARNING in results:
            return ServiceResult.WARNING
        return ServiceResult.SUCCESS

    def throw_if_error(self) -> None:
        for response in self._responses:
            response.throw_if_error()

    def __getitem__(self, index: int) -> TResponse:
        return self._responses[index]

    def __iter__(self) -> Iterator[TResponse]:
        return iter(self._responses)

    def __len__(self) -> int:
        return len(self._responses)

    def __repr__(self) -> str:
        return f"ServiceResponseCollection({self._responses!r})"


def read_response_collection(
    reader: XmlReader,
    response_element: Optional[str],
    message_element: Optional[str],
    factory: Callable[[int], TResponse],
) -> ServiceResponseCollection[TResponse]:
    """Read ``<XResponse><ResponseMessages>...`` into a collection.

    Args:
        reader: Cursor on (or before) the operation response element
        response_element: Operation response element, or None to accept
            whatever element the cursor is on
        message_element: Element name of each response message, or None to
            accept any child of ``ResponseMessages``
        factory: Builds the response object for the message at an index

    Returns:
        Collection in document order
    """
    if response_element is None:
        reader.ensure_current_node_is_start_element(MESSAGES)
        response_element = reader.local_name
    else:
        reader.read_start_element(MESSAGES, response_element)

    collection: ServiceResponseCollection[TResponse] = ServiceResponseCollection()
    reader.read_start_element(MESSAGES, xml_names.RESPONSE_MESSAGES)
    if not reader.is_empty_element:
        while True:
            reader.read_required()
            if reader.is_start_element():
                if message_element is None or reader.local_name == message_element:
                    response = factory(len(collection))
                    response.load_from(reader, reader.local_name)
                    collection.add(response)
                else:
                    reader.skip_current_element()
            elif reader.is_end_element(MESSAGES, xml_names.RESPONSE_MESSAGES):
                break
    reader.read_end_element_if_necessary(MESSAGES, response_element)
    return collection
