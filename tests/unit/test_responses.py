"""Unit tests for response envelopes, collections and SOAP handling."""

import pytest

from ews_xml import XmlParseError, XmlReader
from ewsync.errors import ServiceResponseError
from ewsync.properties import ExtendedPropertyDefinition, IndexedPropertyDefinition, PropertyDefinition
from ewsync.responses import (
    ResolveNamesResponse,
    ServiceError,
    ServiceResponse,
    ServiceResult,
    SoapFaultDetails,
    read_response_collection,
    read_soap_response,
)


class RecordingResponse(ServiceResponse):
    """Envelope counting how often its payload hook runs."""

    def __init__(self):
        super().__init__()
        self.payload_reads = 0

    def read_elements(self, reader):
        self.payload_reads += 1
        reader.read_start_element(None, "Items")
        reader.skip_current_element()


def read_messages(document: bytes, factory=lambda index: RecordingResponse(), on_server_version=None):
    reader = XmlReader(document)
    return read_soap_response(
        reader,
        lambda body: read_response_collection(body, None, None, factory),
        on_server_version,
    )


class TestEnvelopeClassification:
    """Success, warning and error responses."""

    def test_success(self, soap):
        """Test a success leaves the error fields empty and reads the payload."""
        responses = read_messages(soap.response("UpdateItem", soap.message("UpdateItem", payload="<m:Items/>")))
        response = responses[0]
        assert response.result == ServiceResult.SUCCESS
        assert response.error_code is None
        assert response.error_message is None
        assert response.payload_reads == 1
        response.throw_if_error()

    def test_success_with_descriptive_link_key(self, soap):
        """Test the informational link key is consumed before the payload."""
        payload = "<m:DescriptiveLinkKey>0</m:DescriptiveLinkKey><m:Items/>"
        responses = read_messages(soap.response("UpdateItem", soap.message("UpdateItem", payload=payload)))
        assert responses[0].payload_reads == 1

    def test_warning_reads_payload(self, soap):
        """Test a warning populates code and message and still reads the payload."""
        msg = soap.message("UpdateItem", "Warning", "ErrorItemNotFound", text="Not found",
                           payload="<m:DescriptiveLinkKey>0</m:DescriptiveLinkKey><m:Items/>")
        response = read_messages(soap.response("UpdateItem", msg))[0]
        assert response.result == ServiceResult.WARNING
        assert response.error_code == "ErrorItemNotFound"
        assert response.error_message == "Not found"
        assert response.payload_reads == 1

    def test_batch_stop_skips_payload(self, soap):
        """Test the batch-stopped warning never invokes the payload hook."""
        msg = soap.message("UpdateItem", "Warning", "ErrorBatchProcessingStopped",
                           text="Processing stopped", payload="<m:Items><t:Message/></m:Items>")
        response = read_messages(soap.response("UpdateItem", msg))[0]
        assert response.batch_processing_stopped
        assert response.payload_reads == 0

    def test_error_details_and_offending_fields(self, soap):
        """Test error messages collect details and field references."""
        payload = """<m:DescriptiveLinkKey>0</m:DescriptiveLinkKey>
            <m:MessageXml>
                <t:Value Name="InnerErrorMessageText">Property is read-only</t:Value>
                <t:FieldURI FieldURI="item:Subject"/>
                <t:IndexedFieldURI FieldURI="contacts:PhoneNumber" FieldIndex="HomePhone"/>
                <t:ExtendedFieldURI PropertyTag="0x1000" PropertyType="String"/>
                <t:Unknown><t:Value Name="Ignored">x</t:Value></t:Unknown>
            </m:MessageXml>
            <m:Items/>"""
        msg = soap.message("UpdateItem", "Error", "ErrorInvalidPropertySet", text="Invalid property", payload=payload)
        response = read_messages(soap.response("UpdateItem", msg))[0]

        assert response.result == ServiceResult.ERROR
        assert response.error_code == ServiceError.ERROR_INVALID_PROPERTY_SET
        assert response.error_message == "Invalid property"
        assert response.error_details == {"InnerErrorMessageText": "Property is read-only"}
        assert response.error_properties == [
            PropertyDefinition("item:Subject"),
            IndexedPropertyDefinition("contacts:PhoneNumber", field_index="HomePhone"),
            ExtendedPropertyDefinition(property_tag=0x1000, property_type="String"),
        ]
        assert response.payload_reads == 0

    def test_error_raises_with_envelope(self, soap):
        """Test throw_if_error raises carrying the response."""
        msg = soap.message("UpdateItem", "Error", "ErrorItemNotFound", text="The item was not found")
        response = read_messages(soap.response("UpdateItem", msg))[0]

        with pytest.raises(ServiceResponseError) as excinfo:
            response.throw_if_error()
        assert excinfo.value.response is response
        assert excinfo.value.error_code == "ErrorItemNotFound"
        assert str(excinfo.value) == "The item was not found"

    def test_irresolvable_conflict_message(self, soap):
        """Test the conflict code gets the out-of-date message."""
        msg = soap.message("UpdateItem", "Error", "ErrorIrresolvableConflict", text="Conflict")
        response = read_messages(soap.response("UpdateItem", msg))[0]
        assert response.error_message == (
            "The operation can't be performed because the item is out of date. Reload the item and try again.")

    def test_invalid_response_class(self, soap):
        """Test an unknown response class is a parse error."""
        msg = soap.message("UpdateItem", "Maybe")
        with pytest.raises(XmlParseError):
            read_messages(soap.response("UpdateItem", msg))


class TestResponseCollection:
    """Several messages in one response."""

    def test_partial_batch_failure(self, soap):
        """Test each message is classified and the overall result is Error."""
        document = soap.response(
            "UpdateItem",
            soap.message("UpdateItem", payload="<m:Items/>"),
            soap.message("UpdateItem", "Error", "ErrorItemNotFound", text="Not found"),
            soap.message("UpdateItem", "Warning", "ErrorBatchProcessingStopped", text="Stopped"),
        )
        responses = read_messages(document)

        assert len(responses) == 3
        assert [r.result for r in responses] == [ServiceResult.SUCCESS, ServiceResult.ERROR, ServiceResult.WARNING]
        assert responses.overall_result == ServiceResult.ERROR
        with pytest.raises(ServiceResponseError):
            responses.throw_if_error()

    def test_overall_warning(self, soap):
        """Test warnings without errors give an overall warning."""
        document = soap.response(
            "UpdateItem",
            soap.message("UpdateItem", payload="<m:Items/>"),
            soap.message("UpdateItem", "Warning", "ErrorBatchProcessingStopped", text="Stopped"),
        )
        responses = read_messages(document)
        assert responses.overall_result == ServiceResult.WARNING
        responses.throw_if_error()

    def test_named_messages_only(self, soap):
        """Test other elements in the message list are skipped."""
        document = soap.response(
            "UpdateItem",
            soap.message("UpdateItem", payload="<m:Items/>"),
            "<m:Diagnostics><m:Entry/></m:Diagnostics>",
        )
        reader = XmlReader(document)
        responses = read_soap_response(reader, lambda body: read_response_collection(
            body, "UpdateItemResponse", "UpdateItemResponseMessage", lambda index: RecordingResponse()))
        assert len(responses) == 1

    def test_empty_message_list(self, soap):
        """Test an empty list yields an empty successful collection."""
        responses = read_messages(soap.document(
            "<m:UpdateItemResponse><m:ResponseMessages/></m:UpdateItemResponse>"))
        assert len(responses) == 0
        assert responses.overall_result == ServiceResult.SUCCESS


class TestResolveNames:
    """Name resolution responses."""

    def test_no_results_is_not_raised(self, soap):
        """Test the no-results code is a valid empty answer."""
        msg = soap.message("ResolveNames", "Error", "ErrorNameResolutionNoResults", text="No results were found.")
        responses = read_messages(soap.response("ResolveNames", msg), lambda index: ResolveNamesResponse())

        response = responses[0]
        assert response.result == ServiceResult.ERROR
        assert len(response) == 0
        assert not response.should_raise()
        responses.throw_if_error()

    def test_other_errors_still_raise(self, soap):
        """Test only the whitelisted code is suppressed."""
        msg = soap.message("ResolveNames", "Error", "ErrorAccessDenied", text="Denied")
        responses = read_messages(soap.response("ResolveNames", msg), lambda index: ResolveNamesResponse())
        with pytest.raises(ServiceResponseError):
            responses.throw_if_error()

    def test_resolution_set(self, soap):
        """Test resolutions are read with their mailboxes and contacts."""
        payload = """<m:ResolutionSet TotalItemsInView="2" IncludesLastItemInRange="true">
            <t:Resolution>
                <t:Mailbox>
                    <t:Name>Ann Lee</t:Name>
                    <t:EmailAddress>ann@contoso.com</t:EmailAddress>
                    <t:RoutingType>SMTP</t:RoutingType>
                    <t:MailboxType>Mailbox</t:MailboxType>
                </t:Mailbox>
                <t:Contact><t:DisplayName>Ann Lee</t:DisplayName><t:JobTitle>Engineer</t:JobTitle></t:Contact>
            </t:Resolution>
            <t:Resolution>
                <t:Mailbox><t:EmailAddress>ann.b@contoso.com</t:EmailAddress></t:Mailbox>
            </t:Resolution>
        </m:ResolutionSet>"""
        msg = soap.message("ResolveNames", "Warning", "ErrorNameResolutionMultipleResults",
                           text="Multiple results were found.", payload=payload)
        response = read_messages(soap.response("ResolveNames", msg), lambda index: ResolveNamesResponse())[0]

        assert response.total_count == 2
        assert response.includes_last_item_in_range is True
        assert [str(r.mailbox) for r in response] == ["Ann Lee <ann@contoso.com>", "ann.b@contoso.com"]
        assert response.resolutions[0].contact.job_title == "Engineer"
        assert response.resolutions[1].contact is None


class TestSoapEnvelope:
    """Envelope, header and fault handling."""

    FAULT = """<soap:Fault>
        <faultcode xmlns:a="http://schemas.microsoft.com/exchange/services/2006/types">a:ErrorSchemaValidation</faultcode>
        <faultstring xml:lang="en-US">The request failed schema validation.</faultstring>
        <detail>
            <e:ResponseCode xmlns:e="http://schemas.microsoft.com/exchange/services/2006/errors">ErrorSchemaValidation</e:ResponseCode>
            <e:Message xmlns:e="http://schemas.microsoft.com/exchange/services/2006/errors">The request failed schema validation.</e:Message>
            <t:MessageXml>
                <t:LineNumber>2</t:LineNumber>
                <t:Value Name="Violation">Unexpected element</t:Value>
            </t:MessageXml>
        </detail>
    </soap:Fault>"""

    def test_server_version_reported(self, soap):
        """Test the header's server version reaches the callback."""
        versions = []
        read_messages(soap.response("UpdateItem", soap.message("UpdateItem", payload="<m:Items/>")),
                      on_server_version=versions.append)
        assert len(versions) == 1
        assert versions[0].major_version == 15
        assert versions[0].version == "V2017_07_11"

    def test_fault_raises_response_error(self, soap):
        """Test a SOAP fault is raised as an error envelope."""
        with pytest.raises(ServiceResponseError) as excinfo:
            read_messages(soap.document(self.FAULT))
        response = excinfo.value.response
        assert response.result == ServiceResult.ERROR
        assert response.error_code == "ErrorSchemaValidation"
        assert response.error_message == "The request failed schema validation."
        assert response.error_details == {"Violation": "Unexpected element"}

    def test_fault_details(self, soap):
        """Test the fault fields are parsed."""
        reader = XmlReader(soap.document(self.FAULT))
        reader.read_to_descendant("http://schemas.xmlsoap.org/soap/envelope/", "Fault")
        details = SoapFaultDetails.parse(reader)
        assert details.fault_code == "a:ErrorSchemaValidation"
        assert details.fault_string == "The request failed schema validation."
        assert details.response_code == "ErrorSchemaValidation"

    def test_empty_body(self, soap):
        """Test an empty body is malformed."""
        document = soap.document("").replace(b"<soap:Body></soap:Body>", b"<soap:Body/>")
        with pytest.raises(XmlParseError):
            read_messages(document)

    def test_missing_envelope(self):
        """Test a non-SOAP document is rejected."""
        with pytest.raises(XmlParseError):
            read_messages(b"<html><body>Service unavailable</body></html>")
