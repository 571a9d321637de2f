"""Item types."""

from ews_xml import constants as xml_names

from ..properties import (
    EMAIL_ADDRESSES,
    IM_ADDRESSES,
    PHONE_NUMBERS,
    DictionaryField,
    Field,
    FieldKind,
    FolderId,
    ItemId,
    PropertyNode,
)
from .base import ServiceObject


class Body(PropertyNode):
    """Item body text with its format."""

    body_type = Field("BodyType", attribute=True)
    text = Field("Text", text_content=True)

    def __init__(self, text=None, body_type="Text"):
        super().__init__(text=text, body_type=body_type)

    def __eq__(self, other):
        if not isinstance(other, Body):
            return NotImplemented
        return (self.text, self.body_type) == (other.text, other.body_type)

    __hash__ = None


class Item(ServiceObject):
    """Generic item; also used for item types without a dedicated class."""

    element_name = "Item"
    id_field = "item_id"

    item_id = Field(xml_names.ITEM_ID, FieldKind.NODE, factory=ItemId, field_uri="item:ItemId",
                    summary=True, read_only=True)
    parent_folder_id = Field(xml_names.PARENT_FOLDER_ID, FieldKind.NODE, factory=FolderId,
                             field_uri="item:ParentFolderId", summary=True, read_only=True)
    item_class = Field("ItemClass", field_uri="item:ItemClass", summary=True)
    subject = Field("Subject", field_uri="item:Subject", summary=True)
    sensitivity = Field("Sensitivity", field_uri="item:Sensitivity", summary=True)
    body = Field("Body", FieldKind.NODE, factory=Body, field_uri="item:Body")
    date_time_received = Field("DateTimeReceived", FieldKind.DATETIME, field_uri="item:DateTimeReceived",
                               summary=True, read_only=True)
    size = Field("Size", FieldKind.INT, field_uri="item:Size", summary=True, read_only=True)
    importance = Field("Importance", field_uri="item:Importance", summary=True)
    has_attachments = Field("HasAttachments", FieldKind.BOOL, field_uri="item:HasAttachments",
                            summary=True, read_only=True)
    last_modified_time = Field("LastModifiedTime", FieldKind.DATETIME, field_uri="item:LastModifiedTime",
                               summary=True, read_only=True)


class Message(Item):
    element_name = "Message"

    is_read = Field("IsRead", FieldKind.BOOL, field_uri="message:IsRead", summary=True)
    internet_message_id = Field("InternetMessageId", field_uri="message:InternetMessageId",
                                summary=True, read_only=True)


class Contact(Item):
    """Contact with dictionary-valued address fields."""

    element_name = "Contact"

    file_as = Field("FileAs", field_uri="contacts:FileAs", summary=True)
    display_name = Field("DisplayName", field_uri="contacts:DisplayName", summary=True)
    given_name = Field("GivenName", field_uri="contacts:GivenName", summary=True)
    company_name = Field("CompanyName", field_uri="contacts:CompanyName", summary=True)
    email_addresses = Field("EmailAddresses", FieldKind.NODE, factory=DictionaryField.factory(EMAIL_ADDRESSES),
                            field_uri="contacts:EmailAddresses", create_default=True, read_only=True)
    phone_numbers = Field("PhoneNumbers", FieldKind.NODE, factory=DictionaryField.factory(PHONE_NUMBERS),
                          field_uri="contacts:PhoneNumbers", create_default=True, read_only=True)
    im_addresses = Field("ImAddresses", FieldKind.NODE, factory=DictionaryField.factory(IM_ADDRESSES),
                         field_uri="contacts:ImAddresses", create_default=True, read_only=True)
    job_title = Field("JobTitle", field_uri="contacts:JobTitle")
    surname = Field("Surname", field_uri="contacts:Surname", summary=True)
