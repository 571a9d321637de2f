"""Mailbox complex property."""

from ews_xml import constants as xml_names

from .fields import Field, FieldKind
from .ids import ItemId
from .node import PropertyNode


class Mailbox(PropertyNode):
    """Address of a mailbox, public folder or contact."""

    element_name = xml_names.MAILBOX

    name = Field(xml_names.NAME)
    email_address = Field(xml_names.EMAIL_ADDRESS)
    routing_type = Field(xml_names.ROUTING_TYPE)
    mailbox_type = Field(xml_names.MAILBOX_TYPE)
    item_id = Field(xml_names.ITEM_ID, FieldKind.NODE, factory=ItemId)

    def __str__(self) -> str:
        if self.name and self.email_address:
            return f"{self.name} <{self.email_address}>"
        return self.email_address or self.name or ""
