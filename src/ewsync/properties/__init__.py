"""Change-tracked property nodes and the field declarations behind them."""

from .definitions import (
    ExtendedPropertyDefinition,
    IndexedPropertyDefinition,
    PropertyDefinition,
    find_property_definition,
)
from .dictionary import (
    EMAIL_ADDRESSES,
    IM_ADDRESSES,
    PHONE_NUMBERS,
    DictionaryEntry,
    DictionaryField,
    DictionarySpec,
    EmailAddressEntry,
    EmailAddressKey,
    ImAddressKey,
    PhoneNumberKey,
)
from .fields import Field, FieldKind, FieldSpec
from .ids import DistinguishedFolderId, FolderId, ItemId, ServiceId
from .mailbox import Mailbox
from .node import PropertyNode

__all__ = [
    'Field',
    'FieldKind',
    'FieldSpec',
    'PropertyNode',

    'PropertyDefinition',
    'IndexedPropertyDefinition',
    'ExtendedPropertyDefinition',
    'find_property_definition',

    'DictionaryField',
    'DictionarySpec',
    'DictionaryEntry',
    'EmailAddressEntry',
    'PhoneNumberKey',
    'EmailAddressKey',
    'ImAddressKey',
    'PHONE_NUMBERS',
    'EMAIL_ADDRESSES',
    'IM_ADDRESSES',

    'ServiceId',
    'ItemId',
    'FolderId',
    'DistinguishedFolderId',

    'Mailbox',
]
