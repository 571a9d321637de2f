"""Keyed collections that record exactly which keys changed.

A dictionary field such as a contact's phone numbers is updated on the
server one entry at a time. The field therefore classifies every key touched
since the last :meth:`DictionaryField.clear_change_log` as added, modified or
removed, and :meth:`DictionaryField.serialize_update` emits one update
fragment per touched key.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple, Type

from ews_xml import XmlNamespace, XmlReader, XmlWriter
from ews_xml import constants as xml_names

from .definitions import IndexedPropertyDefinition
from .fields import Field
from .node import PropertyNode

logger = logging.getLogger(__name__)

TYPES = XmlNamespace.TYPES


class PhoneNumberKey(str, Enum):
    ASSISTANT_PHONE = "AssistantPhone"
    BUSINESS_FAX = "BusinessFax"
    BUSINESS_PHONE = "BusinessPhone"
    BUSINESS_PHONE2 = "BusinessPhone2"
    CALLBACK = "Callback"
    CAR_PHONE = "CarPhone"
    COMPANY_MAIN_PHONE = "CompanyMainPhone"
    HOME_FAX = "HomeFax"
    HOME_PHONE = "HomePhone"
    HOME_PHONE2 = "HomePhone2"
    ISDN = "Isdn"
    MOBILE_PHONE = "MobilePhone"
    OTHER_FAX = "OtherFax"
    OTHER_TELEPHONE = "OtherTelephone"
    PAGER = "Pager"
    PRIMARY_PHONE = "PrimaryPhone"
    RADIO_PHONE = "RadioPhone"
    TELEX = "Telex"
    TTY_TDD_PHONE = "TtyTddPhone"


class EmailAddressKey(str, Enum):
    EMAIL_ADDRESS1 = "EmailAddress1"
    EMAIL_ADDRESS2 = "EmailAddress2"
    EMAIL_ADDRESS3 = "EmailAddress3"


class ImAddressKey(str, Enum):
    IM_ADDRESS1 = "ImAddress1"
    IM_ADDRESS2 = "ImAddress2"
    IM_ADDRESS3 = "ImAddress3"


class DictionaryEntry(PropertyNode):
    """Entry holding a single text value under its key."""

    element_name = xml_names.ENTRY

    key = Field(xml_names.KEY, attribute=True, read_only=True)
    value = Field("Value", text_content=True)

    def __init__(self, key: Any = None, value: Any = None, **fields):
        super().__init__(key=key, value=value, **fields)


class EmailAddressEntry(DictionaryEntry):
    """E-mail entry; the address is the text, the rest are attributes."""

    name = Field("Name", attribute=True)
    routing_type = Field("RoutingType", attribute=True)
    mailbox_type = Field("MailboxType", attribute=True)


@dataclass(frozen=True)
class DictionarySpec:
    """Configuration of one dictionary field.

    Attributes:
        field_uri: URI addressing the entries, combined with the key
        key_type: Enum the keys are normalised to
        entry_class: Entry type created for new keys
    """
    field_uri: str
    key_type: Type[Enum]
    entry_class: Type[DictionaryEntry] = DictionaryEntry
    entry_element: str = xml_names.ENTRY


PHONE_NUMBERS = DictionarySpec("contacts:PhoneNumber", PhoneNumberKey)
EMAIL_ADDRESSES = DictionarySpec("contacts:EmailAddress", EmailAddressKey, EmailAddressEntry)
IM_ADDRESSES = DictionarySpec("contacts:ImAddress", ImAddressKey)


class DictionaryField(PropertyNode):
    """Ordered mapping of key to entry with per-key change classification.

    Assigning None to a key removes it. Between two clears a key is in at
    most one of the added, modified and removed buckets, and a removed key
    is never enumerated.
    """

    def __init__(self, spec: DictionarySpec):
        super().__init__()
        self.spec = spec
        self._entries: Dict[Enum, DictionaryEntry] = {}
        self._added: Dict[Enum, None] = {}
        self._modified: Dict[Enum, None] = {}
        self._removed: Dict[Enum, DictionaryEntry] = {}

    @classmethod
    def factory(cls, spec: DictionarySpec) -> Callable[[], "DictionaryField"]:
        return lambda: cls(spec)

    # Mapping interface

    def _key(self, key: Any) -> Enum:
        try:
            return self.spec.key_type(key)
        except ValueError:
            raise KeyError(key) from None

    def __getitem__(self, key: Any) -> Any:
        return self._entries[self._key(key)].value

    def get(self, key: Any, default: Any = None) -> Any:
        entry = self._entries.get(self._key(key))
        return default if entry is None else entry.value

    def entry(self, key: Any) -> Optional[DictionaryEntry]:
        return self._entries.get(self._key(key))

    def __setitem__(self, key: Any, value: Any) -> None:
        key = self._key(key)
        if value is None:
            self._remove(key)
            return
        entry = self._entries.get(key)
        if entry is not None:
            entry.set_field("value", value)
        else:
            self._add(self.spec.entry_class(key=key, value=value))

    def __delitem__(self, key: Any) -> None:
        key = self._key(key)
        if key not in self._entries:
            raise KeyError(key)
        self._remove(key)

    def __contains__(self, key: Any) -> bool:
        try:
            return self._key(key) in self._entries
        except KeyError:
            return False

    def __iter__(self) -> Iterator[Enum]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def keys(self) -> List[Enum]:
        return list(self._entries)

    def items(self) -> List[Tuple[Enum, Any]]:
        return [(key, entry.value) for key, entry in self._entries.items()]

    # Change classification

    @property
    def added_keys(self) -> List[Enum]:
        return list(self._added)

    @property
    def modified_keys(self) -> List[Enum]:
        return list(self._modified)

    @property
    def removed_keys(self) -> List[Enum]:
        return list(self._removed)

    def _add(self, entry: DictionaryEntry) -> None:
        key = self._key(entry.key)
        entry.add_observer(self._entry_changed)
        self._entries[key] = entry
        if key in self._removed:
            # The server still has the old entry, so this is an overwrite
            del self._removed[key]
            self._modified[key] = None
        else:
            self._added[key] = None
        self.changed()

    def _remove(self, key: Enum) -> None:
        entry = self._entries.pop(key, None)
        if entry is None:
            return
        entry.remove_observer(self._entry_changed)
        self._modified.pop(key, None)
        if key in self._added:
            del self._added[key]
        else:
            self._removed[key] = entry
        self.changed()

    def _entry_changed(self, entry: PropertyNode) -> None:
        key = self._key(entry.key)
        if key not in self._added:
            self._modified[key] = None
        self.changed()

    def clear_change_log(self) -> None:
        self._added.clear()
        self._modified.clear()
        self._removed.clear()
        for entry in self._entries.values():
            entry.clear_change_log()
        super().clear_change_log()

    # XML

    def try_read_element(self, reader: XmlReader) -> bool:
        if reader.local_name != self.spec.entry_element:
            return False
        entry = self.spec.entry_class()
        entry.load_from(reader, TYPES, self.spec.entry_element)
        try:
            key = self._key(entry.key)
        except KeyError:
            logger.debug(f"Skipping {self.spec.entry_element} with unknown key {entry.key!r}")
            return True
        entry.add_observer(self._entry_changed)
        self._entries[key] = entry
        return True

    def try_read_element_for_patch(self, reader: XmlReader) -> bool:
        return self.try_read_element(reader)

    def write_elements(self, writer: XmlWriter) -> None:
        for entry in self._entries.values():
            entry.write_to(writer, TYPES, self.spec.entry_element)

    def has_content(self) -> bool:
        return bool(self._entries)

    def serialize_update(self, writer: XmlWriter, owner, owner_field_name: str) -> int:
        """Write the minimal update for the keys touched since the last clear.

        Added and modified keys each produce a set-field fragment carrying
        the field identity and a single-entry copy of this dictionary inside
        the owner's element; removed keys each produce a delete-field
        fragment.

        Args:
            writer: Destination of the fragments
            owner: Service object holding this field; supplies the wrapper
                element names
            owner_field_name: Element name of this field inside the owner

        Returns:
            Number of fragments written
        """
        count = 0
        for key in list(self._added) + list(self._modified):
            writer.write_start_element(TYPES, owner.set_field_element_name)
            IndexedPropertyDefinition(self.spec.field_uri, field_index=key.value).write_to(writer)
            writer.write_start_element(TYPES, owner.element_name)
            writer.write_start_element(TYPES, owner_field_name)
            self._entries[key].write_to(writer, TYPES, self.spec.entry_element)
            writer.write_end_element()
            writer.write_end_element()
            writer.write_end_element()
            count += 1
        for key in self._removed:
            writer.write_start_element(TYPES, owner.delete_field_element_name)
            IndexedPropertyDefinition(self.spec.field_uri, field_index=key.value).write_to(writer)
            writer.write_end_element()
            count += 1
        return count

    def to_dict(self) -> Dict[str, Any]:
        return {key.value: entry.value for key, entry in self._entries.items()}

    def __repr__(self) -> str:
        return f"DictionaryField({self.spec.field_uri!r}, {self.to_dict()!r})"
