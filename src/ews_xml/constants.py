"""Namespaces, prefixes and element names of the EWS wire schema.

All XML identities are centralized here so readers and writers never
spell a namespace URI by hand.
"""

from enum import Enum
from typing import Dict, Set


class XmlNamespace(str, Enum):
    """Namespaces used by EWS SOAP messages."""
    NOT_SPECIFIED = ""
    MESSAGES = "http://schemas.microsoft.com/exchange/services/2006/messages"
    TYPES = "http://schemas.microsoft.com/exchange/services/2006/types"
    ERRORS = "http://schemas.microsoft.com/exchange/services/2006/errors"
    SOAP = "http://schemas.xmlsoap.org/soap/envelope/"
    SOAP12 = "http://www.w3.org/2003/05/soap-envelope"
    XML_SCHEMA_INSTANCE = "http://www.w3.org/2001/XMLSchema-instance"


# Prefixes emitted by the writer
NAMESPACE_PREFIXES: Dict[str, str] = {
    XmlNamespace.MESSAGES.value: "m",
    XmlNamespace.TYPES.value: "t",
    XmlNamespace.ERRORS.value: "e",
    XmlNamespace.SOAP.value: "soap",
    XmlNamespace.SOAP12.value: "soap12",
    XmlNamespace.XML_SCHEMA_INSTANCE.value: "xsi",
}

# Root used to hold back-to-back documents of a streaming body
FRAGMENT_ROOT = "ewsync-fragments"

# Envelope
ENVELOPE = "Envelope"
HEADER = "Header"
BODY = "Body"
FAULT = "Fault"
FAULT_CODE = "faultcode"
FAULT_STRING = "faultstring"
FAULT_ACTOR = "faultactor"
DETAIL = "detail"
SERVER_VERSION_INFO = "ServerVersionInfo"

# Response envelope
RESPONSE_MESSAGES = "ResponseMessages"
RESPONSE_CLASS = "ResponseClass"
MESSAGE_TEXT = "MessageText"
RESPONSE_CODE = "ResponseCode"
DESCRIPTIVE_LINK_KEY = "DescriptiveLinkKey"
MESSAGE_XML = "MessageXml"
VALUE = "Value"
NAME = "Name"
EXCEPTION_TYPE = "ExceptionType"
EXCEPTION_MESSAGE = "Message"
EXCEPTION_LINE_NUMBER = "LineNumber"
EXCEPTION_LINE_POSITION = "LinePosition"

# Field references
FIELD_URI = "FieldURI"
INDEXED_FIELD_URI = "IndexedFieldURI"
EXTENDED_FIELD_URI = "ExtendedFieldURI"
FIELD_INDEX = "FieldIndex"

# Identifiers
ID = "Id"
CHANGE_KEY = "ChangeKey"
KEY = "Key"
ITEM_ID = "ItemId"
FOLDER_ID = "FolderId"
PARENT_FOLDER_ID = "ParentFolderId"
OLD_ITEM_ID = "OldItemId"
OLD_FOLDER_ID = "OldFolderId"
OLD_PARENT_FOLDER_ID = "OldParentFolderId"
DISTINGUISHED_FOLDER_ID = "DistinguishedFolderId"

# Synchronization
SYNC_STATE = "SyncState"
INCLUDES_LAST_ITEM_IN_RANGE = "IncludesLastItemInRange"
INCLUDES_LAST_FOLDER_IN_RANGE = "IncludesLastFolderInRange"
CHANGES = "Changes"
CREATE = "Create"
UPDATE = "Update"
DELETE = "Delete"
READ_FLAG_CHANGE = "ReadFlagChange"
IS_READ = "IsRead"
SYNC_FOLDER_ID = "SyncFolderId"
MAX_CHANGES_RETURNED = "MaxChangesReturned"
IGNORE = "Ignore"

# Shapes
ITEM_SHAPE = "ItemShape"
FOLDER_SHAPE = "FolderShape"
BASE_SHAPE = "BaseShape"
ADDITIONAL_PROPERTIES = "AdditionalProperties"

# Updates
ITEM_CHANGES = "ItemChanges"
ITEM_CHANGE = "ItemChange"
UPDATES = "Updates"
SET_ITEM_FIELD = "SetItemField"
DELETE_ITEM_FIELD = "DeleteItemField"
FOLDER_CHANGES = "FolderChanges"
SET_FOLDER_FIELD = "SetFolderField"
DELETE_FOLDER_FIELD = "DeleteFolderField"
ENTRY = "Entry"

# Name resolution
RESOLUTION_SET = "ResolutionSet"
RESOLUTION = "Resolution"
MAILBOX = "Mailbox"
EMAIL_ADDRESS = "EmailAddress"
ROUTING_TYPE = "RoutingType"
MAILBOX_TYPE = "MailboxType"
UNRESOLVED_ENTRY = "UnresolvedEntry"
RETURN_FULL_CONTACT_DATA = "ReturnFullContactData"
TOTAL_ITEMS_IN_VIEW = "TotalItemsInView"
INCLUDES_LAST_ITEM_IN_RANGE_ATTR = "IncludesLastItemInRange"

# Notifications
NOTIFICATIONS = "Notifications"
NOTIFICATION = "Notification"
SUBSCRIPTION_ID = "SubscriptionId"
SUBSCRIPTION_IDS = "SubscriptionIds"
ERROR_SUBSCRIPTION_IDS = "ErrorSubscriptionIds"
CONNECTION_STATUS = "ConnectionStatus"
CONNECTION_TIMEOUT = "ConnectionTimeout"
TIME_STAMP = "TimeStamp"
WATERMARK = "Watermark"
UNREAD_COUNT = "UnreadCount"
COPIED_EVENT = "CopiedEvent"
CREATED_EVENT = "CreatedEvent"
DELETED_EVENT = "DeletedEvent"
MODIFIED_EVENT = "ModifiedEvent"
MOVED_EVENT = "MovedEvent"
NEW_MAIL_EVENT = "NewMailEvent"
STATUS_EVENT = "StatusEvent"
FREE_BUSY_CHANGED_EVENT = "FreeBusyChangedEvent"

# Operations
REQUEST_SERVER_VERSION = "RequestServerVersion"
VERSION = "Version"
SYNC_FOLDER_ITEMS = "SyncFolderItems"
SYNC_FOLDER_HIERARCHY = "SyncFolderHierarchy"
UPDATE_ITEM = "UpdateItem"
RESOLVE_NAMES = "ResolveNames"
GET_STREAMING_EVENTS = "GetStreamingEvents"
CONFLICT_RESOLUTION = "ConflictResolution"
MESSAGE_DISPOSITION = "MessageDisposition"
ITEMS = "Items"

# Attributes whose values are booleans on the wire
BOOLEAN_TRUE_VALUES: Set[str] = {"true", "1"}
BOOLEAN_FALSE_VALUES: Set[str] = {"false", "0"}
