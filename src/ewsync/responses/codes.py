"""Response codes the client gives special meaning to.

Codes arrive as free text; comparing them with these members works because
the enum is a ``str`` subclass.
"""

from enum import Enum


class ServiceError(str, Enum):
    NO_ERROR = "NoError"
    ERROR_ACCESS_DENIED = "ErrorAccessDenied"
    ERROR_BATCH_PROCESSING_STOPPED = "ErrorBatchProcessingStopped"
    ERROR_CONNECTION_FAILED = "ErrorConnectionFailed"
    ERROR_EXPIRED_SUBSCRIPTION = "ErrorExpiredSubscription"
    ERROR_INTERNAL_SERVER_ERROR = "ErrorInternalServerError"
    ERROR_INVALID_CHANGE_KEY = "ErrorInvalidChangeKey"
    ERROR_INVALID_ID_MALFORMED = "ErrorInvalidIdMalformed"
    ERROR_INVALID_PROPERTY_SET = "ErrorInvalidPropertySet"
    ERROR_INVALID_REQUEST = "ErrorInvalidRequest"
    ERROR_INVALID_SUBSCRIPTION = "ErrorInvalidSubscription"
    ERROR_INVALID_SYNC_STATE_DATA = "ErrorInvalidSyncStateData"
    ERROR_IRRESOLVABLE_CONFLICT = "ErrorIrresolvableConflict"
    ERROR_ITEM_NOT_FOUND = "ErrorItemNotFound"
    ERROR_MISSED_NOTIFICATION_EVENTS = "ErrorMissedNotificationEvents"
    ERROR_NAME_RESOLUTION_NO_RESULTS = "ErrorNameResolutionNoResults"
    ERROR_SCHEMA_VALIDATION = "ErrorSchemaValidation"
    ERROR_SERVER_BUSY = "ErrorServerBusy"
    ERROR_SUBSCRIPTION_NOT_FOUND = "ErrorSubscriptionNotFound"
    ERROR_TIMEOUT_EXPIRED = "ErrorTimeoutExpired"


# Messages replacing the server text for codes whose text is unhelpful
ERROR_MESSAGE_OVERRIDES = {
    ServiceError.ERROR_IRRESOLVABLE_CONFLICT.value:
        "The operation can't be performed because the item is out of date. Reload the item and try again.",
}


def map_error_code_to_message(error_code: str, message: str) -> str:
    return ERROR_MESSAGE_OVERRIDES.get(error_code, message)
