"""Operation status enumeration.

Status codes shared by every broker operation, database call and storage
call. Callers branch on these rather than on exception types.
"""

from enum import Enum


class OperationStatus(Enum):
    """Status codes for operation results.

    Attributes:
        SUCCESS: Operation completed successfully
        TRANSIENT_ERROR: Retryable error (connection lost, throttled, timeout)
        PERMANENT_ERROR: Non-retryable error (bad input, failed statement)
        UNAUTHORIZED: Caller or broker lacks the required privilege
        NOT_FOUND: Role, lease or database not found
    """

    SUCCESS = "success"
    TRANSIENT_ERROR = "transient_error"
    PERMANENT_ERROR = "permanent_error"
    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"
