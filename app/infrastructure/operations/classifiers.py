"""Error classifiers for driver exceptions.

Converts driver-specific exceptions (psycopg, botocore) into standardized
OperationResult objects so that the broker and sweeper can branch on status
instead of exception types.

Usage:
    from infrastructure.operations.classifiers import classify_postgres_error

    try:
        cursor.execute(statement)
    except psycopg.Error as exc:
        return classify_postgres_error(exc)
"""

import psycopg
from psycopg import errors as pg_errors
from botocore.exceptions import ClientError

from infrastructure.operations.result import OperationResult
from infrastructure.operations.status import OperationStatus

AWS_THROTTLING_CODES = frozenset(
    {
        "ThrottlingException",
        "Throttling",
        "RequestLimitExceeded",
        "ProvisionedThroughputExceededException",
    }
)


def classify_postgres_error(exc: Exception) -> OperationResult:
    """Classify psycopg errors into OperationResult.

    Error Mapping:
    - InsufficientPrivilege: broker role lacks CREATEROLE or grant rights → UNAUTHORIZED
    - UndefinedObject: role referenced by a statement does not exist → NOT_FOUND
    - DuplicateObject: role name collision → PERMANENT_ERROR
    - OperationalError: connection refused, admin shutdown, timeout → TRANSIENT_ERROR
    - Other psycopg.Error: syntax or constraint failure → PERMANENT_ERROR
    - Anything else → PERMANENT_ERROR

    Args:
        exc: Exception raised while talking to PostgreSQL

    Returns:
        OperationResult with status, message and error_code
    """
    sqlstate = getattr(exc, "sqlstate", None)

    if isinstance(exc, pg_errors.InsufficientPrivilege):
        return OperationResult.error(
            OperationStatus.UNAUTHORIZED,
            f"Insufficient privilege: {exc}",
            error_code="INSUFFICIENT_PRIVILEGE",
        )

    if isinstance(exc, pg_errors.UndefinedObject):
        return OperationResult.error(
            OperationStatus.NOT_FOUND,
            f"Database object not found: {exc}",
            error_code="UNDEFINED_OBJECT",
        )

    if isinstance(exc, pg_errors.DuplicateObject):
        return OperationResult.permanent_error(
            f"Database object already exists: {exc}",
            error_code="DUPLICATE_OBJECT",
        )

    if isinstance(exc, psycopg.OperationalError):
        return OperationResult.transient_error(
            f"Database unavailable: {exc}",
            error_code="CONNECTION_ERROR",
        )

    if isinstance(exc, psycopg.Error):
        return OperationResult.permanent_error(
            f"Database error: {exc}",
            error_code=sqlstate or "DATABASE_ERROR",
        )

    return OperationResult.permanent_error(
        f"Unexpected database error: {type(exc).__name__}: {exc}",
        error_code="UNKNOWN_ERROR",
    )


def classify_aws_error(exc: Exception) -> OperationResult:
    """Classify AWS SDK errors into OperationResult.

    Error Code Mapping:
    - Throttling family: TRANSIENT_ERROR with retry_after
    - AccessDeniedException: UNAUTHORIZED
    - ResourceNotFoundException: NOT_FOUND (table missing)
    - ConditionalCheckFailedException: PERMANENT_ERROR, code preserved so
      claim logic can tell a lost race from a real failure
    - ValidationException: PERMANENT_ERROR
    - Other ClientError: TRANSIENT_ERROR (AWS convention)
    - Non-ClientError (connection, timeout): TRANSIENT_ERROR

    Args:
        exc: Exception raised by boto3/botocore

    Returns:
        OperationResult with status, message, error_code and retry_after
    """
    if not isinstance(exc, ClientError):
        return OperationResult.transient_error(
            f"AWS connection error: {type(exc).__name__}: {str(exc)}",
            error_code="CONNECTION_ERROR",
        )

    error = exc.response.get("Error", {}) if exc.response else {}
    error_code = error.get("Code", "Unknown")
    error_message = error.get("Message", str(exc))

    if error_code in AWS_THROTTLING_CODES:
        retry_after = 60
        try:
            retry_after = int(exc.response.get("RetryAfter", retry_after))
        except (TypeError, ValueError):
            pass
        return OperationResult.error(
            OperationStatus.TRANSIENT_ERROR,
            f"AWS API throttled: {error_message}",
            error_code=error_code,
            retry_after=retry_after,
        )

    if error_code in ("AccessDeniedException", "UnauthorizedOperation"):
        return OperationResult.error(
            OperationStatus.UNAUTHORIZED,
            f"AWS API access denied: {error_message}",
            error_code=error_code,
        )

    if error_code == "ResourceNotFoundException":
        return OperationResult.error(
            OperationStatus.NOT_FOUND,
            f"AWS resource not found: {error_message}",
            error_code=error_code,
        )

    if error_code in (
        "ConditionalCheckFailedException",
        "ValidationException",
        "TransactionCanceledException",
    ):
        return OperationResult.permanent_error(error_message, error_code=error_code)

    return OperationResult.transient_error(
        f"AWS client error: {error_message}",
        error_code=error_code,
    )
