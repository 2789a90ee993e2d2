"""Translate OperationResult failures into HTTP errors."""

from fastapi import HTTPException

from infrastructure.operations import OperationResult, OperationStatus

HTTP_STATUS_BY_RESULT = {
    OperationStatus.NOT_FOUND: 404,
    OperationStatus.UNAUTHORIZED: 403,
    OperationStatus.PERMANENT_ERROR: 400,
    OperationStatus.TRANSIENT_ERROR: 503,
}


def raise_for_result(result: OperationResult) -> None:
    """Raise an HTTPException unless the result is a success."""
    if result.is_success:
        return

    headers = None
    if result.status == OperationStatus.TRANSIENT_ERROR:
        headers = {"Retry-After": str(result.retry_after or 5)}

    raise HTTPException(
        status_code=HTTP_STATUS_BY_RESULT.get(result.status, 500),
        detail={"message": result.message, "error_code": result.error_code},
        headers=headers,
    )
