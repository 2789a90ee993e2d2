"""Operation result types and status enums.

Standardized result types shared by the broker, lease stores and clients,
plus classifiers that turn driver exceptions into results.
"""

from infrastructure.operations.classifiers import (
    classify_aws_error,
    classify_postgres_error,
)
from infrastructure.operations.result import OperationResult
from infrastructure.operations.status import OperationStatus

__all__ = [
    "OperationResult",
    "OperationStatus",
    "classify_aws_error",
    "classify_postgres_error",
]
