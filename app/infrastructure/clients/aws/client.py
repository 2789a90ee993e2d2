"""Base AWS client utilities.

Provides `get_boto3_client` and `execute_aws_api_call` with the
OperationResult pattern. Settings are never read at import time; region and
endpoint are passed in by the caller (normally via SessionProvider).
"""

import time
from typing import Any, Dict, List, Optional

import boto3  # type: ignore
from botocore.client import BaseClient  # type: ignore
from botocore.exceptions import BotoCoreError, ClientError  # type: ignore
import structlog

from infrastructure.operations.classifiers import classify_aws_error
from infrastructure.operations.result import OperationResult
from infrastructure.operations.status import OperationStatus

logger = structlog.get_logger()


def get_boto3_client(
    service_name: str,
    session_config: Optional[Dict[str, Any]] = None,
    client_config: Optional[Dict[str, Any]] = None,
) -> BaseClient:
    """Create a boto3 client for the given service.

    Args:
        service_name: AWS service name (e.g., 'dynamodb')
        session_config: Optional boto3 session kwargs (e.g., region_name)
        client_config: Optional client kwargs (e.g., endpoint_url)

    Returns:
        botocore client instance
    """
    session = boto3.Session(**(session_config or {}))
    return session.client(service_name, **(client_config or {}))


def _calculate_retry_delay(attempt: int, backoff_factor: float = 0.5) -> float:
    return backoff_factor * (2**attempt)


def _call_api_once(
    service_name: str,
    method: str,
    keys: Optional[List[str]],
    session_config: Optional[Dict[str, Any]],
    client_config: Optional[Dict[str, Any]],
    force_paginate: bool,
    kwargs: Dict[str, Any],
) -> Any:
    client = get_boto3_client(
        service_name,
        session_config=session_config,
        client_config=client_config,
    )

    if force_paginate and client.can_paginate(method):
        paginator = client.get_paginator(method)
        results: List[Any] = []
        for page in paginator.paginate(**kwargs):
            for k in keys or []:
                if isinstance(page.get(k), list):
                    results.extend(page[k])
        return results

    return getattr(client, method)(**kwargs)


def execute_aws_api_call(
    service_name: str,
    method: str,
    keys: Optional[List[str]] = None,
    session_config: Optional[Dict[str, Any]] = None,
    client_config: Optional[Dict[str, Any]] = None,
    max_retries: int = 3,
    force_paginate: bool = False,
    backoff_factor: float = 0.5,
    **kwargs,
) -> OperationResult:
    """Execute an AWS API call with retries and standardized results.

    Transient failures (throttling, 5xx, connection errors) are retried with
    exponential backoff. Everything else is returned immediately as classified
    by `classify_aws_error`.

    Args:
        service_name: AWS service name
        method: client method name, e.g. 'update_item'
        keys: response keys to collect when paginating
        force_paginate: iterate the method's paginator and return a flat list
        max_retries: attempts after the first one for transient errors
        **kwargs: passed through to the boto3 method

    Returns:
        OperationResult whose data is the raw boto3 response (or list when
        paginated)
    """
    mapped: Optional[OperationResult] = None

    for attempt in range(max_retries + 1):
        try:
            result = _call_api_once(
                service_name,
                method,
                keys,
                session_config,
                client_config,
                force_paginate,
                kwargs,
            )
            return OperationResult.success(
                data=result, message=f"{service_name}.{method} succeeded"
            )

        except (ClientError, BotoCoreError) as e:
            mapped = classify_aws_error(e)

            if (
                mapped.status == OperationStatus.TRANSIENT_ERROR
                and attempt < max_retries
            ):
                delay = _calculate_retry_delay(attempt, backoff_factor)
                logger.warning(
                    "aws_api_retry",
                    service=service_name,
                    method=method,
                    attempt=attempt + 1,
                    error=str(e),
                    delay=delay,
                )
                time.sleep(delay)
                continue

            # Lost conditional writes are routine for claims
            if mapped.error_code == "ConditionalCheckFailedException":
                logger.debug(
                    "aws_api_condition_failed", service=service_name, method=method
                )
            else:
                logger.error(
                    "aws_api_error_final",
                    service=service_name,
                    method=method,
                    error=str(e),
                    error_code=mapped.error_code,
                )
            return mapped

    return mapped or OperationResult.permanent_error(message="unknown_error")
