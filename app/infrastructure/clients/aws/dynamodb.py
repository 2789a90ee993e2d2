"""DynamoDB client for AWS operations.

Provides access to the DynamoDB operations the lease store needs
(get_item, put_item, update_item, paginated query and scan) with consistent
error handling and OperationResult return types.
"""

from typing import Any, Dict

from infrastructure.clients.aws.client import execute_aws_api_call
from infrastructure.clients.aws.session_provider import SessionProvider
from infrastructure.operations.result import OperationResult


class DynamoDBClient:
    """Client for DynamoDB operations.

    All methods return OperationResult. Keys and items use the low-level
    DynamoDB attribute format (e.g. {"lease_id": {"S": "..."}}).

    Args:
        session_provider: SessionProvider instance for region/endpoint config
    """

    def __init__(self, session_provider: SessionProvider) -> None:
        self._session_provider = session_provider
        self._service_name = "dynamodb"

    def _call(self, method: str, **kwargs) -> OperationResult:
        return execute_aws_api_call(
            self._service_name,
            method,
            **self._session_provider.build_client_kwargs(),
            **kwargs,
        )

    def get_item(
        self, table_name: str, Key: Dict[str, Any], **kwargs
    ) -> OperationResult:
        """Get an item by primary key. `data` is the raw response."""
        return self._call("get_item", TableName=table_name, Key=Key, **kwargs)

    def put_item(
        self, table_name: str, Item: Dict[str, Any], **kwargs
    ) -> OperationResult:
        """Put an item. Pass ConditionExpression in kwargs for guarded writes."""
        return self._call("put_item", TableName=table_name, Item=Item, **kwargs)

    def update_item(
        self, table_name: str, Key: Dict[str, Any], **kwargs
    ) -> OperationResult:
        """Update an item (UpdateExpression, ConditionExpression, etc. in kwargs)."""
        return self._call("update_item", TableName=table_name, Key=Key, **kwargs)

    def query_all(
        self, table_name: str, KeyConditionExpression: str, **kwargs
    ) -> OperationResult:
        """Query every page. `data` is a flat list of items."""
        return self._call(
            "query",
            TableName=table_name,
            KeyConditionExpression=KeyConditionExpression,
            force_paginate=True,
            keys=["Items"],
            **kwargs,
        )

    def scan_all(self, table_name: str, **kwargs) -> OperationResult:
        """Scan every page of the table. `data` is a flat list of items."""
        return self._call(
            "scan",
            TableName=table_name,
            force_paginate=True,
            keys=["Items"],
            **kwargs,
        )

    def healthcheck(self) -> OperationResult:
        """Cheap `list_tables` call to verify DynamoDB is reachable."""
        return self._call("list_tables", max_retries=0, Limit=1)
