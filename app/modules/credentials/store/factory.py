"""Factory for creating lease stores based on configuration."""

from typing import Optional

import structlog

from infrastructure.clients.aws import DynamoDBClient
from infrastructure.configuration.infrastructure import LeaseStoreSettings
from modules.credentials.store.base import LeaseStore
from modules.credentials.store.dynamodb import DynamoDBLeaseStore
from modules.credentials.store.memory import InMemoryLeaseStore

logger = structlog.get_logger()


def create_lease_store(
    settings: LeaseStoreSettings,
    dynamodb_client: Optional[DynamoDBClient] = None,
    backend: Optional[str] = None,
) -> LeaseStore:
    """Create the lease store for the configured backend.

    Args:
        settings: lease store settings section
        dynamodb_client: client used by the dynamodb backend
        backend: Optional backend override (memory, dynamodb).
                If None, uses settings.backend

    Raises:
        ValueError: If the backend is unknown, or dynamodb is selected
            without a client

    Examples:
        >>> store = create_lease_store(settings.lease_store, backend="memory")
    """
    backend = backend or settings.backend

    if backend == "memory":
        logger.info("creating_in_memory_lease_store")
        return InMemoryLeaseStore()

    if backend == "dynamodb":
        if dynamodb_client is None:
            raise ValueError("dynamodb lease store requires a DynamoDBClient")
        logger.info("creating_dynamodb_lease_store", table_name=settings.table_name)
        return DynamoDBLeaseStore(
            client=dynamodb_client,
            table_name=settings.table_name,
            retention_days=settings.retention_days,
        )

    raise ValueError(f"Unknown lease store backend: {backend}. Supported: memory, dynamodb")
