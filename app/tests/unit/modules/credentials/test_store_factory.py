"""Unit tests for the lease store factory."""

from unittest.mock import MagicMock

import pytest

from infrastructure.clients.aws import DynamoDBClient
from infrastructure.configuration.infrastructure import LeaseStoreSettings
from modules.credentials.store import (
    DynamoDBLeaseStore,
    InMemoryLeaseStore,
    create_lease_store,
)


@pytest.mark.unit
class TestCreateLeaseStore:
    def test_memory_backend(self):
        store = create_lease_store(LeaseStoreSettings(LEASE_STORE_BACKEND="memory"))
        assert isinstance(store, InMemoryLeaseStore)

    def test_dynamodb_backend(self):
        settings = LeaseStoreSettings(
            LEASE_STORE_BACKEND="dynamodb",
            LEASE_STORE_TABLE_NAME="leases",
            LEASE_STORE_RETENTION_DAYS=3,
        )

        store = create_lease_store(settings, dynamodb_client=MagicMock(spec=DynamoDBClient))

        assert isinstance(store, DynamoDBLeaseStore)
        assert store.table_name == "leases"
        assert store.retention_days == 3

    def test_dynamodb_requires_client(self):
        with pytest.raises(ValueError, match="requires a DynamoDBClient"):
            create_lease_store(LeaseStoreSettings(LEASE_STORE_BACKEND="dynamodb"))

    def test_backend_override(self):
        settings = LeaseStoreSettings(LEASE_STORE_BACKEND="dynamodb")
        store = create_lease_store(settings, backend="memory")
        assert isinstance(store, InMemoryLeaseStore)

    def test_unknown_backend(self):
        with pytest.raises(ValueError, match="Unknown lease store backend"):
            create_lease_store(LeaseStoreSettings(LEASE_STORE_BACKEND="redis"))
