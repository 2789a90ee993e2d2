"""Fixtures for credential broker module tests."""

from unittest.mock import MagicMock

import pytest

from infrastructure.clients.postgres import PostgresClient
from infrastructure.configuration.infrastructure import SweeperSettings
from infrastructure.operations import OperationResult
from modules.credentials.broker import CredentialBroker
from modules.credentials.store import InMemoryLeaseStore


@pytest.fixture
def mock_postgres():
    """PostgresClient double whose statements always succeed."""
    client = MagicMock(spec=PostgresClient)
    client.execute.return_value = OperationResult.success(
        data={"executed": 1, "skipped": 0}
    )
    return client


@pytest.fixture
def memory_store():
    return InMemoryLeaseStore()


@pytest.fixture
def clock(clock_factory):
    return clock_factory()


@pytest.fixture
def broker(registry, memory_store, mock_postgres, clock):
    return CredentialBroker(
        registry=registry,
        store=memory_store,
        postgres=mock_postgres,
        clock=clock,
    )


@pytest.fixture
def sweeper_settings():
    """Sweeper settings with small, predictable backoff values."""
    return SweeperSettings(
        SWEEPER_BATCH_SIZE=10,
        SWEEPER_CLAIM_LEASE_SECONDS=60,
        SWEEPER_MAX_ATTEMPTS=3,
        SWEEPER_BASE_DELAY_SECONDS=15,
        SWEEPER_MAX_DELAY_SECONDS=900,
    )
