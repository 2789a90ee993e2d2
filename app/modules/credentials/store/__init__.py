"""Lease storage backends.

Public API:
    - LeaseStore: storage protocol
    - LeaseStoreError: raised on backend failures
    - InMemoryLeaseStore / DynamoDBLeaseStore: implementations
    - create_lease_store(): backend selection from settings
"""

from modules.credentials.store.base import LeaseStore, LeaseStoreError
from modules.credentials.store.dynamodb import DynamoDBLeaseStore
from modules.credentials.store.factory import create_lease_store
from modules.credentials.store.memory import InMemoryLeaseStore

__all__ = [
    "LeaseStore",
    "LeaseStoreError",
    "InMemoryLeaseStore",
    "DynamoDBLeaseStore",
    "create_lease_store",
]
