"""
Dependency injection services.

Provides type aliases and provider functions for FastAPI dependency injection.
"""

from infrastructure.services.dependencies import (
    BrokerDep,
    JWKSManagerDep,
    RoleRegistryDep,
    SettingsDep,
)
from infrastructure.services.providers import (
    get_broker,
    get_dynamodb_client,
    get_jwks_manager,
    get_lease_store,
    get_postgres_client,
    get_role_registry,
    get_settings,
    get_sweeper,
)

__all__ = [
    "SettingsDep",
    "JWKSManagerDep",
    "BrokerDep",
    "RoleRegistryDep",
    "get_settings",
    "get_jwks_manager",
    "get_postgres_client",
    "get_dynamodb_client",
    "get_lease_store",
    "get_role_registry",
    "get_broker",
    "get_sweeper",
]
