"""
Type aliases for FastAPI dependency injection.

Provides annotated type hints for common infrastructure dependencies.
"""

from typing import Annotated

from fastapi import Depends

from infrastructure.configuration import Settings
from infrastructure.security.jwks import JWKSManager
from infrastructure.services.providers import (
    get_broker,
    get_jwks_manager,
    get_role_registry,
    get_settings,
)
from modules.credentials.broker import CredentialBroker
from modules.credentials.roles import RoleRegistry

# Settings dependency
SettingsDep = Annotated[Settings, Depends(get_settings)]

# JWKS manager dependency
JWKSManagerDep = Annotated[JWKSManager, Depends(get_jwks_manager)]

# Broker dependencies
BrokerDep = Annotated[CredentialBroker, Depends(get_broker)]
RoleRegistryDep = Annotated[RoleRegistry, Depends(get_role_registry)]

__all__ = [
    "SettingsDep",
    "JWKSManagerDep",
    "BrokerDep",
    "RoleRegistryDep",
]
