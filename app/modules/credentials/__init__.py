"""Dynamic per-tenant database credentials.

Public API:
    - CredentialBroker: issue, renew, revoke and inspect leases
    - RevocationSweeper: background revocation of expired leases
    - RoleRegistry / RoleConfigurationError: role definitions from YAML
    - Lease, LeaseStatus, RoleDefinition, IssuedCredential: data models
"""

from modules.credentials.broker import CredentialBroker
from modules.credentials.models import (
    IssuedCredential,
    Lease,
    LeaseStatus,
    RoleDefinition,
)
from modules.credentials.roles import RoleConfigurationError, RoleRegistry
from modules.credentials.sweeper import RevocationSweeper

__all__ = [
    "CredentialBroker",
    "RevocationSweeper",
    "RoleRegistry",
    "RoleConfigurationError",
    "Lease",
    "LeaseStatus",
    "RoleDefinition",
    "IssuedCredential",
]
