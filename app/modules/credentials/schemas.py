"""API contracts for the credentials module (Pydantic)."""

from datetime import datetime
from typing import Annotated, List, Optional

from pydantic import BaseModel, Field

from modules.credentials.models import (
    IssuedCredential,
    Lease,
    LeaseStatus,
    RoleDefinition,
)


class IssueRequest(BaseModel):
    """Schema for requesting a credential."""

    ttl_seconds: Annotated[
        Optional[int],
        Field(
            default=None,
            description="Requested lease duration; capped at the role's max_ttl",
            json_schema_extra={"example": 3600},
        ),
    ] = None


class RenewRequest(BaseModel):
    """Schema for renewing a lease."""

    increment_seconds: Annotated[
        Optional[int],
        Field(
            default=None,
            description="Seconds from now; defaults to the role's default_ttl",
            json_schema_extra={"example": 1800},
        ),
    ] = None


class RevokeTenantRequest(BaseModel):
    """Schema for revoking all leases of a tenant."""

    role: Annotated[
        Optional[str],
        Field(default=None, description="Only revoke leases of this role"),
    ] = None


class RoleResponse(BaseModel):
    """Public view of a role definition. Statements are not exposed."""

    tenant: str
    name: str
    database: str
    default_ttl: int
    max_ttl: int
    bound_service_accounts: List[str]

    @classmethod
    def from_role(cls, role: RoleDefinition) -> "RoleResponse":
        return cls(
            tenant=role.tenant,
            name=role.name,
            database=role.database,
            default_ttl=role.default_ttl,
            max_ttl=role.max_ttl,
            bound_service_accounts=list(role.bound_service_accounts),
        )


class LeaseResponse(BaseModel):
    """Lease metadata. Never includes the password."""

    lease_id: str
    tenant: str
    role: str
    database: str
    username: str
    status: LeaseStatus
    requested_by: str
    issued_at: datetime
    expires_at: datetime
    max_expires_at: datetime
    revoke_attempts: int = 0
    last_error: Optional[str] = None
    next_attempt_at: Optional[datetime] = None
    revoked_at: Optional[datetime] = None

    @classmethod
    def from_lease(cls, lease: Lease) -> "LeaseResponse":
        return cls(
            lease_id=lease.lease_id,
            tenant=lease.tenant,
            role=lease.role,
            database=lease.database,
            username=lease.username,
            status=lease.status,
            requested_by=lease.requested_by,
            issued_at=lease.issued_at,
            expires_at=lease.expires_at,
            max_expires_at=lease.max_expires_at,
            revoke_attempts=lease.revoke_attempts,
            last_error=lease.last_error,
            next_attempt_at=lease.next_attempt_at,
            revoked_at=lease.revoked_at,
        )


class CredentialResponse(BaseModel):
    """Issued credential, returned exactly once."""

    lease_id: str
    lease_duration: int = Field(description="Seconds until the lease expires")
    username: str
    password: str
    lease: LeaseResponse

    @classmethod
    def from_credential(
        cls, credential: IssuedCredential, now: datetime
    ) -> "CredentialResponse":
        return cls(
            lease_id=credential.lease.lease_id,
            lease_duration=credential.lease.ttl_seconds(now),
            username=credential.username,
            password=credential.password,
            lease=LeaseResponse.from_lease(credential.lease),
        )


class RevokeTenantResponse(BaseModel):
    tenant: str
    role: Optional[str] = None
    revoked: int
    failed: int


class LeaseStatsResponse(BaseModel):
    active: int = 0
    revoked: int = 0
    failed: int = 0
    total: int = 0
