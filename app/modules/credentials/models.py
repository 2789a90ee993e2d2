"""Internal data models for the credentials module.

Lightweight dataclasses (not Pydantic) shared by the broker, the lease
stores and the sweeper. API contracts live in schemas.py.

Key distinctions:
  - RoleDefinition: static role templates loaded from the roles file
  - Lease: the durable record of one issued credential (never the password)
  - IssuedCredential: what the caller receives once, at issue time
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional


class LeaseStatus(str, Enum):
    """Lifecycle of a lease.

    Values:
        ACTIVE: database role exists, or revocation is still being retried
        REVOKED: revocation statements ran successfully
        FAILED: sweeper gave up after max attempts, needs an operator
    """

    ACTIVE = "ACTIVE"
    REVOKED = "REVOKED"
    FAILED = "FAILED"


@dataclass(frozen=True)
class RoleDefinition:
    """A tenant role that credentials can be issued for."""

    tenant: str
    name: str
    database: str
    creation_statements: List[str]
    revocation_statements: List[str]
    default_ttl: int
    max_ttl: int
    renew_statements: List[str] = field(default_factory=list)
    bound_service_accounts: List[str] = field(default_factory=list)

    @property
    def key(self) -> str:
        return f"{self.tenant}/{self.name}"


@dataclass
class Lease:
    """Record of an issued credential.

    Fields:
        lease_id: `{tenant}/{role}/{uuid4 hex}`
        revocation_statements: already rendered for `username`
        max_expires_at: hard ceiling for renewals
        revoke_attempts, last_error, next_attempt_at: sweeper bookkeeping
    """

    lease_id: str
    tenant: str
    role: str
    database: str
    username: str
    issued_at: datetime
    expires_at: datetime
    max_expires_at: datetime
    revocation_statements: List[str]
    requested_by: str
    status: LeaseStatus = LeaseStatus.ACTIVE
    revoke_attempts: int = 0
    last_error: Optional[str] = None
    next_attempt_at: Optional[datetime] = None
    revoked_at: Optional[datetime] = None

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at <= now

    def is_due(self, now: datetime) -> bool:
        """True when the sweeper should attempt revocation."""
        return (
            self.status == LeaseStatus.ACTIVE
            and self.expires_at <= now
            and (self.next_attempt_at is None or self.next_attempt_at <= now)
        )

    def ttl_seconds(self, now: datetime) -> int:
        return max(0, int((self.expires_at - now).total_seconds()))


@dataclass
class IssuedCredential:
    """Username and password for a new lease. Returned to the caller once."""

    lease: Lease
    username: str
    password: str = field(repr=False)
