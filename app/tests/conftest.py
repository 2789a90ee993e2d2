"""Shared fixtures for credential broker tests."""

from datetime import datetime, timedelta, timezone
from typing import List, Optional

import pytest

from infrastructure.security.workload_identity import WorkloadIdentity
from modules.credentials.models import Lease, LeaseStatus, RoleDefinition
from modules.credentials.roles import RoleRegistry

FIXED_NOW = datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def clock_factory():
    """Factory for mutable clocks: `clock.now` can be moved by tests."""

    class Clock:
        def __init__(self, now: datetime):
            self.now = now

        def __call__(self) -> datetime:
            return self.now

        def advance(self, seconds: int) -> None:
            self.now = self.now + timedelta(seconds=seconds)

    def _factory(now: datetime = FIXED_NOW) -> Clock:
        return Clock(now)

    return _factory


@pytest.fixture
def identity_factory():
    """Factory for WorkloadIdentity instances."""

    def _factory(
        namespace: str = "acme-api",
        service_account: str = "reporting",
        is_admin: bool = False,
        subject: Optional[str] = None,
    ) -> WorkloadIdentity:
        return WorkloadIdentity(
            subject=subject
            or f"system:serviceaccount:{namespace}:{service_account}",
            namespace=namespace,
            service_account=service_account,
            is_admin=is_admin,
        )

    return _factory


@pytest.fixture
def role_factory():
    """Factory for RoleDefinition instances."""

    def _factory(
        tenant: str = "acme",
        name: str = "readonly",
        database: str = "acme",
        default_ttl: int = 3600,
        max_ttl: int = 86400,
        creation_statements: Optional[List[str]] = None,
        revocation_statements: Optional[List[str]] = None,
        renew_statements: Optional[List[str]] = None,
        bound_service_accounts: Optional[List[str]] = None,
    ) -> RoleDefinition:
        return RoleDefinition(
            tenant=tenant,
            name=name,
            database=database,
            default_ttl=default_ttl,
            max_ttl=max_ttl,
            creation_statements=creation_statements
            or [
                "CREATE ROLE \"{{name}}\" WITH LOGIN PASSWORD '{{password}}' "
                "VALID UNTIL '{{expiration}}'",
                'GRANT acme_readonly TO "{{name}}"',
            ],
            revocation_statements=revocation_statements
            or ['DROP ROLE IF EXISTS "{{name}}"'],
            renew_statements=renew_statements or [],
            bound_service_accounts=(
                ["acme-api:reporting"]
                if bound_service_accounts is None
                else bound_service_accounts
            ),
        )

    return _factory


@pytest.fixture
def lease_factory():
    """Factory for Lease instances."""

    def _factory(
        lease_id: str = "acme/readonly/0123456789abcdef0123456789abcdef",
        issued_at: datetime = FIXED_NOW,
        ttl: int = 3600,
        max_ttl: int = 86400,
        status: LeaseStatus = LeaseStatus.ACTIVE,
        requested_by: str = "system:serviceaccount:acme-api:reporting",
        username: str = "v-acme-readonly-abcd1234",
        revoke_attempts: int = 0,
        next_attempt_at: Optional[datetime] = None,
        tenant: str = "acme",
        role: str = "readonly",
    ) -> Lease:
        return Lease(
            lease_id=lease_id,
            tenant=tenant,
            role=role,
            database="acme",
            username=username,
            issued_at=issued_at,
            expires_at=issued_at + timedelta(seconds=ttl),
            max_expires_at=issued_at + timedelta(seconds=max_ttl),
            revocation_statements=[f'DROP ROLE IF EXISTS "{username}"'],
            requested_by=requested_by,
            status=status,
            revoke_attempts=revoke_attempts,
            next_attempt_at=next_attempt_at,
        )

    return _factory


@pytest.fixture
def registry(role_factory) -> RoleRegistry:
    return RoleRegistry([role_factory()])
