"""Credential broker.

Issues short-lived database credentials for tenant roles, tracks each one as
a lease and revokes it on request. Expired leases are revoked by the
RevocationSweeper.

All public operations return OperationResult:
    - SUCCESS: data carries the credential, lease, list or counts
    - NOT_FOUND: unknown role or lease
    - UNAUTHORIZED: caller is not bound to the role, not the lease owner,
      or not an admin
    - PERMANENT_ERROR: invalid request or rejected SQL
    - TRANSIENT_ERROR: database or lease store unavailable
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional, Tuple

from infrastructure.clients.postgres import PostgresClient
from infrastructure.logging import get_module_logger
from infrastructure.operations import OperationResult, OperationStatus
from infrastructure.security.workload_identity import WorkloadIdentity
from modules.credentials.generator import generate_password, generate_username
from modules.credentials.models import IssuedCredential, Lease, LeaseStatus
from modules.credentials.roles import RoleRegistry
from modules.credentials.statements import StatementRenderError, render_statements
from modules.credentials.store import LeaseStore, LeaseStoreError

logger = get_module_logger()

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def execute_revocation(postgres: PostgresClient, lease: Lease) -> OperationResult:
    """Run a lease's revocation statements.

    Statements run one by one in autocommit mode. A role that no longer
    exists counts as already revoked.
    """
    result = postgres.execute(
        lease.database,
        lease.revocation_statements,
        transactional=False,
        ignore_missing=True,
    )
    if result.status == OperationStatus.NOT_FOUND and (
        result.error_code == "UNDEFINED_OBJECT"
    ):
        return OperationResult.success(message="Database role already absent")
    return result


class CredentialBroker:
    """Issue, renew and revoke dynamic database credentials.

    Args:
        registry: role definitions
        store: lease store backend
        postgres: client for the target databases
        username_prefix: first segment of generated usernames
        password_length: generated password length
        clock: returns the current UTC time
    """

    def __init__(
        self,
        registry: RoleRegistry,
        store: LeaseStore,
        postgres: PostgresClient,
        username_prefix: str = "v",
        password_length: int = 32,
        clock: Optional[Clock] = None,
    ) -> None:
        self.registry = registry
        self.store = store
        self.postgres = postgres
        self.username_prefix = username_prefix
        self.password_length = password_length
        self._clock = clock or utc_now

    def issue(
        self,
        tenant: str,
        role_name: str,
        identity: WorkloadIdentity,
        ttl: Optional[int] = None,
    ) -> OperationResult:
        """Create a database role and record its lease.

        `ttl` defaults to the role's default_ttl and is capped at max_ttl.
        """
        log = logger.bind(tenant=tenant, role=role_name, subject=identity.subject)

        role = self.registry.get(tenant, role_name)
        if role is None:
            return OperationResult.not_found(f"Role {tenant}/{role_name} not found")

        if not self.registry.is_bound(role, identity):
            log.warning("credential_issue_denied")
            return OperationResult.unauthorized(
                f"Caller is not bound to role {role.key}"
            )

        if ttl is not None and ttl <= 0:
            return OperationResult.permanent_error(
                "ttl must be a positive number of seconds", error_code="INVALID_TTL"
            )
        effective_ttl = min(ttl or role.default_ttl, role.max_ttl)

        now = self._clock()
        expires_at = now + timedelta(seconds=effective_ttl)
        username = generate_username(self.username_prefix, tenant, role.name)
        password = generate_password(self.password_length)

        try:
            creation = render_statements(
                role.creation_statements,
                name=username,
                tenant=tenant,
                password=password,
                expiration=expires_at,
            )
            revocation = render_statements(
                role.revocation_statements,
                name=username,
                tenant=tenant,
                expiration=expires_at,
            )
        except StatementRenderError as e:
            log.error("credential_statement_render_failed", error=str(e))
            return OperationResult.permanent_error(str(e), error_code="RENDER_ERROR")

        created = self.postgres.execute(role.database, creation, transactional=True)
        if not created.is_success:
            log.error(
                "credential_issue_failed",
                database=role.database,
                status=created.status.value,
                error_code=created.error_code,
            )
            return created

        lease = Lease(
            lease_id=f"{tenant}/{role.name}/{uuid.uuid4().hex}",
            tenant=tenant,
            role=role.name,
            database=role.database,
            username=username,
            issued_at=now,
            expires_at=expires_at,
            max_expires_at=now + timedelta(seconds=role.max_ttl),
            revocation_statements=revocation,
            requested_by=identity.subject,
        )

        try:
            self.store.save(lease)
        except LeaseStoreError as e:
            # An untracked role would never be revoked
            rollback = execute_revocation(self.postgres, lease)
            log.error(
                "credential_lease_save_failed",
                lease_id=lease.lease_id,
                error=str(e),
                rolled_back=rollback.is_success,
            )
            return OperationResult.transient_error(
                "Lease store unavailable, credential was not issued",
                error_code="LEASE_STORE_UNAVAILABLE",
            )

        log.info(
            "credential_issued",
            lease_id=lease.lease_id,
            username=username,
            ttl=effective_ttl,
        )
        return OperationResult.success(
            data=IssuedCredential(lease=lease, username=username, password=password),
            message="Credential issued",
        )

    def _load_lease(
        self, lease_id: str, identity: WorkloadIdentity
    ) -> Tuple[Optional[Lease], Optional[OperationResult]]:
        """Fetch a lease the caller may act on, or the error to return."""
        try:
            lease = self.store.get(lease_id)
        except LeaseStoreError as e:
            return None, OperationResult.transient_error(
                str(e), error_code="LEASE_STORE_UNAVAILABLE"
            )
        if lease is None:
            return None, OperationResult.not_found(f"Lease {lease_id} not found")
        if not identity.is_admin and lease.requested_by != identity.subject:
            logger.warning(
                "lease_access_denied", lease_id=lease_id, subject=identity.subject
            )
            return None, OperationResult.unauthorized(
                "Only the requester or an admin may access this lease"
            )
        return lease, None

    def _persist(self, lease: Lease) -> Optional[OperationResult]:
        try:
            self.store.update(lease)
        except LeaseStoreError as e:
            logger.error("lease_update_failed", lease_id=lease.lease_id, error=str(e))
            return OperationResult.transient_error(
                str(e), error_code="LEASE_STORE_UNAVAILABLE"
            )
        return None

    def renew(
        self,
        lease_id: str,
        identity: WorkloadIdentity,
        increment: Optional[int] = None,
    ) -> OperationResult:
        """Extend an ACTIVE lease, never past its max_expires_at."""
        lease, error = self._load_lease(lease_id, identity)
        if error:
            return error

        now = self._clock()
        if increment is not None and increment <= 0:
            return OperationResult.permanent_error(
                "increment must be a positive number of seconds",
                error_code="INVALID_TTL",
            )
        if lease.status != LeaseStatus.ACTIVE:
            return OperationResult.permanent_error(
                f"Lease is {lease.status.value}", error_code="LEASE_NOT_ACTIVE"
            )
        if lease.is_expired(now):
            return OperationResult.permanent_error(
                "Lease has expired", error_code="LEASE_EXPIRED"
            )

        role = self.registry.get(lease.tenant, lease.role)
        if role is None:
            return OperationResult.not_found(
                f"Role {lease.tenant}/{lease.role} no longer exists"
            )

        increment = increment or role.default_ttl
        new_expiry = min(now + timedelta(seconds=increment), lease.max_expires_at)

        if role.renew_statements:
            try:
                statements = render_statements(
                    role.renew_statements,
                    name=lease.username,
                    tenant=lease.tenant,
                    expiration=new_expiry,
                )
            except StatementRenderError as e:
                return OperationResult.permanent_error(str(e), error_code="RENDER_ERROR")
            renewed = self.postgres.execute(lease.database, statements)
            if not renewed.is_success:
                logger.error(
                    "lease_renew_failed",
                    lease_id=lease_id,
                    error_code=renewed.error_code,
                )
                return renewed

        lease.expires_at = new_expiry
        error = self._persist(lease)
        if error:
            return error

        logger.info(
            "lease_renewed",
            lease_id=lease_id,
            expires_at=new_expiry.isoformat(),
            capped=new_expiry == lease.max_expires_at,
        )
        return OperationResult.success(data=lease, message="Lease renewed")

    def _revoke_lease(self, lease: Lease) -> OperationResult:
        now = self._clock()
        result = execute_revocation(self.postgres, lease)

        if result.is_success:
            lease.status = LeaseStatus.REVOKED
            lease.revoked_at = now
            lease.last_error = None
            lease.next_attempt_at = None
            error = self._persist(lease)
            if error:
                return error
            logger.info("lease_revoked", lease_id=lease.lease_id)
            return OperationResult.success(data=lease, message="Lease revoked")

        # Hand the lease to the sweeper for retries
        lease.status = LeaseStatus.ACTIVE
        lease.expires_at = now
        lease.next_attempt_at = now
        lease.last_error = result.message
        self._persist(lease)
        logger.warning(
            "lease_revoke_failed",
            lease_id=lease.lease_id,
            error_code=result.error_code,
        )
        return result

    def revoke(self, lease_id: str, identity: WorkloadIdentity) -> OperationResult:
        """Drop the database role now. Revoking a REVOKED lease succeeds."""
        lease, error = self._load_lease(lease_id, identity)
        if error:
            return error
        if lease.status == LeaseStatus.REVOKED:
            return OperationResult.success(data=lease, message="Lease already revoked")
        return self._revoke_lease(lease)

    def revoke_tenant(
        self,
        tenant: str,
        identity: WorkloadIdentity,
        role: Optional[str] = None,
    ) -> OperationResult:
        """Revoke every ACTIVE lease of a tenant, optionally for one role."""
        if not identity.is_admin:
            return OperationResult.unauthorized("Tenant revocation requires an admin")

        try:
            leases = self.store.list(tenant=tenant, role=role, status=LeaseStatus.ACTIVE)
        except LeaseStoreError as e:
            return OperationResult.transient_error(
                str(e), error_code="LEASE_STORE_UNAVAILABLE"
            )

        counts = {"revoked": 0, "failed": 0}
        for lease in leases:
            if self._revoke_lease(lease).is_success:
                counts["revoked"] += 1
            else:
                counts["failed"] += 1

        logger.info(
            "tenant_leases_revoked",
            tenant=tenant,
            role=role,
            subject=identity.subject,
            **counts,
        )
        return OperationResult.success(data=counts, message="Tenant leases revoked")

    def lookup(self, lease_id: str, identity: WorkloadIdentity) -> OperationResult:
        lease, error = self._load_lease(lease_id, identity)
        if error:
            return error
        return OperationResult.success(data=lease)

    def list_leases(
        self,
        identity: WorkloadIdentity,
        tenant: Optional[str] = None,
        role: Optional[str] = None,
        status: Optional[LeaseStatus] = None,
    ) -> OperationResult:
        """List leases. Admin only."""
        if not identity.is_admin:
            return OperationResult.unauthorized("Listing leases requires an admin")
        try:
            leases = self.store.list(tenant=tenant, role=role, status=status)
        except LeaseStoreError as e:
            return OperationResult.transient_error(
                str(e), error_code="LEASE_STORE_UNAVAILABLE"
            )
        return OperationResult.success(data=leases)

    def stats(self) -> OperationResult:
        """Lease counts by status."""
        try:
            return OperationResult.success(data=self.store.get_stats())
        except LeaseStoreError as e:
            return OperationResult.transient_error(
                str(e), error_code="LEASE_STORE_UNAVAILABLE"
            )
