import structlog
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Request, Response

from api.dependencies.auth import WorkloadIdentityDep
from api.dependencies.rate_limits import get_limiter
from api.dependencies.results import raise_for_result
from infrastructure.operations import OperationResult
from infrastructure.services.dependencies import BrokerDep, RoleRegistryDep
from modules.credentials.models import LeaseStatus
from modules.credentials.schemas import (
    CredentialResponse,
    IssueRequest,
    LeaseResponse,
    LeaseStatsResponse,
    RenewRequest,
    RevokeTenantRequest,
    RevokeTenantResponse,
    RoleResponse,
)

logger = structlog.get_logger()

router = APIRouter(prefix="/credentials", tags=["Credentials"])
limiter = get_limiter()


@router.get("/roles", response_model=List[RoleResponse])
@limiter.limit("60/minute")
def list_roles(
    request: Request,  # pylint: disable=unused-argument
    identity: WorkloadIdentityDep,
    registry: RoleRegistryDep,
    tenant: Optional[str] = None,
):
    """List the roles the caller may request credentials for.

    Admins see every role.
    """
    roles = registry.list(tenant=tenant)
    if not identity.is_admin:
        roles = [role for role in roles if registry.is_bound(role, identity)]
    return [RoleResponse.from_role(role) for role in roles]


@router.post(
    "/tenants/{tenant}/roles/{role}",
    response_model=CredentialResponse,
    status_code=201,
)
@limiter.limit("30/minute")
def issue_credential(
    request: Request,  # pylint: disable=unused-argument
    response: Response,
    tenant: str,
    role: str,
    identity: WorkloadIdentityDep,
    broker: BrokerDep,
    body: Optional[IssueRequest] = None,
):
    """Issue a short-lived database credential for a tenant role.

    The password is only ever returned in this response.
    """
    ttl = body.ttl_seconds if body else None
    result = broker.issue(tenant, role, identity, ttl=ttl)
    raise_for_result(result)

    response.headers["Cache-Control"] = "no-store"
    return CredentialResponse.from_credential(result.data, datetime.now(timezone.utc))


@router.get("/leases", response_model=List[LeaseResponse])
@limiter.limit("30/minute")
def list_leases(
    request: Request,  # pylint: disable=unused-argument
    identity: WorkloadIdentityDep,
    broker: BrokerDep,
    tenant: Optional[str] = None,
    role: Optional[str] = None,
    status: Optional[LeaseStatus] = None,
):
    """List leases (admin only)."""
    result = broker.list_leases(identity, tenant=tenant, role=role, status=status)
    raise_for_result(result)
    return [LeaseResponse.from_lease(lease) for lease in result.data]


@router.post("/leases/{lease_id:path}/renew", response_model=LeaseResponse)
@limiter.limit("60/minute")
def renew_lease(
    request: Request,  # pylint: disable=unused-argument
    lease_id: str,
    identity: WorkloadIdentityDep,
    broker: BrokerDep,
    body: Optional[RenewRequest] = None,
):
    """Extend a lease, up to its maximum lifetime."""
    increment = body.increment_seconds if body else None
    result = broker.renew(lease_id, identity, increment=increment)
    raise_for_result(result)
    return LeaseResponse.from_lease(result.data)


@router.get("/leases/{lease_id:path}", response_model=LeaseResponse)
@limiter.limit("60/minute")
def get_lease(
    request: Request,  # pylint: disable=unused-argument
    lease_id: str,
    identity: WorkloadIdentityDep,
    broker: BrokerDep,
):
    """Look up one lease. Owner or admin only."""
    result = broker.lookup(lease_id, identity)
    raise_for_result(result)
    return LeaseResponse.from_lease(result.data)


@router.delete("/leases/{lease_id:path}", response_model=LeaseResponse)
@limiter.limit("60/minute")
def revoke_lease(
    request: Request,  # pylint: disable=unused-argument
    lease_id: str,
    identity: WorkloadIdentityDep,
    broker: BrokerDep,
):
    """Revoke a lease now. Revoking an already revoked lease succeeds."""
    result = broker.revoke(lease_id, identity)
    raise_for_result(result)
    return LeaseResponse.from_lease(result.data)


@router.post("/tenants/{tenant}/revoke", response_model=RevokeTenantResponse)
@limiter.limit("10/minute")
def revoke_tenant(
    request: Request,  # pylint: disable=unused-argument
    tenant: str,
    identity: WorkloadIdentityDep,
    broker: BrokerDep,
    body: Optional[RevokeTenantRequest] = None,
):
    """Revoke every active lease of a tenant (admin only)."""
    role = body.role if body else None
    result = broker.revoke_tenant(tenant, identity, role=role)
    raise_for_result(result)

    logger.info(
        "tenant_revocation_requested",
        tenant=tenant,
        role=role,
        subject=identity.subject,
    )
    return RevokeTenantResponse(tenant=tenant, role=role, **result.data)


@router.get("/stats", response_model=LeaseStatsResponse)
@limiter.limit("30/minute")
def lease_stats(
    request: Request,  # pylint: disable=unused-argument
    identity: WorkloadIdentityDep,
    broker: BrokerDep,
):
    """Lease counts by status (admin only)."""
    if not identity.is_admin:
        raise_for_result(
            OperationResult.unauthorized("Lease statistics require an admin")
        )
    result = broker.stats()
    raise_for_result(result)
    return LeaseStatsResponse(**result.data)
