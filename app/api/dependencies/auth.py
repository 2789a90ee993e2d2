"""Caller authentication for credential routes.

Verifies the Kubernetes service-account token presented as a Bearer JWT and
turns its claims into a WorkloadIdentity.
"""

from typing import Annotated, Optional

import structlog
from fastapi import Depends, HTTPException, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from infrastructure.security.jwt import validate_jwt_token
from infrastructure.security.workload_identity import (
    InvalidWorkloadIdentity,
    WorkloadIdentity,
)
from infrastructure.services.dependencies import JWKSManagerDep, SettingsDep

logger = structlog.get_logger()

# auto_error=False so a missing header is a 401, not a 403
bearer_scheme = HTTPBearer(auto_error=False)


def get_workload_identity(
    jwks_manager: JWKSManagerDep,
    settings: SettingsDep,
    credentials: Annotated[
        Optional[HTTPAuthorizationCredentials], Security(bearer_scheme)
    ],
) -> WorkloadIdentity:
    """Resolve the calling workload from its bearer token.

    Raises:
        HTTPException: 401 when the token is missing, invalid or has no subject
    """
    claims = validate_jwt_token(jwks_manager, credentials)
    try:
        return WorkloadIdentity.from_claims(claims, settings.broker.ADMIN_SUBJECTS)
    except InvalidWorkloadIdentity as e:
        logger.warning("workload_identity_rejected", error=str(e))
        raise HTTPException(status_code=401, detail=str(e)) from e


WorkloadIdentityDep = Annotated[WorkloadIdentity, Depends(get_workload_identity)]
