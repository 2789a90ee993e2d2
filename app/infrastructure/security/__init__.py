"""Security services: JWKS management, JWT validation and workload identity.

Exports:
    JWKSManager: Manages JWKS clients for trusted issuers
    get_issuer_from_token: Extract issuer from JWT token
    get_subject_from_token: Extract subject from JWT token
    validate_jwt_token: Validate JWT token and extract payload
    WorkloadIdentity: Caller identity derived from token claims
    InvalidWorkloadIdentity: Raised when claims carry no usable subject
"""

from infrastructure.security.jwks import JWKSManager
from infrastructure.security.jwt import (
    get_issuer_from_token,
    get_subject_from_token,
    validate_jwt_token,
)
from infrastructure.security.workload_identity import (
    InvalidWorkloadIdentity,
    WorkloadIdentity,
)

__all__ = [
    "JWKSManager",
    "get_issuer_from_token",
    "get_subject_from_token",
    "validate_jwt_token",
    "WorkloadIdentity",
    "InvalidWorkloadIdentity",
]
