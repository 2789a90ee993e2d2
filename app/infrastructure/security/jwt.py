"""JWT token validation.

Verifies bearer tokens against the trusted issuers held by a JWKSManager.
"""

from typing import Any, Dict, Optional

import structlog
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials
from jwt import PyJWTError, decode

from infrastructure.security.jwks import JWKSManager

logger = structlog.get_logger()


def get_issuer_from_token(token: str) -> Optional[str]:
    """Extract issuer from JWT token without verifying signature.

    Args:
        token: The JWT token

    Returns:
        The issuer (iss) claim from the token, or None if not present
    """
    try:
        unverified_payload = decode(token, options={"verify_signature": False})
        return unverified_payload.get("iss")
    except PyJWTError as e:
        logger.debug("issuer_extraction_failed", error=str(e))
        return None


def get_subject_from_token(token: str) -> Optional[str]:
    """Extract the subject (sub) claim without verifying the signature."""
    try:
        unverified_payload = decode(token, options={"verify_signature": False})
    except PyJWTError as e:
        logger.debug("subject_extraction_failed", error=str(e))
        return None
    subject = unverified_payload.get("sub")
    return subject if isinstance(subject, str) and subject else None


def validate_jwt_token(
    jwks_manager: JWKSManager,
    credentials: Optional[HTTPAuthorizationCredentials],
) -> Dict[str, Any]:
    """Validate JWT token and extract payload.

    Args:
        jwks_manager: JWKS manager instance
        credentials: HTTP authorization credentials containing JWT token

    Returns:
        The decoded and verified JWT payload

    Raises:
        HTTPException: 401 if token is invalid, untrusted, or missing
    """
    if (
        credentials is None
        or credentials.scheme.lower() != "bearer"
        or not credentials.credentials
    ):
        raise HTTPException(status_code=401, detail="Missing or invalid token")

    token = credentials.credentials

    issuer = get_issuer_from_token(token)
    if not issuer:
        raise HTTPException(status_code=401, detail="Issuer not found in token")

    jwks_client = jwks_manager.get_jwks_client(issuer)
    if not jwks_client:
        logger.warning("untrusted_or_missing_issuer", issuer=issuer)
        raise HTTPException(status_code=401, detail="Untrusted or missing token issuer")

    cfg = jwks_manager.issuer_config[issuer]

    try:
        signing_key = jwks_client.get_signing_key_from_jwt(token)
        payload = decode(
            token,
            signing_key.key,
            algorithms=cfg.get("algorithms", ["RS256"]),
            audience=cfg.get("audience"),
            issuer=issuer,
            options={"verify_exp": True},
        )
    except PyJWTError as e:
        logger.warning("jwt_validation_failed", issuer=issuer, error=str(e))
        raise HTTPException(status_code=401, detail=f"Invalid token: {str(e)}") from e

    logger.debug("jwt_validation_successful", issuer=issuer)
    return payload
