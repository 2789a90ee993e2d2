"""JWKS client management for service-account token verification.

Holds one PyJWKClient per trusted issuer (typically one per Kubernetes
cluster's OIDC endpoint).
"""

from typing import Any, Dict, Optional

import structlog
from jwt import PyJWKClient

logger = structlog.get_logger()


class JWKSManager:
    """Manage JWKS clients for different issuers.

    Attributes:
        issuer_config: issuer to {"jwks_uri", "audience", "algorithms"}
        jwks_clients: Cache of JWKS clients for each issuer
    """

    def __init__(self, issuer_config: Dict[str, Dict[str, Any]]):
        self.issuer_config = issuer_config
        self.jwks_clients: Dict[str, PyJWKClient] = {}

    def get_jwks_client(self, issuer: str) -> Optional[PyJWKClient]:
        """Get or create JWKS client for the specified issuer.

        Returns None (and logs) when the issuer is not trusted or its
        configuration is incomplete.
        """
        log = logger.bind(issuer=issuer)
        if issuer not in self.issuer_config:
            log.warning("issuer_not_configured")
            return None

        if issuer not in self.jwks_clients:
            jwks_uri = self.issuer_config[issuer].get("jwks_uri")
            if not jwks_uri:
                log.warning("issuer_missing_jwks_uri")
                return None
            try:
                self.jwks_clients[issuer] = PyJWKClient(
                    jwks_uri, cache_jwk_set=True, lifespan=3600, timeout=10
                )
            except Exception as e:  # pylint: disable=broad-except
                log.warning("jwks_client_initialization_failed", error=str(e))
                return None
            log.info("jwks_client_initialized")

        return self.jwks_clients[issuer]

    def clear_cache(self, issuer: Optional[str] = None) -> None:
        """Clear JWKS client cache for one issuer, or all when None."""
        if issuer:
            self.jwks_clients.pop(issuer, None)
        else:
            self.jwks_clients.clear()
