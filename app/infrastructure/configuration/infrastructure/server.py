"""Server infrastructure settings."""

import json
from typing import Any, Dict

from pydantic import Field, field_validator

from infrastructure.configuration.base import InfrastructureSettings


class ServerSettings(InfrastructureSettings):
    """Server and authentication configuration.

    Environment Variables:
        ISSUER_CONFIG: JSON dict of trusted token issuers. Each issuer maps to
            its jwks_uri, audience and algorithms. For Kubernetes projected
            service-account tokens the issuer is the cluster's
            --service-account-issuer.

    Example:
        ```bash
        ISSUER_CONFIG='{"https://kubernetes.default.svc": {
            "jwks_uri": "https://kubernetes.default.svc/openid/v1/jwks",
            "audience": "credential-broker",
            "algorithms": ["RS256"]}}'
        ```
    """

    ISSUER_CONFIG: Dict[str, Dict[str, Any]] = Field(
        default_factory=dict,
        alias="ISSUER_CONFIG",
    )

    @field_validator("ISSUER_CONFIG", mode="before")
    @classmethod
    def validate_issuer_config(cls, v: Any) -> Any:
        """Validate the ISSUER_CONFIG field."""
        if isinstance(v, str) and v.strip():
            v = json.loads(v)
        if v is None or not isinstance(v, dict):
            return {}
        return v
