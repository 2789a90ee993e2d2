"""Fixtures for infrastructure security tests."""

import pytest

K8S_ISSUER = "https://kubernetes.default.svc.cluster.local"


@pytest.fixture
def mock_issuer_config():
    """Issuer configuration with one trusted cluster."""
    return {
        K8S_ISSUER: {
            "jwks_uri": f"{K8S_ISSUER}/openid/v1/jwks",
            "audience": "credential-broker",
            "algorithms": ["RS256"],
        },
    }


@pytest.fixture
def service_account_claims():
    """Claims of a projected Kubernetes service-account token."""
    return {
        "iss": K8S_ISSUER,
        "sub": "system:serviceaccount:acme-api:reporting",
        "aud": ["credential-broker"],
        "exp": 9999999999,
        "iat": 1000000000,
        "kubernetes.io": {
            "namespace": "acme-api",
            "serviceaccount": {"name": "reporting", "uid": "6b1c"},
        },
    }
