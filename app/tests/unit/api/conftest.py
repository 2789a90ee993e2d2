"""Fixtures for API route tests."""

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from api.dependencies.auth import get_workload_identity
from api.dependencies.rate_limits import limiter
from infrastructure.security.jwks import JWKSManager
from infrastructure.services.providers import (
    get_broker,
    get_jwks_manager,
    get_role_registry,
    get_settings,
)
from modules.credentials.broker import CredentialBroker
from modules.credentials.roles import RoleRegistry
from server.server import handler


@pytest.fixture(autouse=True)
def reset_rate_limits():
    limiter.reset()
    yield
    limiter.reset()


@pytest.fixture
def mock_settings():
    settings = MagicMock()
    settings.GIT_SHA = "abc123"
    settings.broker.ADMIN_SUBJECTS = []
    return settings


@pytest.fixture
def mock_broker():
    return MagicMock(spec=CredentialBroker)


@pytest.fixture
def now():
    return datetime.now(timezone.utc).replace(microsecond=0)


@pytest.fixture
def client_factory(mock_settings, mock_broker, registry):
    """TestClient for the app, optionally authenticated as `identity`.

    Lifespan is not run, so no scheduler or role file is involved.
    """

    def _factory(identity=None, roles=None):
        role_registry = RoleRegistry(roles) if roles is not None else registry
        handler.dependency_overrides[get_settings] = lambda: mock_settings
        handler.dependency_overrides[get_jwks_manager] = lambda: JWKSManager({})
        handler.dependency_overrides[get_broker] = lambda: mock_broker
        handler.dependency_overrides[get_role_registry] = lambda: role_registry
        if identity is not None:
            handler.dependency_overrides[get_workload_identity] = lambda: identity
        return TestClient(handler)

    yield _factory
    handler.dependency_overrides.clear()
