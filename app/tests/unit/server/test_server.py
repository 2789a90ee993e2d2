import uuid
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from server import server


@pytest.fixture
def client():
    server.handler.dependency_overrides = {}
    return TestClient(server.handler)


@pytest.mark.unit
def test_handler_title_and_limiter():
    assert server.handler.title == "Tenant Credential Broker"
    assert server.handler.state.limiter is not None


@pytest.mark.unit
def test_api_routes_registered():
    paths = {route.path for route in server.handler.routes}
    assert "/health" in paths
    assert "/api/v1/credentials/tenants/{tenant}/roles/{role}" in paths
    assert "/api/v1/credentials/leases/{lease_id:path}" in paths


@pytest.mark.unit
def test_correlation_id_is_echoed(client):
    response = client.get("/health", headers={"X-Correlation-ID": "req-42.a_b"})

    assert response.headers["X-Correlation-ID"] == "req-42.a_b"


@pytest.mark.unit
def test_correlation_id_is_generated(client):
    response = client.get("/health")

    uuid.UUID(response.headers["X-Correlation-ID"])


@pytest.mark.unit
def test_invalid_correlation_id_is_replaced(client):
    response = client.get("/health", headers={"X-Correlation-ID": "bad id!"})

    assert response.headers["X-Correlation-ID"] != "bad id!"
    uuid.UUID(response.headers["X-Correlation-ID"])


@pytest.mark.unit
@pytest.mark.parametrize("value", ["abc\n", "", "x" * 129])
def test_correlation_pattern_rejects(value):
    assert server._CORRELATION_PATTERN.fullmatch(value) is None


@pytest.mark.unit
def test_request_context_is_bound(client):
    with patch("server.server.bind_request_context") as mock_bind:
        client.get("/health", headers={"X-Correlation-ID": "abc"})

    mock_bind.assert_called_once_with(
        correlation_id="abc", request_path="/health", request_method="GET"
    )
