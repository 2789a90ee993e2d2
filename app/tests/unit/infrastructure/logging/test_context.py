"""Unit tests for request context binding."""

import pytest
import structlog

from infrastructure.logging.context import (
    bind_request_context,
    clear_request_context,
    get_correlation_id,
    set_correlation_id,
)


@pytest.fixture(autouse=True)
def _clean_context():
    clear_request_context()
    yield
    clear_request_context()


@pytest.mark.unit
class TestBindRequestContext:
    def test_binds_and_unbinds(self):
        with bind_request_context(
            correlation_id="req-1", request_path="/health", request_method="GET"
        ):
            ctx = structlog.contextvars.get_contextvars()
            assert ctx["correlation_id"] == "req-1"
            assert ctx["request_path"] == "/health"
            assert ctx["request_method"] == "GET"

        assert get_correlation_id() is None
        assert "request_path" not in structlog.contextvars.get_contextvars()

    def test_generates_correlation_id(self):
        with bind_request_context():
            assert get_correlation_id()

    def test_extra_context_and_subject(self):
        with bind_request_context(subject="system:serviceaccount:a:b", tenant="acme"):
            ctx = structlog.contextvars.get_contextvars()
            assert ctx["subject"] == "system:serviceaccount:a:b"
            assert ctx["tenant"] == "acme"

    def test_unbinds_on_exception(self):
        with pytest.raises(RuntimeError):
            with bind_request_context(correlation_id="req-2"):
                raise RuntimeError("boom")
        assert get_correlation_id() is None


@pytest.mark.unit
class TestCorrelationIdHelpers:
    def test_set_and_get(self):
        set_correlation_id("abc")
        assert get_correlation_id() == "abc"
