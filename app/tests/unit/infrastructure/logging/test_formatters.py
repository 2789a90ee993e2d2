"""Unit tests for infrastructure.logging.formatters module.

Tests cover:
- add_app_info processor
- mask_sensitive_data processor
- truncate_large_values processor
"""

import pytest

from infrastructure.logging.formatters import (
    SENSITIVE_PATTERNS,
    add_app_info,
    mask_sensitive_data,
    truncate_large_values,
)


@pytest.mark.unit
class TestAddAppInfo:
    def test_adds_name_and_version(self):
        processor = add_app_info("credential-broker", "abc123")
        result = processor(None, "info", {"event": "test_event"})

        assert result["app_name"] == "credential-broker"
        assert result["app_version"] == "abc123"
        assert result["event"] == "test_event"

    def test_unknown_version_default(self):
        result = add_app_info("credential-broker")(None, "info", {"event": "x"})
        assert result["app_version"] == "unknown"


@pytest.mark.unit
class TestMaskSensitiveData:
    def test_masks_password_and_dsn(self):
        processor = mask_sensitive_data()
        result = processor(
            None,
            "info",
            {
                "event": "credential_issued",
                "password": "hunter2hunter2hunter2",
                "postgres_dsn": "postgresql://u:p@h/db",
                "lease_id": "acme/readonly/abc",
            },
        )

        assert result["password"] == "***REDACTED***"
        assert result["postgres_dsn"] == "***REDACTED***"
        assert result["lease_id"] == "acme/readonly/abc"

    def test_case_insensitive_match(self):
        result = mask_sensitive_data()(None, "info", {"Authorization": "Bearer x"})
        assert result["Authorization"] == "***REDACTED***"

    def test_none_values_untouched(self):
        result = mask_sensitive_data()(None, "info", {"token": None})
        assert result["token"] is None

    def test_additional_patterns_and_custom_mask(self):
        processor = mask_sensitive_data(
            mask_value="[hidden]", additional_patterns=frozenset({"username"})
        )
        result = processor(None, "info", {"username": "v-acme-ro-1"})
        assert result["username"] == "[hidden]"

    def test_sensitive_patterns_cover_credentials(self):
        assert {"password", "secret", "token", "dsn"} <= SENSITIVE_PATTERNS


@pytest.mark.unit
class TestTruncateLargeValues:
    def test_truncates_long_strings(self):
        result = truncate_large_values(max_length=10)(
            None, "info", {"error": "x" * 25}
        )
        assert result["error"].startswith("x" * 10)
        assert "25 chars total" in result["error"]

    def test_short_and_non_string_values_kept(self):
        result = truncate_large_values(max_length=10)(
            None, "info", {"error": "short", "count": 12345678901234}
        )
        assert result == {"error": "short", "count": 12345678901234}
