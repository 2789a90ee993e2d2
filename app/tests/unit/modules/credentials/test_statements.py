"""Unit tests for statement template rendering."""

from datetime import datetime, timezone

import pytest

from modules.credentials.statements import (
    StatementRenderError,
    format_expiration,
    render_statements,
    validate_templates,
)

EXPIRES = datetime(2026, 3, 1, 13, 0, 0, tzinfo=timezone.utc)
PASSWORD = "Abcdefgh-12345678"


@pytest.mark.unit
class TestFormatExpiration:
    def test_utc(self):
        assert format_expiration(EXPIRES) == "2026-03-01 13:00:00+00:00"

    def test_naive_is_treated_as_utc(self):
        assert (
            format_expiration(datetime(2026, 3, 1, 13, 0, 0))
            == "2026-03-01 13:00:00+00:00"
        )


@pytest.mark.unit
class TestValidateTemplates:
    def test_known_placeholders(self):
        assert validate_templates(['GRANT x TO "{{ name }}"', "{{tenant}}"]) == []

    def test_unknown_placeholders_sorted(self):
        assert validate_templates(["{{schema}} {{db}}", "{{name}}"]) == ["db", "schema"]


@pytest.mark.unit
class TestRenderStatements:
    def test_substitutes_all_values(self):
        rendered = render_statements(
            [
                "CREATE ROLE \"{{name}}\" WITH LOGIN PASSWORD '{{password}}' "
                "VALID UNTIL '{{expiration}}'",
                'GRANT {{tenant}}_readonly TO "{{name}}"',
            ],
            name="v-acme-readonly-abcd1234",
            tenant="acme",
            password=PASSWORD,
            expiration=EXPIRES,
        )

        assert rendered == [
            "CREATE ROLE \"v-acme-readonly-abcd1234\" WITH LOGIN PASSWORD "
            f"'{PASSWORD}' VALID UNTIL '2026-03-01 13:00:00+00:00'",
            'GRANT acme_readonly TO "v-acme-readonly-abcd1234"',
        ]

    def test_missing_value(self):
        with pytest.raises(StatementRenderError, match="password"):
            render_statements(["{{password}}"], name="v-acme-x", tenant="acme")

    def test_unknown_placeholder(self):
        with pytest.raises(StatementRenderError, match="schema"):
            render_statements(["{{schema}}"], name="v-acme-x", tenant="acme")

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"name": 'v"; DROP TABLE x; --'},
            {"name": "V-Upper"},
            {"tenant": "acme'"},
            {"tenant": "acme\n"},
            {"name": "v-acme-x\n"},
            {"password": "short"},
            {"password": "has'quote-1234567890"},
        ],
    )
    def test_unsafe_values_rejected(self, kwargs):
        values = {"name": "v-acme-x", "tenant": "acme", "password": PASSWORD}
        values.update(kwargs)

        with pytest.raises(StatementRenderError):
            render_statements(["SELECT 1"], **values)

    def test_trailing_newline_never_reaches_statement(self):
        with pytest.raises(StatementRenderError, match="tenant"):
            render_statements(
                ["SET app.tenant = '{{tenant}}'"],
                name="v-acme-ro-abcdefgh",
                tenant="acme\n",
            )

    def test_password_not_in_error(self):
        with pytest.raises(StatementRenderError) as exc:
            render_statements(
                ["{{password}}"],
                name="v-acme-x",
                tenant="acme",
                password="leaked'secret-value",
            )
        assert "leaked" not in str(exc.value)
