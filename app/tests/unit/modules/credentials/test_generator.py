"""Unit tests for username and password generation."""

import pytest

from modules.credentials.generator import (
    MAX_USERNAME_LENGTH,
    PASSWORD_ALPHABET,
    generate_password,
    generate_username,
)
from modules.credentials.statements import _SAFE_VALUE_PATTERNS


@pytest.mark.unit
class TestGenerateUsername:
    def test_format(self):
        username = generate_username("v", "acme", "readonly")

        head, _, suffix = username.rpartition("-")
        assert head == "v-acme-readonly"
        assert len(suffix) == 8
        assert suffix.isalnum() and suffix == suffix.lower()

    def test_unique(self):
        names = {generate_username("v", "acme", "readonly") for _ in range(50)}
        assert len(names) == 50

    def test_long_names_are_truncated_keeping_suffix(self):
        username = generate_username("v", "t" * 40, "r" * 40)

        assert len(username) == MAX_USERNAME_LENGTH
        assert len(username.rpartition("-")[2]) == 8

    def test_truncation_does_not_leave_double_dash(self):
        # the cut lands right after the dash before the role
        username = generate_username("v", "a" * 51, "role")
        assert "--" not in username

    def test_usable_as_statement_name(self):
        assert _SAFE_VALUE_PATTERNS["name"].fullmatch(
            generate_username("v", "acme", "migrator")
        )


@pytest.mark.unit
class TestGeneratePassword:
    def test_default_length_and_alphabet(self):
        password = generate_password()

        assert len(password) == 32
        assert set(password) <= set(PASSWORD_ALPHABET)

    def test_custom_length(self):
        assert len(generate_password(64)) == 64

    def test_too_short_rejected(self):
        with pytest.raises(ValueError):
            generate_password(8)
