"""Username and password generation for dynamic database roles."""

import secrets
import string

# PostgreSQL truncates identifiers at NAMEDATALEN - 1
MAX_USERNAME_LENGTH = 63
SUFFIX_LENGTH = 8
MIN_PASSWORD_LENGTH = 16

_SUFFIX_ALPHABET = string.ascii_lowercase + string.digits
PASSWORD_ALPHABET = string.ascii_letters + string.digits + "-"


def generate_username(prefix: str, tenant: str, role: str) -> str:
    """Build `{prefix}-{tenant}-{role}-{suffix}`, at most 63 characters.

    The random suffix is always kept whole; the readable part is cut instead.
    """
    suffix = "".join(secrets.choice(_SUFFIX_ALPHABET) for _ in range(SUFFIX_LENGTH))
    head = f"{prefix}-{tenant}-{role}".lower()
    room = MAX_USERNAME_LENGTH - SUFFIX_LENGTH - 1
    head = head[:room].rstrip("-")
    return f"{head}-{suffix}"


def generate_password(length: int = 32) -> str:
    """Random password of letters, digits and '-'."""
    if length < MIN_PASSWORD_LENGTH:
        raise ValueError(f"Password length must be at least {MIN_PASSWORD_LENGTH}")
    return "".join(secrets.choice(PASSWORD_ALPHABET) for _ in range(length))
