"""Rendering of role statement templates.

Templates use `{{name}}`, `{{password}}`, `{{expiration}}` and `{{tenant}}`.
Values are checked against a strict pattern before substitution so a
rendered value can never close the quotes it is placed in.
"""

import re
from datetime import datetime, timezone
from typing import Dict, List, Optional

PLACEHOLDER_PATTERN = re.compile(r"\{\{\s*([A-Za-z_][A-Za-z0-9_]*)\s*\}\}")
KNOWN_PLACEHOLDERS = frozenset({"name", "password", "expiration", "tenant"})

_SAFE_VALUE_PATTERNS = {
    "name": re.compile(r"[a-z0-9][a-z0-9-]{0,62}"),
    "password": re.compile(r"[A-Za-z0-9-]{16,128}"),
    "expiration": re.compile(r"\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}\+00:00"),
    "tenant": re.compile(r"[a-z0-9][a-z0-9-]{0,39}"),
}


class StatementRenderError(ValueError):
    """Raised when a value is unsafe to place in a statement."""


def format_expiration(value: datetime) -> str:
    """Format as `YYYY-MM-DD HH:MM:SS+00:00` in UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime("%Y-%m-%d %H:%M:%S+00:00")


def validate_templates(templates: List[str]) -> List[str]:
    """Return the sorted unknown placeholder names used in `templates`."""
    found = set()
    for template in templates:
        found.update(PLACEHOLDER_PATTERN.findall(template))
    return sorted(found - KNOWN_PLACEHOLDERS)


def render_statements(
    templates: List[str],
    name: str,
    tenant: str,
    password: Optional[str] = None,
    expiration: Optional[datetime] = None,
) -> List[str]:
    """Substitute placeholders in every template.

    Raises:
        StatementRenderError: if a value fails its safety check, or a
            template needs a value that was not supplied
    """
    values: Dict[str, Optional[str]] = {
        "name": name,
        "tenant": tenant,
        "password": password,
        "expiration": format_expiration(expiration) if expiration else None,
    }

    for key, value in values.items():
        if value is not None and not _SAFE_VALUE_PATTERNS[key].fullmatch(value):
            # The password itself is never echoed back
            raise StatementRenderError(f"Unsafe value for placeholder {key!r}")

    def substitute(match: re.Match) -> str:
        key = match.group(1)
        if key not in KNOWN_PLACEHOLDERS:
            raise StatementRenderError(f"Unknown placeholder {key!r}")
        value = values[key]
        if value is None:
            raise StatementRenderError(f"No value for placeholder {key!r}")
        return value

    return [PLACEHOLDER_PATTERN.sub(substitute, t) for t in templates]
