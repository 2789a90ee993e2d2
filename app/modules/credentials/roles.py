"""Role registry.

Loads role definitions from a YAML file of the form:

    roles:
      - tenant: acme
        name: readonly
        database: orders
        default_ttl: 3600
        max_ttl: 86400
        bound_service_accounts: ["acme-api:reporting", "acme-jobs:*"]
        creation_statements:
          - CREATE ROLE "{{name}}" WITH LOGIN PASSWORD '{{password}}' VALID UNTIL '{{expiration}}'
          - GRANT acme_readonly TO "{{name}}"
        revocation_statements:
          - DROP ROLE IF EXISTS "{{name}}"
"""

import re
import threading
from typing import Any, Dict, List, Optional

import structlog
import yaml

from infrastructure.security.workload_identity import WorkloadIdentity
from modules.credentials.models import RoleDefinition
from modules.credentials.statements import PLACEHOLDER_PATTERN, validate_templates

logger = structlog.get_logger()

SLUG_PATTERN = re.compile(r"[a-z0-9][a-z0-9-]{0,39}")
BINDING_PATTERN = re.compile(r"(\*|[a-z0-9][a-z0-9-]*):(\*|[a-z0-9][a-z0-9.-]*)")


class RoleConfigurationError(ValueError):
    """Raised when the roles file is missing or invalid."""


def _as_str_list(raw: Any, field_name: str, where: str) -> List[str]:
    if raw is None:
        return []
    if not isinstance(raw, list) or not all(isinstance(s, str) for s in raw):
        raise RoleConfigurationError(f"{where}: {field_name} must be a list of strings")
    return list(raw)


def _as_positive_int(raw: Any, field_name: str, where: str) -> int:
    if isinstance(raw, bool) or not isinstance(raw, int) or raw <= 0:
        raise RoleConfigurationError(f"{where}: {field_name} must be a positive integer")
    return raw


def parse_role(raw: Dict[str, Any], databases: Optional[List[str]] = None) -> RoleDefinition:
    """Validate one role mapping and build a RoleDefinition.

    Raises:
        RoleConfigurationError: on any invalid field
    """
    if not isinstance(raw, dict):
        raise RoleConfigurationError("Each role must be a mapping")

    tenant = raw.get("tenant")
    name = raw.get("name")
    where = f"role {tenant}/{name}"
    for label, value in (("tenant", tenant), ("name", name)):
        if not isinstance(value, str) or not SLUG_PATTERN.fullmatch(value):
            raise RoleConfigurationError(f"{where}: invalid {label} {value!r}")

    database = raw.get("database")
    if not isinstance(database, str) or not database:
        raise RoleConfigurationError(f"{where}: database is required")
    if databases is not None and database not in databases:
        raise RoleConfigurationError(f"{where}: unknown database {database!r}")

    default_ttl = _as_positive_int(raw.get("default_ttl"), "default_ttl", where)
    max_ttl = _as_positive_int(raw.get("max_ttl", default_ttl), "max_ttl", where)
    if max_ttl < default_ttl:
        raise RoleConfigurationError(f"{where}: max_ttl must be >= default_ttl")

    creation = _as_str_list(raw.get("creation_statements"), "creation_statements", where)
    revocation = _as_str_list(
        raw.get("revocation_statements"), "revocation_statements", where
    )
    renew = _as_str_list(raw.get("renew_statements"), "renew_statements", where)
    if not creation:
        raise RoleConfigurationError(f"{where}: creation_statements is required")
    if not revocation:
        raise RoleConfigurationError(f"{where}: revocation_statements is required")

    for label, templates in (
        ("creation_statements", creation),
        ("revocation_statements", revocation),
        ("renew_statements", renew),
    ):
        unknown = validate_templates(templates)
        if unknown:
            raise RoleConfigurationError(
                f"{where}: unknown placeholder(s) in {label}: {', '.join(unknown)}"
            )

    # Rendered revocation statements are persisted with the lease
    if any("password" in PLACEHOLDER_PATTERN.findall(t) for t in revocation):
        raise RoleConfigurationError(
            f"{where}: revocation_statements must not use {{{{password}}}}"
        )

    bindings = _as_str_list(
        raw.get("bound_service_accounts"), "bound_service_accounts", where
    )
    for binding in bindings:
        if not BINDING_PATTERN.fullmatch(binding):
            raise RoleConfigurationError(f"{where}: invalid binding {binding!r}")

    return RoleDefinition(
        tenant=tenant,
        name=name,
        database=database,
        creation_statements=creation,
        revocation_statements=revocation,
        renew_statements=renew,
        default_ttl=default_ttl,
        max_ttl=max_ttl,
        bound_service_accounts=bindings,
    )


class RoleRegistry:
    """In-memory registry of role definitions keyed by (tenant, name)."""

    def __init__(self, roles: Optional[List[RoleDefinition]] = None) -> None:
        self._lock = threading.Lock()
        self._roles: Dict[tuple, RoleDefinition] = {}
        if roles:
            self._replace(roles)

    def _replace(self, roles: List[RoleDefinition]) -> None:
        indexed: Dict[tuple, RoleDefinition] = {}
        for role in roles:
            key = (role.tenant, role.name)
            if key in indexed:
                raise RoleConfigurationError(f"Duplicate role {role.key}")
            indexed[key] = role
        with self._lock:
            self._roles = indexed

    def load(self, path: str, databases: Optional[List[str]] = None) -> int:
        """Load (or reload) roles from a YAML file.

        Args:
            path: path to the roles file
            databases: known database names; roles referencing others are rejected

        Returns:
            Number of roles loaded

        Raises:
            RoleConfigurationError: if the file is unreadable or invalid
        """
        try:
            with open(path, encoding="utf-8") as handle:
                document = yaml.safe_load(handle) or {}
        except OSError as e:
            raise RoleConfigurationError(f"Cannot read roles file {path}: {e}") from e
        except yaml.YAMLError as e:
            raise RoleConfigurationError(f"Invalid YAML in {path}: {e}") from e

        if not isinstance(document, dict) or not isinstance(
            document.get("roles", []), list
        ):
            raise RoleConfigurationError(f"{path}: expected a 'roles' list")

        roles = [parse_role(raw, databases) for raw in document.get("roles") or []]
        self._replace(roles)
        logger.info("roles_loaded", path=path, count=len(roles))
        return len(roles)

    def get(self, tenant: str, name: str) -> Optional[RoleDefinition]:
        with self._lock:
            return self._roles.get((tenant, name))

    def list(self, tenant: Optional[str] = None) -> List[RoleDefinition]:
        with self._lock:
            roles = list(self._roles.values())
        if tenant is not None:
            roles = [r for r in roles if r.tenant == tenant]
        return sorted(roles, key=lambda r: (r.tenant, r.name))

    @staticmethod
    def is_bound(role: RoleDefinition, identity: WorkloadIdentity) -> bool:
        """True when the identity matches one of the role's bindings."""
        return any(identity.matches(b) for b in role.bound_service_accounts)
