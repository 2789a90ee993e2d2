"""PostgreSQL integration settings."""

import json
from typing import Any, Dict

from pydantic import Field, field_validator

from infrastructure.configuration.base import IntegrationSettings


class PostgresSettings(IntegrationSettings):
    """Connections the broker uses to create and drop tenant roles.

    Each entry maps a logical database name (referenced by role
    definitions) to a libpq connection string for an account holding
    CREATEROLE.

    Environment Variables:
        POSTGRES_CONNECTIONS: JSON object of name -> DSN
        POSTGRES_CONNECT_TIMEOUT: Connect timeout in seconds (default: 5)

    Example:
        ```bash
        POSTGRES_CONNECTIONS='{"orders": "postgresql://broker:pw@orders-rw:5432/orders"}'
        ```
    """

    CONNECTIONS: Dict[str, str] = Field(default={}, alias="POSTGRES_CONNECTIONS")
    CONNECT_TIMEOUT: int = Field(default=5, alias="POSTGRES_CONNECT_TIMEOUT")

    @field_validator("CONNECTIONS", mode="before")
    @classmethod
    def parse_connections(cls, v: Any) -> Dict[str, str]:
        """Accept a JSON string or a mapping."""
        if v is None or v == "":
            return {}
        if isinstance(v, str):
            v = json.loads(v)
        if not isinstance(v, dict):
            raise ValueError("POSTGRES_CONNECTIONS must be a JSON object")
        return {str(name): str(dsn) for name, dsn in v.items()}
