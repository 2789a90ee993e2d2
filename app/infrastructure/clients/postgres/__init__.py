"""PostgreSQL client used to create and drop dynamic database roles."""

from infrastructure.clients.postgres.client import PostgresClient

__all__ = ["PostgresClient"]
