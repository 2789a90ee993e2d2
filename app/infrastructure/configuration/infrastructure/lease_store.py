"""Lease store infrastructure settings."""

from pydantic import Field

from infrastructure.configuration.base import InfrastructureSettings


class LeaseStoreSettings(InfrastructureSettings):
    """Lease store configuration.

    Environment Variables:
        LEASE_STORE_BACKEND: 'memory' or 'dynamodb' (default: memory)
        LEASE_STORE_TABLE_NAME: DynamoDB table (default: credential_broker_leases)
        LEASE_STORE_RETENTION_DAYS: Days a revoked lease is kept before
            DynamoDB TTL removes it (default: 30)

    Lease Store Backends:
        - memory: Single-process dictionary (development, testing)
        - dynamodb: Shared table for multi-replica deployments (production)
    """

    backend: str = Field(
        default="memory",
        alias="LEASE_STORE_BACKEND",
        description="Lease store backend: 'memory' or 'dynamodb'",
    )
    table_name: str = Field(
        default="credential_broker_leases",
        alias="LEASE_STORE_TABLE_NAME",
        description="DynamoDB table name for leases",
    )
    retention_days: int = Field(
        default=30,
        alias="LEASE_STORE_RETENTION_DAYS",
        description="Days to retain revoked or failed leases",
    )
