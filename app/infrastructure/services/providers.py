"""
Factory functions for dependency injection.

Provides application-scoped singleton providers for the broker and the
infrastructure it depends on.
"""

from functools import lru_cache

import structlog

from infrastructure.clients.aws import DynamoDBClient, SessionProvider
from infrastructure.clients.postgres import PostgresClient
from infrastructure.configuration import Settings
from infrastructure.security.jwks import JWKSManager
from modules.credentials.broker import CredentialBroker
from modules.credentials.roles import RoleRegistry
from modules.credentials.store import LeaseStore, create_lease_store
from modules.credentials.sweeper import RevocationSweeper

logger = structlog.get_logger()


@lru_cache
def get_settings() -> Settings:
    """
    Get application-scoped settings singleton.

    This is the single source of truth for settings across the entire application.
    The @lru_cache decorator ensures only ONE instance is created per process.

    Application code should use the DI type alias for testability:
        from infrastructure.services import SettingsDep
        @router.get("/version")
        def version(settings: SettingsDep):
            return {"version": settings.GIT_SHA}

    Returns:
        Settings: Cached settings instance loaded from environment.
    """
    return Settings()


@lru_cache
def get_jwks_manager() -> JWKSManager:
    """
    Get application-scoped JWKSManager singleton.

    Returns:
        JWKSManager: Cached JWKS manager configured from application settings.
        With no ISSUER_CONFIG every token is rejected.
    """
    issuer_config = get_settings().server.ISSUER_CONFIG
    if not issuer_config:
        logger.warning("issuer_config_empty")
    return JWKSManager(issuer_config=issuer_config)


@lru_cache
def get_postgres_client() -> PostgresClient:
    """Client for the configured target databases."""
    settings = get_settings()
    return PostgresClient(
        connections=settings.postgres.CONNECTIONS,
        connect_timeout=settings.postgres.CONNECT_TIMEOUT,
    )


@lru_cache
def get_dynamodb_client() -> DynamoDBClient:
    """DynamoDB client built from the aws settings section.

    Credentials are resolved per API call, so caching the client is safe.
    """
    settings = get_settings()
    return DynamoDBClient(
        SessionProvider(
            region=settings.aws.AWS_REGION,
            endpoint_url=settings.aws.DYNAMODB_ENDPOINT_URL,
        )
    )


@lru_cache
def get_lease_store() -> LeaseStore:
    """Lease store for the configured backend (memory or dynamodb)."""
    settings = get_settings()
    client = (
        get_dynamodb_client() if settings.lease_store.backend == "dynamodb" else None
    )
    return create_lease_store(settings.lease_store, dynamodb_client=client)


@lru_cache
def get_role_registry() -> RoleRegistry:
    """Role registry loaded from BROKER_ROLES_FILE.

    Raises:
        RoleConfigurationError: if the roles file is missing or invalid
    """
    settings = get_settings()
    registry = RoleRegistry()
    registry.load(
        settings.broker.ROLES_FILE,
        databases=list(settings.postgres.CONNECTIONS),
    )
    return registry


@lru_cache
def get_broker() -> CredentialBroker:
    """Application-scoped credential broker."""
    settings = get_settings()
    return CredentialBroker(
        registry=get_role_registry(),
        store=get_lease_store(),
        postgres=get_postgres_client(),
        username_prefix=settings.broker.USERNAME_PREFIX,
        password_length=settings.broker.PASSWORD_LENGTH,
    )


@lru_cache
def get_sweeper() -> RevocationSweeper:
    """Revocation sweeper sharing the broker's store and database client."""
    return RevocationSweeper(
        store=get_lease_store(),
        postgres=get_postgres_client(),
        settings=get_settings().sweeper,
    )
