"""Credential broker configuration settings - main aggregator."""

from pydantic_settings import BaseSettings, SettingsConfigDict

# Integration settings
from infrastructure.configuration.integrations import (
    AwsSettings,
    PostgresSettings,
)

# Feature settings
from infrastructure.configuration.features import BrokerSettings

# Infrastructure settings
from infrastructure.configuration.infrastructure import (
    LeaseStoreSettings,
    ServerSettings,
    SweeperSettings,
)


class Settings(BaseSettings):
    """Credential broker configuration settings - main aggregator.

    Aggregates all domain-specific settings into a single configuration object.
    Settings are organized by concern:

    - **Integrations**: External systems (AWS for DynamoDB, PostgreSQL targets)
    - **Features**: The broker itself (role file, generated credential shape, admins)
    - **Infrastructure**: Lease storage, revocation sweeper, server authentication

    Environment Variables:
        PREFIX: Environment prefix; empty means production
        LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)
        GIT_SHA: Git commit SHA for deployment tracking

    Example:
        ```python
        from infrastructure.services import get_settings

        settings = get_settings()

        dsn = settings.postgres.CONNECTIONS["orders"]
        if settings.sweeper.enabled:
            interval = settings.sweeper.interval_seconds
        ```
    """

    # Application-level settings
    PREFIX: str = ""
    LOG_LEVEL: str = "INFO"
    GIT_SHA: str = "Unknown"

    # Integration settings
    aws: AwsSettings
    postgres: PostgresSettings

    # Feature settings
    broker: BrokerSettings

    # Infrastructure settings
    lease_store: LeaseStoreSettings
    sweeper: SweeperSettings
    server: ServerSettings

    @property
    def is_production(self) -> bool:
        """True if PREFIX is empty (production)."""
        return not bool(self.PREFIX)

    def __init__(self, **kwargs):
        """Initialize Settings with automatic subsettings instantiation.

        Args:
            **kwargs: Optional overrides for specific settings sections.
        """
        settings_map = {
            # Integrations
            "aws": AwsSettings,
            "postgres": PostgresSettings,
            # Features
            "broker": BrokerSettings,
            # Infrastructure
            "lease_store": LeaseStoreSettings,
            "sweeper": SweeperSettings,
            "server": ServerSettings,
        }

        for setting_name, setting_class in settings_map.items():
            if setting_name not in kwargs:
                kwargs[setting_name] = setting_class()

        super().__init__(**kwargs)

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )
