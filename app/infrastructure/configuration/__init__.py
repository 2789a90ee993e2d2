"""Infrastructure configuration module - public API.

Centralized configuration for the credential broker using Pydantic
BaseSettings with domain-based organization.

Exports:
    Settings: Main settings class (for testing/overrides)

Example:
    ```python
    from infrastructure.services import get_settings

    settings = get_settings()

    region = settings.aws.AWS_REGION
    backend = settings.lease_store.backend

    if settings.is_production:
        # Production-specific logic...
    ```
"""

from infrastructure.configuration.settings import Settings

__all__ = ["Settings"]
