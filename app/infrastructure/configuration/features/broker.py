"""Credential broker feature settings."""

import json
from typing import Annotated, Any, List

from pydantic import Field, field_validator
from pydantic_settings import NoDecode

from infrastructure.configuration.base import FeatureSettings


class BrokerSettings(FeatureSettings):
    """Credential broker configuration.

    Environment Variables:
        BROKER_ROLES_FILE: Path to the YAML role definitions (default: roles.yaml)
        BROKER_USERNAME_PREFIX: Prefix for generated database usernames (default: v)
        BROKER_PASSWORD_LENGTH: Generated password length (default: 32, min: 16)
        BROKER_ADMIN_SUBJECTS: JSON list or comma separated token subjects
            allowed to list leases and revoke whole tenants

    Example:
        ```python
        from infrastructure.services import get_settings

        settings = get_settings()
        roles_file = settings.broker.ROLES_FILE
        ```
    """

    ROLES_FILE: str = Field(default="roles.yaml", alias="BROKER_ROLES_FILE")
    USERNAME_PREFIX: str = Field(
        default="v", alias="BROKER_USERNAME_PREFIX", pattern=r"^[a-z][a-z0-9]{0,7}$"
    )
    PASSWORD_LENGTH: int = Field(default=32, alias="BROKER_PASSWORD_LENGTH", ge=16)
    ADMIN_SUBJECTS: Annotated[List[str], NoDecode] = Field(
        default=[], alias="BROKER_ADMIN_SUBJECTS"
    )

    @field_validator("ADMIN_SUBJECTS", mode="before")
    @classmethod
    def split_subjects(cls, v: Any) -> Any:
        """Accept a JSON list or a plain comma separated string."""
        if isinstance(v, str):
            if v.strip().startswith("["):
                return json.loads(v)
            return [s.strip() for s in v.split(",") if s.strip()]
        return v
