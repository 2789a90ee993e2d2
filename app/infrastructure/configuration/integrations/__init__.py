"""Integration settings __init__ - exports all integration settings."""

from infrastructure.configuration.integrations.aws import AwsSettings
from infrastructure.configuration.integrations.postgres import PostgresSettings

__all__ = [
    "AwsSettings",
    "PostgresSettings",
]
