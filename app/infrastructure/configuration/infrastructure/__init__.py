"""Infrastructure settings __init__ - exports all infrastructure settings."""

from infrastructure.configuration.infrastructure.lease_store import (
    LeaseStoreSettings,
)
from infrastructure.configuration.infrastructure.server import ServerSettings
from infrastructure.configuration.infrastructure.sweeper import SweeperSettings

__all__ = [
    "LeaseStoreSettings",
    "ServerSettings",
    "SweeperSettings",
]
