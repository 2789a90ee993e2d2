"""Feature settings __init__ - exports all feature settings."""

from infrastructure.configuration.features.broker import BrokerSettings

__all__ = [
    "BrokerSettings",
]
