"""Revocation sweeper infrastructure settings."""

from pydantic import Field, model_validator

from infrastructure.configuration.base import InfrastructureSettings


class SweeperSettings(InfrastructureSettings):
    """Revocation sweeper configuration.

    Environment Variables:
        SWEEPER_ENABLED: Run the sweeper in this process (default: True)
        SWEEPER_INTERVAL_SECONDS: Seconds between sweeps (default: 30)
        SWEEPER_BATCH_SIZE: Expired leases handled per sweep (default: 25)
        SWEEPER_CLAIM_LEASE_SECONDS: How long a claim blocks other replicas (default: 120)
        SWEEPER_MAX_ATTEMPTS: Revocation attempts before a lease is FAILED (default: 8)
        SWEEPER_BASE_DELAY_SECONDS: Base backoff delay (default: 15)
        SWEEPER_MAX_DELAY_SECONDS: Backoff cap (default: 900)

    Exponential Backoff:
        Delay calculation: min(base_delay * (2 ^ attempts), max_delay)

        Example with defaults (base=15s, max=900s):
            Attempt 1: 30s
            Attempt 2: 60s
            Attempt 3: 120s
            Attempt 6+: 900s
    """

    enabled: bool = Field(default=True, alias="SWEEPER_ENABLED")
    interval_seconds: int = Field(default=30, alias="SWEEPER_INTERVAL_SECONDS", ge=1)
    batch_size: int = Field(default=25, alias="SWEEPER_BATCH_SIZE", ge=1)
    claim_lease_seconds: int = Field(
        default=120, alias="SWEEPER_CLAIM_LEASE_SECONDS", ge=1
    )
    max_attempts: int = Field(default=8, alias="SWEEPER_MAX_ATTEMPTS", ge=1)
    base_delay_seconds: int = Field(default=15, alias="SWEEPER_BASE_DELAY_SECONDS", ge=1)
    max_delay_seconds: int = Field(default=900, alias="SWEEPER_MAX_DELAY_SECONDS", ge=1)

    @model_validator(mode="after")
    def check_delays(self) -> "SweeperSettings":
        """max_delay_seconds must not be below base_delay_seconds."""
        if self.max_delay_seconds < self.base_delay_seconds:
            raise ValueError(
                "SWEEPER_MAX_DELAY_SECONDS must be >= SWEEPER_BASE_DELAY_SECONDS"
            )
        return self
