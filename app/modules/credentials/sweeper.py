"""Revocation sweeper.

Finds expired leases and revokes them. Several broker replicas may sweep at
the same time; the store's claim keeps two sweepers off the same lease.
"""

import os
import socket
from datetime import datetime, timedelta
from typing import Dict, Optional

from infrastructure.clients.postgres import PostgresClient
from infrastructure.configuration.infrastructure import SweeperSettings
from infrastructure.logging import get_module_logger
from infrastructure.operations import OperationResult
from modules.credentials.broker import Clock, execute_revocation, utc_now
from modules.credentials.models import Lease, LeaseStatus
from modules.credentials.store import LeaseStore

logger = get_module_logger()


def default_worker_id() -> str:
    return f"sweeper-{socket.gethostname()}-{os.getpid()}"


class RevocationSweeper:
    """Revoke expired leases in batches.

    Attributes:
        store: lease store holding the leases
        postgres: client used to run revocation statements
        settings: batch size, claim lease and backoff configuration
        worker_id: identifier used for claims
    """

    def __init__(
        self,
        store: LeaseStore,
        postgres: PostgresClient,
        settings: SweeperSettings,
        worker_id: Optional[str] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self.store = store
        self.postgres = postgres
        self.settings = settings
        self.worker_id = worker_id or default_worker_id()
        self._clock = clock or utc_now
        self.log = logger.bind(worker_id=self.worker_id)

    def backoff_seconds(self, attempts: int) -> int:
        """Delay before the next attempt: min(base * 2**attempts, max)."""
        return min(
            self.settings.base_delay_seconds * (2**attempts),
            self.settings.max_delay_seconds,
        )

    def sweep(self) -> Dict[str, int]:
        """Process one batch of expired leases.

        Returns:
            Dictionary with processing statistics:
                - processed: leases a revocation was attempted for
                - revoked: leases now REVOKED
                - retried: leases rescheduled with backoff
                - failed: leases that reached max attempts (now FAILED)
                - skipped: leases claimed elsewhere, no longer due, or whose
                  outcome could not be stored
        """
        stats = {"processed": 0, "revoked": 0, "retried": 0, "failed": 0, "skipped": 0}
        now = self._clock()

        leases = self.store.fetch_expired(now, limit=self.settings.batch_size)
        if not leases:
            self.log.debug("sweep_no_expired_leases")
            return stats

        self.log.info("sweep_start", lease_count=len(leases))

        for candidate in leases:
            lease_id = candidate.lease_id
            if not self.store.claim(
                lease_id, self.worker_id, self.settings.claim_lease_seconds
            ):
                stats["skipped"] += 1
                continue

            try:
                lease = self.store.get(lease_id)
                if lease is None or not lease.is_due(now):
                    # Revoked or renewed since the batch was fetched
                    stats["skipped"] += 1
                    continue

                outcome = self._process(lease, now)
                stats["processed"] += 1
                stats[outcome] += 1
            except Exception as e:  # pylint: disable=broad-except
                # Nothing could be recorded, the lease stays due for the next sweep
                self.log.error(
                    "sweep_lease_store_error",
                    lease_id=lease_id,
                    error=str(e),
                    exc_info=True,
                )
                stats["skipped"] += 1
            finally:
                self.store.release(lease_id)

        self.log.info("sweep_complete", **stats)
        return stats

    def _process(self, lease: Lease, now: datetime) -> str:
        try:
            result = execute_revocation(self.postgres, lease)
        except Exception as e:  # pylint: disable=broad-except
            self.log.error(
                "sweep_lease_exception",
                lease_id=lease.lease_id,
                error=str(e),
                exc_info=True,
            )
            result = OperationResult.transient_error(
                str(e), error_code="REVOCATION_EXCEPTION"
            )

        if result.is_success:
            lease.status = LeaseStatus.REVOKED
            lease.revoked_at = now
            lease.last_error = None
            lease.next_attempt_at = None
            self.store.update(lease)
            self.log.info(
                "lease_revoked",
                lease_id=lease.lease_id,
                attempts=lease.revoke_attempts + 1,
            )
            return "revoked"

        lease.revoke_attempts += 1
        lease.last_error = result.message

        if lease.revoke_attempts >= self.settings.max_attempts:
            lease.status = LeaseStatus.FAILED
            lease.next_attempt_at = None
            self.store.update(lease)
            self.log.error(
                "lease_revocation_abandoned",
                lease_id=lease.lease_id,
                tenant=lease.tenant,
                role=lease.role,
                username=lease.username,
                attempts=lease.revoke_attempts,
                error=result.message,
                error_code=result.error_code,
            )
            return "failed"

        delay = self.backoff_seconds(lease.revoke_attempts)
        lease.next_attempt_at = now + timedelta(seconds=delay)
        self.store.update(lease)
        self.log.warning(
            "lease_revocation_retry_scheduled",
            lease_id=lease.lease_id,
            attempts=lease.revoke_attempts,
            delay_seconds=delay,
            error_code=result.error_code,
        )
        return "retried"
