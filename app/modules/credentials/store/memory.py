"""In-memory lease store."""

import copy
import threading
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import structlog

from modules.credentials.models import Lease, LeaseStatus
from modules.credentials.store.base import LeaseStoreError, empty_stats

logger = structlog.get_logger()


class InMemoryLeaseStore:
    """Thread-safe in-memory implementation of LeaseStore.

    Suitable for single-instance deployments, development and tests. Leases
    are copied on the way in and out so callers never share mutable state
    with the store.
    """

    def __init__(self) -> None:
        self._leases: Dict[str, Lease] = {}
        self._claims: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.Lock()

    def save(self, lease: Lease) -> None:
        with self._lock:
            if lease.lease_id in self._leases:
                raise LeaseStoreError(f"Lease {lease.lease_id} already exists")
            self._leases[lease.lease_id] = copy.deepcopy(lease)
        logger.debug("lease_saved", lease_id=lease.lease_id)

    def get(self, lease_id: str) -> Optional[Lease]:
        with self._lock:
            lease = self._leases.get(lease_id)
            return copy.deepcopy(lease) if lease else None

    def update(self, lease: Lease) -> None:
        with self._lock:
            if lease.lease_id not in self._leases:
                raise LeaseStoreError(f"Lease {lease.lease_id} not found")
            self._leases[lease.lease_id] = copy.deepcopy(lease)

    def list(
        self,
        tenant: Optional[str] = None,
        role: Optional[str] = None,
        status: Optional[LeaseStatus] = None,
    ) -> List[Lease]:
        with self._lock:
            leases = [
                copy.deepcopy(lease)
                for lease in self._leases.values()
                if (tenant is None or lease.tenant == tenant)
                and (role is None or lease.role == role)
                and (status is None or lease.status == status)
            ]
        return sorted(leases, key=lambda lease: lease.issued_at)

    def _is_claimed(self, lease_id: str, now_ts: float) -> bool:
        claim = self._claims.get(lease_id)
        if claim is None:
            return False
        if claim["expires_at"] > now_ts:
            return True
        del self._claims[lease_id]
        logger.debug("lease_claim_expired", lease_id=lease_id, worker=claim["worker"])
        return False

    def fetch_expired(self, now: datetime, limit: int = 100) -> List[Lease]:
        now_ts = datetime.now(timezone.utc).timestamp()
        with self._lock:
            due = sorted(
                (
                    lease
                    for lease in self._leases.values()
                    if lease.is_due(now) and not self._is_claimed(lease.lease_id, now_ts)
                ),
                key=lambda lease: lease.expires_at,
            )
            return [copy.deepcopy(lease) for lease in due[:limit]]

    def claim(self, lease_id: str, worker_id: str, lease_seconds: int) -> bool:
        now_ts = datetime.now(timezone.utc).timestamp()
        with self._lock:
            if lease_id not in self._leases:
                logger.warning("lease_claim_failed_not_found", lease_id=lease_id)
                return False
            if self._is_claimed(lease_id, now_ts):
                logger.debug(
                    "lease_claim_failed_already_claimed",
                    lease_id=lease_id,
                    current_worker=self._claims[lease_id]["worker"],
                )
                return False
            self._claims[lease_id] = {
                "worker": worker_id,
                "expires_at": now_ts + lease_seconds,
            }
        return True

    def release(self, lease_id: str) -> None:
        with self._lock:
            self._claims.pop(lease_id, None)

    def get_stats(self) -> Dict[str, int]:
        stats = empty_stats()
        with self._lock:
            for lease in self._leases.values():
                stats[lease.status.value.lower()] += 1
                stats["total"] += 1
        return stats
