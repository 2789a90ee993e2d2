"""Lease storage interface.

The protocol allows multiple storage backends (in-memory, DynamoDB) while
keeping the same claim semantics for concurrent sweepers.
"""

from datetime import datetime
from typing import Dict, List, Optional, Protocol

from modules.credentials.models import Lease, LeaseStatus


class LeaseStoreError(RuntimeError):
    """Raised when the backend cannot persist or update a lease."""


class LeaseStore(Protocol):
    """Storage interface for leases.

    Methods:
        save: Persist a new lease; raises LeaseStoreError on failure or duplicate id
        get: Return a lease by id, or None
        update: Persist mutable lease fields; raises LeaseStoreError
        list: Return leases filtered by tenant, role and status
        fetch_expired: Return unclaimed ACTIVE leases due for revocation
        claim: Atomically claim a lease for one worker
        release: Drop any claim on a lease
        get_stats: Lease counts by status
    """

    def save(self, lease: Lease) -> None: ...

    def get(self, lease_id: str) -> Optional[Lease]: ...

    def update(self, lease: Lease) -> None: ...

    def list(
        self,
        tenant: Optional[str] = None,
        role: Optional[str] = None,
        status: Optional[LeaseStatus] = None,
    ) -> List[Lease]: ...

    def fetch_expired(self, now: datetime, limit: int = 100) -> List[Lease]:
        """Return ACTIVE leases with expires_at <= now whose next_attempt_at
        is unset or <= now, and which no worker currently holds.
        """
        ...

    def claim(self, lease_id: str, worker_id: str, lease_seconds: int) -> bool:
        """Return True if the claim succeeded, False if another worker holds it."""
        ...

    def release(self, lease_id: str) -> None: ...

    def get_stats(self) -> Dict[str, int]: ...


def empty_stats() -> Dict[str, int]:
    stats = {status.value.lower(): 0 for status in LeaseStatus}
    stats["total"] = 0
    return stats
