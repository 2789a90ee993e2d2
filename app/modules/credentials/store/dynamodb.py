"""DynamoDB-backed lease store for multi-replica deployments.

Table Schema:
    PK: lease_id (String)
    Attributes: tenant, role, database, username, requested_by, status,
               issued_at, expires_at, max_expires_at (epoch seconds with
               microseconds, e.g. "1772366400.250000"),
               revocation_statements (List), revoke_attempts, last_error,
               next_attempt_at, revoked_at, claim_worker, claim_expires_at, ttl
    GSI: status-expires_at-index (status + expires_at)
    GSI: tenant-issued_at-index (tenant + issued_at)
    TTL: ttl, set once a lease is no longer ACTIVE
"""

import time
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional

import structlog

from infrastructure.clients.aws import DynamoDBClient
from modules.credentials.models import Lease, LeaseStatus
from modules.credentials.store.base import LeaseStoreError, empty_stats

logger = structlog.get_logger()

STATUS_INDEX = "status-expires_at-index"
TENANT_INDEX = "tenant-issued_at-index"

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_MICROSECOND = timedelta(microseconds=1)


def _ts(value: datetime) -> Dict[str, str]:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    micros = (value - _EPOCH) // _MICROSECOND
    seconds, fraction = divmod(micros, 1_000_000)
    return {"N": f"{seconds}.{fraction:06d}"}


def _dt(attr: Optional[Dict[str, str]]) -> Optional[datetime]:
    if not attr or "N" not in attr:
        return None
    return _EPOCH + _MICROSECOND * int(Decimal(attr["N"]) * 1_000_000)


def _s(attr: Optional[Dict[str, str]]) -> Optional[str]:
    if not attr:
        return None
    return attr.get("S")


class DynamoDBLeaseStore:
    """DynamoDB implementation of LeaseStore.

    Provides:
    - Shared state across broker replicas
    - Atomic claims using conditional writes
    - Time-ordered expiry queries on a GSI
    - Automatic cleanup of finished leases via DynamoDB TTL

    Args:
        client: DynamoDBClient used for all table calls
        table_name: DynamoDB table name
        retention_days: days to keep REVOKED/FAILED leases before TTL removal
    """

    def __init__(
        self, client: DynamoDBClient, table_name: str, retention_days: int = 30
    ) -> None:
        self.client = client
        self.table_name = table_name
        self.retention_days = retention_days

        logger.info(
            "dynamodb_lease_store_initialized",
            table_name=table_name,
            retention_days=retention_days,
        )

    def _to_item(self, lease: Lease) -> Dict[str, Any]:
        item: Dict[str, Any] = {
            "lease_id": {"S": lease.lease_id},
            "tenant": {"S": lease.tenant},
            "role": {"S": lease.role},
            "database": {"S": lease.database},
            "username": {"S": lease.username},
            "requested_by": {"S": lease.requested_by},
            "status": {"S": lease.status.value},
            "issued_at": _ts(lease.issued_at),
            "expires_at": _ts(lease.expires_at),
            "max_expires_at": _ts(lease.max_expires_at),
            "revocation_statements": {
                "L": [{"S": s} for s in lease.revocation_statements]
            },
            "revoke_attempts": {"N": str(lease.revoke_attempts)},
        }
        if lease.last_error:
            item["last_error"] = {"S": lease.last_error}
        if lease.next_attempt_at:
            item["next_attempt_at"] = _ts(lease.next_attempt_at)
        if lease.revoked_at:
            item["revoked_at"] = _ts(lease.revoked_at)
        return item

    @staticmethod
    def _from_item(item: Dict[str, Any]) -> Lease:
        statements = item.get("revocation_statements", {}).get("L", [])
        return Lease(
            lease_id=item["lease_id"]["S"],
            tenant=item["tenant"]["S"],
            role=item["role"]["S"],
            database=item["database"]["S"],
            username=item["username"]["S"],
            requested_by=item["requested_by"]["S"],
            status=LeaseStatus(item["status"]["S"]),
            issued_at=_dt(item["issued_at"]),
            expires_at=_dt(item["expires_at"]),
            max_expires_at=_dt(item["max_expires_at"]),
            revocation_statements=[s["S"] for s in statements],
            revoke_attempts=int(item.get("revoke_attempts", {}).get("N", 0)),
            last_error=_s(item.get("last_error")),
            next_attempt_at=_dt(item.get("next_attempt_at")),
            revoked_at=_dt(item.get("revoked_at")),
        )

    def _retention_ttl(self) -> int:
        return int(time.time()) + self.retention_days * 24 * 60 * 60

    def save(self, lease: Lease) -> None:
        result = self.client.put_item(
            self.table_name,
            Item=self._to_item(lease),
            ConditionExpression="attribute_not_exists(lease_id)",
        )
        if not result.is_success:
            logger.error(
                "dynamodb_lease_save_failed",
                lease_id=lease.lease_id,
                error=result.message,
                error_code=result.error_code,
            )
            raise LeaseStoreError(f"Failed to save lease: {result.message}")
        logger.debug("lease_saved", lease_id=lease.lease_id)

    def get(self, lease_id: str) -> Optional[Lease]:
        result = self.client.get_item(
            self.table_name,
            Key={"lease_id": {"S": lease_id}},
            ConsistentRead=True,
        )
        if not result.is_success:
            logger.error(
                "dynamodb_lease_get_failed",
                lease_id=lease_id,
                error=result.message,
                error_code=result.error_code,
            )
            raise LeaseStoreError(f"Failed to read lease: {result.message}")
        item = (result.data or {}).get("Item")
        return self._from_item(item) if item else None

    def update(self, lease: Lease) -> None:
        names = {
            "#status": "status",
            "#expires_at": "expires_at",
            "#attempts": "revoke_attempts",
            "#last_error": "last_error",
            "#next_attempt_at": "next_attempt_at",
            "#revoked_at": "revoked_at",
            "#ttl": "ttl",
        }
        values: Dict[str, Any] = {
            ":status": {"S": lease.status.value},
            ":expires_at": _ts(lease.expires_at),
            ":attempts": {"N": str(lease.revoke_attempts)},
        }
        set_parts = [
            "#status = :status",
            "#expires_at = :expires_at",
            "#attempts = :attempts",
        ]
        remove_parts: List[str] = []

        optional = (
            ("#last_error", ":last_error", lease.last_error and {"S": lease.last_error}),
            (
                "#next_attempt_at",
                ":next_attempt_at",
                lease.next_attempt_at and _ts(lease.next_attempt_at),
            ),
            ("#revoked_at", ":revoked_at", lease.revoked_at and _ts(lease.revoked_at)),
        )
        for name, placeholder, value in optional:
            if value:
                set_parts.append(f"{name} = {placeholder}")
                values[placeholder] = value
            else:
                remove_parts.append(name)

        if lease.status == LeaseStatus.ACTIVE:
            remove_parts.append("#ttl")
        else:
            set_parts.append("#ttl = :ttl")
            values[":ttl"] = {"N": str(self._retention_ttl())}

        expression = "SET " + ", ".join(set_parts)
        if remove_parts:
            expression += " REMOVE " + ", ".join(remove_parts)

        result = self.client.update_item(
            self.table_name,
            Key={"lease_id": {"S": lease.lease_id}},
            UpdateExpression=expression,
            ConditionExpression="attribute_exists(lease_id)",
            ExpressionAttributeNames=names,
            ExpressionAttributeValues=values,
        )
        if not result.is_success:
            logger.error(
                "dynamodb_lease_update_failed",
                lease_id=lease.lease_id,
                error=result.message,
                error_code=result.error_code,
            )
            raise LeaseStoreError(f"Failed to update lease: {result.message}")

    def list(
        self,
        tenant: Optional[str] = None,
        role: Optional[str] = None,
        status: Optional[LeaseStatus] = None,
    ) -> List[Lease]:
        if tenant is not None:
            result = self.client.query_all(
                self.table_name,
                IndexName=TENANT_INDEX,
                KeyConditionExpression="#tenant = :tenant",
                ExpressionAttributeNames={"#tenant": "tenant"},
                ExpressionAttributeValues={":tenant": {"S": tenant}},
            )
        elif status is not None:
            result = self.client.query_all(
                self.table_name,
                IndexName=STATUS_INDEX,
                KeyConditionExpression="#status = :status",
                ExpressionAttributeNames={"#status": "status"},
                ExpressionAttributeValues={":status": {"S": status.value}},
            )
        else:
            result = self.client.scan_all(self.table_name)

        if not result.is_success:
            logger.error(
                "dynamodb_lease_list_failed",
                error=result.message,
                error_code=result.error_code,
            )
            raise LeaseStoreError(f"Failed to list leases: {result.message}")

        # GSI projections must include every lease attribute (ProjectionType ALL)
        leases = [self._from_item(item) for item in result.data or []]
        leases = [
            lease
            for lease in leases
            if (role is None or lease.role == role)
            and (status is None or lease.status == status)
        ]
        return sorted(leases, key=lambda lease: lease.issued_at)

    def fetch_expired(self, now: datetime, limit: int = 100) -> List[Lease]:
        claim_now = str(int(time.time()))
        result = self.client.query_all(
            self.table_name,
            IndexName=STATUS_INDEX,
            KeyConditionExpression="#status = :active AND expires_at <= :now",
            FilterExpression=(
                "(attribute_not_exists(next_attempt_at) OR next_attempt_at <= :now)"
                " AND (attribute_not_exists(claim_expires_at)"
                " OR claim_expires_at < :claim_now)"
            ),
            ExpressionAttributeNames={"#status": "status"},
            ExpressionAttributeValues={
                ":active": {"S": LeaseStatus.ACTIVE.value},
                ":now": _ts(now),
                ":claim_now": {"N": claim_now},
            },
        )
        if not result.is_success:
            logger.error(
                "dynamodb_fetch_expired_failed",
                error=result.message,
                error_code=result.error_code,
            )
            return []

        items = result.data or []
        leases = [self._from_item(item) for item in items[:limit]]
        logger.debug(
            "fetched_expired_leases", count=len(leases), total_queried=len(items)
        )
        return leases

    def claim(self, lease_id: str, worker_id: str, lease_seconds: int) -> bool:
        now = int(time.time())
        result = self.client.update_item(
            self.table_name,
            Key={"lease_id": {"S": lease_id}},
            UpdateExpression="SET claim_worker = :worker, claim_expires_at = :expires",
            ConditionExpression=(
                "attribute_exists(lease_id) AND "
                "(attribute_not_exists(claim_worker) OR claim_expires_at < :now)"
            ),
            ExpressionAttributeValues={
                ":worker": {"S": worker_id},
                ":expires": {"N": str(now + lease_seconds)},
                ":now": {"N": str(now)},
            },
        )
        if result.is_success:
            return True

        if result.error_code == "ConditionalCheckFailedException":
            logger.debug(
                "lease_claim_failed_already_claimed",
                lease_id=lease_id,
                worker=worker_id,
            )
        else:
            logger.error(
                "dynamodb_claim_failed",
                lease_id=lease_id,
                error=result.message,
                error_code=result.error_code,
            )
        return False

    def release(self, lease_id: str) -> None:
        result = self.client.update_item(
            self.table_name,
            Key={"lease_id": {"S": lease_id}},
            UpdateExpression="REMOVE claim_worker, claim_expires_at",
        )
        if not result.is_success:
            # The claim expires on its own after lease_seconds
            logger.warning(
                "dynamodb_release_failed",
                lease_id=lease_id,
                error=result.message,
                error_code=result.error_code,
            )

    def get_stats(self) -> Dict[str, int]:
        result = self.client.scan_all(
            self.table_name,
            ProjectionExpression="#status",
            ExpressionAttributeNames={"#status": "status"},
        )
        if not result.is_success:
            raise LeaseStoreError(f"Failed to read lease stats: {result.message}")

        stats = empty_stats()
        for item in result.data or []:
            status = _s(item.get("status"))
            if status:
                stats[status.lower()] = stats.get(status.lower(), 0) + 1
                stats["total"] += 1
        return stats
