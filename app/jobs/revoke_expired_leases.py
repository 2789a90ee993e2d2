from infrastructure.logging import get_module_logger
from modules.credentials.sweeper import RevocationSweeper

logger = get_module_logger()


def revoke_expired_leases(sweeper: RevocationSweeper) -> dict:
    stats = sweeper.sweep()

    if stats["failed"]:
        logger.error(
            "expired_leases_abandoned",
            failed=stats["failed"],
            worker_id=sweeper.worker_id,
        )
    elif stats["processed"]:
        logger.info("expired_leases_revoked", **stats)

    return stats
