import threading
import time
from typing import Optional

import schedule

from infrastructure.clients.aws import DynamoDBClient
from infrastructure.clients.postgres import PostgresClient
from infrastructure.configuration.infrastructure import SweeperSettings
from infrastructure.logging import get_module_logger
from jobs.revoke_expired_leases import revoke_expired_leases
from modules.credentials.sweeper import RevocationSweeper

logger = get_module_logger()


def safe_run(job):
    def wrapper(*args, **kwargs):
        try:
            job(*args, **kwargs)
        except Exception as e:  # pylint: disable=broad-except
            logger.error(
                "safe_run_error",
                error=str(e),
                function=job.__name__,
                module=job.__module__,
                job_args=args,
            )

    return wrapper


def init(
    sweeper: RevocationSweeper,
    settings: SweeperSettings,
    postgres: Optional[PostgresClient] = None,
    dynamodb: Optional[DynamoDBClient] = None,
):
    logger.info(
        "scheduled_tasks_initialized",
        sweeper_interval_seconds=settings.interval_seconds,
    )

    schedule.every(settings.interval_seconds).seconds.do(
        safe_run(revoke_expired_leases), sweeper=sweeper
    ).tag("credentials")
    schedule.every(5).minutes.do(safe_run(scheduler_heartbeat)).tag("credentials")
    if postgres is not None:
        schedule.every(5).minutes.do(
            safe_run(integration_healthchecks), postgres=postgres, dynamodb=dynamodb
        ).tag("credentials")


def stop():
    schedule.clear("credentials")


def scheduler_heartbeat():
    logger.info(
        "running_scheduler_heartbeat", module="scheduled_tasks", time=time.ctime()
    )


def integration_healthchecks(
    postgres: PostgresClient, dynamodb: Optional[DynamoDBClient] = None
):
    logger.info("running_integration_healthchecks")
    healthchecks = {
        f"postgres:{name}": (lambda name=name: postgres.healthcheck(name))
        for name in postgres.databases
    }
    if dynamodb is not None:
        healthchecks["dynamodb"] = dynamodb.healthcheck

    for key, healthcheck in healthchecks.items():
        result = healthcheck()
        if not result.is_success:
            logger.error(
                "integration_unhealthy",
                integration=key,
                error=result.message,
                error_code=result.error_code,
            )
        else:
            logger.info("integration_healthy", integration=key)


def run_continuously(interval=1):
    """Continuously run, while executing pending jobs at each
    elapsed time interval.
    @return cease_continuous_run: threading. Event which can
    be set to cease continuous run. Please note that it is
    *intended behavior that run_continuously() does not run
    missed jobs*. For example, if you've registered a job that
    should run every minute and you set a continuous run
    interval of one hour then your job won't be run 60 times
    at each interval but only once.
    """
    cease_continuous_run = threading.Event()

    class ScheduleThread(threading.Thread):
        def run(self):
            while not cease_continuous_run.is_set():
                schedule.run_pending()
                cease_continuous_run.wait(interval)

    continuous_thread = ScheduleThread(daemon=True)
    continuous_thread.start()
    return cease_continuous_run
