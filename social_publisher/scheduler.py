"""
Interval runner for the batch sweep.

Runs the dispatcher's sweep every sweep_interval_minutes, plus once at
start-up. Use this when no external scheduler calls the HTTP trigger.

    python -m social_publisher.scheduler
"""

import asyncio
import signal
from datetime import timedelta

import structlog
from apscheduler.schedulers.asyncio import AsyncIOScheduler

from .application.services import (
    DEFAULT_CLAIM_TIMEOUT,
    PublishRouter,
    ScheduledDispatcher,
    SweepResult,
)
from .channels import build_adapter_registry
from .config import Settings, settings
from .infrastructure.logging import configure_logging, new_sweep_id
from .infrastructure.persistence import (
    Database,
    SqlAlchemyCredentialRepository,
    SqlAlchemyPostRepository,
)

logger = structlog.get_logger()


class SweepJob:
    """One sweep per call, each with its own database session."""

    def __init__(
        self,
        database: Database,
        router: PublishRouter,
        batch_size: int,
        claim_timeout: timedelta = DEFAULT_CLAIM_TIMEOUT,
    ) -> None:
        self._database = database
        self._router = router
        self._batch_size = batch_size
        self._claim_timeout = claim_timeout

    async def run(self) -> SweepResult | None:
        new_sweep_id()
        try:
            async with self._database.session() as session:
                dispatcher = ScheduledDispatcher(
                    posts=SqlAlchemyPostRepository(session),
                    credentials=SqlAlchemyCredentialRepository(session),
                    router=self._router,
                    batch_size=self._batch_size,
                    claim_timeout=self._claim_timeout,
                )
                return await dispatcher.sweep()
        except Exception as e:
            logger.warning("Sweep failed, will retry next interval", error=str(e), exc_info=True)
            return None


def build_scheduler(job: SweepJob, config: Settings) -> AsyncIOScheduler:
    scheduler = AsyncIOScheduler()
    scheduler.add_job(
        job.run,
        "interval",
        minutes=config.sweep_interval_minutes,
        id="publish_due_posts",
        max_instances=1,  # Prevent overlapping sweeps
        coalesce=True,
    )
    return scheduler


async def main() -> None:
    configure_logging(f"{settings.service_name}-scheduler", settings.log_level)
    logger.info("Starting scheduler", interval_minutes=settings.sweep_interval_minutes)

    database = Database(settings.database_url)
    await database.create_tables()
    router = PublishRouter(build_adapter_registry(settings))
    job = SweepJob(
        database,
        router,
        settings.sweep_batch_size,
        claim_timeout=timedelta(minutes=settings.claim_timeout_minutes),
    )

    scheduler = build_scheduler(job, settings)
    stop = asyncio.Event()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, stop.set)

    scheduler.start()

    # Run initial sweep immediately
    await job.run()

    try:
        await stop.wait()
    finally:
        scheduler.shutdown(wait=False)
        await database.close()
        logger.info("Scheduler shutdown complete")


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
