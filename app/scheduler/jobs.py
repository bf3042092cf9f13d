"""
app/scheduler/jobs.py

APScheduler-based trigger for the mail ingestion cycle.

Schedule
--------
  mail_ingestion: cron expression from ``INGESTION_CRON`` (default every
                  minute, UTC)

Overlap
-------
The job runs through ``IngestionCycleRunner.run_if_idle``, so a tick that
fires while a cycle (scheduled or manual) is still running is skipped. The
job itself is also registered with ``max_instances=1`` and ``coalesce=True``.

Lifecycle
----------
Call ``build_scheduler()`` once to get a configured ``BackgroundScheduler``.
Start it on app boot; shut it down gracefully on app shutdown.
The scheduler is wired into FastAPI via the ``lifespan`` context in main.py.
"""

from __future__ import annotations

import logging

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from app.config import IngestionSettings, get_ingestion_settings
from app.services.ingestion_cycle_service import IngestionCycleRunner, get_ingestion_cycle_runner

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Job: Mail ingestion cycle
# ---------------------------------------------------------------------------


def run_ingestion_cycle_job(runner: IngestionCycleRunner | None = None) -> None:
    """
    Run one ingestion cycle unless one is already in flight.

    Errors are logged; the scheduler keeps firing on the next tick.
    """
    runner = runner or get_ingestion_cycle_runner()
    try:
        summary = runner.run_if_idle()
    except Exception as exc:  # noqa: BLE001
        logger.exception("Scheduler: mail_ingestion failed: %s", exc)
        return

    if summary is None:
        logger.info("Scheduler: mail_ingestion skipped, previous cycle still running")
        return

    logger.info(
        "Scheduler: mail_ingestion complete processed=%s skipped=%s snapshots=%s errors=%s",
        summary.processed,
        summary.skipped,
        summary.snapshots_created,
        summary.error_count,
    )


# ---------------------------------------------------------------------------
# Scheduler factory
# ---------------------------------------------------------------------------


def build_scheduler(settings: IngestionSettings | None = None) -> BackgroundScheduler:
    """
    Build and register the periodic ingestion job.

    Returns a configured but *not yet started* ``BackgroundScheduler``.
    The caller must call ``.start()`` and ``.shutdown(wait=True)`` at the
    appropriate lifecycle points. No job is registered when
    ``INGESTION_SCHEDULER_ENABLED`` is false.
    """
    settings = settings or get_ingestion_settings()
    scheduler = BackgroundScheduler(timezone="UTC")

    if not settings.scheduler_enabled:
        logger.info("Scheduler: mail_ingestion disabled by configuration")
        return scheduler

    scheduler.add_job(
        run_ingestion_cycle_job,
        trigger=CronTrigger.from_crontab(settings.cron, timezone="UTC"),
        id="mail_ingestion",
        name="Mail ingestion cycle",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
        misfire_grace_time=30,
    )

    return scheduler
