"""APScheduler integration for the sweeper jobs.

Jobs run inside the API process on the asyncio event loop:
- expiry sweep every ``JOB_SWEEP_INTERVAL_MINUTES`` (and once at startup)
- monthly usage reset on ``JOB_MONTHLY_RESET_CRON``
"""

from __future__ import annotations

from datetime import UTC, datetime
import logging
from typing import Any

from apscheduler.schedulers.asyncio import (
    AsyncIOScheduler,  # type: ignore[import-untyped]
)
from apscheduler.triggers.cron import CronTrigger  # type: ignore[import-untyped]
from apscheduler.triggers.interval import (
    IntervalTrigger,  # type: ignore[import-untyped]
)

from cleancut_service.core.settings import get_job_settings

logger = logging.getLogger(__name__)

# Initialize APScheduler (runs in same process as FastAPI)
scheduler = AsyncIOScheduler(
    timezone="UTC",
    job_defaults={
        "coalesce": True,  # Combine multiple pending executions into one
        "max_instances": 1,  # Only one instance of each job at a time
        "misfire_grace_time": 60,  # Allow 60s delay before considering job missed
    },
)


async def _run_sweep() -> None:
    from cleancut_service.features.sweeper.tasks import sweep_expired_projects

    await sweep_expired_projects()


async def _run_monthly_reset() -> None:
    from cleancut_service.features.sweeper.tasks import reset_monthly_usage

    await reset_monthly_usage()


def setup_scheduled_jobs() -> None:
    """Register the sweeper jobs with APScheduler."""
    job_settings = get_job_settings()
    if not job_settings.scheduler_enabled:
        logger.warning("Scheduler disabled, skipping job scheduling")
        return

    logger.info("Setting up scheduled jobs with APScheduler")

    sweep_kwargs: dict[str, Any] = {}
    if job_settings.sweep_on_startup:
        sweep_kwargs["next_run_time"] = datetime.now(UTC)
    scheduler.add_job(
        func=_run_sweep,
        trigger=IntervalTrigger(minutes=job_settings.sweep_interval_minutes),
        id="sweep_expired_projects",
        name="Delete expired projects and their files",
        replace_existing=True,
        **sweep_kwargs,
    )

    scheduler.add_job(
        func=_run_monthly_reset,
        trigger=CronTrigger.from_crontab(job_settings.monthly_reset_cron, timezone="UTC"),
        id="reset_monthly_usage",
        name="Reset monthly upload counters",
        replace_existing=True,
    )

    logger.info(f"Scheduled {len(scheduler.get_jobs())} jobs")


async def start_scheduler() -> None:
    """Start the APScheduler.

    Call during application startup after setup_scheduled_jobs().
    """
    if not scheduler.running:
        logger.info("Starting APScheduler")
        scheduler.start()
        logger.info(f"APScheduler started with {len(scheduler.get_jobs())} jobs")
    else:
        logger.warning("APScheduler is already running")


async def stop_scheduler() -> None:
    """Stop the APScheduler gracefully."""
    if scheduler.running:
        logger.info("Stopping APScheduler")
        scheduler.shutdown(wait=True)
        logger.info("APScheduler stopped")
    else:
        logger.debug("APScheduler is not running")


def get_job_status() -> list[dict]:
    """Get status of all scheduled jobs.

    Jobs added before the scheduler starts have no next run time yet.
    """
    status = []
    for job in scheduler.get_jobs():
        next_run_time = getattr(job, "next_run_time", None)
        status.append(
            {
                "id": job.id,
                "name": job.name,
                "next_run_time": next_run_time.isoformat() if next_run_time else None,
                "trigger": str(job.trigger),
            }
        )
    return status
