"""Scheduled sweeper jobs.

Each job opens its own session; failures are logged and re-raised so the
scheduler records them, and the next run starts fresh.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from cleancut_service.infra.database import get_async_session

from .service import SweeperService

logger = logging.getLogger(__name__)


async def sweep_expired_projects() -> dict:
    """Delete expired projects and their files.

    Scheduled: every JOB_SWEEP_INTERVAL_MINUTES, plus once at startup.
    """
    logger.info("Running sweep_expired_projects task")
    try:
        async with get_async_session() as session:
            summary = await SweeperService().sweep_expired(session)
    except Exception:
        logger.exception("Expiry sweep failed")
        raise
    return {
        "status": "success",
        "scanned": summary.scanned,
        "deleted": summary.deleted,
        "failed": summary.failed,
        "orphaned_refs": summary.orphaned_refs,
        "swept_at": datetime.now(UTC).isoformat(),
    }


async def reset_monthly_usage() -> dict:
    """Reset monthly upload counters.

    Scheduled: JOB_MONTHLY_RESET_CRON (default 00:00 UTC on the 1st).
    """
    logger.info("Running reset_monthly_usage task")
    try:
        async with get_async_session() as session:
            count = await SweeperService().reset_monthly_counters(session)
    except Exception:
        logger.exception("Monthly usage reset failed")
        raise
    return {"status": "success", "accounts_reset": count, "reset_at": datetime.now(UTC).isoformat()}
