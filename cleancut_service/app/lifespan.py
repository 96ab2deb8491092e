"""Application lifespan management.

Startup Order:
1. Core (logging, metrics)
2. Database (tables created when DB_CREATE_TABLES)
3. Asset store (local directory or S3 bucket)
4. Scheduler (expiry sweep, monthly usage reset)

Shutdown Order: Reverse of startup
"""

from __future__ import annotations

from contextlib import asynccontextmanager
import logging
from typing import TYPE_CHECKING

from cleancut_service.core.settings import (
    get_app_settings,
    get_db_settings,
    get_job_settings,
    get_logging_settings,
    get_storage_settings,
)
from cleancut_service.infra.logging.config import setup_logging
from cleancut_service.infra.metrics.prometheus import application_info

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from fastapi import FastAPI

logger = logging.getLogger(__name__)

_scheduler_started = False


async def _startup_core() -> None:
    """Configure logging and the application info metric."""
    app = get_app_settings()

    setup_logging(log_settings=get_logging_settings(), force=True)
    logger.info(
        "Application starting",
        extra={"service": app.service_name, "environment": app.environment},
    )

    application_info.labels(
        version=app.version,
        service=app.service_name,
        environment=app.environment,
    ).set(1)


async def _startup_database() -> None:
    from cleancut_service.infra.database import init_database

    if not get_db_settings().enabled:
        logger.warning("Database disabled, skipping initialization")
        return

    try:
        await init_database()
    except Exception:
        logger.exception("Database unavailable, failing startup")
        raise


async def _startup_storage() -> None:
    from cleancut_service.infra.storage import get_asset_store

    settings = get_storage_settings()
    try:
        await get_asset_store().startup()
        logger.info(
            "Asset store initialized",
            extra={"backend": settings.backend, "bucket": settings.bucket},
        )
    except Exception:
        logger.exception("Asset store unavailable, failing startup")
        raise


async def _startup_tasks() -> None:
    global _scheduler_started
    from cleancut_service.infra.tasks import setup_scheduled_jobs, start_scheduler

    if not get_job_settings().scheduler_enabled:
        logger.info("Scheduler disabled")
        return

    setup_scheduled_jobs()
    await start_scheduler()
    _scheduler_started = True


async def _shutdown_tasks() -> None:
    global _scheduler_started
    from cleancut_service.infra.tasks import stop_scheduler

    if not _scheduler_started:
        return
    try:
        await stop_scheduler()
    except Exception as e:
        logger.warning("Error stopping scheduler", extra={"error": str(e)})
    _scheduler_started = False


async def _shutdown_storage() -> None:
    from cleancut_service.infra.storage import get_asset_store

    try:
        await get_asset_store().shutdown()
    except Exception as e:
        logger.warning("Error closing asset store", extra={"error": str(e)})


async def _shutdown_database() -> None:
    from cleancut_service.infra.database import close_database

    try:
        await close_database()
    except Exception as e:
        logger.warning("Error closing database", extra={"error": str(e)})


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifecycle.

    Args:
        app: FastAPI application instance.

    Yields:
        None during application runtime.
    """
    _ = app

    await _startup_core()
    await _startup_database()
    await _startup_storage()
    await _startup_tasks()

    app_settings = get_app_settings()
    logger.info(
        "Application startup complete - listening on %s:%s",
        app_settings.host,
        app_settings.port,
        extra={
            "service": app_settings.service_name,
            "environment": app_settings.environment,
            "scheduler_enabled": _scheduler_started,
        },
    )

    yield

    logger.info("Application shutting down", extra={"service": app_settings.service_name})

    await _shutdown_tasks()
    await _shutdown_storage()
    await _shutdown_database()

    logger.info("Application shutdown complete")


__all__ = ["lifespan"]
