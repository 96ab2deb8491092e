"""Router registry and setup."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from cleancut_service.core.settings import get_app_settings
from cleancut_service.features.accounts.router import router as accounts_router
from cleancut_service.features.health.router import router as health_router
from cleancut_service.features.metrics.router import router as metrics_router
from cleancut_service.features.plans.router import router as plans_router
from cleancut_service.features.projects.router import router as projects_router
from cleancut_service.features.queue.router import router as worker_router

if TYPE_CHECKING:
    from fastapi import FastAPI

    from cleancut_service.core.settings.app import AppSettings

logger = logging.getLogger(__name__)


def setup_routers(app: FastAPI, app_settings: AppSettings | None = None) -> None:
    """Register all feature routers with the application."""
    app_settings = app_settings or get_app_settings()
    api_prefix = app_settings.api_prefix

    # Metrics endpoint (no prefix - accessible at /metrics)
    if app_settings.metrics_enabled:
        app.include_router(metrics_router)

    app.include_router(health_router, prefix=api_prefix)
    app.include_router(plans_router, prefix=api_prefix)
    app.include_router(accounts_router, prefix=api_prefix)
    app.include_router(projects_router, prefix=api_prefix)
    app.include_router(worker_router, prefix=api_prefix)

    logger.info("Routers configured", extra={"api_prefix": api_prefix})
