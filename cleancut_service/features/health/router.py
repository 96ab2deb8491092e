"""Liveness and readiness probes."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Response, status
from sqlalchemy import text

from cleancut_service.core.dependencies import AssetStoreDep, SessionDep
from cleancut_service.core.settings import get_app_settings
from cleancut_service.infra.tasks import get_job_status

router = APIRouter(prefix="/health", tags=["health"])

logger = logging.getLogger(__name__)


@router.get("", summary="Liveness probe")
async def health() -> dict:
    settings = get_app_settings()
    return {"status": "ok", "service": settings.service_name, "version": settings.version}


@router.get("/ready", summary="Readiness probe")
async def ready(session: SessionDep, asset_store: AssetStoreDep, response: Response) -> dict:
    """Report database and asset store reachability plus scheduled jobs."""
    checks: dict[str, bool] = {}
    try:
        await session.execute(text("SELECT 1"))
        checks["database"] = True
    except Exception:
        logger.warning("Readiness check: database unreachable", exc_info=True)
        checks["database"] = False

    try:
        checks["storage"] = await asset_store.health_check()
    except Exception:
        logger.warning("Readiness check: storage unreachable", exc_info=True)
        checks["storage"] = False

    healthy = all(checks.values())
    if not healthy:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return {"status": "ok" if healthy else "degraded", "checks": checks, "jobs": get_job_status()}
