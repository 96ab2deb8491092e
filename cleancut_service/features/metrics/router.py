"""Prometheus scrape endpoint.

Endpoints:
    GET /metrics - Prometheus text exposition of the service registry

Metrics exposed include admissions and rejections by reason, applied and
rejected project transitions, queue claims/retries/dead entries, queue depth
by state, sweeper deletions and storage deletion failures.
"""

from __future__ import annotations

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from cleancut_service.infra.metrics.prometheus import REGISTRY

router = APIRouter(tags=["observability"])


@router.get("/metrics", include_in_schema=False)
async def metrics() -> Response:
    """Expose Prometheus metrics for scraping."""
    return Response(
        content=generate_latest(REGISTRY),
        media_type=CONTENT_TYPE_LATEST,
        headers={"Cache-Control": "no-cache, no-store, must-revalidate"},
    )
