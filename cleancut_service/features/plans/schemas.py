"""Plan catalog schemas."""

from __future__ import annotations

from cleancut_service.core.schemas import CustomBase


class PlanResponse(CustomBase):
    tier: str
    name: str
    daily_limit: int | None = None
    monthly_limit: int | None = None
    max_resolution: str
    priority: str
    duration_days: int
    price: float
    features: list[str]
