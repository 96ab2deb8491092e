"""Plan catalog endpoint."""

from __future__ import annotations

from fastapi import APIRouter

from .catalog import get_plan_catalog
from .schemas import PlanResponse

router = APIRouter(prefix="/plans", tags=["plans"])


@router.get("", response_model=list[PlanResponse], summary="List subscription plans")
async def list_plans() -> list[PlanResponse]:
    return [
        PlanResponse(
            tier=limits.tier.value,
            name=limits.name,
            daily_limit=limits.daily_limit,
            monthly_limit=limits.monthly_limit,
            max_resolution=limits.max_resolution,
            priority=limits.priority,
            duration_days=limits.duration_days,
            price=limits.price,
            features=limits.features,
        )
        for limits in get_plan_catalog().values()
    ]
