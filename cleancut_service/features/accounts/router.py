"""Account usage endpoint."""

from __future__ import annotations

from fastapi import APIRouter

from cleancut_service.core.dependencies import AccountIdDep, SessionDep

from .schemas import AccountUsageResponse
from .service import AccountService

router = APIRouter(prefix="/accounts", tags=["accounts"])


@router.get(
    "/me/usage",
    response_model=AccountUsageResponse,
    summary="Plan and quota usage",
    description="Current plan, upload counters for today and this month, and remaining quota.",
)
async def get_usage(account_id: AccountIdDep, session: SessionDep) -> AccountUsageResponse:
    service = AccountService()
    account = await service.get(session, account_id)
    return AccountUsageResponse.model_validate(service.usage(account))
