"""Account usage schemas."""

from __future__ import annotations

from datetime import date, datetime
from uuid import UUID

from cleancut_service.core.schemas import CustomBase


class AccountUsageResponse(CustomBase):
    """An account's plan and quota position as of now.

    Counters from a passed day or month are reported as zero.
    """

    account_id: UUID
    plan: str
    plan_name: str | None = None
    plan_start_date: datetime | None = None
    plan_end_date: datetime | None = None
    plan_active: bool
    uploads_today: int
    uploads_this_month: int
    daily_limit: int | None = None
    monthly_limit: int | None = None
    remaining_today: int | None = None
    remaining_this_month: int | None = None
    max_resolution: str | None = None
    priority: str | None = None
    last_upload_date: date | None = None
