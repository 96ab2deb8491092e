"""Account provisioning and usage reporting.

Registration and billing live outside this service; the CLI uses
``create``/``set_plan`` to stand in for them.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta
from typing import TYPE_CHECKING

from cleancut_service.core.exceptions import (
    ConflictException,
    NotFoundException,
    ValidationException,
)
from cleancut_service.core.services.base import BaseService
from cleancut_service.features.plans.catalog import PlanLimits, get_plan_catalog
from cleancut_service.features.plans.policy import month_key

from .models import Account, PlanTier
from .repository import AccountRepository, get_account_repository

if TYPE_CHECKING:
    from uuid import UUID

    from sqlalchemy.ext.asyncio import AsyncSession


def account_not_found() -> NotFoundException:
    return NotFoundException(detail="Account not found", type="account-not-found")


def _remaining(limit: int | None, used: int) -> int | None:
    return None if limit is None else max(0, limit - used)


@dataclass(frozen=True, slots=True)
class UsageSnapshot:
    account_id: UUID
    plan: str
    plan_name: str | None
    plan_start_date: datetime | None
    plan_end_date: datetime | None
    plan_active: bool
    uploads_today: int
    uploads_this_month: int
    daily_limit: int | None
    monthly_limit: int | None
    remaining_today: int | None
    remaining_this_month: int | None
    max_resolution: str | None
    priority: str | None
    last_upload_date: date | None


class AccountService(BaseService):
    def __init__(
        self,
        repository: AccountRepository | None = None,
        catalog: Mapping[str, PlanLimits] | None = None,
    ) -> None:
        super().__init__()
        self.repository = repository or get_account_repository()
        self.catalog = catalog if catalog is not None else get_plan_catalog()

    def _limits(self, plan: str) -> PlanLimits:
        limits = self.catalog.get(plan)
        if limits is None:
            raise ValidationException(
                detail=f"Unknown plan '{plan}'",
                type="invalid-plan",
                extra={"field": "plan", "allowed": sorted(self.catalog)},
            )
        return limits

    async def get(self, session: AsyncSession, account_id: UUID) -> Account:
        account = await self.repository.get(session, account_id)
        if account is None:
            raise account_not_found()
        return account

    async def create(
        self,
        session: AsyncSession,
        *,
        email: str | None = None,
        plan: str = PlanTier.FREE.value,
        now: datetime | None = None,
    ) -> Account:
        """Register an account on ``plan``, starting its plan period now."""
        now = now or datetime.now(UTC)
        limits = self._limits(plan)
        if email is not None and await self.repository.get_by(session, Account.email, email):
            raise ConflictException(detail="Email already registered", type="email-taken")

        account = Account(
            email=email,
            plan=plan,
            plan_start_date=now,
            plan_end_date=now + timedelta(days=limits.duration_days),
            uploads_today=0,
            uploads_this_month=0,
        )
        account = await self.repository.create(session, account)
        self.logger.info("Account created", extra={"account_id": str(account.id), "plan": plan})
        return account

    async def set_plan(
        self,
        session: AsyncSession,
        account_id: UUID,
        plan: str,
        *,
        days: int | None = None,
        now: datetime | None = None,
    ) -> Account:
        """Switch an account's plan and restart its plan period.

        Upload counters are left alone.
        """
        now = now or datetime.now(UTC)
        limits = self._limits(plan)
        account = await self.repository.get(session, account_id, for_update=True)
        if account is None:
            raise account_not_found()

        account.plan = plan
        account.plan_start_date = now
        account.plan_end_date = now + timedelta(days=days if days is not None else limits.duration_days)
        await session.flush()
        self.logger.info(
            "Account plan changed",
            extra={
                "account_id": str(account_id),
                "plan": plan,
                "plan_end_date": account.plan_end_date.isoformat(),
            },
        )
        return account

    def usage(self, account: Account, now: datetime | None = None) -> UsageSnapshot:
        """Effective quota position of ``account`` at ``now``."""
        now = now or datetime.now(UTC)
        limits = self.catalog.get(account.plan)
        uploads_today = account.uploads_today if account.last_upload_date == now.date() else 0
        uploads_this_month = (
            account.uploads_this_month if account.usage_month == month_key(now) else 0
        )
        daily_limit = limits.daily_limit if limits else None
        monthly_limit = limits.monthly_limit if limits else None
        return UsageSnapshot(
            account_id=account.id,
            plan=account.plan,
            plan_name=limits.name if limits else None,
            plan_start_date=account.plan_start_date,
            plan_end_date=account.plan_end_date,
            plan_active=limits is not None
            and (account.plan_end_date is None or account.plan_end_date >= now),
            uploads_today=uploads_today,
            uploads_this_month=uploads_this_month,
            daily_limit=daily_limit,
            monthly_limit=monthly_limit,
            remaining_today=_remaining(daily_limit, uploads_today),
            remaining_this_month=_remaining(monthly_limit, uploads_this_month),
            max_resolution=limits.max_resolution if limits else None,
            priority=limits.priority if limits else None,
            last_upload_date=account.last_upload_date,
        )
