"""Unit tests for account provisioning and usage reporting."""

from __future__ import annotations

import uuid
from datetime import timedelta

import pytest

from cleancut_service.core.exceptions import (
    ConflictException,
    NotFoundException,
    ValidationException,
)
from cleancut_service.features.accounts.service import AccountService


@pytest.fixture
def service():
    return AccountService()


@pytest.mark.unit
class TestCreate:
    async def test_plan_period_starts_now(self, db_session, service, now):
        account = await service.create(db_session, email="a@example.com", plan="intermediate", now=now)

        assert account.plan == "intermediate"
        assert account.plan_start_date == now
        assert account.plan_end_date == now + timedelta(days=365)
        assert account.uploads_today == 0

    async def test_free_trial_lasts_a_week(self, db_session, service, now):
        account = await service.create(db_session, now=now)

        assert account.plan == "free"
        assert account.plan_end_date == now + timedelta(days=7)

    async def test_duplicate_email(self, db_session, service):
        await service.create(db_session, email="dup@example.com")

        with pytest.raises(ConflictException) as exc_info:
            await service.create(db_session, email="dup@example.com")

        assert exc_info.value.type == "email-taken"

    async def test_unknown_plan(self, db_session, service):
        with pytest.raises(ValidationException) as exc_info:
            await service.create(db_session, plan="platinum")

        assert exc_info.value.type == "invalid-plan"


@pytest.mark.unit
class TestSetPlan:
    async def test_upgrade_keeps_counters(self, db_session, service, account_factory, now):
        account = await account_factory(plan="free", uploads_today=2, last_upload_date=now.date())

        updated = await service.set_plan(db_session, account.id, "premium", now=now)

        assert updated.plan == "premium"
        assert updated.plan_end_date == now + timedelta(days=365)
        assert updated.uploads_today == 2

    async def test_custom_length(self, db_session, service, account_factory, now):
        account = await account_factory()

        updated = await service.set_plan(db_session, account.id, "intermediate", days=30, now=now)

        assert updated.plan_end_date == now + timedelta(days=30)

    async def test_unknown_account(self, db_session, service):
        with pytest.raises(NotFoundException):
            await service.set_plan(db_session, uuid.uuid4(), "premium")


@pytest.mark.unit
class TestUsage:
    async def test_stale_counters_read_as_zero(self, service, account_factory, now):
        account = await account_factory(
            plan="free",
            uploads_today=3,
            uploads_this_month=9,
            last_upload_date=now.date() - timedelta(days=1),
            usage_month="2025-05",
        )

        usage = service.usage(account, now)

        assert usage.uploads_today == 0
        assert usage.uploads_this_month == 0
        assert usage.remaining_today == 3
        assert usage.remaining_this_month is None

    async def test_current_counters(self, service, account_factory, now):
        account = await account_factory(
            plan="intermediate",
            uploads_this_month=28,
            usage_month="2025-06",
        )

        usage = service.usage(account, now)

        assert usage.uploads_this_month == 28
        assert usage.remaining_this_month == 2
        assert usage.remaining_today is None
        assert usage.priority == "medium"

    async def test_expired_plan_is_inactive(self, service, account_factory, now):
        account = await account_factory(plan="premium", plan_end_date=now - timedelta(seconds=1))

        assert not service.usage(account, now).plan_active
