"""Account provisioning commands.

Stand-ins for registration and billing, which run outside this service.
"""

import sys
from uuid import UUID

import click

from cleancut_service.cli.utils import coro, error, quota, rows, section, success
from cleancut_service.core.exceptions import AppException
from cleancut_service.features.accounts.models import PlanTier

PLAN_CHOICE = click.Choice([tier.value for tier in PlanTier])


@click.group(name="accounts")
def accounts() -> None:
    """Account provisioning and usage."""


@accounts.command()
@click.option("--email", default=None, help="Account email (unique)")
@click.option("--plan", type=PLAN_CHOICE, default=PlanTier.FREE.value, show_default=True)
@coro
async def create(email: str | None, plan: str) -> None:
    """Create an account and print its id."""
    from cleancut_service.features.accounts.service import AccountService
    from cleancut_service.infra.database import get_async_session

    try:
        async with get_async_session() as session:
            account = await AccountService().create(session, email=email, plan=plan)
            await session.commit()
    except AppException as e:
        error(e.detail)
        sys.exit(1)
    success(f"Account created: {account.id}")


@accounts.command(name="set-plan")
@click.argument("account_id", type=click.UUID)
@click.argument("plan", type=PLAN_CHOICE)
@click.option("--days", type=int, default=None, help="Plan length (default: the plan's duration)")
@coro
async def set_plan(account_id: UUID, plan: str, days: int | None) -> None:
    """Switch an account to PLAN starting now."""
    from cleancut_service.features.accounts.service import AccountService
    from cleancut_service.infra.database import get_async_session

    try:
        async with get_async_session() as session:
            account = await AccountService().set_plan(session, account_id, plan, days=days)
            await session.commit()
    except AppException as e:
        error(e.detail)
        sys.exit(1)
    success(f"Account {account_id} on '{plan}' until {account.plan_end_date:%Y-%m-%d %H:%M} UTC")


@accounts.command()
@click.argument("account_id", type=click.UUID)
@coro
async def usage(account_id: UUID) -> None:
    """Show an account's plan and quota usage."""
    from cleancut_service.features.accounts.service import AccountService
    from cleancut_service.infra.database import get_async_session

    service = AccountService()
    try:
        async with get_async_session() as session:
            snapshot = service.usage(await service.get(session, account_id))
    except AppException as e:
        error(e.detail)
        sys.exit(1)

    section(f"Account {account_id}")
    state = "active" if snapshot.plan_active else "expired"
    rows(
        [
            ("plan", f"{snapshot.plan} ({state})"),
            ("today", quota(snapshot.uploads_today, snapshot.daily_limit)),
            ("this month", quota(snapshot.uploads_this_month, snapshot.monthly_limit)),
            ("max resolution", snapshot.max_resolution),
            ("priority", snapshot.priority),
        ]
    )
