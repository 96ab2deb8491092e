"""Upload eligibility policy.

A pure function of account state, plan catalog and the current time. It never
mutates the account: resets it detects are returned as directives that the
admission transaction applies together with the counter increments.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import date, datetime
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Mapping

    from .catalog import PlanLimits


class RejectionReason(str, enum.Enum):
    """Stable codes for refused uploads."""

    INVALID_PLAN = "invalid-plan"
    PLAN_EXPIRED = "plan-expired"
    DAILY_LIMIT = "daily-limit"
    MONTHLY_LIMIT = "monthly-limit"


class AccountUsage(Protocol):
    """The account fields the policy reads."""

    plan: str
    plan_end_date: datetime | None
    uploads_today: int
    uploads_this_month: int
    last_upload_date: date | None
    usage_month: str | None


@dataclass(frozen=True, slots=True)
class EligibilityDecision:
    """Outcome of evaluate_upload_eligibility().

    Attributes:
        allowed: Whether another upload may be admitted.
        reason: Rejection code, None when allowed.
        message: Human-readable rejection message.
        reset_daily: The stored daily counter belongs to an earlier day and
            must be zeroed before incrementing.
        reset_monthly: The stored monthly counter belongs to an earlier month.
        limits: The tier's limits (None for an unknown tier).
    """

    allowed: bool
    reason: RejectionReason | None = None
    message: str | None = None
    reset_daily: bool = False
    reset_monthly: bool = False
    limits: PlanLimits | None = None

    @property
    def max_resolution(self) -> str | None:
        return self.limits.max_resolution if self.limits else None

    @property
    def priority(self) -> str | None:
        return self.limits.priority if self.limits else None


def month_key(moment: datetime | date) -> str:
    """``YYYY-MM`` key of the calendar month containing ``moment``."""
    return f"{moment.year:04d}-{moment.month:02d}"


def evaluate_upload_eligibility(
    account: AccountUsage,
    catalog: Mapping[str, PlanLimits],
    now: datetime,
) -> EligibilityDecision:
    """Decide whether ``account`` may upload at ``now`` (aware UTC datetime).

    Checks, in order: the tier exists, the plan has not ended, the daily cap
    and the monthly cap. A counter whose window (calendar day / month of
    ``now``) has passed is treated as zero and flagged for reset.
    """
    limits = catalog.get(account.plan)
    if limits is None:
        return EligibilityDecision(
            allowed=False,
            reason=RejectionReason.INVALID_PLAN,
            message=f"Unknown plan '{account.plan}'",
        )

    if account.plan_end_date is not None and account.plan_end_date < now:
        return EligibilityDecision(
            allowed=False,
            reason=RejectionReason.PLAN_EXPIRED,
            message="Your plan has expired. Please renew or upgrade to continue.",
            limits=limits,
        )

    reset_daily = account.last_upload_date != now.date()
    reset_monthly = account.usage_month != month_key(now)
    uploads_today = 0 if reset_daily else account.uploads_today
    uploads_this_month = 0 if reset_monthly else account.uploads_this_month

    if limits.daily_limit is not None and uploads_today >= limits.daily_limit:
        return EligibilityDecision(
            allowed=False,
            reason=RejectionReason.DAILY_LIMIT,
            message=(
                f"Daily upload limit reached ({limits.daily_limit} uploads per day). "
                "Upgrade to continue."
            ),
            limits=limits,
        )

    if limits.monthly_limit is not None and uploads_this_month >= limits.monthly_limit:
        return EligibilityDecision(
            allowed=False,
            reason=RejectionReason.MONTHLY_LIMIT,
            message=(
                f"Monthly upload limit reached ({limits.monthly_limit} uploads per month). "
                "Upgrade to continue."
            ),
            limits=limits,
        )

    return EligibilityDecision(
        allowed=True,
        reset_daily=reset_daily,
        reset_monthly=reset_monthly,
        limits=limits,
    )


def apply_upload(account: AccountUsage, decision: EligibilityDecision, now: datetime) -> None:
    """Apply the reset directives and count one upload on ``account``.

    Must run in the same transaction that creates the project.
    """
    account.uploads_today = (0 if decision.reset_daily else account.uploads_today) + 1
    account.uploads_this_month = (
        0 if decision.reset_monthly else account.uploads_this_month
    ) + 1
    account.last_upload_date = now.date()
    account.usage_month = month_key(now)
