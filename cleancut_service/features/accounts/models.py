"""Account model: plan tier and upload counters."""

from __future__ import annotations

import enum
from datetime import date, datetime

from sqlalchemy import Date, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from cleancut_service.core.database import Base, TimestampMixin, UTCDateTime, UUIDPKMixin


class PlanTier(str, enum.Enum):
    """Subscription tiers."""

    FREE = "free"
    INTERMEDIATE = "intermediate"
    PREMIUM = "premium"


class Account(Base, UUIDPKMixin, TimestampMixin):
    """A registered user and its plan/quota state.

    Plan fields are written by the billing side; the upload counters are
    written only by project admission (plus the monthly bulk reset).

    ``usage_month`` is the ``YYYY-MM`` window that ``uploads_this_month``
    counts, so a stale counter is recognised even if a reset run was missed.
    """

    __tablename__ = "accounts"

    email: Mapped[str | None] = mapped_column(String(255), unique=True, nullable=True)
    plan: Mapped[str] = mapped_column(
        String(20), nullable=False, default=PlanTier.FREE.value, index=True
    )
    plan_start_date: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)
    plan_end_date: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)

    uploads_today: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    uploads_this_month: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_upload_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    usage_month: Mapped[str | None] = mapped_column(String(7), nullable=True)

    def __repr__(self) -> str:
        return f"<Account(id={self.id}, plan={self.plan!r})>"
