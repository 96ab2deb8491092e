"""SQLAlchemy model for projects (one uploaded asset and its processing record)."""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import JSON, BigInteger, CheckConstraint, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from cleancut_service.core.database import Base, TimestampMixin, UTCDateTime, UUIDPKMixin

from .enums import ProjectStatus


class Project(Base, UUIDPKMixin, TimestampMixin):
    """A user-submitted media asset and its processing state.

    ``result_ref`` is set only when completed and ``error_detail`` only when
    failed; both are enforced by check constraints.
    """

    __tablename__ = "projects"
    __table_args__ = (
        CheckConstraint("progress >= 0 AND progress <= 100", name="progress_range"),
        CheckConstraint(
            "(status = 'completed' AND result_ref IS NOT NULL) "
            "OR (status <> 'completed' AND result_ref IS NULL)",
            name="result_iff_completed",
        ),
        CheckConstraint(
            "(status = 'failed' AND error_detail IS NOT NULL) "
            "OR (status <> 'failed' AND error_detail IS NULL)",
            name="error_iff_failed",
        ),
    )

    account_id: Mapped[UUID] = mapped_column(
        ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    kind: Mapped[str] = mapped_column(String(10), nullable=False)
    original_file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    content_type: Mapped[str] = mapped_column(String(127), nullable=False)
    source_ref: Mapped[str] = mapped_column(String(512), nullable=False)
    result_ref: Mapped[str | None] = mapped_column(String(512), nullable=True)

    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=ProjectStatus.PENDING.value, index=True
    )
    progress: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    error_detail: Mapped[str | None] = mapped_column(Text, nullable=True)

    size_bytes: Mapped[int] = mapped_column(BigInteger, nullable=False)
    resolution: Mapped[str | None] = mapped_column(String(32), nullable=True)
    duration_seconds: Mapped[float | None] = mapped_column(Float, nullable=True)
    details: Mapped[dict[str, Any]] = mapped_column(
        "metadata", JSON, nullable=False, default=dict
    )

    expires_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, index=True)
    started_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)
    finished_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)

    @property
    def status_enum(self) -> ProjectStatus:
        return ProjectStatus(self.status)

    def time_remaining(self, now: datetime) -> float:
        """Seconds until expiry, never negative."""
        return max(0.0, (self.expires_at - now).total_seconds())

    def __repr__(self) -> str:
        return f"<Project(id={self.id}, status={self.status!r}, progress={self.progress})>"
