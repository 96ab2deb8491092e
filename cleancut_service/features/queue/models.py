"""SQLAlchemy model for work queue entries."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import BigInteger, ForeignKey, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from cleancut_service.core.database import Base, TimestampMixin, UTCDateTime

from .enums import EntryState


class QueueEntry(Base, TimestampMixin):
    """The schedulable representation of a project inside the work queue.

    The auto-increment ``id`` doubles as the enqueue sequence for FIFO order
    within a priority rank. ``live_project_id`` mirrors ``project_id`` while
    the entry is live and is cleared when it dies; its unique constraint keeps
    at most one live entry per project.
    """

    __tablename__ = "queue_entries"
    __table_args__ = (Index("ix_queue_entries_ready", "state", "priority", "id"),)

    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"),
        primary_key=True,
        autoincrement=True,
    )
    project_id: Mapped[UUID] = mapped_column(
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    live_project_id: Mapped[UUID | None] = mapped_column(Uuid, nullable=True, unique=True)

    priority: Mapped[int] = mapped_column(Integer, nullable=False)
    state: Mapped[str] = mapped_column(
        String(20), nullable=False, default=EntryState.QUEUED.value
    )
    attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    max_attempts: Mapped[int] = mapped_column(Integer, nullable=False)
    available_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    leased_until: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)
    last_error: Mapped[str | None] = mapped_column(Text, nullable=True)
    callback_token_hash: Mapped[str | None] = mapped_column(String(64), nullable=True)

    def __repr__(self) -> str:
        return (
            f"<QueueEntry(id={self.id}, project_id={self.project_id}, state={self.state!r}, "
            f"attempts={self.attempts}/{self.max_attempts})>"
        )
