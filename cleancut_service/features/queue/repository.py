"""Repository for work queue entries."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import and_, delete, func, select

from cleancut_service.core.database import BaseRepository

from .enums import EntryState
from .models import QueueEntry

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime
    from uuid import UUID

    from sqlalchemy import ColumnElement
    from sqlalchemy.ext.asyncio import AsyncSession


def _ready(now: datetime) -> ColumnElement[bool]:
    """Entries a worker may claim at ``now``."""
    return and_(
        QueueEntry.state.in_([s.value for s in EntryState.claimable_states()]),
        QueueEntry.available_at <= now,
    )


class QueueRepository(BaseRepository[QueueEntry]):
    """Ready-entry selection, lease expiry scans and per-project cleanup."""

    def __init__(self) -> None:
        super().__init__(QueueEntry)

    async def get_live_for_project(
        self, session: AsyncSession, project_id: UUID
    ) -> QueueEntry | None:
        stmt = select(QueueEntry).where(QueueEntry.live_project_id == project_id)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def next_ready(self, session: AsyncSession, now: datetime) -> QueueEntry | None:
        """Lock and return the next claimable entry.

        Order: lowest priority rank, then enqueue sequence. Rows locked by a
        concurrent claimer are skipped (PostgreSQL); SQLite serializes writers.
        """
        stmt = (
            select(QueueEntry)
            .where(_ready(now))
            .order_by(QueueEntry.priority, QueueEntry.id)
            .limit(1)
            .with_for_update(skip_locked=True)
            .execution_options(populate_existing=True)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def expired_leases(
        self, session: AsyncSession, now: datetime, *, limit: int = 100
    ) -> Sequence[QueueEntry]:
        """In-flight entries whose worker never reported back within the lease."""
        stmt = (
            select(QueueEntry)
            .where(
                and_(
                    QueueEntry.state == EntryState.IN_FLIGHT.value,
                    QueueEntry.leased_until.is_not(None),
                    QueueEntry.leased_until < now,
                )
            )
            .order_by(QueueEntry.id)
            .limit(limit)
            .with_for_update(skip_locked=True)
            .execution_options(populate_existing=True)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def get_for_update(self, session: AsyncSession, entry_id: int) -> QueueEntry | None:
        stmt = (
            select(QueueEntry)
            .where(QueueEntry.id == entry_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def delete_for_project(
        self, session: AsyncSession, project_id: UUID, *, live_only: bool = False
    ) -> int:
        """Delete a project's entries (only the live one when ``live_only``)."""
        stmt = delete(QueueEntry).where(QueueEntry.project_id == project_id)
        if live_only:
            stmt = stmt.where(QueueEntry.live_project_id.is_not(None))
        result = await session.execute(stmt.execution_options(synchronize_session="fetch"))
        count = result.rowcount or 0
        self._lazy.debug(lambda: f"db.delete_for_project({project_id}, live_only={live_only}) -> {count}")
        return count

    async def count_by_state(self, session: AsyncSession) -> dict[str, int]:
        stmt = select(QueueEntry.state, func.count()).group_by(QueueEntry.state)
        result = await session.execute(stmt)
        return {state: count for state, count in result.all()}

    async def count_ready(self, session: AsyncSession, now: datetime) -> int:
        stmt = select(func.count()).select_from(QueueEntry).where(_ready(now))
        return (await session.execute(stmt)).scalar_one()


_queue_repository: QueueRepository | None = None


def get_queue_repository() -> QueueRepository:
    """Get the QueueRepository singleton."""
    global _queue_repository
    if _queue_repository is None:
        _queue_repository = QueueRepository()
    return _queue_repository
