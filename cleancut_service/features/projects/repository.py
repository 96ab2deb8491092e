"""Repository for projects.

Status changes go through compare-and-set updates (``UPDATE ... WHERE status
IN (...)``) so a transition never applies on top of a state another writer
already moved past.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import delete, func, select, update

from cleancut_service.core.database import BaseRepository

from .models import Project

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from datetime import datetime
    from uuid import UUID

    from sqlalchemy.ext.asyncio import AsyncSession

    from cleancut_service.core.database import SearchResult


class ProjectRepository(BaseRepository[Project]):
    """Project queries scoped by owner, plus conditional status updates."""

    def __init__(self) -> None:
        super().__init__(Project)

    async def get_owned(
        self,
        session: AsyncSession,
        project_id: UUID,
        account_id: UUID,
    ) -> Project | None:
        """Get a project only if ``account_id`` owns it."""
        stmt = select(Project).where(Project.id == project_id, Project.account_id == account_id)
        result = await session.execute(stmt)
        project = result.scalar_one_or_none()

        self._lazy.debug(
            lambda: f"db.get_owned({project_id}, account={account_id}) -> {'found' if project else 'not found'}"
        )
        return project

    async def search_owned(
        self,
        session: AsyncSession,
        account_id: UUID,
        *,
        status: str | None = None,
        kind: str | None = None,
        limit: int = 10,
        offset: int = 0,
    ) -> SearchResult[Project]:
        """List an account's projects, newest first."""
        stmt = select(Project).where(Project.account_id == account_id)
        if status is not None:
            stmt = stmt.where(Project.status == status)
        if kind is not None:
            stmt = stmt.where(Project.kind == kind)
        stmt = stmt.order_by(Project.created_at.desc(), Project.id)
        return await self.search(session, stmt, limit=limit, offset=offset)

    async def count_by_status(self, session: AsyncSession, account_id: UUID) -> dict[str, int]:
        """Return ``{status: count}`` for an account's projects."""
        stmt = (
            select(Project.status, func.count())
            .where(Project.account_id == account_id)
            .group_by(Project.status)
        )
        result = await session.execute(stmt)
        return {status: count for status, count in result.all()}

    async def recent(self, session: AsyncSession, account_id: UUID, limit: int = 5) -> Sequence[Project]:
        stmt = (
            select(Project)
            .where(Project.account_id == account_id)
            .order_by(Project.created_at.desc(), Project.id)
            .limit(limit)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def reload(self, session: AsyncSession, project_id: UUID) -> Project | None:
        """Re-read a project, overwriting any stale copy in the identity map."""
        stmt = (
            select(Project)
            .where(Project.id == project_id)
            .execution_options(populate_existing=True)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def compare_and_set(
        self,
        session: AsyncSession,
        project_id: UUID,
        expected: Iterable[str],
        values: dict[str, Any],
        *,
        min_progress: int | None = None,
    ) -> bool:
        """Apply ``values`` only if the project's status is in ``expected``.

        Args:
            min_progress: Additionally require stored progress <= this value.

        Returns:
            True if the row was updated.
        """
        stmt = update(Project).where(
            Project.id == project_id,
            Project.status.in_(list(expected)),
        )
        if min_progress is not None:
            stmt = stmt.where(Project.progress <= min_progress)
        stmt = stmt.values({getattr(Project, key): value for key, value in values.items()})
        stmt = stmt.execution_options(synchronize_session=False)
        result = await session.execute(stmt)
        applied = (result.rowcount or 0) == 1

        self._lazy.debug(
            lambda: f"db.compare_and_set({project_id}, expected={list(expected)}, values={values}) -> {applied}"
        )
        return applied

    async def list_expired(
        self,
        session: AsyncSession,
        now: datetime,
        *,
        limit: int = 500,
        exclude: Iterable[UUID] = (),
    ) -> Sequence[tuple[UUID, str, str | None]]:
        """Return ``(id, source_ref, result_ref)`` of projects past expiry, any status.

        Args:
            exclude: Project ids to skip, such as ones that already failed this pass.
        """
        stmt = select(Project.id, Project.source_ref, Project.result_ref).where(Project.expires_at <= now)
        excluded = list(exclude)
        if excluded:
            stmt = stmt.where(Project.id.not_in(excluded))
        stmt = (
            stmt
            .order_by(Project.expires_at)
            .limit(limit)
        )
        result = await session.execute(stmt)
        return [tuple(row) for row in result.all()]

    async def delete_by_id(self, session: AsyncSession, project_id: UUID) -> bool:
        """Delete a project row; returns False if it was already gone."""
        result = await session.execute(
            delete(Project)
            .where(Project.id == project_id)
            .execution_options(synchronize_session=False)
        )
        deleted = (result.rowcount or 0) == 1
        if deleted:
            self._logger.info(
                "Entity deleted",
                extra={"entity": "Project", "id": str(project_id), "operation": "db.delete"},
            )
        return deleted


_project_repository: ProjectRepository | None = None


def get_project_repository() -> ProjectRepository:
    """Get the ProjectRepository singleton."""
    global _project_repository
    if _project_repository is None:
        _project_repository = ProjectRepository()
    return _project_repository
