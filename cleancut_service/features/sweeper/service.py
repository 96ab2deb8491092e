"""Expiry sweeper and monthly usage reset.

The sweeper deletes every project whose retention window has passed, whatever
its status, together with its files and queue entries. Each project is handled
and committed on its own so one failure never stops the rest of the batch.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from cleancut_service.core.services.base import BaseService
from cleancut_service.core.settings import get_job_settings
from cleancut_service.features.accounts.repository import AccountRepository, get_account_repository
from cleancut_service.features.plans.policy import month_key
from cleancut_service.features.projects.repository import ProjectRepository, get_project_repository
from cleancut_service.features.queue.repository import QueueRepository, get_queue_repository
from cleancut_service.infra.metrics.prometheus import (
    monthly_resets_total,
    storage_delete_failures_total,
    sweep_deleted_total,
    sweep_failures_total,
)
from cleancut_service.infra.storage import AssetStore, StorageError, get_asset_store

if TYPE_CHECKING:
    from uuid import UUID

    from sqlalchemy.ext.asyncio import AsyncSession

    from cleancut_service.core.settings.jobs import JobSettings


@dataclass(slots=True)
class SweepSummary:
    """Counts from one sweep pass."""

    scanned: int = 0
    deleted: int = 0
    failed: int = 0
    orphaned_refs: list[str] = field(default_factory=list)


class SweeperService(BaseService):
    """Reclaim expired projects and reset monthly counters.

    Example:
        async with get_async_session() as session:
            summary = await SweeperService().sweep_expired(session)
    """

    def __init__(
        self,
        asset_store: AssetStore | None = None,
        project_repository: ProjectRepository | None = None,
        queue_repository: QueueRepository | None = None,
        account_repository: AccountRepository | None = None,
        settings: JobSettings | None = None,
    ) -> None:
        super().__init__()
        self.asset_store = asset_store or get_asset_store()
        self.projects = project_repository or get_project_repository()
        self.queue = queue_repository or get_queue_repository()
        self.accounts = account_repository or get_account_repository()
        self.settings = settings or get_job_settings()

    async def sweep_expired(
        self,
        session: AsyncSession,
        *,
        now: datetime | None = None,
    ) -> SweepSummary:
        """Delete every project past its expiry, committing per project.

        Expired rows are read in batches of ``sweep_batch_size`` until a batch
        comes back short. Projects that fail are skipped for the rest of the
        pass and retried by the next one.
        """
        now = now or datetime.now(UTC)
        summary = SweepSummary()
        batch_size = self.settings.sweep_batch_size
        failed_ids: set[UUID] = set()

        while True:
            expired = await self.projects.list_expired(
                session, now, limit=batch_size, exclude=failed_ids
            )
            # Release the read transaction before per-item commits
            await session.rollback()

            for project_id, source_ref, result_ref in expired:
                summary.scanned += 1
                try:
                    orphaned = await self._delete_assets(project_id, (source_ref, result_ref))
                    await self.queue.delete_for_project(session, project_id)
                    await self.projects.delete_by_id(session, project_id)
                    await session.commit()
                except Exception:
                    await session.rollback()
                    failed_ids.add(project_id)
                    summary.failed += 1
                    sweep_failures_total.inc()
                    self.logger.exception(
                        "Failed to sweep expired project",
                        extra={"project_id": str(project_id)},
                    )
                    continue
                summary.deleted += 1
                summary.orphaned_refs.extend(orphaned)
                sweep_deleted_total.inc()

            if len(expired) < batch_size:
                break

        self.logger.info(
            "Expiry sweep finished",
            extra={
                "scanned": summary.scanned,
                "deleted": summary.deleted,
                "failed": summary.failed,
                "orphaned": len(summary.orphaned_refs),
            },
        )
        return summary

    async def reclaim(
        self,
        session: AsyncSession,
        project_id: UUID,
    ) -> bool:
        """Delete one project and its files regardless of expiry.

        A project that is already gone is a no-op.

        Returns:
            True if a project was deleted.
        """
        project = await self.projects.get(session, project_id)
        if project is None:
            self._lazy.debug(lambda: f"reclaim {project_id}: already gone")
            return False
        await self._delete_assets(project_id, (project.source_ref, project.result_ref))
        await self.queue.delete_for_project(session, project_id)
        deleted = await self.projects.delete_by_id(session, project_id)
        await session.commit()
        return deleted

    async def _delete_assets(self, project_id: UUID, refs: tuple[str | None, ...]) -> list[str]:
        """Delete asset files, tolerating missing ones; returns refs that failed."""
        failed: list[str] = []
        for ref in refs:
            if not ref:
                continue
            try:
                await self.asset_store.delete(ref)
            except StorageError:
                failed.append(ref)
                storage_delete_failures_total.labels(operation="sweep").inc()
                self.logger.warning(
                    "Failed to delete expired asset, file may be orphaned",
                    extra={"project_id": str(project_id), "ref": ref},
                    exc_info=True,
                )
        return failed

    async def reset_monthly_counters(
        self,
        session: AsyncSession,
        *,
        now: datetime | None = None,
    ) -> int:
        """Zero monthly upload counters for the month containing ``now``.

        Safe to run more than once per month.
        """
        now = now or datetime.now(UTC)
        count = await self.accounts.reset_monthly_counters(session, month_key(now))
        await session.commit()
        monthly_resets_total.inc(count)
        return count
