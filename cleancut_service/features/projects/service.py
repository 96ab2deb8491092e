"""Project admission and owner-facing operations.

Admission is all-or-nothing: the plan check, counter update, project row and
queue entry are written in one transaction, and the stored source asset is
deleted again if that transaction does not commit. Every owner-facing read or
change is scoped by account; a project owned by someone else is reported
exactly like a missing one.
"""

from __future__ import annotations

import mimetypes
import os
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import PurePosixPath
from typing import TYPE_CHECKING

from cleancut_service.core.exceptions import (
    BadRequestException,
    NotFoundException,
    QuotaExceededException,
    ServiceUnavailableException,
)
from cleancut_service.core.services.base import BaseService
from cleancut_service.core.settings import get_job_settings
from cleancut_service.features.accounts.repository import AccountRepository, get_account_repository
from cleancut_service.features.accounts.service import (
    AccountService,
    UsageSnapshot,
    account_not_found,
)
from cleancut_service.features.plans.catalog import PlanLimits, get_plan_catalog
from cleancut_service.features.plans.policy import (
    EligibilityDecision,
    apply_upload,
    evaluate_upload_eligibility,
)
from cleancut_service.features.queue.service import QueueService
from cleancut_service.infra.metrics.prometheus import (
    storage_delete_failures_total,
    uploads_admitted_total,
    uploads_rejected_total,
)
from cleancut_service.infra.storage import AssetStore, StorageError, get_asset_store

from .enums import MediaKind, ProjectStatus
from .lifecycle import ProjectLifecycle, project_not_found
from .models import Project
from .repository import ProjectRepository, get_project_repository

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Sequence
    from uuid import UUID

    from fastapi import UploadFile
    from sqlalchemy.ext.asyncio import AsyncSession

    from cleancut_service.core.database import SearchResult
    from cleancut_service.core.settings.jobs import JobSettings
    from cleancut_service.core.settings.storage import StorageSettings


@dataclass(frozen=True, slots=True)
class StatusSnapshot:
    """Read-only status projection of a project."""

    id: UUID
    status: str
    progress: int
    error: str | None
    created_at: datetime
    expires_at: datetime
    time_remaining_seconds: float


@dataclass(frozen=True, slots=True)
class ResultDownload:
    filename: str
    content_type: str
    stream: AsyncIterator[bytes]


@dataclass(frozen=True, slots=True)
class Dashboard:
    stats: dict[str, int]
    recent_projects: Sequence[Project]
    usage: UsageSnapshot


class ProjectService(BaseService):
    """Admit uploads and serve an owner's projects.

    Example:
        service = ProjectService()
        project = await service.upload_and_admit(session, account_id, upload)
        snapshot = await service.snapshot(session, account_id, project.id)
    """

    def __init__(
        self,
        lifecycle: ProjectLifecycle | None = None,
        queue: QueueService | None = None,
        asset_store: AssetStore | None = None,
        repository: ProjectRepository | None = None,
        account_repository: AccountRepository | None = None,
        catalog: Mapping[str, PlanLimits] | None = None,
        job_settings: JobSettings | None = None,
        storage_settings: StorageSettings | None = None,
    ) -> None:
        super().__init__()
        self.lifecycle = lifecycle or ProjectLifecycle()
        self.queue = queue or QueueService(self.lifecycle)
        self.asset_store = asset_store or get_asset_store()
        self.repository = repository or get_project_repository()
        self.account_repository = account_repository or get_account_repository()
        self.catalog = catalog if catalog is not None else get_plan_catalog()
        self.job_settings = job_settings or get_job_settings()
        self.storage_settings = storage_settings or self.asset_store.settings

    # Admission

    def _reject(self, account_id: UUID, decision: EligibilityDecision) -> QuotaExceededException:
        reason = decision.reason.value if decision.reason else "unknown"
        uploads_rejected_total.labels(reason=reason).inc()
        self.logger.info(
            "Upload rejected by plan policy",
            extra={"account_id": str(account_id), "reason": reason},
        )
        return QuotaExceededException(detail=decision.message or "Upload not permitted", reason=reason)

    async def precheck(
        self,
        session: AsyncSession,
        account_id: UUID,
        *,
        now: datetime | None = None,
    ) -> EligibilityDecision:
        """Evaluate eligibility without locking or writing anything.

        Raises:
            NotFoundException: If the account does not exist
            QuotaExceededException: If the plan does not permit an upload
        """
        now = now or datetime.now(UTC)
        account = await self.account_repository.get(session, account_id)
        if account is None:
            raise account_not_found()
        decision = evaluate_upload_eligibility(account, self.catalog, now)
        if not decision.allowed:
            raise self._reject(account_id, decision)
        return decision

    async def admit(
        self,
        session: AsyncSession,
        account_id: UUID,
        *,
        source_ref: str,
        kind: MediaKind | str,
        size_bytes: int,
        original_file_name: str,
        content_type: str,
        now: datetime | None = None,
    ) -> Project:
        """Create a pending project for an already stored asset and queue it.

        Locks the account row, re-evaluates eligibility against the locked
        counters and applies resets plus increments in the same transaction.
        The caller commits; on rejection nothing has been written and the
        caller owns cleanup of ``source_ref``.

        Raises:
            NotFoundException: If the account does not exist
            QuotaExceededException: If the plan does not permit an upload
        """
        now = now or datetime.now(UTC)
        kind = MediaKind(kind)

        account = await self.account_repository.get(session, account_id, for_update=True)
        if account is None:
            raise account_not_found()

        decision = evaluate_upload_eligibility(account, self.catalog, now)
        if not decision.allowed:
            raise self._reject(account_id, decision)

        apply_upload(account, decision, now)

        project = Project(
            account_id=account_id,
            kind=kind.value,
            original_file_name=original_file_name,
            content_type=content_type,
            source_ref=source_ref,
            status=ProjectStatus.PENDING.value,
            progress=0,
            size_bytes=size_bytes,
            expires_at=now + self.job_settings.retention,
            details={
                "original_file_name": original_file_name,
                "content_type": content_type,
                "priority": decision.priority,
                "max_resolution": decision.max_resolution,
            },
            created_at=now,
            updated_at=now,
        )
        project = await self.repository.create(session, project)
        await self.queue.enqueue(session, project, decision.priority, now=now)

        self.logger.info(
            "Project admitted",
            extra={
                "project_id": str(project.id),
                "account_id": str(account_id),
                "kind": kind.value,
                "plan": account.plan,
                "uploads_today": account.uploads_today,
            },
        )
        return project

    def validate_upload(
        self,
        filename: str | None,
        content_type: str | None,
        size_bytes: int,
    ) -> MediaKind:
        """Check type and size of an upload and return its media kind.

        Raises:
            BadRequestException: Missing, empty, oversized or unsupported file
        """
        if not filename:
            raise BadRequestException(detail="No file uploaded", type="missing-file")

        kind = self.storage_settings.kind_for_content_type(content_type)
        if kind is None:
            raise BadRequestException(
                detail="Invalid file type. Only images and videos are allowed.",
                type="unsupported-media-type",
                extra={
                    "content_type": content_type,
                    "allowed": [
                        *self.storage_settings.allowed_image_types,
                        *self.storage_settings.allowed_video_types,
                    ],
                },
            )

        if size_bytes <= 0:
            raise BadRequestException(detail="Uploaded file is empty", type="empty-file")
        if size_bytes > self.storage_settings.max_file_size_bytes:
            raise BadRequestException(
                detail=f"File exceeds the {self.storage_settings.max_file_size_mb} MB limit",
                type="file-too-large",
                extra={"size_bytes": size_bytes, "max_bytes": self.storage_settings.max_file_size_bytes},
            )
        return MediaKind(kind)

    async def upload_and_admit(
        self,
        session: AsyncSession,
        account_id: UUID,
        upload: UploadFile | None,
        *,
        now: datetime | None = None,
    ) -> Project:
        """Validate, store and admit an upload, committing the session.

        No asset is written when the plan refuses the upload, and the written
        asset is deleted again if admission fails for any reason.
        """
        now = now or datetime.now(UTC)
        if upload is None:
            raise BadRequestException(detail="No file uploaded", type="missing-file")

        upload.file.seek(0, os.SEEK_END)
        size_bytes = upload.file.tell()
        upload.file.seek(0)
        kind = self.validate_upload(upload.filename, upload.content_type, size_bytes)
        filename = upload.filename or "upload"
        content_type = upload.content_type or "application/octet-stream"

        await self.precheck(session, account_id, now=now)

        try:
            asset = await self.asset_store.store(
                upload.file, kind.value, filename=filename, content_type=content_type
            )
        except StorageError as e:
            self.logger.exception("Failed to store upload", extra={"account_id": str(account_id)})
            raise ServiceUnavailableException(
                detail="File storage is temporarily unavailable",
                type="storage-unavailable",
            ) from e

        try:
            project = await self.admit(
                session,
                account_id,
                source_ref=asset.ref,
                kind=kind,
                size_bytes=asset.size_bytes,
                original_file_name=filename,
                content_type=content_type,
                now=now,
            )
            await session.commit()
        except Exception:
            await session.rollback()
            await self._discard_asset(asset.ref, operation="admission_rollback")
            raise

        account = await self.account_repository.get(session, account_id)
        uploads_admitted_total.labels(plan=account.plan if account else "unknown", kind=kind.value).inc()
        return project

    async def _discard_asset(self, ref: str, *, operation: str) -> None:
        """Best-effort asset deletion; a failure leaves a logged orphan."""
        try:
            await self.asset_store.delete(ref)
        except StorageError:
            storage_delete_failures_total.labels(operation=operation).inc()
            self.logger.warning(
                "Failed to delete asset, file may be orphaned",
                extra={"ref": ref, "operation": operation},
                exc_info=True,
            )

    # Owner operations

    async def get(self, session: AsyncSession, account_id: UUID, project_id: UUID) -> Project:
        project = await self.repository.get_owned(session, project_id, account_id)
        if project is None:
            raise project_not_found()
        return project

    async def list_projects(
        self,
        session: AsyncSession,
        account_id: UUID,
        *,
        status: ProjectStatus | str | None = None,
        kind: MediaKind | str | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> SearchResult[Project]:
        """An owner's projects, newest first, one page at a time."""
        return await self.repository.search_owned(
            session,
            account_id,
            status=ProjectStatus(status).value if status else None,
            kind=MediaKind(kind).value if kind else None,
            limit=limit,
            offset=(page - 1) * limit,
        )

    async def snapshot(
        self,
        session: AsyncSession,
        account_id: UUID,
        project_id: UUID,
        *,
        now: datetime | None = None,
    ) -> StatusSnapshot:
        now = now or datetime.now(UTC)
        project = await self.get(session, account_id, project_id)
        return StatusSnapshot(
            id=project.id,
            status=project.status,
            progress=project.progress,
            error=project.error_detail,
            created_at=project.created_at,
            expires_at=project.expires_at,
            time_remaining_seconds=project.time_remaining(now),
        )

    async def cancel(
        self,
        session: AsyncSession,
        account_id: UUID,
        project_id: UUID,
        *,
        now: datetime | None = None,
    ) -> Project:
        """Cancel a pending or processing project and retire its queue entry.

        Raises:
            NotFoundException: Unknown or foreign project
            InvalidTransitionException: Project already terminal
        """
        await self.get(session, account_id, project_id)
        project = await self.lifecycle.cancel(session, project_id, now=now)
        await self.queue.retire(session, project_id)
        return project

    async def remove(self, session: AsyncSession, account_id: UUID, project_id: UUID) -> None:
        """Delete a project's assets (best effort) and then its record."""
        project = await self.get(session, account_id, project_id)
        for ref in (project.source_ref, project.result_ref):
            if ref:
                await self._discard_asset(ref, operation="remove")
        await self.queue.purge(session, project_id)
        await self.repository.delete_by_id(session, project_id)
        self.logger.info(
            "Project removed",
            extra={"project_id": str(project_id), "account_id": str(account_id)},
        )

    async def open_download(
        self,
        session: AsyncSession,
        account_id: UUID,
        project_id: UUID,
        *,
        now: datetime | None = None,
    ) -> ResultDownload:
        """Open the result of a completed project for streaming.

        Raises:
            NotFoundException: Unknown/foreign project or result file gone
            BadRequestException: Project not completed
        """
        now = now or datetime.now(UTC)
        project = await self.get(session, account_id, project_id)
        if project.status != ProjectStatus.COMPLETED.value:
            raise BadRequestException(
                detail="Project is not completed yet",
                type="project-not-completed",
                extra={"status": project.status},
            )
        if not project.result_ref or not await self.asset_store.exists(project.result_ref):
            self.logger.warning(
                "Result asset missing for completed project",
                extra={"project_id": str(project_id), "ref": project.result_ref},
            )
            raise NotFoundException(detail="Result file not found", type="result-not-found")

        ext = PurePosixPath(project.result_ref).suffix
        content_type = mimetypes.guess_type(project.result_ref)[0] or "application/octet-stream"
        return ResultDownload(
            filename=f"cleancut_{project.kind}_{int(now.timestamp() * 1000)}{ext}",
            content_type=content_type,
            stream=self.asset_store.read(project.result_ref),
        )

    async def dashboard(
        self,
        session: AsyncSession,
        account_id: UUID,
        *,
        now: datetime | None = None,
    ) -> Dashboard:
        """Status counts, five most recent projects and plan usage."""
        now = now or datetime.now(UTC)
        account = await self.account_repository.get(session, account_id)
        if account is None:
            raise account_not_found()

        counts = await self.repository.count_by_status(session, account_id)
        stats: dict[str, int] = {status.value: counts.get(status.value, 0) for status in ProjectStatus}
        stats["total"] = sum(counts.values())
        recent = await self.repository.recent(session, account_id, limit=5)
        usage = AccountService(self.account_repository, self.catalog).usage(account, now)
        return Dashboard(stats=stats, recent_projects=recent, usage=usage)
