"""Project state machine.

Every transition is a compare-and-set on the stored status: the update only
applies if the project is still in a state from which the target may be
entered. A worker callback racing a cancellation therefore loses cleanly
instead of resurrecting the project.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from cleancut_service.core.exceptions import (
    InvalidTransitionException,
    NotFoundException,
    ValidationException,
)
from cleancut_service.core.services.base import BaseService
from cleancut_service.infra.metrics.prometheus import (
    progress_updates_rejected_total,
    project_transitions_rejected_total,
    project_transitions_total,
)

from .enums import ProjectStatus, sources_for
from .repository import ProjectRepository, get_project_repository

if TYPE_CHECKING:
    from uuid import UUID

    from sqlalchemy.ext.asyncio import AsyncSession

    from .models import Project


def project_not_found() -> NotFoundException:
    return NotFoundException(detail="Project not found", type="project-not-found")


def _media_values(metadata: dict[str, Any]) -> dict[str, Any]:
    """Map worker-reported resolution/duration onto project columns."""
    values: dict[str, Any] = {}
    if metadata.get("resolution") is not None:
        values["resolution"] = str(metadata["resolution"])
    duration = metadata.get("duration")
    if duration is not None:
        try:
            if isinstance(duration, bool):
                raise TypeError(duration)
            values["duration_seconds"] = float(duration)
        except (TypeError, ValueError) as exc:
            raise ValidationException(
                detail="Duration must be a number of seconds",
                type="invalid-metadata",
                extra={"field": "metadata.duration", "value": str(duration)},
            ) from exc
        if not 0 <= values["duration_seconds"] < float("inf"):
            raise ValidationException(
                detail="Duration must be a non-negative number of seconds",
                type="invalid-metadata",
                extra={"field": "metadata.duration", "value": str(duration)},
            )
    return values


class ProjectLifecycle(BaseService):
    """Apply status transitions and progress reports to projects.

    Only the work queue calls the worker-driven operations
    (processing/completed/failed/progress); cancellation comes from the owner.
    """

    def __init__(self, repository: ProjectRepository | None = None) -> None:
        super().__init__()
        self.repository = repository or get_project_repository()

    async def _transition(
        self,
        session: AsyncSession,
        project_id: UUID,
        target: ProjectStatus,
        values: dict[str, Any],
    ) -> Project:
        sources = [status.value for status in sources_for(target)]
        applied = await self.repository.compare_and_set(
            session, project_id, sources, {"status": target.value, **values}
        )
        project = await self.repository.reload(session, project_id)
        if project is None:
            raise project_not_found()

        if not applied:
            project_transitions_rejected_total.labels(target_status=target.value).inc()
            self.logger.warning(
                "Rejected project transition",
                extra={
                    "project_id": str(project_id),
                    "status": project.status,
                    "target_status": target.value,
                },
            )
            raise InvalidTransitionException(current=project.status, target=target.value)

        project_transitions_total.labels(to_status=target.value).inc()
        self.logger.info(
            "Project transitioned",
            extra={"project_id": str(project_id), "status": target.value},
        )
        return project

    async def transition_to_processing(
        self,
        session: AsyncSession,
        project_id: UUID,
        *,
        now: datetime | None = None,
    ) -> Project:
        """pending -> processing."""
        now = now or datetime.now(UTC)
        return await self._transition(
            session, project_id, ProjectStatus.PROCESSING, {"started_at": now, "updated_at": now}
        )

    async def transition_to_completed(
        self,
        session: AsyncSession,
        project_id: UUID,
        result_ref: str,
        metadata: dict[str, Any] | None = None,
        *,
        now: datetime | None = None,
    ) -> Project:
        """processing -> completed, recording the result and worker metadata."""
        if not result_ref:
            raise ValidationException(
                detail="A completed project requires a result reference",
                extra={"field": "result_ref"},
            )
        now = now or datetime.now(UTC)
        metadata = dict(metadata or {})
        media_values = _media_values(metadata)

        current = await self.repository.reload(session, project_id)
        if current is None:
            raise project_not_found()

        values: dict[str, Any] = {
            "result_ref": result_ref,
            "progress": 100,
            "finished_at": now,
            "updated_at": now,
            "details": {**current.details, "result": metadata},
            **media_values,
        }
        return await self._transition(session, project_id, ProjectStatus.COMPLETED, values)

    async def transition_to_failed(
        self,
        session: AsyncSession,
        project_id: UUID,
        error_detail: str,
        *,
        now: datetime | None = None,
    ) -> Project:
        """processing -> failed, storing ``error_detail`` verbatim."""
        if not error_detail:
            raise ValidationException(
                detail="A failed project requires an error detail",
                extra={"field": "error_detail"},
            )
        now = now or datetime.now(UTC)
        return await self._transition(
            session,
            project_id,
            ProjectStatus.FAILED,
            {"error_detail": error_detail, "finished_at": now, "updated_at": now},
        )

    async def cancel(
        self,
        session: AsyncSession,
        project_id: UUID,
        *,
        now: datetime | None = None,
    ) -> Project:
        """pending|processing -> cancelled."""
        now = now or datetime.now(UTC)
        return await self._transition(
            session,
            project_id,
            ProjectStatus.CANCELLED,
            {"finished_at": now, "updated_at": now},
        )

    async def report_progress(
        self,
        session: AsyncSession,
        project_id: UUID,
        progress: int,
    ) -> bool:
        """Record worker progress.

        Applied only while processing and only if ``progress`` is within
        0..100 and not below the stored value. Anything else is ignored with a
        warning and leaves stored progress untouched.

        Returns:
            True if the progress was stored.
        """
        if isinstance(progress, bool) or not isinstance(progress, int) or not 0 <= progress <= 100:
            progress_updates_rejected_total.inc()
            self.logger.warning(
                "Ignored out-of-range progress",
                extra={"project_id": str(project_id), "progress": progress},
            )
            return False

        applied = await self.repository.compare_and_set(
            session,
            project_id,
            [ProjectStatus.PROCESSING.value],
            {"progress": progress},
            min_progress=progress,
        )
        if not applied:
            progress_updates_rejected_total.inc()
            self.logger.warning(
                "Ignored stale or out-of-order progress",
                extra={"project_id": str(project_id), "progress": progress},
            )
            return False

        self._lazy.debug(lambda: f"progress {project_id} -> {progress}")
        return True
