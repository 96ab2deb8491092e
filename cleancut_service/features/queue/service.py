"""Priority work queue.

The queue is the only path by which worker-driven transitions reach a project.
A worker claims the next ready entry and receives a callback token scoped to
that entry and attempt; progress and terminal reports must present it.

Failures are retried with exponential backoff until the attempt ceiling, after
which the entry is kept in the ``dead`` state and the project fails with the
last error verbatim. A claim whose lease runs out without a terminal report is
counted as a failed attempt.
"""

from __future__ import annotations

import hashlib
import hmac
import secrets
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

from sqlalchemy import update

from cleancut_service.core.exceptions import (
    InvalidTransitionException,
    NotFoundException,
    UnauthorizedException,
    ValidationException,
)
from cleancut_service.core.services.base import BaseService
from cleancut_service.core.settings import get_job_settings
from cleancut_service.features.projects.enums import ProjectStatus
from cleancut_service.infra.metrics.prometheus import (
    queue_claims_total,
    queue_dead_total,
    queue_depth,
    queue_retries_total,
)
from cleancut_service.utils.retry import RetryStrategy

from .enums import EntryState, QueuePriority
from .models import QueueEntry
from .repository import QueueRepository, get_queue_repository

if TYPE_CHECKING:
    from uuid import UUID

    from sqlalchemy.ext.asyncio import AsyncSession

    from cleancut_service.core.settings.jobs import JobSettings
    from cleancut_service.features.projects.lifecycle import ProjectLifecycle
    from cleancut_service.features.projects.models import Project
    from cleancut_service.infra.storage import AssetStore

LEASE_EXPIRED_ERROR = "Worker did not report within lease"


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


@dataclass(frozen=True, slots=True)
class ClaimedWork:
    """Work handed to a worker by claim_next()."""

    entry_id: int
    project_id: UUID
    kind: str
    source_ref: str
    priority: str
    max_resolution: str | None
    attempt: int
    callback_token: str
    lease_expires_at: datetime


@dataclass(frozen=True, slots=True)
class FailureOutcome:
    """Result of recording a worker failure."""

    entry_id: int
    project_id: UUID
    attempts: int
    dead: bool
    retry_at: datetime | None = None


class QueueService(BaseService):
    """Enqueue, claim and settle queue entries.

    Example:
        queue = QueueService(lifecycle)
        await queue.enqueue(session, project, QueuePriority.HIGH)
        work = await queue.claim_next(session)
        await queue.complete(session, work.entry_id, work.callback_token, "results/x.png", {})
    """

    def __init__(
        self,
        lifecycle: ProjectLifecycle,
        repository: QueueRepository | None = None,
        settings: JobSettings | None = None,
        retry: RetryStrategy | None = None,
    ) -> None:
        super().__init__()
        self.lifecycle = lifecycle
        self.repository = repository or get_queue_repository()
        self.settings = settings or get_job_settings()
        self.retry = retry or RetryStrategy.from_settings(self.settings)

    async def enqueue(
        self,
        session: AsyncSession,
        project: Project,
        priority: QueuePriority | str,
        *,
        now: datetime | None = None,
    ) -> QueueEntry:
        """Queue ``project`` for processing.

        A project already holding a live entry gets that entry back instead of
        a second one.
        """
        if not isinstance(priority, QueuePriority):
            priority = QueuePriority.from_label(priority)
        now = now or datetime.now(UTC)

        existing = await self.repository.get_live_for_project(session, project.id)
        if existing is not None:
            self.logger.info(
                "Project already queued",
                extra={"project_id": str(project.id), "entry_id": existing.id},
            )
            return existing

        entry = QueueEntry(
            project_id=project.id,
            live_project_id=project.id,
            priority=priority.value,
            state=EntryState.QUEUED.value,
            attempts=0,
            max_attempts=self.retry.max_attempts,
            available_at=now,
        )
        entry = await self.repository.create(session, entry)
        self.logger.info(
            "Project enqueued",
            extra={"project_id": str(project.id), "entry_id": entry.id, "priority": priority.label},
        )
        return entry

    async def claim_next(
        self,
        session: AsyncSession,
        *,
        now: datetime | None = None,
    ) -> ClaimedWork | None:
        """Claim the next ready entry and move its project to processing.

        Returns:
            The work payload, or None when nothing is ready.
        """
        now = now or datetime.now(UTC)
        await self.reap_expired_leases(session, now=now)

        while True:
            entry = await self.repository.next_ready(session, now)
            if entry is None:
                return None

            token = secrets.token_urlsafe(self.settings.callback_token_bytes)
            lease_expires_at = now + timedelta(seconds=self.settings.claim_lease_seconds)
            claimed = await self._mark_in_flight(session, entry, token, lease_expires_at, now)
            if not claimed:
                self._lazy.debug(lambda: f"entry {entry.id} taken by another claimer")
                continue

            project = await self.lifecycle.repository.reload(session, entry.project_id)
            if project is None or project.status_enum.is_terminal():
                self.logger.warning(
                    "Discarding queue entry for a finished project",
                    extra={
                        "entry_id": entry.id,
                        "project_id": str(entry.project_id),
                        "status": project.status if project else None,
                    },
                )
                await self.repository.delete(session, entry)
                continue

            if project.status_enum is ProjectStatus.PENDING:
                try:
                    project = await self.lifecycle.transition_to_processing(
                        session, project.id, now=now
                    )
                except InvalidTransitionException:
                    await self.repository.delete(session, entry)
                    continue

            priority = QueuePriority(entry.priority)
            queue_claims_total.labels(priority=priority.label).inc()
            self.logger.info(
                "Queue entry claimed",
                extra={
                    "entry_id": entry.id,
                    "project_id": str(project.id),
                    "attempt": entry.attempts,
                    "priority": priority.label,
                },
            )
            return ClaimedWork(
                entry_id=entry.id,
                project_id=project.id,
                kind=project.kind,
                source_ref=project.source_ref,
                priority=priority.label,
                max_resolution=project.details.get("max_resolution"),
                attempt=entry.attempts,
                callback_token=token,
                lease_expires_at=lease_expires_at,
            )

    async def _mark_in_flight(
        self,
        session: AsyncSession,
        entry: QueueEntry,
        token: str,
        lease_expires_at: datetime,
        now: datetime,
    ) -> bool:
        stmt = (
            update(QueueEntry)
            .where(
                QueueEntry.id == entry.id,
                QueueEntry.state.in_([s.value for s in EntryState.claimable_states()]),
            )
            .values(
                state=EntryState.IN_FLIGHT.value,
                attempts=QueueEntry.attempts + 1,
                leased_until=lease_expires_at,
                callback_token_hash=hash_token(token),
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        if (result.rowcount or 0) != 1:
            return False
        await session.refresh(entry)
        return True

    async def _authorize(self, session: AsyncSession, entry_id: int, token: str) -> QueueEntry:
        entry = await self.repository.get_for_update(session, entry_id)
        if entry is None:
            raise NotFoundException(detail="Queue entry not found", type="queue-entry-not-found")

        if (
            entry.state != EntryState.IN_FLIGHT.value
            or entry.callback_token_hash is None
            or not hmac.compare_digest(entry.callback_token_hash, hash_token(token or ""))
        ):
            self.logger.warning(
                "Rejected worker callback",
                extra={"entry_id": entry_id, "project_id": str(entry.project_id), "state": entry.state},
            )
            raise UnauthorizedException(
                detail="Invalid or expired callback token",
                type="invalid-callback-token",
            )
        return entry

    async def report_progress(
        self,
        session: AsyncSession,
        entry_id: int,
        token: str,
        progress: int,
        *,
        now: datetime | None = None,
    ) -> bool:
        """Forward a progress report and renew the entry's lease.

        Returns:
            True if the project's progress was updated.
        """
        now = now or datetime.now(UTC)
        entry = await self._authorize(session, entry_id, token)
        entry.leased_until = now + timedelta(seconds=self.settings.claim_lease_seconds)
        await session.flush()
        return await self.lifecycle.report_progress(session, entry.project_id, progress)

    async def complete(
        self,
        session: AsyncSession,
        entry_id: int,
        token: str,
        result_ref: str,
        metadata: dict[str, Any] | None = None,
        *,
        asset_store: AssetStore | None = None,
        now: datetime | None = None,
    ) -> Project:
        """Record a successful attempt: complete the project and drop the entry.

        When ``asset_store`` is given the result asset must exist.
        """
        entry = await self._authorize(session, entry_id, token)
        if asset_store is not None and not await asset_store.exists(result_ref):
            raise ValidationException(
                detail="Result asset does not exist",
                type="result-not-found",
                extra={"field": "result_ref"},
            )

        project = await self.lifecycle.transition_to_completed(
            session, entry.project_id, result_ref, metadata, now=now
        )
        await self.repository.delete(session, entry)
        return project

    async def fail(
        self,
        session: AsyncSession,
        entry_id: int,
        token: str,
        error_detail: str,
        *,
        now: datetime | None = None,
    ) -> FailureOutcome:
        """Record a failed attempt: schedule a retry or fail the project."""
        if not error_detail:
            raise ValidationException(
                detail="A failure report requires an error detail",
                extra={"field": "error"},
            )
        entry = await self._authorize(session, entry_id, token)
        return await self._record_failure(session, entry, error_detail, now or datetime.now(UTC))

    async def _record_failure(
        self,
        session: AsyncSession,
        entry: QueueEntry,
        error_detail: str,
        now: datetime,
    ) -> FailureOutcome:
        entry.last_error = error_detail
        entry.callback_token_hash = None
        entry.leased_until = None
        entry.updated_at = now

        if self.retry.should_retry(entry.attempts):
            retry_at = now + self.retry.backoff(entry.attempts - 1)
            entry.state = EntryState.RETRY_WAIT.value
            entry.available_at = retry_at
            await session.flush()
            queue_retries_total.inc()
            self.logger.warning(
                "Worker attempt failed, retry scheduled",
                extra={
                    "entry_id": entry.id,
                    "project_id": str(entry.project_id),
                    "attempt": entry.attempts,
                    "retry_at": retry_at.isoformat(),
                },
            )
            return FailureOutcome(
                entry_id=entry.id,
                project_id=entry.project_id,
                attempts=entry.attempts,
                dead=False,
                retry_at=retry_at,
            )

        entry.state = EntryState.DEAD.value
        entry.live_project_id = None
        await session.flush()
        queue_dead_total.inc()
        self.logger.error(
            "Worker attempts exhausted",
            extra={
                "entry_id": entry.id,
                "project_id": str(entry.project_id),
                "attempt": entry.attempts,
                "error": error_detail,
            },
        )
        try:
            await self.lifecycle.transition_to_failed(session, entry.project_id, error_detail, now=now)
        except InvalidTransitionException as exc:
            # Settled elsewhere (cancelled); the dead entry stays for inspection.
            self.logger.info(
                "Project not failed, already settled",
                extra={"project_id": str(entry.project_id), "status": exc.current},
            )
        return FailureOutcome(
            entry_id=entry.id,
            project_id=entry.project_id,
            attempts=entry.attempts,
            dead=True,
        )

    async def reap_expired_leases(
        self,
        session: AsyncSession,
        *,
        now: datetime | None = None,
    ) -> int:
        """Treat every lapsed lease as a failed attempt.

        Returns:
            Number of entries reaped.
        """
        now = now or datetime.now(UTC)
        expired = await self.repository.expired_leases(session, now)
        for entry in expired:
            await self._record_failure(session, entry, LEASE_EXPIRED_ERROR, now)
        if expired:
            self.logger.warning("Reaped expired leases", extra={"count": len(expired)})
        return len(expired)

    async def retire(self, session: AsyncSession, project_id: UUID) -> int:
        """Remove a project's live entry so no worker can claim or settle it."""
        removed = await self.repository.delete_for_project(session, project_id, live_only=True)
        if removed:
            self.logger.info("Queue entry retired", extra={"project_id": str(project_id)})
        return removed

    async def purge(self, session: AsyncSession, project_id: UUID) -> int:
        """Remove every entry of a project, dead ones included."""
        return await self.repository.delete_for_project(session, project_id)

    async def stats(
        self,
        session: AsyncSession,
        *,
        now: datetime | None = None,
    ) -> dict[str, int]:
        """Entry counts per state plus the number ready to claim now."""
        now = now or datetime.now(UTC)
        counts = await self.repository.count_by_state(session)
        result = {state.value: counts.get(state.value, 0) for state in EntryState}
        for state, count in result.items():
            queue_depth.labels(state=state).set(count)
        result["ready"] = await self.repository.count_ready(session, now)
        return result
