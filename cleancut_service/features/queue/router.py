"""Worker-facing queue endpoints.

Every route requires ``X-Worker-Key``; callbacks additionally require the
``X-Callback-Token`` issued by the claim for that entry and attempt.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Response, status

from cleancut_service.core.dependencies import AssetStoreDep, SessionDep
from cleancut_service.features.projects.schemas import ProjectResponse

from .dependencies import CallbackTokenDep, QueueServiceDep, require_worker
from .schemas import (
    ClaimResponse,
    CompletionReport,
    FailureAck,
    FailureReport,
    ProgressAck,
    ProgressReport,
    QueueStats,
)

router = APIRouter(prefix="/worker", tags=["worker"], dependencies=[Depends(require_worker)])

logger = logging.getLogger(__name__)


@router.post(
    "/claim",
    response_model=ClaimResponse,
    summary="Claim the next ready entry",
    description="Claims the highest-priority, oldest ready entry. Returns 204 when the queue is empty.",
    responses={204: {"description": "Nothing ready"}},
)
async def claim(session: SessionDep, queue: QueueServiceDep) -> ClaimResponse | Response:
    work = await queue.claim_next(session)
    await session.commit()
    if work is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return ClaimResponse.model_validate(work)


@router.post(
    "/entries/{entry_id}/progress",
    response_model=ProgressAck,
    summary="Report progress",
)
async def report_progress(
    entry_id: int,
    body: ProgressReport,
    token: CallbackTokenDep,
    session: SessionDep,
    queue: QueueServiceDep,
) -> ProgressAck:
    applied = await queue.report_progress(session, entry_id, token, body.progress)
    await session.commit()
    return ProgressAck(applied=applied)


@router.post(
    "/entries/{entry_id}/complete",
    response_model=ProjectResponse,
    summary="Report success",
)
async def complete(
    entry_id: int,
    body: CompletionReport,
    token: CallbackTokenDep,
    session: SessionDep,
    queue: QueueServiceDep,
    asset_store: AssetStoreDep,
) -> ProjectResponse:
    project = await queue.complete(
        session,
        entry_id,
        token,
        body.result_ref,
        body.metadata.model_dump(exclude_none=True),
        asset_store=asset_store,
    )
    await session.commit()
    return ProjectResponse.model_validate(project)


@router.post(
    "/entries/{entry_id}/fail",
    response_model=FailureAck,
    summary="Report failure",
    description="Schedules a retry with backoff, or fails the project once attempts are exhausted.",
)
async def fail(
    entry_id: int,
    body: FailureReport,
    token: CallbackTokenDep,
    session: SessionDep,
    queue: QueueServiceDep,
) -> FailureAck:
    outcome = await queue.fail(session, entry_id, token, body.error)
    await session.commit()
    return FailureAck.model_validate(outcome)


@router.get("/stats", response_model=QueueStats, summary="Queue depth by state")
async def stats(session: SessionDep, queue: QueueServiceDep) -> QueueStats:
    return QueueStats(**await queue.stats(session))
