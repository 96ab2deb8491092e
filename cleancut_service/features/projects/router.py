"""API router for projects (uploads and their processing records)."""

from __future__ import annotations

import logging
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, File, Query, UploadFile, status
from fastapi.responses import StreamingResponse

from cleancut_service.core.dependencies import AccountIdDep, SessionDep
from cleancut_service.core.schemas import Page
from cleancut_service.features.accounts.schemas import AccountUsageResponse
from cleancut_service.infra.logging import get_lazy_logger

from .dependencies import ProjectServiceDep
from .enums import MediaKind, ProjectStatus
from .schemas import (
    DashboardResponse,
    ProjectResponse,
    ProjectStats,
    ProjectStatusResponse,
    ProjectSummary,
)

router = APIRouter(prefix="/projects", tags=["projects"])

# Standard logger for INFO/WARNING/ERROR
logger = logging.getLogger(__name__)
# Lazy logger for DEBUG (zero overhead when DEBUG disabled)
lazy_logger = get_lazy_logger(__name__)


@router.post(
    "",
    response_model=ProjectResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload a file for background removal",
    description="""
Store an image or video and queue it for processing.

The upload is checked against the account's plan first; a refused upload
(`quota-exceeded`, with `reason` one of `daily-limit`, `monthly-limit`,
`plan-expired`, `invalid-plan`) stores nothing.
""",
)
async def create_project(
    account_id: AccountIdDep,
    session: SessionDep,
    service: ProjectServiceDep,
    file: Annotated[UploadFile | None, File(description="Image or video to process")] = None,
) -> ProjectResponse:
    project = await service.upload_and_admit(session, account_id, file)
    return ProjectResponse.model_validate(project)


@router.get(
    "",
    response_model=Page[ProjectResponse],
    summary="List projects",
    description="The caller's projects, newest first, optionally filtered by status and kind.",
)
async def list_projects(
    account_id: AccountIdDep,
    session: SessionDep,
    service: ProjectServiceDep,
    status_filter: Annotated[ProjectStatus | None, Query(alias="status")] = None,
    kind: MediaKind | None = None,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 10,
) -> Page[ProjectResponse]:
    result = await service.list_projects(
        session, account_id, status=status_filter, kind=kind, page=page, limit=limit
    )
    lazy_logger.debug(lambda: f"list_projects: {len(result.items)}/{result.total} for {account_id}")
    return Page[ProjectResponse](
        items=[ProjectResponse.model_validate(p) for p in result.items],
        total=result.total,
        page=page,
        limit=limit,
        pages=result.pages,
    )


@router.get(
    "/dashboard",
    response_model=DashboardResponse,
    summary="Dashboard statistics",
    description="Project counts by status, the five most recent projects and plan usage.",
)
async def get_dashboard(
    account_id: AccountIdDep,
    session: SessionDep,
    service: ProjectServiceDep,
) -> DashboardResponse:
    dashboard = await service.dashboard(session, account_id)
    return DashboardResponse(
        stats=ProjectStats(**dashboard.stats),
        recent_projects=[ProjectSummary.model_validate(p) for p in dashboard.recent_projects],
        usage=AccountUsageResponse.model_validate(dashboard.usage),
    )


@router.get("/{project_id}", response_model=ProjectResponse, summary="Get a project")
async def get_project(
    project_id: UUID,
    account_id: AccountIdDep,
    session: SessionDep,
    service: ProjectServiceDep,
) -> ProjectResponse:
    project = await service.get(session, account_id, project_id)
    return ProjectResponse.model_validate(project)


@router.get(
    "/{project_id}/status",
    response_model=ProjectStatusResponse,
    summary="Poll project status",
)
async def get_project_status(
    project_id: UUID,
    account_id: AccountIdDep,
    session: SessionDep,
    service: ProjectServiceDep,
) -> ProjectStatusResponse:
    snapshot = await service.snapshot(session, account_id, project_id)
    return ProjectStatusResponse.model_validate(snapshot)


@router.get(
    "/{project_id}/download",
    response_class=StreamingResponse,
    summary="Download the processed result",
    responses={200: {"content": {"application/octet-stream": {}}}},
)
async def download_project(
    project_id: UUID,
    account_id: AccountIdDep,
    session: SessionDep,
    service: ProjectServiceDep,
) -> StreamingResponse:
    download = await service.open_download(session, account_id, project_id)
    return StreamingResponse(
        download.stream,
        media_type=download.content_type,
        headers={"Content-Disposition": f'attachment; filename="{download.filename}"'},
    )


@router.post(
    "/{project_id}/cancel",
    response_model=ProjectResponse,
    summary="Cancel processing",
    description="Allowed while pending or processing; later worker callbacks for the project are rejected.",
)
async def cancel_project(
    project_id: UUID,
    account_id: AccountIdDep,
    session: SessionDep,
    service: ProjectServiceDep,
) -> ProjectResponse:
    project = await service.cancel(session, account_id, project_id)
    await session.commit()
    return ProjectResponse.model_validate(project)


@router.delete(
    "/{project_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a project and its files",
)
async def delete_project(
    project_id: UUID,
    account_id: AccountIdDep,
    session: SessionDep,
    service: ProjectServiceDep,
) -> None:
    await service.remove(session, account_id, project_id)
    await session.commit()
