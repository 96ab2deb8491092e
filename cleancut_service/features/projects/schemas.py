"""Project API schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import Field

from cleancut_service.core.schemas import CustomBase
from cleancut_service.features.accounts.schemas import AccountUsageResponse

from .enums import MediaKind, ProjectStatus


class ProjectResponse(CustomBase):
    """Full project record as seen by its owner."""

    id: UUID
    kind: MediaKind
    original_file_name: str
    content_type: str
    status: ProjectStatus
    progress: int
    error_detail: str | None = None
    result_ref: str | None = None
    size_bytes: int
    resolution: str | None = None
    duration_seconds: float | None = None
    metadata: dict[str, Any] = Field(default_factory=dict, validation_alias="details")
    created_at: datetime
    updated_at: datetime
    expires_at: datetime
    started_at: datetime | None = None
    finished_at: datetime | None = None


class ProjectStatusResponse(CustomBase):
    """Read-only status projection polled by clients."""

    id: UUID
    status: ProjectStatus
    progress: int
    error: str | None = None
    created_at: datetime
    expires_at: datetime
    time_remaining_seconds: float = Field(ge=0)


class ProjectSummary(CustomBase):
    id: UUID
    kind: MediaKind
    original_file_name: str
    status: ProjectStatus
    progress: int
    created_at: datetime
    expires_at: datetime


class ProjectStats(CustomBase):
    total: int = 0
    pending: int = 0
    processing: int = 0
    completed: int = 0
    failed: int = 0
    cancelled: int = 0


class DashboardResponse(CustomBase):
    stats: ProjectStats
    recent_projects: list[ProjectSummary]
    usage: AccountUsageResponse
