"""Worker protocol schemas."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import ConfigDict, Field

from cleancut_service.core.schemas import CustomBase


class ClaimResponse(CustomBase):
    """Work payload handed to a worker."""

    entry_id: int
    project_id: UUID
    kind: str
    source_ref: str
    priority: str
    max_resolution: str | None = None
    attempt: int = Field(ge=1)
    callback_token: str = Field(description="Present in X-Callback-Token on every callback")
    lease_expires_at: datetime


class ProgressReport(CustomBase):
    # Range is checked by the lifecycle so bad values are logged and ignored, not 422'd
    progress: int


class ProgressAck(CustomBase):
    applied: bool


class CompletionMetadata(CustomBase):
    """Worker-reported media details; unknown keys are kept with the project."""

    model_config = ConfigDict(extra="allow")

    resolution: str | None = Field(default=None, max_length=32)
    duration: float | None = Field(default=None, ge=0, allow_inf_nan=False)


class CompletionReport(CustomBase):
    result_ref: str = Field(min_length=1, max_length=512)
    metadata: CompletionMetadata = Field(default_factory=CompletionMetadata)


class FailureReport(CustomBase):
    """Worker error report; the text is stored exactly as sent."""

    model_config = ConfigDict(str_strip_whitespace=False)

    error: str = Field(min_length=1, max_length=10_000)


class FailureAck(CustomBase):
    entry_id: int
    attempts: int
    dead: bool
    retry_at: datetime | None = None


class QueueStats(CustomBase):
    queued: int = 0
    in_flight: int = 0
    retry_wait: int = 0
    dead: int = 0
    ready: int = 0
