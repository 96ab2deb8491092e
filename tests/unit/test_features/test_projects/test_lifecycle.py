"""Unit tests for the project state machine."""

from __future__ import annotations

import uuid
from datetime import timedelta

import pytest

from cleancut_service.core.exceptions import (
    InvalidTransitionException,
    NotFoundException,
    ValidationException,
)
from cleancut_service.features.projects.enums import (
    ProjectStatus,
    is_valid_transition,
    sources_for,
)


@pytest.fixture
async def pending_project(account_factory, project_factory, now):
    account = await account_factory(plan="premium")
    return await project_factory(account, now=now)


@pytest.fixture
async def processing_project(db_session, lifecycle, pending_project, now):
    project = await lifecycle.transition_to_processing(db_session, pending_project.id, now=now)
    await db_session.commit()
    return project


# ──────────────────────────────────────────────────────────────
# Transition table
# ──────────────────────────────────────────────────────────────


@pytest.mark.unit
class TestTransitionTable:
    def test_terminal_states_have_no_exits(self):
        for terminal in ProjectStatus.terminal_states():
            for target in ProjectStatus:
                assert not is_valid_transition(terminal, target)

    def test_sources(self):
        assert sources_for(ProjectStatus.PROCESSING) == {ProjectStatus.PENDING}
        assert sources_for(ProjectStatus.CANCELLED) == {
            ProjectStatus.PENDING,
            ProjectStatus.PROCESSING,
        }
        assert sources_for(ProjectStatus.PENDING) == set()


# ──────────────────────────────────────────────────────────────
# Transitions
# ──────────────────────────────────────────────────────────────


@pytest.mark.unit
class TestTransitions:
    async def test_pending_to_processing(self, db_session, lifecycle, pending_project, now):
        project = await lifecycle.transition_to_processing(db_session, pending_project.id, now=now)

        assert project.status == ProjectStatus.PROCESSING.value
        assert project.started_at == now
        assert project.result_ref is None
        assert project.error_detail is None

    async def test_processing_to_completed_records_metadata(
        self, db_session, lifecycle, processing_project, now
    ):
        done_at = now + timedelta(minutes=3)

        project = await lifecycle.transition_to_completed(
            db_session,
            processing_project.id,
            "results/abc.png",
            {"resolution": "1920x1080", "duration": 12.5},
            now=done_at,
        )

        assert project.status == ProjectStatus.COMPLETED.value
        assert project.result_ref == "results/abc.png"
        assert project.error_detail is None
        assert project.progress == 100
        assert project.resolution == "1920x1080"
        assert project.duration_seconds == 12.5
        assert project.details["result"] == {"resolution": "1920x1080", "duration": 12.5}
        assert project.details["original_file_name"] == "photo.png"
        assert project.finished_at == done_at

    async def test_processing_to_failed_keeps_error_verbatim(
        self, db_session, lifecycle, processing_project, now
    ):
        error = "  ffmpeg exited with code 1: Invalid data found\n"

        project = await lifecycle.transition_to_failed(
            db_session, processing_project.id, error, now=now
        )

        assert project.status == ProjectStatus.FAILED.value
        assert project.error_detail == error
        assert project.result_ref is None

    async def test_pending_cannot_complete(self, db_session, lifecycle, pending_project):
        with pytest.raises(InvalidTransitionException) as exc_info:
            await lifecycle.transition_to_completed(db_session, pending_project.id, "results/x.png")

        assert exc_info.value.current == "pending"
        assert exc_info.value.target == "completed"
        assert exc_info.value.status_code == 409

    async def test_pending_cannot_fail(self, db_session, lifecycle, pending_project):
        with pytest.raises(InvalidTransitionException):
            await lifecycle.transition_to_failed(db_session, pending_project.id, "boom")

    async def test_completed_requires_result(self, db_session, lifecycle, processing_project):
        with pytest.raises(ValidationException):
            await lifecycle.transition_to_completed(db_session, processing_project.id, "")

    async def test_completed_records_media_metadata(self, db_session, lifecycle, processing_project):
        project = await lifecycle.transition_to_completed(
            db_session,
            processing_project.id,
            "results/out.webm",
            {"resolution": "1920x1080", "duration": "12.5", "codec": "vp9"},
        )

        assert project.resolution == "1920x1080"
        assert project.duration_seconds == 12.5
        assert project.details["result"]["codec"] == "vp9"

    @pytest.mark.parametrize("duration", ["12s", True, -1, float("nan")])
    async def test_bad_duration_is_rejected_without_state_change(
        self, db_session, lifecycle, processing_project, duration
    ):
        project_id = processing_project.id

        with pytest.raises(ValidationException) as exc_info:
            await lifecycle.transition_to_completed(
                db_session, project_id, "results/out.webm", {"duration": duration}
            )

        assert exc_info.value.type == "invalid-metadata"
        project = await lifecycle.repository.reload(db_session, project_id)
        assert project.status == ProjectStatus.PROCESSING.value
        assert project.result_ref is None

    async def test_failed_requires_error(self, db_session, lifecycle, processing_project):
        with pytest.raises(ValidationException):
            await lifecycle.transition_to_failed(db_session, processing_project.id, "")

    async def test_unknown_project(self, db_session, lifecycle):
        with pytest.raises(NotFoundException):
            await lifecycle.transition_to_processing(db_session, uuid.uuid4())

    async def test_cancel_pending(self, db_session, lifecycle, pending_project):
        cancelled = await lifecycle.cancel(db_session, pending_project.id)

        assert cancelled.status == ProjectStatus.CANCELLED.value
        assert cancelled.finished_at is not None

    async def test_cancel_processing(self, db_session, lifecycle, processing_project):
        cancelled = await lifecycle.cancel(db_session, processing_project.id)

        assert cancelled.status == ProjectStatus.CANCELLED.value
        assert cancelled.result_ref is None
        assert cancelled.error_detail is None

    async def test_terminal_states_reject_everything(
        self, db_session, lifecycle, processing_project
    ):
        await lifecycle.transition_to_completed(db_session, processing_project.id, "results/x.png")

        with pytest.raises(InvalidTransitionException):
            await lifecycle.cancel(db_session, processing_project.id)
        with pytest.raises(InvalidTransitionException):
            await lifecycle.transition_to_failed(db_session, processing_project.id, "late")
        with pytest.raises(InvalidTransitionException):
            await lifecycle.transition_to_processing(db_session, processing_project.id)

        project = await lifecycle.repository.reload(db_session, processing_project.id)
        assert project.status == ProjectStatus.COMPLETED.value
        assert project.error_detail is None

    async def test_completion_after_cancel_is_rejected(
        self, db_session, lifecycle, processing_project
    ):
        await lifecycle.cancel(db_session, processing_project.id)

        with pytest.raises(InvalidTransitionException):
            await lifecycle.transition_to_completed(
                db_session, processing_project.id, "results/late.png"
            )

        project = await lifecycle.repository.reload(db_session, processing_project.id)
        assert project.status == ProjectStatus.CANCELLED.value
        assert project.result_ref is None


# ──────────────────────────────────────────────────────────────
# Progress
# ──────────────────────────────────────────────────────────────


@pytest.mark.unit
class TestProgress:
    async def test_progress_increases(self, db_session, lifecycle, processing_project):
        assert await lifecycle.report_progress(db_session, processing_project.id, 10)
        assert await lifecycle.report_progress(db_session, processing_project.id, 55)

        project = await lifecycle.repository.reload(db_session, processing_project.id)
        assert project.progress == 55

    async def test_equal_progress_is_accepted(self, db_session, lifecycle, processing_project):
        await lifecycle.report_progress(db_session, processing_project.id, 40)

        assert await lifecycle.report_progress(db_session, processing_project.id, 40)

    async def test_lower_progress_is_ignored(self, db_session, lifecycle, processing_project):
        await lifecycle.report_progress(db_session, processing_project.id, 60)

        assert not await lifecycle.report_progress(db_session, processing_project.id, 20)

        project = await lifecycle.repository.reload(db_session, processing_project.id)
        assert project.progress == 60

    @pytest.mark.parametrize("value", [-1, 101, 140, True])
    async def test_out_of_range_progress_is_ignored(
        self, db_session, lifecycle, processing_project, value
    ):
        assert not await lifecycle.report_progress(db_session, processing_project.id, value)

        project = await lifecycle.repository.reload(db_session, processing_project.id)
        assert project.progress == 0

    async def test_progress_on_pending_is_ignored(self, db_session, lifecycle, pending_project):
        assert not await lifecycle.report_progress(db_session, pending_project.id, 30)

    async def test_progress_after_cancel_is_ignored(
        self, db_session, lifecycle, processing_project
    ):
        await lifecycle.report_progress(db_session, processing_project.id, 30)
        await lifecycle.cancel(db_session, processing_project.id)

        assert not await lifecycle.report_progress(db_session, processing_project.id, 80)

        project = await lifecycle.repository.reload(db_session, processing_project.id)
        assert project.progress == 30
