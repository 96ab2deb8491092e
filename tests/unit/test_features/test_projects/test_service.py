"""Unit tests for project admission and owner operations."""

from __future__ import annotations

import io
import uuid
from datetime import timedelta
from unittest.mock import AsyncMock

import pytest
from fastapi import UploadFile
from starlette.datastructures import Headers

from cleancut_service.core.exceptions import (
    BadRequestException,
    InvalidTransitionException,
    NotFoundException,
    QuotaExceededException,
    ServiceUnavailableException,
)
from cleancut_service.features.projects.enums import ProjectStatus
from cleancut_service.infra.storage import StorageUploadError


def make_upload(
    data: bytes = b"\x89PNG\r\n\x1a\n data",
    filename: str | None = "cat.png",
    content_type: str = "image/png",
) -> UploadFile:
    return UploadFile(
        file=io.BytesIO(data),
        filename=filename,
        headers=Headers({"content-type": content_type}),
    )


def stored_files(asset_store) -> list:
    return [p for p in asset_store.backend.root.rglob("*") if p.is_file()]


@pytest.fixture
async def account(account_factory):
    return await account_factory(plan="free")


# ──────────────────────────────────────────────────────────────
# Admission
# ──────────────────────────────────────────────────────────────


@pytest.mark.unit
class TestAdmission:
    async def test_upload_creates_pending_project(
        self, db_session, project_service, asset_store, account, now
    ):
        project = await project_service.upload_and_admit(
            db_session, account.id, make_upload(), now=now
        )

        assert project.status == ProjectStatus.PENDING.value
        assert project.progress == 0
        assert project.kind == "image"
        assert project.original_file_name == "cat.png"
        assert project.source_ref.startswith("images/")
        assert project.source_ref.endswith(".png")
        assert project.expires_at == now + timedelta(hours=24)
        assert project.details["priority"] == "low"
        assert project.details["max_resolution"] == "720p"
        assert await asset_store.exists(project.source_ref)
        assert account.uploads_today == 1
        assert account.uploads_this_month == 1

        entry = await project_service.queue.repository.get_live_for_project(db_session, project.id)
        assert entry is not None

    async def test_video_upload(self, db_session, project_service, account, now):
        upload = make_upload(b"\x00\x00\x00\x18ftypmp42", "clip.MP4", "video/mp4")

        project = await project_service.upload_and_admit(db_session, account.id, upload, now=now)

        assert project.kind == "video"
        assert project.source_ref.startswith("videos/")
        assert project.source_ref.endswith(".mp4")

    async def test_fourth_upload_is_rejected_without_storing(
        self, db_session, project_service, asset_store, account, now
    ):
        for _ in range(3):
            await project_service.upload_and_admit(db_session, account.id, make_upload(), now=now)

        with pytest.raises(QuotaExceededException) as exc_info:
            await project_service.upload_and_admit(db_session, account.id, make_upload(), now=now)

        assert exc_info.value.reason == "daily-limit"
        assert exc_info.value.status_code == 403
        assert len(stored_files(asset_store)) == 3
        assert account.uploads_today == 3

    async def test_counter_resets_next_day(self, db_session, project_service, account, now):
        for _ in range(3):
            await project_service.upload_and_admit(db_session, account.id, make_upload(), now=now)

        await project_service.upload_and_admit(
            db_session, account.id, make_upload(), now=now + timedelta(days=1)
        )

        assert account.uploads_today == 1
        assert account.uploads_this_month == 4

    async def test_expired_plan_is_rejected(self, db_session, project_service, account_factory, now):
        expired = await account_factory(plan="premium", plan_end_date=now - timedelta(days=1))

        with pytest.raises(QuotaExceededException) as exc_info:
            await project_service.upload_and_admit(db_session, expired.id, make_upload(), now=now)

        assert exc_info.value.reason == "plan-expired"

    async def test_unknown_account(self, db_session, project_service, now):
        with pytest.raises(NotFoundException):
            await project_service.upload_and_admit(db_session, uuid.uuid4(), make_upload(), now=now)

    async def test_failed_admission_removes_stored_asset(
        self, db_session, project_service, asset_store, account, monkeypatch, now
    ):
        account_id = account.id
        monkeypatch.setattr(
            project_service.queue, "enqueue", AsyncMock(side_effect=RuntimeError("queue down"))
        )

        with pytest.raises(RuntimeError):
            await project_service.upload_and_admit(db_session, account_id, make_upload(), now=now)

        assert stored_files(asset_store) == []
        reloaded = await project_service.account_repository.get(
            db_session, account_id, for_update=True
        )
        assert reloaded.uploads_today == 0

    async def test_storage_outage_is_503(
        self, db_session, project_service, account, monkeypatch, now
    ):
        monkeypatch.setattr(
            project_service.asset_store,
            "store",
            AsyncMock(side_effect=StorageUploadError("disk full")),
        )

        with pytest.raises(ServiceUnavailableException) as exc_info:
            await project_service.upload_and_admit(db_session, account.id, make_upload(), now=now)

        assert exc_info.value.type == "storage-unavailable"
        assert account.uploads_today == 0


@pytest.mark.unit
class TestUploadValidation:
    def test_missing_file(self, project_service):
        with pytest.raises(BadRequestException) as exc_info:
            project_service.validate_upload(None, "image/png", 10)
        assert exc_info.value.type == "missing-file"

    def test_unsupported_type(self, project_service):
        with pytest.raises(BadRequestException) as exc_info:
            project_service.validate_upload("doc.pdf", "application/pdf", 10)
        assert exc_info.value.type == "unsupported-media-type"
        assert "image/png" in exc_info.value.extra["allowed"]

    def test_empty_file(self, project_service):
        with pytest.raises(BadRequestException) as exc_info:
            project_service.validate_upload("cat.png", "image/png", 0)
        assert exc_info.value.type == "empty-file"

    def test_too_large(self, project_service):
        limit = project_service.storage_settings.max_file_size_bytes
        with pytest.raises(BadRequestException) as exc_info:
            project_service.validate_upload("cat.png", "image/png", limit + 1)
        assert exc_info.value.type == "file-too-large"

    def test_accepted_kinds(self, project_service):
        assert project_service.validate_upload("a.webp", "image/webp", 1).value == "image"
        assert project_service.validate_upload("a.mov", "video/quicktime", 1).value == "video"


# ──────────────────────────────────────────────────────────────
# Owner operations
# ──────────────────────────────────────────────────────────────


@pytest.mark.unit
class TestOwnerOperations:
    async def test_foreign_project_is_not_found(
        self, db_session, project_service, account_factory, project_factory, now
    ):
        owner = await account_factory(plan="premium")
        stranger = await account_factory(plan="premium")
        project = await project_factory(owner, now=now)

        with pytest.raises(NotFoundException):
            await project_service.get(db_session, stranger.id, project.id)
        with pytest.raises(NotFoundException):
            await project_service.cancel(db_session, stranger.id, project.id)
        with pytest.raises(NotFoundException):
            await project_service.remove(db_session, stranger.id, project.id)

    async def test_list_filters_and_pages(
        self, db_session, project_service, account_factory, project_factory, now
    ):
        owner = await account_factory(plan="premium")
        images = [await project_factory(owner, now=now + timedelta(minutes=i)) for i in range(3)]
        await project_factory(
            owner,
            now=now + timedelta(minutes=5),
            kind="video",
            filename="clip.mp4",
            content_type="video/mp4",
        )
        await project_service.cancel(db_session, owner.id, images[0].id)
        await db_session.commit()

        page_1 = await project_service.list_projects(db_session, owner.id, page=1, limit=2)
        assert page_1.total == 4
        assert page_1.pages == 2
        assert [p.kind for p in page_1.items] == ["video", "image"]

        videos = await project_service.list_projects(db_session, owner.id, kind="video")
        assert videos.total == 1

        cancelled = await project_service.list_projects(db_session, owner.id, status="cancelled")
        assert [p.id for p in cancelled.items] == [images[0].id]

    async def test_snapshot_time_remaining(
        self, db_session, project_service, account, project_factory, now
    ):
        project = await project_factory(account, now=now)

        snapshot = await project_service.snapshot(
            db_session, account.id, project.id, now=now + timedelta(hours=23)
        )
        assert snapshot.status == "pending"
        assert snapshot.time_remaining_seconds == 3600

        late = await project_service.snapshot(
            db_session, account.id, project.id, now=now + timedelta(hours=30)
        )
        assert late.time_remaining_seconds == 0

    async def test_cancel_retires_queue_entry(
        self, db_session, project_service, account, project_factory, now
    ):
        project = await project_factory(account, now=now)

        cancelled = await project_service.cancel(db_session, account.id, project.id, now=now)

        assert cancelled.status == ProjectStatus.CANCELLED.value
        assert await project_service.queue.repository.get_live_for_project(db_session, project.id) is None
        assert await project_service.queue.claim_next(db_session, now=now) is None

    async def test_cancel_twice_conflicts(
        self, db_session, project_service, account, project_factory, now
    ):
        project = await project_factory(account, now=now)
        await project_service.cancel(db_session, account.id, project.id)

        with pytest.raises(InvalidTransitionException):
            await project_service.cancel(db_session, account.id, project.id)

    async def test_remove_deletes_files_and_record(
        self, db_session, project_service, asset_store, account, project_factory, now
    ):
        project = await project_factory(account, now=now)

        await project_service.remove(db_session, account.id, project.id)
        await db_session.commit()

        assert not await asset_store.exists(project.source_ref)
        with pytest.raises(NotFoundException):
            await project_service.get(db_session, account.id, project.id)

    async def test_remove_tolerates_missing_file(
        self, db_session, project_service, asset_store, account, project_factory, now
    ):
        project = await project_factory(account, now=now)
        await asset_store.delete(project.source_ref)

        await project_service.remove(db_session, account.id, project.id)

        assert await project_service.repository.get_owned(db_session, project.id, account.id) is None


@pytest.mark.unit
class TestDownload:
    async def test_not_completed(self, db_session, project_service, account, project_factory, now):
        project = await project_factory(account, now=now)

        with pytest.raises(BadRequestException) as exc_info:
            await project_service.open_download(db_session, account.id, project.id)

        assert exc_info.value.type == "project-not-completed"

    async def test_streams_result(
        self, db_session, project_service, account, project_factory, put_result, now
    ):
        project = await project_factory(account, now=now)
        work = await project_service.queue.claim_next(db_session, now=now)
        ref = await put_result(b"cutout-bytes")
        await project_service.queue.complete(db_session, work.entry_id, work.callback_token, ref)

        download = await project_service.open_download(db_session, account.id, project.id, now=now)

        assert download.filename == f"cleancut_image_{int(now.timestamp() * 1000)}.png"
        assert download.content_type == "image/png"
        assert b"".join([chunk async for chunk in download.stream]) == b"cutout-bytes"

    async def test_missing_result_file(
        self, db_session, project_service, asset_store, account, project_factory, put_result, now
    ):
        project = await project_factory(account, now=now)
        work = await project_service.queue.claim_next(db_session, now=now)
        ref = await put_result()
        await project_service.queue.complete(db_session, work.entry_id, work.callback_token, ref)
        await asset_store.delete(ref)

        with pytest.raises(NotFoundException) as exc_info:
            await project_service.open_download(db_session, account.id, project.id)

        assert exc_info.value.type == "result-not-found"


@pytest.mark.unit
async def test_dashboard(db_session, project_service, account, project_factory, now):
    first = await project_factory(account, now=now)
    await project_factory(account, now=now + timedelta(minutes=1))
    await project_service.cancel(db_session, account.id, first.id)

    dashboard = await project_service.dashboard(db_session, account.id, now=now)

    assert dashboard.stats["total"] == 2
    assert dashboard.stats["pending"] == 1
    assert dashboard.stats["cancelled"] == 1
    assert dashboard.stats["completed"] == 0
    assert len(dashboard.recent_projects) == 2
    assert dashboard.usage.uploads_today == 2
    assert dashboard.usage.remaining_today == 1
