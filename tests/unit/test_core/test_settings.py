"""Tests for the modular settings."""

from __future__ import annotations

from datetime import timedelta

import pytest
from pydantic import ValidationError

from cleancut_service.core.settings import (
    JobSettings,
    PlanSettings,
    StorageSettings,
    clear_all_caches,
    get_job_settings,
)


@pytest.mark.unit
class TestJobSettings:
    def test_defaults(self):
        settings = JobSettings()

        assert settings.retention == timedelta(hours=24)
        assert settings.max_attempts == 3
        assert settings.backoff_base_seconds == 5.0

    def test_reads_prefixed_environment(self, monkeypatch):
        monkeypatch.setenv("JOB_RETENTION_HOURS", "48")
        monkeypatch.setenv("JOB_MAX_ATTEMPTS", "5")

        settings = JobSettings()

        assert settings.retention == timedelta(hours=48)
        assert settings.max_attempts == 5

    def test_rejects_out_of_range(self):
        with pytest.raises(ValidationError):
            JobSettings(max_attempts=0)

    def test_settings_are_frozen(self):
        settings = JobSettings()
        with pytest.raises(ValidationError):
            settings.max_attempts = 10

    def test_loader_is_cached(self, monkeypatch):
        clear_all_caches()
        first = get_job_settings()
        monkeypatch.setenv("JOB_RETENTION_HOURS", "72")

        assert get_job_settings() is first

        clear_all_caches()
        assert get_job_settings().retention_hours == 72
        monkeypatch.delenv("JOB_RETENTION_HOURS")
        clear_all_caches()


@pytest.mark.unit
class TestStorageSettings:
    def test_content_types_from_environment(self, monkeypatch):
        monkeypatch.setenv("STORAGE_ALLOWED_IMAGE_TYPES", '["image/png", "image/jpeg"]')

        settings = StorageSettings()

        assert settings.allowed_image_types == ["image/png", "image/jpeg"]
        assert settings.kind_for_content_type("image/png") == "image"
        assert settings.kind_for_content_type("image/webp") is None

    def test_kind_for_video(self):
        assert StorageSettings().kind_for_content_type("video/mp4") == "video"

    def test_credentials_must_be_paired(self):
        with pytest.raises(ValidationError):
            StorageSettings(access_key="AKIA")

    def test_boto3_config(self):
        settings = StorageSettings(
            endpoint="http://localhost:9000",
            access_key="minio",
            secret_key="minio123",
        )

        config = settings.get_boto3_config()

        assert config["endpoint_url"] == "http://localhost:9000"
        assert config["aws_access_key_id"] == "minio"
        assert config["aws_secret_access_key"] == "minio123"


@pytest.mark.unit
def test_plan_limit_can_be_unbounded(monkeypatch):
    monkeypatch.setenv("PLAN_FREE_DAILY_LIMIT", "10")

    settings = PlanSettings()

    assert settings.free_daily_limit == 10
    assert settings.premium_monthly_limit is None
