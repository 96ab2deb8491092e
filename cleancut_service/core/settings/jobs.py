"""Job lifecycle, queue and sweeper settings.

Environment variables use JOB_ prefix.
Example: JOB_RETENTION_HOURS=24, JOB_WORKER_API_KEY=...
"""

from __future__ import annotations

from datetime import timedelta

from pydantic import Field, SecretStr, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class JobSettings(BaseSettings):
    """Settings for project retention, queue retries and the expiry sweeper."""

    # Retention
    retention_hours: int = Field(
        default=24,
        ge=1,
        le=24 * 90,
        description="Hours a project is kept before the sweeper reclaims it",
    )

    # Retry configuration
    max_attempts: int = Field(
        default=3,
        ge=1,
        le=20,
        description="Processing attempts before a queue entry is dead-lettered",
    )
    backoff_base_seconds: float = Field(
        default=5.0,
        ge=0,
        le=3600,
        description="Delay before the first retry",
    )
    backoff_multiplier: float = Field(
        default=2.0,
        ge=1.0,
        le=10.0,
        description="Exponential backoff multiplier",
    )
    backoff_max_seconds: float = Field(
        default=3600.0,
        ge=1,
        le=86400,
        description="Maximum retry delay",
    )

    # Worker channel
    worker_api_key: SecretStr = Field(
        default=SecretStr("change-me-worker-key"),
        description="Shared secret the processing worker presents in X-Worker-Key",
    )
    claim_lease_seconds: int = Field(
        default=900,
        ge=10,
        le=86400,
        description="How long a claimed entry stays in flight before it may be reclaimed",
    )
    callback_token_bytes: int = Field(
        default=32,
        ge=16,
        le=128,
        description="Entropy of the job-scoped callback token",
    )

    # Sweeper
    sweep_interval_minutes: int = Field(
        default=60,
        ge=1,
        le=1440,
        description="Interval between expiry sweeps",
    )
    sweep_batch_size: int = Field(
        default=500,
        ge=1,
        le=10000,
        description="Expired projects read per batch; a sweep pass reads batches until none remain",
    )
    sweep_on_startup: bool = Field(
        default=True,
        description="Run one sweep when the process starts",
    )
    monthly_reset_cron: str = Field(
        default="0 0 1 * *",
        description="Crontab expression for the monthly usage reset (UTC)",
    )
    scheduler_enabled: bool = Field(
        default=True,
        description="Run the sweeper and monthly reset inside the API process",
    )

    model_config = SettingsConfigDict(
        env_prefix="JOB_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
    )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def retention(self) -> timedelta:
        """Retention window as a timedelta."""
        return timedelta(hours=self.retention_hours)
