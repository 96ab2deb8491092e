"""Asset storage configuration settings.

Environment variables use STORAGE_ prefix.
Example: STORAGE_BACKEND="s3"
         STORAGE_BUCKET="cleancut-assets"

Supports:
- Local filesystem (default, rooted at ``local_root``)
- AWS S3 and S3-compatible services (MinIO, LocalStack)
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Literal

from pydantic import Field, SecretStr, computed_field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _split_list(value: Any) -> list[str]:
    if isinstance(value, str):
        if value.startswith("["):
            return [str(item) for item in json.loads(value)]
        return [t.strip() for t in value.split(",") if t.strip()]
    return list(value) if value else []


class StorageSettings(BaseSettings):
    """Asset store settings for uploaded sources and processed results.

    Environment variables use STORAGE_ prefix.
    """

    # ──────────────────────────────────────────────────────────────
    # Backend selection
    # ──────────────────────────────────────────────────────────────

    backend: Literal["local", "s3"] = Field(
        default="local",
        description="Storage backend: local filesystem or S3-compatible object storage",
    )

    local_root: Path = Field(
        default=Path("uploads"),
        description="Root directory for the local filesystem backend",
    )

    # ──────────────────────────────────────────────────────────────
    # S3 Connection Configuration
    # ──────────────────────────────────────────────────────────────

    endpoint: str | None = Field(
        default=None,
        description="S3-compatible endpoint URL (for MinIO/LocalStack). None for AWS S3.",
    )

    bucket: str = Field(
        default="cleancut-assets",
        min_length=3,
        max_length=63,
        description="Bucket holding uploaded and result assets",
    )

    region: str = Field(
        default="us-east-1",
        description="AWS region (used for AWS S3 and request signing)",
    )

    access_key: SecretStr | None = Field(default=None, description="S3 access key ID")
    secret_key: SecretStr | None = Field(default=None, description="S3 secret access key")

    use_ssl: bool = Field(default=True, description="Use SSL/TLS for S3 connections")
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")

    # ──────────────────────────────────────────────────────────────
    # Upload Configuration
    # ──────────────────────────────────────────────────────────────

    max_file_size_mb: int = Field(
        default=500,
        ge=1,
        le=5000,
        description="Maximum upload size in MB",
    )

    allowed_image_types: list[str] = Field(
        default_factory=lambda: ["image/jpeg", "image/png", "image/webp", "image/gif"],
        description="Accepted image MIME types",
    )

    allowed_video_types: list[str] = Field(
        default_factory=lambda: [
            "video/mp4",
            "video/webm",
            "video/quicktime",
            "video/x-msvideo",
        ],
        description="Accepted video MIME types",
    )

    streaming_chunk_size: int = Field(
        default=1024 * 1024,  # 1MB
        ge=65536,
        le=104857600,
        description="Chunk size in bytes for streaming downloads",
    )

    # ──────────────────────────────────────────────────────────────
    # Path Configuration
    # ──────────────────────────────────────────────────────────────

    image_prefix: str = Field(default="images/", description="Key prefix for uploaded images")
    video_prefix: str = Field(default="videos/", description="Key prefix for uploaded videos")
    result_prefix: str = Field(default="results/", description="Key prefix for processed results")

    model_config = SettingsConfigDict(
        env_prefix="STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
    )

    @field_validator("allowed_image_types", "allowed_video_types", mode="before")
    @classmethod
    def _parse_content_types(cls, value: Any) -> list[str]:
        """Parse comma-separated or JSON content types from env var."""
        return _split_list(value)

    @model_validator(mode="after")
    def _validate_credential_consistency(self) -> StorageSettings:
        """Require both S3 credentials or neither (IAM role authentication)."""
        if (self.access_key is None) != (self.secret_key is None):
            raise ValueError(
                "Both access_key and secret_key must be provided together when using "
                "static credentials. Provide both or neither (for IAM role authentication)."
            )
        return self

    @computed_field  # type: ignore[prop-decorator]
    @property
    def max_file_size_bytes(self) -> int:
        """Get max file size in bytes."""
        return self.max_file_size_mb * 1024 * 1024

    def kind_for_content_type(self, content_type: str | None) -> str | None:
        """Return ``"image"``/``"video"`` for an accepted MIME type, else None."""
        if content_type in self.allowed_image_types:
            return "image"
        if content_type in self.allowed_video_types:
            return "video"
        return None

    def prefix_for(self, kind: str) -> str:
        """Return the key prefix for a media kind or ``"result"``."""
        return {
            "image": self.image_prefix,
            "video": self.video_prefix,
            "result": self.result_prefix,
        }[kind]

    def get_boto3_config(self) -> dict[str, Any]:
        """Get configuration dict for the aioboto3 client."""
        config: dict[str, Any] = {
            "region_name": self.region,
            "use_ssl": self.use_ssl,
            "verify": self.verify_ssl,
        }
        if self.access_key is not None and self.secret_key is not None:
            config["aws_access_key_id"] = self.access_key.get_secret_value()
            config["aws_secret_access_key"] = self.secret_key.get_secret_value()
        if self.endpoint:
            config["endpoint_url"] = self.endpoint
        return config
