"""S3-compatible storage backend implementation.

Implements the StorageBackend protocol for AWS S3, MinIO, and other
S3-compatible services using aioboto3.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, BinaryIO

import aioboto3
from botocore.exceptions import ClientError

from cleancut_service.infra.storage.exceptions import (
    StorageError,
    StorageNotConfiguredError,
    StorageUploadError,
    is_not_found,
    map_boto_error,
)

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from cleancut_service.core.settings.storage import StorageSettings

logger = logging.getLogger(__name__)


class S3Backend:
    """S3-compatible storage backend.

    Example:
        backend = S3Backend(settings)
        await backend.startup()
        size = await backend.put_object("videos/clip.mp4", fileobj, "video/mp4")
        await backend.shutdown()
    """

    def __init__(self, settings: StorageSettings) -> None:
        self.settings = settings
        self.bucket = settings.bucket
        self._session = aioboto3.Session()
        self._client: Any = None
        self._client_context: Any = None

    @property
    def backend_name(self) -> str:
        return "s3"

    async def startup(self) -> None:
        """Open the S3 client."""
        if self._client is not None:
            return

        logger.info(
            "Initializing S3 backend",
            extra={
                "bucket": self.bucket,
                "endpoint": self.settings.endpoint,
                "region": self.settings.region,
            },
        )
        try:
            self._client_context = self._session.client("s3", **self.settings.get_boto3_config())
            self._client = await self._client_context.__aenter__()
        except Exception as e:
            logger.exception("Failed to initialize S3 backend", extra={"error": str(e)})
            raise StorageError(
                f"Failed to initialize S3 backend: {e}",
                code="STORAGE_INITIALIZATION_ERROR",
            ) from e

    async def shutdown(self) -> None:
        """Close the S3 client."""
        if self._client_context is None:
            return
        try:
            await self._client_context.__aexit__(None, None, None)
        except Exception as e:  # noqa: BLE001
            logger.warning("Error closing S3 client", extra={"error": str(e)})
        finally:
            self._client = None
            self._client_context = None

    async def health_check(self) -> bool:
        if self._client is None:
            return False
        try:
            await self._client.head_bucket(Bucket=self.bucket)
        except ClientError as e:
            logger.warning("S3 health check failed", extra={"error": str(e), "bucket": self.bucket})
            return False
        return True

    def _ensure_client(self) -> Any:
        if self._client is None:
            raise StorageNotConfiguredError("S3 backend not initialized. Call startup() first.")
        return self._client

    async def put_object(
        self,
        key: str,
        data: BinaryIO,
        content_type: str | None = None,
    ) -> int:
        client = self._ensure_client()
        data.seek(0, 2)
        size = data.tell()
        data.seek(0)

        extra_args: dict[str, Any] = {}
        if content_type:
            extra_args["ContentType"] = content_type

        try:
            await client.upload_fileobj(data, self.bucket, key, ExtraArgs=extra_args)
        except ClientError as e:
            logger.exception("Failed to upload object to S3", extra={"key": key})
            raise map_boto_error(e, operation="upload", key=key) from e
        except Exception as e:
            logger.exception("Unexpected error during S3 upload", extra={"key": key})
            raise StorageUploadError(
                f"Failed to upload {key}", metadata={"key": key, "error": str(e)}
            ) from e

        logger.info(
            "Object uploaded to S3",
            extra={"key": key, "bucket": self.bucket, "size_bytes": size},
        )
        return size

    async def iter_object(self, key: str, chunk_size: int) -> AsyncIterator[bytes]:
        client = self._ensure_client()
        try:
            response = await client.get_object(Bucket=self.bucket, Key=key)
        except ClientError as e:
            raise map_boto_error(e, operation="download", key=key) from e

        async with response["Body"] as body:
            async for chunk in body.iter_chunks(chunk_size):
                yield chunk

    async def delete_object(self, key: str) -> bool:
        client = self._ensure_client()
        if not await self.object_exists(key):
            return False
        try:
            await client.delete_object(Bucket=self.bucket, Key=key)
        except ClientError as e:
            raise map_boto_error(e, operation="delete", key=key) from e
        logger.info("Object deleted from S3", extra={"key": key, "bucket": self.bucket})
        return True

    async def object_exists(self, key: str) -> bool:
        client = self._ensure_client()
        try:
            await client.head_object(Bucket=self.bucket, Key=key)
        except ClientError as e:
            if is_not_found(e):
                return False
            raise map_boto_error(e, operation="object_exists", key=key) from e
        return True
