"""Storage-specific exceptions.

All storage errors are AppExceptions so an upload that cannot be stored maps
to a Problem Details response; deletion failures are caught by callers and
logged as possible orphaned files.

Example:
    try:
        await client.put_object(Bucket=bucket, Key=key, Body=data)
    except ClientError as e:
        raise map_boto_error(e, operation="upload", key=key) from e
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from cleancut_service.core.exceptions import AppException

if TYPE_CHECKING:
    from botocore.exceptions import ClientError


class StorageError(AppException):
    """Base exception for all storage-related errors.

    Attributes:
        code: Error code identifier for programmatic error handling.
        message: Human-readable error message.
    """

    def __init__(
        self,
        message: str,
        code: str = "STORAGE_ERROR",
        status_code: int = 503,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        self.code = code
        self.message = message
        super().__init__(
            status_code=status_code,
            detail=message,
            type=code.lower().replace("_", "-"),
            extra=metadata or {},
        )


class StorageNotConfiguredError(StorageError):
    """Raised when the configured backend cannot be used."""

    def __init__(
        self,
        message: str = "Storage is not configured",
        metadata: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code="STORAGE_NOT_CONFIGURED", metadata=metadata)


class StorageFileNotFoundError(StorageError):
    """Raised when a requested asset does not exist."""

    def __init__(self, message: str, metadata: dict[str, Any] | None = None) -> None:
        super().__init__(
            message, code="STORAGE_FILE_NOT_FOUND", status_code=404, metadata=metadata
        )


class StorageUploadError(StorageError):
    """Raised when an asset cannot be written."""

    def __init__(self, message: str, metadata: dict[str, Any] | None = None) -> None:
        super().__init__(message, code="STORAGE_UPLOAD_ERROR", metadata=metadata)


class StorageDownloadError(StorageError):
    """Raised when an asset cannot be read."""

    def __init__(self, message: str, metadata: dict[str, Any] | None = None) -> None:
        super().__init__(message, code="STORAGE_DOWNLOAD_ERROR", metadata=metadata)


class StorageDeleteError(StorageError):
    """Raised when an existing asset cannot be removed."""

    def __init__(self, message: str, metadata: dict[str, Any] | None = None) -> None:
        super().__init__(message, code="STORAGE_DELETE_ERROR", metadata=metadata)


class StorageValidationError(StorageError):
    """Raised for an invalid asset reference (e.g. escaping the storage root)."""

    def __init__(self, message: str, metadata: dict[str, Any] | None = None) -> None:
        super().__init__(
            message, code="STORAGE_VALIDATION_ERROR", status_code=400, metadata=metadata
        )


_NOT_FOUND_CODES = frozenset({"NoSuchKey", "NoSuchBucket", "404", "NotFound"})


def is_not_found(error: ClientError) -> bool:
    """Whether a boto ClientError means the object does not exist."""
    return error.response.get("Error", {}).get("Code", "") in _NOT_FOUND_CODES


def map_boto_error(error: ClientError, operation: str, key: str | None = None) -> StorageError:
    """Map a boto3 ClientError to a StorageError subclass.

    Error Code Mappings:
        - NoSuchKey, NoSuchBucket -> StorageFileNotFoundError
        - upload -> StorageUploadError
        - download -> StorageDownloadError
        - delete -> StorageDeleteError
        - Others -> StorageError
    """
    error_code = error.response.get("Error", {}).get("Code", "Unknown")
    error_message = error.response.get("Error", {}).get("Message", str(error))
    metadata: dict[str, Any] = {
        "operation": operation,
        "aws_error_code": error_code,
        "request_id": error.response.get("ResponseMetadata", {}).get("RequestId"),
    }
    if key:
        metadata["key"] = key

    message = f"{operation.capitalize()} failed: {error_message}"
    if error_code in _NOT_FOUND_CODES:
        return StorageFileNotFoundError(message, metadata=metadata)
    if operation == "upload":
        return StorageUploadError(message, metadata=metadata)
    if operation == "download":
        return StorageDownloadError(message, metadata=metadata)
    if operation == "delete":
        return StorageDeleteError(message, metadata=metadata)
    return StorageError(message, metadata=metadata)


__all__ = [
    "StorageDeleteError",
    "StorageDownloadError",
    "StorageError",
    "StorageFileNotFoundError",
    "StorageNotConfiguredError",
    "StorageUploadError",
    "StorageValidationError",
    "is_not_found",
    "map_boto_error",
]
