"""Storage backend protocol.

Keys are relative, slash-separated asset references such as
``images/6f1c....png``; each backend maps them onto its own namespace.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, BinaryIO, Protocol

if TYPE_CHECKING:
    from collections.abc import AsyncIterator


class StorageBackend(Protocol):
    """Protocol interface for asset storage backends.

    Uses structural typing (Protocol) rather than inheritance.
    """

    @property
    def backend_name(self) -> str:
        """Name of the backend (e.g., 'local', 's3')."""
        ...

    async def startup(self) -> None:
        """Initialize backend (create clients, directories, etc.)."""
        ...

    async def shutdown(self) -> None:
        """Release backend resources."""
        ...

    async def health_check(self) -> bool:
        """Check backend health and connectivity."""
        ...

    async def put_object(
        self,
        key: str,
        data: BinaryIO,
        content_type: str | None = None,
    ) -> int:
        """Write ``data`` under ``key`` and return the stored size in bytes.

        Raises:
            StorageUploadError: If the write fails
        """
        ...

    def iter_object(self, key: str, chunk_size: int) -> AsyncIterator[bytes]:
        """Stream an object's bytes in chunks.

        Raises:
            StorageFileNotFoundError: If the object doesn't exist
        """
        ...

    async def delete_object(self, key: str) -> bool:
        """Delete an object; returns False when it was already absent.

        Raises:
            StorageDeleteError: If an existing object could not be removed
        """
        ...

    async def object_exists(self, key: str) -> bool:
        """Check if an object exists."""
        ...
