"""Asset store for uploaded sources and processed results.

Wraps the configured backend with the key layout used by the service:
``images/``, ``videos/`` and ``results/`` prefixes and UUID file names that
keep the original extension.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import TYPE_CHECKING, BinaryIO

from cleancut_service.core.settings import get_storage_settings

from .backends.factory import create_storage_backend

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from cleancut_service.core.settings.storage import StorageSettings

    from .backends.protocol import StorageBackend

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class StoredAsset:
    """Reference and size of a freshly written asset."""

    ref: str
    size_bytes: int


class AssetStore:
    """Store, read, probe and delete assets by reference.

    Example:
        store = get_asset_store()
        await store.startup()
        asset = await store.store(upload.file, kind="image", filename="cat.png")
        async for chunk in store.read(asset.ref):
            ...
        await store.delete(asset.ref)
    """

    def __init__(
        self,
        settings: StorageSettings | None = None,
        backend: StorageBackend | None = None,
    ) -> None:
        self._settings = settings or get_storage_settings()
        self._backend = backend or create_storage_backend(self._settings)

    @property
    def settings(self) -> StorageSettings:
        return self._settings

    @property
    def backend(self) -> StorageBackend:
        return self._backend

    async def startup(self) -> None:
        logger.info("Starting asset store", extra={"backend": self._backend.backend_name})
        await self._backend.startup()

    async def shutdown(self) -> None:
        await self._backend.shutdown()

    async def health_check(self) -> bool:
        return await self._backend.health_check()

    def new_ref(self, kind: str, filename: str | None = None) -> str:
        """Build a fresh reference under the prefix for ``kind``."""
        suffix = PurePosixPath(filename).suffix.lower() if filename else ""
        return f"{self._settings.prefix_for(kind)}{uuid.uuid4()}{suffix}"

    async def store(
        self,
        data: BinaryIO,
        kind: str,
        filename: str | None = None,
        content_type: str | None = None,
    ) -> StoredAsset:
        """Write ``data`` as a new asset of ``kind`` and return its reference."""
        ref = self.new_ref(kind, filename)
        size = await self._backend.put_object(ref, data, content_type=content_type)
        logger.info("Asset stored", extra={"ref": ref, "kind": kind, "size_bytes": size})
        return StoredAsset(ref=ref, size_bytes=size)

    async def delete(self, ref: str) -> bool:
        """Delete an asset; a missing asset is not an error.

        Returns:
            True if something was removed, False if it was already gone.

        Raises:
            StorageError: If an existing asset could not be removed
        """
        removed = await self._backend.delete_object(ref)
        if not removed:
            logger.debug("Asset already absent", extra={"ref": ref})
        return removed

    async def exists(self, ref: str) -> bool:
        return await self._backend.object_exists(ref)

    def read(self, ref: str) -> AsyncIterator[bytes]:
        """Stream an asset's bytes."""
        return self._backend.iter_object(ref, self._settings.streaming_chunk_size)


_asset_store: AssetStore | None = None


def get_asset_store() -> AssetStore:
    """Get the process-wide asset store, creating it on first call."""
    global _asset_store
    if _asset_store is None:
        _asset_store = AssetStore()
    return _asset_store


def reset_asset_store() -> None:
    """Reset the singleton instance (for testing only)."""
    global _asset_store
    _asset_store = None
