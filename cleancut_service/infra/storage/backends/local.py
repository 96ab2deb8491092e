"""Local filesystem storage backend.

Blocking file I/O runs in worker threads via ``asyncio.to_thread`` so the
event loop is never held by disk access.
"""

from __future__ import annotations

import asyncio
import logging
import shutil
from pathlib import Path
from typing import TYPE_CHECKING, BinaryIO

from cleancut_service.infra.storage.exceptions import (
    StorageDeleteError,
    StorageDownloadError,
    StorageFileNotFoundError,
    StorageUploadError,
    StorageValidationError,
)

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

logger = logging.getLogger(__name__)


class LocalBackend:
    """Filesystem backend rooted at a single directory.

    Example:
        backend = LocalBackend(Path("uploads"))
        await backend.startup()
        size = await backend.put_object("images/a.png", fileobj)
    """

    def __init__(self, root: Path) -> None:
        self.root = root.resolve()

    @property
    def backend_name(self) -> str:
        return "local"

    async def startup(self) -> None:
        await asyncio.to_thread(self.root.mkdir, parents=True, exist_ok=True)
        logger.info("Local storage ready", extra={"root": str(self.root)})

    async def shutdown(self) -> None:
        return None

    async def health_check(self) -> bool:
        return await asyncio.to_thread(self.root.is_dir)

    def _path(self, key: str) -> Path:
        path = (self.root / key).resolve()
        if not path.is_relative_to(self.root) or path == self.root:
            raise StorageValidationError(
                "Invalid asset reference", metadata={"key": key}
            )
        return path

    async def put_object(
        self,
        key: str,
        data: BinaryIO,
        content_type: str | None = None,
    ) -> int:
        path = self._path(key)

        def _write() -> int:
            path.parent.mkdir(parents=True, exist_ok=True)
            data.seek(0)
            with path.open("wb") as fh:
                shutil.copyfileobj(data, fh)
            return path.stat().st_size

        try:
            size = await asyncio.to_thread(_write)
        except OSError as e:
            logger.exception("Failed to write asset", extra={"key": key})
            raise StorageUploadError(
                f"Failed to store {key}", metadata={"key": key, "error": str(e)}
            ) from e

        logger.debug("Asset written", extra={"key": key, "size_bytes": size})
        return size

    async def iter_object(self, key: str, chunk_size: int) -> AsyncIterator[bytes]:
        path = self._path(key)
        try:
            fh = await asyncio.to_thread(path.open, "rb")
        except FileNotFoundError as e:
            raise StorageFileNotFoundError(
                f"Asset {key} not found", metadata={"key": key}
            ) from e
        except OSError as e:
            raise StorageDownloadError(
                f"Failed to read {key}", metadata={"key": key, "error": str(e)}
            ) from e

        try:
            while chunk := await asyncio.to_thread(fh.read, chunk_size):
                yield chunk
        finally:
            await asyncio.to_thread(fh.close)

    async def delete_object(self, key: str) -> bool:
        path = self._path(key)
        try:
            await asyncio.to_thread(path.unlink)
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageDeleteError(
                f"Failed to delete {key}", metadata={"key": key, "error": str(e)}
            ) from e
        return True

    async def object_exists(self, key: str) -> bool:
        return await asyncio.to_thread(self._path(key).is_file)
