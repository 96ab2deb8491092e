"""Backend factory for creating storage backends from settings."""

from __future__ import annotations

from typing import TYPE_CHECKING

from cleancut_service.infra.storage.exceptions import StorageNotConfiguredError

if TYPE_CHECKING:
    from cleancut_service.core.settings.storage import StorageSettings

    from .protocol import StorageBackend


def create_storage_backend(settings: StorageSettings) -> StorageBackend:
    """Create the backend selected by ``settings.backend``.

    Raises:
        StorageNotConfiguredError: If the backend type is unsupported
    """
    match settings.backend:
        case "local":
            from .local import LocalBackend

            return LocalBackend(settings.local_root)
        case "s3":
            from .s3.backend import S3Backend

            return S3Backend(settings)
        case _:
            raise StorageNotConfiguredError(
                f"Unsupported storage backend: {settings.backend}. Supported backends: local, s3"
            )
