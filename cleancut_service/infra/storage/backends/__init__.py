"""Storage backends."""

from .factory import create_storage_backend
from .local import LocalBackend
from .protocol import StorageBackend

__all__ = ["LocalBackend", "StorageBackend", "create_storage_backend"]
