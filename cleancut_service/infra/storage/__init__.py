"""Asset storage infrastructure (local filesystem or S3)."""

from .exceptions import (
    StorageDeleteError,
    StorageError,
    StorageFileNotFoundError,
    StorageUploadError,
)
from .service import AssetStore, StoredAsset, get_asset_store, reset_asset_store

__all__ = [
    "AssetStore",
    "StorageDeleteError",
    "StorageError",
    "StorageFileNotFoundError",
    "StorageUploadError",
    "StoredAsset",
    "get_asset_store",
    "reset_asset_store",
]
