"""Unit tests for storage backend factory."""

import pytest

from cleancut_service.core.settings.storage import StorageSettings
from cleancut_service.infra.storage.backends import LocalBackend, create_storage_backend
from cleancut_service.infra.storage.backends.s3.backend import S3Backend


class TestBackendFactory:
    """Test backend factory creation logic."""

    def test_create_local_backend(self, tmp_path):
        backend = create_storage_backend(StorageSettings(backend="local", local_root=tmp_path))

        assert isinstance(backend, LocalBackend)
        assert backend.root == tmp_path.resolve()

    def test_create_s3_backend(self):
        settings = StorageSettings(
            backend="s3",
            bucket="test-bucket",
            access_key="test-key",
            secret_key="test-secret",
        )

        backend = create_storage_backend(settings)

        assert isinstance(backend, S3Backend)
        assert backend.bucket == "test-bucket"
        assert backend.backend_name == "s3"

    def test_unknown_backend_rejected_by_settings(self):
        with pytest.raises(ValueError):
            StorageSettings(backend="ftp")
