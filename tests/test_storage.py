"""Tests for photo storage backends and backend selection."""
from unittest.mock import MagicMock, patch

import pytest

from app.config import Settings
from app.utils.storage import BlobStorage, LocalStorage, StorageConfigurationError, create_storage


@pytest.fixture
def local(tmp_path):
    return LocalStorage(str(tmp_path / "photos"), "http://localhost:5050/")


class TestLocalStorage:
    def test_upload_and_delete(self, local):
        stored = local.upload_file(b"jpeg-bytes", "abc.jpg", owner_id="u1")

        assert stored["url"] == "http://localhost:5050/uploads/photos/abc.jpg"
        assert local.file_exists(stored["url"])
        assert local.delete_file(stored["url"]) is True
        assert not local.file_exists("abc.jpg")

    def test_filename_cannot_escape_upload_dir(self, local):
        stored = local.upload_file(b"x", "../../etc/evil.jpg")
        assert stored["url"].endswith("/uploads/photos/evil.jpg")

    def test_delete_missing_file_is_reported_not_raised(self, local):
        assert local.delete_file("missing.jpg") is False

    def test_absolute_urls_pass_through(self, local):
        url = "https://cdn.example.com/x.jpg"
        assert local.get_file_url(url) == url


class TestBlobStorage:
    def test_requires_bucket(self):
        with pytest.raises(StorageConfigurationError):
            BlobStorage("")

    def test_upload_uses_owner_prefix(self):
        with patch("app.utils.storage.gcs_storage.Client") as client_cls:
            bucket = MagicMock()
            client_cls.return_value.bucket.return_value = bucket
            storage = BlobStorage("sathi-photos")

            stored = storage.upload_file(b"data", "p.jpg", owner_id="u1")

        bucket.blob.assert_called_with("users/u1/photos/p.jpg")
        assert stored["url"] == "https://storage.googleapis.com/sathi-photos/users/u1/photos/p.jpg"

    def test_delete_accepts_public_url(self):
        with patch("app.utils.storage.gcs_storage.Client") as client_cls:
            bucket = MagicMock()
            client_cls.return_value.bucket.return_value = bucket
            storage = BlobStorage("sathi-photos")

            assert storage.delete_file(
                "https://storage.googleapis.com/sathi-photos/users/u1/photos/p.jpg"
            )
        bucket.blob.assert_called_with("users/u1/photos/p.jpg")


class TestCreateStorage:
    def _settings(self, tmp_path, **overrides):
        values = {
            "DATABASE_URL": "sqlite+aiosqlite:///:memory:",
            "UPLOAD_DIR": str(tmp_path / "photos"),
        }
        values.update(overrides)
        return Settings(**values)

    def test_local_by_default(self, tmp_path):
        assert create_storage(self._settings(tmp_path)).kind == "local"

    def test_blob_without_bucket_falls_back_to_local(self, tmp_path):
        storage = create_storage(self._settings(tmp_path, STORAGE_TYPE="blob", GCS_BUCKET_NAME=""))
        assert storage.kind == "local"

        stored = storage.upload_file(b"jpeg-bytes", "p.jpg", owner_id="u1")
        assert stored["url"].endswith("/uploads/photos/p.jpg")
        assert (tmp_path / "photos" / "p.jpg").read_bytes() == b"jpeg-bytes"

    def test_client_failure_falls_back_to_local(self, tmp_path):
        with patch(
            "app.utils.storage.gcs_storage.Client", side_effect=RuntimeError("no credentials")
        ):
            storage = create_storage(
                self._settings(tmp_path, STORAGE_TYPE="blob", GCS_BUCKET_NAME="sathi-photos")
            )
        assert storage.kind == "local"

        stored = storage.upload_file(b"jpeg-bytes", "p.jpg", owner_id="u1")
        assert "/uploads/photos/" in stored["url"]
        assert storage.file_exists(stored["url"])

    def test_blob_when_configured(self, tmp_path):
        with patch("app.utils.storage.gcs_storage.Client"):
            storage = create_storage(
                self._settings(tmp_path, STORAGE_TYPE="blob", GCS_BUCKET_NAME="sathi-photos")
            )
        assert storage.kind == "blob"

    def test_unknown_storage_type_rejected(self, tmp_path):
        with pytest.raises(ValueError):
            self._settings(tmp_path, STORAGE_TYPE="ftp")
