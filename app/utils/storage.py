"""
Gahoi Sathi — Photo storage backends.

Two interchangeable backends share one interface
(``upload_file`` / ``delete_file`` / ``get_file_url`` / ``file_exists``):

* ``LocalStorage`` writes into ``UPLOAD_DIR``; files are served by the API
  under ``/uploads/photos``.
* ``BlobStorage`` writes into a Google Cloud Storage bucket under
  ``users/<owner>/photos/``.

``create_storage`` picks one once at startup from ``STORAGE_TYPE`` and
falls back to local storage if the blob backend cannot be built.
"""

from __future__ import annotations

import os
import uuid
from pathlib import Path

import structlog
from google.cloud import storage as gcs_storage

from app.config import Settings, get_settings

logger = structlog.get_logger("sathi.utils.storage")

_PUBLIC_PREFIX = "/uploads/photos/"


class StorageConfigurationError(RuntimeError):
    """Raised when a storage backend cannot be constructed."""


def _is_http_url(value: str) -> bool:
    return value.startswith("http://") or value.startswith("https://")


def _read_source(source: bytes | str | os.PathLike) -> bytes:
    if isinstance(source, (bytes, bytearray)):
        return bytes(source)
    return Path(source).read_bytes()


# ──────────────────────────────────────────────────────────────────────────────
# Local filesystem
# ──────────────────────────────────────────────────────────────────────────────

class LocalStorage:
    kind = "local"

    def __init__(self, upload_dir: str, public_url_base: str) -> None:
        self.upload_dir = Path(upload_dir)
        self.public_url_base = public_url_base.rstrip("/")
        self.upload_dir.mkdir(parents=True, exist_ok=True)

    def _filename(self, path_or_url: str) -> str:
        if _PUBLIC_PREFIX in path_or_url:
            return path_or_url.split(_PUBLIC_PREFIX, 1)[1]
        return os.path.basename(path_or_url)

    def upload_file(
        self,
        source: bytes | str | os.PathLike,
        filename: str,
        owner_id: uuid.UUID | str | None = None,
        content_type: str = "image/jpeg",
    ) -> dict:
        """Write ``source`` under ``UPLOAD_DIR`` and return ``{url, path}``."""
        target = self.upload_dir / os.path.basename(filename)
        target.write_bytes(_read_source(source))
        logger.info("local_file_stored", path=str(target), owner_id=str(owner_id))
        return {"url": self.get_file_url(target.name), "path": str(target)}

    def delete_file(self, path_or_url: str) -> bool:
        """Remove a stored file.  Failures are logged and reported as ``False``."""
        target = self.upload_dir / self._filename(path_or_url)
        try:
            target.unlink()
        except OSError as exc:
            logger.warning("local_file_delete_failed", path=str(target), error=str(exc))
            return False
        logger.info("local_file_deleted", path=str(target))
        return True

    def get_file_url(self, path: str) -> str:
        if _is_http_url(path):
            return path
        return f"{self.public_url_base}{_PUBLIC_PREFIX}{os.path.basename(path)}"

    def file_exists(self, path: str) -> bool:
        return (self.upload_dir / self._filename(path)).is_file()


# ──────────────────────────────────────────────────────────────────────────────
# Google Cloud Storage
# ──────────────────────────────────────────────────────────────────────────────

class BlobStorage:
    kind = "blob"

    def __init__(self, bucket_name: str, project_id: str = "") -> None:
        if not bucket_name:
            raise StorageConfigurationError(
                "Blob storage requires GCS_BUCKET_NAME to be configured"
            )
        try:
            client = gcs_storage.Client(project=project_id or None)
        except Exception as exc:
            raise StorageConfigurationError(
                f"Could not create Cloud Storage client: {exc}"
            ) from exc
        self.bucket = client.bucket(bucket_name)
        self.public_base = f"https://storage.googleapis.com/{bucket_name}/"

    def _object_path(self, path_or_url: str) -> str:
        if path_or_url.startswith(self.public_base):
            return path_or_url[len(self.public_base):]
        if path_or_url.startswith("gs://"):
            return path_or_url.split("/", 3)[3]
        return path_or_url

    def upload_file(
        self,
        source: bytes | str | os.PathLike,
        filename: str,
        owner_id: uuid.UUID | str | None = None,
        content_type: str = "image/jpeg",
    ) -> dict:
        """Upload to ``users/<owner>/photos/<filename>`` and return ``{url, path}``."""
        object_path = f"users/{owner_id}/photos/{os.path.basename(filename)}"
        blob = self.bucket.blob(object_path)
        blob.upload_from_string(_read_source(source), content_type=content_type)
        logger.info("blob_file_stored", path=object_path, owner_id=str(owner_id))
        return {"url": self.get_file_url(object_path), "path": object_path}

    def delete_file(self, path_or_url: str) -> bool:
        object_path = self._object_path(path_or_url)
        try:
            self.bucket.blob(object_path).delete()
        except Exception as exc:
            logger.warning("blob_file_delete_failed", path=object_path, error=str(exc))
            return False
        logger.info("blob_file_deleted", path=object_path)
        return True

    def get_file_url(self, path: str) -> str:
        if _is_http_url(path):
            return path
        return f"{self.public_base}{self._object_path(path)}"

    def file_exists(self, path: str) -> bool:
        return self.bucket.blob(self._object_path(path)).exists()


Storage = LocalStorage | BlobStorage


def create_storage(settings: Settings | None = None) -> Storage:
    """Select the storage backend named by ``STORAGE_TYPE``.

    A blob backend that cannot be constructed (missing bucket, no
    credentials) is replaced by ``LocalStorage`` with a warning.
    """
    settings = settings or get_settings()

    if settings.STORAGE_TYPE == "blob":
        try:
            backend = BlobStorage(settings.GCS_BUCKET_NAME, settings.GCP_PROJECT_ID)
        except StorageConfigurationError as exc:
            logger.warning("blob_storage_unavailable_falling_back", error=str(exc))
            return LocalStorage(settings.UPLOAD_DIR, settings.PUBLIC_URL_BASE)
        logger.info("storage_selected", kind=backend.kind, bucket=settings.GCS_BUCKET_NAME)
        return backend

    logger.info("storage_selected", kind="local", upload_dir=settings.UPLOAD_DIR)
    return LocalStorage(settings.UPLOAD_DIR, settings.PUBLIC_URL_BASE)
