from __future__ import annotations
"""Controller layer shaping HTTP requests into gateway calls."""

import logging
from pathlib import Path
import shutil
import tempfile
from typing import BinaryIO, Iterable

from .models import BucketSummary, DeleteResult, ObjectListing, ObjectStream, UploadResult
from .services import ObjectStoreGateway
from .settings import AppSettings
from .ui_utils import DEFAULT_FILENAME

DEFAULT_CONTENT_TYPE = "application/octet-stream"

LOGGER = logging.getLogger(__name__)


class ValidationError(ValueError):
    """Raised when a request is missing required input."""


def _require(value: str | None, message: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(message)
    return value


class FileManagerController:
    """Coordinates validated requests with the :class:`ObjectStoreGateway`."""

    def __init__(self, gateway: ObjectStoreGateway, settings: AppSettings | None = None):
        self._gateway = gateway
        self._settings = settings or AppSettings()

    def list_buckets(self) -> list[BucketSummary]:
        return self._gateway.list_buckets()

    def list_objects(self, *, bucket_name: str | None, prefix: str | None = "") -> ObjectListing:
        bucket_name = _require(bucket_name, "Bucket name is required")
        return self._gateway.list_objects(
            bucket_name,
            prefix or "",
            max_keys=self._settings.max_list_keys,
        )

    def upload_object(
        self,
        *,
        bucket_name: str | None,
        prefix: str | None,
        stream: BinaryIO | None,
        filename: str | None,
        content_type: str | None = None,
    ) -> UploadResult:
        """Spool ``stream`` to a temporary file and forward it to the store.

        The temporary file is removed whether or not the upload succeeds.
        """
        bucket_name = _require(bucket_name, "Bucket name is required")
        if stream is None:
            raise ValidationError("No file uploaded")
        # Keys are stored exactly as prefix + filename.
        name = filename or DEFAULT_FILENAME
        key = f"{prefix or ''}{name}"
        content_type = content_type or DEFAULT_CONTENT_TYPE

        with tempfile.NamedTemporaryFile(
            prefix="s3fm-upload-",
            dir=self._settings.resolved_temp_dir(),
            delete=False,
        ) as holding:
            temp_path = Path(holding.name)
        try:
            with temp_path.open("wb") as holding:
                shutil.copyfileobj(stream, holding, self._settings.upload_chunk_size)
            result = self._gateway.put_object(
                bucket_name,
                key,
                str(temp_path),
                content_type=content_type,
            )
        finally:
            temp_path.unlink(missing_ok=True)
        LOGGER.debug("Upload of '%s' to bucket '%s' complete", key, bucket_name)
        return UploadResult(name=name, key=result.key, size=result.size, content_type=result.content_type)

    def download_object(self, *, bucket_name: str | None, key: str | None) -> ObjectStream:
        bucket_name = _require(bucket_name, "Bucket name is required")
        key = _require(key, "File key is required")
        return self._gateway.get_object(
            bucket_name,
            key,
            chunk_size=self._settings.download_chunk_size,
        )

    def delete_object(self, *, bucket_name: str | None, key: str | None) -> DeleteResult:
        bucket_name = _require(bucket_name, "Bucket name is required")
        key = _require(key, "File key is required")
        return self._gateway.delete_object(bucket_name, key)

    def delete_objects(self, *, bucket_name: str | None, keys: Iterable[str] | None) -> DeleteResult:
        bucket_name = _require(bucket_name, "Bucket name is required")
        cleaned = [key for key in (keys or []) if isinstance(key, str) and key.strip()]
        if not cleaned:
            raise ValidationError("At least one file key is required")
        return self._gateway.delete_objects(bucket_name, cleaned)

    def generate_presigned_url(
        self,
        *,
        bucket_name: str | None,
        key: str | None,
        expires_in: int = 3600,
    ) -> str:
        bucket_name = _require(bucket_name, "Bucket name is required")
        key = _require(key, "File key is required")
        if expires_in <= 0:
            raise ValidationError("expires_in must be greater than zero")
        return self._gateway.generate_presigned_url(bucket_name, key, expires_in=expires_in)
