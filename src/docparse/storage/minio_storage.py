"""MinIO (S3-compatible) storage backend."""

from __future__ import annotations

import io
import logging
import re
import uuid
from pathlib import Path
from typing import BinaryIO
from urllib.parse import urlparse

from minio import Minio
from minio.error import S3Error

from docparse.core.errors import StorageError
from docparse.core.registry import StorageRegistry
from docparse.core.settings import get_settings
from docparse.storage.base import Storage

logger = logging.getLogger(__name__)


def sanitize_object_name(name: str) -> str:
    """Replace characters that are unsafe in object keys with underscores."""
    return re.sub(r"[^a-zA-Z0-9._-]", "_", name)


class MinioStorage(Storage):
    """Stores objects in a MinIO bucket under ``s3://<bucket>/<key>`` URIs."""

    name = "minio"

    def __init__(
        self,
        client: Minio | None = None,
        bucket: str | None = None,
        prefix: str = "docparse",
    ) -> None:
        settings = get_settings()
        self.client = client or Minio(
            endpoint=settings.minio_endpoint,
            access_key=settings.minio_access_key,
            secret_key=settings.minio_secret_key,
            secure=settings.minio_secure,
        )
        self.bucket = bucket or settings.minio_bucket
        self.prefix = prefix.strip("/")
        self._bucket_checked = False

    def _ensure_bucket(self) -> None:
        if self._bucket_checked:
            return
        if not self.client.bucket_exists(self.bucket):
            self.client.make_bucket(self.bucket)
            logger.info(f"Created bucket: {self.bucket}")
        self._bucket_checked = True

    def _split(self, uri: str) -> tuple[str, str]:
        parsed = urlparse(uri)
        if parsed.scheme != "s3" or not parsed.netloc:
            raise StorageError(f"Unsupported URI: {uri}", {"uri": uri})
        return parsed.netloc, parsed.path.lstrip("/")

    def get(self, uri: str) -> BinaryIO:
        bucket, key = self._split(uri)
        try:
            response = self.client.get_object(bucket_name=bucket, object_name=key)
        except S3Error as exc:
            raise StorageError(f"Unable to read {uri}: {exc}", {"uri": uri}) from exc
        try:
            return io.BytesIO(response.read())
        finally:
            response.close()
            response.release_conn()

    def put(self, file_path: str | Path) -> str:
        source = Path(file_path)
        key = f"{self.prefix}/{uuid.uuid4().hex}/{sanitize_object_name(source.name)}"
        try:
            self._ensure_bucket()
            self.client.fput_object(bucket_name=self.bucket, object_name=key, file_path=str(source))
        except S3Error as exc:
            raise StorageError(
                f"Unable to upload {source.name}: {exc}", {"file": str(source)}
            ) from exc
        logger.debug(f"Uploaded object: {self.bucket}/{key}")
        return f"s3://{self.bucket}/{key}"


StorageRegistry.register("minio", MinioStorage)
