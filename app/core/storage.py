"""
Storage bridge for media and portfolio blobs.

Blobs are addressed by (bucket, path). Paths follow ``{owner_id}/{epoch_ms}.{ext}``
so every owner gets its own namespace without a central sequence.
Supabase Storage is the default backend; S3 is used when AWS credentials and a
bucket are configured, with each logical bucket mapped to a key prefix.
"""

import mimetypes
import os
from datetime import datetime, timezone
from typing import Optional
from urllib.parse import unquote

import boto3
from botocore.exceptions import ClientError
from supabase import Client

from app.config.settings import settings
from app.core.exceptions import StoreFailure
import logging

logger = logging.getLogger(__name__)


def object_path(owner_id: str, filename: Optional[str] = None, content_type: Optional[str] = None,
                now: Optional[datetime] = None) -> str:
    """Build ``{owner_id}/{epoch_ms}.{ext}`` for a new upload."""
    now = now or datetime.now(timezone.utc)
    ext = os.path.splitext(filename or "")[1].lstrip(".").lower()
    if not ext and content_type:
        ext = (mimetypes.guess_extension(content_type) or "").lstrip(".")
    ext = ext or "bin"
    return f"{owner_id}/{int(now.timestamp() * 1000)}.{ext}"


def path_from_public_url(url: Optional[str], bucket: str) -> Optional[str]:
    """Storage key referenced by a public URL, or None if the URL is not in ``bucket``."""
    marker = f"/{bucket}/"
    if not url or marker not in url:
        return None
    tail = url.split(marker, 1)[1].split("?", 1)[0]
    return unquote(tail) or None


class SupabaseStorageBackend:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def upload(self, bucket: str, path: str, content: bytes, content_type: str, overwrite: bool = False) -> None:
        self.supabase.storage.from_(bucket).upload(
            path,
            content,
            file_options={"content-type": content_type, "upsert": "true" if overwrite else "false"},
        )

    def remove(self, bucket: str, path: str) -> bool:
        removed = self.supabase.storage.from_(bucket).remove([path])
        return bool(removed)

    def public_url(self, bucket: str, path: str) -> str:
        return self.supabase.storage.from_(bucket).get_public_url(path).rstrip("?")


class S3StorageBackend:
    def __init__(self):
        if not settings.s3_enabled:
            raise ValueError("AWS S3 credentials and bucket name must be configured")

        self.s3_client = boto3.client(
            's3',
            aws_access_key_id=settings.aws_access_key_id,
            aws_secret_access_key=settings.aws_secret_access_key,
            region_name=settings.aws_region
        )
        self.bucket_name = settings.s3_bucket_name
        self.base_url = (
            settings.s3_public_base_url
            or f"https://{self.bucket_name}.s3.{settings.aws_region}.amazonaws.com"
        ).rstrip("/")

    def _exists(self, key: str) -> bool:
        try:
            self.s3_client.head_object(Bucket=self.bucket_name, Key=key)
            return True
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in ("404", "NoSuchKey", "NotFound"):
                return False
            raise

    def upload(self, bucket: str, path: str, content: bytes, content_type: str, overwrite: bool = False) -> None:
        key = f"{bucket}/{path}"
        if not overwrite and self._exists(key):
            raise FileExistsError(f"The resource already exists: {key}")
        self.s3_client.put_object(
            Bucket=self.bucket_name,
            Key=key,
            Body=content,
            ContentType=content_type
        )

    def remove(self, bucket: str, path: str) -> bool:
        key = f"{bucket}/{path}"
        if not self._exists(key):
            return False
        self.s3_client.delete_object(Bucket=self.bucket_name, Key=key)
        return True

    def public_url(self, bucket: str, path: str) -> str:
        return f"{self.base_url}/{bucket}/{path}"


class StorageBridge:
    # one boto3 client per process
    _s3_backend: Optional[S3StorageBackend] = None

    def __init__(self, supabase: Client, backend=None):
        self.supabase = supabase
        self._backend = backend

    @property
    def backend(self):
        """Chosen on first use so requests that never touch blobs build nothing."""
        if self._backend is None:
            if settings.s3_enabled:
                if StorageBridge._s3_backend is None:
                    StorageBridge._s3_backend = S3StorageBackend()
                self._backend = StorageBridge._s3_backend
            else:
                self._backend = SupabaseStorageBackend(self.supabase)
        return self._backend

    def upload(self, bucket: str, path: str, content: bytes, content_type: str, overwrite: bool = False) -> str:
        """Store a blob and return its public URL. Raises StoreFailure on any backend error."""
        try:
            self.backend.upload(bucket, path, content, content_type, overwrite=overwrite)
        except Exception as e:
            logger.error("Upload to %s/%s failed: %s", bucket, path, e)
            raise StoreFailure(f"Failed to upload file: {e}")
        logger.info("Uploaded %s bytes to %s/%s", len(content), bucket, path)
        return self.public_url(bucket, path)

    def remove(self, bucket: str, path: str) -> bool:
        """Best-effort delete. Missing blobs and backend errors are logged, never raised."""
        try:
            removed = self.backend.remove(bucket, path)
        except Exception as e:
            logger.warning("Failed to remove blob %s/%s: %s", bucket, path, e)
            return False
        if removed:
            logger.info("Removed blob %s/%s", bucket, path)
        else:
            logger.warning("Blob %s/%s not found, nothing removed", bucket, path)
        return removed

    def public_url(self, bucket: str, path: str) -> str:
        return self.backend.public_url(bucket, path)
