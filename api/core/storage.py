"""
Object storage for listing images.

Two backends:
- `LocalFileStorage` writes under UPLOAD_DIR and serves from BASE_URL/uploads.
- `S3Storage` uploads to an S3-compatible bucket (AWS or MinIO) with boto3.

boto3 and file I/O are blocking, so both run in a worker thread.
"""

from __future__ import annotations

import asyncio
import logging
import re
import secrets
from abc import ABC, abstractmethod
from pathlib import Path

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from . import config

logger = logging.getLogger(__name__)

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


class StorageError(RuntimeError):
    pass


def property_image_key(property_id: int, filename: str) -> str:
    """
    Key namespaced by property id with a random prefix, e.g.
    `properties/42/Jx8c2kQp1a-front.jpg`.
    """
    safe_name = _UNSAFE_FILENAME_CHARS.sub("-", Path(filename or "").name).strip("-.") or "image"
    return f"properties/{property_id}/{secrets.token_urlsafe(8)}-{safe_name[:120]}"


class StorageBackend(ABC):
    @abstractmethod
    async def put(self, key: str, data: bytes, content_type: str) -> str:
        """
        Store `data` under `key` and return its public URL.
        """

    @abstractmethod
    async def delete(self, key: str) -> None:
        pass


class LocalFileStorage(StorageBackend):
    """Local filesystem storage for development."""

    def __init__(self, base_dir: str = "uploads", base_url: str = "http://localhost:8000"):
        self.base_dir = Path(base_dir)
        self.base_url = base_url.rstrip("/")

    def _path(self, key: str) -> Path:
        path = (self.base_dir / key).resolve()
        if self.base_dir.resolve() not in path.parents:
            raise StorageError(f"Invalid storage key: {key}")
        return path

    def _write(self, path: Path, data: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)

    async def put(self, key: str, data: bytes, content_type: str) -> str:
        path = self._path(key)
        try:
            await asyncio.to_thread(self._write, path, data)
        except OSError as exc:
            raise StorageError(f"Failed to write {key}: {exc}") from exc
        logger.info("storage_put backend=local key=%s bytes=%s", key, len(data))
        return f"{self.base_url}/uploads/{key}"

    async def delete(self, key: str) -> None:
        path = self._path(key)
        try:
            await asyncio.to_thread(path.unlink, True)
        except OSError as exc:
            raise StorageError(f"Failed to delete {key}: {exc}") from exc
        logger.info("storage_delete backend=local key=%s", key)


class S3Storage(StorageBackend):
    """AWS S3 / MinIO storage."""

    def __init__(
        self,
        bucket_name: str,
        aws_access_key: str | None = None,
        aws_secret_key: str | None = None,
        region: str = "us-east-1",
        endpoint_url: str | None = None,
        public_base_url: str | None = None,
    ):
        self.bucket_name = bucket_name
        self.region = region
        self.endpoint_url = endpoint_url
        self.public_base_url = public_base_url.rstrip("/") if public_base_url else None

        session = boto3.session.Session()
        self.s3_client = session.client(
            "s3",
            region_name=region,
            endpoint_url=endpoint_url,
            aws_access_key_id=aws_access_key,
            aws_secret_access_key=aws_secret_key,
        )

    def url_for(self, key: str) -> str:
        if self.public_base_url:
            return f"{self.public_base_url}/{key}"
        if self.endpoint_url:
            return f"{self.endpoint_url.rstrip('/')}/{self.bucket_name}/{key}"
        return f"https://{self.bucket_name}.s3.{self.region}.amazonaws.com/{key}"

    async def put(self, key: str, data: bytes, content_type: str) -> str:
        try:
            await asyncio.to_thread(
                self.s3_client.put_object,
                Bucket=self.bucket_name,
                Key=key,
                Body=data,
                ContentType=content_type,
            )
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"Failed to upload {key}: {exc}") from exc
        logger.info("storage_put backend=s3 bucket=%s key=%s bytes=%s", self.bucket_name, key, len(data))
        return self.url_for(key)

    async def delete(self, key: str) -> None:
        try:
            await asyncio.to_thread(self.s3_client.delete_object, Bucket=self.bucket_name, Key=key)
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"Failed to delete {key}: {exc}") from exc
        logger.info("storage_delete backend=s3 bucket=%s key=%s", self.bucket_name, key)


def get_storage_backend() -> StorageBackend:
    """
    Pick the backend from STORAGE_TYPE ("local" or "s3").
    """
    storage_type = config.env_str("STORAGE_TYPE", "local").lower()

    if storage_type == "s3":
        return S3Storage(
            bucket_name=config.env_str("S3_BUCKET_NAME", "property-images"),
            aws_access_key=config.env_str("AWS_ACCESS_KEY_ID") or None,
            aws_secret_key=config.env_str("AWS_SECRET_ACCESS_KEY") or None,
            region=config.env_str("AWS_REGION", "us-east-1"),
            endpoint_url=config.env_str("S3_ENDPOINT_URL") or None,
            public_base_url=config.env_str("S3_PUBLIC_BASE_URL") or None,
        )

    return LocalFileStorage(
        base_dir=config.env_str("UPLOAD_DIR", "uploads"),
        base_url=config.env_str("BASE_URL", "http://localhost:8000"),
    )
