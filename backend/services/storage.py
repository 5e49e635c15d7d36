"""MinIO client utilities."""

from __future__ import annotations

import asyncio
from enum import Enum
from functools import lru_cache
from io import BytesIO

from minio import Minio
from minio.error import S3Error

from core import settings

MISSING_OBJECT_CODES = frozenset({"NoSuchKey", "NoSuchObject", "ResourceNotFound"})
DEFAULT_CONTENT_TYPE = "application/octet-stream"


class ACL(str, Enum):
    """Canned access-control settings accepted by object writes."""

    private = "private"
    public_read = "public-read"


@lru_cache
def get_minio_client() -> Minio:
    """Return a cached MinIO client configured from settings."""
    return Minio(
        settings.minio_endpoint,
        access_key=settings.minio_access_key,
        secret_key=settings.minio_secret_key,
        secure=settings.minio_secure,
    )


def ensure_bucket(client: Minio | None = None, bucket_name: str | None = None) -> None:
    """Ensure the configured bucket exists."""
    client = client or get_minio_client()
    bucket_name = bucket_name or settings.minio_bucket

    if client.bucket_exists(bucket_name):  # pragma: no cover - network call
        return

    try:
        client.make_bucket(bucket_name)  # pragma: no cover - network call
    except S3Error as exc:  # pragma: no cover - handle race conditions
        allowed_codes = {"BucketAlreadyOwnedByYou", "BucketAlreadyExists"}
        if exc.code not in allowed_codes:
            raise


class ObjectStore:
    """Key-addressed access to one bucket.

    The MinIO client is blocking; the ``*_async`` helpers run it in a worker
    thread so the seeder can overlap many requests.
    """

    def __init__(self, client: Minio, bucket: str) -> None:
        self.client = client
        self.bucket = bucket

    def exists(self, key: str) -> bool:
        try:
            self.client.stat_object(self.bucket, key)
            return True
        except S3Error as exc:
            if exc.code in MISSING_OBJECT_CODES:
                return False
            raise

    def read(self, key: str) -> bytes:
        response = self.client.get_object(self.bucket, key)
        try:
            return response.read()
        finally:
            response.close()
            response.release_conn()

    def write(
        self,
        key: str,
        data: bytes,
        acl: ACL = ACL.private,
        *,
        content_type: str = DEFAULT_CONTENT_TYPE,
    ) -> None:
        self.client.put_object(
            self.bucket,
            key,
            data=BytesIO(data),
            length=len(data),
            content_type=content_type,
            metadata={"x-amz-acl": ACL(acl).value},
        )

    async def exists_async(self, key: str) -> bool:
        return await asyncio.to_thread(self.exists, key)

    async def read_async(self, key: str) -> bytes:
        return await asyncio.to_thread(self.read, key)

    async def write_async(
        self,
        key: str,
        data: bytes,
        acl: ACL = ACL.private,
        *,
        content_type: str = DEFAULT_CONTENT_TYPE,
    ) -> None:
        await asyncio.to_thread(self.write, key, data, acl, content_type=content_type)


class AssetPackStorage:
    """Files that belong to a single asset pack, stored under its own prefix."""

    prefix = "asset_packs"

    def __init__(self, store: ObjectStore, pack_id: str) -> None:
        self.store = store
        self.pack_id = pack_id

    @property
    def thumbnail_filename(self) -> str:
        return f"{self.pack_id}.png"

    def key_for(self, filename: str) -> str:
        return f"{self.prefix}/{self.pack_id}/{filename}"

    async def exists(self, filename: str) -> bool:
        return await self.store.exists_async(self.key_for(filename))

    async def write(self, filename: str, data: bytes, acl: ACL) -> None:
        await self.store.write_async(
            self.key_for(filename), data, acl, content_type="image/png"
        )


class ContentStorage:
    """Content blobs addressed by their externally supplied content id."""

    prefix = "contents"

    def __init__(self, store: ObjectStore) -> None:
        self.store = store

    def key_for(self, content_id: str) -> str:
        return f"{self.prefix}/{content_id}"

    async def exists(self, content_id: str) -> bool:
        return await self.store.exists_async(self.key_for(content_id))

    async def read(self, content_id: str) -> bytes:
        return await self.store.read_async(self.key_for(content_id))

    async def write(self, content_id: str, data: bytes, acl: ACL) -> None:
        await self.store.write_async(self.key_for(content_id), data, acl)
