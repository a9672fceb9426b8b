"""MinIO implementation of blob storage."""

import asyncio
import io
import time
from pathlib import Path
from typing import BinaryIO

from minio import Minio
from minio.error import S3Error

from src.commons.infrastructure.blob.base import (
    BlobNotFoundError,
    BlobStorageBase,
    HealthStatus,
)

_MISSING_CODES = {"NoSuchKey", "NoSuchBucket", "NoSuchObject"}


class MinioBlobStorage(BlobStorageBase):
    """MinIO implementation of blob storage.

    Works with both MinIO (local development) and AWS S3 (production).
    The SDK is synchronous, so every call runs in the default executor.
    """

    def __init__(
        self,
        endpoint: str,
        access_key: str,
        secret_key: str,
        secure: bool = False,
        region: str | None = None,
    ) -> None:
        self._client = Minio(
            endpoint=endpoint,
            access_key=access_key,
            secret_key=secret_key,
            secure=secure,
            region=region,
        )
        self._endpoint = endpoint

    async def download_to_file(
        self,
        bucket: str,
        path: str,
        local_path: Path,
    ) -> int:
        """Download an object with ``fget_object`` and return its size."""
        loop = asyncio.get_running_loop()
        local_path.parent.mkdir(parents=True, exist_ok=True)

        def _download() -> int:
            try:
                self._client.fget_object(bucket, path, str(local_path))
            except S3Error as e:
                if e.code in _MISSING_CODES:
                    raise BlobNotFoundError(bucket, path) from e
                raise
            return local_path.stat().st_size

        return await loop.run_in_executor(None, _download)

    async def upload(
        self,
        bucket: str,
        path: str,
        data: BinaryIO | bytes,
        content_type: str = "application/octet-stream",
    ) -> int:
        """Upload a blob with ``put_object``."""
        loop = asyncio.get_running_loop()

        if isinstance(data, bytes):
            data_io: BinaryIO = io.BytesIO(data)
            length = len(data)
        else:
            data.seek(0, io.SEEK_END)
            length = data.tell()
            data.seek(0)
            data_io = data

        def _upload() -> None:
            self._client.put_object(
                bucket_name=bucket,
                object_name=path,
                data=data_io,
                length=length,
                content_type=content_type,
            )

        await loop.run_in_executor(None, _upload)
        return length

    async def delete(self, bucket: str, path: str) -> bool:
        """Delete a blob from storage."""
        if not await self.exists(bucket, path):
            return False

        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self._client.remove_object, bucket, path)
        return True

    async def exists(self, bucket: str, path: str) -> bool:
        """Check if a blob exists."""
        loop = asyncio.get_running_loop()

        def _stat() -> bool:
            try:
                self._client.stat_object(bucket, path)
                return True
            except S3Error as e:
                if e.code in _MISSING_CODES:
                    return False
                raise

        return await loop.run_in_executor(None, _stat)

    async def health_check(self) -> HealthStatus:
        """Check service health."""
        start = time.perf_counter()
        try:
            loop = asyncio.get_running_loop()
            await loop.run_in_executor(None, self._client.list_buckets)
            latency_ms = (time.perf_counter() - start) * 1000
            return HealthStatus(
                healthy=True,
                latency_ms=latency_ms,
                message="MinIO is healthy",
                details={"endpoint": self._endpoint},
            )
        except Exception as e:
            latency_ms = (time.perf_counter() - start) * 1000
            return HealthStatus(
                healthy=False,
                latency_ms=latency_ms,
                message=f"MinIO health check failed: {e}",
                details={"endpoint": self._endpoint, "error": str(e)},
            )
