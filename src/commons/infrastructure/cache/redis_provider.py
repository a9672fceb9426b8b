"""Redis implementation of the read-view cache."""

import json
import time
from typing import Any

from redis.asyncio import Redis
from redis.exceptions import RedisError

from src.commons.infrastructure.blob.base import HealthStatus
from src.commons.infrastructure.cache.base import CacheBase
from src.commons.telemetry import get_logger

_DELETE_BATCH = 500


class RedisCache(CacheBase):
    """Redis-backed cache using ``redis.asyncio``.

    Every Redis failure is logged and absorbed: a broken cache must never
    break a pipeline run or a read request.
    """

    def __init__(
        self,
        url: str,
        *,
        key_prefix: str = "",
        socket_timeout: float = 2.0,
        client: Redis | None = None,
    ) -> None:
        """Initialize the Redis client.

        Args:
            url: Redis connection URL (``redis://host:port/db``).
            key_prefix: Optional namespace prepended to every key.
            socket_timeout: Per-command socket timeout in seconds.
            client: Pre-built client, mainly for tests.
        """
        self._client: Redis = client or Redis.from_url(
            url,
            decode_responses=True,
            socket_timeout=socket_timeout,
            socket_connect_timeout=socket_timeout,
        )
        self._prefix = key_prefix
        self._url = url
        self._logger = get_logger(__name__)

    def _key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    async def get(self, key: str) -> Any | None:
        try:
            raw = await self._client.get(self._key(key))
        except RedisError as e:
            self._logger.warning(
                "Cache read failed, treating as miss",
                extra={"key": key, "error": str(e)},
            )
            return None

        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            self._logger.warning(
                "Discarding undecodable cache entry", extra={"key": key}
            )
            return None

    async def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        try:
            await self._client.set(
                self._key(key),
                json.dumps(value, default=str),
                ex=ttl_seconds,
            )
        except RedisError as e:
            self._logger.warning(
                "Cache write failed",
                extra={"key": key, "error": str(e)},
            )

    async def delete(self, *keys: str) -> int:
        if not keys:
            return 0
        try:
            return int(await self._client.delete(*(self._key(k) for k in keys)))
        except RedisError as e:
            self._logger.warning(
                "Cache delete failed",
                extra={"keys": list(keys), "error": str(e)},
            )
            return 0

    async def delete_pattern(self, pattern: str) -> int:
        deleted = 0
        batch: list[str] = []
        try:
            # SCAN instead of KEYS so large keyspaces don't block the server
            async for key in self._client.scan_iter(match=self._key(pattern)):
                batch.append(key)
                if len(batch) >= _DELETE_BATCH:
                    deleted += int(await self._client.delete(*batch))
                    batch.clear()
            if batch:
                deleted += int(await self._client.delete(*batch))
        except RedisError as e:
            self._logger.warning(
                "Cache pattern delete failed",
                extra={"pattern": pattern, "error": str(e)},
            )
        return deleted

    async def health_check(self) -> HealthStatus:
        """Check service health."""
        start = time.perf_counter()
        try:
            await self._client.ping()
            latency_ms = (time.perf_counter() - start) * 1000
            return HealthStatus(
                healthy=True,
                latency_ms=latency_ms,
                message="Redis is healthy",
            )
        except RedisError as e:
            latency_ms = (time.perf_counter() - start) * 1000
            return HealthStatus(
                healthy=False,
                latency_ms=latency_ms,
                message=f"Redis health check failed: {e}",
                details={"error": str(e)},
            )

    async def close(self) -> None:
        await self._client.aclose()
