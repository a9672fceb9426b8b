"""In-process cache with TTL support."""

import copy
import fnmatch
import time
from typing import Any

from src.commons.infrastructure.blob.base import HealthStatus
from src.commons.infrastructure.cache.base import CacheBase


class InMemoryCache(CacheBase):
    """Dict-backed cache. Expired entries are dropped lazily on access."""

    def __init__(self) -> None:
        self._entries: dict[str, tuple[Any, float]] = {}

    def _live(self, key: str) -> bool:
        entry = self._entries.get(key)
        if entry is None:
            return False
        if entry[1] <= time.monotonic():
            del self._entries[key]
            return False
        return True

    async def get(self, key: str) -> Any | None:
        if not self._live(key):
            return None
        return copy.deepcopy(self._entries[key][0])

    async def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        self._entries[key] = (copy.deepcopy(value), time.monotonic() + ttl_seconds)

    async def delete(self, *keys: str) -> int:
        deleted = 0
        for key in keys:
            if self._live(key):
                del self._entries[key]
                deleted += 1
        return deleted

    async def delete_pattern(self, pattern: str) -> int:
        matching = [k for k in list(self._entries) if fnmatch.fnmatchcase(k, pattern)]
        return await self.delete(*matching)

    def keys(self) -> list[str]:
        """Live keys, for inspection in tests and debugging."""
        return [k for k in list(self._entries) if self._live(k)]

    async def health_check(self) -> HealthStatus:
        return HealthStatus(
            healthy=True,
            latency_ms=0.0,
            message="In-memory cache",
            details={"entries": str(len(self._entries))},
        )
