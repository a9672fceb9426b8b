"""Abstract base class for the read-view cache."""

from abc import ABC, abstractmethod
from typing import Any

from src.commons.infrastructure.blob.base import HealthStatus


class CacheBase(ABC):
    """Key-value cache in front of read endpoints.

    Values are JSON-serializable. Implementations must degrade rather than
    raise when the backing service is unreachable: reads become misses and
    writes or deletes become no-ops.
    """

    @abstractmethod
    async def get(self, key: str) -> Any | None:
        """Return the cached value, or None on miss."""

    @abstractmethod
    async def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        """Store a value with a time-to-live."""

    @abstractmethod
    async def delete(self, *keys: str) -> int:
        """Delete exact keys.

        Returns:
            Number of keys that existed.
        """

    @abstractmethod
    async def delete_pattern(self, pattern: str) -> int:
        """Delete every key matching a glob pattern such as ``videos:list:u1:*``.

        Returns:
            Number of keys deleted.
        """

    @abstractmethod
    async def health_check(self) -> HealthStatus:
        """Check service health."""

    async def close(self) -> None:  # noqa: B027
        """Release client resources. No-op by default."""
