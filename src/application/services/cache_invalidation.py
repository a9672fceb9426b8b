"""Eviction of cached read views after video record writes."""

from src.commons.infrastructure.cache.base import CacheBase
from src.commons.telemetry import get_logger


def video_key(video_id: str) -> str:
    """Full-record read view."""
    return f"video:{video_id}:full"


def video_stream_key(video_id: str) -> str:
    """Stream metadata read view."""
    return f"video:{video_id}:stream"


def video_list_pattern(owner_id: str) -> str:
    """Every cached list page of one owner (``videos:list:{owner}:{query hash}``)."""
    return f"videos:list:{owner_id}:*"


def video_stats_key(owner_id: str) -> str:
    return f"videos:stats:{owner_id}"


class CacheInvalidationCoordinator:
    """Deletes every cached view that a record write could have made stale.

    Invalidation is idempotent and never raises: when the cache is down the
    next read simply goes to the record store.
    """

    def __init__(self, cache: CacheBase) -> None:
        self._cache = cache
        self._logger = get_logger(__name__)

    async def invalidate(self, video_id: str) -> None:
        """Evict the full-record and stream views of one video."""
        try:
            await self._cache.delete(video_key(video_id), video_stream_key(video_id))
        except Exception as e:
            self._logger.warning(
                "Cache invalidation failed",
                extra={"video_id": video_id, "error": str(e)},
            )

    async def invalidate_owner_views(self, owner_id: str) -> None:
        """Evict the owner's list and stats views.

        Lists show processing status, so they go stale on terminal
        transitions. Per-progress eviction would only churn them.
        """
        try:
            await self._cache.delete_pattern(video_list_pattern(owner_id))
            await self._cache.delete(video_stats_key(owner_id))
        except Exception as e:
            self._logger.warning(
                "Owner view invalidation failed",
                extra={"owner_id": owner_id, "error": str(e)},
            )
