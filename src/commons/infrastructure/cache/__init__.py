"""Read-view cache abstractions and implementations."""

from src.commons.infrastructure.cache.base import CacheBase
from src.commons.infrastructure.cache.memory_provider import InMemoryCache
from src.commons.infrastructure.cache.redis_provider import RedisCache

__all__ = [
    # Base classes
    "CacheBase",
    # Implementations
    "RedisCache",
    "InMemoryCache",
]
