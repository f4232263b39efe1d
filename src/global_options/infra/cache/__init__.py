"""Object cache backends."""

from __future__ import annotations

from ...config import BaseConfig
from .memory import MemoryObjectCache
from .null import NullObjectCache
from .redis import RedisObjectCache


def create_object_cache(config: BaseConfig, clock=None):
    """Build the cache backend selected by ``config.CACHE_BACKEND``."""

    if config.CACHE_BACKEND == "redis":
        return RedisObjectCache.from_url(config.REDIS_URL, prefix=config.CACHE_PREFIX)
    if config.CACHE_BACKEND == "none":
        return NullObjectCache()
    if clock is not None:
        return MemoryObjectCache(clock=clock)
    return MemoryObjectCache()


__all__ = ["MemoryObjectCache", "NullObjectCache", "RedisObjectCache", "create_object_cache"]
