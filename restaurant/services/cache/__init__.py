"""
Cache Store Factory

Provides a single process-wide cache store for the menu catalog.
Selects the backend based on ENV_MODE:
    - ENV_MODE=development → MemoryCacheStore
    - ENV_MODE=staging/production → RedisCacheStore

Usage:
    from restaurant.services.cache import get_cache_store

    store = get_cache_store()
    await store.set("list_all:", [...], ttl_seconds=300)
"""

import logging
from functools import lru_cache

from restaurant.core.config import get_settings
from restaurant.services.cache.base import BaseCacheStore, CacheEntryInfo
from restaurant.services.cache.memory_store import MemoryCacheStore
from restaurant.services.cache.redis_store import RedisCacheStore

logger = logging.getLogger(__name__)


@lru_cache()
def get_cache_store() -> BaseCacheStore:
    """
    Get the configured cache store instance.

    The instance is cached so every request shares the same cache.
    """
    settings = get_settings()

    if settings.use_redis_cache:
        logger.info(f"Cache Store: Using RedisCacheStore ({settings.env_mode.value} mode)")
        return RedisCacheStore(settings.redis_url)

    logger.info("Cache Store: Using MemoryCacheStore (development mode)")
    return MemoryCacheStore()


def reset_cache_store() -> None:
    """
    Clear the cached store instance.

    The next call to get_cache_store() will create a new instance.
    """
    get_cache_store.cache_clear()
    logger.debug("Cache store instance cleared")


__all__ = [
    "get_cache_store",
    "reset_cache_store",
    "BaseCacheStore",
    "CacheEntryInfo",
    "MemoryCacheStore",
    "RedisCacheStore",
]
