"""
Caching Menu Catalog

Read-through cache in front of another BaseMenuCatalog. Both sides
implement the same interface, so callers never know whether a cache is
in place.

Cache keys are ``<method>:`` followed by each argument and a colon
(``get_by_id:7:``), so invalidating ``get_by_id:7:`` never touches
``get_by_id:70:``.

Consistency:
    - Listings and single items live for ``ttl_seconds`` (default 5 min)
    - Availability flags live for ``availability_ttl_seconds`` (default 30 s)
    - ``validate_ids`` and ``count`` always go to the inner catalog, so
      order placement sees current availability
    - Writes invalidate the affected prefixes only
"""

import logging
from typing import Any, Optional, Sequence

from restaurant.models import Cuisine
from restaurant.schemas import MenuItemRead
from restaurant.services.cache.base import BaseCacheStore, CacheEntryInfo
from restaurant.services.menu.base import BaseMenuCatalog

logger = logging.getLogger(__name__)

LIST_ALL = "list_all"
GET_BY_ID = "get_by_id"
LIST_BY_CUISINE = "list_by_cuisine"
IS_AVAILABLE = "is_available"


def cache_key(method: str, *args: Any) -> str:
    """Build the cache key for a query signature."""
    return f"{method}:" + "".join(f"{arg}:" for arg in args)


class CachedMenuCatalog(BaseMenuCatalog):
    """
    Menu catalog decorated with a TTL cache.

    Attributes:
        inner: Catalog that answers cache misses and performs writes
        store: Shared cache backend
        ttl_seconds: TTL for listings and items
        availability_ttl_seconds: TTL for availability flags
    """

    def __init__(
        self,
        inner: BaseMenuCatalog,
        store: BaseCacheStore,
        ttl_seconds: float = 300,
        availability_ttl_seconds: float = 30,
    ):
        self.inner = inner
        self.store = store
        self.ttl_seconds = ttl_seconds
        self.availability_ttl_seconds = availability_ttl_seconds

    async def _cached_list(self, key: str, loader) -> list[MenuItemRead]:
        cached = await self.store.get(key)
        if cached is not None:
            logger.debug(f"Menu cache hit: {key}")
            return [MenuItemRead.model_validate(item) for item in cached]

        logger.debug(f"Menu cache miss: {key}")
        items = await loader()
        await self.store.set(
            key, [item.model_dump(mode="json") for item in items], self.ttl_seconds
        )
        return items

    async def list_all(self) -> list[MenuItemRead]:
        return await self._cached_list(cache_key(LIST_ALL), self.inner.list_all)

    async def list_by_cuisine(self, cuisine: Cuisine) -> list[MenuItemRead]:
        cuisine = Cuisine(cuisine)
        return await self._cached_list(
            cache_key(LIST_BY_CUISINE, cuisine.value),
            lambda: self.inner.list_by_cuisine(cuisine),
        )

    async def get_by_id(self, item_id: int) -> Optional[MenuItemRead]:
        key = cache_key(GET_BY_ID, item_id)
        cached = await self.store.get(key)
        if cached is not None:
            logger.debug(f"Menu cache hit: {key}")
            return MenuItemRead.model_validate(cached)

        logger.debug(f"Menu cache miss: {key}")
        item = await self.inner.get_by_id(item_id)
        # Misses are not cached so a newly seeded item shows up at once
        if item is not None:
            await self.store.set(key, item.model_dump(mode="json"), self.ttl_seconds)
        return item

    async def is_available(self, item_id: int) -> bool:
        key = cache_key(IS_AVAILABLE, item_id)
        cached = await self.store.get(key)
        if cached is not None:
            return bool(cached)

        available = await self.inner.is_available(item_id)
        await self.store.set(key, available, self.availability_ttl_seconds)
        return available

    async def validate_ids(self, item_ids: Sequence[int]) -> list[MenuItemRead]:
        return await self.inner.validate_ids(item_ids)

    async def count(self, include_unavailable: bool = False) -> int:
        return await self.inner.count(include_unavailable)

    async def set_availability(self, item_id: int, available: bool) -> MenuItemRead:
        item = await self.inner.set_availability(item_id, available)
        await self.invalidate(item_id)
        return item

    async def create_many(self, items: Sequence[dict]) -> int:
        created = await self.inner.create_many(items)
        await self.invalidate()
        return created

    async def invalidate(self, item_id: Optional[int] = None) -> int:
        """
        Drop listings, and the per-item entries of item_id if given.

        Returns:
            Number of entries removed
        """
        prefixes = [cache_key(LIST_ALL), cache_key(LIST_BY_CUISINE)]
        if item_id is not None:
            prefixes += [cache_key(GET_BY_ID, item_id), cache_key(IS_AVAILABLE, item_id)]

        removed = 0
        for prefix in prefixes:
            removed += await self.store.delete_prefix(prefix)
        logger.info(f"Menu cache: invalidated {removed} entries")
        return removed

    async def clear(self) -> int:
        removed = await self.store.clear()
        logger.info(f"Menu cache: cleared {removed} entries")
        return removed

    async def entries(self) -> list[CacheEntryInfo]:
        return await self.store.entries()
