"""
In-Process Cache Store

Dictionary-backed TTL cache used in development mode and in tests.
Expired entries are evicted lazily on read.
"""

import json
import logging
import time
from typing import Any, Callable, Optional

from restaurant.services.cache.base import BaseCacheStore, CacheEntryInfo

logger = logging.getLogger(__name__)


class MemoryCacheStore(BaseCacheStore):
    """
    TTL cache held in a plain dict.

    Attributes:
        clock: Monotonic time source in seconds, injectable for tests
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self.clock = clock
        # key -> (serialized value, stored_at, ttl)
        self._entries: dict[str, tuple[str, float, float]] = {}

    @property
    def provider_name(self) -> str:
        return "memory"

    def _is_expired(self, stored_at: float, ttl: float) -> bool:
        return self.clock() - stored_at > ttl

    async def get(self, key: str) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        payload, stored_at, ttl = entry
        if self._is_expired(stored_at, ttl):
            del self._entries[key]
            return None
        return json.loads(payload)

    async def set(self, key: str, value: Any, ttl_seconds: float) -> None:
        self._entries[key] = (json.dumps(value), self.clock(), ttl_seconds)

    async def delete_prefix(self, prefix: str) -> int:
        keys = [key for key in self._entries if key.startswith(prefix)]
        for key in keys:
            del self._entries[key]
        return len(keys)

    async def clear(self) -> int:
        count = len(self._entries)
        self._entries.clear()
        return count

    async def entries(self) -> list[CacheEntryInfo]:
        now = self.clock()
        return [
            CacheEntryInfo(
                key=key,
                age_seconds=round(now - stored_at, 3),
                ttl_seconds=ttl,
                expired=now - stored_at > ttl,
            )
            for key, (_, stored_at, ttl) in sorted(self._entries.items())
        ]

    async def health_check(self) -> bool:
        return True
