"""
Redis Cache Store

Shares the menu cache between API workers. TTLs are delegated to Redis
key expiry; prefix invalidation walks matching keys with SCAN.
"""

import json
import logging
import re
from typing import Any, Optional

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from restaurant.services.cache.base import BaseCacheStore, CacheEntryInfo

logger = logging.getLogger(__name__)

_GLOB_CHARS = re.compile(r"([*?\[\]\\])")


def _escape_glob(value: str) -> str:
    """Escape characters that SCAN MATCH treats as glob syntax."""
    return _GLOB_CHARS.sub(r"\\\1", value)


class RedisCacheStore(BaseCacheStore):
    """
    Redis-backed TTL cache.

    All keys live under ``namespace`` so clearing the menu cache never
    touches unrelated data in the same Redis database.
    """

    def __init__(self, redis_url: str, namespace: str = "restaurant:menu:", client=None):
        self.namespace = namespace
        self.client = client or aioredis.from_url(redis_url, decode_responses=True)
        logger.info(f"RedisCacheStore initialized (namespace={namespace})")

    @property
    def provider_name(self) -> str:
        return "redis"

    def _key(self, key: str) -> str:
        return f"{self.namespace}{key}"

    async def _delete_matching(self, pattern: str) -> int:
        keys = [key async for key in self.client.scan_iter(match=pattern)]
        if not keys:
            return 0
        return await self.client.delete(*keys)

    async def get(self, key: str) -> Optional[Any]:
        payload = await self.client.get(self._key(key))
        if payload is None:
            return None
        return json.loads(payload)

    async def set(self, key: str, value: Any, ttl_seconds: float) -> None:
        await self.client.set(self._key(key), json.dumps(value), px=int(ttl_seconds * 1000))

    async def delete_prefix(self, prefix: str) -> int:
        return await self._delete_matching(_escape_glob(self._key(prefix)) + "*")

    async def clear(self) -> int:
        return await self._delete_matching(_escape_glob(self.namespace) + "*")

    async def entries(self) -> list[CacheEntryInfo]:
        """Entries with their remaining TTL; Redis does not track age."""
        infos = []
        async for full_key in self.client.scan_iter(match=_escape_glob(self.namespace) + "*"):
            remaining_ms = await self.client.pttl(full_key)
            infos.append(
                CacheEntryInfo(
                    key=full_key[len(self.namespace):],
                    ttl_seconds=remaining_ms / 1000 if remaining_ms >= 0 else None,
                )
            )
        return sorted(infos, key=lambda info: info.key)

    async def health_check(self) -> bool:
        try:
            return bool(await self.client.ping())
        except RedisError as e:
            logger.error(f"Redis health check failed: {e}")
            return False

    async def close(self) -> None:
        await self.client.aclose()
