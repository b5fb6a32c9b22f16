"""
Cache Store Abstract Base Class

Defines the interface shared by the in-process store (development and
tests) and the Redis store (staging and production). Values are
JSON-compatible objects; both stores serialize them, so a cached value
never aliases a live object.

Keys are plain strings. Invalidation is by key prefix, never a global
flush, so entries with different TTLs can coexist.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class CacheEntryInfo:
    """
    Diagnostic view of one cache entry.

    Attributes:
        key: Cache key without any backend namespace
        age_seconds: Time since the entry was stored (None if unknown)
        ttl_seconds: Configured TTL, or remaining TTL where only that is known
        expired: Whether the entry is past its TTL but not yet evicted
    """
    key: str
    age_seconds: Optional[float] = None
    ttl_seconds: Optional[float] = None
    expired: bool = False

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "key": self.key,
            "age_seconds": self.age_seconds,
            "ttl_seconds": self.ttl_seconds,
            "expired": self.expired,
        }


class BaseCacheStore(ABC):
    """Abstract base class for menu cache backends."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the backend name (e.g. "memory", "redis")."""
        pass

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        """
        Fetch a live entry.

        Returns:
            The cached value, or None on a miss or expired entry
        """
        pass

    @abstractmethod
    async def set(self, key: str, value: Any, ttl_seconds: float) -> None:
        """Store a value under key for ttl_seconds."""
        pass

    @abstractmethod
    async def delete_prefix(self, prefix: str) -> int:
        """
        Remove every entry whose key starts with prefix.

        Returns:
            Number of entries removed
        """
        pass

    @abstractmethod
    async def clear(self) -> int:
        """Remove every entry owned by this store; returns the count."""
        pass

    @abstractmethod
    async def entries(self) -> list[CacheEntryInfo]:
        """List current entries for diagnostics."""
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Return True if the backend is reachable."""
        pass

    async def close(self) -> None:
        """Release backend resources. No-op by default."""
        return None
