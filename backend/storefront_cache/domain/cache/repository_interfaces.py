"""
Cache Repository Interfaces

Abstract contract the cache domain depends on. Infrastructure provides the
Redis implementation; tests can provide in-memory ones.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional


class CacheStore(ABC):
    """
    Flat key/value/TTL store used by the domain cache service.

    Implementations must never raise from these methods: a broken store
    behaves exactly like an empty one.
    """

    @abstractmethod
    async def get_cached(self, key: str) -> Optional[Any]:
        """Return the decoded value for key, or None."""
        pass

    @abstractmethod
    async def set_cache(
        self, key: str, value: Any, ttl_seconds: Optional[int] = None
    ) -> bool:
        """Store value under key for ttl_seconds; True if written."""
        pass

    @abstractmethod
    async def delete_cache(self, key: str) -> bool:
        """Delete key; True if a record was removed."""
        pass
