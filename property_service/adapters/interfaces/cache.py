from abc import ABC, abstractmethod
from typing import Any, Dict, Generic, Optional, TypeVar

# Type variable for cached values
V = TypeVar('V')


class CacheStrategy(Generic[V], ABC):
    """
    Abstract base interface for caching strategies.

    Keys are plain strings. Implementations own expiry: callers never need
    to sweep expired entries themselves.

    Type Parameters:
        V: The type of values stored in the cache
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[V]:
        """
        Retrieves a cached item by key.

        Args:
            key: The key of the item to retrieve

        Returns:
            Optional[V]: The cached value if found and not expired, None otherwise
        """
        pass

    @abstractmethod
    async def set(self, key: str, value: V, ttl: Optional[int] = None) -> bool:
        """
        Stores an item in the cache.

        Args:
            key: The key to store the value under
            value: The value to store
            ttl: Optional time-to-live in seconds; the store default when omitted

        Returns:
            bool: True if successfully cached
        """
        pass

    @abstractmethod
    async def delete(self, key: str) -> int:
        """
        Removes an item from the cache.

        Returns:
            int: Number of entries removed
        """
        pass

    @abstractmethod
    async def delete_by_pattern(self, pattern: str) -> int:
        """
        Removes every key containing ``pattern`` as a plain substring.

        Returns:
            int: Number of entries removed
        """
        pass

    @abstractmethod
    async def flush(self) -> int:
        """
        Clears the entire cache.

        Returns:
            int: Number of entries cleared
        """
        pass

    @abstractmethod
    async def get_stats(self) -> Dict[str, Any]:
        """Returns statistics about the cache such as key count, hits and misses."""
        pass

    def start(self) -> None:
        """Acquire background resources. No-op by default."""

    def close(self) -> None:
        """Release background resources. No-op by default."""
