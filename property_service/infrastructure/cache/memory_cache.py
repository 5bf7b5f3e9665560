import copy
import threading
import time
from typing import Any, Callable, Dict, List, Optional

from property_service.adapters.interfaces.cache import CacheStrategy
from property_service.core.exceptions import CacheError
from property_service.core.logging import get_logger

logger = get_logger(__name__)


class CacheItem:
    """Class representing a cached item with expiration."""

    def __init__(self, value: Any, expires_at: Optional[float] = None):
        """
        Initialize a cache item.

        Args:
            value: Cached value
            expires_at: Expiration timestamp
        """
        self.value = value
        self.expires_at = expires_at

    def is_expired(self, now: float) -> bool:
        """
        Check if the item has expired.

        Returns:
            True if expired
        """
        if self.expires_at is None:
            return False
        return now >= self.expires_at


class MemoryCache(CacheStrategy[Any]):
    """
    Process-local implementation of the CacheStrategy interface.

    Entries expire lazily on access and, once ``start()`` has been called,
    through a background sweep every ``cleanup_interval`` seconds. Values are
    deep-copied on the way in and out so callers cannot mutate cached state.
    """

    def __init__(
        self,
        default_ttl: int = 3600,
        cleanup_interval: float = 600,
        clock: Callable[[], float] = time.monotonic
    ):
        """
        Initialize the in-memory cache.

        Args:
            default_ttl: Default TTL in seconds, 0 or less means no expiry
            cleanup_interval: Interval for expired items cleanup in seconds, 0 disables the sweep
            clock: Monotonic time source, replaceable in tests
        """
        self.default_ttl = default_ttl
        self.cleanup_interval = cleanup_interval
        self._clock = clock

        self._cache: Dict[str, CacheItem] = {}
        self._lock = threading.RLock()

        self._hits = 0
        self._misses = 0

        self._stop_event = threading.Event()
        self._cleanup_thread: Optional[threading.Thread] = None

        logger.info("In-memory cache initialized")

    def start(self) -> None:
        """Start a background thread to clean up expired items."""
        if self.cleanup_interval <= 0 or self._cleanup_thread is not None:
            return

        self._stop_event.clear()

        def cleanup_task():
            while not self._stop_event.wait(self.cleanup_interval):
                try:
                    self._cleanup_expired()
                except Exception as e:
                    logger.error(f"Error in cache cleanup thread: {str(e)}", exc_info=True)

        self._cleanup_thread = threading.Thread(
            target=cleanup_task, name="memory-cache-cleanup", daemon=True
        )
        self._cleanup_thread.start()
        logger.debug(f"Started cache cleanup thread with interval {self.cleanup_interval}s")

    def close(self) -> None:
        """Stop the cleanup thread. Cached entries are left in place."""
        if self._cleanup_thread is None:
            return
        self._stop_event.set()
        self._cleanup_thread.join(timeout=5)
        self._cleanup_thread = None
        logger.debug("Stopped cache cleanup thread")

    def _cleanup_expired(self) -> int:
        """Clean up expired cache items."""
        with self._lock:
            now = self._clock()
            keys_to_delete = [key for key, item in self._cache.items() if item.is_expired(now)]

            for key in keys_to_delete:
                del self._cache[key]

        if keys_to_delete:
            logger.debug(f"Cleaned up {len(keys_to_delete)} expired cache items")
        return len(keys_to_delete)

    def _delete_keys(self, keys: List[str]) -> int:
        count = 0
        for key in keys:
            if self._cache.pop(key, None) is not None:
                count += 1
        return count

    async def get(self, key: str) -> Any:
        """
        Get item from cache.

        Args:
            key: Cache key

        Returns:
            Cached value or None if not found or expired
        """
        with self._lock:
            item = self._cache.get(key)

            if item is None:
                self._misses += 1
                logger.debug(f"Cache miss for key: {key}")
                return None

            if item.is_expired(self._clock()):
                del self._cache[key]
                self._misses += 1
                logger.debug(f"Cache miss (expired) for key: {key}")
                return None

            self._hits += 1
            logger.debug(f"Cache hit for key: {key}")
            return copy.deepcopy(item.value)

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        """
        Set item in cache with TTL.

        Args:
            key: Cache key
            value: Value to cache
            ttl: TTL in seconds

        Returns:
            True if successful
        """
        if not isinstance(key, str):
            raise CacheError(f"Cache keys must be strings, got {type(key).__name__}")

        effective_ttl = ttl if ttl is not None else self.default_ttl

        expires_at = None
        if effective_ttl > 0:
            expires_at = self._clock() + effective_ttl

        item = CacheItem(value=copy.deepcopy(value), expires_at=expires_at)

        with self._lock:
            self._cache[key] = item

        logger.debug(f"Set cache key {key} with TTL {effective_ttl}s")
        return True

    async def delete(self, key: str) -> int:
        """
        Remove item from cache.

        Returns:
            Number of entries removed (0 or 1)
        """
        with self._lock:
            count = self._delete_keys([key])

        logger.debug(f"Deleted {count} cache key(s) for: {key}")
        return count

    async def delete_by_pattern(self, pattern: str) -> int:
        """
        Remove all keys containing ``pattern``.

        Matching is a case-sensitive substring test, not a glob or regex.

        Returns:
            Number of entries removed
        """
        with self._lock:
            matching_keys = [key for key in self._cache if pattern in key]
            count = self._delete_keys(matching_keys)

        logger.info(f"Deleted {count} cache keys matching pattern '{pattern}'")
        return count

    async def flush(self) -> int:
        """
        Clear all cache entries.

        Returns:
            Number of keys cleared
        """
        with self._lock:
            count = len(self._cache)
            self._cache.clear()

        logger.info(f"Flushed all {count} keys from cache")
        return count

    async def get_stats(self) -> Dict[str, Any]:
        with self._lock:
            now = self._clock()
            live_keys = sum(1 for item in self._cache.values() if not item.is_expired(now))
            return {
                "backend": "memory",
                "keys": live_keys,
                "hits": self._hits,
                "misses": self._misses,
                "default_ttl": self.default_ttl,
                "cleanup_running": self._cleanup_thread is not None,
            }
