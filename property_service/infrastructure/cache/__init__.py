"""Caching implementations for the Property Details Service."""

from property_service.infrastructure.cache.memory_cache import MemoryCache

__all__ = ["MemoryCache"]
