from typing import Optional

from property_service.adapters.attom.normalizer import normalize_property
from property_service.adapters.interfaces.cache import CacheStrategy
from property_service.adapters.interfaces.property_provider import PropertyProvider
from property_service.core.logging import get_logger
from property_service.domain.models.property import NormalizedProperty

logger = get_logger(__name__)

CACHE_KEY_PREFIX = "property:"
DEFAULT_CACHE_TTL = 3600


def cache_key_for(address: str) -> str:
    """Cache key derived from the raw, untrimmed address string."""
    return f"{CACHE_KEY_PREFIX}{address}"


class PropertyService:
    """Looks up normalized property details, serving repeats from cache."""

    def __init__(
        self,
        provider: PropertyProvider,
        cache: CacheStrategy,
        cache_ttl: int = DEFAULT_CACHE_TTL
    ):
        self.provider = provider
        self.cache = cache
        self.cache_ttl = cache_ttl

    async def get_property_details(self, address: str) -> NormalizedProperty:
        """
        Gets normalized details for a validated address.

        Classified errors raised by the provider propagate unchanged; nothing
        is cached when the lookup fails.
        """
        key = cache_key_for(address)

        cached: Optional[NormalizedProperty] = await self.cache.get(key)
        if cached is not None:
            logger.info("Serving property details from cache", extra={"cache_key": key})
            return cached

        logger.info("Cache miss, querying property provider", extra={"cache_key": key})

        attom_id = await self.provider.resolve_identifier(address)
        raw_record = await self.provider.fetch_detail(attom_id)
        details = normalize_property(raw_record)

        await self.cache.set(key, details, self.cache_ttl)
        logger.debug(f"Cached property details for {self.cache_ttl}s", extra={"cache_key": key})

        return details
