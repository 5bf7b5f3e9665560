from typing import Optional

from fastapi import Depends, Query, Request

from property_service.adapters.interfaces.cache import CacheStrategy
from property_service.adapters.interfaces.property_provider import PropertyProvider
from property_service.core.exceptions import ValidationError
from property_service.core.logging import get_logger
from property_service.services.property_service import PropertyService

# Initialize logger
logger = get_logger(__name__)


async def get_cache_service(request: Request) -> CacheStrategy:
    """
    Dependency for providing the caching service.

    The cache is created once at application startup and stored on
    ``app.state``.

    Returns:
        CacheStrategy: The process-wide cache instance
    """
    return request.app.state.cache


async def get_property_provider(request: Request) -> PropertyProvider:
    """
    Dependency for providing the property data provider client.

    Returns:
        PropertyProvider: The provider client created at startup
    """
    return request.app.state.property_provider


async def get_property_service(
    request: Request,
    provider: PropertyProvider = Depends(get_property_provider),
    cache: CacheStrategy = Depends(get_cache_service),
) -> PropertyService:
    """Dependency for the property lookup service."""
    settings = request.app.state.settings
    return PropertyService(provider=provider, cache=cache, cache_ttl=settings.CACHE_TTL)


async def validate_address(
    request: Request,
    address: Optional[str] = Query(
        None,
        description="Full address: street line, then city and state after the first comma"
    ),
) -> str:
    """
    Extract and validate the ``address`` query parameter.

    The value is returned untouched; splitting into street and locale lines
    happens in the provider client.

    Raises:
        ValidationError: If the address is missing, empty or repeated
    """
    values = request.query_params.getlist("address")

    if not values or not values[0]:
        logger.warning("Request without address parameter")
        raise ValidationError(
            detail="address is required",
            code="MISSING_ADDRESS",
            details="Please provide a valid address as a query parameter",
            field="address"
        )

    if len(values) > 1:
        logger.warning(f"Address parameter supplied {len(values)} times")
        raise ValidationError(
            detail="Invalid parameter format",
            code="INVALID_PARAMETER_FORMAT",
            details="Address must be string",
            field="address"
        )

    return address
