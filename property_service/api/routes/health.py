from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from property_service.adapters.interfaces.cache import CacheStrategy
from property_service.api.dependencies import get_cache_service
from property_service.core.logging import get_logger

# Initialize router and logger
health_router = APIRouter()
logger = get_logger(__name__)


class HealthStatus(BaseModel):
    """Basic health status response model."""
    status: str


class DependencyStatus(BaseModel):
    """Status of a single dependency."""
    name: str
    status: str
    details: Optional[Dict[str, Any]] = None


class DetailedHealthStatus(HealthStatus):
    """Detailed health status with dependency information."""
    dependencies: List[DependencyStatus]


@health_router.get(
    "",
    response_model=HealthStatus,
    status_code=status.HTTP_200_OK,
    summary="Basic health check",
    description="Returns basic health status of the service."
)
async def get_health() -> HealthStatus:
    logger.debug("Health check requested")
    return HealthStatus(status="UP")


@health_router.get(
    "/detailed",
    response_model=DetailedHealthStatus,
    status_code=status.HTTP_200_OK,
    summary="Detailed health check",
    description="Returns health status including cache statistics."
)
async def get_detailed_health(
    cache_service: CacheStrategy = Depends(get_cache_service),
) -> DetailedHealthStatus:
    """
    Detailed health check endpoint with dependency status.

    The property data provider is not probed: every probe would spend a
    metered API call.
    """
    logger.debug("Detailed health check requested")

    dependencies = [
        DependencyStatus(
            name="cache_service",
            status="UP",
            details=await cache_service.get_stats()
        ),
    ]

    return DetailedHealthStatus(status="UP", dependencies=dependencies)
