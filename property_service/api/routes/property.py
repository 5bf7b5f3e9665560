from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from property_service.api.dependencies import get_property_service, validate_address
from property_service.core.logging import get_logger
from property_service.domain.models.property import NormalizedProperty
from property_service.services.property_service import PropertyService

property_router = APIRouter()
logger = get_logger(__name__)


@property_router.get(
    "/details",
    response_model=NormalizedProperty,
    response_model_by_alias=True,
    response_model_exclude_none=True,
    summary="Get property details",
    description="Returns ownership and building details for a single address."
)
async def get_property_details(
    address: str = Depends(validate_address),
    property_service: PropertyService = Depends(get_property_service),
):
    """
    Gets property details and ownership information.

    Errors are left to the global exception handlers.
    """
    details = await property_service.get_property_details(address)
    return JSONResponse(content=details.to_response())
