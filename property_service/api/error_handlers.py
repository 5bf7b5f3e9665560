from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from property_service.core.exceptions import (
    APIException,
    ExternalServiceError,
    NotFoundError,
    UnclassifiedError,
    ValidationError,
)
from property_service.core.logging import get_logger

# Initialize logger
logger = get_logger(__name__)


def _expose_internals(request: Request) -> bool:
    return not request.app.state.settings.is_production


async def handle_api_exception(request: Request, exc: APIException) -> JSONResponse:
    """
    Handle APIException instances not matched by a more specific handler.

    Args:
        request: FastAPI request object
        exc: APIException instance

    Returns:
        JSONResponse: Formatted error response
    """
    logger.error(
        f"API Exception: {exc.detail}",
        extra={"status_code": exc.status_code, "error_code": exc.code}
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(include_context=_expose_internals(request))
    )


async def handle_validation_exception(request: Request, exc: ValidationError) -> JSONResponse:
    """
    Handle validation errors.

    Args:
        request: FastAPI request object
        exc: ValidationError instance

    Returns:
        JSONResponse: Formatted validation error response
    """
    logger.warning(
        f"Validation error: {exc.detail}",
        extra={"error_code": exc.code, "field": exc.context.get("field")}
    )

    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def handle_request_validation_exception(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle framework-level request validation errors as a 400."""
    errors = "; ".join(f"{'.'.join(str(p) for p in error['loc'])}: {error['msg']}" for error in exc.errors())
    return await handle_validation_exception(
        request,
        ValidationError(detail="Request validation error", details=errors)
    )


async def handle_not_found_exception(request: Request, exc: NotFoundError) -> JSONResponse:
    """
    Handle property not found errors.

    Args:
        request: FastAPI request object
        exc: NotFoundError instance

    Returns:
        JSONResponse: Formatted not found error response
    """
    logger.info(f"Resource not found: {exc.detail}", extra={"error_code": exc.code})

    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def handle_external_service_exception(request: Request, exc: ExternalServiceError) -> JSONResponse:
    """
    Handle property data provider failures.

    The upstream message is always logged but only returned to the caller
    outside production.

    Args:
        request: FastAPI request object
        exc: ExternalServiceError instance

    Returns:
        JSONResponse: Formatted integration error response
    """
    logger.error(
        f"External service error: {exc.detail}",
        extra={"error_code": exc.code, "upstream_error": exc.upstream_message}
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(include_context=_expose_internals(request))
    )


async def handle_unclassified_exception(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.error(f"Unhandled exception: {str(exc)}", exc_info=exc)

    error = UnclassifiedError(
        details=str(exc) if _expose_internals(request) else None,
        original_exception=exc
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error.to_dict()
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Configure global exception handlers for the FastAPI application.

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(ValidationError, handle_validation_exception)
    app.add_exception_handler(NotFoundError, handle_not_found_exception)
    app.add_exception_handler(ExternalServiceError, handle_external_service_exception)
    app.add_exception_handler(APIException, handle_api_exception)
    app.add_exception_handler(RequestValidationError, handle_request_validation_exception)
    app.add_exception_handler(Exception, handle_unclassified_exception)
