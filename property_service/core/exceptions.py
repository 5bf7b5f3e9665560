from fastapi import status
from typing import Any, Dict, Optional


class APIException(Exception):
    """
    Base exception for API errors.

    All classified errors inherit from this class. Raise them as close to
    the failure as possible; the boundary only formats them.
    """

    def __init__(
        self,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail: str = "An unexpected error occurred",
        code: str = "INTERNAL_ERROR",
        details: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        self.status_code = status_code
        self.detail = detail
        self.code = code
        self.details = details
        self.context = context or {}
        super().__init__(self.detail)

    def to_dict(self, include_context: bool = False) -> Dict[str, Any]:
        """Convert exception to a dictionary for consistent response format."""
        error: Dict[str, Any] = {
            "code": self.code,
            "message": self.detail,
            "status_code": self.status_code,
            "details": self.details,
        }
        if include_context and self.context:
            error.update(self.context)
        return {"error": error}


class ValidationError(APIException):
    """Exception raised when caller input is missing or malformed."""

    def __init__(
        self,
        detail: str = "Validation error",
        code: str = "VALIDATION_ERROR",
        details: Optional[str] = None,
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        merged_context = {"field": field} if field else {}
        if context:
            merged_context.update(context)

        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            code=code,
            details=details,
            context=merged_context
        )


class NotFoundError(APIException):
    """Exception raised when the provider has no record for an address."""

    def __init__(
        self,
        detail: str = "Property not found",
        code: str = "PROPERTY_NOT_FOUND",
        details: str = "The requested property could not be found in our database",
        context: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            code=code,
            details=details,
            context=context
        )


class ExternalServiceError(APIException):
    """Exception raised when a call to the property data provider fails."""

    def __init__(
        self,
        detail: str = "External service error",
        code: str = "EXTERNAL_SERVICE_ERROR",
        details: str = "There was an issue connecting to the property data provider",
        upstream_message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None
    ):
        super().__init__(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=detail,
            code=code,
            details=details,
            context=context
        )
        self.upstream_message = upstream_message
        self.original_exception = original_exception

        if upstream_message:
            self.context["upstream_error"] = upstream_message


class UnclassifiedError(APIException):
    """Catch-all for failures that were never classified."""

    def __init__(
        self,
        detail: str = "Internal server error",
        code: str = "INTERNAL_ERROR",
        details: Optional[str] = None,
        original_exception: Optional[Exception] = None
    ):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
            code=code,
            details=details
        )
        self.original_exception = original_exception


class CacheError(APIException):
    """Exception raised when the cache store is used incorrectly."""

    def __init__(self, detail: str = "Cache error", code: str = "CACHE_ERROR"):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
            code=code
        )
