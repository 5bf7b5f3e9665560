import time
from typing import Any, Dict, Optional, Tuple

import httpx

from property_service.adapters.interfaces.property_provider import PropertyProvider
from property_service.core.exceptions import (
    ExternalServiceError,
    NotFoundError,
    ValidationError,
)
from property_service.core.logging import get_logger

logger = get_logger(__name__)

DEFAULT_BASE_URL = "https://api.gateway.attomdata.com/propertyapi/v1.0.0"
IDENTIFIER_ENDPOINT = "property/buildingpermits"
DETAIL_ENDPOINT = "property/detailowner"


def split_address(address: str) -> Tuple[str, str]:
    """
    Split a combined address on its first comma.

    "2901 Indiana Street, Dallas, TX" -> ("2901 Indiana Street", "Dallas, TX")

    Raises:
        ValidationError: If either the street line or the locale line is empty
    """
    street, _, locale = address.partition(",")
    street, locale = street.strip(), locale.strip()
    if not street or not locale:
        raise ValidationError(
            detail="Invalid address format",
            code="INVALID_ADDRESS_FORMAT",
            details="Address must contain a street line and a city/state line separated by a comma",
            field="address"
        )
    return street, locale


def _upstream_message(response: httpx.Response) -> str:
    """Best-effort extraction of the provider's error text."""
    try:
        body = response.json()
    except ValueError:
        return response.text[:500] or response.reason_phrase

    if isinstance(body, dict):
        status_block = body.get("status")
        if isinstance(status_block, dict) and status_block.get("msg"):
            return str(status_block["msg"])
        for key in ("message", "error", "msg"):
            if body.get(key):
                return str(body[key])
    return str(body)[:500]


class AttomClient(PropertyProvider):
    """
    Client for the ATTOM property API.

    Performs the two chained lookups (address -> attomId -> detail record)
    and classifies every failure where it happens: 404 responses and empty
    results become NotFoundError, everything else ExternalServiceError.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 10.0,
        http_client: Optional[httpx.AsyncClient] = None
    ):
        """
        Initialize the ATTOM client.

        Args:
            api_key: ATTOM API key sent in the ``apikey`` header
            base_url: Base URL of the property API
            timeout: Request timeout in seconds for an owned client
            http_client: Optional pre-built client; the caller keeps ownership of it
        """
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self._owns_client = http_client is None
        self.http_client = http_client or httpx.AsyncClient(timeout=timeout)

    def _headers(self) -> Dict[str, str]:
        return {"apikey": self.api_key, "Accept": "application/json"}

    async def _get(self, endpoint: str, params: Dict[str, Any], not_found_detail: str) -> Dict[str, Any]:
        """
        GET an ATTOM endpoint and return its decoded JSON object.

        Raises:
            NotFoundError: On a 404 response
            ExternalServiceError: On any other HTTP, transport or decoding failure
        """
        url = f"{self.base_url}/{endpoint}"
        start_time = time.time()

        try:
            response = await self.http_client.get(url, params=params, headers=self._headers())
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as e:
            upstream = _upstream_message(e.response)
            logger.error(
                f"ATTOM API error ({endpoint}): {upstream}",
                extra={"endpoint": endpoint, "status_code": e.response.status_code}
            )
            if e.response.status_code == 404:
                raise NotFoundError(detail=not_found_detail) from e
            raise ExternalServiceError(
                detail="ATTOM API request failed",
                upstream_message=f"HTTP {e.response.status_code}: {upstream}",
                original_exception=e
            ) from e
        except httpx.RequestError as e:
            logger.error(f"ATTOM API connection error ({endpoint}): {str(e)}", extra={"endpoint": endpoint})
            raise ExternalServiceError(
                detail="ATTOM API connection failed",
                upstream_message=str(e) or type(e).__name__,
                original_exception=e
            ) from e
        except ValueError as e:
            logger.error(f"ATTOM API returned invalid JSON ({endpoint}): {str(e)}", extra={"endpoint": endpoint})
            raise ExternalServiceError(
                detail="ATTOM API returned a malformed response",
                upstream_message=str(e),
                original_exception=e
            ) from e

        logger.debug(
            f"ATTOM API request completed in {time.time() - start_time:.2f}s",
            extra={"endpoint": endpoint, "status_code": response.status_code}
        )

        if not isinstance(payload, dict):
            logger.error(f"ATTOM API returned a non-object body ({endpoint})", extra={"endpoint": endpoint})
            raise ExternalServiceError(
                detail="ATTOM API returned a malformed response",
                upstream_message=f"Expected a JSON object, got {type(payload).__name__}"
            )
        return payload

    @staticmethod
    def _first_property(payload: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        properties = payload.get("property")
        if isinstance(properties, list) and properties and isinstance(properties[0], dict):
            return properties[0]
        return None

    async def resolve_identifier(self, address: str) -> str:
        address1, address2 = split_address(address)
        logger.info("Resolving ATTOM identifier", extra={"address1": address1, "address2": address2})

        payload = await self._get(
            IDENTIFIER_ENDPOINT,
            {"address1": address1, "address2": address2},
            not_found_detail="Property not found in ATTOM database"
        )

        record = self._first_property(payload) or {}
        identifier = record.get("identifier")
        attom_id = identifier.get("attomId") if isinstance(identifier, dict) else None

        if attom_id is None or attom_id == "":
            logger.warning("ATTOM returned no identifier for address", extra={"address1": address1})
            raise NotFoundError(detail="Property not found in ATTOM database")

        return str(attom_id)

    async def fetch_detail(self, identifier: str) -> Dict[str, Any]:
        logger.info("Fetching ATTOM detail record", extra={"attom_id": identifier})

        payload = await self._get(
            DETAIL_ENDPOINT,
            {"attomid": identifier},
            not_found_detail="Property details not found in ATTOM database"
        )

        record = self._first_property(payload)
        if record is None:
            logger.warning("ATTOM returned no detail record", extra={"attom_id": identifier})
            raise NotFoundError(detail="Property details not found in ATTOM database")

        return record

    async def close(self) -> None:
        if self._owns_client:
            await self.http_client.aclose()
