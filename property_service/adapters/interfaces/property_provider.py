from abc import ABC, abstractmethod
from typing import Any, Dict


class PropertyProvider(ABC):
    """
    Abstract base interface for property data providers.

    A lookup is two dependent calls: the address resolves to a
    provider-internal identifier, which then fetches the detail record.
    Implementations classify their own failures into the application's
    error taxonomy before raising.
    """

    @abstractmethod
    async def resolve_identifier(self, address: str) -> str:
        """
        Resolves a combined "street, city state" address to a provider ID.

        Args:
            address: Free-text address with the street line before the first comma

        Returns:
            str: The opaque provider identifier

        Raises:
            ValidationError: If the address cannot be split into two parts
            NotFoundError: If the provider has no match
            ExternalServiceError: If the provider call fails for any other reason
        """
        pass

    @abstractmethod
    async def fetch_detail(self, identifier: str) -> Dict[str, Any]:
        """
        Fetches the raw detail record for a provider identifier.

        Raises:
            NotFoundError: If the provider has no record for the identifier
            ExternalServiceError: If the provider call fails for any other reason
        """
        pass

    async def close(self) -> None:
        """Release any network resources held by the provider."""
