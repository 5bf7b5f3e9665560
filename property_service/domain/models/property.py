from typing import Optional, Union

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

Number = Union[int, float]


class NormalizedProperty(BaseModel):
    """
    Stable output contract for a property lookup.

    Serialized with camelCase keys. Nullable fields are left out of the
    response body when the provider did not supply them.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    owner: str = "Unknown"
    address: str = "Unknown"
    sqft: Optional[Number] = None
    bedrooms: Optional[Number] = None
    bathrooms: Optional[Number] = None
    lot_size: str = "0.00 acres"
    year_built: Optional[int] = None
    property_type: str = "Unknown"
    owner_occupied: Optional[bool] = None
    # Static assertions: no independent ownership verification is performed
    verified: bool = True
    ownership_verified: bool = True

    def to_response(self) -> dict:
        """Serialize for the HTTP response body."""
        return self.model_dump(by_alias=True, exclude_none=True)
