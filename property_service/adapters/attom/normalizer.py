"""
Normalization of ATTOM ``detailowner`` records.

The provider payload has no trustworthy schema: blocks and fields go missing
or appear under alternate names. ``AttomPropertyRecord`` exposes one accessor
per output field, each listing the provider paths it tries in priority order,
and ``normalize_property`` maps those accessors onto ``NormalizedProperty``.
Nothing in this module raises on a malformed record.
"""
import math
from typing import Any, Mapping, Optional, Tuple

from property_service.domain.models.property import NormalizedProperty, Number

ABSENTEE_MARKER = "ABSENTEE"
UNKNOWN = "Unknown"


def _is_present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str) and not value.strip():
        return False
    return True


def _as_number(value: Any) -> Optional[Number]:
    """Coerce a provider value to int (when integral) or float, else None."""
    if isinstance(value, bool) or not _is_present(value):
        return None
    if isinstance(value, (int, float)):
        number = value
    elif isinstance(value, str):
        try:
            number = float(value.strip().replace(",", ""))
        except ValueError:
            return None
    else:
        return None

    if isinstance(number, float):
        if not math.isfinite(number):
            return None
        if number.is_integer():
            return int(number)
    return number


class AttomPropertyRecord:
    """Typed, non-raising view over a raw ``property[0]`` detail record."""

    def __init__(self, raw: Any):
        self._raw = raw if isinstance(raw, Mapping) else {}

    def _path(self, *keys: str) -> Any:
        node: Any = self._raw
        for key in keys:
            if not isinstance(node, Mapping):
                return None
            node = node.get(key)
        return node

    def _first(self, *paths: Tuple[str, ...]) -> Any:
        for path in paths:
            value = self._path(*path)
            if _is_present(value):
                return value
        return None

    def _first_number(self, *paths: Tuple[str, ...]) -> Optional[Number]:
        for path in paths:
            number = _as_number(self._path(*path))
            if number is not None:
                return number
        return None

    @property
    def owner_full_name(self) -> Optional[str]:
        """owner.owner1.fullname"""
        value = self._first(("owner", "owner1", "fullname"))
        return str(value).strip() if value is not None else None

    @property
    def one_line_address(self) -> Optional[str]:
        """address.oneLine, else address.line1 + ", " + address.line2"""
        value = self._first(("address", "oneLine"))
        if value is not None:
            return str(value).strip()

        line1 = self._first(("address", "line1"))
        if line1 is None:
            return None
        line2 = self._first(("address", "line2"))
        parts = [str(line1).strip()] + ([str(line2).strip()] if line2 is not None else [])
        return ", ".join(parts)

    @property
    def square_feet(self) -> Optional[Number]:
        """building.size: universal size, else gross size, else living size"""
        return self._first_number(
            ("building", "size", "universalsize"),
            ("building", "size", "universalSize"),
            ("building", "size", "grosssize"),
            ("building", "size", "livingsize"),
        )

    @property
    def bedrooms(self) -> Optional[Number]:
        """building.rooms.beds"""
        return self._first_number(("building", "rooms", "beds"))

    @property
    def bathrooms(self) -> Optional[Number]:
        """building.rooms.bathstotal, else building.rooms.bathsfull"""
        return self._first_number(
            ("building", "rooms", "bathstotal"),
            ("building", "rooms", "bathsfull"),
        )

    @property
    def lot_size_acres(self) -> Number:
        """lot.lotsize1, 0 when absent"""
        return self._first_number(("lot", "lotsize1")) or 0

    @property
    def year_built(self) -> Optional[int]:
        """summary.yearbuilt"""
        year = self._first_number(("summary", "yearbuilt"))
        return int(year) if year is not None else None

    @property
    def property_type(self) -> Optional[str]:
        """summary.propclass, else summary.propertyType"""
        value = self._first(("summary", "propclass"), ("summary", "propertyType"))
        return str(value).strip() if value is not None else None

    @property
    def absentee_indicator(self) -> Optional[str]:
        """summary.absenteeInd"""
        value = self._first(("summary", "absenteeInd"))
        return value if isinstance(value, str) else None


def owner_occupied_from(absentee_indicator: Optional[str]) -> Optional[bool]:
    """Tri-state: None when the indicator is missing."""
    if absentee_indicator is None:
        return None
    return ABSENTEE_MARKER not in absentee_indicator


def format_lot_size(acres: Number) -> str:
    return f"{acres:.2f} acres"


def normalize_property(raw: Any) -> NormalizedProperty:
    """
    Map a raw ATTOM detail record to a NormalizedProperty.

    Args:
        raw: The ``property[0]`` object from the ``detailowner`` response

    Returns:
        NormalizedProperty: The normalized record; identical input always
        yields an identical result
    """
    record = AttomPropertyRecord(raw)

    return NormalizedProperty(
        owner=record.owner_full_name or UNKNOWN,
        address=record.one_line_address or UNKNOWN,
        sqft=record.square_feet,
        bedrooms=record.bedrooms,
        bathrooms=record.bathrooms,
        lot_size=format_lot_size(record.lot_size_acres),
        year_built=record.year_built,
        property_type=record.property_type or UNKNOWN,
        owner_occupied=owner_occupied_from(record.absentee_indicator),
        verified=True,
        ownership_verified=True,
    )
