"""District normalization.

Resolves a canonical district label from the inconsistent location fields
shops carry. Strategies run in order and the first usable value wins:

1. explicit ``district`` field
2. ``city`` field
3. last comma-delimited segment of the full address

Each candidate is trimmed and upper-cased. The first non-empty candidate wins;
if it is shorter than the configured minimum length the record has no
district (later strategies are not consulted). Records without a district are
left out of the district breakdown but still count toward overall totals.
"""
from __future__ import annotations

from typing import Callable, Optional, Protocol, Sequence

from app.config import DISTRICT_SETTINGS


class HasLocation(Protocol):
    district_raw: Optional[str]
    city_raw: Optional[str]
    address_raw: Optional[str]


DistrictStrategy = Callable[[HasLocation], Optional[str]]


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip().upper()
    return text or None


def from_district_field(record: HasLocation) -> Optional[str]:
    return _clean(record.district_raw)


def from_city_field(record: HasLocation) -> Optional[str]:
    return _clean(record.city_raw)


def from_address_tail(record: HasLocation) -> Optional[str]:
    address = record.address_raw or ""
    if not address.strip():
        return None
    return _clean(address.split(",")[-1])


DEFAULT_STRATEGIES: tuple[DistrictStrategy, ...] = (
    from_district_field,
    from_city_field,
    from_address_tail,
)


def normalize_district(
    record: HasLocation,
    strategies: Sequence[DistrictStrategy] = DEFAULT_STRATEGIES,
) -> Optional[str]:
    for strategy in strategies:
        resolved = strategy(record)
        if resolved:
            if len(resolved) < int(DISTRICT_SETTINGS["min_name_length"]):
                return None
            return resolved
    return None


def matches_district_filter(record: HasLocation, district_filter: str) -> bool:
    """Loose match used to scope totals to one district.

    Canonical district equal to the filter, city equal to it, or the raw
    address containing it (all case-insensitive).
    """
    wanted = district_filter.strip().upper()
    if not wanted:
        return True
    if normalize_district(record) == wanted:
        return True
    if record.city_raw and record.city_raw.strip().upper() == wanted:
        return True
    if record.address_raw and wanted in record.address_raw.upper():
        return True
    return False


__all__ = [
    "DistrictStrategy",
    "from_district_field",
    "from_city_field",
    "from_address_tail",
    "DEFAULT_STRATEGIES",
    "normalize_district",
    "matches_district_filter",
]
