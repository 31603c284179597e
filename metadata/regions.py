"""IGDB release regions and the fallback preference between them."""

from __future__ import annotations

from enum import IntEnum
from types import MappingProxyType
from typing import Any, Mapping

from helpers import coerce_catalog_id


class Region(IntEnum):
    EUROPE = 1
    NORTH_AMERICA = 2
    AUSTRALIA = 3
    NEW_ZEALAND = 4
    JAPAN = 5
    CHINA = 6
    ASIA = 7
    WORLDWIDE = 8
    KOREA = 9
    BRAZIL = 10
    OTHER = 11


REGION_LABELS: Mapping[int, str] = MappingProxyType(
    {
        Region.EUROPE: "Europe",
        Region.NORTH_AMERICA: "North America",
        Region.AUSTRALIA: "Australia",
        Region.NEW_ZEALAND: "New Zealand",
        Region.JAPAN: "Japan",
        Region.CHINA: "China",
        Region.ASIA: "Asia",
        Region.WORLDWIDE: "Worldwide",
        Region.KOREA: "Korea",
        Region.BRAZIL: "Brazil",
        Region.OTHER: "Other",
    }
)

# Most preferred first.
REGION_PREFERENCE_ORDER: tuple[Region, ...] = (
    Region.WORLDWIDE,
    Region.NORTH_AMERICA,
    Region.EUROPE,
    Region.JAPAN,
    Region.AUSTRALIA,
    Region.NEW_ZEALAND,
    Region.KOREA,
    Region.BRAZIL,
    Region.CHINA,
    Region.ASIA,
    Region.OTHER,
)

UNKNOWN_REGION_LABEL = "Unknown"


def region_label(code: Any, labels: Mapping[int, str] = REGION_LABELS) -> str:
    """Return the display label for a region code, ``"Unknown"`` if unmapped."""

    try:
        return labels.get(int(code), UNKNOWN_REGION_LABEL)
    except (TypeError, ValueError):
        return UNKNOWN_REGION_LABEL


def coerce_region_code(value: Any) -> int | None:
    text = coerce_catalog_id(value)
    try:
        return int(text)
    except ValueError:
        return None


def coerce_region_hint(value: Any) -> int:
    """Return the requested region code, defaulting to Worldwide."""

    code = coerce_region_code(value)
    return Region.WORLDWIDE.value if code is None else code


__all__ = [
    "REGION_LABELS",
    "REGION_PREFERENCE_ORDER",
    "Region",
    "UNKNOWN_REGION_LABEL",
    "coerce_region_code",
    "coerce_region_hint",
    "region_label",
]
