"""Selection of the release entry that best matches a platform/region request.

IGDB reports one ``release_dates`` row per platform and region a game shipped
in, and many games carry dozens of them. :func:`select_release_entry` narrows
that set with a fixed precedence:

1. rows on the requested platform in the requested region;
2. rows on the requested platform in any region;
3. rows in the requested region on any platform;
4. the first region of :data:`REGION_PREFERENCE_ORDER` holding a row. Any row
   on the requested platform was already taken by tier 2, so this tier looks
   at regions only.

Only rows carrying a release timestamp take part, and within the winning tier
the earliest release wins.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Sequence

from helpers import _format_release_timestamp, coerce_catalog_id
from metadata.models import Candidate, ReleaseEntry
from metadata.regions import (
    REGION_LABELS,
    REGION_PREFERENCE_ORDER,
    coerce_region_hint,
    region_label,
)

logger = logging.getLogger(__name__)

TIER_PLATFORM_AND_REGION = 1
TIER_PLATFORM = 2
TIER_REGION = 3
TIER_REGION_PREFERENCE = 4

NO_SELECTION_REGION_LABEL = "Worldwide"


@dataclass(frozen=True)
class ReleaseSelection:
    entry: ReleaseEntry | None
    tier: int | None
    release_date: str
    platform: str
    region: str


def normalize_platform_hint(value: Any) -> str:
    return coerce_catalog_id(value)


def _earliest(entries: Sequence[ReleaseEntry]) -> ReleaseEntry | None:
    # min() keeps the first of equal timestamps.
    if not entries:
        return None
    return min(entries, key=lambda entry: entry.date)


def select_release_entry(
    entries: Iterable[ReleaseEntry],
    platform: str = "",
    region: int = 8,
    *,
    preference_order: Sequence[int] = REGION_PREFERENCE_ORDER,
) -> tuple[ReleaseEntry | None, int | None]:
    """Return the selected entry and the tier that produced it."""

    dated = [entry for entry in entries if entry.has_date]

    if platform:
        on_platform = [entry for entry in dated if entry.platform == platform]
        exact = [entry for entry in on_platform if entry.region == region]
        if exact:
            return _earliest(exact), TIER_PLATFORM_AND_REGION
        if on_platform:
            return _earliest(on_platform), TIER_PLATFORM

    in_region = [entry for entry in dated if entry.region == region]
    if in_region:
        return _earliest(in_region), TIER_REGION

    for code in preference_order:
        candidates = [entry for entry in dated if entry.region == code]
        if candidates:
            return _earliest(candidates), TIER_REGION_PREFERENCE

    return None, None


def resolve_release(
    candidate: Candidate,
    platform_hint: Any = None,
    region_hint: Any = None,
    *,
    region_labels: Mapping[int, str] = REGION_LABELS,
    preference_order: Sequence[int] = REGION_PREFERENCE_ORDER,
) -> ReleaseSelection:
    """Pick a release for ``candidate`` and derive its date and labels."""

    platform = normalize_platform_hint(platform_hint)
    region = coerce_region_hint(region_hint)
    entry, tier = select_release_entry(
        candidate.release_dates,
        platform,
        region,
        preference_order=preference_order,
    )

    if entry is None:
        logger.debug(
            "No release entry for game %s (platform=%r region=%s); using first release date",
            candidate.id,
            platform,
            region,
        )
        return ReleaseSelection(
            entry=None,
            tier=None,
            release_date=_format_release_timestamp(candidate.first_release_date),
            platform="",
            region=NO_SELECTION_REGION_LABEL,
        )

    logger.debug(
        "Game %s resolved to release %s at tier %s", candidate.id, entry, tier
    )
    platform_label = ""
    if entry.platform:
        platform_label = (
            candidate.platform_name(entry.platform) or f"Platform #{entry.platform}"
        )
    return ReleaseSelection(
        entry=entry,
        tier=tier,
        release_date=_format_release_timestamp(entry.date),
        platform=platform_label,
        region=region_label(entry.region, region_labels),
    )


__all__ = [
    "NO_SELECTION_REGION_LABEL",
    "ReleaseSelection",
    "TIER_PLATFORM",
    "TIER_PLATFORM_AND_REGION",
    "TIER_REGION",
    "TIER_REGION_PREFERENCE",
    "normalize_platform_hint",
    "resolve_release",
    "select_release_entry",
]
