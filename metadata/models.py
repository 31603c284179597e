"""Data types shared by the release resolver and the relation aggregator."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from helpers import (
    _coerce_timestamp,
    _normalize_lookup_name,
    _parse_id_list,
    coerce_catalog_id,
)
from metadata.regions import coerce_region_code


def _optional_id(value: Any) -> int | None:
    if isinstance(value, Mapping):
        value = value.get("id")
    text = coerce_catalog_id(value)
    return int(text) if text.isdigit() else None


@dataclass(frozen=True)
class PlatformRef:
    id: str
    name: str

    @classmethod
    def from_payload(cls, item: Any) -> "PlatformRef | None":
        if isinstance(item, Mapping):
            platform_id = coerce_catalog_id(item.get("id"))
            name = _normalize_lookup_name(item.get("name"))
        else:
            platform_id = coerce_catalog_id(item)
            name = ""
        if not platform_id:
            return None
        return cls(id=platform_id, name=name)


@dataclass(frozen=True)
class ReleaseEntry:
    """One platform/region release row. ``date`` is ``None`` when unusable."""

    platform: str
    region: int | None
    date: int | None

    @property
    def has_date(self) -> bool:
        return self.date is not None

    @classmethod
    def from_payload(cls, item: Any) -> "ReleaseEntry | None":
        if not isinstance(item, Mapping):
            return None
        platform = item.get("platform")
        if isinstance(platform, Mapping):
            platform = platform.get("id")
        return cls(
            platform=coerce_catalog_id(platform),
            region=coerce_region_code(item.get("region")),
            date=_coerce_timestamp(item.get("date")),
        )


@dataclass(frozen=True)
class Candidate:
    """A single IGDB game record as fetched for metadata resolution."""

    id: int
    name: str = ""
    first_release_date: int | None = None
    platforms: tuple[PlatformRef, ...] = ()
    franchise: int | None = None
    franchises: tuple[int, ...] = ()
    collection: int | None = None
    collections: tuple[int, ...] = ()
    involved_companies: tuple[int, ...] = ()
    release_dates: tuple[ReleaseEntry, ...] = ()

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any], game_id: int) -> "Candidate":
        raw_platforms = payload.get("platforms")
        raw_releases = payload.get("release_dates")
        platforms = tuple(
            ref
            for ref in (
                PlatformRef.from_payload(item)
                for item in (raw_platforms if isinstance(raw_platforms, list) else [])
            )
            if ref is not None
        )
        releases = tuple(
            entry
            for entry in (
                ReleaseEntry.from_payload(item)
                for item in (raw_releases if isinstance(raw_releases, list) else [])
            )
            if entry is not None
        )
        raw_id = coerce_catalog_id(payload.get("id"))
        return cls(
            id=int(raw_id) if raw_id.isdigit() else int(game_id),
            name=_normalize_lookup_name(payload.get("name")),
            first_release_date=_coerce_timestamp(payload.get("first_release_date")),
            platforms=platforms,
            franchise=_optional_id(payload.get("franchise")),
            franchises=_parse_id_list(payload.get("franchises")),
            collection=_optional_id(payload.get("collection")),
            collections=_parse_id_list(payload.get("collections")),
            involved_companies=_parse_id_list(payload.get("involved_companies")),
            release_dates=releases,
        )

    def platform_name(self, platform_id: str) -> str:
        for ref in self.platforms:
            if ref.id == platform_id:
                return ref.name
        return ""


@dataclass
class ResolvedMetadata:
    """Autofill payload for a collection entry."""

    title: str = ""
    platform: str = ""
    region: str = ""
    release_date: str = ""
    publishers: list[str] = field(default_factory=list)
    developers: list[str] = field(default_factory=list)
    franchises: list[str] = field(default_factory=list)
    series: list[str] = field(default_factory=list)

    @classmethod
    def empty(cls) -> "ResolvedMetadata":
        return cls()

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "platform": self.platform,
            "region": self.region,
            "releaseDate": self.release_date,
            "publisher": list(self.publishers),
            "developer": list(self.developers),
            "franchise": list(self.franchises),
            "series": list(self.series),
        }


__all__ = ["Candidate", "PlatformRef", "ReleaseEntry", "ResolvedMetadata"]
