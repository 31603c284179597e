"""Company, franchise and series names for a catalog game."""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Mapping, Sequence

from helpers import _dedupe_preserve_order, _normalize_lookup_name
from metadata.models import Candidate

logger = logging.getLogger(__name__)

FacetLookup = Callable[[Sequence[int]], Iterable[Mapping[str, Any]]]


def collect_id_set(primary: int | None, extra: Iterable[int]) -> list[int]:
    """Return ``{primary} | extra`` keyed by catalog id, in first-seen order."""

    ids: dict[int, None] = {}
    if primary is not None:
        ids[primary] = None
    for value in extra:
        ids.setdefault(value, None)
    return list(ids)


def franchise_ids(candidate: Candidate) -> list[int]:
    return collect_id_set(candidate.franchise, candidate.franchises)


def series_ids(candidate: Candidate) -> list[int]:
    return collect_id_set(candidate.collection, candidate.collections)


def _company_name(row: Mapping[str, Any]) -> str:
    company = row.get("company")
    if isinstance(company, Mapping):
        return _normalize_lookup_name(company.get("name"))
    return ""


def collect_company_roles(
    rows: Iterable[Mapping[str, Any]],
) -> tuple[list[str], list[str]]:
    """Split involved-company rows into developer and publisher names."""

    developers: list[str] = []
    publishers: list[str] = []
    for row in rows:
        if not isinstance(row, Mapping):
            continue
        name = _company_name(row)
        if not name:
            continue
        if row.get("developer"):
            developers.append(name)
        if row.get("publisher"):
            publishers.append(name)
    return _dedupe_preserve_order(developers), _dedupe_preserve_order(publishers)


def collect_names(rows: Iterable[Mapping[str, Any]]) -> list[str]:
    names: list[str] = []
    for row in rows:
        if not isinstance(row, Mapping):
            continue
        name = _normalize_lookup_name(row.get("name"))
        if name:
            names.append(name)
    return names


class RelationAggregator:
    """Resolve the secondary relations of a candidate, one batch query per facet.

    Every facet is independent: a failed lookup is logged and yields an empty
    list without affecting the other facets.
    """

    def __init__(
        self,
        *,
        fetch_companies: FacetLookup,
        fetch_franchises: FacetLookup,
        fetch_collections: FacetLookup,
    ) -> None:
        self._fetch_companies = fetch_companies
        self._fetch_franchises = fetch_franchises
        self._fetch_collections = fetch_collections

    def companies(self, candidate: Candidate) -> tuple[list[str], list[str]]:
        """Return ``(developers, publishers)``."""

        rows = self._lookup(
            "companies", self._fetch_companies, list(candidate.involved_companies)
        )
        return collect_company_roles(rows)

    def franchises(self, candidate: Candidate) -> list[str]:
        return collect_names(
            self._lookup("franchises", self._fetch_franchises, franchise_ids(candidate))
        )

    def series(self, candidate: Candidate) -> list[str]:
        return collect_names(
            self._lookup("series", self._fetch_collections, series_ids(candidate))
        )

    def _lookup(
        self, facet: str, fetch: FacetLookup, ids: list[int]
    ) -> list[Mapping[str, Any]]:
        if not ids:
            return []
        try:
            return list(fetch(ids) or [])
        except Exception as exc:
            logger.warning("Failed to fetch %s for ids %s: %s", facet, ids, exc)
            return []


__all__ = [
    "RelationAggregator",
    "collect_company_roles",
    "collect_id_set",
    "collect_names",
    "franchise_ids",
    "series_ids",
]
