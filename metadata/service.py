"""Game metadata lookup: fetch one IGDB record, resolve it, join the relations."""

from __future__ import annotations

import logging
import re
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from typing import Any, Callable

from igdb.client import IGDBClient
from metadata.errors import (
    CandidateNotFoundError,
    InvalidCatalogIdError,
    UpstreamUnavailableError,
)
from metadata.models import Candidate, ResolvedMetadata
from metadata.regions import REGION_LABELS, REGION_PREFERENCE_ORDER
from metadata.relations import RelationAggregator
from metadata.releases import resolve_release

logger = logging.getLogger(__name__)

CATALOG_ID_PATTERN = re.compile(r"[0-9]+")


def parse_catalog_id(value: Any) -> int:
    """Return ``value`` as an IGDB id, rejecting anything but plain digits."""

    text = value if isinstance(value, str) else ""
    if not CATALOG_ID_PATTERN.fullmatch(text):
        raise InvalidCatalogIdError(f"invalid catalog id: {value!r}")
    return int(text)


class MetadataService:
    """Build :class:`ResolvedMetadata` records from IGDB."""

    def __init__(
        self,
        client: IGDBClient,
        *,
        credentials: Callable[[], tuple[str, str]] | None = None,
        max_workers: int = 3,
    ) -> None:
        self._client = client
        self._credentials = credentials or client.exchange_twitch_credentials
        self._max_workers = max(1, int(max_workers))

    def fetch_candidate(self, game_id: int) -> tuple[Candidate, str, str]:
        """Return the candidate with the access token and client id used."""

        try:
            access_token, client_id = self._credentials()
        except RuntimeError as exc:
            raise UpstreamUnavailableError(
                f"failed to retrieve IGDB access token: {exc}"
            ) from exc
        try:
            payload = self._client.fetch_game_candidate(access_token, client_id, game_id)
        except RuntimeError as exc:
            raise UpstreamUnavailableError(
                f"failed to fetch game {game_id}: {exc}"
            ) from exc
        if payload is None:
            raise CandidateNotFoundError(f"game {game_id} not found")
        return Candidate.from_payload(payload, game_id), access_token, client_id

    def resolve(
        self,
        game_id: Any,
        platform: Any = None,
        region: Any = None,
    ) -> ResolvedMetadata:
        try:
            numeric_id = parse_catalog_id(game_id)
        except InvalidCatalogIdError:
            logger.debug("Ignoring malformed catalog id %r", game_id)
            return ResolvedMetadata.empty()

        candidate, access_token, client_id = self.fetch_candidate(numeric_id)
        aggregator = RelationAggregator(
            fetch_companies=partial(
                self._client.fetch_involved_companies, access_token, client_id
            ),
            fetch_franchises=partial(
                self._client.fetch_franchises, access_token, client_id
            ),
            fetch_collections=partial(
                self._client.fetch_collections, access_token, client_id
            ),
        )

        with ThreadPoolExecutor(max_workers=self._max_workers) as executor:
            companies_future = executor.submit(aggregator.companies, candidate)
            franchises_future = executor.submit(aggregator.franchises, candidate)
            series_future = executor.submit(aggregator.series, candidate)
            selection = resolve_release(
                candidate,
                platform,
                region,
                region_labels=REGION_LABELS,
                preference_order=REGION_PREFERENCE_ORDER,
            )
            developers, publishers = companies_future.result()
            franchises = franchises_future.result()
            series = series_future.result()

        return ResolvedMetadata(
            title=candidate.name,
            platform=selection.platform,
            region=selection.region,
            release_date=selection.release_date,
            publishers=publishers,
            developers=developers,
            franchises=franchises,
            series=series,
        )


__all__ = ["CATALOG_ID_PATTERN", "MetadataService", "parse_catalog_id"]
