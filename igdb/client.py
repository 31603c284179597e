"""IGDB client and external API integration helpers."""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Callable, Iterable, Mapping

from urllib.error import HTTPError
from urllib.parse import urlencode
from urllib.request import Request, urlopen

from helpers import coerce_catalog_id

logger = logging.getLogger(__name__)


__all__ = [
    "IGDBClient",
    "CANDIDATE_FIELDS",
    "escape_search_term",
    "resolve_igdb_page_size",
]


CANDIDATE_FIELDS = (
    "name",
    "franchise",
    "franchises",
    "collection",
    "collections",
    "platforms.name",
    "platforms.id",
    "first_release_date",
    "release_dates.*",
    "involved_companies",
)


def resolve_igdb_page_size(batch_size: Any, *, max_page_size: int = 500) -> int:
    """Return a sanitized IGDB page size respecting API constraints."""

    try:
        size = int(batch_size)
    except (TypeError, ValueError):
        return max_page_size
    if size <= 0:
        return max_page_size
    return min(size, max_page_size)


def escape_search_term(value: str) -> str:
    """Escape a user supplied term for use inside an Apicalypse string."""

    return str(value).replace("\\", "\\\\").replace('"', '\\"').strip()


def _format_id_list(ids: Iterable[Any]) -> list[int]:
    numeric_ids: list[int] = []
    seen: set[int] = set()
    for value in ids:
        normalized = coerce_catalog_id(value)
        if not normalized.isdigit():
            logger.warning("Skipping invalid IGDB id %s", value)
            continue
        numeric = int(normalized)
        if numeric in seen:
            continue
        seen.add(numeric)
        numeric_ids.append(numeric)
    return numeric_ids


class IGDBClient:
    """High level helper that manages IGDB authentication and queries."""

    BASE_URL = "https://api.igdb.com/v4"
    TOKEN_URL = "https://id.twitch.tv/oauth2/token"

    def __init__(
        self,
        *,
        client_id: str | None = None,
        client_secret: str | None = None,
        user_agent: str | None = None,
        max_page_size: int = 500,
        request_factory: Callable[..., Any] | None = None,
        opener: Callable[[Any], Any] | None = None,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self._client_id = (client_id or "").strip()
        self._client_secret = (client_secret or "").strip()
        self._user_agent = (user_agent or "").strip()
        self._max_page_size = max_page_size if max_page_size > 0 else 500
        self._request_factory = request_factory
        self._opener = opener
        self._env = os.environ if env is None else env

    @property
    def user_agent(self) -> str:
        if self._user_agent:
            return self._user_agent
        env_agent = self._env.get("IGDB_USER_AGENT")
        if env_agent:
            return env_agent.strip()
        return "Game-Backlog/1.0 (support@example.com)"

    def exchange_twitch_credentials(
        self,
        client_id: str | None = None,
        client_secret: str | None = None,
    ) -> tuple[str, str]:
        """Return a Twitch access token paired with the resolved client id."""

        resolved_client_id = (client_id or self._client_id or self._env.get("TWITCH_CLIENT_ID") or "").strip()
        resolved_client_secret = (
            client_secret
            or self._client_secret
            or self._env.get("TWITCH_CLIENT_SECRET")
            or ""
        ).strip()
        if not resolved_client_id or not resolved_client_secret:
            raise RuntimeError("missing twitch client credentials")

        payload = urlencode(
            {
                "client_id": resolved_client_id,
                "client_secret": resolved_client_secret,
                "grant_type": "client_credentials",
            }
        ).encode("utf-8")

        request = self._resolve_request_factory()(
            self.TOKEN_URL,
            data=payload,
            method="POST",
        )
        request.add_header("Content-Type", "application/x-www-form-urlencoded")

        data = self._request_json(
            request,
            error_prefix="failed to obtain twitch token",
            generic_error="failed to obtain twitch token",
        )

        token = data.get("access_token") if isinstance(data, Mapping) else None
        if not token:
            raise RuntimeError("missing access token in twitch response")
        return str(token), resolved_client_id

    def fetch_game_candidate(
        self,
        access_token: str,
        client_id: str,
        game_id: int,
    ) -> dict[str, Any] | None:
        """Return the raw IGDB record used for release resolution."""

        query = f"fields {', '.join(CANDIDATE_FIELDS)}; where id = {int(game_id)};"
        payload = self._post_query(
            "games",
            query,
            access_token,
            client_id,
            error_prefix="IGDB game request failed",
            generic_error="failed to query IGDB game",
        )
        for item in payload or []:
            if isinstance(item, Mapping):
                return dict(item)
        return None

    def fetch_involved_companies(
        self,
        access_token: str,
        client_id: str,
        involved_company_ids: Iterable[Any],
    ) -> list[dict[str, Any]]:
        """Return involved-company rows with company name and role flags."""

        return self._fetch_by_ids(
            "involved_companies",
            "company.name, developer, publisher",
            involved_company_ids,
            access_token,
            client_id,
        )

    def fetch_franchises(
        self,
        access_token: str,
        client_id: str,
        franchise_ids: Iterable[Any],
    ) -> list[dict[str, Any]]:
        return self._fetch_by_ids(
            "franchises", "name", franchise_ids, access_token, client_id
        )

    def fetch_collections(
        self,
        access_token: str,
        client_id: str,
        collection_ids: Iterable[Any],
    ) -> list[dict[str, Any]]:
        return self._fetch_by_ids(
            "collections", "name", collection_ids, access_token, client_id
        )

    def fetch_popular_games(
        self,
        access_token: str,
        client_id: str,
        *,
        limit: int = 30,
    ) -> list[dict[str, Any]]:
        """Return the most highly rated games."""

        sanitized_limit = resolve_igdb_page_size(limit, max_page_size=self._max_page_size)
        query = (
            "fields name, cover.url, total_rating; "
            "sort total_rating desc; "
            f"limit {sanitized_limit};"
        )
        payload = self._post_query(
            "games",
            query,
            access_token,
            client_id,
            error_prefix="IGDB request failed",
            generic_error="failed to query popular IGDB games",
        )
        return [dict(item) for item in payload or [] if isinstance(item, Mapping)]

    def search_games(
        self,
        access_token: str,
        client_id: str,
        term: str,
        *,
        limit: int = 10,
        offset: int = 0,
    ) -> list[dict[str, Any]]:
        """Return games whose title matches ``term``."""

        sanitized_limit = resolve_igdb_page_size(limit, max_page_size=self._max_page_size)
        query = (
            f'search "{escape_search_term(term)}"; '
            "fields name, cover.url, age_ratings; "
            f"limit {sanitized_limit}; "
            f"offset {max(0, int(offset))};"
        )
        payload = self._post_query(
            "games",
            query,
            access_token,
            client_id,
            error_prefix="IGDB search failed",
            generic_error="failed to search IGDB games",
        )
        return [dict(item) for item in payload or [] if isinstance(item, Mapping)]

    def _fetch_by_ids(
        self,
        endpoint: str,
        fields: str,
        ids: Iterable[Any],
        access_token: str,
        client_id: str,
    ) -> list[dict[str, Any]]:
        numeric_ids = _format_id_list(ids)
        if not numeric_ids:
            return []
        # IGDB pages at 10 rows unless a limit is given.
        query = (
            f"fields {fields}; "
            f"where id = ({','.join(str(v) for v in numeric_ids)}); "
            f"limit {len(numeric_ids)};"
        )
        payload = self._post_query(
            endpoint,
            query,
            access_token,
            client_id,
            error_prefix=f"IGDB {endpoint} request failed",
            generic_error=f"failed to query IGDB {endpoint}",
        )
        return [dict(item) for item in payload or [] if isinstance(item, Mapping)]

    def _post_query(
        self,
        endpoint: str,
        query: str,
        access_token: str,
        client_id: str,
        *,
        error_prefix: str,
        generic_error: str,
    ) -> Any:
        request = self._resolve_request_factory()(
            f"{self.BASE_URL}/{endpoint}",
            data=query.encode("utf-8"),
            method="POST",
        )
        self._apply_headers(request, client_id, access_token)
        logger.debug("IGDB %s query: %s", endpoint, query)
        return self._request_json(
            request,
            error_prefix=error_prefix,
            generic_error=generic_error,
        )

    def _apply_headers(
        self,
        request: Any,
        client_id: str,
        access_token: str,
    ) -> None:
        request.add_header("Client-ID", client_id)
        request.add_header("Authorization", f"Bearer {access_token}")
        request.add_header("Accept", "application/json")
        request.add_header("Content-Type", "text/plain")
        request.add_header("User-Agent", self.user_agent)

    def _resolve_request_factory(self) -> Callable[..., Any]:
        return self._request_factory or Request

    def _resolve_opener(self) -> Callable[[Any], Any]:
        return self._opener or urlopen

    def _request_json(
        self,
        request: Any,
        *,
        error_prefix: str,
        generic_error: str,
    ) -> Any:
        opener = self._resolve_opener()
        try:
            with opener(request) as response:
                body = response.read()
        except HTTPError as exc:
            raise RuntimeError(_format_http_error(error_prefix, exc)) from exc
        except Exception as exc:  # pragma: no cover - network failures surfaced
            raise RuntimeError(f"{generic_error}: {exc}") from exc
        text = body.decode("utf-8", errors="replace") if body else ""
        try:
            return json.loads(text) if text else []
        except ValueError as exc:
            raise RuntimeError("invalid JSON response from IGDB") from exc


def _format_http_error(prefix: str, error: HTTPError) -> str:
    message = f"{prefix}: {error.code}"
    error_message = ""
    try:
        error_body = error.read()
    except Exception:  # pragma: no cover - best effort to capture error body
        error_body = b""
    if error_body:
        error_message = error_body.decode("utf-8", errors="replace").strip()
    if not error_message and error.reason:
        error_message = str(error.reason)
    if error_message:
        message = f"{message} {error_message}"
    return message
