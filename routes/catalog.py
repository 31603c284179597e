"""IGDB catalog API routes (browse, search and metadata autofill)."""

from __future__ import annotations

from typing import Any, Mapping

from flask import Blueprint, current_app, jsonify, request

from igdb.safe_search import filter_safe_games
from metadata.errors import CandidateNotFoundError, UpstreamUnavailableError
from routes.api_utils import (
    BadRequestError,
    NotFoundError,
    UpstreamServiceError,
    handle_api_errors,
)

catalog_blueprint = Blueprint("catalog", __name__)

_context: dict[str, Any] = {}

_FALSE_VALUES = {"0", "false", "no", "off"}


def configure(context: Mapping[str, Any]) -> None:
    """Provide the IGDB client and metadata service used by the catalog endpoints."""
    _context.update(context)


def _ctx(key: str) -> Any:
    if key not in _context:
        raise RuntimeError(f"catalog routes missing context value: {key}")
    return _context[key]


def _int_arg(name: str, default: int) -> int:
    try:
        return int(request.args.get(name, default))
    except (TypeError, ValueError):
        return default


def _credentials() -> tuple[str, str]:
    try:
        return _ctx("exchange_credentials")()
    except RuntimeError as exc:
        raise UpstreamServiceError("Failed to retrieve access token") from exc


@catalog_blueprint.route("/games")
@handle_api_errors
def popular_games():
    access_token, client_id = _credentials()
    client = _ctx("igdb_client")
    try:
        games = client.fetch_popular_games(
            access_token, client_id, limit=_ctx("popular_games_limit")
        )
    except RuntimeError as exc:
        raise UpstreamServiceError("Failed to fetch popular games") from exc
    return jsonify(games)


@catalog_blueprint.route("/search")
@handle_api_errors
def search_games():
    query = (request.args.get("q") or "").strip()
    limit = _int_arg("limit", 10)
    if limit <= 0:
        limit = 10
    offset = max(0, _int_arg("offset", 0))
    safe = str(request.args.get("safe", "1")).strip().lower() not in _FALSE_VALUES
    current_app.logger.info(
        "Search received - query: %r, limit: %s, offset: %s", query, limit, offset
    )
    if not query:
        raise BadRequestError("Missing search query")

    access_token, client_id = _credentials()
    client = _ctx("igdb_client")
    try:
        games = client.search_games(
            access_token, client_id, query, limit=limit, offset=offset
        )
    except RuntimeError as exc:
        raise UpstreamServiceError("Failed to search game entries") from exc
    return jsonify(filter_safe_games(games, enabled=safe))


@catalog_blueprint.route("/gameDetails/<game_id>")
@handle_api_errors
def game_details(game_id: str):
    service = _ctx("metadata_service")
    try:
        metadata = service.resolve(
            game_id,
            platform=request.args.get("platform"),
            region=request.args.get("region"),
        )
    except CandidateNotFoundError as exc:
        raise NotFoundError("Game not found") from exc
    except UpstreamUnavailableError as exc:
        raise UpstreamServiceError("Failed to fetch game details") from exc
    return jsonify(metadata.to_dict())


__all__ = ["catalog_blueprint", "configure"]
