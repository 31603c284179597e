"""Saved collection API routes (entries, covers, view preferences, statistics)."""

from __future__ import annotations

from typing import Any, Mapping

from flask import Blueprint, jsonify, request, send_from_directory

from collection.covers import CoverUploadError
from collection.sort_config import load_sort_config, save_sort_config
from collection.statistics import GROUP_FALLBACKS, build_statistics
from collection.store import CollectionStoreError
from routes.api_utils import (
    APIError,
    BadRequestError,
    NotFoundError,
    handle_api_errors,
)

collection_blueprint = Blueprint("collection", __name__)

_context: dict[str, Any] = {}


def configure(context: Mapping[str, Any]) -> None:
    """Provide the stores backing the collection endpoints."""
    _context.update(context)


def _ctx(key: str) -> Any:
    if key not in _context:
        raise RuntimeError(f"collection routes missing context value: {key}")
    return _context[key]


def _json_entry() -> dict[str, Any]:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise BadRequestError("expected a JSON object")
    if data.get("id") in (None, ""):
        raise BadRequestError("missing id")
    return data


@collection_blueprint.route("/savedGames", methods=["GET"])
@handle_api_errors
def list_saved_games():
    try:
        games = _ctx("collection_store").list_games()
    except CollectionStoreError as exc:
        raise APIError("Failed to read game entry") from exc
    return jsonify(games)


@collection_blueprint.route("/savedGames", methods=["POST"])
@handle_api_errors
def create_saved_game():
    entry = _json_entry()
    try:
        stored = _ctx("collection_store").add_game(entry)
    except CollectionStoreError as exc:
        raise APIError("Failed to save game entry") from exc
    _ctx("cover_store").ensure_cover(stored)
    return jsonify({"message": "Game entry saved successfully", "id": stored["id"]})


@collection_blueprint.route("/savedGames", methods=["PUT"])
@handle_api_errors
def update_saved_game():
    entry = _json_entry()
    store = _ctx("collection_store")
    if store.get_game(entry["id"]) is None:
        raise NotFoundError("Game not found")
    _ctx("cover_store").ensure_cover(entry)
    try:
        updated = store.update_game(entry)
    except CollectionStoreError as exc:
        raise APIError("Failed to save updated game entry") from exc
    if updated is None:
        raise NotFoundError("Game not found")
    return jsonify(updated)


@collection_blueprint.route("/savedGames/<game_id>", methods=["DELETE"])
@handle_api_errors
def delete_saved_game(game_id: str):
    try:
        removed = _ctx("collection_store").delete_game(game_id)
    except CollectionStoreError as exc:
        raise APIError("Failed to delete game entry") from exc
    if removed is not None:
        _ctx("cover_store").delete(removed.get("id"))
    return jsonify({"message": "Game entry deleted successfully"})


@collection_blueprint.route("/uploadCover", methods=["POST"])
@handle_api_errors
def upload_cover():
    file = request.files.get("cover")
    game_id = (request.form.get("id") or "").strip()
    if not file or not game_id:
        raise BadRequestError("Missing file or id")
    cover_store = _ctx("cover_store")
    try:
        filename = cover_store.save_upload(file.stream, file.filename or "", game_id)
    except CoverUploadError as exc:
        raise BadRequestError(str(exc)) from exc
    return jsonify(
        {"message": "Cover uploaded", "coverUrl": cover_store.url_for(game_id), "filename": filename}
    )


@collection_blueprint.route("/covers/<path:filename>")
def cover_file(filename: str):
    return send_from_directory(_ctx("cover_store").directory, filename)


@collection_blueprint.route("/sortConfig", methods=["GET"])
@handle_api_errors
def get_sort_config():
    return jsonify(load_sort_config(_ctx("sort_config_path")))


@collection_blueprint.route("/sortConfig", methods=["POST"])
@handle_api_errors
def post_sort_config():
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        raise BadRequestError("expected a JSON object")
    try:
        save_sort_config(
            _ctx("sort_config_path"), data.get("sortOption"), data.get("groupBy")
        )
    except ValueError as exc:
        raise BadRequestError(str(exc)) from exc
    except OSError as exc:
        raise APIError("Failed to save config") from exc
    return jsonify({"message": "Config saved"})


@collection_blueprint.route("/statistics")
@handle_api_errors
def statistics():
    group_by = (request.args.get("groupBy") or "platform").strip().lower()
    if group_by not in GROUP_FALLBACKS:
        raise BadRequestError(f"unknown grouping: {group_by}")
    try:
        games = _ctx("collection_store").list_games()
    except CollectionStoreError as exc:
        raise APIError("Failed to read game entry") from exc
    return jsonify(build_statistics(games, group_by))


__all__ = ["collection_blueprint", "configure"]
