"""Flask application factory and blueprint wiring."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Callable

from flask import Flask

from collection.covers import CoverStore
from collection.store import CollectionStore
from igdb.client import IGDBClient
from metadata.service import MetadataService
from routes import catalog as routes_catalog
from routes import collection as routes_collection


def _allow_cross_origin(response):
    response.headers.setdefault("Access-Control-Allow-Origin", "*")
    response.headers.setdefault("Access-Control-Allow-Headers", "Content-Type")
    response.headers.setdefault(
        "Access-Control-Allow-Methods", "GET, POST, PUT, DELETE, OPTIONS"
    )
    return response


def configure_blueprints(
    flask_app: Flask,
    *,
    igdb_client: IGDBClient | Any,
    exchange_credentials: Callable[[], tuple[str, str]],
    metadata_service: MetadataService | Any,
    collection_store: CollectionStore,
    cover_store: CoverStore,
    sort_config_path: str | Path,
    popular_games_limit: int = 30,
) -> None:
    routes_catalog.configure({
        'igdb_client': igdb_client,
        'exchange_credentials': exchange_credentials,
        'metadata_service': metadata_service,
        'popular_games_limit': popular_games_limit,
    })
    routes_collection.configure({
        'collection_store': collection_store,
        'cover_store': cover_store,
        'sort_config_path': sort_config_path,
    })

    if 'catalog' not in flask_app.blueprints:
        flask_app.register_blueprint(routes_catalog.catalog_blueprint)
    if 'collection' not in flask_app.blueprints:
        flask_app.register_blueprint(routes_collection.collection_blueprint)


def create_app(
    *,
    igdb_client: IGDBClient | Any,
    collection_store: CollectionStore,
    cover_store: CoverStore,
    sort_config_path: str | Path,
    metadata_service: MetadataService | Any | None = None,
    exchange_credentials: Callable[[], tuple[str, str]] | None = None,
    popular_games_limit: int = 30,
    metadata_workers: int = 3,
    flask_app: Flask | None = None,
) -> Flask:
    """Return a configured Flask application instance."""
    if flask_app is None:
        flask_app = Flask(__name__)
    credentials = exchange_credentials or igdb_client.exchange_twitch_credentials
    if metadata_service is None:
        metadata_service = MetadataService(
            igdb_client, credentials=credentials, max_workers=metadata_workers
        )

    collection_store.ensure_exists()
    collection_store.migrate_priorities()
    cover_store.ensure_exists()

    configure_blueprints(
        flask_app,
        igdb_client=igdb_client,
        exchange_credentials=credentials,
        metadata_service=metadata_service,
        collection_store=collection_store,
        cover_store=cover_store,
        sort_config_path=sort_config_path,
        popular_games_limit=popular_games_limit,
    )
    flask_app.after_request(_allow_cross_origin)
    return flask_app


__all__ = ["configure_blueprints", "create_app"]
