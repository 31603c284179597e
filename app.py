import os
import logging
import logging.config
from pathlib import Path

from flask import Flask

import config as app_config
from config import (
    COVERS_DIR,
    GAME_DATA_FILE,
    IGDB_CLIENT_ID,
    IGDB_CLIENT_SECRET,
    IGDB_USER_AGENT,
    LOCAL_COVER_URL_PREFIX,
    LOG_FILE,
    METADATA_WORKERS,
    POPULAR_GAMES_LIMIT,
    SORT_CONFIG_FILE,
)
from collection.covers import CoverStore
from collection.store import CollectionStore
from igdb.client import IGDBClient
from metadata.service import MetadataService
from web.app_factory import create_app

logger = logging.getLogger(__name__)

igdb_api_client = IGDBClient(
    client_id=IGDB_CLIENT_ID,
    client_secret=IGDB_CLIENT_SECRET,
    user_agent=IGDB_USER_AGENT,
)


def exchange_twitch_credentials() -> tuple[str, str]:
    return igdb_api_client.exchange_twitch_credentials()


def _determine_log_level(flask_app: Flask) -> int:
    if flask_app.debug:
        return logging.DEBUG
    env_value = str(flask_app.config.get('ENV', '')).lower()
    if env_value == 'development':
        return logging.DEBUG
    if os.environ.get('FLASK_DEBUG', '').lower() in {'1', 'true', 'yes', 'on'}:
        return logging.DEBUG
    return logging.INFO


def _configure_logging(flask_app: Flask) -> None:
    log_level = _determine_log_level(flask_app)
    log_path = Path(LOG_FILE)
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError:
        pass

    for handler in list(flask_app.logger.handlers):
        flask_app.logger.removeHandler(handler)

    logging.config.dictConfig(
        {
            'version': 1,
            'disable_existing_loggers': False,
            'formatters': {
                'standard': {
                    'format': '%(asctime)s %(levelname)s [%(name)s] %(message)s',
                    'datefmt': '%Y-%m-%d %H:%M:%S',
                }
            },
            'handlers': {
                'console': {
                    'class': 'logging.StreamHandler',
                    'formatter': 'standard',
                    'level': log_level,
                    'stream': 'ext://sys.stdout',
                },
                'file': {
                    'class': 'logging.handlers.RotatingFileHandler',
                    'formatter': 'standard',
                    'level': logging.DEBUG,
                    'filename': os.fspath(log_path),
                    'maxBytes': 5 * 1024 * 1024,
                    'backupCount': 5,
                    'encoding': 'utf-8',
                },
            },
            'root': {
                'level': log_level,
                'handlers': ['console', 'file'],
            },
        }
    )

    flask_app.logger = logging.getLogger(flask_app.import_name)
    flask_app.logger.setLevel(log_level)
    logger.setLevel(log_level)


app = Flask(__name__)

_configure_logging(app)
app_config.validate_igdb_credentials()

metadata_service = MetadataService(
    igdb_api_client,
    credentials=exchange_twitch_credentials,
    max_workers=METADATA_WORKERS,
)
collection_store = CollectionStore(GAME_DATA_FILE)
cover_store = CoverStore(
    COVERS_DIR,
    local_url_prefix=LOCAL_COVER_URL_PREFIX,
    user_agent=IGDB_USER_AGENT,
)

app = create_app(
    flask_app=app,
    igdb_client=igdb_api_client,
    exchange_credentials=exchange_twitch_credentials,
    metadata_service=metadata_service,
    collection_store=collection_store,
    cover_store=cover_store,
    sort_config_path=SORT_CONFIG_FILE,
    popular_games_limit=POPULAR_GAMES_LIMIT,
)


if __name__ == '__main__':
    app.run(port=5000, debug=True)
