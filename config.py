"""Application-wide configuration helpers and constants."""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Final

from dotenv import load_dotenv

BASE_DIR: Final[Path] = Path(__file__).resolve().parent

load_dotenv(BASE_DIR / ".env")


logger = logging.getLogger(__name__)


def _clean_text(value: str | None) -> str:
    """Return ``value`` stripped of surrounding whitespace."""

    if value is None:
        return ""
    return value.strip()


def _path_from(env_value: str | None, default: str | Path) -> Path:
    """Resolve a filesystem path using an environment override when provided."""

    text = _clean_text(env_value)
    candidate = Path(text) if text else Path(default)
    candidate = candidate.expanduser()
    if candidate.is_absolute():
        try:
            return candidate.resolve()
        except (OSError, RuntimeError):  # pragma: no cover - fallback for exotic paths
            return candidate
    return candidate


def _coerce_positive_int(value: str | None, default: int) -> int:
    """Return ``value`` coerced to a positive integer or ``default`` when invalid."""

    text = _clean_text(value)
    if not text:
        return default
    try:
        numeric = int(float(text))
    except (TypeError, ValueError):
        return default
    return numeric if numeric > 0 else default


DATA_DIR_PATH: Final[Path] = _path_from(os.environ.get("DATA_DIR"), BASE_DIR / "data")
GAME_DATA_FILE_PATH: Final[Path] = _path_from(
    os.environ.get("GAME_DATA_FILE"), DATA_DIR_PATH / "gameData.json"
)
SORT_CONFIG_FILE_PATH: Final[Path] = _path_from(
    os.environ.get("SORT_CONFIG_FILE"), DATA_DIR_PATH / "sortConfig.json"
)
COVERS_DIR_PATH: Final[Path] = _path_from(
    os.environ.get("COVERS_DIR"), DATA_DIR_PATH / "covers"
)

LOG_DIR_PATH: Final[Path] = _path_from(os.environ.get("LOG_DIR"), BASE_DIR / "logs")
LOG_FILE_PATH: Final[Path] = _path_from(
    os.environ.get("LOG_FILE"), LOG_DIR_PATH / "app.log"
)
LOG_FILE: Final[str] = os.fspath(LOG_FILE_PATH)

GAME_DATA_FILE: Final[str] = os.fspath(GAME_DATA_FILE_PATH)
SORT_CONFIG_FILE: Final[str] = os.fspath(SORT_CONFIG_FILE_PATH)
COVERS_DIR: Final[str] = os.fspath(COVERS_DIR_PATH)

PUBLIC_BASE_URL: Final[str] = (
    _clean_text(os.environ.get("PUBLIC_BASE_URL")) or "http://localhost:5000"
).rstrip("/")
LOCAL_COVER_URL_PREFIX: Final[str] = f"{PUBLIC_BASE_URL}/covers/"

DEFAULT_IGDB_USER_AGENT: Final[str] = "Game-Backlog/1.0 (support@example.com)"
IGDB_USER_AGENT: Final[str] = (
    _clean_text(os.environ.get("IGDB_USER_AGENT")) or DEFAULT_IGDB_USER_AGENT
)

IGDB_CLIENT_ID: Final[str] = _clean_text(
    os.environ.get("IGDB_CLIENT_ID") or os.environ.get("TWITCH_CLIENT_ID")
)
IGDB_CLIENT_SECRET: Final[str] = _clean_text(
    os.environ.get("IGDB_CLIENT_SECRET") or os.environ.get("TWITCH_CLIENT_SECRET")
)

METADATA_WORKERS: Final[int] = _coerce_positive_int(
    os.environ.get("METADATA_WORKERS"), 3
)
POPULAR_GAMES_LIMIT: Final[int] = _coerce_positive_int(
    os.environ.get("POPULAR_GAMES_LIMIT"), 30
)


def validate_igdb_credentials() -> bool:
    """Log an error and return ``False`` when IGDB credentials are missing."""

    missing = [
        name
        for name, value in (
            ("IGDB_CLIENT_ID", IGDB_CLIENT_ID),
            ("IGDB_CLIENT_SECRET", IGDB_CLIENT_SECRET),
        )
        if not value
    ]

    if missing:
        logger.error(
            "Missing required IGDB credentials; set %s.", " and ".join(missing)
        )

    return not missing


__all__ = [
    "BASE_DIR",
    "COVERS_DIR",
    "COVERS_DIR_PATH",
    "DATA_DIR_PATH",
    "DEFAULT_IGDB_USER_AGENT",
    "GAME_DATA_FILE",
    "GAME_DATA_FILE_PATH",
    "IGDB_CLIENT_ID",
    "IGDB_CLIENT_SECRET",
    "IGDB_USER_AGENT",
    "LOCAL_COVER_URL_PREFIX",
    "LOG_DIR_PATH",
    "LOG_FILE",
    "LOG_FILE_PATH",
    "METADATA_WORKERS",
    "POPULAR_GAMES_LIMIT",
    "PUBLIC_BASE_URL",
    "SORT_CONFIG_FILE",
    "SORT_CONFIG_FILE_PATH",
    "validate_igdb_credentials",
]
