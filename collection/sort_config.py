"""Persisted sort and grouping preferences for the collection view."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

SORT_OPTIONS: frozenset[str] = frozenset(
    {
        "none",
        "title-asc",
        "title-desc",
        "release-date-asc",
        "release-date-desc",
        "rating-asc",
        "rating-desc",
        "priority-asc",
        "priority-desc",
    }
)
GROUP_OPTIONS: frozenset[str] = frozenset(
    {"none", "platform", "region", "franchise", "series"}
)

DEFAULT_SORT_CONFIG: dict[str, str] = {"sortOption": "none", "groupBy": "none"}


def load_sort_config(path: str | Path) -> dict[str, str]:
    """Return the stored preferences, falling back to defaults."""

    config_path = Path(path)
    if not config_path.exists():
        return dict(DEFAULT_SORT_CONFIG)
    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except ValueError:
        logger.warning("Ignoring malformed sort config at %s", config_path)
        return dict(DEFAULT_SORT_CONFIG)
    if not isinstance(data, dict):
        return dict(DEFAULT_SORT_CONFIG)
    return {
        "sortOption": str(data.get("sortOption") or "none"),
        "groupBy": str(data.get("groupBy") or "none"),
    }


def save_sort_config(path: str | Path, sort_option: Any, group_by: Any) -> dict[str, str]:
    """Validate and persist the preferences; raise ``ValueError`` on unknown values."""

    sort_value = str(sort_option or "none")
    group_value = str(group_by or "none")
    if sort_value not in SORT_OPTIONS:
        raise ValueError(f"unknown sort option: {sort_value}")
    if group_value not in GROUP_OPTIONS:
        raise ValueError(f"unknown group option: {group_value}")
    config = {"sortOption": sort_value, "groupBy": group_value}
    config_path = Path(path)
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(json.dumps(config, indent=2), encoding="utf-8")
    return config


__all__ = [
    "DEFAULT_SORT_CONFIG",
    "GROUP_OPTIONS",
    "SORT_OPTIONS",
    "load_sort_config",
    "save_sort_config",
]
