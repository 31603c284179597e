"""Aggregate statistics over the saved collection."""

from __future__ import annotations

import math
import re
from typing import Any, Iterable, Mapping

import pandas as pd

STATUSES: tuple[str, ...] = ("Backlog", "Playing", "Finished", "Dropped")
WISHLIST_STATUS = "Wishlist"
GROUP_FALLBACKS: dict[str, str] = {
    "platform": "Unknown",
    "franchise": "No Franchise",
    "series": "No Series",
}

GAME_COLUMNS = [
    "id",
    "title",
    "status",
    "rating",
    "playTime",
    "finishedDate",
    "releaseDate",
    "platform",
    "franchise",
    "series",
]

_PLAY_TIME_PATTERN = re.compile(r"^\s*(\d+):(\d+)")
_RELEASE_DATE_PATTERN = r"^(\d{4})-\d{2}-\d{2}$"


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _plain_number(value: float) -> int | float:
    return int(value) if float(value).is_integer() else float(value)


def games_frame(games: Iterable[Mapping[str, Any]]) -> pd.DataFrame:
    """Return the tracked games (everything except the wishlist) as a frame."""

    records = [dict(game) for game in games if isinstance(game, Mapping)]
    df = pd.DataFrame(records, columns=GAME_COLUMNS)
    return df[df["status"] != WISHLIST_STATUS].reset_index(drop=True)


def status_stats(df: pd.DataFrame) -> list[dict[str, Any]]:
    total = len(df)
    counts = df["status"].value_counts()
    rows: list[dict[str, Any]] = [{"status": "Total", "count": total, "percent": None}]
    for status in STATUSES:
        count = int(counts.get(status, 0))
        percent = _round_half_up(count / total * 100) if total else 0
        rows.append({"status": status, "count": count, "percent": percent})
    return rows


def rating_stats(df: pd.DataFrame) -> dict[str, Any] | None:
    finished = df[df["status"] == "Finished"]
    ratings = (
        pd.to_numeric(finished["rating"], errors="coerce").dropna().sort_values().tolist()
    )
    if not ratings:
        return None
    total = len(ratings)
    return {
        "highest": _plain_number(ratings[-1]),
        "lowest": _plain_number(ratings[0]),
        "median": _plain_number(ratings[total // 2]),
        "average": _round_half_up(sum(ratings) / total),
    }


def parse_play_time(value: Any) -> int | None:
    """Return the minutes in an ``H:MM`` value."""

    if not isinstance(value, str):
        return None
    match = _PLAY_TIME_PATTERN.match(value)
    if match is None:
        return None
    return int(match.group(1)) * 60 + int(match.group(2))


def format_play_time(minutes: int) -> str:
    return f"{minutes // 60}:{minutes % 60:02d}"


def play_time_stats(df: pd.DataFrame) -> dict[str, str] | None:
    durations = sorted(
        minutes
        for minutes in (parse_play_time(value) for value in df["playTime"])
        if minutes is not None
    )
    if not durations:
        return None
    total = sum(durations)
    return {
        "total": format_play_time(total),
        "shortest": format_play_time(durations[0]),
        "longest": format_play_time(durations[-1]),
        "average": format_play_time(total // len(durations)),
    }


def _per_year(years: pd.Series) -> list[dict[str, int]]:
    if years.empty:
        return []
    counts = years.value_counts().reindex(
        range(int(years.min()), int(years.max()) + 1), fill_value=0
    )
    return [{"year": int(year), "count": int(count)} for year, count in counts.items()]


def _finished_year(value: Any) -> int | None:
    if not isinstance(value, str) or not value.strip():
        return None
    stamp = pd.to_datetime(value.strip(), errors="coerce")
    if pd.isna(stamp):
        return None
    return int(stamp.year)


def finished_per_year(df: pd.DataFrame) -> list[dict[str, int]]:
    years = df["finishedDate"].map(_finished_year).dropna().astype(int)
    return _per_year(years)


def released_per_year(df: pd.DataFrame) -> list[dict[str, int]]:
    years = (
        df["releaseDate"]
        .astype(str)
        .str.extract(_RELEASE_DATE_PATTERN, expand=False)
        .dropna()
        .astype(int)
    )
    return _per_year(years)


def _group_labels(value: Any, fallback: str) -> list[str]:
    if isinstance(value, (list, tuple)):
        return [str(item) if item else fallback for item in value]
    if isinstance(value, str) and value.strip():
        return [value]
    return [fallback]


def group_games(df: pd.DataFrame, group_by: str) -> dict[str, pd.DataFrame]:
    """Split games by platform, franchise or series; a game may land in several groups."""

    if group_by not in GROUP_FALLBACKS:
        raise ValueError(f"unknown statistics grouping: {group_by}")
    fallback = GROUP_FALLBACKS[group_by]
    if df.empty:
        return {}
    labelled = df.assign(
        _group=df[group_by].map(lambda value: _group_labels(value, fallback))
    ).explode("_group")
    groups = {
        str(name): frame.drop(columns="_group")
        for name, frame in labelled.groupby("_group", sort=True)
    }
    if group_by == "series":
        groups = {name: frame for name, frame in groups.items() if len(frame) > 1}
    return groups


def summarize(df: pd.DataFrame) -> dict[str, Any]:
    return {
        "status": status_stats(df),
        "rating": rating_stats(df),
        "playTime": play_time_stats(df),
    }


def build_statistics(
    games: Iterable[Mapping[str, Any]], group_by: str = "platform"
) -> dict[str, Any]:
    df = games_frame(games)
    groups = group_games(df, group_by)
    return {
        "groupBy": group_by,
        "overall": summarize(df),
        "groups": [{"name": name, **summarize(frame)} for name, frame in groups.items()],
        "finishedPerYear": finished_per_year(df),
        "releasedPerYear": released_per_year(df),
    }


__all__ = [
    "GROUP_FALLBACKS",
    "STATUSES",
    "build_statistics",
    "finished_per_year",
    "format_play_time",
    "games_frame",
    "group_games",
    "parse_play_time",
    "play_time_stats",
    "rating_stats",
    "released_per_year",
    "status_stats",
]
