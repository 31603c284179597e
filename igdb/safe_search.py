"""Filtering of adult titles out of IGDB search results."""

from __future__ import annotations

from typing import Any, Iterable, Mapping

BANNED_RATING_IDS: frozenset[int] = frozenset({12, 17, 22, 26, 33, 38, 39})

BANNED_WORDS: tuple[str, ...] = (
    "hentai",
    "porn",
    "sex",
    "sexy",
    "nude",
    "nudity",
    "erotic",
    "rape",
    "incest",
    "fetish",
    "lewd",
    "xxx",
    "ecchi",
    "orgy",
)


def is_safe_game(game: Mapping[str, Any]) -> bool:
    ratings = game.get("age_ratings")
    if isinstance(ratings, list):
        for rating in ratings:
            rating_id = rating.get("id") if isinstance(rating, Mapping) else rating
            if rating_id in BANNED_RATING_IDS:
                return False
    title = str(game.get("name") or game.get("title") or "").lower()
    return not any(word in title for word in BANNED_WORDS)


def filter_safe_games(
    games: Iterable[Mapping[str, Any]], enabled: bool = True
) -> list[Mapping[str, Any]]:
    """Drop games carrying a banned age rating or a banned word in the title."""

    if not enabled:
        return list(games)
    return [game for game in games if is_safe_game(game)]


__all__ = ["BANNED_RATING_IDS", "BANNED_WORDS", "filter_safe_games", "is_safe_game"]
