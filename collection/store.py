"""JSON-file storage for the saved game collection."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from threading import Lock
from typing import Any, Mapping

logger = logging.getLogger(__name__)

DEFAULT_PRIORITY = "Normal"


class CollectionStoreError(RuntimeError):
    """The collection file could not be read or written."""


def _id_key(value: Any) -> str:
    return "" if value is None else str(value)


class CollectionStore:
    """Read-modify-write access to the collection file, one operation at a time."""

    def __init__(self, path: str | Path, *, lock: Any | None = None) -> None:
        self.path = Path(path)
        self._lock = lock or Lock()

    def ensure_exists(self) -> None:
        if self.path.exists():
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._write([])

    def _read(self) -> list[dict[str, Any]]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        except OSError as exc:
            raise CollectionStoreError(f"failed to read {self.path}: {exc}") from exc
        try:
            data = json.loads(raw or "[]")
        except ValueError as exc:
            raise CollectionStoreError(f"invalid JSON in {self.path}") from exc
        if not isinstance(data, list):
            raise CollectionStoreError(f"expected a JSON array in {self.path}")
        return data

    def _write(self, games: list[dict[str, Any]]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(games, indent=2), encoding="utf-8")
        except OSError as exc:
            raise CollectionStoreError(f"failed to write {self.path}: {exc}") from exc

    def migrate_priorities(self) -> bool:
        """Give every stored entry a priority; return ``True`` if the file changed."""

        with self._lock:
            try:
                games = self._read()
            except CollectionStoreError:
                logger.exception("Priority migration skipped")
                return False
            changed = False
            for game in games:
                if isinstance(game, dict) and "priority" not in game:
                    game["priority"] = DEFAULT_PRIORITY
                    changed = True
            if changed:
                self._write(games)
                logger.info("Added default priority to existing collection entries")
            return changed

    def list_games(self) -> list[dict[str, Any]]:
        with self._lock:
            return self._read()

    def get_game(self, game_id: Any) -> dict[str, Any] | None:
        key = _id_key(game_id)
        for game in self.list_games():
            if _id_key(game.get("id")) == key:
                return game
        return None

    def add_game(self, entry: Mapping[str, Any]) -> dict[str, Any]:
        """Append ``entry``; a taken id gets a ``-1``, ``-2``, ... suffix."""

        game = dict(entry)
        game.setdefault("priority", DEFAULT_PRIORITY)
        with self._lock:
            games = self._read()
            existing = {_id_key(item.get("id")) for item in games}
            base_id = game.get("id")
            if _id_key(base_id) in existing:
                counter = 1
                final_id = f"{base_id}-{counter}"
                while final_id in existing:
                    counter += 1
                    final_id = f"{base_id}-{counter}"
                game["id"] = final_id
            games.append(game)
            self._write(games)
        return game

    def update_game(self, entry: Mapping[str, Any]) -> dict[str, Any] | None:
        """Replace the stored entry with the same id; ``None`` when absent."""

        game = dict(entry)
        game.setdefault("priority", DEFAULT_PRIORITY)
        key = _id_key(game.get("id"))
        with self._lock:
            games = self._read()
            for index, item in enumerate(games):
                if _id_key(item.get("id")) == key:
                    games[index] = game
                    self._write(games)
                    return game
        return None

    def delete_game(self, game_id: Any) -> dict[str, Any] | None:
        key = _id_key(game_id)
        with self._lock:
            games = self._read()
            removed = None
            remaining = []
            for item in games:
                if _id_key(item.get("id")) == key:
                    removed = removed or item
                    continue
                remaining.append(item)
            self._write(remaining)
        return removed


__all__ = [
    "CollectionStore",
    "CollectionStoreError",
    "DEFAULT_PRIORITY",
]
