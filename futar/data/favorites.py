"""Persisted, order-preserving set of favorite stops."""

from __future__ import annotations

import json
import logging

from futar.data.models import StopSummary
from futar.data.settings_store import SettingsStore

logger = logging.getLogger(__name__)

FAVORITES_KEY = "favorite_stops"


class FavoritesStore:
    """Favorite stops keyed by stop id, loaded on first use and written through on change."""

    def __init__(self, settings: SettingsStore, key: str = FAVORITES_KEY) -> None:
        self._settings = settings
        self._key = key
        self._favorites: list[StopSummary] | None = None

    def list(self) -> list[StopSummary]:
        if self._favorites is None:
            self._favorites = self._load()
        return list(self._favorites)

    def is_favorite(self, stop_id: str) -> bool:
        return any(stop.id == stop_id for stop in self.list())

    def set_favorite(self, stop: StopSummary, wanted: bool) -> None:
        favorites = self.list()
        present = any(s.id == stop.id for s in favorites)
        if wanted and not present:
            favorites.append(stop)
        elif present and not wanted:
            favorites = [s for s in favorites if s.id != stop.id]
        else:
            return
        self._settings.write_string(self._key, json.dumps([s.to_dict() for s in favorites], ensure_ascii=False))
        self._favorites = favorites
        logger.info("Favorite state of stop %s set to %s (%s favorites)", stop.id, wanted, len(favorites))

    def _load(self) -> list[StopSummary]:
        raw = self._settings.read_string(self._key)
        if not raw:
            return []
        try:
            entries = json.loads(raw)
        except ValueError:
            logger.warning("Discarding malformed favorites setting")
            return []
        if not isinstance(entries, list):
            return []

        favorites: list[StopSummary] = []
        seen: set[str] = set()
        for entry in entries:
            if not isinstance(entry, dict) or not entry.get("id"):
                continue
            try:
                stop = StopSummary.from_dict(entry)
            except (TypeError, ValueError):
                continue
            if stop.id in seen:
                continue
            seen.add(stop.id)
            favorites.append(stop)
        return favorites


__all__ = ["FAVORITES_KEY", "FavoritesStore"]
