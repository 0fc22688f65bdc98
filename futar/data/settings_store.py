"""Key-value string settings backing the favorites store."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)


class SettingsStore(Protocol):
    def read_string(self, key: str) -> str | None: ...

    def write_string(self, key: str, value: str) -> None: ...


class MemorySettings:
    """Process-local settings, used by tests and ephemeral sessions."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.values: dict[str, str] = dict(initial or {})

    def read_string(self, key: str) -> str | None:
        return self.values.get(key)

    def write_string(self, key: str, value: str) -> None:
        self.values[key] = value


class JsonFileSettings:
    """Settings persisted as a flat JSON object of strings."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    def _load(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            with self._path.open("r", encoding="utf-8") as handle:
                data = json.load(handle)
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable settings file %s: %s", self._path, exc)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring settings file %s: not a JSON object", self._path)
            return {}
        return {k: v for k, v in data.items() if isinstance(v, str)}

    def read_string(self, key: str) -> str | None:
        return self._load().get(key)

    def write_string(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        with tmp_path.open("w", encoding="utf-8") as handle:
            json.dump(data, handle, ensure_ascii=False, indent=2)
        tmp_path.replace(self._path)


__all__ = ["JsonFileSettings", "MemorySettings", "SettingsStore"]
