"""Configuration loader for the FUTÁR nearby-stops client."""

from __future__ import annotations

from dataclasses import dataclass
import os
from typing import Any

from dotenv import load_dotenv
import yaml

DEFAULT_API_BASE = "http://futar.bkk.hu/bkk-utvonaltervezo-api/ws/otp/api/where/"


@dataclass(frozen=True)
class ApiConfig:
    """Transit API configuration."""

    base_url: str
    api_key: str
    search_radius_meters: int
    timeout_seconds: float = 10.0


@dataclass(frozen=True)
class LocationConfig:
    """Location acquisition policy and the fixed fallback position."""

    timeout_ms: int
    maximum_age_ms: int
    enable_high_accuracy: bool
    latitude: float
    longitude: float
    accuracy_meters: float


@dataclass(frozen=True)
class FavoritesConfig:
    """Where favorite stops are persisted."""

    settings_path: str


@dataclass(frozen=True)
class UIConfig:
    """Display language."""

    language: str


@dataclass(frozen=True)
class LoggingConfig:
    """Logging configuration."""

    level: str
    log_dir: str


@dataclass(frozen=True)
class AppConfig:
    """Top-level application configuration."""

    api: ApiConfig
    location: LocationConfig
    favorites: FavoritesConfig
    ui: UIConfig
    log: LoggingConfig


def _require_key(mapping: dict[str, Any], key: str, context: str) -> Any:
    if key not in mapping:
        raise ValueError(f"Missing required key '{key}' in {context} config")
    return mapping[key]


def _require_section(data: dict[str, Any], name: str) -> dict[str, Any]:
    section = _require_key(data, name, name)
    if not isinstance(section, dict):
        raise ValueError(f"'{name}' config must be a mapping")
    return section


def load_config(path: str = "config/config.yaml") -> AppConfig:
    """Load application configuration from a YAML file."""
    load_dotenv()
    api_key = os.environ.get("FUTAR_API_KEY", "")
    try:
        with open(path, "r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle)
    except FileNotFoundError as exc:
        raise ValueError(f"Config file not found: {path}") from exc

    if not isinstance(data, dict):
        raise ValueError("Config file must contain a mapping at the top level")

    api_section = _require_section(data, "api")
    location_section = _require_section(data, "location")
    favorites_section = _require_section(data, "favorites")
    logging_section = _require_section(data, "logging")
    ui_section = data.get("ui") or {}
    if not isinstance(ui_section, dict):
        raise ValueError("'ui' config must be a mapping")

    api = ApiConfig(
        base_url=api_section.get("base_url") or DEFAULT_API_BASE,
        api_key=api_key,
        search_radius_meters=int(_require_key(api_section, "search_radius_meters", "api")),
        timeout_seconds=float(api_section.get("timeout_seconds", 10.0)),
    )

    location = LocationConfig(
        timeout_ms=int(_require_key(location_section, "timeout_ms", "location")),
        maximum_age_ms=int(_require_key(location_section, "maximum_age_ms", "location")),
        enable_high_accuracy=bool(location_section.get("enable_high_accuracy", True)),
        latitude=float(_require_key(location_section, "latitude", "location")),
        longitude=float(_require_key(location_section, "longitude", "location")),
        accuracy_meters=float(location_section.get("accuracy_meters", 1.0)),
    )

    favorites = FavoritesConfig(
        settings_path=_require_key(favorites_section, "settings_path", "favorites"),
    )

    ui = UIConfig(language=str(ui_section.get("language", "en")))

    logging = LoggingConfig(
        level=_require_key(logging_section, "level", "logging"),
        log_dir=_require_key(logging_section, "log_dir", "logging"),
    )

    return AppConfig(api=api, location=location, favorites=favorites, ui=ui, log=logging)
