"""Application wiring: config -> collaborators -> controller."""

from __future__ import annotations

import logging

from futar.config import AppConfig
from futar.data.favorites import FavoritesStore
from futar.data.geolocation import FixedGeoLocator, GeoLocator, LocationOptions
from futar.data.models import Coordinates
from futar.data.settings_store import JsonFileSettings
from futar.data.transit_client import TransitClient
from futar.data.transport import RequestsTransport, Transport
from futar.localization import Localizer
from futar.logic.controller import PresentationController, ViewRenderer

logger = logging.getLogger(__name__)


class FutarApplication:
    """Owns the controller; ``start`` kicks off the stops flow."""

    def __init__(
        self,
        config: AppConfig,
        renderer: ViewRenderer | None = None,
        transport: Transport | None = None,
        locator: GeoLocator | None = None,
    ) -> None:
        lookup = Localizer(config.ui.language)
        client = TransitClient(
            transport or RequestsTransport(config.api.timeout_seconds),
            lookup,
            base_url=config.api.base_url,
            api_key=config.api.api_key,
        )
        if locator is None:
            locator = FixedGeoLocator(
                Coordinates(
                    latitude=config.location.latitude,
                    longitude=config.location.longitude,
                    accuracy_meters=config.location.accuracy_meters,
                )
            )
        self.lookup = lookup
        self.favorites = FavoritesStore(JsonFileSettings(config.favorites.settings_path))
        self.controller = PresentationController(
            client,
            locator,
            self.favorites,
            lookup,
            renderer=renderer,
            search_radius_meters=config.api.search_radius_meters,
            location_options=LocationOptions(
                timeout_ms=config.location.timeout_ms,
                maximum_age_ms=config.location.maximum_age_ms,
                enable_high_accuracy=config.location.enable_high_accuracy,
            ),
        )

    def start(self) -> None:
        logger.info("Starting (language=%s)", self.lookup.language)
        self.controller.refresh_stops()


__all__ = ["FutarApplication"]
