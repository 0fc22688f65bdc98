"""Location acquisition contract and a fixed-position implementation."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Callable, Protocol, Union

from futar.data.models import Coordinates

logger = logging.getLogger(__name__)

LOCATION_TIMEOUT_MS = 15000
LOCATION_MAXIMUM_AGE_MS = 30000

PERMISSION_DENIED = 1
POSITION_UNAVAILABLE = 2
TIMEOUT = 3


@dataclass(frozen=True)
class LocationOptions:
    """Acquisition policy handed to the locator."""

    timeout_ms: int = LOCATION_TIMEOUT_MS
    maximum_age_ms: int = LOCATION_MAXIMUM_AGE_MS
    enable_high_accuracy: bool = True


@dataclass(frozen=True)
class LocationError:
    """Sensor, permission or timeout failure reported by the locator."""

    code: int
    message: str


LocationOutcome = Union[Coordinates, LocationError]
LocationCallback = Callable[[LocationOutcome], None]


class GeoLocator(Protocol):
    def acquire(self, options: LocationOptions, callback: LocationCallback) -> None:
        """Start a one-shot fix; ``callback`` fires exactly once."""


class FixedGeoLocator:
    """Locator that always reports a configured position."""

    def __init__(self, coordinates: Coordinates | None) -> None:
        self._coordinates = coordinates

    def acquire(self, options: LocationOptions, callback: LocationCallback) -> None:
        if self._coordinates is None:
            logger.warning("No fixed position configured")
            callback(LocationError(POSITION_UNAVAILABLE, "Position unavailable"))
            return
        logger.info(
            "Location: %s, %s (timeout=%sms)",
            self._coordinates.latitude,
            self._coordinates.longitude,
            options.timeout_ms,
        )
        callback(self._coordinates)


__all__ = [
    "FixedGeoLocator",
    "GeoLocator",
    "LocationCallback",
    "LocationError",
    "LocationOptions",
    "LocationOutcome",
]
