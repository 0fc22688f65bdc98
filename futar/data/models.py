"""Normalized transit records produced from raw API payloads."""

from __future__ import annotations

from dataclasses import dataclass, field
import math
from typing import Any, Generic, TypeVar

T = TypeVar("T")

LOCATION_UNAVAILABLE = "location_unavailable"
COMMUNICATION_ERROR = "communication_error"


@dataclass(frozen=True)
class Coordinates:
    """A single location fix."""

    latitude: float
    longitude: float
    accuracy_meters: float = 0.0


@dataclass(frozen=True)
class RouteRef:
    """Route entry from a response's shared reference table."""

    id: str
    short_name: str | None
    long_name: str | None
    type: int
    description: str

    @property
    def display_name(self) -> str:
        return self.short_name or self.long_name or ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "shortName": self.short_name,
            "longName": self.long_name,
            "type": self.type,
            "description": self.description,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> RouteRef:
        return cls(
            id=str(raw.get("id") or ""),
            short_name=raw.get("shortName"),
            long_name=raw.get("longName"),
            type=int(raw.get("type") or 0),
            description=raw.get("description") or "",
        )


def unique_route_names(routes: tuple[RouteRef | None, ...]) -> list[str]:
    """Distinct route display names in first-seen order; placeholders are skipped."""
    names: list[str] = []
    for route in routes:
        if route is None:
            continue
        name = route.display_name
        if name not in names:
            names.append(name)
    return names


@dataclass(frozen=True)
class StopSummary:
    """A nearby stop with the routes serving it.

    ``routes`` is aligned with the stop's raw route-id list; ids missing
    from the reference table are kept as ``None``.
    """

    id: str
    name: str
    distance_meters: int = 0
    routes: tuple[RouteRef | None, ...] = field(default_factory=tuple)

    @property
    def title(self) -> str:
        return ", ".join(unique_route_names(self.routes))

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "distance": self.distance_meters,
            "routes": [route.to_dict() if route is not None else None for route in self.routes],
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> StopSummary:
        routes = raw.get("routes") or []
        return cls(
            id=str(raw["id"]),
            name=raw.get("name") or "",
            distance_meters=int(raw.get("distance") or 0),
            routes=tuple(RouteRef.from_dict(r) if isinstance(r, dict) else None for r in routes),
        )


@dataclass(frozen=True)
class DepartureSummary:
    """One upcoming departure from a stop."""

    route_id: str
    trip_id: str
    route_short_name: str
    trip_headsign: str
    eta_millis_from_now: int | None

    @property
    def eta_minutes(self) -> int | None:
        if self.eta_millis_from_now is None:
            return None
        return math.ceil(self.eta_millis_from_now / 60000)

    @property
    def trip_name(self) -> str:
        return f"{self.route_short_name} > {self.trip_headsign}"


@dataclass(frozen=True)
class TripStopSummary:
    """A stop along a trip with its local arrival clock time."""

    stop_name: str
    arrival_local_hour: int
    arrival_local_minute: int
    raw: dict[str, Any] = field(compare=False, repr=False, default_factory=dict)

    @property
    def clock_time(self) -> str:
        return f"{self.arrival_local_hour:02d}:{self.arrival_local_minute:02d}"


@dataclass(frozen=True)
class Failure:
    """Classified failure of a location lookup or transit request."""

    kind: str
    message: str


@dataclass(frozen=True)
class FetchResult(Generic[T]):
    """Outcome of one transit request: normalized items or a failure."""

    items: list[T]
    failure: Failure | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    @classmethod
    def success(cls, items: list[T]) -> FetchResult[T]:
        return cls(items=items)

    @classmethod
    def error(cls, failure: Failure) -> FetchResult[T]:
        return cls(items=[], failure=failure)


__all__ = [
    "COMMUNICATION_ERROR",
    "Coordinates",
    "DepartureSummary",
    "Failure",
    "FetchResult",
    "LOCATION_UNAVAILABLE",
    "RouteRef",
    "StopSummary",
    "TripStopSummary",
    "unique_route_names",
]
