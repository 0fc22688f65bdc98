"""Per-flow view states."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

STOPS = "stops"
DEPARTURES = "departures"
TRIP = "trip"
FLOWS = (STOPS, DEPARTURES, TRIP)

IDLE = "idle"
LOCATING = "locating"
SEARCHING = "searching"
CONTENT = "content"
EMPTY = "empty"
ERROR = "error"


@dataclass(frozen=True)
class ViewState:
    """Immutable state of one flow; every transition replaces it."""

    status: str
    items: tuple[Any, ...] = ()
    message: str | None = None
    retryable: bool = False
    error_kind: str | None = None

    @classmethod
    def idle(cls) -> ViewState:
        return cls(IDLE)

    @classmethod
    def locating(cls) -> ViewState:
        return cls(LOCATING)

    @classmethod
    def searching(cls) -> ViewState:
        return cls(SEARCHING)

    @classmethod
    def loaded(cls, items: list[Any]) -> ViewState:
        if not items:
            return cls(EMPTY)
        return cls(CONTENT, items=tuple(items))

    @classmethod
    def error(cls, message: str, retryable: bool, kind: str) -> ViewState:
        return cls(ERROR, message=message, retryable=retryable, error_kind=kind)


__all__ = [
    "CONTENT",
    "DEPARTURES",
    "EMPTY",
    "ERROR",
    "FLOWS",
    "IDLE",
    "LOCATING",
    "SEARCHING",
    "STOPS",
    "TRIP",
    "ViewState",
]
