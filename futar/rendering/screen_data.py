"""Data structures handed to the widget layer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class DisplayItem:
    """Single menu row."""

    title: str
    subtitle: str = ""
    payload: Any = None


@dataclass(frozen=True)
class Section:
    """Titled group of menu rows."""

    title: str
    items: tuple[DisplayItem, ...] = ()


@dataclass(frozen=True)
class StatusDisplay:
    """Status card text with the optional retry affordance."""

    message: str
    retry_available: bool = False


@dataclass(frozen=True)
class Screen:
    """Everything the widget layer needs to draw one flow."""

    flow: str
    sections: tuple[Section, ...]
    status: StatusDisplay | None  # None while the menu itself is shown


@dataclass(frozen=True)
class DetailCard:
    """Scrollable text card (stop details)."""

    title: str
    body: str


__all__ = ["DetailCard", "DisplayItem", "Screen", "Section", "StatusDisplay"]
