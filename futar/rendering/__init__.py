"""Screen composition and preview rendering."""

from futar.rendering.emulator import render_card, render_screen, save_frame
from futar.rendering.screen_data import DetailCard, DisplayItem, Screen, Section, StatusDisplay

__all__ = [
    "DetailCard",
    "DisplayItem",
    "Screen",
    "Section",
    "StatusDisplay",
    "render_card",
    "render_screen",
    "save_frame",
]
