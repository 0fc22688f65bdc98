"""Display strings for the supported UI languages."""

from __future__ import annotations

APP_TITLE = "PebFUTÁR"
DEFAULT_LANGUAGE = "en"

STRINGS: dict[str, dict[str, str]] = {
    "en": {
        "error_generic_comm": "Communication error!",
        "msg_location": "Acquiring location…",
        "msg_stop_search": "Searching for nearby stops…",
        "title_favorite_stops": "Favorite stops",
        "title_nearby_stops": "Nearby stops",
        "msg_no_stops_nearby": "No stops found nearby.",
        "msg_no_departures": "No departures found from this stop.",
        "msg_no_stops": "No stops found for this trip.",
        "msg_trip_loading_format": "Loading stops for {trip}…",
        "msg_departure_loading_format": "Loading departures for {stop}…",
        "title_tools": "Tools",
        "btn_favorite": "Favorite",
        "btn_unfavorite": "Unfavorite",
        "btn_refresh": "Refresh",
        "btn_info": "Trip info",
    },
    "hu": {
        "error_generic_comm": "Kommunikációs hiba!",
        "msg_location": "Helymeghatározás…",
        "msg_stop_search": "Megállók keresése…",
        "title_favorite_stops": "Kedvenc megállók",
        "title_nearby_stops": "Megállók a közelben",
        "msg_no_stops_nearby": "Nincs megálló a közelben.",
        "msg_no_departures": "Nem indulnak járatok ebből a megállóból.",
        "msg_no_stops": "Nincs megálló a kért járathoz.",
        "msg_trip_loading_format": "Megállók keresése a {trip} járathoz…",
        "msg_departure_loading_format": "Járatok keresése a {stop} megállóban…",
        "title_tools": "Eszközök",
        "btn_favorite": "Kedvenc",
        "btn_unfavorite": "Nem kedvenc",
        "btn_refresh": "Frissítés",
        "btn_info": "Járatok",
    },
}


class Localizer:
    """Callable string lookup: active language, then English, then the key itself."""

    def __init__(self, language: str = DEFAULT_LANGUAGE) -> None:
        # "hu-HU" style tags resolve to their primary subtag.
        primary = (language or DEFAULT_LANGUAGE).split("-")[0].lower()
        self.language = primary if primary in STRINGS else DEFAULT_LANGUAGE
        self._table = STRINGS[self.language]

    def __call__(self, key: str) -> str:
        return self._table.get(key) or STRINGS[DEFAULT_LANGUAGE].get(key) or key


__all__ = ["APP_TITLE", "Localizer", "STRINGS"]
