"""Screen composer: turns view states into sections and status text."""

from __future__ import annotations

from typing import Callable

from futar.data.models import DepartureSummary, StopSummary, TripStopSummary
from futar.logic.view_state import CONTENT, DEPARTURES, EMPTY, ERROR, LOCATING, SEARCHING, STOPS, TRIP, ViewState
from futar.rendering.screen_data import DetailCard, DisplayItem, Screen, Section, StatusDisplay

SECTION_NEARBY = 0
SECTION_FAVORITES = 1
SECTION_STOP_TOOLS = 2

SECTION_DEPARTURES = 0
SECTION_DEPARTURE_TOOLS = 1

TOOL_FAVORITE = 0
TOOL_INFO = 1
TOOL_REFRESH = 2

UNKNOWN_ETA = "?"

Lookup = Callable[[str], str]


def _format(lookup: Lookup, key: str, **values: str) -> str:
    text = lookup(key)
    for name, value in values.items():
        text = text.replace("{" + name + "}", value)
    return text


def stop_item(stop: StopSummary) -> DisplayItem:
    return DisplayItem(title=stop.title, subtitle=stop.name, payload=stop)


def departure_item(departure: DepartureSummary) -> DisplayItem:
    minutes = departure.eta_minutes
    eta = f"{minutes}'" if minutes is not None else UNKNOWN_ETA
    return DisplayItem(
        title=f"{eta} - {departure.route_short_name}",
        subtitle=f"> {departure.trip_headsign}",
        payload=departure,
    )


def trip_stop_item(trip_stop: TripStopSummary) -> DisplayItem:
    return DisplayItem(title=trip_stop.clock_time, subtitle=trip_stop.stop_name, payload=trip_stop)


def _status(state: ViewState, messages: dict[str, str], retry_available: bool) -> StatusDisplay | None:
    if state.status == ERROR:
        return StatusDisplay(state.message or "", retry_available)
    if state.status in messages:
        return StatusDisplay(messages[state.status], retry_available)
    return None


def compose_stops_screen(
    state: ViewState,
    favorites: list[StopSummary],
    lookup: Lookup,
    retry_available: bool = False,
) -> Screen:
    """Nearby stops, favorite stops and the refresh tool, in fixed section order."""
    nearby = tuple(stop_item(s) for s in state.items) if state.status == CONTENT else ()
    sections = (
        Section(lookup("title_nearby_stops"), nearby),
        Section(lookup("title_favorite_stops"), tuple(stop_item(s) for s in favorites)),
        Section(lookup("title_tools"), (DisplayItem(lookup("btn_refresh")),)),
    )
    messages = {
        LOCATING: lookup("msg_location"),
        SEARCHING: lookup("msg_stop_search"),
        EMPTY: lookup("msg_no_stops_nearby"),
    }
    return Screen(STOPS, sections, _status(state, messages, retry_available))


def compose_departures_screen(
    state: ViewState,
    stop: StopSummary | None,
    is_favorite: bool,
    lookup: Lookup,
    retry_available: bool = False,
) -> Screen:
    """Departures from the selected stop followed by the favorite/info/refresh tools."""
    stop_name = stop.name if stop is not None else ""
    departures = tuple(departure_item(d) for d in state.items) if state.status == CONTENT else ()
    tools = (
        DisplayItem(lookup("btn_unfavorite") if is_favorite else lookup("btn_favorite")),
        DisplayItem(lookup("btn_info")),
        DisplayItem(lookup("btn_refresh")),
    )
    sections = (Section(stop_name, departures), Section(lookup("title_tools"), tools))
    messages = {
        SEARCHING: _format(lookup, "msg_departure_loading_format", stop=stop_name),
        EMPTY: lookup("msg_no_departures"),
    }
    return Screen(DEPARTURES, sections, _status(state, messages, retry_available))


def compose_trip_screen(state: ViewState, departure: DepartureSummary | None, lookup: Lookup) -> Screen:
    """Stop times of the selected trip; trip failures never offer a retry."""
    trip_name = departure.trip_name if departure is not None else ""
    stops = tuple(trip_stop_item(t) for t in state.items) if state.status == CONTENT else ()
    messages = {
        SEARCHING: _format(lookup, "msg_trip_loading_format", trip=trip_name),
        EMPTY: lookup("msg_no_stops"),
    }
    return Screen(TRIP, (Section(trip_name, stops),), _status(state, messages, False))


def compose_stop_details(stop: StopSummary) -> DetailCard:
    """Route list of a stop; unresolved route placeholders are skipped."""
    body = "\n"
    for route in stop.routes:
        if route is None:
            continue
        body += f"{route.display_name} ({route.type})\n"
        body += f"{route.description}\n\n"
    return DetailCard(title=stop.name, body=body)


__all__ = [
    "SECTION_DEPARTURES",
    "SECTION_DEPARTURE_TOOLS",
    "SECTION_FAVORITES",
    "SECTION_NEARBY",
    "SECTION_STOP_TOOLS",
    "TOOL_FAVORITE",
    "TOOL_INFO",
    "TOOL_REFRESH",
    "compose_departures_screen",
    "compose_stop_details",
    "compose_stops_screen",
    "compose_trip_screen",
    "departure_item",
    "stop_item",
    "trip_stop_item",
]
