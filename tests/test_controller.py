from __future__ import annotations

import json
from typing import Any
from unittest.mock import MagicMock

import pytest

from futar.data.favorites import FavoritesStore
from futar.data.geolocation import LocationError, LocationOptions, TIMEOUT
from futar.data.models import COMMUNICATION_ERROR, LOCATION_UNAVAILABLE, Coordinates, DepartureSummary, StopSummary
from futar.data.settings_store import MemorySettings
from futar.data.transit_client import TransitClient
from futar.data.transport import TransportResult
from futar.localization import Localizer
from futar.logic.controller import PresentationController
from futar.logic.view_state import CONTENT, DEPARTURES, EMPTY, ERROR, IDLE, LOCATING, SEARCHING, STOPS, TRIP

BASE = "http://example.test/api/where/"
HERE = Coordinates(47.0, 19.0, 1.0)


class PendingTransport:
    """Holds every request until the test answers it."""

    def __init__(self) -> None:
        self.requests: list[tuple[str, Any]] = []

    def fetch_text(self, url: str, callback) -> None:
        self.requests.append((url, callback))

    @property
    def urls(self) -> list[str]:
        return [url for url, _ in self.requests]

    def respond(self, index: int, body: dict[str, Any]) -> None:
        self.requests[index][1](TransportResult(body=json.dumps(body)))

    def fail(self, index: int, message: str | None = None) -> None:
        self.requests[index][1](TransportResult(error=True, message=message))


class PendingLocator:
    def __init__(self) -> None:
        self.calls: list[tuple[LocationOptions, Any]] = []

    def acquire(self, options: LocationOptions, callback) -> None:
        self.calls.append((options, callback))

    def resolve(self, index: int, outcome) -> None:
        self.calls[index][1](outcome)


def _stops_payload(*stop_ids: str) -> dict[str, Any]:
    return {
        "data": {
            "stops": [{"id": sid, "name": f"Stop {sid}", "lat": 47.0, "lon": 19.0, "routeIds": ["r4"]} for sid in stop_ids],
            "references": {"routes": {"r4": {"id": "r4", "shortName": "4", "type": 0, "description": "Tram"}}},
        }
    }


def _departures_payload(*trip_ids: str) -> dict[str, Any]:
    return {
        "currentTime": 0,
        "data": {"entry": {"arrivalsAndDepartures": [
            {"routeId": "r4", "tripId": tid, "routeShortName": "4", "tripHeadsign": "Széll", "predictedArrivalTime": 60000}
            for tid in trip_ids
        ]}},
    }


@pytest.fixture()
def transport() -> PendingTransport:
    return PendingTransport()


@pytest.fixture()
def locator() -> PendingLocator:
    return PendingLocator()


@pytest.fixture()
def favorites() -> FavoritesStore:
    return FavoritesStore(MemorySettings())


@pytest.fixture()
def renderer() -> MagicMock:
    return MagicMock()


@pytest.fixture()
def controller(transport, locator, favorites, renderer) -> PresentationController:
    lookup = Localizer("en")
    client = TransitClient(transport, lookup, base_url=BASE)
    return PresentationController(client, locator, favorites, lookup, renderer=renderer, search_radius_meters=400)


def _stop(stop_id: str) -> StopSummary:
    return StopSummary(id=stop_id, name=f"Stop {stop_id}")


def _departure(trip_id: str) -> DepartureSummary:
    return DepartureSummary("r4", trip_id, "4", "Széll", 60000)


# --- stops flow ---


def test_initial_states_idle(controller: PresentationController) -> None:
    assert all(controller.state(flow).status == IDLE for flow in (STOPS, DEPARTURES, TRIP))
    assert controller.retry_slot is None


def test_stops_flow_happy_path(controller, transport, locator) -> None:
    controller.refresh_stops()
    assert controller.state(STOPS).status == LOCATING
    assert locator.calls[0][0].timeout_ms == 15000
    assert locator.calls[0][0].maximum_age_ms == 30000

    locator.resolve(0, HERE)
    assert controller.state(STOPS).status == SEARCHING
    assert transport.urls == [BASE + "stops-for-location.json?lat=47.0&lon=19.0&radius=400"]

    transport.respond(0, _stops_payload("a", "b"))
    state = controller.state(STOPS)
    assert state.status == CONTENT
    assert [s.id for s in state.items] == ["a", "b"]


def test_location_failure_is_not_retryable(controller, transport, locator) -> None:
    controller.refresh_stops()
    locator.resolve(0, LocationError(TIMEOUT, "Timeout expired"))

    state = controller.state(STOPS)
    assert state.status == ERROR
    assert state.message == "Timeout expired"
    assert state.retryable is False
    assert state.error_kind == LOCATION_UNAVAILABLE
    assert controller.retry_slot is None
    assert transport.requests == []
    assert controller.retry() is False


def test_stops_fetch_failure_is_retryable(controller, transport, locator) -> None:
    controller.refresh_stops()
    locator.resolve(0, HERE)
    transport.fail(0)

    state = controller.state(STOPS)
    assert state.status == ERROR
    assert state.message == "Communication error!"
    assert state.retryable is True
    assert state.error_kind == COMMUNICATION_ERROR
    assert controller.retry_slot == STOPS

    assert controller.retry() is True
    assert controller.state(STOPS).status == LOCATING
    assert controller.retry_slot is None
    assert len(locator.calls) == 2


def test_stops_empty_result(controller, transport, locator) -> None:
    controller.refresh_stops()
    locator.resolve(0, HERE)
    transport.respond(0, _stops_payload())

    assert controller.state(STOPS).status == EMPTY
    assert controller.screen(STOPS).status.message == "No stops found nearby."


def test_stale_location_completion_is_ignored(controller, transport, locator) -> None:
    controller.refresh_stops()
    controller.refresh_stops()

    locator.resolve(0, HERE)
    assert controller.state(STOPS).status == LOCATING
    assert transport.requests == []

    locator.resolve(1, HERE)
    assert controller.state(STOPS).status == SEARCHING


# --- departures flow ---


def test_selecting_stop_opens_departures(controller, transport, locator) -> None:
    controller.refresh_stops()
    locator.resolve(0, HERE)
    transport.respond(0, _stops_payload("a"))

    controller.handle_stop_select(0, 0)

    assert controller.current_stop.id == "a"
    assert controller.state(DEPARTURES).status == SEARCHING
    assert transport.urls[-1] == BASE + "arrivals-and-departures-for-stop/a.json"
    assert controller.screen(DEPARTURES).status.message == "Loading departures for Stop a…"


def test_superseded_departures_response_is_discarded(controller, transport) -> None:
    controller.show_departures(_stop("A"))
    controller.show_departures(_stop("B"))

    transport.respond(1, _departures_payload("tripB"))
    transport.respond(0, _departures_payload("tripA1", "tripA2"))

    state = controller.state(DEPARTURES)
    assert state.status == CONTENT
    assert [d.trip_id for d in state.items] == ["tripB"]
    assert controller.current_stop.id == "B"


def test_retry_slot_follows_most_recent_failure(controller, transport, locator) -> None:
    controller.refresh_stops()
    locator.resolve(0, HERE)
    transport.fail(0, "Status 500")
    assert controller.retry_slot == STOPS

    controller.show_departures(_stop("A"))
    assert controller.retry_slot is None

    transport.fail(1, "Status 502")
    assert controller.retry_slot == DEPARTURES
    assert controller.state(DEPARTURES).message == "Status 502"

    controller.handle_status_click("select")
    assert transport.urls[-1] == BASE + "arrivals-and-departures-for-stop/A.json"
    assert len(locator.calls) == 1


def test_status_click_ignores_other_buttons(controller, transport) -> None:
    controller.show_departures(_stop("A"))
    transport.fail(0)

    controller.handle_status_click("back")

    assert len(transport.requests) == 1


def test_refresh_tool_replays_same_stop(controller, transport) -> None:
    controller.show_departures(_stop("A"))
    transport.respond(0, _departures_payload("t1"))

    controller.handle_departure_select(1, 2)

    assert transport.urls == [BASE + "arrivals-and-departures-for-stop/A.json"] * 2
    assert controller.state(DEPARTURES).status == SEARCHING


def test_departure_items_show_eta(controller, transport) -> None:
    controller.show_departures(_stop("A"))
    transport.respond(0, _departures_payload("t1"))

    screen = controller.screen(DEPARTURES)
    assert screen.status is None
    item = screen.sections[0].items[0]
    assert item.title == "1' - 4"
    assert item.subtitle == "> Széll"
    assert screen.sections[0].title == "Stop A"


# --- trip detail flow ---


def test_trip_failure_never_sets_retry_slot(controller, transport) -> None:
    controller.show_departures(_stop("A"))
    transport.fail(0)
    assert controller.retry_slot == DEPARTURES

    controller.show_trip_details(_departure("t1"))
    assert controller.retry_slot is None
    transport.fail(1, "Status 404")

    state = controller.state(TRIP)
    assert state.status == ERROR
    assert state.retryable is False
    assert controller.retry_slot is None
    assert controller.screen(TRIP).status.retry_available is False


def test_selecting_departure_loads_trip(controller, transport) -> None:
    controller.show_departures(_stop("A"))
    transport.respond(0, _departures_payload("t1"))

    controller.handle_departure_select(0, 0)

    assert transport.urls[-1] == BASE + "trip-details.json?tripId=t1"
    assert controller.screen(TRIP).status.message == "Loading stops for 4 > Széll…"

    transport.respond(1, {"data": {"entry": {"stopTimes": []}, "references": {"stops": {}}}})
    assert controller.state(TRIP).status == EMPTY
    assert controller.screen(TRIP).status.message == "No stops found for this trip."


# --- favorites and details ---


def test_toggle_favorite_keeps_view_state(controller, transport, favorites, renderer) -> None:
    controller.show_departures(_stop("A"))
    transport.respond(0, _departures_payload("t1"))
    before = controller.state(DEPARTURES)
    renderer.reset_mock()

    controller.handle_departure_select(1, 0)

    assert controller.state(DEPARTURES) is before
    assert favorites.is_favorite("A")
    rendered = {call.args[0].flow: call.args[0] for call in renderer.render.call_args_list}
    assert rendered[DEPARTURES].sections[1].items[0].title == "Unfavorite"
    assert [i.payload.id for i in rendered[STOPS].sections[1].items] == ["A"]

    controller.toggle_favorite()
    assert not favorites.is_favorite("A")
    assert controller.screen(DEPARTURES).sections[1].items[0].title == "Favorite"


def test_favorites_section_selects_departures(controller, transport, favorites) -> None:
    favorites.set_favorite(_stop("F"), True)

    controller.handle_stop_select(1, 0)

    assert transport.urls == [BASE + "arrivals-and-departures-for-stop/F.json"]


def test_stop_tools_refresh_restarts_location(controller, locator) -> None:
    controller.handle_stop_select(2, 0)

    assert len(locator.calls) == 1
    assert controller.state(STOPS).status == LOCATING


def test_out_of_range_selection_is_ignored(controller, transport) -> None:
    controller.handle_stop_select(0, 5)

    assert transport.requests == []


def test_stop_details_card(controller, transport, locator, renderer) -> None:
    controller.refresh_stops()
    locator.resolve(0, HERE)
    transport.respond(0, _stops_payload("a"))

    controller.handle_stop_long_select(0, 0)

    card = renderer.show_card.call_args.args[0]
    assert card.title == "Stop a"
    assert card.body == "\n4 (0)\nTram\n\n"


def test_superseded_stops_fetch_is_discarded(controller, transport, locator) -> None:
    controller.refresh_stops()
    locator.resolve(0, HERE)
    controller.refresh_stops()
    locator.resolve(1, HERE)
    assert len(transport.requests) == 2

    transport.respond(1, _stops_payload("second"))
    transport.fail(0, "Status 500")

    state = controller.state(STOPS)
    assert state.status == CONTENT
    assert [s.id for s in state.items] == ["second"]
    assert controller.retry_slot == STOPS
    assert controller.screen(STOPS).status is None


def test_superseded_trip_details_are_discarded(controller, transport) -> None:
    controller.show_trip_details(_departure("A"))
    controller.show_trip_details(_departure("B"))

    transport.respond(1, {
        "data": {
            "entry": {"stopTimes": [{"stopId": "b", "arrivalTime": 1704096300}]},
            "references": {"stops": {"b": {"name": "Blaha"}}},
        }
    })
    transport.fail(0, "Status 500")

    state = controller.state(TRIP)
    assert state.status == CONTENT
    assert [t.stop_name for t in state.items] == ["Blaha"]
    assert controller.current_departure.trip_id == "B"
    assert controller.retry_slot is None
