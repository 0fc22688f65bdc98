"""Presentation controller driving the stops, departures and trip flows.

Every flow start bumps that flow's generation and threads a FlowContext
through the asynchronous continuations; a completion whose context is no
longer current is dropped. A single retry slot records which retryable
flow (stops or departures) may be replayed from the status display.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any, Callable, Protocol

from futar.data.favorites import FavoritesStore
from futar.data.geolocation import GeoLocator, LocationError, LocationOptions, LocationOutcome
from futar.data.models import LOCATION_UNAVAILABLE, DepartureSummary, FetchResult, StopSummary
from futar.data.transit_client import TransitClient
from futar.logic.view_state import DEPARTURES, FLOWS, STOPS, TRIP, ViewState
from futar.rendering.composer import (
    SECTION_DEPARTURE_TOOLS,
    SECTION_DEPARTURES,
    SECTION_FAVORITES,
    SECTION_NEARBY,
    SECTION_STOP_TOOLS,
    TOOL_FAVORITE,
    TOOL_INFO,
    TOOL_REFRESH,
    compose_departures_screen,
    compose_stop_details,
    compose_stops_screen,
    compose_trip_screen,
)
from futar.rendering.screen_data import DetailCard, Screen

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_RADIUS_METERS = 400
SELECT_BUTTON = "select"


class ViewRenderer(Protocol):
    def render(self, screen: Screen) -> None: ...

    def show_card(self, card: DetailCard) -> None: ...


@dataclass(frozen=True)
class FlowContext:
    """Identity of one flow run: which flow and which generation."""

    flow: str
    generation: int


class PresentationController:
    """Orchestrates locator, transit client and favorites into renderable screens."""

    def __init__(
        self,
        client: TransitClient,
        locator: GeoLocator,
        favorites: FavoritesStore,
        lookup: Callable[[str], str],
        renderer: ViewRenderer | None = None,
        search_radius_meters: int = DEFAULT_SEARCH_RADIUS_METERS,
        location_options: LocationOptions | None = None,
    ) -> None:
        self._client = client
        self._locator = locator
        self._favorites = favorites
        self._lookup = lookup
        self._renderer = renderer
        self._search_radius_meters = search_radius_meters
        self._location_options = location_options or LocationOptions()
        self._states: dict[str, ViewState] = {flow: ViewState.idle() for flow in FLOWS}
        self._generations: dict[str, int] = {flow: 0 for flow in FLOWS}
        self._retry_slot: str | None = None
        self._current_stop: StopSummary | None = None
        self._current_departure: DepartureSummary | None = None

    # -- state access -----------------------------------------------------

    def state(self, flow: str) -> ViewState:
        return self._states[flow]

    @property
    def retry_slot(self) -> str | None:
        return self._retry_slot

    @property
    def current_stop(self) -> StopSummary | None:
        return self._current_stop

    @property
    def current_departure(self) -> DepartureSummary | None:
        return self._current_departure

    def screen(self, flow: str) -> Screen:
        state = self._states[flow]
        retry_available = self._retry_slot == flow
        if flow == STOPS:
            return compose_stops_screen(state, self._favorites.list(), self._lookup, retry_available)
        if flow == DEPARTURES:
            is_favorite = self._current_stop is not None and self._favorites.is_favorite(self._current_stop.id)
            return compose_departures_screen(state, self._current_stop, is_favorite, self._lookup, retry_available)
        if flow == TRIP:
            return compose_trip_screen(state, self._current_departure, self._lookup)
        raise ValueError(f"Unknown flow: {flow}")

    # -- stops flow -------------------------------------------------------

    def refresh_stops(self) -> None:
        """Locate the rider and search for stops around them."""
        logger.info("Updating nearby stops")
        context = self._begin(STOPS)
        self._set_state(STOPS, ViewState.locating())
        self._locator.acquire(self._location_options, lambda outcome: self._on_location(context, outcome))

    def _on_location(self, context: FlowContext, outcome: LocationOutcome) -> None:
        if not self._is_current(context):
            return
        if isinstance(outcome, LocationError):
            logger.warning("Location error (%s): %s", outcome.code, outcome.message)
            self._set_state(STOPS, ViewState.error(outcome.message, retryable=False, kind=LOCATION_UNAVAILABLE))
            return

        self._set_retry_slot(None)
        self._set_state(STOPS, ViewState.searching())
        self._client.fetch_nearby_stops(
            outcome.latitude,
            outcome.longitude,
            self._search_radius_meters,
            lambda result: self._on_stops(context, result),
            reference=outcome,
            granularity=outcome.accuracy_meters,
        )

    def _on_stops(self, context: FlowContext, result: FetchResult) -> None:
        if not self._is_current(context):
            return
        self._set_retry_slot(STOPS)
        if result.failure is not None:
            self._set_state(STOPS, ViewState.error(result.failure.message, retryable=True, kind=result.failure.kind))
            return
        self._set_state(STOPS, ViewState.loaded(result.items))
        logger.info("Stop update complete (%s stops)", len(result.items))

    # -- departures flow --------------------------------------------------

    def show_departures(self, stop: StopSummary) -> None:
        """Load departures for ``stop``; it is remembered for refresh and favorites."""
        logger.info("Updating departures for stop %s", stop.id)
        context = self._begin(DEPARTURES)
        self._current_stop = stop
        self._set_state(DEPARTURES, ViewState.searching())
        self._client.fetch_departures_for_stop(stop.id, lambda result: self._on_departures(context, result))

    def refresh_departures(self) -> None:
        if self._current_stop is None:
            return
        logger.info("Refreshing departures for stop %s", self._current_stop.id)
        self.show_departures(self._current_stop)

    def _on_departures(self, context: FlowContext, result: FetchResult) -> None:
        if not self._is_current(context):
            return
        self._set_retry_slot(DEPARTURES)
        if result.failure is not None:
            self._set_state(DEPARTURES, ViewState.error(result.failure.message, retryable=True, kind=result.failure.kind))
            return
        self._set_state(DEPARTURES, ViewState.loaded(result.items))
        logger.info("Departure update complete (%s departures)", len(result.items))

    # -- trip detail flow -------------------------------------------------

    def show_trip_details(self, departure: DepartureSummary) -> None:
        logger.info("Loading trip details for %s", departure.trip_id)
        context = self._begin(TRIP)
        self._current_departure = departure
        self._set_state(TRIP, ViewState.searching())
        self._client.fetch_trip_details(departure.trip_id, lambda result: self._on_trip_details(context, result))

    def _on_trip_details(self, context: FlowContext, result: FetchResult) -> None:
        if not self._is_current(context):
            return
        if result.failure is not None:
            self._set_state(TRIP, ViewState.error(result.failure.message, retryable=False, kind=result.failure.kind))
            return
        self._set_state(TRIP, ViewState.loaded(result.items))
        logger.info("Trip details loaded (%s stops)", len(result.items))

    # -- side operations --------------------------------------------------

    def retry(self) -> bool:
        """Replay the flow owning the retry slot; returns False when there is none."""
        logger.info("Retrying: %s", self._retry_slot)
        if self._retry_slot == STOPS:
            self.refresh_stops()
            return True
        if self._retry_slot == DEPARTURES and self._current_stop is not None:
            self.refresh_departures()
            return True
        return False

    def toggle_favorite(self) -> None:
        """Flip the favorite state of the current stop; view states are left untouched."""
        stop = self._current_stop
        if stop is None:
            return
        wanted = not self._favorites.is_favorite(stop.id)
        logger.info("Setting favorite state of %s to %s", stop.id, wanted)
        self._favorites.set_favorite(stop, wanted)
        self._render(DEPARTURES)
        self._render(STOPS)

    def show_stop_details(self, stop: StopSummary) -> DetailCard:
        logger.info("Showing details for stop %s", stop.name)
        card = compose_stop_details(stop)
        if self._renderer is not None:
            self._renderer.show_card(card)
        return card

    # -- widget events ----------------------------------------------------

    def handle_stop_select(self, section_index: int, item_index: int) -> None:
        if section_index in (SECTION_NEARBY, SECTION_FAVORITES):
            stop = self._payload(STOPS, section_index, item_index)
            if isinstance(stop, StopSummary):
                self.show_departures(stop)
        elif section_index == SECTION_STOP_TOOLS:
            self.refresh_stops()

    def handle_stop_long_select(self, section_index: int, item_index: int) -> None:
        stop = self._payload(STOPS, section_index, item_index)
        if isinstance(stop, StopSummary):
            self.show_stop_details(stop)

    def handle_departure_select(self, section_index: int, item_index: int) -> None:
        if section_index == SECTION_DEPARTURES:
            departure = self._payload(DEPARTURES, section_index, item_index)
            if isinstance(departure, DepartureSummary):
                self.show_trip_details(departure)
        elif section_index == SECTION_DEPARTURE_TOOLS:
            if item_index == TOOL_FAVORITE:
                self.toggle_favorite()
            elif item_index == TOOL_INFO and self._current_stop is not None:
                self.show_stop_details(self._current_stop)
            elif item_index == TOOL_REFRESH:
                self.refresh_departures()

    def handle_status_click(self, button: str) -> None:
        if button != SELECT_BUTTON:
            return
        self.retry()

    # -- internals --------------------------------------------------------

    def _begin(self, flow: str) -> FlowContext:
        self._generations[flow] += 1
        self._set_retry_slot(None)
        return FlowContext(flow=flow, generation=self._generations[flow])

    def _is_current(self, context: FlowContext) -> bool:
        if context.generation != self._generations[context.flow]:
            logger.debug("Dropping stale %s completion (generation %s)", context.flow, context.generation)
            return False
        return True

    def _set_retry_slot(self, flow: str | None) -> None:
        if flow != self._retry_slot:
            logger.debug("New retry action: %s", flow)
        self._retry_slot = flow

    def _set_state(self, flow: str, state: ViewState) -> None:
        self._states[flow] = state
        self._render(flow)

    def _render(self, flow: str) -> None:
        if self._renderer is not None:
            self._renderer.render(self.screen(flow))

    def _payload(self, flow: str, section_index: int, item_index: int) -> Any:
        sections = self.screen(flow).sections
        if not 0 <= section_index < len(sections):
            return None
        items = sections[section_index].items
        if not 0 <= item_index < len(items):
            logger.warning("Ignoring selection of missing item %s/%s", section_index, item_index)
            return None
        return items[item_index].payload


__all__ = ["FlowContext", "PresentationController", "ViewRenderer"]
