"""FUTÁR (OneBusAway-style) transit API client.

Each fetch issues exactly one request through the transport and hands the
callback a FetchResult. Payload shape differences are resolved in the
``_extract_*`` helpers; nothing raises past the client.
"""

from __future__ import annotations

from datetime import datetime, tzinfo
import json
import logging
from typing import Any, Callable
from urllib.parse import quote, urlencode

from futar.config import DEFAULT_API_BASE
from futar.data.geo import geo_distance
from futar.data.models import (
    COMMUNICATION_ERROR,
    Coordinates,
    DepartureSummary,
    Failure,
    FetchResult,
    RouteRef,
    StopSummary,
    TripStopSummary,
)
from futar.data.text import fix_accents
from futar.data.transport import Transport, TransportResult

logger = logging.getLogger(__name__)

GENERIC_ERROR_KEY = "error_generic_comm"
TRIP_TIME_FIELDS = ("predictedArrivalTime", "arrivalTime", "predictedDepartureTime", "departureTime")

ResultCallback = Callable[[FetchResult], None]


class TransitParseError(Exception):
    """Raised when a response body cannot be turned into normalized records."""


def _load_envelope(body: str) -> dict[str, Any]:
    try:
        envelope = json.loads(body)
    except ValueError as exc:
        raise TransitParseError("Response was not valid JSON") from exc
    if not isinstance(envelope, dict):
        raise TransitParseError("Response envelope must be an object")
    return envelope


def _data_section(envelope: dict[str, Any]) -> Any:
    data = envelope.get("data")
    if data is None:
        raise TransitParseError("Response has no 'data' section")
    return data


def _references(data: Any, kind: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        return {}
    references = data.get("references") or {}
    table = references.get(kind) if isinstance(references, dict) else None
    return table if isinstance(table, dict) else {}


def _extract_stop_list(data: Any) -> list[Any]:
    if not isinstance(data, dict):
        raise TransitParseError("Stops response 'data' must be an object")
    stops = data.get("stops") or data.get("list") or []
    if not isinstance(stops, list):
        raise TransitParseError("Stops list must be an array")
    return stops


def _extract_departure_list(data: Any) -> list[Any]:
    if isinstance(data, list):
        return data
    if not isinstance(data, dict):
        raise TransitParseError("Departures response 'data' has an unexpected shape")
    entry = data.get("entry")
    if entry:
        if not isinstance(entry, dict):
            raise TransitParseError("Departures 'entry' must be an object")
        departures = entry.get("arrivalsAndDepartures") or []
    else:
        departures = data.get("arrivalsAndDepartures") or []
    if not isinstance(departures, list):
        raise TransitParseError("Departures list must be an array")
    return departures


def _extract_stop_times(data: Any) -> list[Any]:
    if not isinstance(data, dict) or not isinstance(data.get("entry"), dict):
        raise TransitParseError("Trip details response has no 'entry' object")
    stop_times = data["entry"].get("stopTimes") or []
    if not isinstance(stop_times, list):
        raise TransitParseError("Trip stop times must be an array")
    return stop_times


def _build_route_table(raw_routes: dict[str, Any]) -> dict[str, RouteRef]:
    routes: dict[str, RouteRef] = {}
    for route_id, raw in raw_routes.items():
        if not isinstance(raw, dict):
            continue
        short_name = raw.get("shortName")
        long_name = raw.get("longName")
        try:
            route_type = int(raw.get("type") or 0)
        except (TypeError, ValueError):
            route_type = 0
        routes[route_id] = RouteRef(
            id=str(raw.get("id") or route_id),
            short_name=fix_accents(short_name) if short_name else None,
            long_name=fix_accents(long_name) if long_name else None,
            type=route_type,
            description=fix_accents(raw.get("description")),
        )
    return routes


def parse_stops(body: str, reference: Coordinates | None = None, granularity: float = 1) -> list[StopSummary]:
    """Parse a stops-for-location response into stops sorted by distance."""
    data = _data_section(_load_envelope(body))
    raw_stops = _extract_stop_list(data)
    routes = _build_route_table(_references(data, "routes"))

    stops: list[StopSummary] = []
    for raw in raw_stops:
        if not isinstance(raw, dict):
            continue
        route_ids = raw.get("routeIds") or []
        if not isinstance(route_ids, list) or not route_ids:
            continue

        distance = 0
        if reference is not None:
            try:
                distance = geo_distance(
                    reference.latitude,
                    reference.longitude,
                    float(raw["lat"]),
                    float(raw["lon"]),
                    granularity,
                )
            except (KeyError, TypeError, ValueError) as exc:
                raise TransitParseError(f"Stop {raw.get('id')} has no usable position") from exc

        stop = StopSummary(
            id=str(raw.get("id") or ""),
            name=fix_accents(raw.get("name")),
            distance_meters=distance,
            routes=tuple(routes.get(route_id) if isinstance(route_id, str) else None for route_id in route_ids),
        )
        logger.debug('Stop "%s" => %s (%sm)', stop.name, stop.title, stop.distance_meters)
        stops.append(stop)

    stops.sort(key=lambda s: s.distance_meters)
    return stops


def parse_departures(body: str) -> list[DepartureSummary]:
    """Parse an arrivals-and-departures response; ETAs are relative to the server clock."""
    envelope = _load_envelope(body)
    departures_raw = _extract_departure_list(_data_section(envelope))
    current_time = envelope.get("currentTime")

    departures: list[DepartureSummary] = []
    for raw in departures_raw:
        if not isinstance(raw, dict):
            continue
        predicted = raw.get("predictedArrivalTime") or raw.get("scheduledArrivalTime") or 0
        eta_millis = None
        if predicted and current_time is not None:
            try:
                eta_millis = int(predicted) - int(current_time)
            except (TypeError, ValueError) as exc:
                raise TransitParseError("Departure time is not a number") from exc
        departures.append(
            DepartureSummary(
                route_id=str(raw.get("routeId") or ""),
                trip_id=str(raw.get("tripId") or ""),
                route_short_name=fix_accents(raw.get("routeShortName")),
                trip_headsign=fix_accents(raw.get("tripHeadsign")),
                eta_millis_from_now=eta_millis,
            )
        )
    return departures


def parse_trip_details(body: str, tz: tzinfo | None = None) -> list[TripStopSummary]:
    """Parse a trip-details response; every stop time must resolve or the parse fails."""
    data = _data_section(_load_envelope(body))
    stop_times = _extract_stop_times(data)
    ref_stops = _references(data, "stops")

    stops: list[TripStopSummary] = []
    for index, raw in enumerate(stop_times):
        if not isinstance(raw, dict):
            raise TransitParseError(f"Stop time #{index} is not an object")
        stop_id = raw.get("stopId")
        if not isinstance(stop_id, str):
            raise TransitParseError(f"Stop time #{index} has no stop id")
        stop_ref = ref_stops.get(stop_id)
        if not isinstance(stop_ref, dict):
            raise TransitParseError(f"Stop time #{index} references unknown stop {stop_id}")
        epoch_seconds = next((raw[f] for f in TRIP_TIME_FIELDS if raw.get(f)), None)
        if epoch_seconds is None:
            raise TransitParseError(f"Stop time #{index} has no arrival or departure time")
        try:
            arrival = datetime.fromtimestamp(float(epoch_seconds), tz)
        except (TypeError, ValueError, OverflowError, OSError) as exc:
            raise TransitParseError(f"Stop time #{index} has an invalid time") from exc
        stops.append(
            TripStopSummary(
                stop_name=fix_accents(stop_ref.get("name")),
                arrival_local_hour=arrival.hour,
                arrival_local_minute=arrival.minute,
                raw=raw,
            )
        )
    return stops


class TransitClient:
    """Builds request URLs, parses responses and classifies failures."""

    def __init__(
        self,
        transport: Transport,
        lookup: Callable[[str], str],
        base_url: str = DEFAULT_API_BASE,
        api_key: str = "",
        tz: tzinfo | None = None,
    ) -> None:
        self._transport = transport
        self._lookup = lookup
        self._base_url = base_url if base_url.endswith("/") else base_url + "/"
        self._api_key = api_key
        self._tz = tz

    def stops_url(self, lat: float, lon: float, radius_meters: int) -> str:
        return self._url("stops-for-location.json", {"lat": lat, "lon": lon, "radius": radius_meters})

    def departures_url(self, stop_id: str) -> str:
        return self._url(f"arrivals-and-departures-for-stop/{quote(stop_id, safe='')}.json", {})

    def trip_details_url(self, trip_id: str) -> str:
        return self._url("trip-details.json", {"tripId": trip_id})

    def fetch_nearby_stops(
        self,
        lat: float,
        lon: float,
        radius_meters: int,
        callback: ResultCallback,
        reference: Coordinates | None = None,
        granularity: float = 1,
    ) -> None:
        self._request(
            "Stops",
            self.stops_url(lat, lon, radius_meters),
            lambda body: parse_stops(body, reference, granularity),
            callback,
        )

    def fetch_departures_for_stop(self, stop_id: str, callback: ResultCallback) -> None:
        self._request("Departures", self.departures_url(stop_id), parse_departures, callback)

    def fetch_trip_details(self, trip_id: str, callback: ResultCallback) -> None:
        self._request(
            "Trip details",
            self.trip_details_url(trip_id),
            lambda body: parse_trip_details(body, self._tz),
            callback,
        )

    def classify_failure(self, message: str | None) -> Failure:
        """Transport message verbatim when present, otherwise the generic communication error."""
        if message:
            return Failure(COMMUNICATION_ERROR, message)
        return Failure(COMMUNICATION_ERROR, self._lookup(GENERIC_ERROR_KEY))

    def _url(self, path: str, params: dict[str, Any]) -> str:
        query = dict(params)
        if self._api_key:
            query["key"] = self._api_key
        url = self._base_url + path
        return f"{url}?{urlencode(query)}" if query else url

    def _request(
        self,
        label: str,
        url: str,
        parse: Callable[[str], list[Any]],
        callback: ResultCallback,
    ) -> None:
        def on_response(response: TransportResult) -> None:
            if response.error or response.body is None:
                logger.warning("%s request failed: %s", label, response.message or "unknown")
                callback(FetchResult.error(self.classify_failure(response.message)))
                return
            try:
                items = parse(response.body)
            except (TransitParseError, TypeError, ValueError, AttributeError) as exc:
                logger.warning("%s response could not be parsed: %s", label, exc)
                callback(FetchResult.error(self.classify_failure(None)))
                return
            logger.info("%s request returned %s items", label, len(items))
            callback(FetchResult.success(items))

        logger.info("%s request started: %s", label, url)
        self._transport.fetch_text(url, on_response)


__all__ = [
    "TransitClient",
    "TransitParseError",
    "parse_departures",
    "parse_stops",
    "parse_trip_details",
]
