"""Route weather service: waypoint sampling, concurrent lookups and aggregation."""

import logging
import random
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

from tripwx.config import DEFAULT_MAX_WORKERS
from tripwx.errors import TripWxError
from tripwx.forecast.cache import ForecastCache
from tripwx.forecast.demo import generate_demo_sample
from tripwx.forecast.models import WeatherSample
from tripwx.forecast.sample_builder import resolve_sample
from tripwx.geometry import flexpolyline
from tripwx.geometry.coordinate import CoordinateLike
from tripwx.route.aggregator import build_report
from tripwx.route.models import (
    RoutePointWeather,
    RouteWeatherReport,
    Waypoint,
    WaypointType,
)
from tripwx.route.waypoints import compute_timings, extract_transit_waypoints, extract_waypoints
from tripwx.utils.time_utils import TimeLike

logger = logging.getLogger(__name__)

ORIGIN_MARK = '\U0001F6A9'
DESTINATION_MARK = '\U0001F3C1'
WAYPOINT_MARK = '\U0001F4CD'

MIXED_MODES = {'bicycle', 'pedestrian'}

RouteGeometry = Union[str, Sequence[CoordinateLike]]


def display_name(waypoint: Waypoint, place: Optional[str], index: int) -> str:
    """Marker-prefixed name, or a generic label when no place is known."""
    if waypoint.type == WaypointType.ORIGIN:
        return f"{ORIGIN_MARK} {place}" if place else "Origin"
    if waypoint.type == WaypointType.DESTINATION:
        return f"{DESTINATION_MARK} {place}" if place else "Destination"
    return f"{WAYPOINT_MARK} {place}" if place else f"Waypoint {index + 1}"


class RouteWeatherService:
    """
    Orchestrates weather retrieval along a route.

    Samples waypoints from the route geometry (or transit stops), estimates
    arrival times, looks up the forecast valid at each arrival concurrently,
    then deduplicates and scores the result.

    Weather failures never abort a report: a failed point gets synthetic
    weather, and a failure of the whole pipeline yields a fully synthetic
    report. Invalid encoded polylines are the exception and always raise.

    Example:
        from tripwx.route import RouteWeatherService
        from tripwx.sources import OpenWeatherSource, OpenCageGeocoder

        service = RouteWeatherService(
            OpenWeatherSource(api_key="..."),
            geocoder=OpenCageGeocoder(api_key="..."),
        )
        report = service.weather_for_route(
            "BFoz5xJ67i1B1B7PzIhaxL7Y",
            total_distance_m=1200,
            total_duration_s=600,
            departure="2024-06-01T08:00:00+02:00",
        )
        print(report.overall_score, report.recommendations)
    """

    def __init__(
        self,
        weather_source,
        geocoder=None,
        cache: Optional[ForecastCache] = None,
        rng: Optional[random.Random] = None,
        max_workers: int = DEFAULT_MAX_WORKERS,
        clock: Callable[[], float] = time.time,
    ):
        """
        Args:
            weather_source: Object with fetch_onecall(lat, lng) -> dict
            geocoder: Optional object with reverse(lat, lng) -> str
            cache: Forecast cache; a private one is created when omitted
            rng: Random source for synthetic substitutes
            max_workers: Concurrent lookups per route
            clock: Callable returning epoch seconds, used when no target is given
        """
        self._source = weather_source
        self._geocoder = geocoder
        self.cache = cache if cache is not None else ForecastCache()
        self._rng = rng
        self._max_workers = max_workers
        self._clock = clock

    def _lookup(self, lat: float, lng: float, target: int) -> Optional[WeatherSample]:
        cached = self.cache.get(lat, lng, target)
        if cached is not None:
            return cached
        try:
            payload = self._source.fetch_onecall(lat, lng)
            current = payload.get('current') or {}
            now = int(current.get('dt') or self._clock())
            sample = resolve_sample(now, target, payload)
        except (TripWxError, KeyError, TypeError, ValueError) as e:
            logger.warning("Weather lookup failed at (%.4f, %.4f): %s", lat, lng, e)
            return None
        self.cache.set(lat, lng, target, sample)
        return sample

    def weather_at_point(self, lat: float, lng: float, target: Optional[int] = None) -> WeatherSample:
        """
        Forecast valid at a position and time.

        Args:
            lat: Latitude in decimal degrees
            lng: Longitude in decimal degrees
            target: Epoch seconds; defaults to now

        Returns:
            WeatherSample, synthetic when the lookup failed
        """
        if target is None:
            target = int(self._clock())
        sample = self._lookup(lat, lng, target)
        if sample is None:
            return generate_demo_sample(rng=self._rng, timestamp=target)
        return sample

    def _place_name(self, waypoint: Waypoint) -> Optional[str]:
        if waypoint.place_name:
            return waypoint.place_name
        if self._geocoder is None:
            return None
        try:
            return self._geocoder.reverse(waypoint.lat, waypoint.lng)
        except Exception as e:
            logger.warning("Place lookup failed at (%.4f, %.4f): %s", waypoint.lat, waypoint.lng, e)
            return None

    def _resolve_point(self, index: int, waypoint: Waypoint) -> RoutePointWeather:
        target = waypoint.estimated_arrival_epoch
        if target is None:
            target = int(self._clock())
        sample = self._lookup(waypoint.lat, waypoint.lng, target)
        name = display_name(waypoint, self._place_name(waypoint), index)
        return RoutePointWeather(waypoint, sample, name)

    def _build_waypoints(
        self,
        route: RouteGeometry,
        total_distance_m: Optional[float],
        transit_stops: Optional[Sequence[Dict[str, Any]]],
        mode: Optional[str],
        mixed_mode: bool,
    ) -> List[Waypoint]:
        if transit_stops:
            waypoints = extract_transit_waypoints(transit_stops, total_distance_m)
            modes = {w.mode for w in waypoints}
            mixed_mode = mixed_mode or MIXED_MODES <= modes
        else:
            waypoints = extract_waypoints(route, total_distance_m, mode)
        if mixed_mode:
            waypoints = [replace(w, is_mixed_mode=True) for w in waypoints]
        return waypoints

    def weather_for_route(
        self,
        route: RouteGeometry,
        total_distance_m: Optional[float] = None,
        total_duration_s: float = 0,
        departure: Optional[TimeLike] = None,
        transit_stops: Optional[Sequence[Dict[str, Any]]] = None,
        mode: Optional[str] = None,
        mixed_mode: bool = False,
    ) -> RouteWeatherReport:
        """
        Weather report for a route.

        Args:
            route: Encoded flexible polyline or a sequence of (lat, lng) points
            total_distance_m: Route length from the router
            total_duration_s: Travel time for the whole route
            departure: Departure time; defaults to now
            transit_stops: Transit itinerary stops, used instead of the geometry
            mode: Travel mode (car, bicycle, pedestrian...)
            mixed_mode: Route mixes cycling and walking segments

        Returns:
            RouteWeatherReport

        Raises:
            PolylineError: When `route` is an invalid encoded polyline
        """
        # Codec errors surface to the caller
        if isinstance(route, str):
            route = flexpolyline.decode(route)

        if departure is None:
            departure = int(self._clock())

        waypoints: List[Waypoint] = []
        try:
            waypoints = self._build_waypoints(route, total_distance_m, transit_stops, mode, mixed_mode)
            waypoints = compute_timings(waypoints, total_duration_s, departure)
            logger.info("Fetching weather for %d waypoints", len(waypoints))

            with ThreadPoolExecutor(max_workers=self._max_workers) as executor:
                futures = [
                    executor.submit(self._resolve_point, index, waypoint)
                    for index, waypoint in enumerate(waypoints)
                ]
                points = [future.result() for future in futures]

            return build_report(points, total_distance_m, total_duration_s, rng=self._rng)
        except Exception:
            logger.exception("Route weather pipeline failed, returning synthetic report")
            return self.synthetic_report(waypoints, total_distance_m, total_duration_s)

    def synthetic_report(
        self,
        waypoints: Sequence[Waypoint],
        total_distance_m: Optional[float] = None,
        total_duration_s: Optional[float] = None,
    ) -> RouteWeatherReport:
        """
        Report built only from synthetic weather.

        Used when the real pipeline cannot complete; with no waypoints at all
        a single synthetic origin point is reported.
        """
        if not waypoints:
            now = int(self._clock())
            waypoints = [Waypoint(0.0, 0.0, 0.0, WaypointType.ORIGIN, estimated_arrival_epoch=now)]
        points = [
            RoutePointWeather(w, None, display_name(w, w.place_name, index))
            for index, w in enumerate(waypoints)
        ]
        report = build_report(points, total_distance_m, total_duration_s, rng=self._rng)
        report.summary.is_synthetic = True
        return report

