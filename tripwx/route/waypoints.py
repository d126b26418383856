"""Waypoint extraction along a route and arrival time estimation."""

import logging
import math
from dataclasses import replace
from typing import Any, Dict, List, Optional, Sequence

from tripwx.config import MIN_WAYPOINTS, WAYPOINT_SPACING_M
from tripwx.geometry.coordinate import CoordinateLike, as_coordinate, cumulative_distances
from tripwx.route.models import Waypoint, WaypointType
from tripwx.utils.time_utils import TimeLike, format_clock, parse_time, to_epoch

logger = logging.getLogger(__name__)


def extract_waypoints(
    coordinates: Sequence[CoordinateLike],
    total_distance_m: Optional[float] = None,
    mode: Optional[str] = None,
    spacing_m: float = WAYPOINT_SPACING_M,
) -> List[Waypoint]:
    """
    Sample waypoints evenly (by index) along a route geometry.

    One waypoint per `spacing_m` of route, never fewer than MIN_WAYPOINTS.
    The first and last coordinates are always included as origin and
    destination.

    Args:
        coordinates: Route geometry as Coordinates or (lat, lng) pairs
        total_distance_m: Route length reported by the router; computed from
            the geometry when omitted
        mode: Travel mode recorded on every waypoint
        spacing_m: Target distance between waypoints

    Returns:
        Waypoints in route order with along-route distances
    """
    if not coordinates:
        return []

    points = [as_coordinate(c) for c in coordinates]
    distances = cumulative_distances(points)
    if total_distance_m is None:
        total_distance_m = distances[-1]

    count = max(MIN_WAYPOINTS, math.ceil(total_distance_m / spacing_m))
    step = max(1, len(points) // (count - 1))
    last = len(points) - 1
    logger.debug("Extracting %d waypoints from %d coordinates (%.0fm)", count, len(points), total_distance_m)

    waypoints = [Waypoint(points[0].lat, points[0].lng, 0.0, WaypointType.ORIGIN, mode)]
    for i in range(1, count - 1):
        index = min(i * step, last)
        waypoints.append(Waypoint(
            points[index].lat,
            points[index].lng,
            distances[index],
            WaypointType.INTERMEDIATE,
            mode,
        ))
    waypoints.append(Waypoint(points[last].lat, points[last].lng, total_distance_m, WaypointType.DESTINATION, mode))
    return waypoints


def _stop_value(stop: Dict[str, Any], *keys: str):
    for key in keys:
        if stop.get(key) is not None:
            return stop[key]
    return None


def extract_transit_waypoints(
    stops: Sequence[Dict[str, Any]],
    total_distance_m: Optional[float] = None,
) -> List[Waypoint]:
    """
    Build waypoints from the stops of a public transport itinerary.

    Each stop is a mapping with `lat`, `lng` and optionally `distance`,
    `mode`, `place_name` (or `name`), `is_transit_stop` and `time` (scheduled
    arrival, anything `to_epoch` accepts).

    Returns:
        Waypoints typed ORIGIN / TRANSIT_STOP / MODE_TRANSITION / INTERMEDIATE
        / DESTINATION
    """
    waypoints = []
    previous_mode = None
    last = len(stops) - 1
    for index, stop in enumerate(stops):
        mode = stop.get('mode') or 'publicTransport'
        if index == 0:
            kind = WaypointType.ORIGIN
        elif index == last:
            kind = WaypointType.DESTINATION
        elif _stop_value(stop, 'is_transit_stop', 'isTransitStop'):
            kind = WaypointType.TRANSIT_STOP
        elif previous_mode is not None and mode != previous_mode:
            kind = WaypointType.MODE_TRANSITION
        else:
            kind = WaypointType.INTERMEDIATE

        distance = stop.get('distance')
        if index == last and distance is None:
            distance = total_distance_m
        scheduled = stop.get('time')
        waypoints.append(Waypoint(
            lat=float(stop['lat']),
            lng=float(stop['lng']),
            distance_from_start_m=0.0 if index == 0 else distance,
            type=kind,
            mode=mode,
            place_name=_stop_value(stop, 'place_name', 'placeName', 'name'),
            scheduled_epoch=to_epoch(scheduled) if scheduled is not None else None,
        ))
        previous_mode = mode
    return waypoints


def compute_timings(
    waypoints: Sequence[Waypoint],
    total_duration_seconds: float,
    departure: TimeLike,
) -> List[Waypoint]:
    """
    Estimate the arrival time at each waypoint.

    Progress along the route is the waypoint's distance over the final
    waypoint's distance when distances are known, otherwise its index over
    the last index. Timetabled waypoints keep their scheduled time.

    Args:
        waypoints: Waypoints in route order
        total_duration_seconds: Travel time for the whole route
        departure: Departure time (datetime, epoch seconds or ISO string)

    Returns:
        New waypoints with arrival epoch, HH:MM label and progress set; the
        first is typed ORIGIN and the last DESTINATION
    """
    if not waypoints:
        return []

    moment = parse_time(departure)
    departure_epoch = int(moment.timestamp())
    tz = moment.tzinfo
    total = total_duration_seconds or 0
    last = len(waypoints) - 1
    route_distance = waypoints[last].distance_from_start_m

    timed = []
    for index, waypoint in enumerate(waypoints):
        if waypoint.distance_from_start_m is not None and route_distance:
            progress = waypoint.distance_from_start_m / route_distance
        else:
            progress = index / max(1, last)
        progress = min(1.0, max(0.0, progress))

        if waypoint.scheduled_epoch is not None:
            arrival = waypoint.scheduled_epoch
        else:
            arrival = departure_epoch + round(total * progress)

        if index == 0:
            waypoint = replace(waypoint, type=WaypointType.ORIGIN)
        elif index == last:
            waypoint = replace(waypoint, type=WaypointType.DESTINATION)
        timed.append(waypoint.with_timing(arrival, format_clock(arrival, tz), progress))

    logger.debug("Timed %d waypoints over %ss from %d", len(timed), total, departure_epoch)
    return timed
