"""
Route weather: waypoints along a route, the forecast at each arrival time and
an overall travel suitability score.
"""

from tripwx.route.models import (
    ReportSummary,
    RoutePointWeather,
    RouteWeatherReport,
    Waypoint,
    WaypointType,
    WeatherRisk,
)
from tripwx.route.waypoints import compute_timings, extract_transit_waypoints, extract_waypoints
from tripwx.route.aggregator import build_report, deduplicate, score_point
from tripwx.route.service import RouteWeatherService

__all__ = [
    'ReportSummary',
    'RoutePointWeather',
    'RouteWeatherReport',
    'Waypoint',
    'WaypointType',
    'WeatherRisk',
    'compute_timings',
    'extract_transit_waypoints',
    'extract_waypoints',
    'build_report',
    'deduplicate',
    'score_point',
    'RouteWeatherService',
]
