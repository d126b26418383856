"""Route weather data models."""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import List, Optional

import pandas as pd

from tripwx.forecast.models import WeatherSample


class WaypointType(Enum):
    """Role of a waypoint along a route."""

    ORIGIN = "origin"
    INTERMEDIATE = "intermediate"
    DESTINATION = "destination"
    MODE_TRANSITION = "mode-transition"
    TRANSIT_STOP = "transit-stop"

    @property
    def is_endpoint(self) -> bool:
        """Origin and destination are never dropped."""
        return self in (WaypointType.ORIGIN, WaypointType.DESTINATION)


@dataclass(frozen=True)
class Waypoint:
    """
    A point sampled along a route.

    Attributes:
        lat: Latitude in decimal degrees
        lng: Longitude in decimal degrees
        distance_from_start_m: Along-route distance from the origin, None if unknown
        type: Role of the waypoint
        mode: Travel mode at this point (car, bicycle, pedestrian, bus...)
        estimated_arrival_epoch: Estimated arrival (epoch seconds)
        estimated_arrival_label: Arrival formatted as HH:MM
        place_name: Known place name (transit stop name etc.)
        progress: Fraction of the route completed at this point (0-1)
        scheduled_epoch: Timetabled arrival, overrides the estimate
        is_mixed_mode: Point on a segment mixing cycling and walking
    """

    lat: float
    lng: float
    distance_from_start_m: Optional[float] = None
    type: WaypointType = WaypointType.INTERMEDIATE
    mode: Optional[str] = None
    estimated_arrival_epoch: Optional[int] = None
    estimated_arrival_label: Optional[str] = None
    place_name: Optional[str] = None
    progress: Optional[float] = None
    scheduled_epoch: Optional[int] = None
    is_mixed_mode: bool = False

    def with_timing(self, epoch: int, label: str, progress: Optional[float]) -> 'Waypoint':
        return replace(self, estimated_arrival_epoch=epoch, estimated_arrival_label=label, progress=progress)

    def to_dict(self) -> dict:
        return {
            'lat': self.lat,
            'lng': self.lng,
            'distance_from_start_m': self.distance_from_start_m,
            'type': self.type.value,
            'mode': self.mode,
            'estimated_arrival_epoch': self.estimated_arrival_epoch,
            'estimated_arrival_label': self.estimated_arrival_label,
            'place_name': self.place_name,
            'progress': self.progress,
        }


@dataclass(frozen=True)
class RoutePointWeather:
    """A waypoint with its weather sample and display name."""

    waypoint: Waypoint
    sample: Optional[WeatherSample]
    location_name: Optional[str] = None

    @property
    def distance_from_start_m(self) -> float:
        return self.waypoint.distance_from_start_m or 0.0

    @property
    def has_weather(self) -> bool:
        return self.sample is not None

    def to_dict(self) -> dict:
        return {
            'waypoint': self.waypoint.to_dict(),
            'weather': self.sample.to_dict() if self.sample else None,
            'location_name': self.location_name,
        }


@dataclass(frozen=True)
class WeatherRisk:
    """
    A weather hazard or comfort alert at one point.

    Attributes:
        type: Machine readable kind ("heavy_rain", "strong_wind"...)
        location: Display name of the point
        time_label: Arrival time label at the point
        message: Human readable explanation
        severity: "high" or "medium" for risks, None for alerts
    """

    type: str
    location: str
    time_label: Optional[str]
    message: str
    severity: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            'type': self.type,
            'location': self.location,
            'time': self.time_label,
            'severity': self.severity,
            'message': self.message,
        }


@dataclass
class ReportSummary:
    """Bookkeeping about how a report was produced."""

    total_waypoints: int = 0
    original_waypoint_count: int = 0
    removed_duplicates: int = 0
    route_distance_m: Optional[float] = None
    route_duration_s: Optional[float] = None
    substituted_samples: int = 0
    is_synthetic: bool = False

    def to_dict(self) -> dict:
        return {
            'total_waypoints': self.total_waypoints,
            'original_waypoint_count': self.original_waypoint_count,
            'removed_duplicates': self.removed_duplicates,
            'route_distance_m': self.route_distance_m,
            'route_duration_s': self.route_duration_s,
            'substituted_samples': self.substituted_samples,
            'is_synthetic': self.is_synthetic,
        }


@dataclass
class RouteWeatherReport:
    """
    Weather along a route with a travel suitability score.

    Attributes:
        waypoints: Deduplicated points in route order
        overall_score: Mean of per-point scores, 0-100
        risks: Hazards found along the route
        recommendations: Advice derived from the overall score
        alerts: Lower-severity comfort notices
        summary: How the report was produced
    """

    waypoints: List[RoutePointWeather] = field(default_factory=list)
    overall_score: int = 0
    risks: List[WeatherRisk] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)
    alerts: List[WeatherRisk] = field(default_factory=list)
    summary: ReportSummary = field(default_factory=ReportSummary)

    @property
    def high_risks(self) -> List[WeatherRisk]:
        return [r for r in self.risks if r.severity == 'high']

    def to_dict(self) -> dict:
        """Serialize to dictionary for JSON export."""
        return {
            'waypoints': [p.to_dict() for p in self.waypoints],
            'overall_score': self.overall_score,
            'risks': [r.to_dict() for r in self.risks],
            'recommendations': list(self.recommendations),
            'alerts': [a.to_dict() for a in self.alerts],
            'summary': self.summary.to_dict(),
        }

    def to_dataframe(self) -> pd.DataFrame:
        """One row per waypoint, for tabular export."""
        rows = []
        for point in self.waypoints:
            row = {
                'location': point.location_name,
                'type': point.waypoint.type.value,
                'lat': point.waypoint.lat,
                'lng': point.waypoint.lng,
                'distance_km': round(point.distance_from_start_m / 1000, 1),
                'arrival': point.waypoint.estimated_arrival_label,
            }
            if point.sample is not None:
                row.update(point.sample.to_dict())
            rows.append(row)
        return pd.DataFrame(rows)

    def __repr__(self) -> str:
        return f"RouteWeatherReport({len(self.waypoints)} points, score {self.overall_score})"
