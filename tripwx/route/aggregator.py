"""Route weather aggregation: deduplication, scoring and recommendations."""

import logging
import random
import re
from typing import List, Optional, Sequence, Tuple

from tripwx.config import DEDUP_DISTANCE_M
from tripwx.forecast.demo import generate_demo_sample
from tripwx.route.models import (
    ReportSummary,
    RoutePointWeather,
    RouteWeatherReport,
    WeatherRisk,
)
from tripwx.utils.numbers import round_half_up

logger = logging.getLogger(__name__)

# Marker glyphs prefixed to display names (origin, destination, waypoint)
_GLYPH_PREFIX = re.compile(r'^[\U0001F6A9\U0001F3C1\U0001F4CD\uFFFD]\s*')

MIXED_MODE_PRECIPITATION_FACTOR = 1.3
MIXED_MODE_RAIN_PROBABILITY_FACTOR = 1.2
CYCLING_WIND_FACTOR = 1.2


def location_key(point: RoutePointWeather) -> str:
    """Name used to recognise repeated locations, without marker glyphs."""
    name = point.location_name
    if not name:
        return f"{point.waypoint.lat}_{point.waypoint.lng}"
    return _GLYPH_PREFIX.sub('', name).strip()


def deduplicate(points: Sequence[RoutePointWeather]) -> List[RoutePointWeather]:
    """
    Drop intermediate points that resolve to an already seen location.

    Origin and destination are always kept and never mark a location as
    seen. A repeated intermediate location is kept only when it lies more
    than DEDUP_DISTANCE_M along the route from the first kept point with the
    same name, origin and destination included.

    Args:
        points: Points in route order

    Returns:
        Kept points in route order
    """
    kept: List[RoutePointWeather] = []
    first_kept_by_key = {}
    seen = set()

    for point in points:
        key = location_key(point)
        if point.waypoint.type.is_endpoint:
            first_kept_by_key.setdefault(key, point)
            kept.append(point)
            continue

        if key not in seen:
            seen.add(key)
            first_kept_by_key.setdefault(key, point)
            kept.append(point)
            continue

        previous = first_kept_by_key[key]
        gap = abs(point.distance_from_start_m - previous.distance_from_start_m)
        if gap > DEDUP_DISTANCE_M:
            logger.debug("Keeping repeated location %r (%.0fm apart)", key, gap)
            kept.append(point)
        else:
            logger.debug("Removing duplicate waypoint %r (%.0fm apart)", key, gap)

    if len(kept) != len(points):
        logger.info("Deduplicated waypoints: %d -> %d", len(points), len(kept))
    return kept


def _display_name(point: RoutePointWeather, index: int) -> str:
    return point.location_name or f"Waypoint {index + 1}"


def score_point(
    point: RoutePointWeather,
    index: int = 0,
) -> Tuple[float, List[WeatherRisk], List[WeatherRisk]]:
    """
    Score travel suitability at one point.

    Starts at 100 and subtracts penalties for temperature extremes,
    precipitation, rain probability, wind, low visibility, humid heat and
    extreme apparent temperature. Precipitation and rain probability weigh
    more on mixed-mode segments, wind more when cycling.

    Args:
        point: Point with a weather sample
        index: Position in the route, used for unnamed points

    Returns:
        Tuple of (score clamped to >= 0, risks, alerts)
    """
    sample = point.sample
    name = _display_name(point, index)
    time_label = point.waypoint.estimated_arrival_label
    mixed = point.waypoint.is_mixed_mode
    cycling = point.waypoint.mode == 'bicycle'
    risks: List[WeatherRisk] = []
    alerts: List[WeatherRisk] = []
    score = 100.0

    def risk(kind: str, severity: str, message: str) -> None:
        risks.append(WeatherRisk(kind, name, time_label, message, severity))

    def alert(kind: str, message: str) -> None:
        alerts.append(WeatherRisk(kind, name, time_label, message))

    temperature = sample.temperature_c
    if temperature is not None:
        if temperature < -5:
            score -= 30
            risk('extreme_cold', 'high', 'Extreme cold weather - risk of ice')
        elif temperature < 0:
            score -= 20
            risk('cold', 'medium', 'Freezing temperatures - possible ice')
        elif temperature > 35:
            score -= 25
            risk('extreme_heat', 'high', 'Extreme heat - ensure hydration')

    factor = MIXED_MODE_PRECIPITATION_FACTOR if mixed else 1.0
    precipitation = sample.precipitation_mm or 0
    if precipitation > 20:
        score -= 40 * factor
        risk('heavy_rain', 'high',
             'Heavy rain - cycling and walking both difficult' if mixed
             else 'Heavy rain - reduce speed, increase distance')
    elif precipitation > 10:
        score -= 25 * factor
        risk('moderate_rain', 'medium',
             'Moderate rain - both cycling and walking affected' if mixed
             else 'Moderate rain - drive carefully')
    elif precipitation > 2:
        score -= 10 * factor

    factor = MIXED_MODE_RAIN_PROBABILITY_FACTOR if mixed else 1.0
    probability = sample.rain_probability_pct or 0
    suffix = ' (affects both cycling and walking)' if mixed else ''
    if probability > 80:
        score -= 25 * factor
        risk('very_high_rain_probability', 'high', f"{probability}% chance of rain - very likely{suffix}")
    elif probability > 60:
        score -= 15 * factor
        risk('high_rain_probability', 'medium', f"{probability}% chance of rain - likely{suffix}")
    elif probability > 40:
        score -= 8 * factor
        alert('moderate_rain_probability', f"{probability}% chance of rain - possible{suffix}")
    elif probability > 20:
        score -= 3 * factor

    factor = CYCLING_WIND_FACTOR if cycling or mixed else 1.0
    wind = sample.wind_speed_kmh or 0
    if wind > 25:
        score -= 30 * factor
        risk('strong_wind', 'high',
             'Strong winds - very difficult for cycling' if cycling
             else 'Strong winds - difficult for high vehicles')
    elif wind > 15:
        score -= 15 * factor
        risk('moderate_wind', 'medium',
             'Moderate winds - cycling will be challenging' if cycling
             else 'Moderate winds - drive carefully')

    visibility = sample.visibility_km
    if visibility is not None:
        if visibility < 1:
            score -= 35
            risk('poor_visibility', 'high', 'Very poor visibility - extreme caution required')
        elif visibility < 5:
            score -= 20
            risk('reduced_visibility', 'medium', 'Reduced visibility - use lights and high visibility clothing')

    humidity = sample.humidity_pct or 0
    if humidity > 85 and temperature is not None and temperature > 25:
        score -= 10
        alert('high_humidity', f"Very humid conditions ({humidity}%) - uncomfortable in heat")
    elif humidity > 90:
        score -= 5

    feels_like = sample.feels_like_c
    if feels_like is not None and temperature is not None and abs(feels_like - temperature) > 5:
        if feels_like < -5 or feels_like > 35:
            score -= 15
        elif feels_like < 0 or feels_like > 30:
            score -= 8

    return max(0.0, score), risks, alerts


def recommendations_for(score: int, mixed_mode: bool = False) -> List[str]:
    """Advice for an overall score."""
    if score >= 85:
        advice = ['Excellent conditions for travel']
        extra = 'Good conditions for both cycling and walking segments'
    elif score >= 70:
        advice = ['Good conditions for travel', 'Check weather updates before departure']
        extra = 'Generally good for mixed-mode segments'
    elif score >= 55:
        advice = ['Fair conditions - travel with caution', 'Consider postponing non-essential travel']
        extra = 'Mixed-mode route may be more challenging in these conditions'
    elif score >= 40:
        advice = ['Poor conditions - avoid travel if possible', 'If travel is necessary, take extra precautions']
        extra = 'Mixed-mode travel not recommended in these conditions'
    else:
        advice = ['Very poor conditions - strongly avoid travel', 'Wait for weather to improve']
        extra = 'Mixed-mode travel dangerous in these conditions'
    if mixed_mode:
        advice.append(extra)
    return advice


def fill_missing_samples(
    points: Sequence[RoutePointWeather],
    rng: Optional[random.Random] = None,
) -> Tuple[List[RoutePointWeather], int]:
    """
    Substitute synthetic samples for points whose weather lookup failed.

    Returns:
        Tuple of (points, number of substituted samples)
    """
    filled = []
    substituted = 0
    for index, point in enumerate(points):
        if point.sample is None:
            sample = generate_demo_sample(
                rng=rng,
                timestamp=point.waypoint.estimated_arrival_epoch,
                is_current=index == 0,
            )
            point = RoutePointWeather(point.waypoint, sample, point.location_name)
            substituted += 1
        filled.append(point)
    if substituted:
        logger.warning("Substituted synthetic weather for %d of %d points", substituted, len(points))
    return filled, substituted


def build_report(
    points: Sequence[RoutePointWeather],
    route_distance_m: Optional[float] = None,
    route_duration_s: Optional[float] = None,
    rng: Optional[random.Random] = None,
) -> RouteWeatherReport:
    """
    Combine per-point weather into a route report.

    Points without a sample get synthetic weather, duplicates are removed and
    every remaining point is scored; the overall score is the rounded mean.

    Args:
        points: Points in route order, sample None where retrieval failed
        route_distance_m: Route length, recorded in the summary
        route_duration_s: Route duration, recorded in the summary
        rng: Random source for synthetic substitutes

    Returns:
        RouteWeatherReport
    """
    filled, substituted = fill_missing_samples(points, rng)
    kept = deduplicate(filled)

    risks: List[WeatherRisk] = []
    alerts: List[WeatherRisk] = []
    total = 0.0
    for index, point in enumerate(kept):
        score, point_risks, point_alerts = score_point(point, index)
        total += score
        risks.extend(point_risks)
        alerts.extend(point_alerts)

    overall = round_half_up(total / len(kept)) if kept else 0
    mixed_mode = any(p.waypoint.is_mixed_mode for p in kept)
    summary = ReportSummary(
        total_waypoints=len(kept),
        original_waypoint_count=len(points),
        removed_duplicates=len(filled) - len(kept),
        route_distance_m=route_distance_m,
        route_duration_s=route_duration_s,
        substituted_samples=substituted,
        is_synthetic=bool(points) and substituted == len(points),
    )
    logger.info("Route weather score %d over %d points (%d risks)", overall, len(kept), len(risks))
    return RouteWeatherReport(
        waypoints=kept,
        overall_score=overall,
        risks=risks,
        recommendations=recommendations_for(overall, mixed_mode),
        alerts=alerts,
        summary=summary,
    )
