#!/usr/bin/env python3

import sys
import argparse
import logging
import json

from tripwx.config import Settings
from tripwx.errors import ConfigurationError, PolylineError
from tripwx.forecast import ForecastCache
from tripwx.route import RouteWeatherService
from tripwx.sources import OpenCageGeocoder, OpenWeatherSource

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def build_service(settings: Settings) -> RouteWeatherService:
    """Wire sources, cache and service from settings."""
    source = OpenWeatherSource(settings.require_openweather_key(), timeout=settings.http_timeout_s)
    geocoder = None
    if settings.opencage_api_key:
        geocoder = OpenCageGeocoder(settings.opencage_api_key, timeout=settings.http_timeout_s)
    return RouteWeatherService(
        source,
        geocoder=geocoder,
        cache=ForecastCache(ttl=settings.cache_ttl_s),
        max_workers=settings.max_workers,
    )


def print_report(report):
    print(f"Overall score: {report.overall_score}/100")
    for point in report.waypoints:
        sample = point.sample
        print(f"  {point.waypoint.estimated_arrival_label}  {point.location_name:<30} "
              f"{sample.temperature_c}C  {sample.description}  rain {sample.rain_probability_pct}%")
    for risk in report.risks:
        print(f"  ! [{risk.severity}] {risk.location} {risk.time_label}: {risk.message}")
    for recommendation in report.recommendations:
        print(f"  - {recommendation}")
    if report.summary.is_synthetic:
        print("  (synthetic weather: live data unavailable)")


def main():
    parser = argparse.ArgumentParser(description='Weather along a route from an encoded flexible polyline')

    parser.add_argument('polyline', help='Encoded flexible polyline of the route')
    parser.add_argument('--distance', help='Route length in meters', type=float)
    parser.add_argument('--duration', help='Route duration in seconds', type=float, required=True)
    parser.add_argument('--departure', help='Departure time (ISO 8601), defaults to now')
    parser.add_argument('--mode', help='Travel mode (car, bicycle, pedestrian...)', default='car')

    # Output configuration
    parser.add_argument('--json', help='JSON output file')
    parser.add_argument('--csv', help='CSV output file, one row per waypoint')

    parser.add_argument('-v', '--verbose', help='Verbose output', action='store_true')

    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        service = build_service(Settings.from_env())
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return 1

    try:
        report = service.weather_for_route(
            args.polyline,
            total_distance_m=args.distance,
            total_duration_s=args.duration,
            departure=args.departure,
            mode=args.mode,
        )
    except PolylineError as e:
        logger.error(f"Invalid polyline: {e}")
        return 1

    print_report(report)

    if args.json:
        with open(args.json, 'w') as f:
            json.dump(report.to_dict(), f, indent=2, ensure_ascii=False)
        logger.info(f"Saved report to {args.json}")

    if args.csv:
        report.to_dataframe().to_csv(args.csv, index=False)
        logger.info(f"Saved waypoints to {args.csv}")

    return 0


if __name__ == '__main__':
    sys.exit(main())
