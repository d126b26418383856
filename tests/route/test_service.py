"""Tests for RouteWeatherService."""

import random
from unittest.mock import MagicMock, patch

import pytest

from tripwx.errors import PolylineError, WeatherSourceError
from tripwx.forecast.cache import ForecastCache
from tripwx.forecast.models import ForecastBand
from tripwx.geometry import flexpolyline
from tripwx.route.models import Waypoint, WaypointType
from tripwx.route.service import RouteWeatherService, display_name

COORDS = [(48.85, 2.35), (48.86, 2.36), (48.87, 2.37)]
NAMES = {48.85: 'Paris', 48.86: 'Bercy', 48.87: 'Vincennes'}


def make_source(payload):
    """Create a mock weather source returning a fixed payload."""
    source = MagicMock()
    source.fetch_onecall.return_value = payload
    return source


def make_geocoder():
    geocoder = MagicMock()
    geocoder.reverse.side_effect = lambda lat, lng: NAMES[lat]
    return geocoder


class TestDisplayName:
    """Marker glyphs and generic labels."""

    def test_named(self):
        assert display_name(Waypoint(0, 0, type=WaypointType.ORIGIN), 'Paris', 0) == '\U0001F6A9 Paris'
        assert display_name(Waypoint(0, 0, type=WaypointType.DESTINATION), 'Lyon', 4) == '\U0001F3C1 Lyon'
        assert display_name(Waypoint(0, 0), 'Melun', 2) == '\U0001F4CD Melun'

    def test_generic(self):
        assert display_name(Waypoint(0, 0, type=WaypointType.ORIGIN), None, 0) == 'Origin'
        assert display_name(Waypoint(0, 0, type=WaypointType.DESTINATION), None, 4) == 'Destination'
        assert display_name(Waypoint(0, 0), None, 2) == 'Waypoint 3'


class TestWeatherAtPoint:
    """Single point lookups."""

    def test_resolves_against_payload_now(self, now, make_payload):
        source = make_source(make_payload())
        service = RouteWeatherService(source, clock=lambda: now + 10)
        sample = service.weather_at_point(48.85, 2.35, now + 5 * 3600)
        assert sample.band == ForecastBand.HOUR
        source.fetch_onecall.assert_called_once_with(48.85, 2.35)

    def test_default_target_is_now(self, now, make_payload):
        service = RouteWeatherService(make_source(make_payload()), clock=lambda: now)
        assert service.weather_at_point(48.85, 2.35).band == ForecastBand.INSTANT

    def test_cached(self, now, make_payload):
        source = make_source(make_payload())
        cache = ForecastCache()
        service = RouteWeatherService(source, cache=cache, clock=lambda: now)
        first = service.weather_at_point(48.85, 2.35, now)
        second = service.weather_at_point(48.85, 2.35, now)
        assert first is second
        assert source.fetch_onecall.call_count == 1
        assert cache.stats()['hits'] == 1

    def test_failure_returns_synthetic(self, now):
        source = MagicMock()
        source.fetch_onecall.side_effect = WeatherSourceError("unavailable")
        service = RouteWeatherService(source, rng=random.Random(5), clock=lambda: now)
        sample = service.weather_at_point(48.85, 2.35, now + 60)
        assert sample.is_synthetic
        assert sample.timestamp == now + 60

    def test_empty_payload_returns_synthetic(self, now):
        service = RouteWeatherService(make_source({}), rng=random.Random(5), clock=lambda: now)
        assert service.weather_at_point(48.85, 2.35, now).is_synthetic


class TestWeatherForRoute:
    """End-to-end route reports."""

    def test_coordinates(self, now, make_payload):
        service = RouteWeatherService(
            make_source(make_payload()), geocoder=make_geocoder(), clock=lambda: now,
        )
        report = service.weather_for_route(COORDS, total_duration_s=600, departure=now)
        assert [p.location_name for p in report.waypoints] == [
            '\U0001F6A9 Paris', '\U0001F4CD Bercy', '\U0001F3C1 Vincennes',
        ]
        assert [p.sample.band for p in report.waypoints] == [
            ForecastBand.INSTANT, ForecastBand.MINUTE, ForecastBand.MINUTE,
        ]
        assert report.waypoints[0].waypoint.estimated_arrival_epoch == now
        assert report.waypoints[-1].waypoint.estimated_arrival_epoch == now + 600
        assert not report.summary.is_synthetic
        assert 0 <= report.overall_score <= 100

    def test_encoded_polyline(self, now, make_payload):
        source = make_source(make_payload())
        service = RouteWeatherService(source, clock=lambda: now)
        encoded = flexpolyline.encode(COORDS)
        report = service.weather_for_route(encoded, total_duration_s=600, departure=now)
        assert len(report.waypoints) == 3
        assert report.waypoints[0].location_name == 'Origin'
        assert source.fetch_onecall.call_count == 3

    def test_invalid_polyline_raises(self, now, make_payload):
        service = RouteWeatherService(make_source(make_payload()), clock=lambda: now)
        with pytest.raises(PolylineError):
            service.weather_for_route("BF!", total_duration_s=600, departure=now)

    def test_source_down_gives_synthetic_report(self, now):
        source = MagicMock()
        source.fetch_onecall.side_effect = WeatherSourceError("unavailable")
        service = RouteWeatherService(source, rng=random.Random(2), clock=lambda: now)
        report = service.weather_for_route(COORDS, total_duration_s=600, departure=now)
        assert report.summary.is_synthetic
        assert report.summary.substituted_samples == 3
        assert all(p.sample.is_synthetic for p in report.waypoints)

    def test_pipeline_failure_gives_synthetic_report(self, now, make_payload):
        service = RouteWeatherService(make_source(make_payload()), rng=random.Random(2), clock=lambda: now)
        with patch('tripwx.route.service.compute_timings', side_effect=RuntimeError("boom")):
            report = service.weather_for_route(COORDS, total_duration_s=600, departure=now)
        assert report.summary.is_synthetic
        assert [p.location_name for p in report.waypoints] == ['Origin', 'Waypoint 2', 'Destination']

    def test_geocoder_failure_keeps_real_weather(self, now, make_payload):
        geocoder = MagicMock()
        geocoder.reverse.side_effect = RuntimeError("boom")
        service = RouteWeatherService(
            make_source(make_payload()), geocoder=geocoder, rng=random.Random(2), clock=lambda: now,
        )
        report = service.weather_for_route(COORDS, total_duration_s=600, departure=now)
        assert not report.summary.is_synthetic
        assert report.summary.substituted_samples == 0
        assert not any(p.sample.is_synthetic for p in report.waypoints)
        assert [p.location_name for p in report.waypoints] == ['Origin', 'Waypoint 2', 'Destination']

    def test_transit_stops_mixed_mode(self, now, make_payload):
        stops = [
            {'lat': 48.85, 'lng': 2.35, 'mode': 'bicycle', 'name': 'Home'},
            {'lat': 48.86, 'lng': 2.36, 'mode': 'pedestrian', 'distance': 1500},
            {'lat': 48.87, 'lng': 2.37, 'mode': 'pedestrian', 'name': 'Office'},
        ]
        service = RouteWeatherService(make_source(make_payload()), clock=lambda: now)
        report = service.weather_for_route(
            [], total_distance_m=3000, total_duration_s=1200, departure=now, transit_stops=stops,
        )
        assert report.waypoints[0].location_name == '\U0001F6A9 Home'
        assert report.waypoints[1].waypoint.type == WaypointType.MODE_TRANSITION
        assert all(p.waypoint.is_mixed_mode for p in report.waypoints)
        assert report.recommendations[-1] == 'Good conditions for both cycling and walking segments'
