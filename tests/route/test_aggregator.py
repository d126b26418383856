"""Tests for route weather aggregation."""

import random

import pytest

from tripwx.forecast.models import ForecastBand, WeatherSample
from tripwx.route.aggregator import (
    build_report,
    deduplicate,
    location_key,
    recommendations_for,
    score_point,
)
from tripwx.route.models import RoutePointWeather, Waypoint, WaypointType


def make_sample(**overrides):
    """A mild, dry sample scoring 100."""
    values = dict(
        temperature_c=20.0,
        description='clear sky',
        humidity_pct=50,
        wind_speed_kmh=10,
        visibility_km=10.0,
        precipitation_mm=0,
        rain_probability_pct=0,
        timestamp=1_700_000_000,
        band=ForecastBand.HOUR,
    )
    values.update(overrides)
    return WeatherSample(**values)


def make_point(name, distance, kind=WaypointType.INTERMEDIATE, sample=None, **waypoint_fields):
    waypoint = Waypoint(48.0, 2.0, distance, kind, **waypoint_fields)
    return RoutePointWeather(waypoint, sample if sample is not None else make_sample(), name)


def route(*intermediates):
    """Origin, the given intermediates, destination."""
    return (
        [make_point('\U0001F6A9 Paris', 0, WaypointType.ORIGIN)]
        + list(intermediates)
        + [make_point('\U0001F3C1 Lyon', 10000, WaypointType.DESTINATION)]
    )


class TestLocationKey:
    """Test location name normalisation."""

    def test_glyph_stripped(self):
        assert location_key(make_point('\U0001F4CD Melun', 100)) == 'Melun'

    def test_coordinates_without_name(self):
        assert location_key(make_point(None, 100)) == '48.0_2.0'


class TestDeduplicate:
    """Repeated location names are dropped unless far apart."""

    @pytest.mark.parametrize("gap", [500, 1800, 2000])
    def test_close_duplicate_dropped(self, gap):
        points = route(make_point('\U0001F4CD Melun', 1000), make_point('\U0001F4CD Melun', 1000 + gap))
        kept = deduplicate(points)
        assert len(kept) == 3
        assert kept[1].distance_from_start_m == 1000

    def test_far_duplicate_kept(self):
        points = route(make_point('\U0001F4CD Melun', 1000), make_point('\U0001F4CD Melun', 3500))
        assert len(deduplicate(points)) == 4

    def test_distance_measured_from_first_occurrence(self):
        points = route(
            make_point('\U0001F4CD Melun', 1000),
            make_point('\U0001F4CD Melun', 2500),
            make_point('\U0001F4CD Melun', 3100),
        )
        kept = deduplicate(points)
        assert [p.distance_from_start_m for p in kept] == [0, 1000, 3100, 10000]

    def test_endpoints_always_kept(self):
        points = [
            make_point('\U0001F6A9 Melun', 0, WaypointType.ORIGIN),
            make_point('\U0001F4CD Melun', 300),
            make_point('\U0001F3C1 Melun', 600, WaypointType.DESTINATION),
        ]
        kept = deduplicate(points)
        assert kept[0].waypoint.type == WaypointType.ORIGIN
        assert kept[-1].waypoint.type == WaypointType.DESTINATION
        assert len(kept) == 3

    def test_distance_measured_from_origin_with_same_name(self):
        points = route(
            make_point('\U0001F4CD Paris', 500),
            make_point('\U0001F4CD Paris', 2500),
        )
        kept = deduplicate(points)
        assert [p.distance_from_start_m for p in kept] == [0, 500, 2500, 10000]

    def test_repeat_near_origin_with_same_name_dropped(self):
        points = route(
            make_point('\U0001F4CD Paris', 500),
            make_point('\U0001F4CD Paris', 1500),
        )
        kept = deduplicate(points)
        assert [p.distance_from_start_m for p in kept] == [0, 500, 10000]


class TestScorePoint:
    """Test per-point scoring."""

    def test_perfect(self):
        score, risks, alerts = score_point(make_point('A', 0))
        assert score == 100
        assert risks == []
        assert alerts == []

    def test_freezing(self):
        score, risks, _ = score_point(make_point('A', 0, sample=make_sample(temperature_c=-5)))
        assert score == 80
        assert risks[0].type == 'cold'
        assert risks[0].severity == 'medium'

    def test_extreme_cold(self):
        score, risks, _ = score_point(make_point('A', 0, sample=make_sample(temperature_c=-6)))
        assert score == 70
        assert risks[0].type == 'extreme_cold'

    def test_heavy_rain_mixed_mode(self):
        point = make_point('A', 0, sample=make_sample(precipitation_mm=25), is_mixed_mode=True)
        score, risks, _ = score_point(point)
        assert score == pytest.approx(100 - 40 * 1.3)
        assert 'cycling and walking' in risks[0].message

    def test_strong_wind_cycling(self):
        point = make_point('A', 0, sample=make_sample(wind_speed_kmh=30), mode='bicycle')
        score, risks, _ = score_point(point)
        assert score == pytest.approx(100 - 30 * 1.2)
        assert risks[0].type == 'strong_wind'
        assert risks[0].message == 'Strong winds - very difficult for cycling'

    def test_moderate_rain_probability_is_alert(self):
        score, risks, alerts = score_point(make_point('A', 0, sample=make_sample(rain_probability_pct=50)))
        assert score == 92
        assert risks == []
        assert alerts[0].type == 'moderate_rain_probability'

    def test_poor_visibility(self):
        score, risks, _ = score_point(make_point('A', 0, sample=make_sample(visibility_km=0.5)))
        assert score == 65
        assert risks[0].severity == 'high'

    def test_missing_visibility_not_penalised(self):
        score, _, _ = score_point(make_point('A', 0, sample=make_sample(visibility_km=None)))
        assert score == 100

    def test_humid_heat(self):
        sample = make_sample(temperature_c=30, humidity_pct=90)
        score, _, alerts = score_point(make_point('A', 0, sample=sample))
        assert score == 90
        assert alerts[0].type == 'high_humidity'

    def test_feels_like_far_from_temperature(self):
        sample = make_sample(temperature_c=2, feels_like_c=-4)
        score, _, _ = score_point(make_point('A', 0, sample=sample))
        assert score == 92

    def test_never_negative(self):
        sample = make_sample(
            temperature_c=-10, precipitation_mm=30, rain_probability_pct=95,
            wind_speed_kmh=40, visibility_km=0.2,
        )
        score, risks, _ = score_point(make_point('A', 0, sample=sample))
        assert score == 0
        assert len(risks) == 5

    def test_unnamed_point_label(self):
        _, risks, _ = score_point(make_point(None, 0, sample=make_sample(temperature_c=40)), index=2)
        assert risks[0].location == 'Waypoint 3'


class TestRecommendations:
    """Advice bands."""

    @pytest.mark.parametrize("score, first", [
        (100, 'Excellent conditions for travel'),
        (85, 'Excellent conditions for travel'),
        (70, 'Good conditions for travel'),
        (55, 'Fair conditions - travel with caution'),
        (40, 'Poor conditions - avoid travel if possible'),
        (39, 'Very poor conditions - strongly avoid travel'),
    ])
    def test_bands(self, score, first):
        assert recommendations_for(score)[0] == first

    def test_mixed_mode_adds_advice(self):
        assert len(recommendations_for(90, mixed_mode=True)) == 2


class TestBuildReport:
    """Test report assembly."""

    def test_all_perfect(self):
        report = build_report(route(make_point('\U0001F4CD Melun', 5000)), route_distance_m=10000)
        assert report.overall_score == 100
        assert report.summary.total_waypoints == 3
        assert report.summary.route_distance_m == 10000
        assert not report.summary.is_synthetic

    def test_freezing_point_lowers_score(self):
        base = build_report(route(make_point('\U0001F4CD Melun', 5000)))
        cold = build_report(route(
            make_point('\U0001F4CD Melun', 5000),
            make_point('\U0001F4CD Fontainebleau', 7000, sample=make_sample(temperature_c=-5)),
        ))
        assert cold.overall_score < base.overall_score
        assert cold.overall_score == 95

    def test_duplicates_counted(self):
        report = build_report(route(make_point('\U0001F4CD Melun', 1000), make_point('\U0001F4CD Melun', 1500)))
        assert report.summary.original_waypoint_count == 4
        assert report.summary.removed_duplicates == 1
        assert len(report.waypoints) == 3

    def test_missing_samples_substituted(self):
        points = route(make_point('\U0001F4CD Melun', 5000))
        points[1] = RoutePointWeather(points[1].waypoint, None, points[1].location_name)
        report = build_report(points, rng=random.Random(1))
        assert report.summary.substituted_samples == 1
        assert not report.summary.is_synthetic
        assert report.waypoints[1].sample.is_synthetic

    def test_all_missing_is_synthetic(self):
        points = [RoutePointWeather(p.waypoint, None, p.location_name) for p in route()]
        report = build_report(points, rng=random.Random(1))
        assert report.summary.is_synthetic
        assert all(p.sample.is_synthetic for p in report.waypoints)

    def test_empty(self):
        report = build_report([])
        assert report.overall_score == 0
        assert report.waypoints == []

    def test_high_risks(self):
        report = build_report(route(
            make_point('\U0001F4CD Melun', 5000, sample=make_sample(temperature_c=40)),
        ))
        assert [r.type for r in report.high_risks] == ['extreme_heat']

    def test_export(self):
        report = build_report(route(make_point('\U0001F4CD Melun', 5000)))
        data = report.to_dict()
        assert data['overall_score'] == 100
        assert len(data['waypoints']) == 3
        frame = report.to_dataframe()
        assert list(frame['location']) == ['\U0001F6A9 Paris', '\U0001F4CD Melun', '\U0001F3C1 Lyon']
        assert list(frame['distance_km']) == [0.0, 5.0, 10.0]
