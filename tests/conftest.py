import random

import pytest

NOW = 1_700_000_000


def _weather(description):
    return [{'id': 800, 'main': description.title(), 'description': description}]


def _current(now):
    return {
        'dt': now,
        'temp': 18.5,
        'feels_like': 17.9,
        'humidity': 60,
        'visibility': 10000,
        'wind_speed': 4.0,
        'wind_gust': 7.5,
        'wind_deg': 220,
        'weather': _weather('clear sky'),
    }


def _hourly(now, count):
    return [
        {
            'dt': now + i * 3600,
            'temp': 18.0 + i * 0.1,
            'feels_like': 17.5 + i * 0.1,
            'humidity': 65,
            'visibility': 10000,
            'wind_speed': 5.0,
            'wind_gust': 8.0,
            'wind_deg': 230,
            'pop': 0.2,
            'weather': _weather('few clouds'),
        }
        for i in range(count)
    ]


def _daily(now, count):
    return [
        {
            'dt': now + i * 86400,
            'temp': {'day': 20.0 + i, 'night': 10.0 + i},
            'feels_like': {'day': 19.0 + i, 'night': 9.0 + i},
            'humidity': 70,
            'wind_speed': 6.0,
            'wind_deg': 240,
            'pop': 0.45,
            'rain': 2.5,
            'weather': _weather('light rain'),
        }
        for i in range(count)
    ]


@pytest.fixture
def now() -> int:
    """Fixed "now" of the fake forecast feed."""
    return NOW


@pytest.fixture
def make_payload():
    """Factory building One Call style payloads around NOW."""

    def factory(current=True, minutely=60, hourly=48, daily=8, now=NOW):
        payload = {'lat': 48.85, 'lon': 2.35, 'timezone': 'Europe/Paris'}
        if current:
            payload['current'] = _current(now)
        if minutely:
            payload['minutely'] = [{'dt': now + i * 60, 'precipitation': 0} for i in range(minutely)]
        if hourly:
            payload['hourly'] = _hourly(now, hourly)
        if daily:
            payload['daily'] = _daily(now, daily)
        return payload

    return factory


@pytest.fixture
def rng() -> random.Random:
    """Seeded random source for reproducible synthetic weather."""
    return random.Random(42)
