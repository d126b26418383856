"""
Synthetic weather used when real forecast data is unavailable.

Values are random but always fall in these ranges:

    temperature      10-25 C
    humidity         50-90 %
    wind speed       5-25 km/h
    visibility       8-15 km
    precipitation    0 mm, or 0-5 mm with 30% chance
    rain probability 0-100 %
    feels like       10-25 C
    wind gust        8-25 km/h, present with 80% chance
    wind direction   0-360 degrees, present with 90% chance
"""

import random
import time
from typing import Optional

from tripwx.forecast.models import WeatherSample

DEMO_DESCRIPTIONS = ('Clear sky', 'Partly cloudy', 'Cloudy', 'Light rain')


def generate_demo_sample(
    rng: Optional[random.Random] = None,
    timestamp: Optional[int] = None,
    is_current: bool = True,
) -> WeatherSample:
    """
    Generate one structurally complete synthetic sample.

    Args:
        rng: Random source; pass a seeded random.Random for reproducible output
        timestamp: Epoch seconds to stamp the sample with (defaults to now)
        is_current: Value for the is_current flag

    Returns:
        WeatherSample with is_synthetic=True
    """
    rng = rng or random.Random()
    precipitation = rng.random() * 5 if rng.random() < 0.3 else 0
    wind_gust = round(8 + rng.random() * 17) if rng.random() > 0.2 else None
    wind_degrees = round(rng.random() * 360) if rng.random() > 0.1 else None

    return WeatherSample(
        temperature_c=round(10 + rng.random() * 15, 1),
        description=rng.choice(DEMO_DESCRIPTIONS),
        humidity_pct=round(50 + rng.random() * 40),
        wind_speed_kmh=round(5 + rng.random() * 20),
        visibility_km=round(8 + rng.random() * 7, 1),
        precipitation_mm=round(precipitation, 1),
        rain_probability_pct=round(rng.random() * 100),
        timestamp=int(timestamp if timestamp is not None else time.time()),
        is_current=is_current,
        feels_like_c=round(10 + rng.random() * 15),
        wind_gust_kmh=wind_gust,
        wind_degrees=wind_degrees,
        is_synthetic=True,
    )
