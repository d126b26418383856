"""
Forecast resolution: pick the right band of a multi-resolution feed and turn
it into a normalized weather sample.

Provides:
- ForecastBand: INSTANT/MINUTE/HOUR/DAY enum with ordering
- WeatherSample: Normalized weather at one place and time
- select_band: Band decision for a target time
- build_sample / resolve_sample: Sample construction
- ForecastCache: TTL cache with injectable clock
- generate_demo_sample: Synthetic fallback data

Example:
    from tripwx.forecast import resolve_sample

    payload = source.fetch_onecall(48.85, 2.35)
    now = payload['current']['dt']
    sample = resolve_sample(now, now + 2 * 3600, payload)
    print(sample.band, sample.temperature_c)
"""

from tripwx.forecast.models import BandChoice, ForecastBand, WeatherSample
from tripwx.forecast.band_selector import select_band
from tripwx.forecast.sample_builder import build_sample, resolve_sample
from tripwx.forecast.cache import ForecastCache
from tripwx.forecast.demo import generate_demo_sample

__all__ = [
    'BandChoice',
    'ForecastBand',
    'WeatherSample',
    'select_band',
    'build_sample',
    'resolve_sample',
    'ForecastCache',
    'generate_demo_sample',
]
