"""Build normalized weather samples from selected forecast records."""

import logging
from typing import Any, Dict, List, Optional

from tripwx.config import RAIN_WINDOW_MINUTES
from tripwx.forecast.band_selector import select_band
from tripwx.forecast.models import BandChoice, ForecastBand, WeatherSample
from tripwx.utils.numbers import round_half_up

logger = logging.getLogger(__name__)

MS_TO_KMH = 3.6


def _number(value: Any) -> Optional[float]:
    """Return value if it is a real number, else None."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value


def _accumulation(record: Dict[str, Any], key: str, *periods: str) -> Optional[float]:
    """
    Read an accumulation field such as ``rain: {"1h": 0.4}``.

    Daily records report a bare number instead of a period mapping; that is
    accepted as well.
    """
    value = record.get(key)
    number = _number(value)
    if number is not None:
        return number
    if isinstance(value, dict):
        for period in periods:
            number = _number(value.get(period))
            if number is not None:
                return number
    return None


def _kmh(value: Any) -> Optional[int]:
    number = _number(value)
    if number is None:
        return None
    return round_half_up(number * MS_TO_KMH)


def _description(record: Dict[str, Any]) -> str:
    weather = record.get('weather')
    if isinstance(weather, list) and weather and isinstance(weather[0], dict):
        return weather[0].get('description', '')
    return ''


def _visibility_km(record: Dict[str, Any]) -> Optional[float]:
    number = _number(record.get('visibility'))
    if number is None:
        return None
    return number / 1000


def _day_value(value: Any) -> Optional[float]:
    """Daily temperatures come as {"day": .., "night": ..}."""
    if isinstance(value, dict):
        return _number(value.get('day'))
    return _number(value)


def minute_rain_probability(minutely: List[Dict[str, Any]], index: int) -> float:
    """
    Estimate rain probability from minute-resolution precipitation.

    Precipitation at the target minute gives a base of 60% rising with
    intensity. Otherwise the RAIN_WINDOW_MINUTES either side of the target are
    inspected: total precipitation first, then the number of rainy minutes.

    Args:
        minutely: Minute records with `precipitation` in mm
        index: Target minute index

    Returns:
        Probability in percent
    """
    precipitation = _number(minutely[index].get('precipitation')) or 0
    if precipitation > 0:
        return min(95, 60 + precipitation * 15)

    start = max(0, index - RAIN_WINDOW_MINUTES)
    end = min(len(minutely) - 1, index + RAIN_WINDOW_MINUTES)
    window = [_number(m.get('precipitation')) or 0 for m in minutely[start:end + 1]]
    total = sum(window)
    rainy_minutes = sum(1 for p in window if p > 0)

    if total > 1:
        return min(80, 25 + total * 12)
    if rainy_minutes > 5:
        return min(60, 15 + rainy_minutes * 3)
    if rainy_minutes > 0:
        return min(40, rainy_minutes * 4)
    return 0


def _optional_fields(record: Dict[str, Any], band: ForecastBand) -> Dict[str, Any]:
    if band == ForecastBand.DAY:
        feels_like = _day_value(record.get('feels_like'))
        snow = _accumulation(record, 'snow', '1d')
    elif band == ForecastBand.INSTANT:
        feels_like = _number(record.get('feels_like'))
        snow = _accumulation(record, 'snow', '1h', '3h')
    else:
        feels_like = _number(record.get('feels_like'))
        snow = _accumulation(record, 'snow', '1h')
    return {
        'feels_like_c': feels_like,
        'wind_gust_kmh': _kmh(record.get('wind_gust')),
        'wind_degrees': _number(record.get('wind_deg')),
        'snow_mm': snow,
    }


def _build_instant(choice: BandChoice) -> WeatherSample:
    record = choice.entry
    precipitation = _accumulation(record, 'rain', '1h', '3h') or 0
    return WeatherSample(
        temperature_c=record.get('temp'),
        description=_description(record),
        humidity_pct=record.get('humidity', 0),
        wind_speed_kmh=_kmh(record.get('wind_speed')) or 0,
        visibility_km=_visibility_km(record),
        precipitation_mm=precipitation,
        # no probability field exists at instant resolution
        rain_probability_pct=90 if precipitation > 0 else 0,
        timestamp=record.get('dt', choice.target),
        is_current=True,
        band=ForecastBand.INSTANT,
        **_optional_fields(record, ForecastBand.INSTANT),
    )


def _build_minute(choice: BandChoice) -> WeatherSample:
    minute = choice.entry
    slow = choice.slow_entry or {}
    return WeatherSample(
        temperature_c=slow.get('temp'),
        description=_description(slow),
        humidity_pct=slow.get('humidity', 0),
        wind_speed_kmh=_kmh(slow.get('wind_speed')) or 0,
        visibility_km=_visibility_km(slow),
        precipitation_mm=_number(minute.get('precipitation')) or 0,
        rain_probability_pct=minute_rain_probability(choice.minutely, choice.index),
        timestamp=minute['dt'],
        is_current=False,
        band=ForecastBand.MINUTE,
        **_optional_fields(slow, ForecastBand.MINUTE),
    )


def _build_hour(choice: BandChoice) -> WeatherSample:
    record = choice.entry
    return WeatherSample(
        temperature_c=record.get('temp'),
        description=_description(record),
        humidity_pct=record.get('humidity', 0),
        wind_speed_kmh=_kmh(record.get('wind_speed')) or 0,
        visibility_km=_visibility_km(record),
        precipitation_mm=_accumulation(record, 'rain', '1h') or 0,
        rain_probability_pct=round_half_up((_number(record.get('pop')) or 0) * 100),
        timestamp=record['dt'],
        is_current=False,
        band=ForecastBand.HOUR,
        **_optional_fields(record, ForecastBand.HOUR),
    )


def _build_day(choice: BandChoice) -> WeatherSample:
    record = choice.entry
    return WeatherSample(
        temperature_c=_day_value(record.get('temp')),
        description=_description(record),
        humidity_pct=record.get('humidity', 0),
        wind_speed_kmh=_kmh(record.get('wind_speed')) or 0,
        visibility_km=_visibility_km(record),
        precipitation_mm=_accumulation(record, 'rain', '1d') or 0,
        rain_probability_pct=round_half_up((_number(record.get('pop')) or 0) * 100),
        timestamp=record['dt'],
        is_current=False,
        band=ForecastBand.DAY,
        **_optional_fields(record, ForecastBand.DAY),
    )


_BUILDERS = {
    ForecastBand.INSTANT: _build_instant,
    ForecastBand.MINUTE: _build_minute,
    ForecastBand.HOUR: _build_hour,
    ForecastBand.DAY: _build_day,
}


def build_sample(choice: BandChoice) -> WeatherSample:
    """
    Build a WeatherSample from a band selection.

    Wind speeds are converted from m/s to km/h and visibility from metres to
    kilometres. Optional fields stay None when the record lacks them.
    """
    sample = _BUILDERS[choice.band](choice)
    logger.debug("Built %r", sample)
    return sample


def resolve_sample(now: int, target: int, payload: Dict[str, Any]) -> WeatherSample:
    """
    Select the band for a target time and build its sample.

    Raises:
        NoForecastData: If the payload has no usable data at all
    """
    return build_sample(select_band(now, target, payload))
