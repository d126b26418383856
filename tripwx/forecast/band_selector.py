"""
Forecast band selection.

A One Call style payload carries four resolutions of the same forecast::

    current    single record, authoritative "now"
    minutely   ~60 one-minute precipitation records
    hourly     ~48 one-hour records
    daily      ~8 one-day records

`select_band` decides which of them governs a target time and which record
(or records) inside that band describe it. It is a pure function: no I/O and
no clock, "now" is always passed in (normally ``payload['current']['dt']``).
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from tripwx.config import (
    CURRENT_WINDOW_S,
    HOUR_SWITCH_MINUTES,
    HOURLY_HORIZON_S,
    MINUTELY_HORIZON_S,
    MINUTELY_SLOW_SOURCE_S,
)
from tripwx.errors import NoForecastData
from tripwx.forecast.models import BandChoice, ForecastBand

logger = logging.getLogger(__name__)

Record = Dict[str, Any]


def _records(payload: Dict[str, Any], key: str) -> List[Record]:
    value = payload.get(key)
    if not isinstance(value, list):
        return []
    return [r for r in value if isinstance(r, dict) and r.get('dt') is not None]


def _current(payload: Dict[str, Any]) -> Optional[Record]:
    value = payload.get('current')
    if isinstance(value, dict) and value:
        return value
    return None


def _instant_or_fallback(
    payload: Dict[str, Any],
    target: int,
    preferred: ForecastBand,
) -> BandChoice:
    """Instant band, or the hourly neighbourhood when current data is missing."""
    fallback_from = preferred if preferred != ForecastBand.INSTANT else None
    current = _current(payload)
    if current is not None:
        if fallback_from is not None:
            logger.debug("No %s data, falling back to instant band", preferred.value)
        return BandChoice(
            band=ForecastBand.INSTANT,
            entry=current,
            target=target,
            is_current=True,
            fallback_from=fallback_from,
        )

    hourly = _records(payload, 'hourly')
    index, entry = select_hourly_entry(hourly, target)
    logger.debug("No current data, using hourly entry %d for %s band", index, preferred.value)
    return BandChoice(
        band=ForecastBand.HOUR,
        entry=entry,
        target=target,
        index=index,
        fallback_from=preferred,
    )


def select_hourly_entry(hourly: List[Record], target: int) -> Tuple[int, Record]:
    """
    Pick the hourly record describing a target time.

    Finds the last record at or before the target and the first record after
    it. When both exist, the later one wins once the target is more than
    HOUR_SWITCH_MINUTES into the hour; otherwise the single neighbour is used.

    Args:
        hourly: Non-empty list of hourly records, ascending by `dt`
        target: Epoch seconds

    Returns:
        Tuple of (index, record)
    """
    prev_index = next_index = None
    for i, record in enumerate(hourly):
        if record['dt'] <= target:
            prev_index = i
        else:
            next_index = i
            break

    if prev_index is not None and next_index is not None:
        minutes_into_hour = (target - hourly[prev_index]['dt']) // 60
        chosen = next_index if minutes_into_hour > HOUR_SWITCH_MINUTES else prev_index
    elif prev_index is not None:
        chosen = prev_index
    else:
        chosen = next_index
    return chosen, hourly[chosen]


def select_daily_entry(daily: List[Record], target: int) -> Tuple[int, Record]:
    """Daily record nearest to the target; ties go to the earliest record."""
    index = min(
        range(len(daily)),
        key=lambda i: (abs(target - daily[i]['dt']), daily[i]['dt']),
    )
    return index, daily[index]


def select_band(now: int, target: int, payload: Dict[str, Any]) -> BandChoice:
    """
    Decide which forecast band governs a target time.

    Args:
        now: Epoch seconds the payload considers "now"
        target: Epoch seconds to describe (may be in the past)
        payload: Raw multi-resolution forecast

    Returns:
        BandChoice describing the selected band and records

    Raises:
        NoForecastData: If the payload has neither current nor hourly data
    """
    hourly = _records(payload, 'hourly')
    if _current(payload) is None and not hourly:
        raise NoForecastData("Forecast payload has neither current nor hourly data")

    diff = target - now

    if diff < CURRENT_WINDOW_S:
        logger.debug("Target %+ds from now: instant band", diff)
        return _instant_or_fallback(payload, target, ForecastBand.INSTANT)

    minutely = _records(payload, 'minutely')
    if diff <= MINUTELY_HORIZON_S and minutely:
        index = min(int(diff // 60), len(minutely) - 1)
        slow = _minute_slow_source(payload, hourly, diff)
        logger.debug("Target %+ds from now: minute band index %d", diff, index)
        return BandChoice(
            band=ForecastBand.MINUTE,
            entry=minutely[index],
            target=target,
            index=index,
            slow_entry=slow,
            minutely=minutely,
        )

    if diff <= HOURLY_HORIZON_S:
        if not hourly:
            return _instant_or_fallback(payload, target, ForecastBand.HOUR)
        index, entry = select_hourly_entry(hourly, target)
        logger.debug("Target %+ds from now: hour band index %d", diff, index)
        return BandChoice(band=ForecastBand.HOUR, entry=entry, target=target, index=index)

    daily = _records(payload, 'daily')
    if not daily:
        return _instant_or_fallback(payload, target, ForecastBand.DAY)
    index, entry = select_daily_entry(daily, target)
    logger.debug("Target %+ds from now: day band index %d", diff, index)
    return BandChoice(band=ForecastBand.DAY, entry=entry, target=target, index=index)


def _minute_slow_source(payload: Dict[str, Any], hourly: List[Record], diff: int) -> Record:
    """Record supplying temperature, wind etc. alongside minute precipitation."""
    current = _current(payload)
    if diff >= MINUTELY_SLOW_SOURCE_S and len(hourly) > 1:
        return hourly[1]
    if current is not None:
        return current
    return hourly[1] if len(hourly) > 1 else hourly[0]
