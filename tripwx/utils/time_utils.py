"""
Time conversion helpers.

The pipeline works in epoch seconds; callers may pass datetimes, numbers or
ISO 8601 strings.
"""

import logging
from datetime import datetime, tzinfo
from typing import Optional, Union

from dateutil import parser as date_parser

logger = logging.getLogger(__name__)

TimeLike = Union[datetime, int, float, str]


def parse_time(value: TimeLike) -> datetime:
    """
    Convert a time-like value to a datetime.

    Args:
        value: datetime, epoch seconds, or ISO 8601 / free-form date string

    Returns:
        datetime (timezone-aware unless a naive datetime or string was given)

    Raises:
        ValueError: If a string cannot be parsed
    """
    if isinstance(value, datetime):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value).astimezone()
    if isinstance(value, str):
        try:
            return date_parser.parse(value)
        except (ValueError, OverflowError) as e:
            raise ValueError(f"Invalid time: {value!r}") from e
    raise TypeError(f"Unsupported time value: {value!r}")


def to_epoch(value: TimeLike) -> int:
    """Epoch seconds (floored) for a time-like value; naive datetimes are local time."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return int(value)
    return int(parse_time(value).timestamp())


def format_clock(epoch: int, tz: Optional[tzinfo] = None) -> str:
    """HH:MM label for an epoch, in `tz` or local time."""
    if tz is None:
        moment = datetime.fromtimestamp(epoch)
    else:
        moment = datetime.fromtimestamp(epoch, tz)
    return moment.strftime('%H:%M')
