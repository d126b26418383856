"""Forecast data models."""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional


class ForecastBand(Enum):
    """
    Resolution band of a forecast feed.

    Ordered from finest to coarsest: INSTANT < MINUTE < HOUR < DAY.
    """

    INSTANT = "instant"
    MINUTE = "minute"
    HOUR = "hour"
    DAY = "day"

    @property
    def order(self) -> int:
        """Numeric ordering from finest (0) to coarsest (3)."""
        return _BAND_ORDER[self]

    def __lt__(self, other: 'ForecastBand') -> bool:
        if not isinstance(other, ForecastBand):
            return NotImplemented
        return self.order < other.order


_BAND_ORDER = {
    ForecastBand.INSTANT: 0,
    ForecastBand.MINUTE: 1,
    ForecastBand.HOUR: 2,
    ForecastBand.DAY: 3,
}


@dataclass(frozen=True)
class BandChoice:
    """
    Outcome of band selection for one target time.

    Attributes:
        band: Band governing the query
        entry: Raw record the sample is built from (minute record for MINUTE)
        index: Position of `entry` in its band array (None for INSTANT)
        target: Requested timestamp (epoch seconds)
        slow_entry: Record supplying non-precipitation fields for MINUTE
        minutely: Whole minutely array, used for the rain window (MINUTE only)
        is_current: Whether the sample describes current conditions
        fallback_from: Band that was preferred but unusable, if any
    """

    band: ForecastBand
    entry: Dict[str, Any]
    target: int
    index: Optional[int] = None
    slow_entry: Optional[Dict[str, Any]] = None
    minutely: List[Dict[str, Any]] = field(default_factory=list)
    is_current: bool = False
    fallback_from: Optional[ForecastBand] = None


@dataclass(frozen=True)
class WeatherSample:
    """
    Normalized weather at one place and time.

    Units: Celsius, percent, km/h, km, mm. Optional attributes are None when
    the source did not provide them; they are never filled with zeros.

    Attributes:
        temperature_c: Air temperature
        description: Human readable conditions ("light rain")
        humidity_pct: Relative humidity
        wind_speed_kmh: Mean wind speed
        visibility_km: Visibility (None when the band has no visibility)
        precipitation_mm: Precipitation accumulation for the band period
        rain_probability_pct: Probability of precipitation, 0-100
        timestamp: Epoch seconds of the record the sample was built from
        is_current: Built from current conditions
        feels_like_c: Apparent temperature
        wind_gust_kmh: Gust speed
        wind_degrees: Wind direction in degrees
        snow_mm: Snow accumulation
        band: Band the sample was resolved from (None for synthetic samples)
        is_synthetic: Generated locally because real data was unavailable
    """

    temperature_c: Optional[float]
    description: str
    humidity_pct: float
    wind_speed_kmh: float
    visibility_km: Optional[float]
    precipitation_mm: float
    rain_probability_pct: float
    timestamp: int
    is_current: bool = False
    feels_like_c: Optional[float] = None
    wind_gust_kmh: Optional[float] = None
    wind_degrees: Optional[float] = None
    snow_mm: Optional[float] = None
    band: Optional[ForecastBand] = None
    is_synthetic: bool = False

    def with_timestamp(self, timestamp: int) -> 'WeatherSample':
        """Copy of this sample re-stamped to another time."""
        return replace(self, timestamp=timestamp)

    def to_dict(self) -> dict:
        """Serialize to dictionary for JSON export; absent optionals are omitted."""
        data = {
            'temperature_c': self.temperature_c,
            'description': self.description,
            'humidity_pct': self.humidity_pct,
            'wind_speed_kmh': self.wind_speed_kmh,
            'visibility_km': self.visibility_km,
            'precipitation_mm': self.precipitation_mm,
            'rain_probability_pct': self.rain_probability_pct,
            'timestamp': self.timestamp,
            'is_current': self.is_current,
            'band': self.band.value if self.band else None,
            'is_synthetic': self.is_synthetic,
        }
        for key in ('feels_like_c', 'wind_gust_kmh', 'wind_degrees', 'snow_mm'):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        return data

    @classmethod
    def from_dict(cls, data: dict) -> 'WeatherSample':
        """Create WeatherSample from dictionary."""
        band = None
        if data.get('band'):
            try:
                band = ForecastBand(data['band'])
            except ValueError:
                band = None
        return cls(
            temperature_c=data['temperature_c'],
            description=data.get('description', ''),
            humidity_pct=data.get('humidity_pct', 0),
            wind_speed_kmh=data.get('wind_speed_kmh', 0),
            visibility_km=data.get('visibility_km'),
            precipitation_mm=data.get('precipitation_mm', 0),
            rain_probability_pct=data.get('rain_probability_pct', 0),
            timestamp=data.get('timestamp', 0),
            is_current=data.get('is_current', False),
            feels_like_c=data.get('feels_like_c'),
            wind_gust_kmh=data.get('wind_gust_kmh'),
            wind_degrees=data.get('wind_degrees'),
            snow_mm=data.get('snow_mm'),
            band=band,
            is_synthetic=data.get('is_synthetic', False),
        )

    def __repr__(self) -> str:
        band = self.band.value if self.band else "synthetic"
        return f"WeatherSample({band} {self.temperature_c}C {self.description!r} @{self.timestamp})"
