"""Exception hierarchy for tripwx."""

from typing import Any, Optional


class TripWxError(Exception):
    """Base class for all tripwx errors."""

    def __init__(self, message: str, details: Any = None):
        """
        Args:
            message: Error message
            details: Optional additional details (offending value, position...)
        """
        super().__init__(message)
        self.details = details


class PolylineError(TripWxError, ValueError):
    """Raised when an encoded polyline cannot be decoded."""


class TruncatedInput(PolylineError):
    """The varint stream ended while a continuation bit was still pending."""


class InvalidSymbol(PolylineError):
    """A character outside the polyline alphabet was found."""

    def __init__(self, symbol: str, position: int):
        super().__init__(f"Invalid polyline symbol {symbol!r} at position {position}", details=position)
        self.symbol = symbol
        self.position = position


class InvalidFormatVersion(PolylineError):
    """The header carries a format version this codec does not support."""

    def __init__(self, version: int, supported: int):
        super().__init__(f"Invalid format version {version} (supported: {supported})", details=version)
        self.version = version
        self.supported = supported


class PrematureEnding(PolylineError):
    """Integers were left over after the last complete coordinate group."""


class OutOfRangeCoordinate(PolylineError):
    """A decoded coordinate lies outside valid latitude/longitude bounds."""

    def __init__(self, lat: float, lng: float, index: Optional[int] = None):
        where = f" at index {index}" if index is not None else ""
        super().__init__(f"Coordinate out of range{where}: ({lat}, {lng})", details=index)
        self.lat = lat
        self.lng = lng
        self.index = index


class ForecastError(TripWxError):
    """Raised when a forecast payload cannot be resolved to a sample."""


class NoForecastData(ForecastError):
    """The payload has neither a usable current entry nor hourly data."""


class WeatherSourceError(TripWxError):
    """Raised when an upstream weather provider request fails."""


class ConfigurationError(TripWxError):
    """Raised when required configuration is missing or invalid."""
