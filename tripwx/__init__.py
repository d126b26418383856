"""
Weather along a journey.

This package decodes route geometries, estimates when the traveller reaches
each point and picks the forecast resolution matching that moment.

The main public API includes:
- flexpolyline: Flexible polyline codec (tripwx.geometry)
- select_band / resolve_sample: Forecast band selection (tripwx.forecast)
- RouteWeatherService: End-to-end route weather reports (tripwx.route)
- OpenWeatherSource / OpenCageGeocoder: HTTP sources (tripwx.sources)
- Settings: Environment configuration
"""

__version__ = '0.1.0'
__all__ = [
    'Settings',
    'RouteWeatherService',
    'ForecastCache',
    'WeatherSample',
    'resolve_sample',
    'select_band',
]

from tripwx.config import Settings
from tripwx.forecast import ForecastCache, WeatherSample, resolve_sample, select_band
from tripwx.route import RouteWeatherService
