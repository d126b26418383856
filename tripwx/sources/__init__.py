"""HTTP sources feeding raw data into the pipeline."""

from tripwx.sources.openweather import OpenWeatherSource
from tripwx.sources.opencage import OpenCageGeocoder, coordinate_label

__all__ = [
    'OpenWeatherSource',
    'OpenCageGeocoder',
    'coordinate_label',
]
