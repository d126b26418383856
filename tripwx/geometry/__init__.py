"""
Geometry: coordinates and the flexible polyline codec.

Provides:
- Coordinate: lat/lng(/alt) value with haversine distance
- encode / decode: flexible polyline codec
- PolylineHeader, ThirdDimension: header description
"""

from tripwx.geometry.coordinate import Coordinate, cumulative_distances
from tripwx.geometry.flexpolyline import (
    PolylineHeader,
    ThirdDimension,
    decode,
    decode_header,
    encode,
    get_third_dimension,
)

__all__ = [
    'Coordinate',
    'cumulative_distances',
    'PolylineHeader',
    'ThirdDimension',
    'decode',
    'decode_header',
    'encode',
    'get_third_dimension',
]
