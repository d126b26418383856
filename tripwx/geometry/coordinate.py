#!/usr/bin/env python3

import math
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple, Union

EARTH_RADIUS_M = 6371000.0


@dataclass(frozen=True)
class Coordinate:
    """
    A geographic coordinate with an optional third dimension.

    All coordinates are stored in decimal degrees:
    - Latitude: -90 to +90 degrees (negative for South, positive for North)
    - Longitude: -180 to +180 degrees (negative for West, positive for East)

    The third dimension (altitude, elevation or level depending on the
    polyline header) is kept as-is in `alt`.

    All distance calculations return metres.
    """

    lat: float
    lng: float
    alt: Optional[float] = None

    @staticmethod
    def is_valid(lat: float, lng: float) -> bool:
        """Whether a latitude/longitude pair lies within geographic bounds."""
        return -90 <= lat <= 90 and -180 <= lng <= 180

    def distance_to(self, other: 'Coordinate') -> float:
        """
        Great circle distance to another coordinate using the Haversine formula.

        Args:
            other: The target coordinate

        Returns:
            Distance in metres
        """
        lat1 = math.radians(self.lat)
        lat2 = math.radians(other.lat)
        dlat = lat2 - lat1
        dlng = math.radians(other.lng - self.lng)

        a = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlng / 2) ** 2
        c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
        return EARTH_RADIUS_M * c

    def as_tuple(self) -> Tuple[float, ...]:
        """(lat, lng) or (lat, lng, alt) when a third dimension is present."""
        if self.alt is None:
            return (self.lat, self.lng)
        return (self.lat, self.lng, self.alt)

    def to_dict(self) -> dict:
        data = {'lat': self.lat, 'lng': self.lng}
        if self.alt is not None:
            data['alt'] = self.alt
        return data

    def __str__(self) -> str:
        return f"({self.lat:.5f}, {self.lng:.5f})"


CoordinateLike = Union[Coordinate, Sequence[float]]


def as_coordinate(value: CoordinateLike) -> Coordinate:
    """Accept a Coordinate or a (lat, lng[, alt]) sequence."""
    if isinstance(value, Coordinate):
        return value
    if len(value) == 2:
        return Coordinate(float(value[0]), float(value[1]))
    if len(value) == 3:
        return Coordinate(float(value[0]), float(value[1]), float(value[2]))
    raise ValueError(f"Expected (lat, lng) or (lat, lng, alt), got {value!r}")


def cumulative_distances(coordinates: Iterable[CoordinateLike]) -> List[float]:
    """
    Running along-route distance for each coordinate.

    Returns:
        List with one entry per coordinate, starting at 0.0, in metres
    """
    distances: List[float] = []
    previous: Optional[Coordinate] = None
    total = 0.0
    for value in coordinates:
        current = as_coordinate(value)
        if previous is not None:
            total += previous.distance_to(current)
        distances.append(total)
        previous = current
    return distances
