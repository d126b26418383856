"""
Flexible polyline encoding and decoding.

An encoded polyline is a varint stream (see `tripwx.geometry.varint`) made of:

1. the format version (always 1),
2. a header word packing the geometry parameters::

       bits 0-3   coordinate precision (decimal digits, 0-15)
       bits 4-6   third dimension kind (ThirdDimension)
       bits 7-10  third dimension precision (0-15)

3. zig-zag encoded deltas ``(dlat, dlng[, dz])`` for every coordinate,
   relative to the previous coordinate (the first one relative to zero).

Example:
    from tripwx.geometry.flexpolyline import encode, decode

    text = encode([(50.1022829, 8.6982122), (50.1020076, 8.6956695)])
    coords = decode(text)
"""

import logging
import math
from dataclasses import dataclass
from enum import IntEnum
from typing import Iterable, List

from tripwx.errors import InvalidFormatVersion, OutOfRangeCoordinate, PrematureEnding
from tripwx.geometry.coordinate import Coordinate, CoordinateLike, as_coordinate
from tripwx.geometry.varint import decode_unsigned_stream, encode_signed, encode_unsigned, to_signed

logger = logging.getLogger(__name__)

FORMAT_VERSION = 1
MAX_PRECISION = 15
DEFAULT_PRECISION = 5


class ThirdDimension(IntEnum):
    """Meaning of the optional third coordinate component."""

    ABSENT = 0
    LEVEL = 1
    ALTITUDE = 2
    ELEVATION = 3
    RESERVED1 = 4
    RESERVED2 = 5
    CUSTOM1 = 6
    CUSTOM2 = 7


@dataclass(frozen=True)
class PolylineHeader:
    """Geometry parameters carried at the start of an encoded polyline."""

    format_version: int
    precision: int
    third_dim: ThirdDimension
    third_dim_precision: int

    @property
    def has_third_dimension(self) -> bool:
        return self.third_dim != ThirdDimension.ABSENT

    @property
    def group_size(self) -> int:
        """Number of integers per encoded coordinate."""
        return 3 if self.has_third_dimension else 2

    @classmethod
    def from_words(cls, version: int, header_word: int) -> 'PolylineHeader':
        """
        Parse the two leading integers of a decoded stream.

        Raises:
            InvalidFormatVersion: If the version is not FORMAT_VERSION
        """
        if version != FORMAT_VERSION:
            raise InvalidFormatVersion(version, FORMAT_VERSION)
        return cls(
            format_version=version,
            precision=header_word & 0xF,
            third_dim=ThirdDimension((header_word >> 4) & 0x7),
            third_dim_precision=(header_word >> 7) & 0xF,
        )

    def to_word(self) -> int:
        """Pack precision and third dimension settings into one integer."""
        return (self.third_dim_precision << 7) | (int(self.third_dim) << 4) | self.precision


def _split_header(text: str):
    values = decode_unsigned_stream(text)
    if len(values) < 2:
        raise PrematureEnding(
            f"Polyline header requires 2 values, got {len(values)}",
            details=len(values),
        )
    return PolylineHeader.from_words(values[0], values[1]), values[2:]


def decode_header(text: str) -> PolylineHeader:
    """Decode only the header of an encoded polyline."""
    header, _ = _split_header(text)
    return header


def get_third_dimension(text: str) -> ThirdDimension:
    """Return the third dimension kind declared by an encoded polyline."""
    return decode_header(text).third_dim


def decode(text: str) -> List[Coordinate]:
    """
    Decode a flexible polyline into coordinates.

    Decoding is all-or-nothing: any error aborts without a partial result.

    Args:
        text: Encoded polyline

    Returns:
        List of Coordinate, with `alt` set when the header declares a
        third dimension

    Raises:
        TruncatedInput: Input ends in the middle of a value
        InvalidFormatVersion: Unsupported format version
        PrematureEnding: Missing header or an incomplete trailing coordinate
        OutOfRangeCoordinate: A decoded latitude/longitude is out of bounds
    """
    header, body = _split_header(text)
    group = header.group_size
    if len(body) % group != 0:
        raise PrematureEnding(
            f"Invalid encoding: {len(body) % group} trailing value(s) after "
            f"{len(body) // group} coordinates",
            details=len(body),
        )

    factor = 10 ** header.precision
    factor_z = 10 ** header.third_dim_precision
    last_lat = last_lng = last_z = 0
    coordinates = []

    for index, offset in enumerate(range(0, len(body), group)):
        last_lat += to_signed(body[offset])
        last_lng += to_signed(body[offset + 1])
        lat = last_lat / factor
        lng = last_lng / factor
        if not Coordinate.is_valid(lat, lng):
            raise OutOfRangeCoordinate(lat, lng, index)
        if header.has_third_dimension:
            last_z += to_signed(body[offset + 2])
            coordinates.append(Coordinate(lat, lng, last_z / factor_z))
        else:
            coordinates.append(Coordinate(lat, lng))

    logger.debug("Decoded %d coordinates (precision %d, third dim %s)",
                 len(coordinates), header.precision, header.third_dim.name)
    return coordinates


def _scale(value: float, factor: int) -> int:
    """Round half away from zero after scaling."""
    return int(math.copysign(math.floor(abs(value) * factor + 0.5), value))


def encode(
    coordinates: Iterable[CoordinateLike],
    precision: int = DEFAULT_PRECISION,
    third_dim: ThirdDimension = ThirdDimension.ABSENT,
    third_dim_precision: int = 0,
) -> str:
    """
    Encode coordinates as a flexible polyline.

    Args:
        coordinates: Coordinates or (lat, lng[, z]) sequences
        precision: Decimal digits kept for latitude/longitude (0-15)
        third_dim: Kind of third dimension, ABSENT for 2D polylines
        third_dim_precision: Decimal digits kept for the third dimension (0-15)

    Returns:
        Encoded polyline string

    Raises:
        ValueError: If a precision is out of range or a third component is
            missing while a third dimension is requested
        OutOfRangeCoordinate: If a coordinate is outside valid bounds
    """
    if not 0 <= precision <= MAX_PRECISION:
        raise ValueError(f"precision must be between 0 and {MAX_PRECISION}, got {precision}")
    if not 0 <= third_dim_precision <= MAX_PRECISION:
        raise ValueError(
            f"third_dim_precision must be between 0 and {MAX_PRECISION}, got {third_dim_precision}"
        )

    header = PolylineHeader(FORMAT_VERSION, precision, ThirdDimension(third_dim), third_dim_precision)
    factor = 10 ** precision
    factor_z = 10 ** third_dim_precision
    parts = [encode_unsigned(header.format_version), encode_unsigned(header.to_word())]
    last_lat = last_lng = last_z = 0

    for index, value in enumerate(coordinates):
        coord = as_coordinate(value)
        if not Coordinate.is_valid(coord.lat, coord.lng):
            raise OutOfRangeCoordinate(coord.lat, coord.lng, index)

        lat = _scale(coord.lat, factor)
        lng = _scale(coord.lng, factor)
        parts.append(encode_signed(lat - last_lat))
        parts.append(encode_signed(lng - last_lng))
        last_lat, last_lng = lat, lng

        if header.has_third_dimension:
            if coord.alt is None:
                raise ValueError(f"Coordinate {index} has no third dimension value")
            z = _scale(coord.alt, factor_z)
            parts.append(encode_signed(z - last_z))
            last_z = z

    return "".join(parts)
