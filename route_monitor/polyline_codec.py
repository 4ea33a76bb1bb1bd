"""Encoded polyline codec (Google's signed-delta, zig-zag, base-32 format).

Coordinates are quantised to five decimal places. Providers emit and the
record store keeps this exact format, so both directions must stay
bit-compatible with the published algorithm.
"""

from __future__ import annotations

import math
from typing import Iterable, List, Sequence, Tuple, Union

from .errors import MalformedEncodingError
from .models import GeoPoint

PRECISION = 5
_FACTOR = 10**PRECISION
_OFFSET = 63
_CHUNK_BITS = 5
_CHUNK_MASK = 0x1F
_CONTINUATION = 0x20
_MAX_CHAR = _OFFSET + _CHUNK_MASK + _CONTINUATION
# Seven groups cover any coordinate delta; a longer run is corrupt input.
_MAX_SHIFT = 30

PointLike = Union[GeoPoint, Sequence[float]]


def _scale(value: float) -> int:
    """Scale degrees to integer units, rounding half away from zero."""

    return int(math.copysign(math.floor(abs(value) * _FACTOR + 0.5), value))


def _coords(point: PointLike) -> Tuple[float, float]:
    if isinstance(point, GeoPoint):
        return point.lat, point.lng
    lat, lng = point
    return float(lat), float(lng)


def _encode_value(value: int, out: List[str]) -> None:
    value = ~(value << 1) if value < 0 else value << 1
    while value >= _CONTINUATION:
        out.append(chr((_CONTINUATION | (value & _CHUNK_MASK)) + _OFFSET))
        value >>= _CHUNK_BITS
    out.append(chr(value + _OFFSET))


def encode(points: Iterable[PointLike]) -> str:
    """Encode ``points`` as a polyline string. Empty input yields ``""``."""

    out: List[str] = []
    prev_lat = prev_lng = 0
    for point in points:
        lat, lng = _coords(point)
        scaled_lat = _scale(lat)
        scaled_lng = _scale(lng)
        _encode_value(scaled_lat - prev_lat, out)
        _encode_value(scaled_lng - prev_lng, out)
        prev_lat, prev_lng = scaled_lat, scaled_lng
    return "".join(out)


def _decode_value(encoded: str, index: int) -> Tuple[int, int]:
    """Read one zig-zagged varint starting at ``index``; return (value, next index)."""

    result = 0
    shift = 0
    length = len(encoded)
    while True:
        if index >= length:
            raise MalformedEncodingError(
                f"Polyline ends mid-value at offset {index}"
            )
        code = ord(encoded[index])
        if code < _OFFSET or code > _MAX_CHAR:
            raise MalformedEncodingError(
                f"Invalid polyline character {encoded[index]!r} at offset {index}"
            )
        chunk = code - _OFFSET
        index += 1
        result |= (chunk & _CHUNK_MASK) << shift
        shift += _CHUNK_BITS
        if chunk < _CONTINUATION:
            break
        if shift > _MAX_SHIFT:
            raise MalformedEncodingError(
                f"Polyline value exceeds {shift} bits at offset {index}"
            )
    value = ~(result >> 1) if result & 1 else result >> 1
    return value, index


def decode(encoded: str) -> List[GeoPoint]:
    """Decode a polyline string into points.

    Raises:
        MalformedEncodingError: If the string is truncated mid-value, holds a
            latitude without its longitude, holds a value longer than seven
            groups, or contains characters outside the encoding alphabet.
    """

    points: List[GeoPoint] = []
    index = 0
    lat = lng = 0
    length = len(encoded)
    while index < length:
        delta_lat, index = _decode_value(encoded, index)
        if index >= length:
            raise MalformedEncodingError(
                f"Polyline ends after a latitude at offset {index}"
            )
        delta_lng, index = _decode_value(encoded, index)
        lat += delta_lat
        lng += delta_lng
        points.append(GeoPoint(lat / _FACTOR, lng / _FACTOR))
    return points


__all__ = ["PRECISION", "decode", "encode"]
