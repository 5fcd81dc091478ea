"""Encoded polyline codec.

Valhalla returns leg shapes with six decimal digits of precision; Google and
OSRM use five. Each value is delta-encoded against the previous point,
zig-zag signed and written as 5-bit groups offset by 63, with 0x20 marking
that another group follows.
"""

from __future__ import annotations

from typing import Iterable

from .errors import DecodeError

DEFAULT_PRECISION = 6


def _read_value(encoded: str, index: int) -> tuple[int, int]:
    """Read one zig-zag varint starting at ``index``; return (value, next_index)."""
    shift = 0
    result = 0
    length = len(encoded)
    while True:
        if index >= length:
            raise DecodeError(f"Polyline ended in the middle of a value at position {index}.")
        b = ord(encoded[index]) - 63
        if b < 0:
            raise DecodeError(f"Invalid polyline character {encoded[index]!r} at position {index}.")
        index += 1
        result |= (b & 0x1F) << shift
        shift += 5
        if b < 0x20:
            break
    value = ~(result >> 1) if (result & 1) else (result >> 1)
    return value, index


def decode_polyline(encoded: str, precision: int = DEFAULT_PRECISION) -> list[tuple[float, float]]:
    """Decode an encoded polyline to a list of (latitude, longitude) tuples.

    Args:
        encoded: Encoded polyline string
        precision: Number of decimal digits the values were scaled by

    Returns:
        List of (latitude, longitude) tuples; empty for an empty string

    Raises:
        DecodeError: The string is truncated or contains characters outside the alphabet
    """
    factor = 10 ** precision
    coordinates: list[tuple[float, float]] = []
    index = 0
    lat = 0
    lon = 0

    while index < len(encoded):
        dlat, index = _read_value(encoded, index)
        if index >= len(encoded):
            raise DecodeError("Polyline ended after a latitude without a matching longitude.")
        dlon, index = _read_value(encoded, index)
        lat += dlat
        lon += dlon
        coordinates.append((lat / factor, lon / factor))

    return coordinates


def _write_value(value: int, out: list[str]) -> None:
    value = ~(value << 1) if value < 0 else (value << 1)
    while value >= 0x20:
        out.append(chr((0x20 | (value & 0x1F)) + 63))
        value >>= 5
    out.append(chr(value + 63))


def encode_polyline(coordinates: Iterable[tuple[float, float]], precision: int = DEFAULT_PRECISION) -> str:
    """Encode (latitude, longitude) pairs; inverse of :func:`decode_polyline`."""
    factor = 10 ** precision
    out: list[str] = []
    prev_lat = 0
    prev_lon = 0
    for lat, lon in coordinates:
        lat_i = round(lat * factor)
        lon_i = round(lon * factor)
        _write_value(lat_i - prev_lat, out)
        _write_value(lon_i - prev_lon, out)
        prev_lat, prev_lon = lat_i, lon_i
    return "".join(out)
