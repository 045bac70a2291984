"""Encoded polyline helpers and stitching of per-segment geometry."""

from __future__ import annotations

from typing import Sequence

PRECISION = 1e5


def _decode_value(polyline: str, index: int) -> tuple[int, int]:
    shift = 0
    result = 0
    while True:
        if index >= len(polyline):
            raise ValueError("Truncated polyline.")
        b = ord(polyline[index]) - 63
        index += 1
        result |= (b & 0x1f) << shift
        shift += 5
        if b < 0x20:
            break
    value = ~(result >> 1) if (result & 1) else (result >> 1)
    return value, index


def decode_polyline(polyline: str) -> list[tuple[float, float]]:
    """Decode a Google polyline string to a list of (lat, lon) coordinates."""
    coordinates = []
    index = 0
    lat = 0
    lon = 0

    while index < len(polyline):
        dlat, index = _decode_value(polyline, index)
        lat += dlat
        dlon, index = _decode_value(polyline, index)
        lon += dlon
        coordinates.append((lat / PRECISION, lon / PRECISION))

    return coordinates


def _encode_value(value: int) -> str:
    value = ~(value << 1) if value < 0 else (value << 1)
    chunks = []
    while value >= 0x20:
        chunks.append(chr((0x20 | (value & 0x1f)) + 63))
        value >>= 5
    chunks.append(chr(value + 63))
    return "".join(chunks)


def encode_polyline(coordinates: Sequence[tuple[float, float]]) -> str:
    """Encode (lat, lon) coordinates with the Google polyline algorithm."""
    parts = []
    prev_lat = 0
    prev_lon = 0
    for lat, lon in coordinates:
        lat_i = int(round(lat * PRECISION))
        lon_i = int(round(lon * PRECISION))
        parts.append(_encode_value(lat_i - prev_lat))
        parts.append(_encode_value(lon_i - prev_lon))
        prev_lat, prev_lon = lat_i, lon_i
    return "".join(parts)


def stitch_polylines(polylines: Sequence[str]) -> str:
    """Join per-segment paths in order into one path.

    The point shared by consecutive segments is kept twice; it only affects
    rendering.

    Args:
        polylines: Encoded paths in segment order

    Returns:
        An empty string for no input, the single input unchanged, or the
        re-encoded concatenation of all decoded points
    """
    if not polylines:
        return ""
    if len(polylines) == 1:
        return polylines[0]
    combined: list[tuple[float, float]] = []
    for polyline in polylines:
        combined.extend(decode_polyline(polyline))
    return encode_polyline(combined)
