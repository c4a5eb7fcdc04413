"""Encode and decode point sequences across the supported wire formats.

Encoding always produces EWKT with SRID 4326 (what the store ingests).
Decoding accepts GeoJSON, WKT or WKB hex and never raises: a stored geometry
that cannot be parsed degrades to an empty sequence or ``None`` so the rest of
the activity can still be shown.
"""

from __future__ import annotations

import math
import re
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from ..models import Coordinate, PointSequence, is_valid_coordinate
from .wire import (
    EmptyGeometry,
    GeoJsonGeometry,
    WkbHex,
    classify_wire_value,
)
from .wkb import decode_wkb_line_string, decode_wkb_point

SRID = 4326

_LINESTRING_RE = re.compile(r"LINESTRING\s*\((.+)\)", re.IGNORECASE)
_POINT_RE = re.compile(r"POINT\s*\(([^)]+)\)", re.IGNORECASE)


def encode_line_string(points: Iterable[Sequence[float]]) -> str:
    """Return ``SRID=4326;LINESTRING(lon lat, ...)`` for ``points``.

    An empty input produces ``SRID=4326;LINESTRING()``, which the store will
    reject; callers must guard against empty tracks.
    """

    path = ", ".join(f"{_fmt(point[1])} {_fmt(point[0])}" for point in points)
    return f"SRID={SRID};LINESTRING({path})"


def encode_point(point: Sequence[float]) -> str:
    """Return ``SRID=4326;POINT(lon lat)``."""

    return f"SRID={SRID};POINT({_fmt(point[1])} {_fmt(point[0])})"


def line_string_to_geojson(points: Iterable[Sequence[float]]) -> Dict[str, Any]:
    """GeoJSON LineString geometry with ``[lon, lat]`` coordinate order."""

    return {
        "type": "LineString",
        "coordinates": [[float(point[1]), float(point[0])] for point in points],
    }


def point_to_geojson(point: Sequence[float]) -> Dict[str, Any]:
    return {"type": "Point", "coordinates": [float(point[1]), float(point[0])]}


def decode_line_string(value: Any) -> PointSequence:
    """Decode a wire LineString (raw or tagged) into coordinates.

    Order of attempts for raw strings: WKB hex (falling through when it yields
    no points), GeoJSON text, then a ``LINESTRING(...)`` WKT match.
    """

    wire = classify_wire_value(value)
    if isinstance(wire, EmptyGeometry):
        return ()
    if isinstance(wire, WkbHex):
        points = decode_wkb_line_string(wire.text)
        if points:
            return points
        return _parse_wkt_line_string(wire.text)
    if isinstance(wire, GeoJsonGeometry):
        return _geojson_line_string(wire.value)
    return _parse_wkt_line_string(wire.text)


def decode_point(value: Any) -> Optional[Coordinate]:
    """Decode a wire Point (GeoJSON, WKT or WKB hex), ``None`` when unparseable."""

    wire = classify_wire_value(value)
    if isinstance(wire, EmptyGeometry):
        return None
    if isinstance(wire, WkbHex):
        return decode_wkb_point(wire.text)
    if isinstance(wire, GeoJsonGeometry):
        return _geojson_point(wire.value)
    match = _POINT_RE.search(wire.text)
    if not match:
        return None
    return _parse_pair(match.group(1))


def _geojson_line_string(obj: Mapping[str, Any]) -> PointSequence:
    if obj.get("type") == "Feature" and isinstance(obj.get("geometry"), Mapping):
        obj = obj["geometry"]
    coordinates = obj.get("coordinates")
    if not isinstance(coordinates, list):
        return ()
    points: List[Coordinate] = []
    for pair in coordinates:
        if not isinstance(pair, (list, tuple)) or len(pair) < 2:
            continue
        lon, lat = pair[0], pair[1]
        if is_valid_coordinate(lat, lon):
            points.append(Coordinate(float(lat), float(lon)))
    return tuple(points)


def _geojson_point(obj: Mapping[str, Any]) -> Optional[Coordinate]:
    if obj.get("type") == "Feature" and isinstance(obj.get("geometry"), Mapping):
        obj = obj["geometry"]
    if obj.get("type") not in (None, "Point"):
        return None
    coordinates = obj.get("coordinates")
    if not isinstance(coordinates, (list, tuple)) or len(coordinates) < 2:
        return None
    lon, lat = coordinates[0], coordinates[1]
    if not is_valid_coordinate(lat, lon):
        return None
    return Coordinate(float(lat), float(lon))


def _parse_wkt_line_string(text: str) -> PointSequence:
    match = _LINESTRING_RE.search(text)
    if not match:
        return ()
    points: List[Coordinate] = []
    for chunk in match.group(1).split(","):
        point = _parse_pair(chunk)
        if point is not None:
            points.append(point)
    return tuple(points)


def _parse_pair(chunk: str) -> Optional[Coordinate]:
    """Parse ``"lon lat"``; anything other than two finite numbers is dropped."""

    parts = chunk.strip().split()
    if len(parts) != 2:
        return None
    try:
        lon, lat = float(parts[0]), float(parts[1])
    except ValueError:
        return None
    if not is_valid_coordinate(lat, lon):
        return None
    return Coordinate(lat, lon)


def _fmt(value: float) -> str:
    # repr keeps full float precision so WKT round-trips exactly.
    number = float(value)
    if math.isfinite(number) and number.is_integer():
        return str(int(number))
    return repr(number)


__all__ = [
    "SRID",
    "decode_line_string",
    "decode_point",
    "encode_line_string",
    "encode_point",
    "line_string_to_geojson",
    "point_to_geojson",
]
