"""Geometry codec: point sequences to and from GeoJSON, WKT and WKB hex."""

from .codec import (
    SRID,
    decode_line_string,
    decode_point,
    encode_line_string,
    encode_point,
    line_string_to_geojson,
    point_to_geojson,
)
from .wire import (
    EmptyGeometry,
    GeoJsonGeometry,
    WireGeometry,
    WkbHex,
    WktText,
    classify_wire_value,
)
from .wkb import decode_wkb_line_string, decode_wkb_point

__all__ = [
    "SRID",
    "EmptyGeometry",
    "GeoJsonGeometry",
    "WireGeometry",
    "WkbHex",
    "WktText",
    "classify_wire_value",
    "decode_line_string",
    "decode_point",
    "decode_wkb_line_string",
    "decode_wkb_point",
    "encode_line_string",
    "encode_point",
    "line_string_to_geojson",
    "point_to_geojson",
]
