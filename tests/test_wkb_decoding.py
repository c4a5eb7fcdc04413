"""Tests for WKB hex decoding (ISO and PostGIS extended flavours)."""

from __future__ import annotations

import math
import struct

import pytest

shapely = pytest.importorskip("shapely")
from shapely.geometry import LineString, Point

from trail_whisper.geometry import decode_line_string, decode_point
from trail_whisper.geometry.wkb import (
    decode_wkb_line_string,
    decode_wkb_point,
    hex_to_bytes,
)
from trail_whisper.models import Coordinate

LON_LAT = [(-3.18, 51.48), (-3.1815, 51.481), (-3.183, 51.4822)]
EXPECTED = tuple(Coordinate(lat, lon) for lon, lat in LON_LAT)


def _linestring_hex(**kwargs) -> str:
    return shapely.to_wkb(LineString(LON_LAT), hex=True, **kwargs)


def _packed_linestring(
    coords: list[tuple[float, ...]], type_code: int, order: str = "<"
) -> str:
    flag = 1 if order == "<" else 0
    body = struct.pack(f"{order}BII", flag, type_code, len(coords))
    for coord in coords:
        body += struct.pack(f"{order}{'d' * len(coord)}", *coord)
    return body.hex()


def test_little_endian_2d_linestring() -> None:
    assert decode_wkb_line_string(_linestring_hex(byte_order=1)) == EXPECTED


def test_big_endian_2d_linestring() -> None:
    assert decode_wkb_line_string(_linestring_hex(byte_order=0)) == EXPECTED


def test_extended_wkb_with_srid() -> None:
    geom = shapely.set_srid(LineString(LON_LAT), 4326)
    hex_text = shapely.to_wkb(geom, hex=True, include_srid=True)
    assert decode_wkb_line_string(hex_text) == EXPECTED


def test_extended_wkb_with_z_skips_elevation() -> None:
    coords = [(lon, lat, 10.0 * i) for i, (lon, lat) in enumerate(LON_LAT)]
    hex_text = shapely.to_wkb(LineString(coords), hex=True, output_dimension=3)
    assert decode_wkb_line_string(hex_text) == EXPECTED


def test_measured_linestring_skips_m() -> None:
    coords = [(lon, lat, 1.0 + i) for i, (lon, lat) in enumerate(LON_LAT)]
    assert decode_wkb_line_string(_packed_linestring(coords, 0x40000000 | 2)) == EXPECTED


def test_zm_big_endian_with_srid() -> None:
    flags = 0x80000000 | 0x40000000 | 0x20000000 | 2
    body = struct.pack(">BII", 0, flags, 4326) + struct.pack(">I", len(LON_LAT))
    for lon, lat in LON_LAT:
        body += struct.pack(">dddd", lon, lat, 120.0, 7.0)
    assert decode_wkb_line_string(body.hex()) == EXPECTED


def test_non_finite_points_are_dropped_individually() -> None:
    coords = [LON_LAT[0], (math.nan, 51.0), (-3.0, math.inf), LON_LAT[1]]
    assert decode_wkb_line_string(_packed_linestring(coords, 2)) == EXPECTED[:2]


def test_uppercase_hex_is_accepted() -> None:
    assert decode_wkb_line_string(_linestring_hex().upper()) == EXPECTED


@pytest.mark.parametrize("hex_text", ["", "0", "01020", "zz", "0102000000xx"])
def test_malformed_hex_decodes_to_empty(hex_text: str) -> None:
    assert decode_wkb_line_string(hex_text) == ()
    assert hex_to_bytes(hex_text) is None


def test_truncated_buffer_decodes_to_empty() -> None:
    hex_text = _linestring_hex()
    assert decode_wkb_line_string(hex_text[:-16]) == ()


def test_point_count_larger_than_buffer() -> None:
    body = struct.pack("<BII", 1, 2, 1_000_000) + struct.pack("<dd", -3.18, 51.48)
    assert decode_wkb_line_string(body.hex()) == ()


def test_unknown_byte_order_flag() -> None:
    hex_text = "02" + _linestring_hex(byte_order=1)[2:]
    assert decode_wkb_line_string(hex_text) == ()


def test_wrong_geometry_type_is_rejected() -> None:
    point_hex = shapely.to_wkb(Point(-3.18, 51.48), hex=True)
    assert decode_wkb_line_string(point_hex) == ()
    assert decode_wkb_point(_linestring_hex()) is None


def test_decode_wkb_point() -> None:
    point_hex = shapely.to_wkb(Point(-3.18, 51.48), hex=True, byte_order=0)
    assert decode_wkb_point(point_hex) == Coordinate(51.48, -3.18)


def test_codec_dispatches_hex_to_wkb() -> None:
    assert decode_line_string(_linestring_hex()) == EXPECTED
    geom = shapely.set_srid(Point(-3.18, 51.48), 4326)
    assert decode_point(shapely.to_wkb(geom, hex=True, include_srid=True)) == Coordinate(
        51.48, -3.18
    )


def test_empty_linestring() -> None:
    assert decode_wkb_line_string(_packed_linestring([], 2)) == ()
