"""Tests for the geometry codec (EWKT encoding and multi-format decoding)."""

from __future__ import annotations

import json

import pytest

from trail_whisper.geometry import (
    EmptyGeometry,
    GeoJsonGeometry,
    WkbHex,
    WktText,
    classify_wire_value,
    decode_line_string,
    decode_point,
    encode_line_string,
    encode_point,
    line_string_to_geojson,
    point_to_geojson,
)
from trail_whisper.models import Coordinate


def test_encode_line_string_uses_lon_lat_order_and_srid() -> None:
    encoded = encode_line_string([Coordinate(1.5, 2.25), Coordinate(3.0, 4.0)])
    assert encoded == "SRID=4326;LINESTRING(2.25 1.5, 4 3)"


def test_encode_point() -> None:
    assert encode_point(Coordinate(51.5, -0.1)) == "SRID=4326;POINT(-0.1 51.5)"


def test_encoded_track_decodes_to_same_points(park_track) -> None:
    precise = park_track + (Coordinate(51.48158312345678, -3.179091234567),)
    assert decode_line_string(encode_line_string(precise)) == precise


def test_decode_plain_wkt_without_srid() -> None:
    points = decode_line_string("LINESTRING (-3.18 51.48, -3.19 51.49)")
    assert points == (Coordinate(51.48, -3.18), Coordinate(51.49, -3.19))


def test_decode_wkt_is_case_insensitive() -> None:
    assert decode_line_string("linestring(10 20)") == (Coordinate(20.0, 10.0),)


def test_decode_geojson_mapping() -> None:
    value = {"type": "LineString", "coordinates": [[-3.1, 51.4], [-3.2, 51.5]]}
    assert decode_line_string(value) == (
        Coordinate(51.4, -3.1),
        Coordinate(51.5, -3.2),
    )


def test_decode_geojson_text_and_feature(park_track) -> None:
    feature = {
        "type": "Feature",
        "geometry": line_string_to_geojson(park_track),
        "properties": {},
    }
    assert decode_line_string(json.dumps(feature)) == park_track
    assert decode_line_string(json.dumps(feature["geometry"])) == park_track


def test_geojson_pairs_with_altitude_keep_lon_lat() -> None:
    value = {"type": "LineString", "coordinates": [[-3.1, 51.4, 12.0]]}
    assert decode_line_string(value) == (Coordinate(51.4, -3.1),)


@pytest.mark.parametrize("raw", ["{not json", "{\"type\": ", "[1, 2]", "POLYGON((0 0, 1 1, 0 0))"])
def test_unparseable_text_decodes_to_empty(raw: str) -> None:
    assert decode_line_string(raw) == ()


@pytest.mark.parametrize("raw", [None, "", "   ", 42, ["LINESTRING(1 2)"]])
def test_missing_values_decode_to_empty(raw) -> None:
    assert decode_line_string(raw) == ()


def test_invalid_wkt_pairs_are_dropped_individually() -> None:
    raw = "LINESTRING(1 2, foo bar, 3 4 5, 200 10, nan 1, 5 6)"
    assert decode_line_string(raw) == (Coordinate(2.0, 1.0), Coordinate(6.0, 5.0))


def test_invalid_geojson_pairs_are_dropped() -> None:
    value = {
        "type": "LineString",
        "coordinates": [[1, 2], ["a", 3], [1], [10, 95], None, [5, 6]],
    }
    assert decode_line_string(value) == (Coordinate(2.0, 1.0), Coordinate(6.0, 5.0))


def test_geojson_without_coordinates_list() -> None:
    assert decode_line_string({"type": "LineString", "coordinates": "1 2"}) == ()


def test_decode_point_formats() -> None:
    expected = Coordinate(51.48, -3.18)
    assert decode_point("SRID=4326;POINT(-3.18 51.48)") == expected
    assert decode_point(point_to_geojson(expected)) == expected
    assert decode_point(json.dumps(point_to_geojson(expected))) == expected


@pytest.mark.parametrize(
    "raw",
    [None, "", "garbage", "POINT(1)", "POINT(500 1)", {"type": "LineString", "coordinates": [[1, 2]]}],
)
def test_decode_point_unparseable_is_none(raw) -> None:
    assert decode_point(raw) is None


def test_classify_wire_value() -> None:
    assert isinstance(classify_wire_value("0102000000"), WkbHex)
    assert isinstance(classify_wire_value({"type": "Point"}), GeoJsonGeometry)
    assert isinstance(classify_wire_value('{"type": "Point"}'), GeoJsonGeometry)
    assert isinstance(classify_wire_value("LINESTRING(1 2)"), WktText)
    assert isinstance(classify_wire_value("{oops"), EmptyGeometry)
    assert isinstance(classify_wire_value(None), EmptyGeometry)
    assert isinstance(classify_wire_value(3.5), EmptyGeometry)


def test_classify_trims_and_passes_tagged_values_through() -> None:
    assert classify_wire_value("  LINESTRING(1 2)\n") == WktText("LINESTRING(1 2)")
    tagged = WkbHex("00")
    assert classify_wire_value(tagged) is tagged


def test_tagged_values_decode_like_raw_ones(park_track) -> None:
    text = encode_line_string(park_track)
    assert decode_line_string(WktText(text)) == park_track
    assert decode_line_string(EmptyGeometry()) == ()


def test_coordinates_too_large_for_a_float_are_dropped() -> None:
    huge = 10**400
    line = '{"type": "LineString", "coordinates": [[%d, 2], [3, 4]]}' % huge
    assert decode_line_string(line) == (Coordinate(4.0, 3.0),)
    assert decode_line_string({"type": "LineString", "coordinates": [[1, huge]]}) == ()
    assert decode_point('{"type": "Point", "coordinates": [%d, 2]}' % huge) is None
