"""Well-Known Binary (hex) decoding for LineString and Point geometries.

Handles both ISO/OGC WKB and the PostGIS extended flavour, where the high bits
of the geometry type flag Z, M and an embedded SRID. Decoding never raises:
any malformed input yields an empty result.
"""

from __future__ import annotations

import logging
import re
import struct
from dataclasses import dataclass
from typing import List, Optional

from ..models import Coordinate, PointSequence, is_valid_coordinate

_LOG = logging.getLogger(__name__)

HEX_PATTERN = re.compile(r"^[0-9a-f]+$", re.IGNORECASE)

WKB_POINT = 1
WKB_LINESTRING = 2

_FLAG_Z = 0x80000000
_FLAG_M = 0x40000000
_FLAG_SRID = 0x20000000


@dataclass(slots=True)
class _WkbHeader:
    byte_order: str
    geometry_type: int
    has_z: bool
    has_m: bool
    offset: int

    @property
    def extra_dims(self) -> int:
        return int(self.has_z) + int(self.has_m)


def hex_to_bytes(hex_text: str) -> Optional[bytes]:
    """Return the decoded buffer, or ``None`` for odd-length or non-hex input."""

    text = hex_text.strip()
    if not text or len(text) % 2 != 0 or not HEX_PATTERN.match(text):
        return None
    return bytes.fromhex(text)


def decode_wkb_line_string(hex_text: str) -> PointSequence:
    """Decode a WKB hex LineString into coordinates in recording order.

    Points whose lon/lat are not finite (or fall outside WGS84 ranges) are
    dropped one by one; a truncated buffer or non-LineString geometry aborts
    the whole decode and returns ``()``.
    """

    buffer = hex_to_bytes(hex_text)
    if buffer is None:
        return ()
    header = _read_header(buffer)
    if header is None or header.geometry_type != WKB_LINESTRING:
        return ()
    try:
        return _read_line_string(buffer, header)
    except struct.error:
        _LOG.debug("Truncated WKB LineString buffer (%d bytes)", len(buffer))
        return ()


def decode_wkb_point(hex_text: str) -> Optional[Coordinate]:
    """Decode a WKB hex Point, ``None`` when malformed or not a Point."""

    buffer = hex_to_bytes(hex_text)
    if buffer is None:
        return None
    header = _read_header(buffer)
    if header is None or header.geometry_type != WKB_POINT:
        return None
    try:
        lon, lat = struct.unpack_from(f"{header.byte_order}dd", buffer, header.offset)
    except struct.error:
        return None
    if not is_valid_coordinate(lat, lon):
        return None
    return Coordinate(lat, lon)


def _read_header(buffer: bytes) -> Optional[_WkbHeader]:
    if len(buffer) < 5:
        return None
    flag = buffer[0]
    if flag == 1:
        byte_order = "<"
    elif flag == 0:
        byte_order = ">"
    else:
        return None
    (type_code,) = struct.unpack_from(f"{byte_order}I", buffer, 1)
    offset = 5
    if type_code & _FLAG_SRID:
        # SRID is always 4326 for our tracks; skip it.
        offset += 4
    return _WkbHeader(
        byte_order=byte_order,
        geometry_type=type_code & 0xFF,
        has_z=bool(type_code & _FLAG_Z),
        has_m=bool(type_code & _FLAG_M),
        offset=offset,
    )


def _read_line_string(buffer: bytes, header: _WkbHeader) -> PointSequence:
    order = header.byte_order
    offset = header.offset
    (count,) = struct.unpack_from(f"{order}I", buffer, offset)
    offset += 4
    stride = 16 + 8 * header.extra_dims
    if offset + count * stride > len(buffer):
        raise struct.error("point count exceeds buffer length")
    pair = struct.Struct(f"{order}dd")
    points: List[Coordinate] = []
    for _ in range(count):
        lon, lat = pair.unpack_from(buffer, offset)
        offset += stride
        if is_valid_coordinate(lat, lon):
            points.append(Coordinate(lat, lon))
    return tuple(points)


__all__ = ["HEX_PATTERN", "decode_wkb_line_string", "decode_wkb_point", "hex_to_bytes"]
