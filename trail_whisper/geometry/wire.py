"""Tagged wire geometry values and the single content-sniffing dispatch.

The backend may emit a geometry column as a GeoJSON object, as WKT text or as
(extended) WKB hex depending on its version and configuration. Callers tag a
raw value once with :func:`classify_wire_value` and decode the tagged value.
"""

from __future__ import annotations

from dataclasses import dataclass
import json
from typing import Any, Mapping, Union

from .wkb import HEX_PATTERN


@dataclass(frozen=True, slots=True)
class GeoJsonGeometry:
    value: Mapping[str, Any]


@dataclass(frozen=True, slots=True)
class WktText:
    text: str


@dataclass(frozen=True, slots=True)
class WkbHex:
    text: str


@dataclass(frozen=True, slots=True)
class EmptyGeometry:
    pass


WireGeometry = Union[GeoJsonGeometry, WktText, WkbHex, EmptyGeometry]

_WIRE_TYPES = (GeoJsonGeometry, WktText, WkbHex, EmptyGeometry)


def is_wire_geometry(value: Any) -> bool:
    return isinstance(value, _WIRE_TYPES)


def classify_wire_value(value: Any) -> WireGeometry:
    """Tag a raw backend value with its wire format.

    Strings are trimmed, then checked in order: hex digits only (WKB), a
    leading ``{`` (GeoJSON; invalid JSON becomes :class:`EmptyGeometry`),
    otherwise WKT. Mappings are GeoJSON objects. Everything else is empty.
    """

    if is_wire_geometry(value):
        return value
    if isinstance(value, Mapping):
        return GeoJsonGeometry(value)
    if not isinstance(value, str):
        return EmptyGeometry()
    trimmed = value.strip()
    if not trimmed:
        return EmptyGeometry()
    if HEX_PATTERN.match(trimmed):
        return WkbHex(trimmed)
    if trimmed.startswith("{"):
        try:
            parsed = json.loads(trimmed)
        except ValueError:
            return EmptyGeometry()
        if isinstance(parsed, Mapping):
            return GeoJsonGeometry(parsed)
        return EmptyGeometry()
    return WktText(trimmed)


__all__ = [
    "EmptyGeometry",
    "GeoJsonGeometry",
    "WireGeometry",
    "WkbHex",
    "WktText",
    "classify_wire_value",
    "is_wire_geometry",
]
