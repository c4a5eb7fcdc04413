"""Value types shared by the decoder, codec, proximity and aggregation code."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
import math
from typing import Any, NamedTuple, Optional, Tuple


class SportType(str, Enum):
    RUNNING = "running"
    WALKING = "walking"
    HIKING = "hiking"
    CYCLING = "cycling"
    SWIMMING = "swimming"
    OTHER = "other"

    def __str__(self) -> str:
        return self.value


def is_valid_coordinate(lat: Any, lon: Any) -> bool:
    """Return True for finite numbers inside the WGS84 lat/lon ranges."""

    if isinstance(lat, bool) or isinstance(lon, bool):
        return False
    if not isinstance(lat, (int, float)) or not isinstance(lon, (int, float)):
        return False
    try:
        lat_value, lon_value = float(lat), float(lon)
    except (OverflowError, ValueError):
        # Python ints beyond the float range.
        return False
    if not (math.isfinite(lat_value) and math.isfinite(lon_value)):
        return False
    return -90.0 <= lat_value <= 90.0 and -180.0 <= lon_value <= 180.0


class Coordinate(NamedTuple):
    """Immutable WGS84 position, usable anywhere a ``(lat, lon)`` pair is."""

    lat: float
    lon: float

    @classmethod
    def checked(cls, lat: Any, lon: Any) -> "Coordinate":
        """Build a coordinate, raising ``ValueError`` outside the valid ranges."""

        if not is_valid_coordinate(lat, lon):
            raise ValueError(f"Invalid coordinate lat={lat!r} lon={lon!r}")
        return cls(float(lat), float(lon))


PointSequence = Tuple[Coordinate, ...]


@dataclass(frozen=True, slots=True)
class NormalizedActivity:
    """Activity decoded from a single workout file."""

    name: str
    sport: SportType
    started_at: datetime
    ended_at: datetime
    total_distance_m: float
    points: PointSequence
    centroid: Coordinate


@dataclass(frozen=True, slots=True)
class ProximityMatch:
    """Nearest track point found for a reference coordinate."""

    point: Coordinate
    distance_m: float


@dataclass(frozen=True, slots=True)
class VisitRecord:
    """Stored activity that passed within a radius of a reference coordinate."""

    activity_id: str
    sport: SportType
    started_at: Optional[datetime]
    ended_at: Optional[datetime]
    total_distance_m: Optional[float]
    distance_m: float


@dataclass(frozen=True, slots=True)
class SportCount:
    sport: SportType
    count: int


@dataclass(frozen=True, slots=True)
class VisitSummary:
    """Derived statistics for a list of visits. Recomputed, never persisted."""

    total_visits: int
    total_distance_m: float
    recent_visits: Tuple[VisitRecord, ...]
    by_sport: Tuple[SportCount, ...]


@dataclass(frozen=True, slots=True)
class StoredActivity:
    """Activity row as returned by the activity store.

    ``track_geom`` and ``center_point`` hold the raw wire values (GeoJSON,
    WKT or WKB hex) exactly as the backend emitted them.
    """

    id: str
    sport: SportType
    started_at: Optional[datetime]
    ended_at: Optional[datetime]
    total_distance_m: float
    track_geom: Any = None
    center_point: Any = None
    created_at: Optional[datetime] = None


__all__ = [
    "Coordinate",
    "NormalizedActivity",
    "PointSequence",
    "ProximityMatch",
    "SportCount",
    "SportType",
    "StoredActivity",
    "VisitRecord",
    "VisitSummary",
    "is_valid_coordinate",
]
