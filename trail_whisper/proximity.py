"""Distance and nearest-point helpers for GPS tracks.

``haversine_distance`` is the only distance formula used anywhere in the
package, so radius checks made here agree with the store's server-side
``find_visits_near`` query.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
import math
from typing import Callable, Iterable, List, Optional, Sequence

import numpy as np

from .geometry import decode_line_string
from .models import (
    Coordinate,
    PointSequence,
    ProximityMatch,
    StoredActivity,
    VisitRecord,
)

_LOG = logging.getLogger(__name__)
EARTH_RADIUS_M = 6_371_000.0

TrackDecoder = Callable[[StoredActivity], PointSequence]


@dataclass(frozen=True, slots=True)
class TrackBounds:
    min_lat: float
    min_lon: float
    max_lat: float
    max_lon: float

    def contains(self, point: Sequence[float]) -> bool:
        lat, lon = point[0], point[1]
        return (
            self.min_lat <= lat <= self.max_lat and self.min_lon <= lon <= self.max_lon
        )


def haversine_distance(first: Sequence[float], second: Sequence[float]) -> float:
    """Great-circle distance in metres between two ``(lat, lon)`` points."""

    lat1, lon1 = first[0], first[1]
    lat2, lon2 = second[0], second[1]
    sin = math.sin
    cos = math.cos
    radians = math.radians
    lat1_rad = radians(lat1)
    lat2_rad = radians(lat2)
    delta_lat = lat2_rad - lat1_rad
    delta_lon = radians(lon2 - lon1)
    sin_half_lat = sin(delta_lat / 2.0)
    sin_half_lon = sin(delta_lon / 2.0)
    h = sin_half_lat**2 + cos(lat1_rad) * cos(lat2_rad) * sin_half_lon**2
    # Rounding can push h fractionally above 1 for antipodal points.
    h = min(h, 1.0)
    c = 2.0 * math.atan2(math.sqrt(h), math.sqrt(1.0 - h))
    return EARTH_RADIUS_M * c


def find_nearest_point_on_track(
    track: Iterable[Sequence[float]],
    target: Sequence[float],
    max_distance: float | None = None,
) -> Optional[ProximityMatch]:
    """Return the track point nearest to ``target``.

    Without ``max_distance`` the whole track is scanned and the global minimum
    is returned. With ``max_distance`` the scan stops at the first point whose
    running minimum is within the threshold, so the result is *a* point within
    radius, not necessarily the closest one; ``None`` is returned when no
    point is within the threshold. Callers that need the true nearest point
    must omit ``max_distance``.

    Points with non-finite coordinates are skipped. An empty track (or one
    without finite points) yields ``None``.
    """

    nearest: Optional[Sequence[float]] = None
    nearest_distance = math.inf
    for point in track:
        lat, lon = point[0], point[1]
        if not (math.isfinite(lat) and math.isfinite(lon)):
            continue
        distance = haversine_distance(point, target)
        if distance < nearest_distance:
            nearest_distance = distance
            nearest = point
        if max_distance is not None and nearest_distance <= max_distance:
            return ProximityMatch(Coordinate(nearest[0], nearest[1]), nearest_distance)

    if nearest is None:
        return None
    if max_distance is not None and nearest_distance > max_distance:
        return None
    return ProximityMatch(Coordinate(nearest[0], nearest[1]), nearest_distance)


def compute_centroid(points: Sequence[Sequence[float]]) -> Optional[Coordinate]:
    """Arithmetic mean of latitudes and longitudes.

    This is not a geodesic centroid and is skewed near the poles or across the
    antimeridian; it is only used for coarse map placement.
    """

    if not points:
        return None
    array = np.asarray([(pt[0], pt[1]) for pt in points], dtype=float)
    mean_lat, mean_lon = array.mean(axis=0)
    return Coordinate(float(mean_lat), float(mean_lon))


def track_bounds(points: Sequence[Sequence[float]]) -> Optional[TrackBounds]:
    """Bounding box of the finite points in ``points``."""

    if not points:
        return None
    array = np.asarray([(pt[0], pt[1]) for pt in points], dtype=float)
    array = array[np.isfinite(array).all(axis=1)]
    if array.size == 0:
        return None
    mins = array.min(axis=0)
    maxs = array.max(axis=0)
    return TrackBounds(
        min_lat=float(mins[0]),
        min_lon=float(mins[1]),
        max_lat=float(maxs[0]),
        max_lon=float(maxs[1]),
    )


def _decode_stored_track(activity: StoredActivity) -> PointSequence:
    return decode_line_string(activity.track_geom)


def filter_activities_near(
    activities: Iterable[StoredActivity],
    target: Sequence[float],
    radius_m: float,
    *,
    track_decoder: TrackDecoder = _decode_stored_track,
) -> List[StoredActivity]:
    """Keep activities whose track passes within ``radius_m`` of ``target``.

    Uses the early-exit nearest-point search: only "is it within radius"
    matters here. Activities without a decodable track are dropped.
    """

    kept: List[StoredActivity] = []
    for activity in activities:
        points = track_decoder(activity)
        if not points:
            continue
        match = find_nearest_point_on_track(points, target, radius_m)
        if match is not None and match.distance_m <= radius_m:
            kept.append(activity)
    return kept


def visits_near(
    activities: Iterable[StoredActivity],
    target: Sequence[float],
    radius_m: float,
    *,
    track_decoder: TrackDecoder = _decode_stored_track,
) -> List[VisitRecord]:
    """Visits within ``radius_m`` of ``target``, most recent first.

    Each visit carries the true nearest distance of its track, so the full
    track is scanned rather than stopping at the first point within radius.
    """

    visits: List[VisitRecord] = []
    for activity in activities:
        points = track_decoder(activity)
        if not points:
            continue
        match = find_nearest_point_on_track(points, target)
        if match is None or match.distance_m > radius_m:
            continue
        visits.append(
            VisitRecord(
                activity_id=activity.id,
                sport=activity.sport,
                started_at=activity.started_at,
                ended_at=activity.ended_at,
                total_distance_m=activity.total_distance_m,
                distance_m=match.distance_m,
            )
        )
    _LOG.debug("Found %d visits within %.0fm", len(visits), radius_m)
    return sort_visits_by_recency(visits)


def sort_visits_by_recency(visits: Iterable[VisitRecord]) -> List[VisitRecord]:
    """Order visits by start time descending; visits without a start go last."""

    visits = list(visits)
    dated = [visit for visit in visits if visit.started_at is not None]
    undated = [visit for visit in visits if visit.started_at is None]
    dated.sort(key=lambda visit: visit.started_at, reverse=True)
    return dated + undated


__all__ = [
    "EARTH_RADIUS_M",
    "TrackBounds",
    "compute_centroid",
    "filter_activities_near",
    "find_nearest_point_on_track",
    "haversine_distance",
    "sort_visits_by_recency",
    "track_bounds",
    "visits_near",
]
