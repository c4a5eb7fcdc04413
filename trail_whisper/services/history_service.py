"""Activity history queries with the client-side "near me" filter.

The store evaluates sport and date filters; radius filtering runs here with
the proximity engine on decoded tracks, which are cached per activity.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from threading import RLock
from typing import Any, List, Optional, Tuple

from cachetools import TTLCache

from ..config import TRACK_CACHE_SIZE, TRACK_CACHE_TTL_SECONDS
from ..export import activity_to_feature
from ..geometry import decode_line_string, decode_point
from ..models import Coordinate, PointSequence, StoredActivity
from ..proximity import compute_centroid, filter_activities_near
from ..store.base import ActivityFilters, ActivityStore

_TrackCacheKey = Tuple[str, str]


@dataclass(frozen=True, slots=True)
class ActivityDetail:
    """A stored activity with its decoded track, ready for display."""

    activity: StoredActivity
    points: PointSequence
    center: Optional[Coordinate]

    @property
    def has_track(self) -> bool:
        return bool(self.points)

    @property
    def start(self) -> Optional[Coordinate]:
        return self.points[0] if self.points else None

    @property
    def finish(self) -> Optional[Coordinate]:
        return self.points[-1] if self.points else None

    @property
    def focus(self) -> Optional[Coordinate]:
        """Middle point of the track, used to centre a map."""

        if not self.points:
            return self.center
        return self.points[len(self.points) // 2]


class ActivityHistory:
    def __init__(
        self,
        store: ActivityStore,
        *,
        cache_size: int = TRACK_CACHE_SIZE,
        cache_ttl_s: float = TRACK_CACHE_TTL_SECONDS,
        logger: logging.Logger | None = None,
    ) -> None:
        self.store = store
        self._log = logger or logging.getLogger(self.__class__.__name__)
        self._track_cache: TTLCache[_TrackCacheKey, PointSequence] = TTLCache(
            maxsize=max(1, cache_size), ttl=cache_ttl_s
        )
        self._track_cache_lock = RLock()

    def list_activities(self, filters: ActivityFilters | None = None) -> List[StoredActivity]:
        filters = filters or ActivityFilters()
        activities = self.store.query_activities(filters)
        if filters.near is None:
            return activities
        near = filters.near
        kept = filter_activities_near(
            activities,
            (near.lat, near.lon),
            near.radius_m,
            track_decoder=self.track_points,
        )
        self._log.debug(
            "Near filter kept %d of %d activities within %.0fm",
            len(kept),
            len(activities),
            near.radius_m,
        )
        return kept

    def get_detail(self, activity_id: str) -> Optional[ActivityDetail]:
        activity = self.store.get_activity(activity_id)
        if activity is None:
            return None
        points = self.track_points(activity)
        center = decode_point(activity.center_point) or compute_centroid(points)
        return ActivityDetail(activity=activity, points=points, center=center)

    def export_feature(self, activity_id: str) -> Optional[dict[str, Any]]:
        detail = self.get_detail(activity_id)
        if detail is None:
            return None
        return activity_to_feature(activity_id, detail.activity, detail.points)

    def track_points(self, activity: StoredActivity) -> PointSequence:
        """Decoded track for ``activity``; unparseable geometry gives ``()``."""

        raw = activity.track_geom
        if raw is None:
            return ()
        key: _TrackCacheKey = (activity.id, raw if isinstance(raw, str) else repr(raw))
        with self._track_cache_lock:
            cached = self._track_cache.get(key)
        if cached is not None:
            return cached
        points = decode_line_string(raw)
        if not points:
            self._log.debug("Activity %s has no decodable track", activity.id)
        with self._track_cache_lock:
            self._track_cache[key] = points
        return points


__all__ = ["ActivityDetail", "ActivityHistory"]
