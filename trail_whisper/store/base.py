"""Activity store interface plus row (de)serialisation helpers."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Protocol

from ..activity_types import normalize_sport
from ..geometry import encode_line_string, encode_point
from ..models import NormalizedActivity, SportType, StoredActivity, VisitRecord
from ..utils import coerce_datetime, isoformat_z

ActivityRecord = Dict[str, Any]


@dataclass(frozen=True, slots=True)
class NearFilter:
    lat: float
    lon: float
    radius_m: float


@dataclass(frozen=True, slots=True)
class ActivityFilters:
    """Filters for :meth:`ActivityStore.query_activities`.

    ``sport``, ``started_from``, ``started_to`` and ``limit`` are evaluated by
    the store; ``near`` is applied client-side with the proximity engine.
    """

    sport: Optional[SportType] = None
    started_from: Optional[datetime] = None
    started_to: Optional[datetime] = None
    limit: Optional[int] = None
    near: Optional[NearFilter] = None


class ActivityStore(Protocol):
    def insert_activity(self, record: Mapping[str, Any]) -> StoredActivity: ...

    def query_activities(self, filters: ActivityFilters) -> List[StoredActivity]: ...

    def get_activity(self, activity_id: str) -> Optional[StoredActivity]: ...

    def delete_activity(self, activity_id: str, user_id: str) -> None: ...

    def find_visits_near(
        self, lat: float, lon: float, radius_m: float
    ) -> List[VisitRecord]: ...


def build_activity_record(
    activity: NormalizedActivity, user_id: str | None = None
) -> ActivityRecord:
    """Serialise an activity for insertion (EWKT track and centroid)."""

    if not activity.points:
        raise ValueError("Refusing to store an activity without GPS points")
    record: ActivityRecord = {
        "sport": activity.sport.value,
        "started_at": isoformat_z(activity.started_at),
        "ended_at": isoformat_z(activity.ended_at),
        "total_distance_m": activity.total_distance_m,
        "track_geom": encode_line_string(activity.points),
        "center_point": encode_point(activity.centroid),
    }
    if user_id:
        record["user_id"] = user_id
    return record


def stored_activity_from_row(row: Mapping[str, Any]) -> StoredActivity:
    return StoredActivity(
        id=str(row.get("id", "")),
        sport=normalize_sport(row.get("sport")),
        started_at=coerce_datetime(row.get("started_at")),
        ended_at=coerce_datetime(row.get("ended_at")),
        total_distance_m=_coerce_float(row.get("total_distance_m")) or 0.0,
        track_geom=row.get("track_geom"),
        center_point=row.get("center_point"),
        created_at=coerce_datetime(row.get("created_at")),
    )


def visit_record_from_row(row: Mapping[str, Any]) -> VisitRecord:
    return VisitRecord(
        activity_id=str(row.get("activity_id", "")),
        sport=normalize_sport(row.get("sport")),
        started_at=coerce_datetime(row.get("started_at")),
        ended_at=coerce_datetime(row.get("ended_at")),
        total_distance_m=_coerce_float(row.get("total_distance_m")),
        distance_m=_coerce_float(row.get("distance_m")) or 0.0,
    )


def _coerce_float(value: Any) -> float | None:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


__all__ = [
    "ActivityFilters",
    "ActivityRecord",
    "ActivityStore",
    "NearFilter",
    "build_activity_record",
    "stored_activity_from_row",
    "visit_record_from_row",
]
