"""Process-local activity store used by tests and offline runs."""

from __future__ import annotations

from datetime import datetime, timezone
import logging
import threading
from typing import Any, Dict, List, Mapping, Optional
import uuid

from ..errors import ActivityStoreError
from ..models import StoredActivity, VisitRecord
from ..proximity import visits_near
from ..utils import to_utc_aware
from .base import ActivityFilters, stored_activity_from_row

_LOG = logging.getLogger(__name__)

_REQUIRED_COLUMNS = ("sport", "started_at", "ended_at", "track_geom")


class InMemoryActivityStore:
    """Keeps activity rows in a dict, mirroring the hosted store's semantics.

    ``find_visits_near`` runs the same haversine proximity search the server
    function uses, so radius results match between the two stores.
    """

    def __init__(self) -> None:
        self._rows: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.Lock()

    def insert_activity(self, record: Mapping[str, Any]) -> StoredActivity:
        missing = [col for col in _REQUIRED_COLUMNS if not record.get(col)]
        if missing:
            raise ActivityStoreError(
                f"Activity insert missing columns: {', '.join(missing)}"
            )
        row = dict(record)
        row.setdefault("id", str(uuid.uuid4()))
        row.setdefault("created_at", datetime.now(timezone.utc).isoformat())
        with self._lock:
            self._rows[row["id"]] = row
        _LOG.debug("Stored activity id=%s sport=%s", row["id"], row.get("sport"))
        return stored_activity_from_row(row)

    def query_activities(self, filters: ActivityFilters) -> List[StoredActivity]:
        with self._lock:
            rows = list(self._rows.values())
        activities = [stored_activity_from_row(row) for row in rows]
        if filters.sport is not None:
            activities = [a for a in activities if a.sport == filters.sport]
        if filters.started_from is not None:
            lower = to_utc_aware(filters.started_from)
            activities = [
                a for a in activities if a.started_at is not None and a.started_at >= lower
            ]
        if filters.started_to is not None:
            upper = to_utc_aware(filters.started_to)
            activities = [
                a for a in activities if a.started_at is not None and a.started_at <= upper
            ]
        activities.sort(
            key=lambda a: a.started_at or datetime.min.replace(tzinfo=timezone.utc),
            reverse=True,
        )
        if filters.limit:
            activities = activities[: filters.limit]
        return activities

    def get_activity(self, activity_id: str) -> Optional[StoredActivity]:
        with self._lock:
            row = self._rows.get(activity_id)
        return stored_activity_from_row(row) if row is not None else None

    def delete_activity(self, activity_id: str, user_id: str) -> None:
        with self._lock:
            row = self._rows.get(activity_id)
            if row is None or row.get("user_id", user_id) != user_id:
                return
            del self._rows[activity_id]

    def find_visits_near(
        self, lat: float, lon: float, radius_m: float
    ) -> List[VisitRecord]:
        with self._lock:
            rows = list(self._rows.values())
        return visits_near(
            [stored_activity_from_row(row) for row in rows], (lat, lon), radius_m
        )


__all__ = ["InMemoryActivityStore"]
