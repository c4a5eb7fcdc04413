"""GeoJSON Feature export for a single activity."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict

from .geometry import decode_line_string, line_string_to_geojson
from .models import NormalizedActivity, PointSequence, StoredActivity
from .utils import isoformat_z

_LOG = logging.getLogger(__name__)


def activity_to_feature(
    activity_id: str,
    activity: NormalizedActivity | StoredActivity,
    points: PointSequence | None = None,
) -> Dict[str, Any]:
    """Project an activity's track into a GeoJSON ``Feature``.

    Stored activities are decoded from their wire geometry unless already
    decoded ``points`` are given; an unparseable geometry exports as a
    LineString with no coordinates.
    """

    if points is None:
        if isinstance(activity, StoredActivity):
            points = decode_line_string(activity.track_geom)
        else:
            points = activity.points
    return {
        "type": "Feature",
        "geometry": line_string_to_geojson(points),
        "properties": {
            "id": activity_id,
            "sport": str(activity.sport),
            "started_at": _iso_or_none(activity.started_at),
            "ended_at": _iso_or_none(activity.ended_at),
            "total_distance_m": activity.total_distance_m,
        },
    }


def default_feature_filename(activity_id: str) -> str:
    return f"activity-{activity_id}.geojson"


def write_feature(feature: Dict[str, Any], path: str | Path) -> Path:
    """Write ``feature`` as indented JSON and return the output path."""

    output = Path(path)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(json.dumps(feature, indent=2), encoding="utf-8")
    _LOG.info(
        "Wrote GeoJSON feature with %d points to %s",
        len(feature["geometry"]["coordinates"]),
        output,
    )
    return output


def _iso_or_none(value: Any) -> str | None:
    if value is None:
        return None
    return isoformat_z(value)


__all__ = [
    "activity_to_feature",
    "default_feature_filename",
    "write_feature",
]
