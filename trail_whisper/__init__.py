"""Trail Whisper: store FIT workouts and answer "have I been here before?".

The package decodes FIT files into normalised activities, moves their tracks
across the GeoJSON, WKT and WKB wire formats, and finds visits near a
position with the haversine proximity engine.
"""

from .errors import (
    ActivityStoreError,
    DecodeFailure,
    MalformedContainerError,
    MissingTimestampsError,
    NoGpsDataError,
)
from .fit_decoder import decode_activity, decode_fit_bytes, decode_fit_file
from .geometry import (
    decode_line_string,
    decode_point,
    encode_line_string,
    encode_point,
)
from .models import (
    Coordinate,
    NormalizedActivity,
    ProximityMatch,
    SportCount,
    SportType,
    StoredActivity,
    VisitRecord,
    VisitSummary,
)
from .proximity import find_nearest_point_on_track, haversine_distance
from .visit_aggregation import aggregate_visits

__version__ = "0.1.0"

__all__ = [
    "ActivityStoreError",
    "Coordinate",
    "DecodeFailure",
    "MalformedContainerError",
    "MissingTimestampsError",
    "NoGpsDataError",
    "NormalizedActivity",
    "ProximityMatch",
    "SportCount",
    "SportType",
    "StoredActivity",
    "VisitRecord",
    "VisitSummary",
    "aggregate_visits",
    "decode_activity",
    "decode_fit_bytes",
    "decode_fit_file",
    "decode_line_string",
    "decode_point",
    "encode_line_string",
    "encode_point",
    "find_nearest_point_on_track",
    "haversine_distance",
]
