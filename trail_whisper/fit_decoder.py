"""Decode FIT workout files into normalised activities.

Decoding happens in two steps:

1. :func:`parse_fit_container` reads the binary container with ``fitdecode``
   and keeps only the message fields the activity needs (``record`` and
   ``session`` messages plus the file-level ``sport`` message), with GPS
   positions converted from semicircles to degrees.
2. :func:`decode_activity` turns that container into a
   :class:`~trail_whisper.models.NormalizedActivity`, preferring the first
   session summary and falling back to the first/last record.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
import io
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

import fitdecode

from .activity_types import normalize_sport
from .config import FIT_LENIENT_PARSING
from .errors import MalformedContainerError, MissingTimestampsError, NoGpsDataError
from .models import Coordinate, NormalizedActivity, is_valid_coordinate
from .proximity import compute_centroid
from .utils import coerce_datetime, round_half_up

_LOG = logging.getLogger(__name__)

SEMICIRCLE_TO_DEGREES = 180.0 / 2**31

_RECORD_FIELDS = ("timestamp", "position_lat", "position_long", "distance")
_SESSION_FIELDS = ("sport", "start_time", "timestamp", "total_distance")
_POSITION_FIELDS = ("position_lat", "position_long")

FitMessage = Dict[str, Any]


@dataclass(slots=True)
class FitContainer:
    """Generic message set extracted from a FIT file."""

    records: List[FitMessage] = field(default_factory=list)
    sessions: List[FitMessage] = field(default_factory=list)
    sports: List[FitMessage] = field(default_factory=list)


def semicircles_to_degrees(value: Any) -> Optional[float]:
    """Convert a FIT semicircle integer to degrees; ``None`` for non-numbers."""

    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value) * SEMICIRCLE_TO_DEGREES


def parse_fit_container(data: bytes) -> FitContainer:
    """Read FIT bytes into a :class:`FitContainer`.

    Bad CRCs and undecodable fields are logged and skipped when lenient
    parsing is enabled. Raises :class:`MalformedContainerError` when the data
    is not a readable FIT file at all.
    """

    if FIT_LENIENT_PARSING:
        check_crc = fitdecode.CrcCheck.WARN
        error_handling = fitdecode.ErrorHandling.WARN
    else:
        check_crc = fitdecode.CrcCheck.RAISE
        error_handling = fitdecode.ErrorHandling.RAISE

    container = FitContainer()
    saw_header = False
    try:
        with fitdecode.FitReader(
            io.BytesIO(data),
            check_crc=check_crc,
            error_handling=error_handling,
        ) as reader:
            for frame in reader:
                if isinstance(frame, fitdecode.FitHeader):
                    saw_header = True
                    continue
                if not isinstance(frame, fitdecode.FitDataMessage):
                    continue
                if frame.name == "record":
                    container.records.append(_record_fields(frame))
                elif frame.name == "session":
                    container.sessions.append(_message_fields(frame, _SESSION_FIELDS))
                elif frame.name == "sport":
                    container.sports.append(_message_fields(frame, ("sport",)))
    except fitdecode.FitError as exc:
        raise MalformedContainerError(f"Unreadable FIT data: {exc}") from exc
    if not saw_header:
        raise MalformedContainerError("Unreadable FIT data: no FIT header found")
    _LOG.debug(
        "Parsed FIT container: %d records, %d sessions",
        len(container.records),
        len(container.sessions),
    )
    return container


def _message_fields(
    frame: fitdecode.FitDataMessage, names: Sequence[str]
) -> FitMessage:
    values: FitMessage = {}
    for field_data in frame.fields:
        if field_data.name in names and values.get(field_data.name) is None:
            values[field_data.name] = field_data.value
    return values


def _record_fields(frame: fitdecode.FitDataMessage) -> FitMessage:
    values = _message_fields(frame, _RECORD_FIELDS)
    for key in _POSITION_FIELDS:
        if key in values:
            values[key] = semicircles_to_degrees(values[key])
    return values


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _extract_points(records: Sequence[Mapping[str, Any]]) -> List[Coordinate]:
    points: List[Coordinate] = []
    skipped = 0
    for record in records:
        lat = record.get("position_lat")
        lon = record.get("position_long")
        if not (_is_number(lat) and _is_number(lon)):
            continue
        if not is_valid_coordinate(lat, lon):
            skipped += 1
            continue
        points.append(Coordinate(float(lat), float(lon)))
    if skipped:
        _LOG.debug("Skipped %d records with out-of-range positions", skipped)
    return points


def _resolve_distance(
    session: Mapping[str, Any], records: Sequence[Mapping[str, Any]]
) -> int:
    raw = session.get("total_distance")
    if raw is None and records:
        raw = records[-1].get("distance")
    if not _is_number(raw):
        return 0
    return round_half_up(float(raw))


def _resolve_times(
    session: Mapping[str, Any], records: Sequence[Mapping[str, Any]]
) -> tuple[Optional[datetime], Optional[datetime]]:
    first = records[0] if records else {}
    last = records[-1] if records else {}
    started_at = coerce_datetime(session.get("start_time"))
    if started_at is None:
        started_at = coerce_datetime(first.get("timestamp"))
    ended_at = coerce_datetime(session.get("timestamp"))
    if ended_at is None:
        ended_at = coerce_datetime(last.get("timestamp"))
    if ended_at is None:
        ended_at = started_at
    return started_at, ended_at


def decode_activity(container: FitContainer, name: str = "") -> NormalizedActivity:
    """Build a :class:`NormalizedActivity` from a parsed container.

    Raises:
        NoGpsDataError: no record carries a numeric lat/lon pair.
        MissingTimestampsError: neither the session nor the records provide
            a start (and therefore end) time.
    """

    label = name or "FIT file"
    points = _extract_points(container.records)
    if not points:
        raise NoGpsDataError(f"No GPS points found in {label}.")

    session: Mapping[str, Any] = container.sessions[0] if container.sessions else {}
    started_at, ended_at = _resolve_times(session, container.records)
    if started_at is None or ended_at is None:
        raise MissingTimestampsError(f"Missing timestamps in {label}.")
    if ended_at < started_at:
        _LOG.warning(
            "%s ends (%s) before it starts (%s); clamping end to start",
            label,
            ended_at,
            started_at,
        )
        ended_at = started_at

    raw_sport = session.get("sport")
    if raw_sport is None and container.sports:
        raw_sport = container.sports[0].get("sport")

    centroid = compute_centroid(points)
    if centroid is None:
        raise NoGpsDataError(f"No GPS points found in {label}.")
    return NormalizedActivity(
        name=name,
        sport=normalize_sport(raw_sport),
        started_at=started_at,
        ended_at=ended_at,
        total_distance_m=float(_resolve_distance(session, container.records)),
        points=tuple(points),
        centroid=centroid,
    )


def decode_fit_bytes(data: bytes, name: str = "") -> NormalizedActivity:
    """Parse and decode FIT bytes in one step."""

    return decode_activity(parse_fit_container(data), name=name)


def decode_fit_file(path: str | Path) -> NormalizedActivity:
    """Read a FIT file from disk and decode it."""

    file_path = Path(path)
    return decode_fit_bytes(file_path.read_bytes(), name=file_path.name)


__all__ = [
    "FitContainer",
    "decode_activity",
    "decode_fit_bytes",
    "decode_fit_file",
    "parse_fit_container",
    "semicircles_to_degrees",
]
