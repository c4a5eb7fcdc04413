"""General utility helpers shared across modules."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any


def to_utc_aware(value: datetime) -> datetime:
    """Return ``value`` as a timezone-aware UTC datetime.

    Naive datetimes are assumed to already be in UTC, which is how FIT files
    store timestamps.
    """

    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_iso_datetime(raw: str) -> datetime | None:
    """Parse an ISO-8601 string (``Z`` suffix allowed), ``None`` when invalid."""

    text = raw.strip()
    if not text:
        return None
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def coerce_datetime(value: Any) -> datetime | None:
    """Return a UTC-aware datetime for datetime or ISO string input."""

    if isinstance(value, datetime):
        return to_utc_aware(value)
    if isinstance(value, str):
        parsed = parse_iso_datetime(value)
        return to_utc_aware(parsed) if parsed is not None else None
    return None


def isoformat_z(value: datetime) -> str:
    """Format a datetime as UTC ISO-8601 with a ``Z`` suffix."""

    return to_utc_aware(value).isoformat().replace("+00:00", "Z")


def format_distance_meters(distance: float) -> str:
    """Format metres as ``"12.3 km"`` from one kilometre upwards, else ``"850 m"``."""

    if distance >= 1000:
        return f"{distance / 1000:.1f} km"
    return f"{round(distance)} m"


def format_datetime(value: datetime | str | None) -> str:
    """Human readable timestamp; unparseable strings are returned unchanged."""

    if value is None:
        return "-"
    parsed = coerce_datetime(value)
    if parsed is None:
        return str(value)
    return parsed.strftime("%b %d, %Y %H:%M UTC")


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up."""

    return int((value + 0.5) // 1)
