"""Utilities for classifying workout sport types."""

from __future__ import annotations

from typing import Any, Mapping

from .models import SportType

__all__ = ["normalize_sport"]

_SPORT_ALIASES: Mapping[str, SportType] = {
    "running": SportType.RUNNING,
    "walking": SportType.WALKING,
    "hiking": SportType.HIKING,
    "cycling": SportType.CYCLING,
    "biking": SportType.CYCLING,
    "swimming": SportType.SWIMMING,
}


def normalize_sport(value: Any) -> SportType:
    """Map a raw sport value onto the fixed vocabulary.

    FIT devices report sports with inconsistent casing, and unknown enum
    values may come through as integers. Anything outside the vocabulary,
    including a missing value, becomes ``SportType.OTHER``.
    """

    if value is None:
        return SportType.OTHER
    if isinstance(value, SportType):
        return value
    normalized = str(value).strip().lower()
    return _SPORT_ALIASES.get(normalized, SportType.OTHER)
