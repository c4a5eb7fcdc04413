"""Tests for sport type normalisation helpers."""

from __future__ import annotations

import pytest

from trail_whisper.activity_types import normalize_sport
from trail_whisper.models import SportType


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("running", SportType.RUNNING),
        ("  Walking ", SportType.WALKING),
        ("HIKING", SportType.HIKING),
        ("biking", SportType.CYCLING),
        ("swimming", SportType.SWIMMING),
        ("e_biking", SportType.OTHER),
        (None, SportType.OTHER),
        (7, SportType.OTHER),
        (SportType.CYCLING, SportType.CYCLING),
    ],
)
def test_normalize_sport(raw, expected: SportType) -> None:
    assert normalize_sport(raw) == expected


def test_sport_type_str_is_value() -> None:
    assert str(SportType.SWIMMING) == "swimming"
