"""Tests for the "have I been here before?" service."""

from __future__ import annotations

from typing import List

from conftest import PARK_TRACK
from trail_whisper.models import SportType, VisitRecord
from trail_whisper.services import VisitService
from trail_whisper.services.visit_service import EMPTY_RESULT
from trail_whisper.store import InMemoryActivityStore


class RecordingStore:
    def __init__(self) -> None:
        self.calls: List[tuple] = []

    def find_visits_near(self, lat: float, lon: float, radius_m: float) -> List[VisitRecord]:
        self.calls.append((lat, lon, radius_m))
        return []


def test_no_position_skips_the_store() -> None:
    store = RecordingStore()
    result = VisitService(store).visits_near(None)
    assert result is EMPTY_RESULT
    assert result.stats.total_visits == 0
    assert store.calls == []


def test_uses_default_radius() -> None:
    store = RecordingStore()
    VisitService(store).visits_near((51.48, -3.18))
    assert store.calls == [(51.48, -3.18, 400.0)]


def test_visits_and_summary(populated_store: InMemoryActivityStore) -> None:
    result = VisitService(populated_store).visits_near(PARK_TRACK[0], radius_m=250.0)

    assert [visit.activity_id for visit in result.visits] == ["park-new", "park-old"]
    assert result.stats.total_visits == 2
    assert result.stats.total_distance_m == 10000.0
    assert result.stats.by_sport[0].sport == SportType.RUNNING
    assert result.stats.by_sport[0].count == 2
    assert result.stats.recent_visits == result.visits
