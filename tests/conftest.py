"""Global pytest fixtures & helpers.

Adds project root to path and provides reusable track and activity factories
shared by the decoder, proximity, store and service tests.
"""
from __future__ import annotations

import os
import sys
from datetime import datetime, timedelta, timezone
from typing import Sequence

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from trail_whisper.geometry import encode_line_string, encode_point
from trail_whisper.models import Coordinate, NormalizedActivity, SportType, StoredActivity
from trail_whisper.proximity import compute_centroid
from trail_whisper.store import InMemoryActivityStore, build_activity_record

START = datetime(2024, 5, 1, 7, 0, tzinfo=timezone.utc)

# Bute Park loop, Cardiff
PARK_TRACK = (
    Coordinate(51.4800, -3.1800),
    Coordinate(51.4810, -3.1815),
    Coordinate(51.4822, -3.1830),
    Coordinate(51.4835, -3.1822),
    Coordinate(51.4841, -3.1805),
)

# Along the Thames, London
RIVER_TRACK = (
    Coordinate(51.5007, -0.1246),
    Coordinate(51.5033, -0.1196),
    Coordinate(51.5055, -0.1160),
)


# --- Factory helpers -------------------------------------------------
def make_activity(
    points: Sequence[Coordinate] = PARK_TRACK,
    *,
    name: str = "morning.fit",
    sport: SportType = SportType.RUNNING,
    started_at: datetime = START,
    duration: timedelta = timedelta(minutes=30),
    distance: float = 5000.0,
) -> NormalizedActivity:
    return NormalizedActivity(
        name=name,
        sport=sport,
        started_at=started_at,
        ended_at=started_at + duration,
        total_distance_m=distance,
        points=tuple(points),
        centroid=compute_centroid(points),
    )


def make_stored_activity(
    activity_id: str,
    points: Sequence[Coordinate] = PARK_TRACK,
    *,
    sport: SportType = SportType.RUNNING,
    started_at: datetime | None = START,
    distance: float = 5000.0,
) -> StoredActivity:
    return StoredActivity(
        id=activity_id,
        sport=sport,
        started_at=started_at,
        ended_at=started_at + timedelta(minutes=30) if started_at else None,
        total_distance_m=distance,
        track_geom=encode_line_string(points),
        center_point=encode_point(compute_centroid(points)),
    )


def make_fit_records(
    points: Sequence[Sequence[float]],
    *,
    start: datetime = START,
    step: timedelta = timedelta(seconds=10),
    spacing_m: float = 100.0,
) -> list[dict]:
    return [
        {
            "timestamp": start + step * index,
            "position_lat": point[0],
            "position_long": point[1],
            "distance": spacing_m * index,
        }
        for index, point in enumerate(points)
    ]


# --- Fixtures --------------------------------------------------------
@pytest.fixture
def park_track() -> tuple[Coordinate, ...]:
    return PARK_TRACK


@pytest.fixture
def river_track() -> tuple[Coordinate, ...]:
    return RIVER_TRACK


@pytest.fixture
def memory_store() -> InMemoryActivityStore:
    return InMemoryActivityStore()


@pytest.fixture
def populated_store() -> InMemoryActivityStore:
    """Three activities: two park runs (one older) and a river ride."""

    store = InMemoryActivityStore()
    store.insert_activity(
        {
            "id": "park-old",
            **build_activity_record(
                make_activity(started_at=START - timedelta(days=7), distance=4000.0),
                "user-1",
            ),
        }
    )
    store.insert_activity(
        {
            "id": "park-new",
            **build_activity_record(make_activity(distance=6000.0), "user-1"),
        }
    )
    store.insert_activity(
        {
            "id": "river",
            **build_activity_record(
                make_activity(
                    RIVER_TRACK,
                    sport=SportType.CYCLING,
                    started_at=START - timedelta(days=1),
                    distance=20000.0,
                ),
                "user-1",
            ),
        }
    )
    return store
