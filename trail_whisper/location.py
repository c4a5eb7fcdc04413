"""Current-position source: device fix or a manually entered override.

The override is passed around explicitly instead of being read from shared
state; :class:`ManualLocationStore` only handles saving and clearing it.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import json
import logging
import math
from pathlib import Path
from typing import Optional

from .config import MANUAL_LOCATION_FILE
from .models import Coordinate, is_valid_coordinate

_LOG = logging.getLogger(__name__)


class LocationSource(str, Enum):
    DEVICE = "device"
    MANUAL = "manual"


@dataclass(frozen=True, slots=True)
class PositionFix:
    lat: float
    lon: float
    accuracy_m: float
    source: LocationSource

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(self.lat, self.lon)


def resolve_position(
    device_fix: Optional[PositionFix],
    manual_override: Optional[Coordinate],
) -> Optional[PositionFix]:
    """Return the position to query with; a manual override always wins."""

    if manual_override is not None:
        return PositionFix(
            lat=manual_override.lat,
            lon=manual_override.lon,
            accuracy_m=math.nan,
            source=LocationSource.MANUAL,
        )
    return device_fix


class ManualLocationStore:
    """JSON file holding the manual location override."""

    def __init__(self, path: str | Path = MANUAL_LOCATION_FILE):
        self.path = Path(path)

    def load(self) -> Optional[Coordinate]:
        if not self.path.exists():
            return None
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            _LOG.warning("Failed to read manual location from %s: %s", self.path, exc)
            return None
        if not isinstance(payload, dict):
            return None
        lat, lon = payload.get("lat"), payload.get("lon")
        if not is_valid_coordinate(lat, lon):
            _LOG.warning("Ignoring invalid manual location in %s", self.path)
            return None
        return Coordinate(float(lat), float(lon))

    def save(self, coordinate: Coordinate) -> None:
        checked = Coordinate.checked(coordinate.lat, coordinate.lon)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            json.dumps({"lat": checked.lat, "lon": checked.lon}), encoding="utf-8"
        )

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)


__all__ = [
    "LocationSource",
    "ManualLocationStore",
    "PositionFix",
    "resolve_position",
]
