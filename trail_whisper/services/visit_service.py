"""Answers "have I been here before?" for a position."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Optional, Sequence, Tuple

from ..config import VISITS_DEFAULT_RADIUS_M
from ..models import VisitRecord, VisitSummary
from ..store.base import ActivityStore
from ..visit_aggregation import EMPTY_SUMMARY, aggregate_visits


@dataclass(frozen=True, slots=True)
class VisitsNearResult:
    visits: Tuple[VisitRecord, ...]
    stats: VisitSummary


EMPTY_RESULT = VisitsNearResult(visits=(), stats=EMPTY_SUMMARY)


class VisitService:
    def __init__(self, store: ActivityStore, logger: logging.Logger | None = None):
        self.store = store
        self._log = logger or logging.getLogger(self.__class__.__name__)

    def visits_near(
        self,
        position: Optional[Sequence[float]],
        radius_m: float = VISITS_DEFAULT_RADIUS_M,
    ) -> VisitsNearResult:
        """Visits within ``radius_m`` of ``position`` plus their summary.

        The store returns visits most recent first. Without a position the
        empty result is returned and the store is not queried.
        """

        if position is None:
            return EMPTY_RESULT
        lat, lon = float(position[0]), float(position[1])
        visits = tuple(self.store.find_visits_near(lat, lon, radius_m))
        self._log.info(
            "Found %d visits within %.0fm of (%.5f, %.5f)",
            len(visits),
            radius_m,
            lat,
            lon,
        )
        return VisitsNearResult(visits=visits, stats=aggregate_visits(visits))


__all__ = ["EMPTY_RESULT", "VisitService", "VisitsNearResult"]
