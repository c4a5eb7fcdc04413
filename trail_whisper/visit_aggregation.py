"""Visit aggregation helpers.

Pure transformation: given the visits found near a position it produces the
summary shown on the dashboard. Callers supply visits already ordered most
recent first; the order is not changed here.
"""

from __future__ import annotations

from typing import Dict, Iterable, List

from .config import RECENT_VISITS_LIMIT
from .models import SportCount, SportType, VisitRecord, VisitSummary


def _total_distance(visits: Iterable[VisitRecord]) -> float:
    total = 0.0
    for visit in visits:
        dist = visit.total_distance_m
        if isinstance(dist, (int, float)):
            total += float(dist)
    return total


def _sport_counts(visits: Iterable[VisitRecord]) -> List[SportCount]:
    counts: Dict[SportType, int] = {}
    for visit in visits:
        counts[visit.sport] = counts.get(visit.sport, 0) + 1
    # sorted() is stable, so ties keep first-seen order.
    ranked = sorted(counts.items(), key=lambda item: -item[1])
    return [SportCount(sport=sport, count=count) for sport, count in ranked]


def aggregate_visits(
    visits: Iterable[VisitRecord],
    *,
    recent_limit: int = RECENT_VISITS_LIMIT,
) -> VisitSummary:
    """Summarise visits: count, summed activity distance, recent list, by sport.

    Never fails; an empty input returns the all-zero summary.
    """

    items = list(visits)
    return VisitSummary(
        total_visits=len(items),
        total_distance_m=_total_distance(items),
        recent_visits=tuple(items[: max(recent_limit, 0)]),
        by_sport=tuple(_sport_counts(items)),
    )


EMPTY_SUMMARY = aggregate_visits([])

__all__ = ["EMPTY_SUMMARY", "aggregate_visits"]
