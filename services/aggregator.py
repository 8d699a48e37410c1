"""Aggregation logic for dashboard statistics."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from app.schemas import AccidentRecord


@dataclass
class AccidentSummary:
    """Computed statistics for a batch of accident events."""

    total_accidents: int = 0
    max_alcohol: float = 0.0
    avg_alcohol: float = 0.0
    max_impact: float = 0.0
    seatbelt_violations: int = 0


def _or_zero(value: Optional[float]) -> float:
    return value if value is not None else 0.0


class StatsAggregator:
    """Pure aggregation component that can be unit tested in isolation."""

    def aggregate(self, accidents: Iterable[AccidentRecord]) -> AccidentSummary:
        summary = AccidentSummary()
        alcohol_total = 0.0
        max_alcohol: Optional[float] = None
        max_impact: Optional[float] = None

        for accident in accidents:
            summary.total_accidents += 1
            alcohol = _or_zero(accident.alcohol)
            impact = _or_zero(accident.impact)
            alcohol_total += alcohol

            if max_alcohol is None or alcohol > max_alcohol:
                max_alcohol = alcohol
            if max_impact is None or impact > max_impact:
                max_impact = impact
            if accident.seatbelt is False:
                summary.seatbelt_violations += 1

        if summary.total_accidents:
            summary.max_alcohol = max_alcohol or 0.0
            summary.max_impact = max_impact or 0.0
            summary.avg_alcohol = alcohol_total / summary.total_accidents

        return summary
