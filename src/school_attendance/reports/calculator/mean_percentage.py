from __future__ import annotations

from typing import Sequence

from ...attendance.engine import RangeSummary
from .base import ClassAverageCalculator


class MeanPercentageAverage(ClassAverageCalculator):
    """Arithmetic mean of per-student percentages; 0 for an empty roster."""

    def average(self, summaries: Sequence[RangeSummary]) -> float:
        if not summaries:
            return 0.0
        return sum(s.attendance_percentage for s in summaries) / len(summaries)
