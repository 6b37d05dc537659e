from __future__ import annotations

from typing import Sequence

from ...attendance.engine import RangeSummary, combine
from .base import ClassAverageCalculator


class SummedCountsAverage(ClassAverageCalculator):
    """Ratio of summed effective present days to summed total days.

    Students with more recorded days weigh more.
    """

    def average(self, summaries: Sequence[RangeSummary]) -> float:
        return combine(summaries).attendance_percentage
