from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

from ...attendance.engine import RangeSummary


class ClassAverageCalculator(ABC):
    """Calculator interface (Strategy Pattern for class-level averages)."""

    @abstractmethod
    def average(self, summaries: Sequence[RangeSummary]) -> float:
        raise NotImplementedError
