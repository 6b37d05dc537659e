from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import Mark, Session


@dataclass(frozen=True)
class AttendanceRecord:
    """One row per (student, date) with independent session marks."""

    student_id: str
    attendance_date: date
    morning: Mark = Mark.UNMARKED
    afternoon: Mark = Mark.UNMARKED
    marked_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def mark_for(self, session: Session) -> Mark:
        return self.morning if session is Session.MORNING else self.afternoon

    @property
    def is_empty(self) -> bool:
        return not self.morning.is_marked and not self.afternoon.is_marked


@dataclass(frozen=True)
class StudentPresence:
    """One entry of a bulk marking request."""

    student_id: str
    is_present: bool
