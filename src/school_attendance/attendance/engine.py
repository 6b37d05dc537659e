"""Attendance classification and aggregation.

Pure functions over AttendanceRecord values; no store access happens here.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

from ..core.constants import HALF_DAY_WEIGHT, PERCENTAGE_FORMAT
from ..core.enums import DayStatus, Mark, Session
from .model import AttendanceRecord


def classify_day(morning: Mark, afternoon: Mark) -> DayStatus:
    if morning is Mark.PRESENT and afternoon is Mark.PRESENT:
        return DayStatus.PRESENT
    if morning is Mark.ABSENT and afternoon is Mark.ABSENT:
        return DayStatus.ABSENT
    # One present session is a half day even when the other was never marked,
    # while one absent session alone stays NOT_MARKED.
    if morning is Mark.PRESENT or afternoon is Mark.PRESENT:
        return DayStatus.HALF_DAY
    return DayStatus.NOT_MARKED


def classify_record(record: AttendanceRecord) -> DayStatus:
    return classify_day(record.morning, record.afternoon)


def percentage(part: float, whole: float) -> float:
    if not whole:
        return 0.0
    return part / whole * 100


def format_percentage(value: float) -> str:
    return PERCENTAGE_FORMAT.format(value)


@dataclass(frozen=True)
class SessionSummary:
    """Counts of one session over a day's records."""

    total_students: int
    present: int
    absent: int
    not_marked: int

    @property
    def attendance_percentage(self) -> float:
        return percentage(self.present, self.total_students)

    def as_dict(self) -> dict:
        return {
            "totalStudents": self.total_students,
            "present": self.present,
            "absent": self.absent,
            "notMarked": self.not_marked,
            "attendancePercentage": format_percentage(self.attendance_percentage),
        }


def summarize_session(records: Iterable[AttendanceRecord], session: Session) -> SessionSummary:
    present = absent = not_marked = 0
    for record in records:
        mark = record.mark_for(session)
        if mark is Mark.PRESENT:
            present += 1
        elif mark is Mark.ABSENT:
            absent += 1
        else:
            not_marked += 1
    return SessionSummary(
        total_students=present + absent + not_marked,
        present=present,
        absent=absent,
        not_marked=not_marked,
    )


@dataclass(frozen=True)
class RangeSummary:
    """Full-day tallies over a set of records.

    total_days counts every record, including NOT_MARKED days.
    """

    total_days: int = 0
    present_days: int = 0
    absent_days: int = 0
    half_days: int = 0

    @property
    def effective_present_days(self) -> float:
        return self.present_days + self.half_days * HALF_DAY_WEIGHT

    @property
    def attendance_percentage(self) -> float:
        return percentage(self.effective_present_days, self.total_days)

    def __add__(self, other: "RangeSummary") -> "RangeSummary":
        return RangeSummary(
            total_days=self.total_days + other.total_days,
            present_days=self.present_days + other.present_days,
            absent_days=self.absent_days + other.absent_days,
            half_days=self.half_days + other.half_days,
        )

    def as_dict(self) -> dict:
        return {
            "totalDays": self.total_days,
            "presentDays": self.present_days,
            "absentDays": self.absent_days,
            "halfDays": self.half_days,
            "effectivePresentDays": self.effective_present_days,
            "attendancePercentage": format_percentage(self.attendance_percentage),
        }


def summarize_days(records: Iterable[AttendanceRecord]) -> RangeSummary:
    total = present = absent = half = 0
    for record in records:
        total += 1
        status = classify_record(record)
        if status is DayStatus.PRESENT:
            present += 1
        elif status is DayStatus.ABSENT:
            absent += 1
        elif status is DayStatus.HALF_DAY:
            half += 1
    return RangeSummary(total_days=total, present_days=present, absent_days=absent, half_days=half)


def combine(summaries: Sequence[RangeSummary]) -> RangeSummary:
    total = RangeSummary()
    for s in summaries:
        total = total + s
    return total


def daily_rows(records: Iterable[AttendanceRecord]) -> list[dict]:
    return [
        {
            "date": r.attendance_date.isoformat(),
            "morning": r.morning.as_flag(),
            "afternoon": r.afternoon.as_flag(),
            "dayStatus": classify_record(r).value,
            "markedBy": r.marked_by,
        }
        for r in records
    ]
