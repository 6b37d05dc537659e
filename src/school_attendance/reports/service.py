from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Optional, Sequence

from ..attendance.engine import RangeSummary, combine, daily_rows, format_percentage, summarize_days
from ..attendance.model import AttendanceRecord
from ..attendance.repository import AttendanceRepository
from ..classes.normalization import display_name, resolve_selector
from ..common.datetime_utils import month_bounds, parse_iso_date, today_local, working_days
from ..common.validators import require_int, require_non_empty
from ..core.exceptions import NotFoundError, ValidationError
from ..students.model import Student
from ..students.repository import StudentRepository
from .calculator.base import ClassAverageCalculator
from .calculator.mean_percentage import MeanPercentageAverage
from .calculator.summed_counts import SummedCountsAverage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StudentReport:
    student: Student
    summary: RangeSummary
    records: list[AttendanceRecord] = field(default_factory=list)


def _student_info(student: Student) -> dict:
    return {
        "id": student.student_id,
        "name": student.full_name,
        "rollNo": student.roll_no,
        "admissionNo": student.admission_no,
        "class": student.class_level.value,
        "displayClass": display_name(student.class_level),
        "section": student.section.value,
    }


def _check_range(start: date, end: date) -> None:
    if start > end:
        raise ValidationError("startDate must not be after endDate")


class AttendanceReportService:
    """Range and monthly reports over the attendance store.

    The two class-level averages are deliberately different calculators:
    range summaries use summed counts, monthly reports use the mean of
    per-student percentages.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        students: StudentRepository,
        *,
        range_average: Optional[ClassAverageCalculator] = None,
        monthly_average: Optional[ClassAverageCalculator] = None,
    ):
        self._attendance = attendance
        self._students = students
        self._range_average = range_average or SummedCountsAverage()
        self._monthly_average = monthly_average or MeanPercentageAverage()

    def _get_active_student(self, student_id: str) -> Student:
        student = self._students.get_by_id(student_id)
        if not student or not student.is_active:
            raise NotFoundError("Student not found or inactive")
        return student

    def _roster_reports(self, roster: Sequence[Student], *, start: date, end: date) -> list[StudentReport]:
        records = self._attendance.list_for_students_in_range(
            [s.student_id for s in roster],
            start_date=start,
            end_date=end,
        )
        by_student: dict[str, list[AttendanceRecord]] = defaultdict(list)
        for r in records:
            by_student[r.student_id].append(r)

        reports = []
        for student in roster:
            own = sorted(by_student.get(student.student_id, []), key=lambda r: r.attendance_date)
            reports.append(StudentReport(student=student, summary=summarize_days(own), records=own))
        return reports

    def student_range_summary(
        self,
        student_id: str,
        *,
        start_date: Any = None,
        end_date: Any = None,
    ) -> dict:
        student_id = require_non_empty(student_id, "studentId")

        today = today_local()
        month_start, month_end = month_bounds(today.year, today.month)
        start = parse_iso_date(start_date, "startDate") if start_date else month_start
        end = parse_iso_date(end_date, "endDate") if end_date else month_end
        _check_range(start, end)

        student = self._get_active_student(student_id)
        report = self._roster_reports([student], start=start, end=end)[0]

        newest_first = sorted(report.records, key=lambda r: r.attendance_date, reverse=True)
        return {
            "student": _student_info(student),
            "period": {"startDate": start.isoformat(), "endDate": end.isoformat()},
            "summary": report.summary.as_dict(),
            "dailyAttendance": daily_rows(newest_first),
        }

    def class_range_summary(self, *, class_name: Any, section: Any, start_date: Any, end_date: Any) -> dict:
        require_non_empty(class_name, "className")
        require_non_empty(section, "section")
        start = parse_iso_date(start_date, "startDate")
        end = parse_iso_date(end_date, "endDate")
        _check_range(start, end)
        selector = resolve_selector(class_name, section)

        roster = self._students.list_active_by_class(selector)
        reports = self._roster_reports(roster, start=start, end=end)
        summaries = [r.summary for r in reports]
        totals = combine(summaries)

        logger.info("Range summary for %s %s..%s (%d students)", selector.label, start, end, len(roster))
        return {
            "className": class_name,
            "section": section,
            "period": {"startDate": start.isoformat(), "endDate": end.isoformat()},
            "classSummary": {
                "totalStudents": len(roster),
                "totalDays": totals.total_days,
                "totalPresentDays": totals.present_days,
                "totalAbsentDays": totals.absent_days,
                "totalHalfDays": totals.half_days,
                "totalEffectivePresentDays": totals.effective_present_days,
                "averageAttendance": format_percentage(self._range_average.average(summaries)),
            },
            "studentSummaries": [
                {
                    "studentId": r.student.student_id,
                    "name": r.student.full_name,
                    "rollNo": r.student.roll_no,
                    "summary": r.summary.as_dict(),
                }
                for r in reports
            ],
        }

    def _monthly_reports(self, *, class_name: Any, section: Any, year: Any, month: Any):
        require_non_empty(class_name, "className")
        require_non_empty(section, "section")
        year_i = require_int(year, "year")
        month_i = require_int(month, "month")
        start, end = month_bounds(year_i, month_i)
        selector = resolve_selector(class_name, section)

        roster = self._students.list_active_by_class(selector)
        return selector, year_i, month_i, start, end, self._roster_reports(roster, start=start, end=end)

    def monthly_report(self, *, class_name: Any, section: Any, year: Any, month: Any) -> dict:
        selector, year_i, month_i, start, end, reports = self._monthly_reports(
            class_name=class_name, section=section, year=year, month=month
        )

        best: Optional[StudentReport] = None
        worst: Optional[StudentReport] = None
        for r in reports:
            pct = r.summary.attendance_percentage
            # Strict comparisons keep the first student in roster order on ties.
            if best is None or pct > best.summary.attendance_percentage:
                best = r
            if worst is None or pct < worst.summary.attendance_percentage:
                worst = r

        def _brief(r: Optional[StudentReport]) -> Optional[dict]:
            if r is None:
                return None
            return {
                "name": r.student.full_name,
                "rollNo": r.student.roll_no,
                "percentage": format_percentage(r.summary.attendance_percentage),
            }

        average = self._monthly_average.average([r.summary for r in reports])
        logger.info("Monthly report for %s %04d-%02d (%d students)", selector.label, year_i, month_i, len(reports))

        return {
            "className": class_name,
            "section": section,
            "month": month_i,
            "year": year_i,
            "period": {
                "startDate": start.isoformat(),
                "endDate": end.isoformat(),
                "workingDays": len(working_days(start, end)),
            },
            "classSummary": {
                "totalStudents": len(reports),
                "bestStudent": _brief(best),
                "worstStudent": _brief(worst),
                "averageAttendance": format_percentage(average),
            },
            "studentReports": [
                {
                    "student": {
                        "id": r.student.student_id,
                        "name": r.student.full_name,
                        "rollNo": r.student.roll_no,
                        "admissionNo": r.student.admission_no,
                    },
                    "summary": r.summary.as_dict(),
                    "dailyAttendance": daily_rows(r.records),
                }
                for r in reports
            ],
        }

    def monthly_csv_rows(self, *, class_name: Any, section: Any, year: Any, month: Any) -> list[dict]:
        """Flat rows for the monthly CSV export."""

        _, _, _, _, _, reports = self._monthly_reports(class_name=class_name, section=section, year=year, month=month)
        return [
            {
                "roll_no": r.student.roll_no,
                "admission_no": r.student.admission_no or "",
                "full_name": r.student.full_name,
                "total_days": r.summary.total_days,
                "present_days": r.summary.present_days,
                "absent_days": r.summary.absent_days,
                "half_days": r.summary.half_days,
                "effective_present_days": r.summary.effective_present_days,
                "attendance_percentage": format_percentage(r.summary.attendance_percentage),
            }
            for r in reports
        ]
