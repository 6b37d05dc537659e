from __future__ import annotations

from datetime import date

import pytest

from school_attendance.attendance.engine import (
    RangeSummary,
    classify_day,
    combine,
    daily_rows,
    summarize_days,
    summarize_session,
)
from school_attendance.attendance.model import AttendanceRecord
from school_attendance.core.enums import DayStatus, Mark, Session

P, A, U = Mark.PRESENT, Mark.ABSENT, Mark.UNMARKED


@pytest.mark.parametrize(
    "morning, afternoon, expected",
    [
        (P, P, DayStatus.PRESENT),
        (A, A, DayStatus.ABSENT),
        (P, A, DayStatus.HALF_DAY),
        (A, P, DayStatus.HALF_DAY),
        (P, U, DayStatus.HALF_DAY),
        (U, P, DayStatus.HALF_DAY),
        (A, U, DayStatus.NOT_MARKED),
        (U, A, DayStatus.NOT_MARKED),
        (U, U, DayStatus.NOT_MARKED),
    ],
)
def test_classify_day_all_pairs(morning, afternoon, expected):
    assert classify_day(morning, afternoon) is expected


def _rec(day: int, morning: Mark, afternoon: Mark) -> AttendanceRecord:
    return AttendanceRecord(student_id="s1", attendance_date=date(2024, 6, day), morning=morning, afternoon=afternoon)


def test_summarize_days_counts_half_days_as_half():
    records = [_rec(d, P, P) for d in range(1, 7)]
    records += [_rec(7, A, A), _rec(8, A, A)]
    records += [_rec(9, P, A), _rec(10, A, P)]

    s = summarize_days(records)

    assert (s.total_days, s.present_days, s.absent_days, s.half_days) == (10, 6, 2, 2)
    assert s.effective_present_days == 7
    assert s.as_dict()["attendancePercentage"] == "70.00"


def test_not_marked_days_count_toward_total():
    s = summarize_days([_rec(1, P, P), _rec(2, A, U)])

    assert s.total_days == 2
    assert s.present_days == 1
    assert s.as_dict()["attendancePercentage"] == "50.00"


def test_empty_range_is_zero_percent():
    assert summarize_days([]).as_dict()["attendancePercentage"] == "0.00"
    assert combine([]).attendance_percentage == 0.0


def test_summarize_session_counts_records_only():
    records = [_rec(1, P, U), _rec(1, A, P), _rec(1, U, U)]

    s = summarize_session(records, Session.MORNING)

    assert s.as_dict() == {
        "totalStudents": 3,
        "present": 1,
        "absent": 1,
        "notMarked": 1,
        "attendancePercentage": "33.33",
    }


def test_combine_sums_counts():
    total = combine([RangeSummary(10, 10, 0, 0), RangeSummary(2, 0, 2, 0)])

    assert total == RangeSummary(total_days=12, present_days=10, absent_days=2, half_days=0)
    assert f"{total.attendance_percentage:.2f}" == "83.33"


def test_daily_rows_keep_tri_state_flags():
    rows = daily_rows([_rec(3, P, U)])

    assert rows == [
        {"date": "2024-06-03", "morning": True, "afternoon": None, "dayStatus": "HALF_DAY", "markedBy": None}
    ]
