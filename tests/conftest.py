from __future__ import annotations

import threading
from dataclasses import replace
from datetime import date

import pytest

from school_attendance.attendance.model import AttendanceRecord
from school_attendance.core.enums import ClassLevel, Mark, Section, Session
from school_attendance.core.exceptions import StoreError
from school_attendance.students.model import Student


class FakeStudentsRepo:
    def __init__(self, students=()):
        self._students = {s.student_id: s for s in students}
        self.calls = 0

    def add(self, student: Student) -> Student:
        self._students[student.student_id] = student
        return student

    def list_active_by_class(self, selector):
        self.calls += 1
        rows = [
            s
            for s in self._students.values()
            if s.is_active and s.class_level == selector.class_level and s.section == selector.section
        ]
        return sorted(rows, key=lambda s: s.roll_no)

    def get_by_id(self, student_id):
        self.calls += 1
        return self._students.get(student_id)


class FakeAttendanceRepo:
    """Dict-backed store keyed by (student_id, attendance_date)."""

    def __init__(self):
        self._rows: dict[tuple[str, date], AttendanceRecord] = {}
        self._lock = threading.Lock()
        self.calls = 0
        self.fail_for: set[str] = set()

    def put(self, student_id, attendance_date, *, morning=None, afternoon=None, marked_by="seed"):
        self._rows[(student_id, attendance_date)] = AttendanceRecord(
            student_id=student_id,
            attendance_date=attendance_date,
            morning=Mark.from_flag(morning),
            afternoon=Mark.from_flag(afternoon),
            marked_by=marked_by,
        )

    def get(self, student_id, attendance_date):
        return self._rows.get((student_id, attendance_date))

    def get_for_student_and_date(self, student_id, attendance_date):
        self.calls += 1
        return self._rows.get((student_id, attendance_date))

    def list_for_students_on_date(self, student_ids, attendance_date):
        self.calls += 1
        wanted = set(student_ids)
        return [r for (sid, d), r in self._rows.items() if sid in wanted and d == attendance_date]

    def list_for_students_in_range(self, student_ids, *, start_date, end_date):
        self.calls += 1
        wanted = set(student_ids)
        rows = [r for (sid, d), r in self._rows.items() if sid in wanted and start_date <= d <= end_date]
        return sorted(rows, key=lambda r: (r.attendance_date, r.student_id))

    def upsert_session(self, *, student_id, attendance_date, session, mark, marked_by):
        self.calls += 1
        if student_id in self.fail_for:
            raise StoreError(f"write failed for {student_id}")
        key = (student_id, attendance_date)
        field = "morning" if session is Session.MORNING else "afternoon"
        with self._lock:
            current = self._rows.get(key) or AttendanceRecord(student_id=student_id, attendance_date=attendance_date)
            self._rows[key] = replace(current, **{field: mark, "marked_by": marked_by})

    def clear_session(self, *, student_id, attendance_date, session):
        self.calls += 1
        key = (student_id, attendance_date)
        with self._lock:
            current = self._rows.get(key)
            if current is None:
                return False
            field = "morning" if session is Session.MORNING else "afternoon"
            updated = replace(current, **{field: Mark.UNMARKED})
            if updated.is_empty:
                del self._rows[key]
                return True
            self._rows[key] = updated
            return False

    def delete_for_student_and_date(self, *, student_id, attendance_date):
        self.calls += 1
        return self._rows.pop((student_id, attendance_date), None) is not None


def make_student(student_id, roll_no, *, first="Student", last=None, level=ClassLevel.CLASS_5, section=Section.A, active=True):
    return Student(
        student_id=student_id,
        roll_no=roll_no,
        first_name=first,
        last_name=last if last is not None else str(roll_no),
        class_level=level,
        section=section,
        admission_no=f"ADM-{student_id}",
        is_active=active,
    )


@pytest.fixture
def student_factory():
    return make_student


@pytest.fixture
def students_repo():
    return FakeStudentsRepo(
        [
            make_student("s1", 1, first="Aarav", last="Sharma"),
            make_student("s2", 2, first="Diya", last="Patel"),
            make_student("s3", 3, first="Kabir", last="Singh"),
            make_student("s4", 4, first="Meera", last="Iyer", active=False),
            make_student("s7", 1, first="Rohan", last="Gupta", level=ClassLevel.CLASS_7, section=Section.B),
        ]
    )


@pytest.fixture
def attendance_repo():
    return FakeAttendanceRepo()
