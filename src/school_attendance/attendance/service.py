from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import date
from typing import Any, Callable, Iterable, Optional, Sequence, TypeVar

from ..classes.normalization import ClassSectionSelector, resolve_selector
from ..common.datetime_utils import parse_iso_date
from ..common.validators import require_bool, require_non_empty, require_session
from ..core.constants import DEFAULT_MARK_WORKERS
from ..core.enums import Mark, Session
from ..core.exceptions import NotFoundError, ValidationError
from ..students.model import Student
from ..students.repository import StudentRepository
from .engine import classify_day, classify_record, format_percentage, percentage, summarize_session
from .model import AttendanceRecord, StudentPresence
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _parse_entries(entries: Any) -> list[StudentPresence]:
    if not isinstance(entries, (list, tuple)) or not entries:
        raise ValidationError("Student attendance data is required and must be a non-empty list")

    parsed: list[StudentPresence] = []
    for item in entries:
        if isinstance(item, StudentPresence):
            parsed.append(item)
            continue
        if not isinstance(item, dict):
            raise ValidationError("Each student attendance entry must be an object")
        parsed.append(
            StudentPresence(
                student_id=require_non_empty(item.get("studentId"), "studentId"),
                is_present=require_bool(item.get("isPresent"), "isPresent"),
            )
        )
    return parsed


def _session_counts(marks: Iterable[Mark]) -> dict:
    present = absent = not_marked = 0
    for m in marks:
        if m is Mark.PRESENT:
            present += 1
        elif m is Mark.ABSENT:
            absent += 1
        else:
            not_marked += 1
    return {"present": present, "absent": absent, "notMarked": not_marked}


class AttendanceService:
    """Use cases: mark/override/update/delete attendance and day-level views."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        students: StudentRepository,
        *,
        max_workers: int = DEFAULT_MARK_WORKERS,
    ):
        self._attendance = attendance
        self._students = students
        self._max_workers = max(1, int(max_workers))

    def _fan_out(self, fn: Callable[[T], None], items: Sequence[T]) -> None:
        """Run fn over items concurrently; wait for all, re-raise the first failure."""

        if not items:
            return
        with ThreadPoolExecutor(max_workers=min(self._max_workers, len(items))) as pool:
            futures = [pool.submit(fn, item) for item in items]
        for future in futures:
            future.result()

    def _get_active_student(self, student_id: str) -> Student:
        student = self._students.get_by_id(student_id)
        if not student or not student.is_active:
            raise NotFoundError("Student not found or inactive")
        return student

    def _roster_records(self, selector: ClassSectionSelector, attendance_date: date) -> Sequence[AttendanceRecord]:
        roster = self._students.list_active_by_class(selector)
        return self._attendance.list_for_students_on_date([s.student_id for s in roster], attendance_date)

    # ----- writes -----

    def _apply_bulk(
        self,
        *,
        date: Any,
        class_name: Any,
        section: Any,
        session: Any,
        student_attendance: Any,
        marked_by: Any,
    ) -> dict:
        require_non_empty(date, "date")
        require_non_empty(class_name, "className")
        require_non_empty(section, "section")
        require_non_empty(session, "session")
        marked_by = require_non_empty(marked_by, "markedBy")
        session_enum = require_session(session)
        entries = _parse_entries(student_attendance)
        attendance_date = parse_iso_date(date)
        selector = resolve_selector(class_name, section)

        roster_ids = {s.student_id for s in self._students.list_active_by_class(selector)}

        # Last entry wins when a student appears twice in one request.
        wanted: dict[str, StudentPresence] = {}
        skipped = 0
        for entry in entries:
            if entry.student_id not in roster_ids:
                skipped += 1
                logger.debug("Skipping %s: not on roster %s", entry.student_id, selector.label)
                continue
            wanted[entry.student_id] = entry

        def _write(entry: StudentPresence) -> None:
            self._attendance.upsert_session(
                student_id=entry.student_id,
                attendance_date=attendance_date,
                session=session_enum,
                mark=Mark.from_flag(entry.is_present),
                marked_by=marked_by,
            )

        self._fan_out(_write, list(wanted.values()))
        logger.info(
            "Marked %s for %s on %s: %d written, %d skipped",
            session_enum.value,
            selector.label,
            attendance_date,
            len(wanted),
            skipped,
        )

        summary = summarize_session(self._roster_records(selector, attendance_date), session_enum)
        return {
            "date": attendance_date.isoformat(),
            "className": class_name,
            "section": section,
            "session": session_enum.value,
            "summary": summary.as_dict(),
            "markedBy": marked_by,
            "processed": len(wanted),
            "skipped": skipped,
        }

    def mark_attendance(
        self,
        *,
        date: Any,
        class_name: Any,
        section: Any,
        session: Any,
        student_attendance: Any,
        marked_by: Any,
    ) -> dict:
        return self._apply_bulk(
            date=date,
            class_name=class_name,
            section=section,
            session=session,
            student_attendance=student_attendance,
            marked_by=marked_by,
        )

    def override_attendance(
        self,
        *,
        date: Any,
        class_name: Any,
        section: Any,
        session: Any,
        student_attendance: Any,
        marked_by: Any,
    ) -> dict:
        """Same storage semantics as mark_attendance.

        Exists so callers can confirm "replace existing marks" before calling.
        """

        return self._apply_bulk(
            date=date,
            class_name=class_name,
            section=section,
            session=session,
            student_attendance=student_attendance,
            marked_by=marked_by,
        )

    def update_attendance(self, student_id: str, *, date: Any, session: Any, value: Any, marked_by: Any) -> dict:
        student_id = require_non_empty(student_id, "studentId")
        require_non_empty(date, "date")
        require_non_empty(session, "session")
        marked_by = require_non_empty(marked_by, "markedBy")
        session_enum = require_session(session)
        if value is None:
            raise ValidationError(f"Please provide {session_enum.value} attendance value")
        is_present = require_bool(value, session_enum.value)
        attendance_date = parse_iso_date(date)

        student = self._get_active_student(student_id)
        self._attendance.upsert_session(
            student_id=student_id,
            attendance_date=attendance_date,
            session=session_enum,
            mark=Mark.from_flag(is_present),
            marked_by=marked_by,
        )

        record = self._attendance.get_for_student_and_date(student_id, attendance_date)
        morning = record.morning if record else Mark.UNMARKED
        afternoon = record.afternoon if record else Mark.UNMARKED
        return {
            "student": {"id": student.student_id, "name": student.full_name, "rollNo": student.roll_no},
            "date": attendance_date.isoformat(),
            "session": session_enum.value,
            "morning": morning.as_flag(),
            "afternoon": afternoon.as_flag(),
            "dayStatus": classify_day(morning, afternoon).value,
            "markedBy": record.marked_by if record else marked_by,
        }

    def delete_attendance(self, student_id: str, *, date: Any, session: Any = None) -> bool:
        """Delete one session's mark, or the whole record when session is None.

        Returns True when a record was removed.
        """

        student_id = require_non_empty(student_id, "studentId")
        require_non_empty(date, "date")
        session_enum: Optional[Session] = require_session(session) if session else None
        attendance_date = parse_iso_date(date)

        self._get_active_student(student_id)

        if session_enum is None:
            removed = self._attendance.delete_for_student_and_date(student_id=student_id, attendance_date=attendance_date)
        else:
            removed = self._attendance.clear_session(
                student_id=student_id,
                attendance_date=attendance_date,
                session=session_enum,
            )
        logger.info(
            "Deleted %s attendance for %s on %s (record removed=%s)",
            session_enum.value if session_enum else "all",
            student_id,
            attendance_date,
            removed,
        )
        return removed

    # ----- reads -----

    def get_day_attendance(self, *, date: Any, class_name: Any, section: Any) -> dict:
        require_non_empty(date, "date")
        require_non_empty(class_name, "className")
        require_non_empty(section, "section")
        attendance_date = parse_iso_date(date)
        selector = resolve_selector(class_name, section)

        roster = self._students.list_active_by_class(selector)
        records = self._attendance.list_for_students_on_date([s.student_id for s in roster], attendance_date)
        by_student = {r.student_id: r for r in records}

        # Students without a row count as not marked for both sessions.
        pairs = [
            (s, by_student.get(s.student_id) or AttendanceRecord(student_id=s.student_id, attendance_date=attendance_date))
            for s in roster
        ]

        return {
            "date": attendance_date.isoformat(),
            "className": class_name,
            "section": section,
            "summary": {
                "totalStudents": len(pairs),
                "morning": _session_counts(r.morning for _, r in pairs),
                "afternoon": _session_counts(r.afternoon for _, r in pairs),
            },
            "attendance": [
                {
                    "studentId": s.student_id,
                    "rollNo": s.roll_no,
                    "name": s.full_name,
                    "morning": r.morning.as_flag(),
                    "afternoon": r.afternoon.as_flag(),
                    "dayStatus": classify_record(r).value,
                    "markedBy": r.marked_by,
                }
                for s, r in pairs
            ],
        }

    def check_attendance_exists(self, *, date: Any, class_name: Any, section: Any, session: Any) -> dict:
        require_non_empty(date, "date")
        require_non_empty(class_name, "className")
        require_non_empty(section, "section")
        require_non_empty(session, "session")
        session_enum = require_session(session)
        attendance_date = parse_iso_date(date)
        selector = resolve_selector(class_name, section)

        marked = sum(1 for r in self._roster_records(selector, attendance_date) if r.mark_for(session_enum).is_marked)
        return {
            "exists": marked > 0,
            "date": attendance_date.isoformat(),
            "className": class_name,
            "section": section,
            "session": session_enum.value,
            "totalMarked": marked,
            "canOverride": marked > 0,
        }

    def day_summary(self, *, date: Any, class_name: Any, section: Any, session: Any) -> dict:
        require_non_empty(date, "date")
        require_non_empty(class_name, "className")
        require_non_empty(section, "section")
        require_non_empty(session, "session")
        session_enum = require_session(session)
        attendance_date = parse_iso_date(date)
        selector = resolve_selector(class_name, section)

        summary = summarize_session(self._roster_records(selector, attendance_date), session_enum)
        return {
            "date": attendance_date.isoformat(),
            "className": class_name,
            "section": section,
            "session": session_enum.value,
            "summary": summary.as_dict(),
        }

    def session_status(self, *, date: Any, class_name: Any, section: Any) -> dict:
        require_non_empty(date, "date")
        require_non_empty(class_name, "className")
        require_non_empty(section, "section")
        attendance_date = parse_iso_date(date)
        selector = resolve_selector(class_name, section)

        records = self._roster_records(selector, attendance_date)
        total = len(records)

        def _status(session: Session) -> dict:
            marked = sum(1 for r in records if r.mark_for(session).is_marked)
            return {
                "marked": marked,
                "total": total,
                "percentage": format_percentage(percentage(marked, total)),
                "isComplete": marked == total,
            }

        return {
            "date": attendance_date.isoformat(),
            "className": class_name,
            "section": section,
            "morning": _status(Session.MORNING),
            "afternoon": _status(Session.AFTERNOON),
        }

    def list_roster(self, *, class_name: Any, section: Any) -> list[dict]:
        require_non_empty(class_name, "className")
        require_non_empty(section, "section")
        selector = resolve_selector(class_name, section)

        return [
            {
                "id": s.student_id,
                "rollNo": s.roll_no,
                "firstName": s.first_name,
                "lastName": s.last_name,
                "fullName": s.full_name,
            }
            for s in self._students.list_active_by_class(selector)
        ]
