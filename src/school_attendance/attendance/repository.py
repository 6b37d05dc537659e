from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import Mark, Session
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    """Store contract: at most one record per (student_id, attendance_date)."""

    def get_for_student_and_date(self, student_id: str, attendance_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def list_for_students_on_date(self, student_ids: Sequence[str], attendance_date: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_for_students_in_range(
        self,
        student_ids: Sequence[str],
        *,
        start_date: date,
        end_date: date,
    ) -> Sequence[AttendanceRecord]:
        """Records in the inclusive range, ordered by date ascending."""

        raise NotImplementedError

    def upsert_session(
        self,
        *,
        student_id: str,
        attendance_date: date,
        session: Session,
        mark: Mark,
        marked_by: str,
    ) -> None:
        """Set one session's mark, creating the record if needed.

        The other session's stored value is never touched.
        """

        raise NotImplementedError

    def clear_session(self, *, student_id: str, attendance_date: date, session: Session) -> bool:
        """Unmark one session; delete the record if both sessions end up unmarked.

        Returns True when the record was deleted.
        """

        raise NotImplementedError

    def delete_for_student_and_date(self, *, student_id: str, attendance_date: date) -> bool:
        raise NotImplementedError
