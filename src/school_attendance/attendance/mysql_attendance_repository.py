from __future__ import annotations

from datetime import date
from typing import Any, Optional, Sequence

from ..core.enums import Mark, Session
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_placeholders, to_optional_bool
from .model import AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = "student_id, attendance_date, morning, afternoon, marked_by, created_at, updated_at"

# Column names are never taken from user input.
_SESSION_COLUMNS = {
    Session.MORNING: "morning",
    Session.AFTERNOON: "afternoon",
}


def _to_record(r: dict[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        student_id=str(r["student_id"]),
        attendance_date=r["attendance_date"],
        morning=Mark.from_flag(to_optional_bool(r.get("morning"))),
        afternoon=Mark.from_flag(to_optional_bool(r.get("afternoon"))),
        marked_by=r.get("marked_by"),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_student_and_date(self, student_id: str, attendance_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE student_id=%s AND attendance_date=%s
                """,
                (student_id, attendance_date),
            )
            r = fetchone(cur)
            if not r:
                return None
            return _to_record(r)

    def list_for_students_on_date(self, student_ids: Sequence[str], attendance_date: date) -> Sequence[AttendanceRecord]:
        if not student_ids:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE attendance_date=%s AND student_id IN ({in_placeholders(student_ids)})
                """,
                (attendance_date, *student_ids),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_for_students_in_range(
        self,
        student_ids: Sequence[str],
        *,
        start_date: date,
        end_date: date,
    ) -> Sequence[AttendanceRecord]:
        if not student_ids:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE attendance_date BETWEEN %s AND %s
                  AND student_id IN ({in_placeholders(student_ids)})
                ORDER BY attendance_date ASC, student_id ASC
                """,
                (start_date, end_date, *student_ids),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def upsert_session(
        self,
        *,
        student_id: str,
        attendance_date: date,
        session: Session,
        mark: Mark,
        marked_by: str,
    ) -> None:
        column = _SESSION_COLUMNS[session]
        with db_cursor(self._conn_factory) as (_, cur):
            # Single statement: concurrent writes to the other session of the
            # same key are left intact.
            cur.execute(
                f"""
                INSERT INTO attendance_records(student_id, attendance_date, {column}, marked_by)
                VALUES(%s,%s,%s,%s) AS new
                ON DUPLICATE KEY UPDATE {column}=new.{column}, marked_by=new.marked_by
                """,
                (student_id, attendance_date, mark.as_flag(), marked_by),
            )

    def clear_session(self, *, student_id: str, attendance_date: date, session: Session) -> bool:
        column = _SESSION_COLUMNS[session]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                UPDATE attendance_records
                SET {column}=NULL
                WHERE student_id=%s AND attendance_date=%s
                """,
                (student_id, attendance_date),
            )
            cur.execute(
                """
                DELETE FROM attendance_records
                WHERE student_id=%s AND attendance_date=%s
                  AND morning IS NULL AND afternoon IS NULL
                """,
                (student_id, attendance_date),
            )
            return cur.rowcount > 0

    def delete_for_student_and_date(self, *, student_id: str, attendance_date: date) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM attendance_records WHERE student_id=%s AND attendance_date=%s",
                (student_id, attendance_date),
            )
            return cur.rowcount > 0
