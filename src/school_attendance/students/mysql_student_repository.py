from __future__ import annotations

from typing import Any, Optional, Sequence

from ..classes.normalization import ClassSectionSelector
from ..core.enums import ClassLevel, Section
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Student
from .repository import StudentRepository

_COLUMNS = "student_id, roll_no, first_name, last_name, admission_no, class_level, section, is_active"


def _to_student(r: dict[str, Any]) -> Student:
    return Student(
        student_id=str(r["student_id"]),
        roll_no=int(r["roll_no"]),
        first_name=r["first_name"],
        last_name=r.get("last_name") or "",
        admission_no=r.get("admission_no"),
        class_level=ClassLevel(r["class_level"]),
        section=Section(r["section"]),
        is_active=bool(r.get("is_active", True)),
    )


class MySQLStudentRepository(StudentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_active_by_class(self, selector: ClassSectionSelector) -> Sequence[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM students
                WHERE class_level=%s AND section=%s AND is_active=1
                ORDER BY roll_no ASC
                """,
                (selector.class_level.value, selector.section.value),
            )
            return [_to_student(r) for r in fetchall(cur)]

    def get_by_id(self, student_id: str) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM students WHERE student_id=%s", (student_id,))
            r = fetchone(cur)
            if not r:
                return None
            return _to_student(r)
