from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .core.constants import DEFAULT_MARK_WORKERS
from .database.connection import DBConfig, DatabaseConnection
from .reports.service import AttendanceReportService
from .students.mysql_student_repository import MySQLStudentRepository
from .students.repository import StudentRepository


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    students_repo: StudentRepository
    attendance_repo: AttendanceRepository

    attendance_service: AttendanceService
    report_service: AttendanceReportService


def build_services(
    *,
    students_repo: StudentRepository,
    attendance_repo: AttendanceRepository,
    conn: Optional[DatabaseConnection] = None,
    mark_workers: int = DEFAULT_MARK_WORKERS,
) -> Container:
    attendance_service = AttendanceService(attendance_repo, students_repo, max_workers=mark_workers)
    report_service = AttendanceReportService(attendance_repo, students_repo)

    return Container(
        conn=conn,
        students_repo=students_repo,
        attendance_repo=attendance_repo,
        attendance_service=attendance_service,
        report_service=report_service,
    )


def build_container(*, db_config: dict, mark_workers: int = DEFAULT_MARK_WORKERS) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return build_services(
        students_repo=MySQLStudentRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        conn=conn,
        mark_workers=mark_workers,
    )
