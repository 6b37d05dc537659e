from __future__ import annotations

from datetime import date

import mysql.connector
import pytest

from school_attendance.attendance.mysql_attendance_repository import MySQLAttendanceRepository
from school_attendance.core.enums import Mark, Session
from school_attendance.core.exceptions import StoreError
from school_attendance.database.bootstrap import iter_sql_statements


class FakeCursor:
    def __init__(self, conn):
        self._conn = conn
        self.rowcount = 0

    def execute(self, sql, params=()):
        self._conn.executed.append((" ".join(sql.split()), tuple(params)))
        if self._conn.raise_on_execute:
            raise self._conn.raise_on_execute
        self.rowcount = self._conn.rowcounts.pop(0) if self._conn.rowcounts else 0

    def fetchone(self):
        return self._conn.rows[0] if self._conn.rows else None

    def fetchall(self):
        return list(self._conn.rows)

    def close(self):
        pass


class FakeConn:
    def __init__(self):
        self.executed = []
        self.rows = []
        self.rowcounts = []
        self.raise_on_execute = None
        self.committed = False
        self.rolled_back = False
        self.closed = False

    def cursor(self, dictionary=False):
        return FakeCursor(self)

    def commit(self):
        self.committed = True

    def rollback(self):
        self.rolled_back = True

    def close(self):
        self.closed = True


class FakeConnFactory:
    def __init__(self):
        self.conn = FakeConn()
        self.connects = 0

    def connect(self):
        self.connects += 1
        return self.conn


@pytest.fixture
def factory():
    return FakeConnFactory()


def test_upsert_touches_only_requested_session(factory):
    repo = MySQLAttendanceRepository(factory)

    repo.upsert_session(
        student_id="s1",
        attendance_date=date(2024, 6, 1),
        session=Session.AFTERNOON,
        mark=Mark.ABSENT,
        marked_by="t",
    )

    sql, params = factory.conn.executed[0]
    assert "VALUES(%s,%s,%s,%s) AS new ON DUPLICATE KEY UPDATE afternoon=new.afternoon, marked_by=new.marked_by" in sql
    assert "morning" not in sql
    assert params == ("s1", date(2024, 6, 1), False, "t")
    assert factory.conn.committed and factory.conn.closed


def test_clear_session_reports_row_removal(factory):
    repo = MySQLAttendanceRepository(factory)
    factory.conn.rowcounts = [1, 1]

    assert repo.clear_session(student_id="s1", attendance_date=date(2024, 6, 1), session=Session.MORNING) is True
    update_sql, _ = factory.conn.executed[0]
    delete_sql, _ = factory.conn.executed[1]
    assert "SET morning=NULL" in update_sql
    assert "morning IS NULL AND afternoon IS NULL" in delete_sql


def test_clear_session_keeps_row_when_other_session_marked(factory):
    factory.conn.rowcounts = [1, 0]

    removed = MySQLAttendanceRepository(factory).clear_session(
        student_id="s1", attendance_date=date(2024, 6, 1), session=Session.MORNING
    )

    assert removed is False


def test_rows_map_to_tri_state_marks(factory):
    factory.conn.rows = [
        {"student_id": "s1", "attendance_date": date(2024, 6, 1), "morning": 1, "afternoon": None, "marked_by": "t"},
        {"student_id": "s2", "attendance_date": date(2024, 6, 1), "morning": 0, "afternoon": 1, "marked_by": "t"},
    ]

    records = MySQLAttendanceRepository(factory).list_for_students_on_date(["s1", "s2"], date(2024, 6, 1))

    assert [(r.morning, r.afternoon) for r in records] == [
        (Mark.PRESENT, Mark.UNMARKED),
        (Mark.ABSENT, Mark.PRESENT),
    ]
    _, params = factory.conn.executed[0]
    assert params == (date(2024, 6, 1), "s1", "s2")


def test_empty_id_list_skips_the_store(factory):
    repo = MySQLAttendanceRepository(factory)

    assert repo.list_for_students_on_date([], date(2024, 6, 1)) == []
    assert repo.list_for_students_in_range([], start_date=date(2024, 6, 1), end_date=date(2024, 6, 30)) == []
    assert factory.connects == 0


def test_driver_errors_roll_back_and_surface_as_store_error(factory):
    factory.conn.raise_on_execute = mysql.connector.Error(msg="Duplicate entry")

    with pytest.raises(StoreError, match="Duplicate entry"):
        MySQLAttendanceRepository(factory).delete_for_student_and_date(student_id="s1", attendance_date=date(2024, 6, 1))

    assert factory.conn.rolled_back
    assert not factory.conn.committed
    assert factory.conn.closed


def test_sql_splitter_handles_comments_and_quoted_semicolons():
    sql = """
    -- header comment
    CREATE TABLE a (x INT);
    INSERT INTO a VALUES ('one;two');
    INSERT INTO a VALUES ("it's");
    SELECT 1
    """

    assert list(iter_sql_statements(sql)) == [
        "CREATE TABLE a (x INT)",
        "INSERT INTO a VALUES ('one;two')",
        "INSERT INTO a VALUES (\"it's\")",
        "SELECT 1",
    ]
