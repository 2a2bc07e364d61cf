from __future__ import annotations

import asyncio
from datetime import date, time, timedelta

import mysql.connector
import pytest

from src.staff_attendance.staff_attendance.attendance.model import (
    AttendanceFilter,
    AttendancePatch,
    NewAttendanceRecord,
)
from src.staff_attendance.staff_attendance.attendance.mysql_attendance_repository import MySQLAttendanceStore
from src.staff_attendance.staff_attendance.core.enums import AttendanceStatus
from src.staff_attendance.staff_attendance.core.exceptions import (
    RecordNotFoundError,
    StoreUnavailableError,
    ValidationError,
)
from src.staff_attendance.staff_attendance.database.bootstrap import iter_sql_statements
from src.staff_attendance.staff_attendance.database.mysql_base import clock_text


class FakeCursor:
    def __init__(self, conn):
        self._conn = conn
        self.lastrowid = None
        self.rowcount = 0
        self._result = []

    def execute(self, sql, params=()):
        self._conn.executed.append((" ".join(sql.split()), params))
        if self._conn.fail:
            raise self._conn.fail
        self._result = list(self._conn.results.pop(0)) if self._conn.results else []
        self.rowcount = self._conn.rowcount
        self.lastrowid = self._conn.lastrowid

    def fetchone(self):
        return self._result[0] if self._result else None

    def fetchall(self):
        return self._result

    def close(self):
        pass


class FakeConnection:
    def __init__(self, *, results=None, rowcount=1, lastrowid=None, fail=None):
        self.results = list(results or [])
        self.rowcount = rowcount
        self.lastrowid = lastrowid
        self.fail = fail
        self.executed: list[tuple[str, tuple]] = []
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


class FakeFactory:
    def __init__(self, conn: FakeConnection):
        self.conn = conn

    def connect(self, *, with_database: bool = True):
        return self.conn


ROW = {
    "id": 5,
    "instructor_id": 2,
    "date": date(2025, 3, 10),
    "status": "present",
    "time_in": timedelta(hours=7, minutes=5),
    "time_out": None,
    "comments": None,
    "recorded_by": 1,
}


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, None),
        ("", None),
        (time(6, 45), "06:45"),
        (timedelta(hours=17), "17:00"),
        ("7:5", "07:05"),
        ("08:30:00", "08:30"),
    ],
)
def test_clock_text(value, expected):
    assert clock_text(value) == expected


def test_iter_sql_statements_respects_quotes_and_comments():
    sql = """
    -- seed data
    INSERT INTO schools(name) VALUES ('A; B');
    INSERT INTO schools(name) VALUES ("it's");
    SELECT 1
    """

    assert list(iter_sql_statements(sql)) == [
        "INSERT INTO schools(name) VALUES ('A; B')",
        "INSERT INTO schools(name) VALUES (\"it's\")",
        "SELECT 1",
    ]


def test_list_by_school_and_month_builds_query():
    conn = FakeConnection(results=[[ROW]])
    store = MySQLAttendanceStore(FakeFactory(conn))

    records = asyncio.run(store.list(AttendanceFilter(school_id=7, date="2025-03")))

    sql, params = conn.executed[0]
    assert "JOIN instructors i" in sql
    assert "DATE_FORMAT(sa.date, '%%Y-%%m')=%s" in sql
    assert params == (7, "2025-03")
    assert records[0].time_in == "07:05"
    assert records[0].status == AttendanceStatus.PRESENT
    assert conn.committed and conn.closed


def test_create_returns_stored_record():
    conn = FakeConnection(lastrowid=41)
    store = MySQLAttendanceStore(FakeFactory(conn))

    created = asyncio.run(
        store.create(NewAttendanceRecord(2, "2025-03-10T00:00:00Z", AttendanceStatus.LATE, time_in="07:10"))
    )

    assert created.attendance_id == 41
    assert conn.executed[0][1] == (2, "2025-03-10", "late", "07:10", None, None, 1)


def test_update_missing_row_raises_not_found():
    conn = FakeConnection(results=[[]])
    store = MySQLAttendanceStore(FakeFactory(conn))

    with pytest.raises(RecordNotFoundError):
        asyncio.run(store.update(9, AttendancePatch({"comments": "x"})))

    assert conn.rolled_back


def test_update_writes_mapped_columns():
    conn = FakeConnection(results=[[{"id": 5}], [], [{**ROW, "status": "absent", "time_in": None}]])
    store = MySQLAttendanceStore(FakeFactory(conn))

    updated = asyncio.run(store.update(5, AttendancePatch({"status": "absent", "work_date": "2025-03-10"})))

    sql, params = conn.executed[1]
    assert sql == "UPDATE staff_attendance SET status=%s, date=%s WHERE id=%s"
    assert params == ("absent", "2025-03-10", 5)
    assert updated.status == AttendanceStatus.ABSENT


def test_delete_missing_row_raises_not_found():
    store = MySQLAttendanceStore(FakeFactory(FakeConnection(rowcount=0)))

    with pytest.raises(RecordNotFoundError):
        asyncio.run(store.delete(3))


def test_connector_errors_become_store_unavailable():
    conn = FakeConnection(fail=mysql.connector.Error("server has gone away"))
    store = MySQLAttendanceStore(FakeFactory(conn))

    with pytest.raises(StoreUnavailableError):
        asyncio.run(store.list(AttendanceFilter()))

    assert conn.rolled_back and conn.closed


@pytest.mark.parametrize(
    "error",
    [
        mysql.connector.IntegrityError("Cannot add or update a child row: a foreign key constraint fails"),
        mysql.connector.DataError("Data too long for column 'comments'"),
    ],
)
def test_rejected_rows_become_validation_errors(error):
    conn = FakeConnection(fail=error)
    store = MySQLAttendanceStore(FakeFactory(conn))

    with pytest.raises(ValidationError):
        asyncio.run(store.create(NewAttendanceRecord(99, "2025-03-10", AttendanceStatus.ABSENT)))

    assert conn.rolled_back
