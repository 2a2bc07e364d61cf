from __future__ import annotations

import asyncio
from typing import Sequence

from ..common.validators import require_status
from ..core.exceptions import RecordNotFoundError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import clock_text, db_cursor, fetchall, fetchone, store_errors
from .model import AttendanceFilter, AttendancePatch, AttendanceRecord, NewAttendanceRecord
from .repository import AttendanceStore

_SELECT = """
    SELECT sa.id, sa.instructor_id, sa.date, sa.status, sa.time_in, sa.time_out, sa.comments, sa.recorded_by
    FROM staff_attendance sa
"""

_PATCH_COLUMNS = {
    "status": "status",
    "work_date": "date",
    "time_in": "time_in",
    "time_out": "time_out",
    "comments": "comments",
}


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["id"]),
        instructor_id=int(r["instructor_id"]),
        work_date=r["date"],
        status=require_status(r["status"]),
        time_in=clock_text(r.get("time_in")),
        time_out=clock_text(r.get("time_out")),
        comments=r.get("comments"),
        recorded_by=r.get("recorded_by"),
    )


class MySQLAttendanceStore(AttendanceStore):
    """AttendanceStore over the staff_attendance table.

    The connector is blocking, so each call runs on a worker thread with its
    own connection; a batch of creates is therefore genuinely in flight at once.
    """

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    async def list(self, query: AttendanceFilter) -> Sequence[AttendanceRecord]:
        return await asyncio.to_thread(self._list, query)

    async def create(self, record: NewAttendanceRecord) -> AttendanceRecord:
        return await asyncio.to_thread(self._create, record)

    async def update(self, attendance_id: int, patch: AttendancePatch) -> AttendanceRecord:
        return await asyncio.to_thread(self._update, int(attendance_id), patch)

    async def delete(self, attendance_id: int) -> None:
        await asyncio.to_thread(self._delete, int(attendance_id))

    def _list(self, query: AttendanceFilter) -> list[AttendanceRecord]:
        clauses: list[str] = []
        params: list[object] = []
        joins = ""

        if query.school_id is not None:
            joins = "JOIN instructors i ON i.id = sa.instructor_id"
            clauses.append("i.school_id=%s")
            params.append(int(query.school_id))
        if query.date is not None:
            if query.is_month:
                clauses.append("DATE_FORMAT(sa.date, '%%Y-%%m')=%s")
            else:
                clauses.append("sa.date=%s")
            params.append(query.date)

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        with store_errors("list attendance"), db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                {_SELECT}
                {joins}
                {where}
                ORDER BY sa.date ASC, sa.instructor_id ASC, sa.id ASC
                """,
                tuple(params),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def _create(self, record: NewAttendanceRecord) -> AttendanceRecord:
        with store_errors("create attendance"), db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO staff_attendance(instructor_id, date, status, time_in, time_out, comments, recorded_by)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    record.instructor_id,
                    record.work_date,
                    record.status.value,
                    record.time_in,
                    record.time_out,
                    record.comments,
                    record.recorded_by,
                ),
            )
            return record.stored(int(cur.lastrowid))

    def _update(self, attendance_id: int, patch: AttendancePatch) -> AttendanceRecord:
        assignments = []
        params: list[object] = []
        for name, value in patch.values.items():
            assignments.append(f"{_PATCH_COLUMNS[name]}=%s")
            params.append(value.value if name == "status" else value)
        params.append(attendance_id)

        with store_errors("update attendance"), db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id FROM staff_attendance WHERE id=%s", (attendance_id,))
            if not fetchone(cur):
                raise RecordNotFoundError(f"Attendance record {attendance_id} not found")

            cur.execute(
                f"UPDATE staff_attendance SET {', '.join(assignments)} WHERE id=%s",
                tuple(params),
            )
            cur.execute(f"{_SELECT} WHERE sa.id=%s", (attendance_id,))
            return _to_record(fetchone(cur))

    def _delete(self, attendance_id: int) -> None:
        with store_errors("delete attendance"), db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM staff_attendance WHERE id=%s", (attendance_id,))
            if cur.rowcount == 0:
                raise RecordNotFoundError(f"Attendance record {attendance_id} not found")
