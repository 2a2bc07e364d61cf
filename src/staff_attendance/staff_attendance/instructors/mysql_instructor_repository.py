from __future__ import annotations

import asyncio
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, store_errors
from .model import Instructor
from .repository import InstructorRoster

_COLUMNS = "id, name, school_id, nationality, role"


def _to_instructor(row: dict) -> Instructor:
    return Instructor(
        instructor_id=int(row["id"]),
        name=row["name"],
        school_id=row.get("school_id"),
        nationality=row.get("nationality"),
        role=row.get("role"),
    )


class MySQLInstructorRoster(InstructorRoster):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    async def list_for_school(self, school_id: Optional[int]) -> Sequence[Instructor]:
        return await asyncio.to_thread(self._list_for_school, school_id)

    async def get(self, instructor_id: int) -> Optional[Instructor]:
        return await asyncio.to_thread(self._get, instructor_id)

    def _list_for_school(self, school_id: Optional[int]) -> list[Instructor]:
        with store_errors("list instructors"), db_cursor(self._conn_factory) as (_, cur):
            if school_id is None:
                cur.execute(f"SELECT {_COLUMNS} FROM instructors ORDER BY name ASC")
            else:
                cur.execute(
                    f"SELECT {_COLUMNS} FROM instructors WHERE school_id=%s ORDER BY name ASC",
                    (int(school_id),),
                )
            return [_to_instructor(r) for r in fetchall(cur)]

    def _get(self, instructor_id: int) -> Optional[Instructor]:
        with store_errors("get instructor"), db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM instructors WHERE id=%s", (int(instructor_id),))
            row = fetchone(cur)
            return _to_instructor(row) if row else None
