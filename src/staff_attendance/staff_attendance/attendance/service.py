from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from ..common.datetime_utils import normalize_day_key
from ..core.enums import AttendanceStatus
from ..core.exceptions import ValidationError
from ..instructors.repository import InstructorRoster
from ..reports.cache import StatsCache
from .classifier import LatePolicy
from .model import AttendanceFilter, AttendancePatch, AttendanceRecord, NewAttendanceRecord
from .records import search_records
from .repository import AttendanceStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecordOutcome:
    record: AttendanceRecord
    reclassified: bool = False
    superseded: tuple[int, ...] = ()


class AttendanceService:
    """Single-entry attendance path: record, edit, remove and list rows."""

    def __init__(
        self,
        attendance: AttendanceStore,
        roster: Optional[InstructorRoster] = None,
        *,
        policy: Optional[LatePolicy] = None,
        cache: Optional[StatsCache] = None,
    ):
        self._attendance = attendance
        self._roster = roster
        self._policy = policy or LatePolicy()
        self._cache = cache

    async def list(
        self,
        query: AttendanceFilter,
        *,
        search: Optional[str] = None,
        status: Optional[AttendanceStatus] = None,
    ) -> Sequence[AttendanceRecord]:
        records = await self._attendance.list(query)
        if not (search or status):
            return records
        instructors = await self._roster.list_for_school(query.school_id) if self._roster else []
        return search_records(records, instructors, search=search, status=status)

    async def record(self, new_record: NewAttendanceRecord, *, supersede: bool = False) -> RecordOutcome:
        """Classify and store one row.

        With ``supersede`` an existing row (or rows) for the same instructor
        and day is overwritten instead of adding another row.
        """

        decision = self._policy.decide(new_record.status, new_record.time_in)
        new_record = new_record.with_status(decision.status)

        school_id = await self._require_school_of(new_record.instructor_id)

        if supersede:
            existing = [
                r
                for r in await self._attendance.list(AttendanceFilter(date=new_record.work_date))
                if r.instructor_id == new_record.instructor_id
            ]
            if existing:
                patch = AttendancePatch(
                    {
                        "status": new_record.status,
                        "time_in": new_record.time_in,
                        "time_out": new_record.time_out,
                        "comments": new_record.comments,
                    }
                )
                updated = [await self._attendance.update(r.attendance_id, patch) for r in existing]
                self._invalidate(school_id, new_record.work_date)
                logger.info(
                    "Superseded %d attendance row(s) for instructor %s on %s",
                    len(updated),
                    new_record.instructor_id,
                    new_record.work_date,
                )
                return RecordOutcome(
                    record=updated[0],
                    reclassified=decision.reclassified,
                    superseded=tuple(r.attendance_id for r in updated),
                )

        created = await self._attendance.create(new_record)
        self._invalidate(school_id, new_record.work_date)
        if decision.reclassified:
            logger.info(
                "Instructor %s checked in at %s on %s: recorded as late",
                new_record.instructor_id,
                new_record.time_in,
                new_record.work_date,
            )
        return RecordOutcome(record=created, reclassified=decision.reclassified)

    async def edit(self, attendance_id: int, patch: AttendancePatch, *, previous: Optional[AttendanceRecord] = None) -> AttendanceRecord:
        """Apply an explicit edit. Edits are never reclassified."""

        updated = await self._attendance.update(attendance_id, patch)
        school_id = await self._school_of(updated.instructor_id)
        self._invalidate(school_id, updated.work_date)
        if "work_date" in patch.values:
            if previous is None:
                # The row moved out of a period we cannot name.
                self._clear()
            elif normalize_day_key(previous.work_date) != normalize_day_key(updated.work_date):
                self._invalidate(school_id, previous.work_date)
        return updated

    async def remove(self, attendance_id: int, *, previous: Optional[AttendanceRecord] = None) -> None:
        await self._attendance.delete(attendance_id)
        if previous is not None:
            self._invalidate(await self._school_of(previous.instructor_id), previous.work_date)
        else:
            self._clear()

    async def _require_school_of(self, instructor_id: int) -> Optional[int]:
        if self._roster is None:
            return None
        instructor = await self._roster.get(instructor_id)
        if instructor is None:
            raise ValidationError(f"Unknown instructor: {instructor_id}")
        return instructor.school_id

    async def _school_of(self, instructor_id: int) -> Optional[int]:
        if self._roster is None:
            return None
        instructor = await self._roster.get(instructor_id)
        return instructor.school_id if instructor else None

    def _clear(self) -> None:
        if self._cache is not None:
            self._cache.clear()

    def _invalidate(self, school_id: Optional[int], work_date) -> None:
        if self._cache is not None:
            self._cache.invalidate(school_id, work_date)
