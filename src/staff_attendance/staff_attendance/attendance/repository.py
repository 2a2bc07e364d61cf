from __future__ import annotations

from typing import Protocol, Sequence

from .model import AttendanceFilter, AttendancePatch, AttendanceRecord, NewAttendanceRecord


class AttendanceStore(Protocol):
    """Persistence boundary for attendance records.

    Every call is network-bound and fails on its own: callers must not assume
    that one call succeeding says anything about a sibling call.
    Failures raise ValidationError, RecordNotFoundError or StoreUnavailableError.
    """

    async def list(self, query: AttendanceFilter) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    async def create(self, record: NewAttendanceRecord) -> AttendanceRecord:
        raise NotImplementedError

    async def update(self, attendance_id: int, patch: AttendancePatch) -> AttendanceRecord:
        raise NotImplementedError

    async def delete(self, attendance_id: int) -> None:
        raise NotImplementedError
