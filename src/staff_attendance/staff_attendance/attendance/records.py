from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional, Sequence

from ..common.datetime_utils import is_month_key, normalize_day_key
from ..core.enums import AttendanceStatus
from ..core.exceptions import InvalidDateFormat, ValidationError
from ..instructors.model import Instructor
from .model import AttendanceRecord


@dataclass(frozen=True)
class ReportingScope:
    """A day (YYYY-MM-DD) or month (YYYY-MM) window, optionally limited to some instructors."""

    period_key: str
    instructor_ids: Optional[frozenset] = None

    def __post_init__(self):
        if not isinstance(self.period_key, str):
            raise ValidationError(f"Invalid reporting period: {self.period_key!r}")
        if not is_month_key(self.period_key):
            try:
                key = normalize_day_key(self.period_key)
            except InvalidDateFormat as exc:
                raise ValidationError(f"Invalid reporting period: {self.period_key!r}") from exc
            if key != self.period_key:
                raise ValidationError(f"Invalid reporting period: {self.period_key!r}")
        if self.instructor_ids is not None:
            object.__setattr__(self, "instructor_ids", frozenset(self.instructor_ids))

    @classmethod
    def for_day(cls, day: date, instructor_ids: Optional[Iterable[int]] = None) -> "ReportingScope":
        return cls(day.isoformat(), _frozen(instructor_ids))

    @classmethod
    def for_month(cls, year: int, month: int, instructor_ids: Optional[Iterable[int]] = None) -> "ReportingScope":
        return cls(f"{int(year):04d}-{int(month):02d}", _frozen(instructor_ids))

    @classmethod
    def parse(cls, text: str, instructor_ids: Optional[Iterable[int]] = None) -> "ReportingScope":
        return cls((text or "").strip(), _frozen(instructor_ids))

    @property
    def is_month(self) -> bool:
        return len(self.period_key) == 7

    def contains_day(self, day_key: str) -> bool:
        if self.is_month:
            return day_key.startswith(self.period_key + "-")
        return day_key == self.period_key

    def includes_instructor(self, instructor_id: int) -> bool:
        return self.instructor_ids is None or instructor_id in self.instructor_ids


def _frozen(ids: Optional[Iterable[int]]) -> Optional[frozenset]:
    return frozenset(ids) if ids is not None else None


def partition_records(
    records: Iterable[AttendanceRecord],
) -> tuple[list[tuple[str, AttendanceRecord]], list[AttendanceRecord]]:
    """Split records into (day_key, record) pairs and records whose date cannot be read."""

    valid: list[tuple[str, AttendanceRecord]] = []
    malformed: list[AttendanceRecord] = []
    for record in records:
        try:
            valid.append((normalize_day_key(record.work_date), record))
        except InvalidDateFormat:
            malformed.append(record)
    return valid, malformed


def _display_order(pair: tuple[str, AttendanceRecord]):
    day_key, record = pair
    return day_key, record.instructor_id, record.attendance_id


def select_records(records: Iterable[AttendanceRecord], scope: ReportingScope) -> list[AttendanceRecord]:
    """Records whose normalized day falls inside ``scope``, oldest first.

    Records with unreadable dates are left out (see ``partition_records``).
    """

    valid, _ = partition_records(records)
    kept = [
        (day_key, record)
        for day_key, record in valid
        if scope.contains_day(day_key) and scope.includes_instructor(record.instructor_id)
    ]
    kept.sort(key=_display_order)
    return [record for _, record in kept]


def search_records(
    records: Sequence[AttendanceRecord],
    instructors: Sequence[Instructor],
    *,
    search: Optional[str] = None,
    status: Optional[AttendanceStatus] = None,
) -> list[AttendanceRecord]:
    """Narrow a record list by instructor name substring and exact status."""

    needle = (search or "").strip().lower()
    names = {i.instructor_id: i.name.lower() for i in instructors}

    out = []
    for record in records:
        if needle and needle not in names.get(record.instructor_id, ""):
            continue
        if status is not None and record.status != status:
            continue
        out.append(record)
    return out
