from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence

from ..attendance.model import AttendanceRecord
from ..attendance.records import ReportingScope, partition_records
from ..common.datetime_utils import round_half_up
from ..core.enums import ABSENCE_STATUSES, AttendanceStatus
from ..instructors.model import Instructor
from .calculator.base import RateCalculator
from .calculator.half_credit_calculator import HalfCreditRateCalculator


@dataclass(frozen=True)
class InstructorStat:
    """Read-model: one instructor's attendance over a reporting scope."""

    instructor_id: int
    name: str
    present_days: int
    late_days: int
    absent_days: int
    attendance_rate: int
    records: tuple[AttendanceRecord, ...] = field(default_factory=tuple)

    @property
    def recorded_days(self) -> int:
        return self.present_days + self.late_days + self.absent_days

    def to_dict(self, *, with_records: bool = False) -> dict:
        out = {
            "instructorId": self.instructor_id,
            "name": self.name,
            "presentDays": self.present_days,
            "lateDays": self.late_days,
            "absentDays": self.absent_days,
            "recordedDays": self.recorded_days,
            "attendanceRate": self.attendance_rate,
        }
        if with_records:
            out["records"] = [r.to_dict() for r in self.records]
        return out


@dataclass(frozen=True)
class ScopeSummary:
    """Scope-wide figures for the summary cards."""

    distinct_recorded_days: int
    total_instructors: int
    instructors_with_records: int
    average_attendance_rate: int
    present_count: int
    late_count: int
    absent_count: int

    def to_dict(self) -> dict:
        return {
            "distinctRecordedDays": self.distinct_recorded_days,
            "totalInstructors": self.total_instructors,
            "instructorsWithRecords": self.instructors_with_records,
            "averageAttendanceRate": self.average_attendance_rate,
            "presentCount": self.present_count,
            "lateCount": self.late_count,
            "absentCount": self.absent_count,
        }


def _bucket_counts(records: Iterable[AttendanceRecord]) -> tuple[int, int, int]:
    present = late = absent = 0
    for r in records:
        if r.status == AttendanceStatus.PRESENT:
            present += 1
        elif r.status == AttendanceStatus.LATE:
            late += 1
        elif r.status in ABSENCE_STATUSES:
            absent += 1
    return present, late, absent


def aggregate(
    instructors: Sequence[Instructor],
    records: Iterable[AttendanceRecord],
    scope: ReportingScope,
    *,
    calculator: Optional[RateCalculator] = None,
) -> list[InstructorStat]:
    """One InstructorStat per roster instructor, in roster order.

    Records outside ``scope`` or with unreadable dates are ignored. Every
    record of an instructor on a day counts, duplicates included.
    """

    calculator = calculator or HalfCreditRateCalculator()
    valid, _ = partition_records(records)

    by_instructor: dict[int, list[AttendanceRecord]] = defaultdict(list)
    for day_key, record in valid:
        if scope.contains_day(day_key) and scope.includes_instructor(record.instructor_id):
            by_instructor[record.instructor_id].append(record)

    stats = []
    for instructor in instructors:
        if not scope.includes_instructor(instructor.instructor_id):
            continue
        own = by_instructor.get(instructor.instructor_id, [])
        present, late, absent = _bucket_counts(own)
        stats.append(
            InstructorStat(
                instructor_id=instructor.instructor_id,
                name=instructor.name,
                present_days=present,
                late_days=late,
                absent_days=absent,
                attendance_rate=calculator.attendance_rate(
                    present_days=present, late_days=late, absent_days=absent
                ),
                records=tuple(own),
            )
        )
    return stats


def distinct_recorded_days(records: Iterable[AttendanceRecord]) -> int:
    """Number of different days present in ``records``; a display figure, never a denominator."""

    valid, _ = partition_records(records)
    return len({day_key for day_key, _ in valid})


def summarize(stats: Sequence[InstructorStat], records: Sequence[AttendanceRecord]) -> ScopeSummary:
    """Summary over already scope-filtered ``records`` and their ``stats``."""

    with_records = [s for s in stats if s.recorded_days > 0]
    average = (
        round_half_up(sum(s.attendance_rate for s in with_records) / len(with_records))
        if with_records
        else 0
    )
    present, late, absent = _bucket_counts(records)
    return ScopeSummary(
        distinct_recorded_days=distinct_recorded_days(records),
        total_instructors=len(stats),
        instructors_with_records=len(with_records),
        average_attendance_rate=average,
        present_count=present,
        late_count=late,
        absent_count=absent,
    )
