from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from ..attendance.model import AttendanceFilter, AttendanceRecord
from ..attendance.records import ReportingScope, partition_records, select_records
from ..attendance.repository import AttendanceStore
from ..instructors.repository import InstructorRoster
from .aggregator import InstructorStat, ScopeSummary, aggregate, summarize
from .cache import StatsCache
from .calculator.base import RateCalculator
from .calculator.half_credit_calculator import HalfCreditRateCalculator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScopeReport:
    scope: ReportingScope
    school_id: Optional[int]
    stats: list[InstructorStat]
    summary: ScopeSummary
    records: list[AttendanceRecord]
    malformed: list[AttendanceRecord]

    def to_dict(self, *, with_records: bool = False) -> dict:
        return {
            "schoolId": self.school_id,
            "period": self.scope.period_key,
            "instructors": [s.to_dict(with_records=with_records) for s in self.stats],
            "summary": self.summary.to_dict(),
            "malformedRecordIds": [r.attendance_id for r in self.malformed],
        }


class AttendanceReportService:
    def __init__(
        self,
        attendance: AttendanceStore,
        roster: InstructorRoster,
        *,
        cache: Optional[StatsCache] = None,
        calculator: Optional[RateCalculator] = None,
    ):
        self._attendance = attendance
        self._roster = roster
        self._cache = cache
        self._calculator = calculator or HalfCreditRateCalculator()

    async def instructor_report(self, *, school_id: Optional[int], period_key: str) -> ScopeReport:
        """Per-instructor statistics for one school over a day or a month."""

        ReportingScope.parse(period_key)  # validates before any fetch

        if self._cache is not None:
            cached = self._cache.get(school_id, period_key)
            if cached is not None:
                return cached

        generation = self._cache.generation(school_id, period_key) if self._cache is not None else None
        instructors, fetched = await asyncio.gather(
            self._roster.list_for_school(school_id),
            self._attendance.list(AttendanceFilter(school_id=school_id, date=period_key)),
        )

        scope = ReportingScope.parse(period_key, [i.instructor_id for i in instructors])
        _, malformed = partition_records(fetched)
        if malformed:
            logger.warning(
                "Excluded %d attendance record(s) with unreadable dates from %s report (school=%s)",
                len(malformed),
                period_key,
                school_id,
            )

        records = select_records(fetched, scope)
        stats = aggregate(instructors, records, scope, calculator=self._calculator)
        report = ScopeReport(
            scope=scope,
            school_id=school_id,
            stats=stats,
            summary=summarize(stats, records),
            records=records,
            malformed=malformed,
        )

        if self._cache is not None:
            if not self._cache.put(school_id, period_key, report, generation=generation):
                logger.debug("Not caching %s report (school=%s): a write landed during the fetch", period_key, school_id)
        return report
