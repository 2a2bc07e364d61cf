from __future__ import annotations

import asyncio
from datetime import datetime

import pytest

from src.staff_attendance.staff_attendance.attendance.bulk import BulkRecorder, BulkSession
from src.staff_attendance.staff_attendance.attendance.model import AttendanceFilter, AttendanceRecord, NewAttendanceRecord
from src.staff_attendance.staff_attendance.core.enums import AttendanceStatus
from src.staff_attendance.staff_attendance.core.exceptions import ValidationError
from src.staff_attendance.staff_attendance.instructors.model import Instructor
from src.staff_attendance.staff_attendance.reports.cache import StatsCache
from src.staff_attendance.staff_attendance.reports.service import AttendanceReportService

P = AttendanceStatus.PRESENT
L = AttendanceStatus.LATE
A = AttendanceStatus.ABSENT


class FakeRoster:
    def __init__(self, instructors):
        self._instructors = instructors

    async def list_for_school(self, school_id):
        return [i for i in self._instructors if school_id is None or i.school_id == school_id]

    async def get(self, instructor_id):
        return next((i for i in self._instructors if i.instructor_id == instructor_id), None)


class FakeAttendance:
    """Returns every row for the school; the service narrows to the period itself."""

    def __init__(self, records, school_of):
        self.records = list(records)
        self._school_of = school_of
        self.list_calls: list[AttendanceFilter] = []

    async def list(self, query: AttendanceFilter):
        self.list_calls.append(query)
        return [
            r
            for r in self.records
            if query.school_id is None or self._school_of.get(r.instructor_id) == query.school_id
        ]


INSTRUCTORS = [
    Instructor(instructor_id=1, name="Alice", school_id=7),
    Instructor(instructor_id=2, name="Brian", school_id=7),
    Instructor(instructor_id=3, name="Carla", school_id=8),
]


class GatedAttendance(FakeAttendance):
    """Takes its snapshot, then holds the fetch open until ``release`` is set."""

    def __init__(self, records, school_of):
        super().__init__(records, school_of)
        self.fetching = None
        self.release = None

    def gate(self):
        self.fetching = asyncio.Event()
        self.release = asyncio.Event()

    async def list(self, query: AttendanceFilter):
        rows = await super().list(query)
        if self.fetching is not None and not self.fetching.is_set():
            self.fetching.set()
            await self.release.wait()
        return rows

    async def create(self, record: NewAttendanceRecord):
        stored = record.stored(len(self.records) + 1)
        self.records.append(stored)
        return stored


def build(records, cache=None, store_cls=FakeAttendance):
    store = store_cls(records, {i.instructor_id: i.school_id for i in INSTRUCTORS})
    return AttendanceReportService(store, FakeRoster(INSTRUCTORS), cache=cache), store


def test_month_report_counts_in_scope_rows_only():
    records = [
        AttendanceRecord(1, 1, "2025-03-03", P),
        AttendanceRecord(2, 1, "2025-03-04T00:00:00.000Z", L),
        AttendanceRecord(3, 1, datetime(2025, 3, 5, 8, 0), A),
        AttendanceRecord(4, 1, "2025-02-28", A),
        AttendanceRecord(5, 3, "2025-03-03", A),
    ]
    service, _ = build(records)

    report = asyncio.run(service.instructor_report(school_id=7, period_key="2025-03"))

    assert [s.name for s in report.stats] == ["Alice", "Brian"]
    alice, brian = report.stats
    assert (alice.present_days, alice.late_days, alice.absent_days) == (1, 1, 1)
    assert alice.attendance_rate == 50
    assert brian.recorded_days == 0
    assert brian.attendance_rate == 0
    assert report.summary.average_attendance_rate == 50
    assert report.summary.distinct_recorded_days == 3
    assert [r.attendance_id for r in report.records] == [1, 2, 3]


def test_malformed_dates_are_reported_not_counted():
    records = [
        AttendanceRecord(1, 1, "2025-03-03", P),
        AttendanceRecord(2, 2, "03/04/2025", A),
    ]
    service, _ = build(records)

    report = asyncio.run(service.instructor_report(school_id=7, period_key="2025-03"))

    assert [r.attendance_id for r in report.malformed] == [2]
    assert report.stats[1].recorded_days == 0
    assert report.to_dict()["malformedRecordIds"] == [2]


def test_day_report():
    records = [
        AttendanceRecord(1, 1, "2025-03-03", P),
        AttendanceRecord(2, 2, "2025-03-03", L),
        AttendanceRecord(3, 2, "2025-03-04", P),
    ]
    service, _ = build(records)

    report = asyncio.run(service.instructor_report(school_id=7, period_key="2025-03-03"))

    assert [s.attendance_rate for s in report.stats] == [100, 50]
    assert report.summary.distinct_recorded_days == 1


def test_invalid_period_is_rejected_before_fetch():
    service, store = build([])

    with pytest.raises(ValidationError):
        asyncio.run(service.instructor_report(school_id=7, period_key="March"))

    assert store.list_calls == []


def test_reports_are_cached_until_invalidated():
    cache = StatsCache()
    service, store = build([AttendanceRecord(1, 1, "2025-03-03", P)], cache=cache)

    first = asyncio.run(service.instructor_report(school_id=7, period_key="2025-03"))
    second = asyncio.run(service.instructor_report(school_id=7, period_key="2025-03"))
    assert second is first
    assert len(store.list_calls) == 1

    store.records.append(AttendanceRecord(2, 1, "2025-03-04", A))
    cache.invalidate(7, "2025-03-04")
    third = asyncio.run(service.instructor_report(school_id=7, period_key="2025-03"))

    assert len(store.list_calls) == 2
    assert third.stats[0].absent_days == 1
    assert third.stats[0].attendance_rate == 50


def test_report_fetched_before_a_write_is_not_cached():
    cache = StatsCache()
    service, store = build([], cache=cache, store_cls=GatedAttendance)

    async def scenario():
        store.gate()
        pending = asyncio.create_task(service.instructor_report(school_id=7, period_key="2025-03"))
        await store.fetching.wait()

        session = BulkSession(INSTRUCTORS[:2], "2025-03-04", school_id=7)
        session.set_status(1, AttendanceStatus.ABSENT)
        await BulkRecorder(store, cache=cache).submit(session)

        store.release.set()
        before_write = await pending
        after_write = await service.instructor_report(school_id=7, period_key="2025-03")
        return before_write, after_write

    before_write, after_write = asyncio.run(scenario())

    assert before_write.stats[0].recorded_days == 0
    assert after_write.stats[0].recorded_days == 1
    assert after_write.stats[0].absent_days == 1
    assert len(store.list_calls) == 2
    assert cache.stats["stale_sets"] == 1
