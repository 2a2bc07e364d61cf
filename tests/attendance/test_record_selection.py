from __future__ import annotations

from datetime import date, datetime

import pytest

from src.staff_attendance.staff_attendance.attendance.model import AttendanceFilter, AttendanceRecord
from src.staff_attendance.staff_attendance.attendance.records import (
    ReportingScope,
    partition_records,
    search_records,
    select_records,
)
from src.staff_attendance.staff_attendance.common.datetime_utils import normalize_day_key
from src.staff_attendance.staff_attendance.core.enums import AttendanceStatus
from src.staff_attendance.staff_attendance.core.exceptions import InvalidDateFormat, ValidationError
from src.staff_attendance.staff_attendance.instructors.model import Instructor


def rec(attendance_id, instructor_id, work_date, status=AttendanceStatus.PRESENT):
    return AttendanceRecord(
        attendance_id=attendance_id,
        instructor_id=instructor_id,
        work_date=work_date,
        status=status,
    )


def test_bare_and_iso_datetime_normalize_to_same_key():
    assert normalize_day_key("2025-03-10") == normalize_day_key("2025-03-10T08:00:00Z") == "2025-03-10"


def test_normalize_is_idempotent_and_accepts_date_objects():
    key = normalize_day_key("2025-03-10T23:59:59.000+03:00")

    assert normalize_day_key(key) == key
    assert normalize_day_key(date(2025, 3, 10)) == key
    assert normalize_day_key(datetime(2025, 3, 10, 7, 0)) == key


@pytest.mark.parametrize("bad", ["10/03/2025", "2025-3-10", "2025-02-30", "", None, 20250310])
def test_normalize_rejects_garbage(bad):
    with pytest.raises(InvalidDateFormat):
        normalize_day_key(bad)


def test_day_scope_keeps_exact_day_only():
    records = [
        rec(1, 1, "2025-03-10"),
        rec(2, 1, "2025-03-10T14:00:00Z"),
        rec(3, 1, "2025-03-11"),
        rec(4, 2, "2025-02-10"),
    ]

    selected = select_records(records, ReportingScope("2025-03-10"))

    assert [r.attendance_id for r in selected] == [1, 2]


def test_month_scope_keeps_prefix_matches():
    records = [
        rec(1, 1, "2025-03-01"),
        rec(2, 1, "2025-03-31T06:00:00"),
        rec(3, 1, "2025-04-01"),
        rec(4, 1, "2024-03-15"),
    ]

    selected = select_records(records, ReportingScope.for_month(2025, 3))

    assert [r.attendance_id for r in selected] == [1, 2]


def test_instructor_scope_is_intersected():
    records = [rec(1, 1, "2025-03-10"), rec(2, 2, "2025-03-10"), rec(3, 3, "2025-03-10")]

    selected = select_records(records, ReportingScope.parse("2025-03", instructor_ids=[1, 3]))

    assert {r.instructor_id for r in selected} == {1, 3}


def test_selection_is_sorted_for_display():
    records = [rec(3, 2, "2025-03-12"), rec(2, 1, "2025-03-12"), rec(1, 5, "2025-03-02")]

    selected = select_records(records, ReportingScope("2025-03"))

    assert [r.attendance_id for r in selected] == [1, 2, 3]


def test_malformed_dates_are_separated_not_raised():
    records = [rec(1, 1, "2025-03-10"), rec(2, 1, "not-a-date"), rec(3, 1, None)]

    valid, malformed = partition_records(records)
    selected = select_records(records, ReportingScope("2025-03"))

    assert [r.attendance_id for _, r in valid] == [1]
    assert [r.attendance_id for r in malformed] == [2, 3]
    assert [r.attendance_id for r in selected] == [1]


@pytest.mark.parametrize("bad", ["2025-13", "2025-03-10T08:00:00", "March", "2025/03"])
def test_invalid_scope_period_is_rejected(bad):
    with pytest.raises(ValidationError):
        ReportingScope(bad)


def test_filter_accepts_month_or_normalizes_day():
    assert AttendanceFilter(date="2025-03").is_month
    assert AttendanceFilter(date="2025-03-10T09:00:00Z").date == "2025-03-10"


def test_search_by_name_and_status():
    instructors = [
        Instructor(instructor_id=1, name="Alice Morgan", school_id=1),
        Instructor(instructor_id=2, name="Brian Cole", school_id=1),
    ]
    records = [
        rec(1, 1, "2025-03-10"),
        rec(2, 2, "2025-03-10", AttendanceStatus.LATE),
        rec(3, 1, "2025-03-11", AttendanceStatus.SICK),
    ]

    assert [r.attendance_id for r in search_records(records, instructors, search="alice")] == [1, 3]
    assert [r.attendance_id for r in search_records(records, instructors, status=AttendanceStatus.LATE)] == [2]
    assert search_records(records, instructors, search="zed") == []
