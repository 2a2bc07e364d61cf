from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Any, Optional, Union

from ..common.datetime_utils import is_month_key, normalize_day_key
from ..common.validators import optional_int, require_int, require_status
from ..core.constants import SYSTEM_USER_ID
from ..core.enums import TIME_BEARING_STATUSES, AttendanceStatus
from ..core.exceptions import ValidationError

RawDate = Union[str, date, datetime]


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one staff attendance row.

    ``work_date`` is kept as fetched (date, bare day string or ISO date-time
    string); compare it only through ``normalize_day_key``.
    """

    attendance_id: int
    instructor_id: int
    work_date: RawDate
    status: AttendanceStatus
    time_in: Optional[str] = None
    time_out: Optional[str] = None
    comments: Optional[str] = None
    recorded_by: Optional[int] = None

    @classmethod
    def from_dict(cls, data: dict) -> "AttendanceRecord":
        return cls(
            attendance_id=require_int(data.get("id"), "id"),
            instructor_id=require_int(data.get("instructorId"), "instructorId"),
            work_date=data.get("date"),
            status=require_status(data.get("status")),
            time_in=data.get("timeIn"),
            time_out=data.get("timeOut"),
            comments=data.get("comments"),
            recorded_by=optional_int(data.get("recordedBy"), "recordedBy"),
        )

    def to_dict(self) -> dict:
        work_date = self.work_date
        if isinstance(work_date, (date, datetime)):
            work_date = work_date.isoformat()
        return {
            "id": self.attendance_id,
            "instructorId": self.instructor_id,
            "date": work_date,
            "status": self.status.value,
            "timeIn": self.time_in,
            "timeOut": self.time_out,
            "comments": self.comments,
            "recordedBy": self.recorded_by,
        }


@dataclass(frozen=True)
class NewAttendanceRecord:
    """An attendance row that has not been stored yet (no id)."""

    instructor_id: int
    work_date: str
    status: AttendanceStatus
    time_in: Optional[str] = None
    time_out: Optional[str] = None
    comments: Optional[str] = None
    recorded_by: int = SYSTEM_USER_ID

    def __post_init__(self):
        object.__setattr__(self, "work_date", normalize_day_key(self.work_date))

    @classmethod
    def from_dict(cls, data: dict, *, recorded_by: Optional[int] = None) -> "NewAttendanceRecord":
        if not data.get("date"):
            raise ValidationError("date is required")
        operator = optional_int(data.get("recordedBy"), "recordedBy") or recorded_by or SYSTEM_USER_ID
        return cls(
            instructor_id=require_int(data.get("instructorId"), "instructorId"),
            work_date=data["date"],
            status=require_status(data.get("status") or AttendanceStatus.PRESENT),
            time_in=data.get("timeIn") or None,
            time_out=data.get("timeOut") or None,
            comments=data.get("comments") or None,
            recorded_by=operator,
        )

    def with_status(self, status: AttendanceStatus) -> "NewAttendanceRecord":
        record = replace(self, status=status)
        if status not in TIME_BEARING_STATUSES:
            record = replace(record, time_in=None, time_out=None)
        return record

    def stored(self, attendance_id: int) -> AttendanceRecord:
        return AttendanceRecord(
            attendance_id=attendance_id,
            instructor_id=self.instructor_id,
            work_date=self.work_date,
            status=self.status,
            time_in=self.time_in,
            time_out=self.time_out,
            comments=self.comments,
            recorded_by=self.recorded_by,
        )


_PATCH_FIELDS = {
    "status": "status",
    "date": "work_date",
    "timeIn": "time_in",
    "timeOut": "time_out",
    "comments": "comments",
}


@dataclass(frozen=True)
class AttendancePatch:
    """Partial update of an attendance row; keys are AttendanceRecord field names."""

    values: dict = field(default_factory=dict)

    def __post_init__(self):
        if not self.values:
            raise ValidationError("Nothing to update")
        unknown = set(self.values) - set(_PATCH_FIELDS.values())
        if unknown:
            raise ValidationError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")

        values = dict(self.values)
        if "status" in values:
            values["status"] = require_status(values["status"])
        if "work_date" in values:
            values["work_date"] = normalize_day_key(values["work_date"])
        object.__setattr__(self, "values", values)

    @classmethod
    def from_dict(cls, data: dict) -> "AttendancePatch":
        unknown = set(data) - set(_PATCH_FIELDS)
        if unknown:
            raise ValidationError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")
        return cls({_PATCH_FIELDS[k]: v for k, v in data.items()})

    def apply(self, record: AttendanceRecord) -> AttendanceRecord:
        return replace(record, **self.values)


@dataclass(frozen=True)
class AttendanceFilter:
    """Query for ``AttendanceStore.list``; ``date`` is a day or a month prefix."""

    school_id: Optional[int] = None
    date: Optional[str] = None

    def __post_init__(self):
        if self.date is None or is_month_key(self.date):
            return
        object.__setattr__(self, "date", normalize_day_key(self.date))

    @property
    def is_month(self) -> bool:
        return self.date is not None and is_month_key(self.date)

    @classmethod
    def from_args(cls, args: Any) -> "AttendanceFilter":
        return cls(
            school_id=optional_int(args.get("schoolId"), "schoolId"),
            date=args.get("date") or None,
        )
