from __future__ import annotations

from enum import Enum


class AttendanceStatus(str, Enum):
    """Attendance status as stored in the staff_attendance table."""

    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"
    SICK = "sick"
    PATERNITY = "paternity"
    PTO = "pto"
    BEREAVEMENT = "bereavement"


# Every non-attending status counts as an absent day.
ABSENCE_STATUSES = frozenset(
    {
        AttendanceStatus.ABSENT,
        AttendanceStatus.SICK,
        AttendanceStatus.PATERNITY,
        AttendanceStatus.PTO,
        AttendanceStatus.BEREAVEMENT,
    }
)

TIME_BEARING_STATUSES = frozenset({AttendanceStatus.PRESENT, AttendanceStatus.LATE})
