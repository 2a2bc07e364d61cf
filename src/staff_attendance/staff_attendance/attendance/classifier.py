from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple, Optional

from ..common.datetime_utils import parse_clock_minutes
from ..common.validators import require_status
from ..core.constants import DEFAULT_LATE_THRESHOLD_MINUTES
from ..core.enums import AttendanceStatus


class StatusDecision(NamedTuple):
    status: AttendanceStatus
    reclassified: bool


def classify(
    status: AttendanceStatus,
    time_in: Optional[str],
    threshold_minutes: int = DEFAULT_LATE_THRESHOLD_MINUTES,
) -> StatusDecision:
    """Apply the late-arrival policy to one requested status.

    A ``present`` entry checked in strictly after ``threshold_minutes``
    (minutes since midnight) becomes ``late``. Every other status is returned
    unchanged. Raises InvalidTimeFormat for a malformed ``time_in``, whatever
    the status, and ValidationError for an unknown status.
    """

    status = require_status(status)
    if time_in is None:
        return StatusDecision(status=status, reclassified=False)

    minutes = parse_clock_minutes(time_in)
    if status == AttendanceStatus.PRESENT and minutes > int(threshold_minutes):
        return StatusDecision(status=AttendanceStatus.LATE, reclassified=True)
    return StatusDecision(status=status, reclassified=False)


@dataclass(frozen=True)
class LatePolicy:
    """Late-arrival threshold shared by the single-entry and bulk paths."""

    threshold_minutes: int = DEFAULT_LATE_THRESHOLD_MINUTES

    def decide(self, status: AttendanceStatus, time_in: Optional[str]) -> StatusDecision:
        return classify(status, time_in, self.threshold_minutes)
