from __future__ import annotations

from ...common.datetime_utils import round_half_up
from ...core.constants import LATE_ARRIVAL_CREDIT
from .base import RateCalculator


class HalfCreditRateCalculator(RateCalculator):
    """Standard rule: (present + 0.5 * late) / recorded days, as a whole percentage.

    Only recorded days count; an instructor with no records scores 0.
    """

    def __init__(self, late_credit: float = LATE_ARRIVAL_CREDIT):
        self._late_credit = float(late_credit)

    def attendance_rate(self, *, present_days: int, late_days: int, absent_days: int) -> int:
        recorded = present_days + late_days + absent_days
        if recorded <= 0:
            return 0
        return round_half_up((present_days + self._late_credit * late_days) / recorded * 100)
