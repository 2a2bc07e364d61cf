from __future__ import annotations

from abc import ABC, abstractmethod


class RateCalculator(ABC):
    """Calculator interface (Strategy Pattern for attendance rates)."""

    @abstractmethod
    def attendance_rate(self, *, present_days: int, late_days: int, absent_days: int) -> int:
        raise NotImplementedError
