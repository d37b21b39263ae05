from __future__ import annotations

from abc import ABC, abstractmethod

from ...core.enums import AttendanceBand


class AttendanceRateCalculator(ABC):
    """Calculator interface (Strategy Pattern for attendance rates)."""

    @abstractmethod
    def percentage(self, present: int, total: int) -> float:
        raise NotImplementedError

    @abstractmethod
    def band(self, percentage: float) -> AttendanceBand:
        raise NotImplementedError

    @abstractmethod
    def is_defaulter(self, percentage: float) -> bool:
        raise NotImplementedError
