from __future__ import annotations

from ...core.constants import DEFAULTER_THRESHOLD, GOOD_THRESHOLD, WARNING_THRESHOLD
from ...core.enums import AttendanceBand
from .base import AttendanceRateCalculator


class StandardAttendanceCalculator(AttendanceRateCalculator):
    """Standard rule: present / total * 100, banded at 75 and 60.

    Bands use the unrounded value; rounding is for display only.
    """

    def __init__(
        self,
        *,
        good_threshold: float = GOOD_THRESHOLD,
        warning_threshold: float = WARNING_THRESHOLD,
        defaulter_threshold: float = DEFAULTER_THRESHOLD,
    ):
        self._good = float(good_threshold)
        self._warning = float(warning_threshold)
        self._defaulter = float(defaulter_threshold)

    def percentage(self, present: int, total: int) -> float:
        if total <= 0:
            return 0.0
        return present / total * 100

    def band(self, percentage: float) -> AttendanceBand:
        if percentage >= self._good:
            return AttendanceBand.GOOD
        if percentage >= self._warning:
            return AttendanceBand.WARNING
        return AttendanceBand.DANGER

    def is_defaulter(self, percentage: float) -> bool:
        return percentage < self._defaulter
