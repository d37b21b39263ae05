import pytest

from src.roster_attendance.roster_attendance.core.enums import AttendanceBand
from src.roster_attendance.roster_attendance.reports.calculator.standard_calculator import StandardAttendanceCalculator


def test_percentage_is_zero_without_records():
    assert StandardAttendanceCalculator().percentage(0, 0) == 0.0


@pytest.mark.parametrize(
    "percentage, band",
    [
        (100.0, AttendanceBand.GOOD),
        (75.0, AttendanceBand.GOOD),
        (74.999, AttendanceBand.WARNING),
        (60.0, AttendanceBand.WARNING),
        (59.999, AttendanceBand.DANGER),
        (0.0, AttendanceBand.DANGER),
    ],
)
def test_band_boundaries(percentage, band):
    assert StandardAttendanceCalculator().band(percentage) == band


def test_defaulter_below_75():
    calc = StandardAttendanceCalculator()
    assert calc.is_defaulter(74.999)
    assert not calc.is_defaulter(75.0)


def test_band_uses_unrounded_value():
    calc = StandardAttendanceCalculator()
    pct = calc.percentage(18749, 25000)  # 74.996, displays as 75.0

    assert round(pct, 2) == 75.0
    assert calc.band(pct) == AttendanceBand.WARNING


def test_custom_thresholds():
    calc = StandardAttendanceCalculator(good_threshold=90, warning_threshold=80, defaulter_threshold=85)
    assert calc.band(85.0) == AttendanceBand.WARNING
    assert calc.is_defaulter(84.0)
