from __future__ import annotations

import csv
import io
import json
from datetime import date, datetime

import pytest

from src.roster_attendance.roster_attendance.access.policy import AuthorizationContext
from src.roster_attendance.roster_attendance.core.enums import AttendanceBand
from src.roster_attendance.roster_attendance.core.exceptions import AccessDenied, NotFound
from src.roster_attendance.roster_attendance.reports.calculator.standard_calculator import StandardAttendanceCalculator
from src.roster_attendance.roster_attendance.reports.exporters import CSV_COLUMNS, csv_filename, to_csv, to_json
from src.roster_attendance.roster_attendance.reports.model import ClassSummary, StudentLine


@pytest.fixture
def marked(container, teacher, math101):
    container.enrollment_service.add_student(math101.class_id, "Asha", "R1", teacher, email="asha@example.com")
    container.enrollment_service.add_student(math101.class_id, "Ben", "R2", teacher)
    container.attendance_ledger.mark_bulk(math101.class_id, date(2025, 3, 10), 1, {"R1": "present"}, teacher)
    return math101


def test_single_present_day_scenario(container, teacher, marked):
    summary = container.report_service.student_summary("R1")

    assert summary.name == "Asha"
    assert summary.percentage == 100.0
    assert summary.band == AttendanceBand.GOOD
    (line,) = summary.lines
    assert (line.class_name, line.present, line.total) == ("Math101", 1, 1)


def test_absent_student_is_defaulter(container, teacher, marked):
    report = container.report_service.class_summary(marked.class_id, teacher)

    ben = next(line for line in report.lines if line.roll_no == "R2")
    assert ben.percentage == 0.0
    assert ben.band == AttendanceBand.DANGER
    assert ben.is_defaulter
    assert [d.roll_no for d in report.defaulters] == ["R2"]
    assert report.band_counts[AttendanceBand.GOOD] == 1
    assert report.band_counts[AttendanceBand.DANGER] == 1


def test_class_days_are_distinct(container, teacher, marked):
    container.attendance_ledger.mark_bulk(marked.class_id, date(2025, 3, 10), 1, {"R2": "present"}, teacher)
    container.attendance_ledger.mark_bulk(marked.class_id, date(2025, 3, 11), 1, {}, teacher)

    report = container.report_service.class_summary(marked.class_id, teacher)

    assert report.class_days == (date(2025, 3, 10), date(2025, 3, 11))
    asha = next(line for line in report.lines if line.roll_no == "R1")
    assert (asha.present, asha.total) == (0, 2)


def test_student_summary_across_classes(container, teacher, marked):
    physics = container.class_service.create_class(name="Physics", room="2", subject="Physics", creator=teacher)
    container.enrollment_service.add_student(physics.class_id, "Asha", "R1", teacher)
    for day in (date(2025, 3, 10), date(2025, 3, 11), date(2025, 3, 12)):
        container.attendance_ledger.mark_bulk(physics.class_id, day, 1, {"R1": "present"}, teacher)
    container.attendance_ledger.mark_bulk(physics.class_id, date(2025, 3, 13), 1, {}, teacher)

    summary = container.report_service.student_summary("R1")

    assert (summary.present, summary.total) == (4, 5)
    assert summary.percentage == 80.0
    physics_line = next(line for line in summary.lines if line.class_id == physics.class_id)
    assert physics_line.percentage == 75.0
    assert physics_line.band == AttendanceBand.GOOD


def test_student_summary_unknown_roll(container):
    with pytest.raises(NotFound):
        container.report_service.student_summary("NOPE")


def test_student_summary_access(container, teacher, other_teacher, marked):
    assert container.report_service.student_summary("R1", AuthorizationContext.for_roll_number("R1")).total == 1

    with pytest.raises(NotFound):
        container.report_service.student_summary("R1", AuthorizationContext.for_roll_number("R2"))
    with pytest.raises(NotFound):
        container.report_service.student_summary("R1", other_teacher)
    assert container.report_service.student_summary("R1", teacher).total == 1


def test_class_summary_hidden_from_other_teachers(container, other_teacher, marked):
    with pytest.raises(NotFound):
        container.report_service.class_summary(marked.class_id, other_teacher)


def test_teacher_overview(container, teacher, other_teacher, marked):
    overview = container.report_service.teacher_overview(teacher)

    (line,) = overview.lines
    assert (line.students, line.class_days, line.present, line.total) == (2, 1, 1, 2)
    assert overview.percentage == 50.0
    assert overview.band == AttendanceBand.DANGER

    assert container.report_service.teacher_overview(other_teacher).lines == ()
    with pytest.raises(AccessDenied):
        container.report_service.teacher_overview(AuthorizationContext.anonymous())


def test_csv_and_json_agree(container, teacher, marked):
    report = container.report_service.class_summary(marked.class_id, teacher, generated_by="Tina")

    text = to_csv(report)
    lines = text.splitlines()
    assert lines[0] == "Attendance Report - Math101"
    assert "Generated by: Tina" in lines

    header_at = lines.index(",".join(CSV_COLUMNS))
    rows = list(csv.reader(io.StringIO("\n".join(lines[header_at + 1 : header_at + 3]))))
    assert rows[0] == ["R1", "Asha", "asha@example.com", "1", "1", "100.00%", "good", "NO"]
    assert rows[1] == ["R2", "Ben", "", "0", "1", "0.00%", "danger", "YES"]

    defaulters_at = lines.index("DEFAULTERS (Below 75% Attendance):")
    assert lines[defaulters_at + 1] == "Roll No,Name,Percentage"
    assert lines[defaulters_at + 2] == "R2,Ben,0.00%"

    data = json.loads(to_json(report))
    assert [s["rollNo"] for s in data["students"]] == ["R1", "R2"]
    assert data["students"][0]["percentage"] == 100.0
    assert [d["rollNo"] for d in data["defaulters"]] == ["R2"]
    assert data["summary"] == {"good": 1, "warning": 0, "danger": 1}
    assert data["totalClassDays"] == 1

    assert csv_filename(report).startswith("attendance-report-Math101-")


def test_json_keeps_unrounded_percentage_next_to_band():
    calc = StandardAttendanceCalculator()
    pct = calc.percentage(29999, 40000)
    line = StudentLine(
        enrollment_id=1,
        roll_no="R1",
        name="Asha",
        email=None,
        present=29999,
        total=40000,
        percentage=pct,
        band=calc.band(pct),
        is_defaulter=calc.is_defaulter(pct),
    )
    report = ClassSummary(
        class_id=1,
        class_name="Math101",
        subject="Mathematics",
        room="R-12",
        lines=(line,),
        class_days=(date(2025, 3, 10),),
        generated_on=datetime(2025, 3, 10, 9, 0),
    )

    student = json.loads(to_json(report))["students"][0]

    assert student["percentage"] == pct
    assert student["percentage"] < 75
    assert student["status"] == AttendanceBand.WARNING.value
    assert student["isDefaulter"] is True
    assert student["percentageDisplay"] == 75.0
    assert _pct_cell(to_csv(report)) == "75.00%"


def _pct_cell(text: str) -> str:
    lines = text.splitlines()
    header_at = lines.index(",".join(CSV_COLUMNS))
    return next(csv.reader([lines[header_at + 1]]))[5]
