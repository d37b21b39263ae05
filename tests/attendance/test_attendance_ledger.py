from __future__ import annotations

from datetime import date

import pytest

from src.roster_attendance.roster_attendance.core.enums import AttendanceStatus
from src.roster_attendance.roster_attendance.core.exceptions import AccessDenied, NotFound, ValidationError

DAY = date(2025, 3, 10)


@pytest.fixture
def roster(container, teacher, math101):
    asha = container.enrollment_service.add_student(math101.class_id, "Asha", "R1", teacher)
    ben = container.enrollment_service.add_student(math101.class_id, "Ben", "R2", teacher)
    return asha, ben


def test_empty_marking_records_everyone_absent(container, teacher, math101, roster):
    records = container.attendance_ledger.mark_bulk(math101.class_id, DAY, 1, {}, teacher)

    assert len(records) == 2
    assert all(r.status == AttendanceStatus.ABSENT for r in records)


def test_remarking_replaces_the_day(container, teacher, math101, roster):
    asha, ben = roster
    container.attendance_ledger.mark_bulk(math101.class_id, DAY, 1, {"R1": "present", "R2": "present"}, teacher)
    container.attendance_ledger.mark_bulk(math101.class_id, DAY, 2, {"R2": "present"}, teacher)

    day = container.attendance_ledger.records_for_class_and_date(math101.class_id, DAY)
    assert len(day) == 2
    by_id = {r.enrollment_id: r for r in day}
    assert by_id[asha.enrollment_id].status == AttendanceStatus.ABSENT
    assert by_id[ben.enrollment_id].status == AttendanceStatus.PRESENT
    assert {r.lectures for r in day} == {2}


def test_other_days_are_untouched(container, teacher, math101, roster):
    asha, _ = roster
    container.attendance_ledger.mark_bulk(math101.class_id, date(2025, 3, 9), 1, {"R1": "present"}, teacher)
    container.attendance_ledger.mark_bulk(math101.class_id, DAY, 1, {}, teacher)

    history = container.attendance_ledger.records_for_student(asha.enrollment_id)
    assert [r.day for r in history] == [DAY, date(2025, 3, 9)]


def test_statuses_keyed_by_enrollment_id(container, teacher, math101, roster):
    asha, _ = roster
    records = container.attendance_ledger.mark_bulk(
        math101.class_id, "2025-03-10", 1, {asha.enrollment_id: AttendanceStatus.PRESENT}, teacher
    )

    present = [r.enrollment_id for r in records if r.is_present]
    assert present == [asha.enrollment_id]


@pytest.mark.parametrize(
    "lectures, statuses",
    [
        (0, {}),
        ("x", {}),
        (1, {"R1": "late"}),
        (1, {"R9": "present"}),
    ],
)
def test_invalid_marking_rejected_before_any_write(container, repos, teacher, math101, roster, lectures, statuses):
    container.attendance_ledger.mark_bulk(math101.class_id, DAY, 1, {"R1": "present"}, teacher)

    with pytest.raises(ValidationError):
        container.attendance_ledger.mark_bulk(math101.class_id, DAY, lectures, statuses, teacher)

    assert len(repos.attendance.list_for_class_and_day(math101.class_id, DAY)) == 2


def test_bad_date_rejected(container, teacher, math101, roster):
    with pytest.raises(ValidationError):
        container.attendance_ledger.mark_bulk(math101.class_id, "10/03/2025", 1, {}, teacher)


def test_unknown_class_or_foreign_teacher(container, teacher, other_teacher, math101, roster):
    with pytest.raises(NotFound):
        container.attendance_ledger.mark_bulk(999, DAY, 1, {}, teacher)
    with pytest.raises(NotFound):
        container.attendance_ledger.mark_bulk(math101.class_id, DAY, 1, {}, other_teacher)


def test_day_report(container, teacher, math101, roster):
    container.attendance_ledger.mark_bulk(math101.class_id, DAY, 3, {"R2": "present"}, teacher)

    report = container.attendance_ledger.day_report(math101.class_id, DAY, teacher)

    assert [s.roll_no for s in report.present] == ["R2"]
    assert [s.roll_no for s in report.absent] == ["R1"]
    assert report.lectures == 3
    assert report.to_dict()["totalStudents"] == 2


def test_day_report_for_unmarked_day(container, teacher, math101, roster):
    report = container.attendance_ledger.day_report(math101.class_id, date(2025, 1, 1), teacher)

    assert report.lectures == 0
    assert report.present == ()
    assert len(report.absent) == 2


def test_admin_lists_every_record_with_names(container, admin, teacher, math101, roster):
    container.attendance_ledger.mark_bulk(math101.class_id, date(2025, 3, 9), 1, {"R1": "present"}, teacher)
    container.attendance_ledger.mark_bulk(math101.class_id, DAY, 1, {}, teacher)

    listings = container.attendance_ledger.all_records(admin)

    assert [row.record.day for row in listings] == [DAY, DAY, date(2025, 3, 9), date(2025, 3, 9)]
    assert {row.class_name for row in listings} == {"Math101"}
    first_day = [row for row in listings if row.record.day == date(2025, 3, 9)]
    assert {(row.roll_no, row.student_name, row.record.status) for row in first_day} == {
        ("R1", "Asha", AttendanceStatus.PRESENT),
        ("R2", "Ben", AttendanceStatus.ABSENT),
    }
    assert listings[0].to_dict()["className"] == "Math101"


def test_attendance_listing_is_admin_only(container, teacher, math101, roster):
    with pytest.raises(AccessDenied):
        container.attendance_ledger.all_records(teacher)
