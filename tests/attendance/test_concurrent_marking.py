from __future__ import annotations

from collections import Counter
from datetime import date
from types import SimpleNamespace

import pytest

from src.roster_attendance.roster_attendance.core.enums import AttendanceStatus

from tests.fakes import (
    InMemoryAccounts,
    InMemoryAttendance,
    InMemoryClasses,
    InMemoryEnrollments,
    InMemoryTimetable,
)

DAY = date(2025, 3, 10)


class InterleavingAttendance(InMemoryAttendance):
    """Runs ``between`` once, after the first day delete and before its inserts."""

    def __init__(self):
        super().__init__()
        self.between = None

    def delete_for_class_and_day(self, class_id: int, day: date) -> int:
        removed = super().delete_for_class_and_day(class_id, day)
        hook, self.between = self.between, None
        if hook is not None:
            hook()
        return removed


@pytest.fixture
def repos():
    return SimpleNamespace(
        accounts=InMemoryAccounts(),
        classes=InMemoryClasses(),
        enrollments=InMemoryEnrollments(),
        attendance=InterleavingAttendance(),
        timetable=InMemoryTimetable(),
    )


@pytest.fixture
def roster(container, teacher, math101):
    container.enrollment_service.add_student(math101.class_id, "Asha", "R1", teacher)
    container.enrollment_service.add_student(math101.class_id, "Ben", "R2", teacher)
    return math101


def _interleave(container, repos, teacher, class_id):
    ledger = container.attendance_ledger
    repos.attendance.between = lambda: ledger.mark_bulk(class_id, DAY, 1, {"R2": "present"}, teacher)
    ledger.mark_bulk(class_id, DAY, 1, {"R1": "present"}, teacher)


def test_interleaved_markings_leave_both_writers_rows(container, repos, teacher, roster):
    _interleave(container, repos, teacher, roster.class_id)

    day = container.attendance_ledger.records_for_class_and_date(roster.class_id, DAY)

    assert len(day) == 4
    assert set(Counter(r.enrollment_id for r in day).values()) == {2}
    statuses = {}
    for r in day:
        statuses.setdefault(r.enrollment_id, set()).add(r.status)
    assert all(s == {AttendanceStatus.PRESENT, AttendanceStatus.ABSENT} for s in statuses.values())


def test_next_marking_collapses_interleaved_rows(container, repos, teacher, roster):
    _interleave(container, repos, teacher, roster.class_id)

    container.attendance_ledger.mark_bulk(roster.class_id, DAY, 2, {"R1": "present"}, teacher)

    day = container.attendance_ledger.records_for_class_and_date(roster.class_id, DAY)
    assert len(day) == 2
    assert sorted((r.status, r.lectures) for r in day) == [
        (AttendanceStatus.ABSENT, 2),
        (AttendanceStatus.PRESENT, 2),
    ]
