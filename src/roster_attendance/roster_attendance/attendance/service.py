from __future__ import annotations

import logging
from datetime import date
from typing import Mapping, Optional, Union

from ..access.guard import AccessGuard
from ..access.policy import AuthorizationContext
from ..classes.repository import ClassRepository
from ..common.datetime_utils import parse_iso_date
from ..common.validators import require_positive_int
from ..core.enums import Action, AttendanceStatus
from ..core.exceptions import ValidationError
from ..enrollments.model import EnrollmentRecord
from ..enrollments.repository import EnrollmentRepository
from .model import AttendanceListing, AttendanceRecord, DayReport
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

StatusKey = Union[str, int]


def _as_day(value: Union[date, str]) -> date:
    if isinstance(value, date):
        return value
    return parse_iso_date(value)


def _as_status(value: Union[AttendanceStatus, str]) -> AttendanceStatus:
    if isinstance(value, AttendanceStatus):
        return value
    try:
        return AttendanceStatus(str(value).strip().lower())
    except ValueError:
        raise ValidationError(f"Unknown attendance status: {value!r}")


class AttendanceLedger:
    """Use cases: full-day attendance marking and read projections."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        enrollments: EnrollmentRepository,
        guard: AccessGuard,
        classes: Optional[ClassRepository] = None,
    ):
        self._attendance = attendance
        self._enrollments = enrollments
        self._guard = guard
        self._classes = classes

    def mark_bulk(
        self,
        class_id: int,
        day: Union[date, str],
        lectures: int,
        statuses: Optional[Mapping[StatusKey, Union[AttendanceStatus, str]]],
        actor: AuthorizationContext,
    ) -> list[AttendanceRecord]:
        """Replace the whole day for the class.

        ``statuses`` is keyed by roll number (str) or enrollment id (int).
        Enrolled students without an entry are recorded absent.

        The delete and the inserts are separate writes. Sequential calls leave
        exactly the last call's rows. Two calls for the same class and day that
        interleave (delete A, delete B, then both insert) leave both sets, so a
        student can hold two rows for that day until the next marking replaces
        them.
        """

        record = self._guard.require_class(actor, class_id, Action.MARK_ATTENDANCE)
        day = _as_day(day)
        lectures = require_positive_int(lectures, "Lectures")
        students = list(self._enrollments.list_for_class(record.class_id))
        resolved = self._resolve_statuses(students, statuses or {})

        removed = self._attendance.delete_for_class_and_day(record.class_id, day)

        created: list[AttendanceRecord] = []
        for student in students:
            status = resolved.get(student.enrollment_id, AttendanceStatus.ABSENT)
            attendance_id = self._attendance.create_record(
                enrollment_id=student.enrollment_id,
                class_id=record.class_id,
                day=day,
                status=status,
                lectures=lectures,
            )
            created.append(
                AttendanceRecord(
                    attendance_id=attendance_id,
                    enrollment_id=student.enrollment_id,
                    class_id=record.class_id,
                    day=day,
                    status=status,
                    lectures=lectures,
                )
            )

        logger.info(
            "Attendance for class %s on %s: %s present / %s students (replaced %s rows)",
            record.class_id,
            day,
            sum(1 for r in created if r.is_present),
            len(created),
            removed,
        )
        return created

    @staticmethod
    def _resolve_statuses(
        students: list[EnrollmentRecord],
        statuses: Mapping[StatusKey, Union[AttendanceStatus, str]],
    ) -> dict[int, AttendanceStatus]:
        by_roll = {s.roll_no: s for s in students}
        by_id = {s.enrollment_id: s for s in students}

        out: dict[int, AttendanceStatus] = {}
        for key, value in statuses.items():
            if isinstance(key, int) and key in by_id:
                student = by_id[key]
            elif str(key) in by_roll:
                student = by_roll[str(key)]
            else:
                raise ValidationError(f"No student {key!r} in this class")
            out[student.enrollment_id] = _as_status(value)
        return out

    def records_for_student(self, enrollment_id: int) -> list[AttendanceRecord]:
        return list(self._attendance.list_for_enrollment(int(enrollment_id)))

    def records_for_class_and_date(self, class_id: int, day: Union[date, str]) -> list[AttendanceRecord]:
        return list(self._attendance.list_for_class_and_day(int(class_id), _as_day(day)))

    def day_report(self, class_id: int, day: Union[date, str], actor: AuthorizationContext) -> DayReport:
        record = self._guard.require_class(actor, class_id, Action.READ)
        day = _as_day(day)
        students = list(self._enrollments.list_for_class(record.class_id))
        records = list(self._attendance.list_for_class_and_day(record.class_id, day))

        present_ids = {r.enrollment_id for r in records if r.is_present}
        return DayReport(
            class_id=record.class_id,
            day=day,
            lectures=records[0].lectures if records else 0,
            students=tuple(students),
            present=tuple(s for s in students if s.enrollment_id in present_ids),
            absent=tuple(s for s in students if s.enrollment_id not in present_ids),
            records=tuple(records),
        )

    def all_records(self, actor: AuthorizationContext) -> list[AttendanceListing]:
        """Every attendance row, newest day first, with student and class names."""

        self._guard.require_admin(actor)
        students = {e.enrollment_id: e for e in self._enrollments.list_all()}
        class_names = {c.class_id: c.name for c in self._classes.list_all()} if self._classes is not None else {}

        listings = []
        for record in self._attendance.list_all():
            student = students.get(record.enrollment_id)
            listings.append(
                AttendanceListing(
                    record=record,
                    roll_no=student.roll_no if student else "",
                    student_name=student.name if student else "",
                    class_name=class_names.get(record.class_id, ""),
                )
            )
        return listings
