from __future__ import annotations

import logging
from collections import defaultdict
from datetime import datetime
from typing import Callable, Optional

from ..access.guard import AccessGuard
from ..access.policy import AuthorizationContext
from ..attendance.repository import AttendanceRepository
from ..classes.model import ClassRecord
from ..classes.repository import ClassRepository
from ..common.datetime_utils import now_local
from ..common.validators import require_non_empty
from ..core.enums import Action, AttendanceBand
from ..core.exceptions import NotFound
from ..enrollments.repository import EnrollmentRepository
from .calculator.base import AttendanceRateCalculator
from .calculator.standard_calculator import StandardAttendanceCalculator
from .model import (
    ClassAttendanceLine,
    ClassOverviewLine,
    ClassSummary,
    StudentLine,
    StudentSummary,
    TeacherOverview,
    distinct_days,
)

logger = logging.getLogger(__name__)


class ReportService:
    """Read-only aggregates over attendance records.

    Percentages count records (one per student per marked day), not lectures.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        enrollments: EnrollmentRepository,
        classes: ClassRepository,
        guard: AccessGuard,
        *,
        calculator: Optional[AttendanceRateCalculator] = None,
        clock: Callable[[], datetime] = now_local,
    ):
        self._attendance = attendance
        self._enrollments = enrollments
        self._classes = classes
        self._guard = guard
        self._calculator = calculator or StandardAttendanceCalculator()
        self._clock = clock

    def student_summary(self, roll_no: str, ctx: Optional[AuthorizationContext] = None) -> StudentSummary:
        """Cross-class summary for one roll number.

        Without a context the caller has already decided access. A teacher only
        sees the classes they teach; a student context must carry the same roll.
        """

        roll_no = require_non_empty(roll_no, "Roll number")
        enrollments = list(self._enrollments.list_by_roll(roll_no))
        if not enrollments:
            raise NotFound("Student not found")

        classes: dict[int, ClassRecord] = {}
        for e in enrollments:
            record = self._classes.get_by_id(e.class_id)
            if record is not None:
                classes[record.class_id] = record
        enrollments = [e for e in enrollments if e.class_id in classes]

        if ctx is not None and not ctx.is_admin:
            if ctx.is_teacher:
                enrollments = [e for e in enrollments if classes[e.class_id].has_teacher(ctx.account_id)]
                if not enrollments:
                    raise NotFound("Student not found")
            else:
                self._guard.require_own_records(ctx, roll_no, classes.values())

        calc = self._calculator
        lines: list[ClassAttendanceLine] = []
        for e in enrollments:
            record = classes[e.class_id]
            rows = [r for r in self._attendance.list_for_enrollment(e.enrollment_id) if r.class_id == e.class_id]
            present = sum(1 for r in rows if r.is_present)
            pct = calc.percentage(present, len(rows))
            lines.append(
                ClassAttendanceLine(
                    class_id=record.class_id,
                    class_name=record.name,
                    subject=record.subject,
                    room=record.room,
                    present=present,
                    total=len(rows),
                    percentage=pct,
                    band=calc.band(pct),
                )
            )

        present = sum(line.present for line in lines)
        total = sum(line.total for line in lines)
        pct = calc.percentage(present, total)
        return StudentSummary(
            roll_no=roll_no,
            name=enrollments[0].name if enrollments else "",
            lines=tuple(lines),
            present=present,
            total=total,
            percentage=pct,
            band=calc.band(pct),
        )

    def class_summary(
        self,
        class_id: int,
        actor: AuthorizationContext,
        *,
        generated_by: str = "",
    ) -> ClassSummary:
        record = self._guard.require_class(actor, class_id, Action.READ)
        students = list(self._enrollments.list_for_class(record.class_id))
        records = list(self._attendance.list_for_class(record.class_id))

        by_student = defaultdict(list)
        for r in records:
            by_student[r.enrollment_id].append(r)

        calc = self._calculator
        band_counts = {band: 0 for band in AttendanceBand}
        lines: list[StudentLine] = []
        for s in students:
            rows = by_student.get(s.enrollment_id, [])
            present = sum(1 for r in rows if r.is_present)
            pct = calc.percentage(present, len(rows))
            band = calc.band(pct)
            band_counts[band] += 1
            lines.append(
                StudentLine(
                    enrollment_id=s.enrollment_id,
                    roll_no=s.roll_no,
                    name=s.name,
                    email=s.email,
                    present=present,
                    total=len(rows),
                    percentage=pct,
                    band=band,
                    is_defaulter=calc.is_defaulter(pct),
                )
            )

        summary = ClassSummary(
            class_id=record.class_id,
            class_name=record.name,
            subject=record.subject,
            room=record.room,
            lines=tuple(lines),
            class_days=distinct_days(r.day for r in records),
            generated_on=self._clock(),
            generated_by=generated_by,
            band_counts=band_counts,
        )
        logger.debug(
            "Class %s report: %s students, %s days, %s defaulters",
            record.class_id,
            summary.total_students,
            summary.total_class_days,
            len(summary.defaulters),
        )
        return summary

    def teacher_overview(self, actor: AuthorizationContext) -> TeacherOverview:
        """Per-class totals for every active class the actor can see."""

        self._guard.require_staff(actor)
        if actor.is_admin:
            classes = list(self._classes.list_all())
        else:
            classes = list(self._classes.list_for_teacher(int(actor.account_id)))
        classes = [c for c in classes if c.is_active]

        calc = self._calculator
        lines: list[ClassOverviewLine] = []
        for record in classes:
            students = self._enrollments.list_for_class(record.class_id)
            records = list(self._attendance.list_for_class(record.class_id))
            present = sum(1 for r in records if r.is_present)
            pct = calc.percentage(present, len(records))
            lines.append(
                ClassOverviewLine(
                    class_id=record.class_id,
                    class_name=record.name,
                    subject=record.subject,
                    room=record.room,
                    students=len(students),
                    class_days=len(distinct_days(r.day for r in records)),
                    present=present,
                    total=len(records),
                    percentage=pct,
                    band=calc.band(pct),
                )
            )

        present = sum(line.present for line in lines)
        total = sum(line.total for line in lines)
        pct = calc.percentage(present, total)
        return TeacherOverview(
            lines=tuple(lines),
            students=sum(line.students for line in lines),
            present=present,
            total=total,
            percentage=pct,
            band=calc.band(pct),
        )
