from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional, Union

from ..access.guard import AccessGuard
from ..access.policy import AuthorizationContext, decide
from ..attendance.repository import AttendanceRepository
from ..classes.repository import ClassRepository
from ..common.payloads import pick_fields
from ..common.validators import optional_email, optional_text, require_non_empty, require_positive_int
from ..core.enums import Action, OutcomeKind
from ..core.exceptions import DomainError, DuplicateEnrollment, NotFound, ValidationError
from .model import BulkEnrollmentResult, ClassRoster, EnrollmentOutcome, EnrollmentRecord, StudentListing
from .repository import EnrollmentRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NewStudent:
    name: str
    roll_no: str
    email: Optional[str] = None
    phone: Optional[str] = None
    parent_phone: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "NewStudent":
        fields = pick_fields(
            data,
            required=("name", "roll_no"),
            optional=("email", "phone", "parent_phone"),
        )
        return cls.clean(
            name=fields["name"],
            roll_no=fields["roll_no"],
            email=fields.get("email"),
            phone=fields.get("phone"),
            parent_phone=fields.get("parent_phone"),
        )

    @classmethod
    def clean(cls, *, name, roll_no, email=None, phone=None, parent_phone=None) -> "NewStudent":
        return cls(
            name=require_non_empty(name, "Name"),
            roll_no=require_non_empty(roll_no, "Roll number"),
            email=optional_email(email),
            phone=optional_text(phone),
            parent_phone=optional_text(parent_phone),
        )


class EnrollmentService:
    """Use cases: class rosters (add, bulk add, self register, remove)."""

    def __init__(
        self,
        enrollments: EnrollmentRepository,
        attendance: AttendanceRepository,
        classes: ClassRepository,
        guard: AccessGuard,
    ):
        self._enrollments = enrollments
        self._attendance = attendance
        self._classes = classes
        self._guard = guard

    def add_student(
        self,
        class_id: int,
        name: str,
        roll_no: str,
        actor: AuthorizationContext,
        *,
        email: Optional[str] = None,
        phone: Optional[str] = None,
        parent_phone: Optional[str] = None,
    ) -> EnrollmentRecord:
        record = self._guard.require_class(actor, class_id, Action.UPDATE_ROSTER)
        new = NewStudent.clean(name=name, roll_no=roll_no, email=email, phone=phone, parent_phone=parent_phone)
        return self._enroll(record.class_id, new)

    def add_bulk(
        self,
        class_id: int,
        records: Iterable[Union[Mapping[str, Any], NewStudent]],
        actor: AuthorizationContext,
    ) -> BulkEnrollmentResult:
        """Add many students; one bad row never fails the batch.

        Not transactional: a crash mid-batch leaves the earlier rows in place.
        Re-submitting is safe because existing roll numbers come back as duplicates.
        """

        record = self._guard.require_class(actor, class_id, Action.UPDATE_ROSTER)

        outcomes = [self._add_row(index, row, record.class_id) for index, row in enumerate(records)]

        result = BulkEnrollmentResult(outcomes=tuple(outcomes))
        logger.info(
            "Bulk enroll into class %s: %s added, %s duplicate, %s error",
            record.class_id,
            len(result.added),
            len(result.duplicates),
            len(result.errors),
        )
        return result

    def add_bulk_to_classes(
        self,
        class_ids: Iterable[int],
        records: Iterable[Union[Mapping[str, Any], NewStudent]],
        actor: AuthorizationContext,
    ) -> BulkEnrollmentResult:
        """Add every row to every listed class, one outcome per (row, class).

        Every class is checked before the first write; one class the actor
        cannot manage fails the whole call.
        """

        ids = list(dict.fromkeys(require_positive_int(c, "Class id") for c in (class_ids or ())))
        if not ids:
            raise ValidationError("At least one class is required")
        targets = [self._guard.require_class(actor, c, Action.UPDATE_ROSTER).class_id for c in ids]

        rows = list(records)
        outcomes = [
            self._add_row(index, row, class_id)
            for index, row in enumerate(rows)
            for class_id in targets
        ]

        result = BulkEnrollmentResult(outcomes=tuple(outcomes))
        logger.info(
            "Bulk enroll %s rows into classes %s: %s added, %s duplicate, %s error",
            len(rows),
            targets,
            len(result.added),
            len(result.duplicates),
            len(result.errors),
        )
        return result

    def _add_row(self, index: int, row: Union[Mapping[str, Any], NewStudent], class_id: int) -> EnrollmentOutcome:
        roll_no = str(row.roll_no if isinstance(row, NewStudent) else (row or {}).get("roll_no", ""))
        try:
            new = row if isinstance(row, NewStudent) else NewStudent.from_mapping(row)
            added = self._enroll(class_id, new)
            return EnrollmentOutcome(index=index, roll_no=new.roll_no, kind=OutcomeKind.ADDED, record=added, class_id=class_id)
        except DuplicateEnrollment as e:
            return EnrollmentOutcome(index=index, roll_no=roll_no, kind=OutcomeKind.DUPLICATE, message=str(e), class_id=class_id)
        except DomainError as e:
            return EnrollmentOutcome(index=index, roll_no=roll_no, kind=OutcomeKind.ERROR, message=str(e), class_id=class_id)

    def self_register(self, class_id: int, name: str, roll_no: str, email: Optional[str] = None) -> EnrollmentRecord:
        """Unauthenticated join flow (registration link / QR)."""

        self._guard.enforce(decide(None, None, frozenset(), Action.SELF_REGISTER))
        record = self._classes.get_by_id(int(class_id))
        if record is None or not record.is_active:
            raise NotFound("Class not found")

        enrollment = self._enroll(record.class_id, NewStudent.clean(name=name, roll_no=roll_no, email=email))
        logger.info("Student %s self-registered for class %s", enrollment.roll_no, record.class_id)
        return enrollment

    def remove_student(self, class_id: int, enrollment_id: int, actor: AuthorizationContext) -> None:
        record = self._guard.require_class(actor, class_id, Action.DELETE_STUDENT)
        enrollment = self._enrollments.get_by_id(int(enrollment_id))
        if enrollment is None or enrollment.class_id != record.class_id:
            raise NotFound("Student not found")

        self._attendance.delete_for_enrollment(enrollment.enrollment_id, class_id=record.class_id)
        self._enrollments.delete_enrollment(enrollment.enrollment_id)
        for sibling in self._enrollments.list_by_roll(enrollment.roll_no):
            if record.class_id in sibling.classes:
                self._enrollments.remove_membership(sibling.enrollment_id, record.class_id)

    def list_students(self, class_id: int, actor: AuthorizationContext) -> list[EnrollmentRecord]:
        record = self._guard.require_class(actor, class_id, Action.READ)
        return list(self._enrollments.list_for_class(record.class_id))

    def get_student(self, enrollment_id: int, actor: AuthorizationContext) -> EnrollmentRecord:
        enrollment = self._enrollments.get_by_id(int(enrollment_id))
        if enrollment is None:
            raise NotFound("Student not found")
        self._guard.require_class(actor, enrollment.class_id, Action.READ)
        return enrollment

    def search_students(self, actor: AuthorizationContext, query: Optional[str] = None) -> list[ClassRoster]:
        """Students of every active class the actor manages, grouped by class.

        ``query`` matches name or roll number, case-insensitive. Classes with no
        match are left out when a query is given.
        """

        self._guard.require_staff(actor)
        if actor.is_admin:
            classes = self._classes.list_all()
        else:
            classes = self._classes.list_for_teacher(int(actor.account_id))

        needle = (query or "").strip().lower()
        rosters: list[ClassRoster] = []
        for record in classes:
            if not record.is_active:
                continue
            students = list(self._enrollments.list_for_class(record.class_id))
            if needle:
                students = [s for s in students if needle in s.name.lower() or needle in s.roll_no.lower()]
                if not students:
                    continue
            rosters.append(ClassRoster(class_record=record, students=tuple(students)))
        return rosters

    def list_all_students(self, actor: AuthorizationContext) -> list[StudentListing]:
        self._guard.require_admin(actor)
        names = {c.class_id: c.name for c in self._classes.list_all()}
        return [
            StudentListing(enrollment=e, class_name=names.get(e.class_id, ""))
            for e in self._enrollments.list_all()
        ]

    def find_by_roll(self, roll_no: str) -> list[EnrollmentRecord]:
        return list(self._enrollments.list_by_roll(str(roll_no).strip()))

    def _enroll(self, class_id: int, new: NewStudent) -> EnrollmentRecord:
        if self._enrollments.get_by_roll_and_class(new.roll_no, class_id):
            raise DuplicateEnrollment(f"Roll number {new.roll_no} already exists in this class")

        enrollment_id = self._enrollments.create_enrollment(
            name=new.name,
            roll_no=new.roll_no,
            class_id=class_id,
            email=new.email,
            phone=new.phone,
            parent_phone=new.parent_phone,
        )

        # Every row of the same roll number carries the full membership set.
        for sibling in self._enrollments.list_by_roll(new.roll_no):
            if sibling.enrollment_id == enrollment_id:
                continue
            self._enrollments.add_membership(sibling.enrollment_id, class_id)
            for other_class in sibling.classes:
                self._enrollments.add_membership(enrollment_id, other_class)

        return self._enrollments.get_by_id(enrollment_id)
