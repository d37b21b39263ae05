from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional

from ..access.guard import AccessGuard
from ..access.policy import AuthorizationContext
from ..attendance.repository import AttendanceRepository
from ..common.payloads import pick_fields
from ..common.validators import optional_text, require_non_empty
from ..core.enums import Action, OutcomeKind
from ..core.exceptions import ClassCodeTaken, DomainError, NotFound
from ..enrollments.repository import EnrollmentRepository
from ..timetable.repository import TimetableRepository
from .codes import JoinCodeGenerator
from .model import ClassRecord, JoinResult
from .repository import ClassRepository

logger = logging.getLogger(__name__)

_INSERT_RETRIES = 3


@dataclass(frozen=True)
class NewClass:
    name: str
    room: str
    subject: str
    description: str = ""

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "NewClass":
        fields = pick_fields(data, required=("name", "room", "subject"), optional=("description",))
        return cls(
            name=require_non_empty(fields["name"], "Class name"),
            room=require_non_empty(fields["room"], "Room"),
            subject=require_non_empty(fields["subject"], "Subject"),
            description=optional_text(fields.get("description")) or "",
        )


@dataclass(frozen=True)
class ClassCreateOutcome:
    index: int
    kind: OutcomeKind
    class_record: Optional[ClassRecord] = None
    message: str = ""

    def to_dict(self) -> dict:
        return {
            "index": self.index,
            "outcome": self.kind.value,
            "class": self.class_record.to_dict() if self.class_record else None,
            "message": self.message,
        }


class ClassService:
    """Use cases: create, join, list and delete classes."""

    def __init__(
        self,
        classes: ClassRepository,
        guard: AccessGuard,
        enrollments: EnrollmentRepository,
        attendance: AttendanceRepository,
        timetable: Optional[TimetableRepository] = None,
        *,
        code_generator: Optional[JoinCodeGenerator] = None,
    ):
        self._classes = classes
        self._guard = guard
        self._enrollments = enrollments
        self._attendance = attendance
        self._timetable = timetable
        self._codes = code_generator or JoinCodeGenerator()

    def create_class(
        self,
        *,
        name: str,
        room: str,
        subject: str,
        description: str = "",
        creator: AuthorizationContext,
    ) -> ClassRecord:
        self._guard.require_staff(creator)
        name = require_non_empty(name, "Class name")
        room = require_non_empty(room, "Room")
        subject = require_non_empty(subject, "Subject")
        description = optional_text(description) or ""

        for attempt in range(1, _INSERT_RETRIES + 1):
            code = self._codes.generate(self._classes.code_exists)
            try:
                class_id = self._classes.create_class(
                    name=name,
                    room=room,
                    subject=subject,
                    description=description,
                    created_by=int(creator.account_id),
                    class_code=code,
                )
                break
            except ClassCodeTaken:
                logger.warning("Class code %s taken on insert (attempt %s)", code, attempt)
        else:
            raise RuntimeError("Could not allocate a unique class code")

        record = self._classes.get_by_id(class_id)
        logger.info("Class %s (%s) created by account %s", record.name, record.class_code, creator.account_id)
        return record

    def create_from(self, new: NewClass, *, creator: AuthorizationContext) -> ClassRecord:
        return self.create_class(
            name=new.name,
            room=new.room,
            subject=new.subject,
            description=new.description,
            creator=creator,
        )

    def create_bulk(self, rows: Iterable[Mapping[str, Any]], *, creator: AuthorizationContext) -> list[ClassCreateOutcome]:
        """Create several classes; each row succeeds or fails on its own."""

        self._guard.require_staff(creator)
        outcomes: list[ClassCreateOutcome] = []
        for index, row in enumerate(rows):
            try:
                record = self.create_from(NewClass.from_mapping(row), creator=creator)
                outcomes.append(ClassCreateOutcome(index=index, kind=OutcomeKind.ADDED, class_record=record))
            except DomainError as e:
                outcomes.append(ClassCreateOutcome(index=index, kind=OutcomeKind.ERROR, message=str(e)))

        created = sum(1 for o in outcomes if o.kind == OutcomeKind.ADDED)
        logger.info("Bulk class create: %s created, %s failed", created, len(outcomes) - created)
        return outcomes

    def join_by_code(self, code: str, *, teacher: AuthorizationContext) -> JoinResult:
        self._guard.require_staff(teacher)
        code = (code or "").strip().upper()
        if not code:
            raise NotFound("Invalid class code")

        record = self._classes.get_by_code(code)
        if record is None or not record.is_active:
            raise NotFound("Invalid class code")

        if record.has_teacher(teacher.account_id):
            return JoinResult(class_record=record, already_member=True)

        self._classes.add_teacher(record.class_id, int(teacher.account_id))
        logger.info("Account %s joined class %s", teacher.account_id, record.class_id)
        return JoinResult(class_record=self._classes.get_by_id(record.class_id), already_member=False)

    def list_accessible_classes(
        self,
        actor: AuthorizationContext,
        *,
        name: Optional[str] = None,
        room: Optional[str] = None,
        subject: Optional[str] = None,
    ) -> list[ClassRecord]:
        self._guard.require_staff(actor)
        if actor.is_admin:
            records = list(self._classes.list_all())
        else:
            records = list(self._classes.list_for_teacher(int(actor.account_id)))

        if name:
            records = [r for r in records if r.name == name]
        if room:
            records = [r for r in records if str(r.room) == str(room)]
        if subject:
            records = [r for r in records if r.subject == subject]

        # Repositories already order newest first; keep it explicit for other backends.
        records.sort(key=lambda r: (r.created_at is not None, r.created_at, r.class_id), reverse=True)
        return records

    def get_class(self, actor: AuthorizationContext, class_id: int) -> ClassRecord:
        return self._guard.require_class(actor, class_id, Action.READ)

    def get_public(self, class_id: int) -> ClassRecord:
        """Class shown on the self-registration page."""

        record = self._classes.get_by_id(int(class_id))
        if record is None or not record.is_active:
            raise NotFound("Class not found")
        return record

    def set_active(self, actor: AuthorizationContext, class_id: int, *, is_active: bool) -> ClassRecord:
        record = self._guard.require_class(actor, class_id, Action.SET_ACTIVE)
        self._classes.set_active(record.class_id, is_active=bool(is_active))
        return self._classes.get_by_id(record.class_id)

    def delete_class(self, actor: AuthorizationContext, class_id: int) -> None:
        """Delete a class and everything it owns.

        Cascade: attendance rows, timetable slots, primary enrollments, and the
        class id inside other enrollments' membership sets.
        """

        record = self._guard.require_class(actor, class_id, Action.DELETE_CLASS)

        removed_attendance = self._attendance.delete_for_class(record.class_id)
        if self._timetable is not None:
            self._timetable.delete_for_class(record.class_id)
        removed_students = self._enrollments.delete_for_class(record.class_id)
        self._enrollments.remove_class_from_memberships(record.class_id)
        self._classes.delete_class(record.class_id)

        logger.info(
            "Class %s deleted by account %s (%s students, %s attendance rows)",
            record.class_id,
            actor.account_id,
            removed_students,
            removed_attendance,
        )
