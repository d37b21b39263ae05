from __future__ import annotations

import logging
from datetime import time
from typing import Union

from ..access.guard import AccessGuard
from ..access.policy import AuthorizationContext
from ..common.datetime_utils import parse_hhmm
from ..common.validators import require_non_empty
from ..core.enums import Action, Weekday
from ..core.exceptions import NotFound, ValidationError
from ..enrollments.repository import EnrollmentRepository
from .model import TimetableSlot
from .repository import TimetableRepository

logger = logging.getLogger(__name__)


def _as_weekday(value: Union[Weekday, str]) -> Weekday:
    if isinstance(value, Weekday):
        return value
    try:
        return Weekday(str(value or "").strip().capitalize())
    except ValueError:
        raise ValidationError(f"Unknown day: {value!r}")


def _as_time(value: Union[time, str]) -> time:
    if isinstance(value, time):
        return value
    return parse_hhmm(value)


def _sort_key(slot: TimetableSlot):
    return (slot.day.order, slot.start_time, slot.class_id)


class TimetableService:
    def __init__(self, slots: TimetableRepository, enrollments: EnrollmentRepository, guard: AccessGuard):
        self._slots = slots
        self._enrollments = enrollments
        self._guard = guard

    def add_slot(
        self,
        class_id: int,
        day: Union[Weekday, str],
        start: Union[time, str],
        end: Union[time, str],
        subject: str,
        teacher: str,
        room: str,
        actor: AuthorizationContext,
    ) -> TimetableSlot:
        record = self._guard.require_class(actor, class_id, Action.MANAGE_TIMETABLE)
        day = _as_weekday(day)
        start = _as_time(start)
        end = _as_time(end)
        if end <= start:
            raise ValidationError("End time must be after start time")

        subject = require_non_empty(subject, "Subject")
        teacher = require_non_empty(teacher, "Teacher")
        room = require_non_empty(room, "Room")

        for existing in self._slots.list_for_classes([record.class_id]):
            if existing.overlaps(day, start, end):
                raise ValidationError(
                    f"Time slot overlaps {existing.subject} on {day.value} "
                    f"{existing.start_time:%H:%M}-{existing.end_time:%H:%M}"
                )

        slot_id = self._slots.create_slot(
            class_id=record.class_id,
            day=day,
            start_time=start,
            end_time=end,
            subject=subject,
            teacher=teacher,
            room=room,
            created_by=int(actor.account_id),
        )
        logger.info("Timetable slot %s added to class %s (%s %s)", slot_id, record.class_id, day.value, f"{start:%H:%M}")
        return self._slots.get_by_id(slot_id)

    def delete_slot(self, slot_id: int, actor: AuthorizationContext) -> None:
        slot = self._slots.get_by_id(int(slot_id))
        if slot is None:
            raise NotFound("Timetable slot not found")
        self._guard.require_class(actor, slot.class_id, Action.MANAGE_TIMETABLE)
        self._slots.delete_slot(slot.slot_id)

    def list_for_class(self, class_id: int, actor: AuthorizationContext) -> list[TimetableSlot]:
        record = self._guard.require_class(actor, class_id, Action.READ)
        return sorted(self._slots.list_for_classes([record.class_id]), key=_sort_key)

    def list_for_roll(self, roll_no: str) -> list[TimetableSlot]:
        """Weekly timetable of every class the roll number attends."""

        roll_no = require_non_empty(roll_no, "Roll number")
        enrollments = self._enrollments.list_by_roll(roll_no)
        if not enrollments:
            raise NotFound("Student not found")

        class_ids: set[int] = set()
        for e in enrollments:
            class_ids.add(e.class_id)
            class_ids |= set(e.classes)
        return sorted(self._slots.list_for_classes(sorted(class_ids)), key=_sort_key)
