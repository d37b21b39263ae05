from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Account role used for authorization."""

    ADMIN = "admin"
    TEACHER = "teacher"
    STUDENT = "student"


class AttendanceStatus(str, Enum):
    """Per-day attendance status stored in the DB."""

    PRESENT = "present"
    ABSENT = "absent"


class Action(str, Enum):
    """Actions checked by the authorization engine."""

    READ = "read"
    UPDATE_ROSTER = "update_roster"
    MARK_ATTENDANCE = "mark_attendance"
    DELETE_STUDENT = "delete_student"
    MANAGE_TIMETABLE = "manage_timetable"
    DELETE_CLASS = "delete_class"
    SET_ACTIVE = "set_active"
    SELF_REGISTER = "self_register"
    READ_OWN_ATTENDANCE = "read_own_attendance"


class AttendanceBand(str, Enum):
    GOOD = "good"
    WARNING = "warning"
    DANGER = "danger"


class OutcomeKind(str, Enum):
    """Per-row result of a bulk operation."""

    ADDED = "added"
    DUPLICATE = "duplicate"
    ERROR = "error"


class Weekday(str, Enum):
    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"
    SATURDAY = "Saturday"
    SUNDAY = "Sunday"

    @property
    def order(self) -> int:
        return list(Weekday).index(self)
