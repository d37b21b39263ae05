"""Authorization decision table.

Every entry point asks ``decide`` instead of re-deriving role checks inline.
The function is pure: the same inputs always give the same Decision.

| Actor     | Resource                         | Allowed                               |
|-----------|----------------------------------|---------------------------------------|
| admin     | any                              | all                                   |
| teacher   | class with actor in teachers     | read, roster, attendance, timetable   |
| teacher   | class with actor not in teachers | none (hidden -> NotFound)             |
| student   | own roll number only             | read own attendance                   |
| anonymous | self-registration, roll lookup   | self register, read own attendance    |

Deleting a class or toggling its active flag is reserved to the creator (or
an admin); other co-teachers are refused with a visible denial because they
already know the class exists.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import AbstractSet, Optional

from ..core.enums import Action, Role

TEACHER_CLASS_ACTIONS = frozenset(
    {
        Action.READ,
        Action.UPDATE_ROSTER,
        Action.MARK_ATTENDANCE,
        Action.DELETE_STUDENT,
        Action.MANAGE_TIMETABLE,
    }
)
CREATOR_ONLY_ACTIONS = frozenset({Action.DELETE_CLASS, Action.SET_ACTIVE})


@dataclass(frozen=True)
class AuthorizationContext:
    """Who is asking. Derived per request, never persisted."""

    account_id: Optional[int] = None
    role: Optional[Role] = None
    roll_no: Optional[str] = None

    @classmethod
    def anonymous(cls) -> "AuthorizationContext":
        return cls()

    @classmethod
    def for_roll_number(cls, roll_no: str) -> "AuthorizationContext":
        """Student identity: knowledge of a roll number, no password."""

        return cls(role=Role.STUDENT, roll_no=str(roll_no).strip())

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def is_teacher(self) -> bool:
        return self.role == Role.TEACHER

    @property
    def is_staff(self) -> bool:
        return self.role in (Role.ADMIN, Role.TEACHER) and self.account_id is not None


@dataclass(frozen=True)
class Decision:
    allowed: bool
    hide_existence: bool = True
    reason: str = ""

    @classmethod
    def allow(cls, reason: str = "") -> "Decision":
        return cls(allowed=True, hide_existence=False, reason=reason)

    @classmethod
    def deny(cls, reason: str, *, hide_existence: bool = True) -> "Decision":
        return cls(allowed=False, hide_existence=hide_existence, reason=reason)


def decide(
    role: Optional[Role],
    actor_id: Optional[int],
    owner_ids: AbstractSet[int],
    action: Action,
    *,
    creator_id: Optional[int] = None,
    actor_roll_no: Optional[str] = None,
    resource_roll_no: Optional[str] = None,
) -> Decision:
    """Decide whether ``action`` is allowed on a resource owned by ``owner_ids``."""

    if action == Action.SELF_REGISTER:
        return Decision.allow("self registration is public")

    if role == Role.ADMIN and actor_id is not None:
        return Decision.allow("admin")

    if action == Action.READ_OWN_ATTENDANCE:
        if role == Role.TEACHER and actor_id is not None and actor_id in owner_ids:
            return Decision.allow("teacher of one of the student's classes")
        if actor_roll_no and resource_roll_no and str(actor_roll_no) == str(resource_roll_no):
            return Decision.allow("own roll number")
        return Decision.deny("not the student's own records")

    if role != Role.TEACHER or actor_id is None:
        return Decision.deny("class resources need a teacher or admin")

    if actor_id not in owner_ids:
        return Decision.deny("teacher is not assigned to this class")

    if action in TEACHER_CLASS_ACTIONS:
        return Decision.allow("class teacher")

    if action in CREATOR_ONLY_ACTIONS:
        if creator_id is not None and actor_id == creator_id:
            return Decision.allow("class creator")
        return Decision.deny("only the class creator or an admin may do this", hide_existence=False)

    return Decision.deny(f"unsupported action {action.value}")
