from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class ClassRecord:
    """Domain entity: a class (organization) with its teacher set.

    ``class_code`` is unique and never changes; ``created_by`` is always in ``teachers``.
    """

    class_id: int
    name: str
    room: str
    subject: str
    description: str
    created_by: int
    class_code: str
    teachers: frozenset = field(default_factory=frozenset)
    is_active: bool = True
    created_at: Optional[datetime] = None

    def has_teacher(self, account_id: int) -> bool:
        return int(account_id) in self.teachers

    def to_dict(self) -> dict:
        return {
            "id": self.class_id,
            "name": self.name,
            "room": self.room,
            "subject": self.subject,
            "description": self.description,
            "createdBy": self.created_by,
            "teachers": sorted(self.teachers),
            "classCode": self.class_code,
            "active": self.is_active,
        }


@dataclass(frozen=True)
class JoinResult:
    class_record: ClassRecord
    already_member: bool = False
