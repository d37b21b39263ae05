from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..classes.model import ClassRecord
from ..core.enums import OutcomeKind
from ..core.exceptions import PartialBatchFailure


@dataclass(frozen=True)
class EnrollmentRecord:
    """Domain entity: one class membership of a learner ("Student").

    One row per (roll_no, class_id); ``classes`` carries every class the same
    roll number attends so cross-class lookups need no join.
    """

    enrollment_id: int
    name: str
    roll_no: str
    class_id: int
    classes: frozenset = field(default_factory=frozenset)
    email: Optional[str] = None
    phone: Optional[str] = None
    parent_phone: Optional[str] = None
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.enrollment_id,
            "name": self.name,
            "rollNo": self.roll_no,
            "email": self.email,
            "classId": self.class_id,
            "classes": sorted(self.classes),
        }


@dataclass(frozen=True)
class EnrollmentOutcome:
    """Result for one (row, class) pair of a bulk add."""

    index: int
    roll_no: str
    kind: OutcomeKind
    record: Optional[EnrollmentRecord] = None
    message: str = ""
    class_id: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "index": self.index,
            "rollNo": self.roll_no,
            "classId": self.class_id,
            "outcome": self.kind.value,
            "id": self.record.enrollment_id if self.record else None,
            "message": self.message,
        }


@dataclass(frozen=True)
class BulkEnrollmentResult:
    outcomes: tuple

    def _of(self, kind: OutcomeKind) -> list[EnrollmentOutcome]:
        return [o for o in self.outcomes if o.kind == kind]

    @property
    def added(self) -> list[EnrollmentOutcome]:
        return self._of(OutcomeKind.ADDED)

    @property
    def duplicates(self) -> list[EnrollmentOutcome]:
        return self._of(OutcomeKind.DUPLICATE)

    @property
    def errors(self) -> list[EnrollmentOutcome]:
        return self._of(OutcomeKind.ERROR)

    def raise_for_errors(self) -> None:
        """Strict mode for callers that cannot accept partial success.

        Duplicates are skipped rows, not failures.
        """

        if self.errors:
            raise PartialBatchFailure(
                f"{len(self.errors)} of {len(self.outcomes)} rows failed",
                self.outcomes,
            )

    def to_dict(self) -> dict:
        return {
            "addedCount": len(self.added),
            "duplicateCount": len(self.duplicates),
            "errorCount": len(self.errors),
            "outcomes": [o.to_dict() for o in self.outcomes],
        }


@dataclass(frozen=True)
class ClassRoster:
    """Students of one class, for the cross-class search view."""

    class_record: ClassRecord
    students: tuple

    def to_dict(self) -> dict:
        return {
            "class": {
                "id": self.class_record.class_id,
                "name": self.class_record.name,
                "subject": self.class_record.subject,
                "room": self.class_record.room,
                "classCode": self.class_record.class_code,
            },
            "students": [s.to_dict() for s in self.students],
        }


@dataclass(frozen=True)
class StudentListing:
    """Admin listing row: an enrollment with its class name."""

    enrollment: EnrollmentRecord
    class_name: str

    def to_dict(self) -> dict:
        data = self.enrollment.to_dict()
        data["className"] = self.class_name
        return data
