from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import EnrollmentRecord


class EnrollmentRepository(Protocol):
    def get_by_id(self, enrollment_id: int) -> Optional[EnrollmentRecord]:
        raise NotImplementedError

    def get_by_roll_and_class(self, roll_no: str, class_id: int) -> Optional[EnrollmentRecord]:
        raise NotImplementedError

    def list_for_class(self, class_id: int) -> Sequence[EnrollmentRecord]:
        """Enrollments whose primary class is ``class_id``, ordered by roll number."""

        raise NotImplementedError

    def list_by_roll(self, roll_no: str) -> Sequence[EnrollmentRecord]:
        raise NotImplementedError

    def list_all(self) -> Sequence[EnrollmentRecord]:
        """Newest first."""

        raise NotImplementedError

    def create_enrollment(
        self,
        *,
        name: str,
        roll_no: str,
        class_id: int,
        email: Optional[str] = None,
        phone: Optional[str] = None,
        parent_phone: Optional[str] = None,
    ) -> int:
        """Insert a row with membership seeded to ``{class_id}``.

        Raises DuplicateEnrollment when (roll_no, class_id) already exists.
        """

        raise NotImplementedError

    def add_membership(self, enrollment_id: int, class_id: int) -> bool:
        raise NotImplementedError

    def remove_membership(self, enrollment_id: int, class_id: int) -> bool:
        raise NotImplementedError

    def remove_class_from_memberships(self, class_id: int) -> int:
        raise NotImplementedError

    def delete_enrollment(self, enrollment_id: int) -> bool:
        raise NotImplementedError

    def delete_for_class(self, class_id: int) -> int:
        raise NotImplementedError
