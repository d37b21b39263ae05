from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import ClassRecord


class ClassRepository(Protocol):
    def get_by_id(self, class_id: int) -> Optional[ClassRecord]:
        raise NotImplementedError

    def get_by_code(self, class_code: str) -> Optional[ClassRecord]:
        raise NotImplementedError

    def code_exists(self, class_code: str) -> bool:
        raise NotImplementedError

    def create_class(
        self,
        *,
        name: str,
        room: str,
        subject: str,
        description: str,
        created_by: int,
        class_code: str,
    ) -> int:
        """Insert the class and its creator as first teacher.

        Raises ClassCodeTaken when the code was claimed concurrently.
        """

        raise NotImplementedError

    def add_teacher(self, class_id: int, account_id: int) -> bool:
        raise NotImplementedError

    def list_all(self) -> Sequence[ClassRecord]:
        """All classes, newest first."""

        raise NotImplementedError

    def list_for_teacher(self, account_id: int) -> Sequence[ClassRecord]:
        """Classes whose teacher set contains the account, newest first."""

        raise NotImplementedError

    def set_active(self, class_id: int, *, is_active: bool) -> bool:
        raise NotImplementedError

    def delete_class(self, class_id: int) -> bool:
        raise NotImplementedError
