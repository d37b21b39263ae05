from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def create_record(
        self,
        *,
        enrollment_id: int,
        class_id: int,
        day: date,
        status: AttendanceStatus,
        lectures: int,
    ) -> int:
        raise NotImplementedError

    def list_for_enrollment(self, enrollment_id: int) -> Sequence[AttendanceRecord]:
        """Newest day first."""

        raise NotImplementedError

    def list_for_class(self, class_id: int) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_all(self) -> Sequence[AttendanceRecord]:
        """Newest day first."""

        raise NotImplementedError

    def list_for_class_and_day(self, class_id: int, day: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def delete_for_class_and_day(self, class_id: int, day: date) -> int:
        raise NotImplementedError

    def delete_for_enrollment(self, enrollment_id: int, *, class_id: Optional[int] = None) -> int:
        raise NotImplementedError

    def delete_for_class(self, class_id: int) -> int:
        raise NotImplementedError
