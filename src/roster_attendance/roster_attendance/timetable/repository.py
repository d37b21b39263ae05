from __future__ import annotations

from datetime import time
from typing import Optional, Protocol, Sequence

from ..core.enums import Weekday
from .model import TimetableSlot


class TimetableRepository(Protocol):
    def get_by_id(self, slot_id: int) -> Optional[TimetableSlot]:
        raise NotImplementedError

    def list_for_classes(self, class_ids: Sequence[int]) -> Sequence[TimetableSlot]:
        raise NotImplementedError

    def create_slot(
        self,
        *,
        class_id: int,
        day: Weekday,
        start_time: time,
        end_time: time,
        subject: str,
        teacher: str,
        room: str,
        created_by: int,
    ) -> int:
        raise NotImplementedError

    def delete_slot(self, slot_id: int) -> bool:
        raise NotImplementedError

    def delete_for_class(self, class_id: int) -> int:
        raise NotImplementedError
