from __future__ import annotations

from dataclasses import dataclass
from datetime import time

from ..core.enums import Weekday


@dataclass(frozen=True)
class TimetableSlot:
    slot_id: int
    class_id: int
    day: Weekday
    start_time: time
    end_time: time
    subject: str
    teacher: str
    room: str
    created_by: int

    def overlaps(self, day: Weekday, start: time, end: time) -> bool:
        return self.day == day and self.start_time < end and self.end_time > start

    def to_dict(self) -> dict:
        return {
            "id": self.slot_id,
            "classId": self.class_id,
            "day": self.day.value,
            "startTime": self.start_time.strftime("%H:%M"),
            "endTime": self.end_time.strftime("%H:%M"),
            "subject": self.subject,
            "teacher": self.teacher,
            "room": self.room,
        }
