from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from ..core.enums import AttendanceStatus
from ..enrollments.model import EnrollmentRecord


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: presence of one enrollment in one class on one day."""

    attendance_id: int
    enrollment_id: int
    class_id: int
    day: date
    status: AttendanceStatus
    lectures: int = 1

    @property
    def is_present(self) -> bool:
        return self.status == AttendanceStatus.PRESENT

    def to_dict(self) -> dict:
        return {
            "id": self.attendance_id,
            "enrollmentId": self.enrollment_id,
            "classId": self.class_id,
            "date": self.day.strftime("%Y-%m-%d"),
            "status": self.status.value,
            "lectures": self.lectures,
        }


@dataclass(frozen=True)
class DayReport:
    """Read-model for one class on one date."""

    class_id: int
    day: date
    lectures: int
    students: tuple
    present: tuple
    absent: tuple
    records: tuple

    def to_dict(self) -> dict:
        def _names(items: tuple[EnrollmentRecord, ...]) -> list[dict]:
            return [{"id": s.enrollment_id, "rollNo": s.roll_no, "name": s.name} for s in items]

        return {
            "classId": self.class_id,
            "date": self.day.strftime("%Y-%m-%d"),
            "lectures": self.lectures,
            "totalStudents": len(self.students),
            "present": _names(self.present),
            "absent": _names(self.absent),
        }


@dataclass(frozen=True)
class AttendanceListing:
    record: AttendanceRecord
    roll_no: str
    student_name: str
    class_name: str

    def to_dict(self) -> dict:
        data = self.record.to_dict()
        data.update(rollNo=self.roll_no, name=self.student_name, className=self.class_name)
        return data
