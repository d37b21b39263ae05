from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceBand


def _display(percentage: float) -> float:
    return round(percentage, 2)


@dataclass(frozen=True)
class ClassAttendanceLine:
    """One class in a student's cross-class summary."""

    class_id: int
    class_name: str
    subject: str
    room: str
    present: int
    total: int
    percentage: float
    band: AttendanceBand

    def to_dict(self) -> dict:
        return {
            "classId": self.class_id,
            "className": self.class_name,
            "subject": self.subject,
            "room": self.room,
            "present": self.present,
            "total": self.total,
            "percentage": self.percentage,
            "percentageDisplay": _display(self.percentage),
            "status": self.band.value,
        }


@dataclass(frozen=True)
class StudentSummary:
    roll_no: str
    name: str
    lines: tuple
    present: int
    total: int
    percentage: float
    band: AttendanceBand

    def to_dict(self) -> dict:
        return {
            "rollNo": self.roll_no,
            "name": self.name,
            "classes": [line.to_dict() for line in self.lines],
            "totalPresent": self.present,
            "totalClasses": self.total,
            "overallPercentage": self.percentage,
            "overallPercentageDisplay": _display(self.percentage),
            "overallStatus": self.band.value,
        }


@dataclass(frozen=True)
class StudentLine:
    """One student in a class report."""

    enrollment_id: int
    roll_no: str
    name: str
    email: Optional[str]
    present: int
    total: int
    percentage: float
    band: AttendanceBand
    is_defaulter: bool

    def to_dict(self) -> dict:
        return {
            "id": self.enrollment_id,
            "rollNo": self.roll_no,
            "name": self.name,
            "email": self.email or "",
            "present": self.present,
            "total": self.total,
            "percentage": self.percentage,
            "percentageDisplay": _display(self.percentage),
            "status": self.band.value,
            "isDefaulter": self.is_defaulter,
        }


@dataclass(frozen=True)
class ClassSummary:
    class_id: int
    class_name: str
    subject: str
    room: str
    lines: tuple
    class_days: tuple
    generated_on: datetime
    generated_by: str = ""
    band_counts: dict = field(default_factory=dict)

    @property
    def defaulters(self) -> list[StudentLine]:
        return [line for line in self.lines if line.is_defaulter]

    @property
    def total_students(self) -> int:
        return len(self.lines)

    @property
    def total_class_days(self) -> int:
        return len(self.class_days)

    def to_dict(self) -> dict:
        return {
            "classId": self.class_id,
            "className": self.class_name,
            "subject": self.subject,
            "room": self.room,
            "generatedBy": self.generated_by,
            "generatedOn": self.generated_on.isoformat(timespec="seconds"),
            "totalStudents": self.total_students,
            "totalClassDays": self.total_class_days,
            "classDays": [d.strftime("%Y-%m-%d") for d in self.class_days],
            "students": [line.to_dict() for line in self.lines],
            "defaulters": [line.to_dict() for line in self.defaulters],
            "summary": {band.value: int(self.band_counts.get(band, 0)) for band in AttendanceBand},
        }


@dataclass(frozen=True)
class ClassOverviewLine:
    class_id: int
    class_name: str
    subject: str
    room: str
    students: int
    class_days: int
    present: int
    total: int
    percentage: float
    band: AttendanceBand

    def to_dict(self) -> dict:
        return {
            "classId": self.class_id,
            "className": self.class_name,
            "subject": self.subject,
            "room": self.room,
            "totalStudents": self.students,
            "totalClassDays": self.class_days,
            "present": self.present,
            "total": self.total,
            "percentage": self.percentage,
            "percentageDisplay": _display(self.percentage),
            "status": self.band.value,
        }


@dataclass(frozen=True)
class TeacherOverview:
    lines: tuple
    students: int
    present: int
    total: int
    percentage: float
    band: AttendanceBand

    def to_dict(self) -> dict:
        return {
            "classes": [line.to_dict() for line in self.lines],
            "totalClasses": len(self.lines),
            "totalStudents": self.students,
            "totalPresent": self.present,
            "totalRecords": self.total,
            "overallPercentage": self.percentage,
            "overallPercentageDisplay": _display(self.percentage),
            "overallStatus": self.band.value,
        }


def distinct_days(days) -> tuple[date, ...]:
    return tuple(sorted(set(days)))
