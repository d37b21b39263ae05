from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .access.guard import AccessGuard
from .accounts.mysql_account_repository import MySQLAccountRepository
from .accounts.repository import AccountRepository
from .accounts.service import IdentityService
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceLedger
from .classes.codes import JoinCodeGenerator
from .classes.mysql_class_repository import MySQLClassRepository
from .classes.repository import ClassRepository
from .classes.service import ClassService
from .database.connection import DatabaseConnection
from .enrollments.mysql_enrollment_repository import MySQLEnrollmentRepository
from .enrollments.repository import EnrollmentRepository
from .enrollments.service import EnrollmentService
from .reports.service import ReportService
from .timetable.mysql_timetable_repository import MySQLTimetableRepository
from .timetable.repository import TimetableRepository
from .timetable.service import TimetableService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    accounts_repo: AccountRepository
    classes_repo: ClassRepository
    enrollments_repo: EnrollmentRepository
    attendance_repo: AttendanceRepository
    timetable_repo: TimetableRepository

    guard: AccessGuard
    identity_service: IdentityService
    class_service: ClassService
    enrollment_service: EnrollmentService
    attendance_ledger: AttendanceLedger
    report_service: ReportService
    timetable_service: TimetableService


def assemble_container(
    *,
    accounts: AccountRepository,
    classes: ClassRepository,
    enrollments: EnrollmentRepository,
    attendance: AttendanceRepository,
    timetable: TimetableRepository,
    conn: Optional[DatabaseConnection] = None,
    code_generator: Optional[JoinCodeGenerator] = None,
) -> Container:
    """Wire services over any repository implementations (MySQL or in-memory)."""

    guard = AccessGuard(classes)
    return Container(
        conn=conn,
        accounts_repo=accounts,
        classes_repo=classes,
        enrollments_repo=enrollments,
        attendance_repo=attendance,
        timetable_repo=timetable,
        guard=guard,
        identity_service=IdentityService(accounts),
        class_service=ClassService(
            classes,
            guard,
            enrollments,
            attendance,
            timetable,
            code_generator=code_generator,
        ),
        enrollment_service=EnrollmentService(enrollments, attendance, classes, guard),
        attendance_ledger=AttendanceLedger(attendance, enrollments, guard, classes),
        report_service=ReportService(attendance, enrollments, classes, guard),
        timetable_service=TimetableService(timetable, enrollments, guard),
    )


def build_container(*, db_config: dict) -> Container:
    conn = DatabaseConnection.from_dict(db_config)
    return assemble_container(
        conn=conn,
        accounts=MySQLAccountRepository(conn),
        classes=MySQLClassRepository(conn),
        enrollments=MySQLEnrollmentRepository(conn),
        attendance=MySQLAttendanceRepository(conn),
        timetable=MySQLTimetableRepository(conn),
    )
