"""In-memory repositories used by the service tests."""

from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, time, timedelta
from typing import Optional

from src.roster_attendance.roster_attendance.accounts.model import Account
from src.roster_attendance.roster_attendance.attendance.model import AttendanceRecord
from src.roster_attendance.roster_attendance.classes.model import ClassRecord
from src.roster_attendance.roster_attendance.core.enums import AttendanceStatus, Role, Weekday
from src.roster_attendance.roster_attendance.core.exceptions import (
    ClassCodeTaken,
    DuplicateEnrollment,
    DuplicateIdentity,
)
from src.roster_attendance.roster_attendance.enrollments.model import EnrollmentRecord
from src.roster_attendance.roster_attendance.timetable.model import TimetableSlot

_EPOCH = datetime(2025, 1, 1, 8, 0)


class InMemoryAccounts:
    def __init__(self):
        self.accounts: dict[int, Account] = {}
        self._id = 0

    def get_by_id(self, account_id: int) -> Optional[Account]:
        return self.accounts.get(int(account_id))

    def get_by_username(self, username: str) -> Optional[Account]:
        return next((a for a in self.accounts.values() if a.username == username), None)

    def get_by_email(self, email: str) -> Optional[Account]:
        return next((a for a in self.accounts.values() if a.email == email), None)

    def create_account(self, *, username: str, email: str, full_name: str, password_hash: str, role: Role) -> int:
        if self.get_by_username(username) or self.get_by_email(email):
            raise DuplicateIdentity("Username or email already exists")
        self._id += 1
        self.accounts[self._id] = Account(
            account_id=self._id,
            username=username,
            email=email,
            full_name=full_name,
            password_hash=password_hash,
            role=role,
            created_at=_EPOCH,
        )
        return self._id

    def touch_last_login(self, account_id: int, when: datetime) -> bool:
        account = self.accounts.get(int(account_id))
        if not account:
            return False
        self.accounts[account.account_id] = replace(account, last_login=when)
        return True

    def set_active(self, account_id: int, *, is_active: bool) -> bool:
        account = self.accounts.get(int(account_id))
        if not account:
            return False
        self.accounts[account.account_id] = replace(account, is_active=is_active)
        return True

    def list_all(self):
        return sorted(self.accounts.values(), key=lambda a: a.account_id)


class InMemoryClasses:
    def __init__(self):
        self.classes: dict[int, ClassRecord] = {}
        self._id = 0

    def get_by_id(self, class_id: int) -> Optional[ClassRecord]:
        return self.classes.get(int(class_id))

    def get_by_code(self, class_code: str) -> Optional[ClassRecord]:
        return next((c for c in self.classes.values() if c.class_code == class_code), None)

    def code_exists(self, class_code: str) -> bool:
        return self.get_by_code(class_code) is not None

    def create_class(self, *, name, room, subject, description, created_by, class_code) -> int:
        if self.code_exists(class_code):
            raise ClassCodeTaken(class_code)
        self._id += 1
        self.classes[self._id] = ClassRecord(
            class_id=self._id,
            name=name,
            room=room,
            subject=subject,
            description=description,
            created_by=int(created_by),
            class_code=class_code,
            teachers=frozenset({int(created_by)}),
            created_at=_EPOCH + timedelta(seconds=self._id),
        )
        return self._id

    def add_teacher(self, class_id: int, account_id: int) -> bool:
        record = self.classes.get(int(class_id))
        if not record or int(account_id) in record.teachers:
            return False
        self.classes[record.class_id] = replace(record, teachers=record.teachers | {int(account_id)})
        return True

    def list_all(self):
        return sorted(self.classes.values(), key=lambda c: c.created_at, reverse=True)

    def list_for_teacher(self, account_id: int):
        return [c for c in self.list_all() if int(account_id) in c.teachers]

    def set_active(self, class_id: int, *, is_active: bool) -> bool:
        record = self.classes.get(int(class_id))
        if not record:
            return False
        self.classes[record.class_id] = replace(record, is_active=is_active)
        return True

    def delete_class(self, class_id: int) -> bool:
        return self.classes.pop(int(class_id), None) is not None


class InMemoryEnrollments:
    def __init__(self):
        self.rows: dict[int, EnrollmentRecord] = {}
        self.memberships: dict[int, set[int]] = {}
        self._id = 0

    def _view(self, enrollment_id: int) -> EnrollmentRecord:
        row = self.rows[enrollment_id]
        return replace(row, classes=frozenset(self.memberships.get(enrollment_id, set())))

    def get_by_id(self, enrollment_id: int) -> Optional[EnrollmentRecord]:
        if int(enrollment_id) not in self.rows:
            return None
        return self._view(int(enrollment_id))

    def get_by_roll_and_class(self, roll_no: str, class_id: int) -> Optional[EnrollmentRecord]:
        for eid, row in self.rows.items():
            if row.roll_no == roll_no and row.class_id == int(class_id):
                return self._view(eid)
        return None

    def list_for_class(self, class_id: int):
        items = [self._view(eid) for eid, row in self.rows.items() if row.class_id == int(class_id)]
        return sorted(items, key=lambda r: r.roll_no)

    def list_by_roll(self, roll_no: str):
        return [self._view(eid) for eid, row in sorted(self.rows.items()) if row.roll_no == roll_no]

    def list_all(self):
        return [self._view(eid) for eid in sorted(self.rows, reverse=True)]

    def create_enrollment(self, *, name, roll_no, class_id, email=None, phone=None, parent_phone=None) -> int:
        if self.get_by_roll_and_class(roll_no, class_id):
            raise DuplicateEnrollment(f"Roll number {roll_no} already exists in this class")
        self._id += 1
        self.rows[self._id] = EnrollmentRecord(
            enrollment_id=self._id,
            name=name,
            roll_no=roll_no,
            class_id=int(class_id),
            email=email,
            phone=phone,
            parent_phone=parent_phone,
            created_at=_EPOCH,
        )
        self.memberships[self._id] = {int(class_id)}
        return self._id

    def add_membership(self, enrollment_id: int, class_id: int) -> bool:
        members = self.memberships.setdefault(int(enrollment_id), set())
        if int(class_id) in members:
            return False
        members.add(int(class_id))
        return True

    def remove_membership(self, enrollment_id: int, class_id: int) -> bool:
        members = self.memberships.get(int(enrollment_id), set())
        if int(class_id) not in members:
            return False
        members.discard(int(class_id))
        return True

    def remove_class_from_memberships(self, class_id: int) -> int:
        count = 0
        for members in self.memberships.values():
            if int(class_id) in members:
                members.discard(int(class_id))
                count += 1
        return count

    def delete_enrollment(self, enrollment_id: int) -> bool:
        self.memberships.pop(int(enrollment_id), None)
        return self.rows.pop(int(enrollment_id), None) is not None

    def delete_for_class(self, class_id: int) -> int:
        doomed = [eid for eid, row in self.rows.items() if row.class_id == int(class_id)]
        for eid in doomed:
            self.delete_enrollment(eid)
        return len(doomed)


class InMemoryAttendance:
    def __init__(self):
        self.records: dict[int, AttendanceRecord] = {}
        self._id = 0

    def create_record(self, *, enrollment_id: int, class_id: int, day: date, status: AttendanceStatus, lectures: int) -> int:
        self._id += 1
        self.records[self._id] = AttendanceRecord(
            attendance_id=self._id,
            enrollment_id=int(enrollment_id),
            class_id=int(class_id),
            day=day,
            status=status,
            lectures=int(lectures),
        )
        return self._id

    def list_for_enrollment(self, enrollment_id: int):
        items = [r for r in self.records.values() if r.enrollment_id == int(enrollment_id)]
        return sorted(items, key=lambda r: (r.day, r.attendance_id), reverse=True)

    def list_for_class(self, class_id: int):
        items = [r for r in self.records.values() if r.class_id == int(class_id)]
        return sorted(items, key=lambda r: (r.day, r.attendance_id))

    def list_all(self):
        return sorted(self.records.values(), key=lambda r: (r.day, r.attendance_id), reverse=True)

    def list_for_class_and_day(self, class_id: int, day: date):
        return [r for r in self.list_for_class(class_id) if r.day == day]

    def _delete(self, predicate) -> int:
        doomed = [rid for rid, r in self.records.items() if predicate(r)]
        for rid in doomed:
            del self.records[rid]
        return len(doomed)

    def delete_for_class_and_day(self, class_id: int, day: date) -> int:
        return self._delete(lambda r: r.class_id == int(class_id) and r.day == day)

    def delete_for_enrollment(self, enrollment_id: int, *, class_id: Optional[int] = None) -> int:
        return self._delete(
            lambda r: r.enrollment_id == int(enrollment_id) and (class_id is None or r.class_id == int(class_id))
        )

    def delete_for_class(self, class_id: int) -> int:
        return self._delete(lambda r: r.class_id == int(class_id))


class InMemoryTimetable:
    def __init__(self):
        self.slots: dict[int, TimetableSlot] = {}
        self._id = 0

    def get_by_id(self, slot_id: int) -> Optional[TimetableSlot]:
        return self.slots.get(int(slot_id))

    def list_for_classes(self, class_ids):
        wanted = {int(c) for c in class_ids}
        return [s for s in self.slots.values() if s.class_id in wanted]

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
        self._id += 1
        self.slots[self._id] = TimetableSlot(
            slot_id=self._id,
            class_id=int(class_id),
            day=day,
            start_time=start_time,
            end_time=end_time,
            subject=subject,
            teacher=teacher,
            room=room,
            created_by=int(created_by),
        )
        return self._id

    def delete_slot(self, slot_id: int) -> bool:
        return self.slots.pop(int(slot_id), None) is not None

    def delete_for_class(self, class_id: int) -> int:
        doomed = [sid for sid, s in self.slots.items() if s.class_id == int(class_id)]
        for sid in doomed:
            del self.slots[sid]
        return len(doomed)
