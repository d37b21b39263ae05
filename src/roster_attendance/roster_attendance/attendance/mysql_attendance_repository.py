from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = "attendance_id, enrollment_id, class_id, day, status, lectures"


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        enrollment_id=int(r["enrollment_id"]),
        class_id=int(r["class_id"]),
        day=r["day"],
        status=AttendanceStatus(r["status"]),
        lectures=int(r.get("lectures") or 1),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _select(self, where: str, params: tuple, *, order_by: str) -> list[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_records WHERE {where} ORDER BY {order_by}", params)
            return [_to_record(r) for r in fetchall(cur)]

    def _delete(self, where: str, params: tuple) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"DELETE FROM attendance_records WHERE {where}", params)
            return int(cur.rowcount)

    def create_record(
        self,
        *,
        enrollment_id: int,
        class_id: int,
        day: date,
        status: AttendanceStatus,
        lectures: int,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(enrollment_id, class_id, day, status, lectures)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (int(enrollment_id), int(class_id), day, status.value, int(lectures)),
            )
            return int(cur.lastrowid)

    def list_for_enrollment(self, enrollment_id: int) -> Sequence[AttendanceRecord]:
        return self._select("enrollment_id=%s", (int(enrollment_id),), order_by="day DESC, attendance_id DESC")

    def list_for_class(self, class_id: int) -> Sequence[AttendanceRecord]:
        return self._select("class_id=%s", (int(class_id),), order_by="day ASC, attendance_id ASC")

    def list_all(self) -> Sequence[AttendanceRecord]:
        return self._select("1=1", (), order_by="day DESC, attendance_id DESC")

    def list_for_class_and_day(self, class_id: int, day: date) -> Sequence[AttendanceRecord]:
        return self._select("class_id=%s AND day=%s", (int(class_id), day), order_by="attendance_id ASC")

    def delete_for_class_and_day(self, class_id: int, day: date) -> int:
        return self._delete("class_id=%s AND day=%s", (int(class_id), day))

    def delete_for_enrollment(self, enrollment_id: int, *, class_id: Optional[int] = None) -> int:
        if class_id is None:
            return self._delete("enrollment_id=%s", (int(enrollment_id),))
        return self._delete("enrollment_id=%s AND class_id=%s", (int(enrollment_id), int(class_id)))

    def delete_for_class(self, class_id: int) -> int:
        return self._delete("class_id=%s", (int(class_id),))
