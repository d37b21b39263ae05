from __future__ import annotations

from datetime import time
from typing import Optional, Sequence

from mysql.connector import errorcode
from mysql.connector.errors import IntegrityError

from ..core.enums import Weekday
from ..core.exceptions import ValidationError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause, normalize_mysql_time
from .model import TimetableSlot
from .repository import TimetableRepository

_COLUMNS = "slot_id, class_id, day, start_time, end_time, subject, teacher, room, created_by"


def _to_slot(r: dict) -> TimetableSlot:
    return TimetableSlot(
        slot_id=int(r["slot_id"]),
        class_id=int(r["class_id"]),
        day=Weekday(r["day"]),
        start_time=normalize_mysql_time(r["start_time"]),
        end_time=normalize_mysql_time(r["end_time"]),
        subject=r["subject"],
        teacher=r["teacher"],
        room=r["room"],
        created_by=int(r["created_by"]),
    )


class MySQLTimetableRepository(TimetableRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, slot_id: int) -> Optional[TimetableSlot]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM timetable_slots WHERE slot_id=%s", (int(slot_id),))
            r = fetchone(cur)
            return _to_slot(r) if r else None

    def list_for_classes(self, class_ids: Sequence[int]) -> Sequence[TimetableSlot]:
        if not class_ids:
            return []
        placeholders, params = in_clause(int(c) for c in class_ids)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM timetable_slots
                WHERE class_id IN ({placeholders})
                ORDER BY FIELD(day, 'Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday', 'Sunday'),
                         start_time ASC
                """,
                params,
            )
            return [_to_slot(r) for r in fetchall(cur)]

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
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO timetable_slots(class_id, day, start_time, end_time, subject, teacher, room, created_by)
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (int(class_id), day.value, start_time, end_time, subject, teacher, room, int(created_by)),
                )
                return int(cur.lastrowid)
        except IntegrityError as e:
            if e.errno == errorcode.ER_DUP_ENTRY:
                raise ValidationError("A slot already starts at this time on this day")
            raise

    def delete_slot(self, slot_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM timetable_slots WHERE slot_id=%s", (int(slot_id),))
            return cur.rowcount > 0

    def delete_for_class(self, class_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM timetable_slots WHERE class_id=%s", (int(class_id),))
            return int(cur.rowcount)
