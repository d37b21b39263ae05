from __future__ import annotations

from typing import Optional, Sequence

from mysql.connector import errorcode
from mysql.connector.errors import IntegrityError

from ..core.exceptions import DuplicateEnrollment
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, in_clause
from .model import EnrollmentRecord
from .repository import EnrollmentRepository

_COLUMNS = "e.enrollment_id, e.name, e.roll_no, e.email, e.phone, e.parent_phone, e.class_id, e.created_at"


class MySQLEnrollmentRepository(EnrollmentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _to_records(cur, rows: list[dict]) -> list[EnrollmentRecord]:
        memberships: dict[int, set[int]] = {int(r["enrollment_id"]): set() for r in rows}
        if memberships:
            placeholders, params = in_clause(memberships.keys())
            cur.execute(
                f"SELECT enrollment_id, class_id FROM enrollment_classes WHERE enrollment_id IN ({placeholders})",
                params,
            )
            for m in fetchall(cur):
                memberships[int(m["enrollment_id"])].add(int(m["class_id"]))

        return [
            EnrollmentRecord(
                enrollment_id=int(r["enrollment_id"]),
                name=r["name"],
                roll_no=str(r["roll_no"]),
                class_id=int(r["class_id"]),
                classes=frozenset(memberships[int(r["enrollment_id"])] | {int(r["class_id"])}),
                email=r.get("email"),
                phone=r.get("phone"),
                parent_phone=r.get("parent_phone"),
                created_at=r.get("created_at"),
            )
            for r in rows
        ]

    def _select(self, where: str, params: tuple, *, order_by: str = "e.enrollment_id") -> list[EnrollmentRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM enrollments e WHERE {where} ORDER BY {order_by}", params)
            return self._to_records(cur, fetchall(cur))

    def get_by_id(self, enrollment_id: int) -> Optional[EnrollmentRecord]:
        rows = self._select("e.enrollment_id=%s", (int(enrollment_id),))
        return rows[0] if rows else None

    def get_by_roll_and_class(self, roll_no: str, class_id: int) -> Optional[EnrollmentRecord]:
        rows = self._select("e.roll_no=%s AND e.class_id=%s", (str(roll_no), int(class_id)))
        return rows[0] if rows else None

    def list_for_class(self, class_id: int) -> Sequence[EnrollmentRecord]:
        return self._select("e.class_id=%s", (int(class_id),), order_by="e.roll_no ASC, e.enrollment_id ASC")

    def list_by_roll(self, roll_no: str) -> Sequence[EnrollmentRecord]:
        return self._select("e.roll_no=%s", (str(roll_no),))

    def list_all(self) -> Sequence[EnrollmentRecord]:
        return self._select("1=1", (), order_by="e.created_at DESC, e.enrollment_id DESC")

    def create_enrollment(
        self,
        *,
        name: str,
        roll_no: str,
        class_id: int,
        email: Optional[str] = None,
        phone: Optional[str] = None,
        parent_phone: Optional[str] = None,
    ) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO enrollments(name, roll_no, email, phone, parent_phone, class_id)
                    VALUES(%s,%s,%s,%s,%s,%s)
                    """,
                    (name, str(roll_no), email, phone, parent_phone, int(class_id)),
                )
                enrollment_id = int(cur.lastrowid)
                cur.execute(
                    "INSERT INTO enrollment_classes(enrollment_id, class_id) VALUES(%s,%s)",
                    (enrollment_id, int(class_id)),
                )
                return enrollment_id
        except IntegrityError as e:
            if e.errno == errorcode.ER_DUP_ENTRY:
                raise DuplicateEnrollment(f"Roll number {roll_no} already exists in this class")
            raise

    def add_membership(self, enrollment_id: int, class_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT IGNORE INTO enrollment_classes(enrollment_id, class_id) VALUES(%s,%s)",
                (int(enrollment_id), int(class_id)),
            )
            return cur.rowcount > 0

    def remove_membership(self, enrollment_id: int, class_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM enrollment_classes WHERE enrollment_id=%s AND class_id=%s",
                (int(enrollment_id), int(class_id)),
            )
            return cur.rowcount > 0

    def remove_class_from_memberships(self, class_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM enrollment_classes WHERE class_id=%s", (int(class_id),))
            return int(cur.rowcount)

    def delete_enrollment(self, enrollment_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM enrollments WHERE enrollment_id=%s", (int(enrollment_id),))
            return cur.rowcount > 0

    def delete_for_class(self, class_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM enrollments WHERE class_id=%s", (int(class_id),))
            return int(cur.rowcount)
