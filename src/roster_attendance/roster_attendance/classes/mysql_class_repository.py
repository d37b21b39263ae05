from __future__ import annotations

from typing import Optional, Sequence

from mysql.connector import errorcode
from mysql.connector.errors import IntegrityError

from ..core.exceptions import ClassCodeTaken
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import ClassRecord
from .repository import ClassRepository

_COLUMNS = "c.class_id, c.name, c.room, c.subject, c.description, c.created_by, c.class_code, c.is_active, c.created_at"


class MySQLClassRepository(ClassRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _load_teachers(cur, class_ids: Sequence[int]) -> dict[int, set[int]]:
        out: dict[int, set[int]] = {int(cid): set() for cid in class_ids}
        if not class_ids:
            return out
        placeholders, params = in_clause(class_ids)
        cur.execute(
            f"SELECT class_id, account_id FROM class_teachers WHERE class_id IN ({placeholders})",
            params,
        )
        for r in fetchall(cur):
            out[int(r["class_id"])].add(int(r["account_id"]))
        return out

    def _to_records(self, cur, rows: list[dict]) -> list[ClassRecord]:
        teachers = self._load_teachers(cur, [int(r["class_id"]) for r in rows])
        return [
            ClassRecord(
                class_id=int(r["class_id"]),
                name=r["name"],
                room=str(r["room"]),
                subject=r["subject"],
                description=r.get("description") or "",
                created_by=int(r["created_by"]),
                class_code=r["class_code"],
                # Creator is always a member, even for rows written before class_teachers existed.
                teachers=frozenset(teachers[int(r["class_id"])] | {int(r["created_by"])}),
                is_active=bool(r.get("is_active", True)),
                created_at=r.get("created_at"),
            )
            for r in rows
        ]

    def _get_one(self, where: str, value) -> Optional[ClassRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM classes c WHERE {where}=%s", (value,))
            row = fetchone(cur)
            if not row:
                return None
            return self._to_records(cur, [row])[0]

    def get_by_id(self, class_id: int) -> Optional[ClassRecord]:
        return self._get_one("c.class_id", int(class_id))

    def get_by_code(self, class_code: str) -> Optional[ClassRecord]:
        return self._get_one("c.class_code", class_code)

    def code_exists(self, class_code: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT 1 AS hit FROM classes WHERE class_code=%s", (class_code,))
            return fetchone(cur) is not None

    def create_class(
        self,
        *,
        name: str,
        room: str,
        subject: str,
        description: str,
        created_by: int,
        class_code: str,
    ) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO classes(name, room, subject, description, created_by, class_code, is_active)
                    VALUES(%s,%s,%s,%s,%s,%s,1)
                    """,
                    (name, room, subject, description, int(created_by), class_code),
                )
                class_id = int(cur.lastrowid)
                cur.execute(
                    "INSERT INTO class_teachers(class_id, account_id) VALUES(%s,%s)",
                    (class_id, int(created_by)),
                )
                return class_id
        except IntegrityError as e:
            if e.errno == errorcode.ER_DUP_ENTRY:
                raise ClassCodeTaken(class_code)
            raise

    def add_teacher(self, class_id: int, account_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT IGNORE INTO class_teachers(class_id, account_id) VALUES(%s,%s)",
                (int(class_id), int(account_id)),
            )
            return cur.rowcount > 0

    def list_all(self) -> Sequence[ClassRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM classes c ORDER BY c.created_at DESC, c.class_id DESC")
            return self._to_records(cur, fetchall(cur))

    def list_for_teacher(self, account_id: int) -> Sequence[ClassRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM classes c
                JOIN class_teachers ct ON ct.class_id = c.class_id
                WHERE ct.account_id=%s
                ORDER BY c.created_at DESC, c.class_id DESC
                """,
                (int(account_id),),
            )
            return self._to_records(cur, fetchall(cur))

    def set_active(self, class_id: int, *, is_active: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE classes SET is_active=%s WHERE class_id=%s",
                (1 if is_active else 0, int(class_id)),
            )
            return cur.rowcount > 0

    def delete_class(self, class_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM classes WHERE class_id=%s", (int(class_id),))
            return cur.rowcount > 0
