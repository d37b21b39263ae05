from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from mysql.connector import errorcode
from mysql.connector.errors import IntegrityError

from ..core.enums import Role
from ..core.exceptions import DuplicateIdentity
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Account
from .repository import AccountRepository

_COLUMNS = "account_id, username, email, full_name, password_hash, role, is_active, last_login, created_at"


def _to_account(row: dict) -> Account:
    return Account(
        account_id=int(row["account_id"]),
        username=row["username"],
        email=row["email"],
        full_name=row["full_name"],
        password_hash=row["password_hash"],
        role=Role(row["role"]),
        is_active=bool(row.get("is_active", True)),
        last_login=row.get("last_login"),
        created_at=row.get("created_at"),
    )


class MySQLAccountRepository(AccountRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _get_one(self, where: str, value) -> Optional[Account]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM accounts WHERE {where}=%s", (value,))
            row = fetchone(cur)
            return _to_account(row) if row else None

    def get_by_id(self, account_id: int) -> Optional[Account]:
        return self._get_one("account_id", int(account_id))

    def get_by_username(self, username: str) -> Optional[Account]:
        return self._get_one("username", username)

    def get_by_email(self, email: str) -> Optional[Account]:
        return self._get_one("email", email)

    def create_account(
        self,
        *,
        username: str,
        email: str,
        full_name: str,
        password_hash: str,
        role: Role,
    ) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO accounts(username, email, full_name, password_hash, role, is_active)
                    VALUES(%s,%s,%s,%s,%s,1)
                    """,
                    (username, email, full_name, password_hash, role.value),
                )
                return int(cur.lastrowid)
        except IntegrityError as e:
            if e.errno == errorcode.ER_DUP_ENTRY:
                raise DuplicateIdentity("Username or email already exists")
            raise

    def touch_last_login(self, account_id: int, when: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE accounts SET last_login=%s WHERE account_id=%s", (when, int(account_id)))
            return cur.rowcount > 0

    def set_active(self, account_id: int, *, is_active: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE accounts SET is_active=%s WHERE account_id=%s",
                (1 if is_active else 0, int(account_id)),
            )
            return cur.rowcount > 0

    def list_all(self) -> Sequence[Account]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM accounts ORDER BY created_at DESC, account_id DESC")
            return [_to_account(r) for r in fetchall(cur)]
