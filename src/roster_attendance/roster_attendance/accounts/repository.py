from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import Role
from .model import Account


class AccountRepository(Protocol):
    """Repository interface for accounts.

    Note (DIP): the service layer depends on this interface, not on a concrete DB.
    """

    def get_by_id(self, account_id: int) -> Optional[Account]:
        raise NotImplementedError

    def get_by_username(self, username: str) -> Optional[Account]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[Account]:
        raise NotImplementedError

    def create_account(
        self,
        *,
        username: str,
        email: str,
        full_name: str,
        password_hash: str,
        role: Role,
    ) -> int:
        """Insert a new account. Raises DuplicateIdentity on a unique-key clash."""

        raise NotImplementedError

    def touch_last_login(self, account_id: int, when: datetime) -> bool:
        raise NotImplementedError

    def set_active(self, account_id: int, *, is_active: bool) -> bool:
        raise NotImplementedError

    def list_all(self) -> Sequence[Account]:
        raise NotImplementedError
