from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class Account:
    """Domain entity: login account.

    Plain data object (no DB access code). Never hard-deleted.
    """

    account_id: int
    username: str
    email: str
    full_name: str
    password_hash: str
    role: Role
    is_active: bool = True
    last_login: Optional[datetime] = None
    created_at: Optional[datetime] = None

    def public_view(self) -> dict:
        return {
            "id": self.account_id,
            "username": self.username,
            "email": self.email,
            "full_name": self.full_name,
            "role": self.role.value,
            "active": self.is_active,
            "last_login": self.last_login.isoformat() if self.last_login else None,
        }
