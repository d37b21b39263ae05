from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Mapping, Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.datetime_utils import now_local
from ..common.payloads import pick_fields
from ..common.validators import require_email, require_min_length, require_non_empty
from ..core.constants import MIN_PASSWORD_LENGTH
from ..core.enums import Role
from ..core.exceptions import DuplicateIdentity, InvalidCredentials, NotFound, ValidationError
from .model import Account
from .repository import AccountRepository

logger = logging.getLogger(__name__)

# Checked against when the login name is unknown so both failure paths do the same work.
_DUMMY_HASH = generate_password_hash("not-a-real-password")


@dataclass(frozen=True)
class NewAccount:
    username: str
    email: str
    password: str
    full_name: str
    role: Role

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], *, default_role: Role = Role.TEACHER) -> "NewAccount":
        fields = pick_fields(
            data,
            required=("username", "email", "password", "full_name"),
            optional=("role", "confirm_password"),
        )
        if "confirm_password" in fields and fields["confirm_password"] != fields["password"]:
            raise ValidationError("Passwords do not match")
        try:
            role = Role(fields.get("role") or default_role.value)
        except ValueError:
            raise ValidationError("Invalid account role")
        return cls(
            username=str(fields["username"]),
            email=str(fields["email"]),
            password=str(fields["password"]),
            full_name=str(fields["full_name"]),
            role=role,
        )


class IdentityService:
    """Use cases: provision accounts, log in, deactivate."""

    def __init__(self, accounts: AccountRepository, *, clock: Callable[[], datetime] = now_local):
        self._accounts = accounts
        self._clock = clock

    def create_account(self, *, username: str, email: str, password: str, full_name: str, role: Role) -> Account:
        username = require_non_empty(username, "Username")
        email = require_email(email)
        full_name = require_non_empty(full_name, "Full name")
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)
        if not isinstance(role, Role):
            raise ValidationError("Invalid account role")

        if self._accounts.get_by_username(username) or self._accounts.get_by_email(email):
            raise DuplicateIdentity("Username or email already exists")

        account_id = self._accounts.create_account(
            username=username,
            email=email,
            full_name=full_name,
            password_hash=generate_password_hash(password),
            role=role,
        )
        logger.info("Created %s account %s (id=%s)", role.value, username, account_id)
        return self._accounts.get_by_id(account_id)

    def register_teacher(self, new: NewAccount) -> Account:
        """Public sign-up: only teachers may register themselves."""

        if new.role != Role.TEACHER:
            raise ValidationError("Only teachers can register through this form")
        return self.create_account(
            username=new.username,
            email=new.email,
            password=new.password,
            full_name=new.full_name,
            role=Role.TEACHER,
        )

    def authenticate(self, username_or_email: str, password: str) -> Account:
        login = (username_or_email or "").strip()
        account = self._find_by_login(login) if login else None

        if account is None:
            check_password_hash(_DUMMY_HASH, password or "")
            raise InvalidCredentials("Invalid username/email or password")

        try:
            ok = check_password_hash(account.password_hash, password or "")
        except ValueError:
            # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
            ok = False

        if not ok or not account.is_active:
            raise InvalidCredentials("Invalid username/email or password")

        when = self._clock()
        self._accounts.touch_last_login(account.account_id, when)
        logger.info("Account %s logged in (%s)", account.username, account.role.value)
        return self._accounts.get_by_id(account.account_id) or account

    def _find_by_login(self, login: str) -> Optional[Account]:
        account = self._accounts.get_by_username(login)
        if account is None and "@" in login:
            account = self._accounts.get_by_email(login.lower())
        return account

    def deactivate(self, account_id: int) -> Account:
        account = self._accounts.get_by_id(int(account_id))
        if not account:
            raise NotFound("Account not found")
        if account.is_active:
            self._accounts.set_active(account.account_id, is_active=False)
            logger.info("Deactivated account %s", account.username)
        return self._accounts.get_by_id(account.account_id)

    def get_account(self, account_id: int) -> Account:
        account = self._accounts.get_by_id(int(account_id))
        if not account:
            raise NotFound("Account not found")
        return account

    def list_accounts(self):
        return list(self._accounts.list_all())
