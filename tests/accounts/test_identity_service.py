from __future__ import annotations

import pytest

from src.roster_attendance.roster_attendance.accounts.service import NewAccount
from src.roster_attendance.roster_attendance.core.enums import Role
from src.roster_attendance.roster_attendance.core.exceptions import (
    DuplicateIdentity,
    InvalidCredentials,
    NotFound,
    ValidationError,
)


def _create(container, username="tina", password="secret123", role=Role.TEACHER):
    return container.identity_service.create_account(
        username=username,
        email=f"{username}@example.com",
        password=password,
        full_name="Tina T",
        role=role,
    )


def test_authenticate_by_username_or_email_updates_last_login(container):
    _create(container)

    by_name = container.identity_service.authenticate("tina", "secret123")
    by_email = container.identity_service.authenticate("TINA@example.com", "secret123")

    assert by_name.account_id == by_email.account_id
    assert by_name.last_login is not None
    assert by_name.password_hash != "secret123"


def test_wrong_password_and_unknown_user_share_one_message(container):
    _create(container)

    with pytest.raises(InvalidCredentials) as wrong:
        container.identity_service.authenticate("tina", "nope")
    with pytest.raises(InvalidCredentials) as unknown:
        container.identity_service.authenticate("ghost", "nope")

    assert str(wrong.value) == str(unknown.value)


def test_duplicate_username_or_email_rejected(container):
    _create(container)

    with pytest.raises(DuplicateIdentity):
        _create(container)
    with pytest.raises(DuplicateIdentity):
        container.identity_service.create_account(
            username="other",
            email="tina@example.com",
            password="secret123",
            full_name="Other",
            role=Role.TEACHER,
        )


def test_short_password_and_bad_email_rejected(container):
    with pytest.raises(ValidationError):
        _create(container, password="123")
    with pytest.raises(ValidationError):
        container.identity_service.create_account(
            username="x", email="not-an-email", password="secret123", full_name="X", role=Role.TEACHER
        )


def test_deactivated_account_cannot_log_in(container):
    account = _create(container)
    container.identity_service.deactivate(account.account_id)

    with pytest.raises(InvalidCredentials):
        container.identity_service.authenticate("tina", "secret123")
    assert container.identity_service.get_account(account.account_id).is_active is False


def test_deactivate_unknown_account(container):
    with pytest.raises(NotFound):
        container.identity_service.deactivate(999)


def test_register_teacher_only_accepts_teacher_role(container):
    new = NewAccount.from_mapping(
        {
            "username": "newbie",
            "email": "newbie@example.com",
            "password": "secret123",
            "confirm_password": "secret123",
            "full_name": "New Teacher",
        }
    )
    account = container.identity_service.register_teacher(new)
    assert account.role == Role.TEACHER

    admin_attempt = NewAccount.from_mapping(
        {
            "username": "sneaky",
            "email": "sneaky@example.com",
            "password": "secret123",
            "full_name": "Sneaky",
            "role": "admin",
        }
    )
    with pytest.raises(ValidationError):
        container.identity_service.register_teacher(admin_attempt)


def test_new_account_payload_checks():
    base = {"username": "u", "email": "u@example.com", "password": "secret123", "full_name": "U"}

    with pytest.raises(ValidationError):
        NewAccount.from_mapping({**base, "confirm_password": "different"})
    with pytest.raises(ValidationError):
        NewAccount.from_mapping({**base, "is_admin": True})
    with pytest.raises(ValidationError):
        NewAccount.from_mapping({k: v for k, v in base.items() if k != "email"})
