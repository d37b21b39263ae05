from __future__ import annotations

import random
from datetime import datetime
from types import SimpleNamespace

import pytest

from src.roster_attendance.roster_attendance.classes.codes import JoinCodeGenerator
from src.roster_attendance.roster_attendance.container import assemble_container
from src.roster_attendance.roster_attendance.core.enums import Role

from tests.fakes import (
    InMemoryAccounts,
    InMemoryAttendance,
    InMemoryClasses,
    InMemoryEnrollments,
    InMemoryTimetable,
)


@pytest.fixture
def fixed_now():
    return datetime(2025, 3, 10, 9, 0, 0)


@pytest.fixture
def repos():
    return SimpleNamespace(
        accounts=InMemoryAccounts(),
        classes=InMemoryClasses(),
        enrollments=InMemoryEnrollments(),
        attendance=InMemoryAttendance(),
        timetable=InMemoryTimetable(),
    )


@pytest.fixture
def container(repos):
    return assemble_container(
        accounts=repos.accounts,
        classes=repos.classes,
        enrollments=repos.enrollments,
        attendance=repos.attendance,
        timetable=repos.timetable,
        code_generator=JoinCodeGenerator(rng=random.Random(1234)),
    )


def _make(container, username: str, role: Role):
    account = container.identity_service.create_account(
        username=username,
        email=f"{username}@example.com",
        password="secret123",
        full_name=username.title(),
        role=role,
    )
    return container.guard.context_for(account)


@pytest.fixture
def admin(container):
    return _make(container, "admin", Role.ADMIN)


@pytest.fixture
def teacher(container):
    return _make(container, "tina", Role.TEACHER)


@pytest.fixture
def other_teacher(container):
    return _make(container, "omar", Role.TEACHER)


@pytest.fixture
def math101(container, teacher):
    return container.class_service.create_class(name="Math101", room="R-12", subject="Mathematics", creator=teacher)
