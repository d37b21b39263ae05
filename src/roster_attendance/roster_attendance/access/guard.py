from __future__ import annotations

import logging
from typing import Iterable

from ..accounts.model import Account
from ..classes.model import ClassRecord
from ..classes.repository import ClassRepository
from ..core.enums import Action
from ..core.exceptions import AccessDenied, NotFound
from .policy import AuthorizationContext, Decision, decide

logger = logging.getLogger(__name__)


class AccessGuard:
    """Applies the decision table to stored resources.

    Missing, inactive and disallowed classes all surface as NotFound.
    """

    def __init__(self, classes: ClassRepository):
        self._classes = classes

    def context_for(self, account: Account) -> AuthorizationContext:
        if not account.is_active:
            return AuthorizationContext.anonymous()
        return AuthorizationContext(account_id=account.account_id, role=account.role)

    @staticmethod
    def enforce(decision: Decision, *, what: str = "Class") -> None:
        if decision.allowed:
            return
        if decision.hide_existence:
            raise NotFound(f"{what} not found")
        raise AccessDenied(decision.reason or "Access denied")

    def require_class(self, ctx: AuthorizationContext, class_id: int, action: Action) -> ClassRecord:
        record = self._classes.get_by_id(int(class_id))
        if record is None or (not record.is_active and not ctx.is_admin):
            raise NotFound("Class not found")

        decision = decide(
            ctx.role,
            ctx.account_id,
            record.teachers,
            action,
            creator_id=record.created_by,
        )
        if not decision.allowed:
            logger.debug("Denied %s on class %s for account %s: %s", action.value, class_id, ctx.account_id, decision.reason)
        self.enforce(decision)
        return record

    def require_staff(self, ctx: AuthorizationContext) -> None:
        if not ctx.is_staff:
            raise AccessDenied("Teacher or admin login required")

    def require_admin(self, ctx: AuthorizationContext) -> None:
        if not ctx.is_admin:
            raise AccessDenied("Admin login required")

    def require_own_records(self, ctx: AuthorizationContext, roll_no: str, class_records: Iterable[ClassRecord]) -> None:
        owners: set[int] = set()
        for record in class_records:
            owners |= set(record.teachers)
        decision = decide(
            ctx.role,
            ctx.account_id,
            owners,
            Action.READ_OWN_ATTENDANCE,
            actor_roll_no=ctx.roll_no,
            resource_roll_no=roll_no,
        )
        self.enforce(decision, what="Student")
