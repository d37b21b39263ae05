from __future__ import annotations

from flask import Flask, session

from ..common.payloads import pick_fields
from ..common.web import current_context, json_body, login_required, ok
from ..core.enums import Role
from ..core.exceptions import ValidationError
from ..container import Container
from .service import NewAccount


def register(app: Flask, container: Container) -> None:
    @app.route("/login", methods=["POST"], endpoint="login")
    def login():
        fields = pick_fields(json_body(), required=("username", "password"), optional=("remember",))
        account = container.identity_service.authenticate(fields["username"], fields["password"])

        session.clear()
        session.permanent = bool(fields.get("remember"))
        session["account_id"] = account.account_id
        session["role"] = account.role.value
        session["name"] = account.full_name

        return ok(account.public_view(), message="Login successful")

    @app.route("/logout", methods=["POST"], endpoint="logout")
    def logout():
        session.clear()
        return ok(message="Logged out")

    @app.route("/register", methods=["POST"], endpoint="register_teacher")
    def register_teacher():
        new = NewAccount.from_mapping(json_body(), default_role=Role.TEACHER)
        account = container.identity_service.register_teacher(new)
        return ok(account.public_view(), status=201, message="Registration successful")

    @app.route("/me", methods=["GET"], endpoint="me")
    @login_required
    def me():
        account = container.identity_service.get_account(int(session["account_id"]))
        return ok(account.public_view())

    @app.route("/admin/users", methods=["GET"], endpoint="admin_users")
    @login_required
    def admin_users():
        container.guard.require_admin(current_context(container))
        return ok([a.public_view() for a in container.identity_service.list_accounts()])

    @app.route("/admin/users", methods=["POST"], endpoint="add_user")
    @login_required
    def add_user():
        container.guard.require_admin(current_context(container))
        new = NewAccount.from_mapping(json_body(), default_role=Role.TEACHER)
        account = container.identity_service.create_account(
            username=new.username,
            email=new.email,
            password=new.password,
            full_name=new.full_name,
            role=new.role,
        )
        return ok(account.public_view(), status=201)

    @app.route("/admin/users/<int:account_id>/deactivate", methods=["POST"], endpoint="deactivate_user")
    @login_required
    def deactivate_user(account_id: int):
        ctx = current_context(container)
        container.guard.require_admin(ctx)
        if ctx.account_id == account_id:
            raise ValidationError("You cannot deactivate your own account")
        account = container.identity_service.deactivate(account_id)
        return ok(account.public_view())
