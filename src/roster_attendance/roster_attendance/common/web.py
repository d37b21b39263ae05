from __future__ import annotations

import logging
from functools import wraps
from typing import Any, Mapping

from flask import Flask, jsonify, request, session
from werkzeug.exceptions import HTTPException

from ..access.policy import AuthorizationContext
from ..core.exceptions import (
    AccessDenied,
    DomainError,
    DuplicateEnrollment,
    DuplicateIdentity,
    InvalidCredentials,
    NotFound,
    PartialBatchFailure,
    ValidationError,
)

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR = (
    (NotFound, 404),
    (AccessDenied, 403),
    (InvalidCredentials, 401),
    (DuplicateIdentity, 409),
    (DuplicateEnrollment, 409),
    (PartialBatchFailure, 422),
    (ValidationError, 400),
)


def status_for(error: DomainError) -> int:
    for kind, status in _STATUS_BY_ERROR:
        if isinstance(error, kind):
            return status
    return 400


def ok(payload: Any = None, *, status: int = 200, message: str = ""):
    body = {"success": True}
    if message:
        body["message"] = message
    if payload is not None:
        body["data"] = payload
    return jsonify(body), status


def fail(message: str, status: int, **extra):
    body = {"success": False, "message": message}
    body.update(extra)
    return jsonify(body), status


def json_body() -> Mapping[str, Any]:
    """Request payload from JSON or a submitted form."""

    data = request.get_json(silent=True)
    if data is None:
        data = request.form.to_dict()
    if not isinstance(data, Mapping):
        raise ValidationError("Request body must be an object")
    return data


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        status = status_for(e)
        if isinstance(e, PartialBatchFailure):
            return fail(str(e), status, outcomes=[o.to_dict() for o in e.outcomes])
        return fail(str(e) or "Request failed", status)

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        if isinstance(e, HTTPException):
            return fail(e.description or e.name, e.code or 500)
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return fail("An internal error occurred", 500)


def current_context(container) -> AuthorizationContext:
    """Authorization context for the logged-in account (anonymous otherwise)."""

    account_id = session.get("account_id")
    if account_id is None:
        return AuthorizationContext.anonymous()
    try:
        account = container.identity_service.get_account(int(account_id))
    except NotFound:
        session.clear()
        return AuthorizationContext.anonymous()
    return container.guard.context_for(account)


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "account_id" not in session:
            return fail("Please log in to continue", 401)
        return view(*args, **kwargs)

    return wrapper
