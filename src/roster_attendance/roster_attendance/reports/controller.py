from __future__ import annotations

from flask import Flask, request, session

from ..access.policy import AuthorizationContext
from ..common.validators import require_non_empty
from ..common.web import current_context, login_required, ok
from ..core.exceptions import ValidationError
from ..container import Container
from .exporters import csv_filename, to_csv, to_json


def register(app: Flask, container: Container) -> None:
    @app.route("/student-summary", methods=["GET"], endpoint="student_summary")
    def student_summary():
        roll_no = require_non_empty(request.args.get("rollno"), "Roll number")
        ctx = current_context(container)
        if not ctx.is_staff:
            ctx = AuthorizationContext.for_roll_number(roll_no)
        summary = container.report_service.student_summary(roll_no, ctx)
        return ok(summary.to_dict())

    @app.route("/classes/<int:class_id>/report", methods=["GET"], endpoint="class_report")
    @login_required
    def class_report(class_id: int):
        fmt = (request.args.get("format") or "json").lower()
        if fmt not in {"json", "csv"}:
            raise ValidationError("format must be json or csv")

        summary = container.report_service.class_summary(
            class_id,
            current_context(container),
            generated_by=session.get("name") or "",
        )
        if fmt == "csv":
            return app.response_class(
                to_csv(summary).encode("utf-8-sig"),
                mimetype="text/csv",
                headers={"Content-Disposition": f"attachment; filename={csv_filename(summary)}"},
            )
        return app.response_class(to_json(summary), mimetype="application/json")

    @app.route("/teacher-summary", methods=["GET"], endpoint="teacher_summary")
    @login_required
    def teacher_summary():
        overview = container.report_service.teacher_overview(current_context(container))
        return ok(overview.to_dict())
