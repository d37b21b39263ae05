from __future__ import annotations

from typing import Any

from flask import Flask, request

from ..common.datetime_utils import now_local, parse_iso_date
from ..common.payloads import pick_fields
from ..common.web import current_context, json_body, login_required, ok
from ..core.exceptions import ValidationError
from ..container import Container


def _status_map(raw: Any) -> dict:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ValidationError("statuses must be an object keyed by roll number")
    return {str(k): v for k, v in raw.items()}


def register(app: Flask, container: Container) -> None:
    @app.route("/classes/<int:class_id>/attendance", methods=["POST"], endpoint="mark_attendance_bulk")
    @login_required
    def mark_attendance_bulk(class_id: int):
        fields = pick_fields(json_body(), required=("date",), optional=("lectures", "statuses"))
        records = container.attendance_ledger.mark_bulk(
            class_id,
            parse_iso_date(str(fields["date"])),
            fields.get("lectures", 1),
            _status_map(fields.get("statuses")),
            current_context(container),
        )
        present = sum(1 for r in records if r.is_present)
        return ok(
            [r.to_dict() for r in records],
            message=f"Attendance saved: {present} present, {len(records) - present} absent",
        )

    @app.route("/classes/<int:class_id>/attendance", methods=["GET"], endpoint="attendance_day_report")
    @login_required
    def attendance_day_report(class_id: int):
        day_s = request.args.get("date") or now_local().strftime("%Y-%m-%d")
        report = container.attendance_ledger.day_report(class_id, parse_iso_date(day_s), current_context(container))
        return ok(report.to_dict())

    @app.route("/admin/attendance", methods=["GET"], endpoint="admin_attendance")
    @login_required
    def admin_attendance():
        listings = container.attendance_ledger.all_records(current_context(container))
        return ok([row.to_dict() for row in listings])
