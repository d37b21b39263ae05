from __future__ import annotations

from flask import Flask, request

from ..common.payloads import pick_fields
from ..common.validators import require_non_empty
from ..common.web import current_context, json_body, login_required, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/classes/<int:class_id>/timetable", methods=["GET"], endpoint="class_timetable")
    @login_required
    def class_timetable(class_id: int):
        slots = container.timetable_service.list_for_class(class_id, current_context(container))
        return ok([s.to_dict() for s in slots])

    @app.route("/classes/<int:class_id>/timetable", methods=["POST"], endpoint="add_timetable_slot")
    @login_required
    def add_timetable_slot(class_id: int):
        fields = pick_fields(
            json_body(),
            required=("day", "start_time", "end_time", "subject", "teacher", "room"),
        )
        slot = container.timetable_service.add_slot(
            class_id,
            fields["day"],
            str(fields["start_time"]),
            str(fields["end_time"]),
            fields["subject"],
            fields["teacher"],
            fields["room"],
            current_context(container),
        )
        return ok(slot.to_dict(), status=201, message="Time slot added")

    @app.route("/timetable/<int:slot_id>", methods=["DELETE"], endpoint="delete_timetable_slot")
    @login_required
    def delete_timetable_slot(slot_id: int):
        container.timetable_service.delete_slot(slot_id, current_context(container))
        return ok(message="Time slot deleted")

    @app.route("/student-timetable", methods=["GET"], endpoint="student_timetable")
    def student_timetable():
        roll_no = require_non_empty(request.args.get("rollno"), "Roll number")
        slots = container.timetable_service.list_for_roll(roll_no)
        return ok([s.to_dict() for s in slots])
