from __future__ import annotations

from flask import Flask, request

from ..common.payloads import pick_fields
from ..common.web import current_context, json_body, login_required, ok
from ..core.exceptions import ValidationError
from ..container import Container
from .service import NewStudent


def register(app: Flask, container: Container) -> None:
    @app.route("/classes/<int:class_id>/students", methods=["GET"], endpoint="list_students")
    @login_required
    def list_students(class_id: int):
        students = container.enrollment_service.list_students(class_id, current_context(container))
        return ok([s.to_dict() for s in students])

    @app.route("/classes/<int:class_id>/students", methods=["POST"], endpoint="add_student")
    @login_required
    def add_student(class_id: int):
        new = NewStudent.from_mapping(json_body())
        record = container.enrollment_service.add_student(
            class_id,
            new.name,
            new.roll_no,
            current_context(container),
            email=new.email,
            phone=new.phone,
            parent_phone=new.parent_phone,
        )
        return ok(record.to_dict(), status=201, message="Student added")

    @app.route("/classes/<int:class_id>/students/bulk", methods=["POST"], endpoint="add_bulk_students")
    @login_required
    def add_bulk_students(class_id: int):
        fields = pick_fields(json_body(), required=("students",), optional=("strict",))
        rows = fields["students"]
        if not isinstance(rows, list):
            raise ValidationError("students must be a list")

        result = container.enrollment_service.add_bulk(class_id, rows, current_context(container))
        if fields.get("strict"):
            result.raise_for_errors()
        return ok(
            result.to_dict(),
            message=f"{len(result.added)} added, {len(result.duplicates)} duplicates, {len(result.errors)} errors",
        )

    @app.route("/students/bulk", methods=["POST"], endpoint="add_students_to_classes")
    @login_required
    def add_students_to_classes():
        fields = pick_fields(json_body(), required=("students", "class_ids"), optional=("strict",))
        rows, class_ids = fields["students"], fields["class_ids"]
        if not isinstance(rows, list) or not isinstance(class_ids, list):
            raise ValidationError("students and class_ids must be lists")

        result = container.enrollment_service.add_bulk_to_classes(class_ids, rows, current_context(container))
        if fields.get("strict"):
            result.raise_for_errors()
        return ok(
            result.to_dict(),
            message=f"{len(result.added)} added, {len(result.duplicates)} duplicates, {len(result.errors)} errors",
        )

    @app.route("/teacher/students", methods=["GET"], endpoint="search_students")
    @login_required
    def search_students():
        rosters = container.enrollment_service.search_students(current_context(container), request.args.get("q"))
        return ok(
            {
                "classes": [r.to_dict() for r in rosters],
                "totalStudents": sum(len(r.students) for r in rosters),
            }
        )

    @app.route("/admin/students", methods=["GET"], endpoint="admin_students")
    @login_required
    def admin_students():
        listings = container.enrollment_service.list_all_students(current_context(container))
        return ok([row.to_dict() for row in listings])

    @app.route(
        "/classes/<int:class_id>/students/<int:enrollment_id>",
        methods=["DELETE"],
        endpoint="remove_student",
    )
    @login_required
    def remove_student(class_id: int, enrollment_id: int):
        container.enrollment_service.remove_student(class_id, enrollment_id, current_context(container))
        return ok(message="Student removed")

    @app.route("/student-register/<int:class_id>", methods=["GET"], endpoint="student_register_page")
    def student_register_page(class_id: int):
        record = container.class_service.get_public(class_id)
        return ok({"id": record.class_id, "name": record.name, "subject": record.subject, "room": record.room})

    @app.route("/student-register/<int:class_id>", methods=["POST"], endpoint="student_register")
    def student_register(class_id: int):
        fields = pick_fields(json_body(), required=("name", "roll_no"), optional=("email",))
        record = container.enrollment_service.self_register(
            class_id,
            fields["name"],
            fields["roll_no"],
            fields.get("email"),
        )
        return ok(record.to_dict(), status=201, message="Registration successful")
