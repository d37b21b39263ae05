from __future__ import annotations

import io
from urllib.parse import quote

import qrcode
from flask import Flask, request, send_file

from ..common.payloads import pick_fields
from ..common.web import current_context, json_body, login_required, ok
from ..core.exceptions import ValidationError
from ..container import Container
from .service import NewClass


def _qr_png(url: str) -> io.BytesIO:
    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_L,
        box_size=10,
        border=2,
    )
    qr.add_data(url)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white")

    buf = io.BytesIO()
    img.save(buf, format="PNG")
    buf.seek(0)
    return buf


def register(app: Flask, container: Container) -> None:
    @app.route("/classes", methods=["GET"], endpoint="class_list")
    @login_required
    def class_list():
        records = container.class_service.list_accessible_classes(
            current_context(container),
            name=request.args.get("name") or None,
            room=request.args.get("room") or None,
            subject=request.args.get("subject") or None,
        )
        return ok([r.to_dict() for r in records])

    @app.route("/classes", methods=["POST"], endpoint="create_class")
    @login_required
    def create_class():
        new = NewClass.from_mapping(json_body())
        record = container.class_service.create_from(new, creator=current_context(container))
        return ok(record.to_dict(), status=201, message="Class created")

    @app.route("/classes/bulk", methods=["POST"], endpoint="bulk_create_classes")
    @login_required
    def bulk_create_classes():
        fields = pick_fields(json_body(), required=("classes",))
        rows = fields["classes"]
        if not isinstance(rows, list):
            raise ValidationError("classes must be a list")
        outcomes = container.class_service.create_bulk(rows, creator=current_context(container))
        return ok([o.to_dict() for o in outcomes])

    @app.route("/classes/join", methods=["POST"], endpoint="join_class")
    @login_required
    def join_class():
        fields = pick_fields(json_body(), required=("code",))
        result = container.class_service.join_by_code(str(fields["code"]), teacher=current_context(container))
        message = "You are already a teacher of this class" if result.already_member else "Joined class"
        return ok(result.class_record.to_dict(), message=message)

    @app.route("/classes/<int:class_id>", methods=["GET"], endpoint="class_detail")
    @login_required
    def class_detail(class_id: int):
        ctx = current_context(container)
        record = container.class_service.get_class(ctx, class_id)
        students = container.enrollment_service.list_students(class_id, ctx)
        data = record.to_dict()
        data["students"] = [s.to_dict() for s in students]
        return ok(data)

    @app.route("/classes/<int:class_id>", methods=["DELETE"], endpoint="delete_class")
    @login_required
    def delete_class(class_id: int):
        container.class_service.delete_class(current_context(container), class_id)
        return ok(message="Class deleted")

    @app.route("/classes/<int:class_id>/active", methods=["POST"], endpoint="set_class_active")
    @login_required
    def set_class_active(class_id: int):
        fields = pick_fields(json_body(), required=("active",))
        active = fields["active"]
        if isinstance(active, str):
            active = active.strip().lower() in {"1", "true", "yes", "on"}
        record = container.class_service.set_active(current_context(container), class_id, is_active=bool(active))
        return ok(record.to_dict())

    @app.route("/classes/<int:class_id>/registration-qr", methods=["GET"], endpoint="registration_qr")
    @login_required
    def registration_qr(class_id: int):
        record = container.class_service.get_class(current_context(container), class_id)
        base = str(app.config.get("PUBLIC_BASE_URL") or request.host_url).rstrip("/")
        url = f"{base}/student-register/{record.class_id}"
        return send_file(_qr_png(url), mimetype="image/png")

    @app.route("/students/<int:enrollment_id>/qrcode", methods=["GET"], endpoint="student_portal_qr")
    @login_required
    def student_portal_qr(enrollment_id: int):
        student = container.enrollment_service.get_student(enrollment_id, current_context(container))
        base = str(app.config.get("PUBLIC_BASE_URL") or request.host_url).rstrip("/")
        url = f"{base}/student-summary?rollno={quote(student.roll_no)}"
        return send_file(_qr_png(url), mimetype="image/png")
