from __future__ import annotations

from flask import Flask

from ..common.http import api_view, current_principal, login_required, ok, parse_body, query_enum, query_int
from ..container import Container
from ..core.enums import AttendanceAction, RegularizationStatus
from .schemas import MarkAttendanceBody, RegularizationBody, ReviewRegularizationBody, UpdateAttendanceBody


def register(app: Flask, container: Container) -> None:
    @app.route("/attendance", methods=["GET"], endpoint="list_attendance")
    @api_view
    @login_required
    def list_attendance():
        records = container.attendance_service.list_records(
            current_principal(),
            month=query_int("month"),
            year=query_int("year"),
            employee_id=query_int("employee_id"),
        )
        return ok({"attendance": records})

    @app.route("/attendance", methods=["POST"], endpoint="mark_attendance")
    @api_view
    @login_required
    def mark_attendance():
        body = parse_body(MarkAttendanceBody)
        record = container.attendance_service.mark(
            current_principal(), action=body.action, location=body.location, notes=body.notes
        )
        return ok({"attendance": record}, message="Checked in" if body.action == AttendanceAction.CHECKIN else "Checked out")

    @app.route("/attendance/<int:attendance_id>", methods=["GET"], endpoint="get_attendance")
    @api_view
    @login_required
    def get_attendance(attendance_id: int):
        return ok({"attendance": container.attendance_service.get_record(current_principal(), attendance_id)})

    @app.route("/attendance/<int:attendance_id>", methods=["PUT"], endpoint="update_attendance")
    @api_view
    @login_required
    def update_attendance(attendance_id: int):
        body = parse_body(UpdateAttendanceBody)
        changes = body.model_dump(exclude_unset=True)
        record = container.attendance_service.update_record(
            current_principal(), attendance_id, expected_version=changes.pop("version", None), **changes
        )
        return ok({"attendance": record}, message="Attendance updated")

    @app.route("/attendance/<int:attendance_id>", methods=["DELETE"], endpoint="delete_attendance")
    @api_view
    @login_required
    def delete_attendance(attendance_id: int):
        container.attendance_service.delete_record(current_principal(), attendance_id)
        return ok(message="Attendance record deleted")

    @app.route("/attendance/regularization", methods=["GET"], endpoint="list_regularizations")
    @api_view
    @login_required
    def list_regularizations():
        requests = container.regularization_service.list_requests(
            current_principal(), status=query_enum("status", RegularizationStatus)
        )
        return ok({"regularization_requests": requests})

    @app.route("/attendance/regularization", methods=["POST"], endpoint="request_regularization")
    @api_view
    @login_required
    def request_regularization():
        body = parse_body(RegularizationBody)
        req = container.regularization_service.request(current_principal(), work_date=body.work_date, reason=body.reason)
        return ok({"regularization_request": req}, message="Regularization request submitted", status=201)

    @app.route("/attendance/regularization/<int:request_id>", methods=["GET"], endpoint="get_regularization")
    @api_view
    @login_required
    def get_regularization(request_id: int):
        req = container.regularization_service.get_request(current_principal(), request_id)
        return ok({"regularization_request": req})

    @app.route("/attendance/regularization/<int:request_id>", methods=["PUT"], endpoint="review_regularization")
    @api_view
    @login_required
    def review_regularization(request_id: int):
        body = parse_body(ReviewRegularizationBody)
        req = container.regularization_service.review(
            current_principal(),
            request_id,
            status=body.status,
            comments=body.review_comments,
            expected_version=body.version,
        )
        return ok({"regularization_request": req}, message=f"Request {req.status.value.lower()}")
