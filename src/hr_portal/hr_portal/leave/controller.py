from __future__ import annotations

from flask import Flask, request

from ..common.http import api_view, current_principal, login_required, ok, parse_body
from ..core.enums import LeaveStatus
from ..core.exceptions import ValidationError
from ..container import Container
from .schemas import ApplyLeaveBody, LeaveStatusBody


def register(app: Flask, container: Container) -> None:
    @app.route("/leave", methods=["GET"], endpoint="list_leave")
    @api_view
    @login_required
    def list_leave():
        raw = request.args.get("status")
        try:
            status = LeaveStatus(raw) if raw else None
        except ValueError:
            raise ValidationError("Unknown status filter")
        return ok({"leave_requests": container.leave_service.list_requests(current_principal(), status=status)})

    @app.route("/leave", methods=["POST"], endpoint="apply_leave")
    @api_view
    @login_required
    def apply_leave():
        body = parse_body(ApplyLeaveBody)
        leave = container.leave_service.apply(current_principal(), **body.model_dump())
        return ok({"leave_request": leave}, message="Leave request submitted", status=201)

    @app.route("/leave/<int:leave_id>", methods=["GET"], endpoint="get_leave")
    @api_view
    @login_required
    def get_leave(leave_id: int):
        return ok({"leave_request": container.leave_service.get_request(current_principal(), leave_id)})

    @app.route("/leave/<int:leave_id>", methods=["PUT"], endpoint="update_leave")
    @api_view
    @login_required
    def update_leave(leave_id: int):
        body = parse_body(LeaveStatusBody)
        leave = container.leave_service.change_status(
            current_principal(),
            leave_id,
            status=body.status,
            comments=body.comments,
            expected_version=body.version,
        )
        return ok({"leave_request": leave}, message=f"Leave request {leave.status.value.lower()}")

    @app.route("/leave/<int:leave_id>", methods=["DELETE"], endpoint="delete_leave")
    @api_view
    @login_required
    def delete_leave(leave_id: int):
        container.leave_service.delete_request(current_principal(), leave_id)
        return ok(message="Leave request deleted")
