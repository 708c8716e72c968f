from __future__ import annotations

from flask import Flask, request

from ..common.http import api_view, current_principal, login_required, ok, parse_body
from ..core.enums import RequestStatus
from ..core.exceptions import ValidationError
from ..container import Container
from ..workflow.definitions import REQUEST_WORKFLOW
from .schemas import CommentBody, CreateRequestBody, UpdateRequestBody


def register(app: Flask, container: Container) -> None:
    def _status_arg():
        raw = request.args.get("status")
        if not raw:
            return None
        try:
            return RequestStatus(raw)
        except ValueError:
            raise ValidationError("Unknown status filter")

    @app.route("/requests", methods=["GET"], endpoint="list_requests")
    @api_view
    @login_required
    def list_requests():
        items = container.request_service.list_requests(
            current_principal(),
            status=_status_arg(),
            assigned_to_me=request.args.get("assigned") == "me",
        )
        return ok({"requests": items})

    @app.route("/requests", methods=["POST"], endpoint="create_request")
    @api_view
    @login_required
    def create_request():
        body = parse_body(CreateRequestBody)
        principal = current_principal()
        request_id = container.request_service.create_request(
            principal,
            category=body.category,
            title=body.title,
            description=body.description,
        )
        created = container.request_service.get_request(principal, request_id)
        return ok({"request": created}, message="Request created", status=201)

    @app.route("/requests/stats", methods=["GET"], endpoint="request_stats")
    @api_view
    @login_required
    def request_stats():
        return ok({"stats": container.request_service.stats(current_principal())})

    @app.route("/requests/transitions", methods=["GET"], endpoint="request_transition_table")
    @api_view
    @login_required
    def request_transition_table():
        return ok({"workflow": REQUEST_WORKFLOW.name, "rules": REQUEST_WORKFLOW.as_table()})

    @app.route("/requests/<int:request_id>", methods=["GET"], endpoint="get_request")
    @api_view
    @login_required
    def get_request(request_id: int):
        return ok({"request": container.request_service.get_request(current_principal(), request_id)})

    @app.route("/requests/<int:request_id>", methods=["PUT"], endpoint="update_request")
    @api_view
    @login_required
    def update_request(request_id: int):
        body = parse_body(UpdateRequestBody)
        kwargs = {}
        if "assigned_to" in body.model_fields_set:
            kwargs["assigned_to"] = body.assigned_to
        updated = container.request_service.update_request(
            current_principal(),
            request_id,
            title=body.title,
            description=body.description,
            status=body.status,
            expected_version=body.version,
            **kwargs,
        )
        return ok({"request": updated}, message="Request updated")

    @app.route("/requests/<int:request_id>/transitions", methods=["GET"], endpoint="request_next_statuses")
    @api_view
    @login_required
    def request_next_statuses(request_id: int):
        statuses = container.request_service.valid_next_statuses(current_principal(), request_id)
        return ok({"next_statuses": [s.value for s in statuses]})

    @app.route("/requests/<int:request_id>/comments", methods=["GET"], endpoint="list_request_comments")
    @api_view
    @login_required
    def list_request_comments(request_id: int):
        return ok({"comments": container.request_service.list_comments(current_principal(), request_id)})

    @app.route("/requests/<int:request_id>/comments", methods=["POST"], endpoint="add_request_comment")
    @api_view
    @login_required
    def add_request_comment(request_id: int):
        body = parse_body(CommentBody)
        comment_id = container.request_service.add_comment(current_principal(), request_id, comment=body.comment)
        return ok({"comment_id": comment_id}, message="Comment added", status=201)
