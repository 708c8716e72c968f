from __future__ import annotations

import logging

from flask import Flask, request, session

from ..common.http import api_view, current_principal, login_required, ok, parse_body, query_int, store_principal
from ..container import Container
from .schemas import CreateEmployeeBody, DeactivateEmployeeBody, LoginBody, UpdateEmployeeBody

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    @app.route("/auth/login", methods=["POST"], endpoint="login")
    @api_view
    def login():
        body = parse_body(LoginBody)
        principal = container.auth_service.authenticate(body.email, body.password)

        session.clear()
        session.permanent = bool(body.remember_me)
        store_principal(principal)
        logger.info("User %s logged in as %s", principal.user_id, principal.role.value)
        return ok({"user": principal}, message="Login successful")

    @app.route("/auth/logout", methods=["POST"], endpoint="logout")
    @api_view
    def logout():
        session.clear()
        return ok(message="Logged out")

    @app.route("/auth/me", methods=["GET"], endpoint="me")
    @api_view
    @login_required
    def me():
        return ok({"user": current_principal()})

    @app.route("/employees", methods=["GET"], endpoint="list_employees")
    @api_view
    @login_required
    def list_employees():
        employees = container.employee_service.list_employees(
            current_principal(),
            department_id=query_int("department_id"),
            active_only=request.args.get("include_inactive") not in {"1", "true"},
        )
        return ok({"employees": employees})

    @app.route("/employees", methods=["POST"], endpoint="create_employee")
    @api_view
    @login_required
    def create_employee():
        body = parse_body(CreateEmployeeBody)
        principal = current_principal()
        employee_id = container.employee_service.create_employee(principal, **body.model_dump())
        employee = container.employee_service.get_employee(principal, employee_id)
        return ok({"employee": employee}, message="Employee created", status=201)

    @app.route("/employees/<int:employee_id>", methods=["GET"], endpoint="get_employee")
    @api_view
    @login_required
    def get_employee(employee_id: int):
        return ok({"employee": container.employee_service.get_employee(current_principal(), employee_id)})

    @app.route("/employees/<int:employee_id>", methods=["PUT"], endpoint="update_employee")
    @api_view
    @login_required
    def update_employee(employee_id: int):
        body = parse_body(UpdateEmployeeBody)
        employee = container.employee_service.update_employee(
            current_principal(), employee_id, **body.model_dump(exclude_unset=True)
        )
        return ok({"employee": employee}, message="Employee updated")

    @app.route("/employees/<int:employee_id>/deactivate", methods=["POST"], endpoint="deactivate_employee")
    @api_view
    @login_required
    def deactivate_employee(employee_id: int):
        body = parse_body(DeactivateEmployeeBody)
        container.employee_service.deactivate_employee(current_principal(), employee_id, exit_date=body.exit_date)
        return ok(message="Employee deactivated")

    @app.route("/departments", methods=["GET"], endpoint="list_departments")
    @api_view
    @login_required
    def list_departments():
        return ok({"departments": container.employee_service.list_departments()})
