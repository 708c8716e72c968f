from __future__ import annotations

import pytest

from src.hr_portal.hr_portal.main import create_app


@pytest.fixture
def app(monkeypatch, container):
    monkeypatch.setenv("APP_ENV", "testing")
    return create_app(container)


@pytest.fixture
def login(app, demo_password):
    def _login(email):
        client = app.test_client()
        resp = client.post("/auth/login", json={"email": email, "password": demo_password})
        assert resp.status_code == 200, resp.get_json()
        return client

    return _login


@pytest.fixture
def as_employee(login):
    return login("employee@hrportal.local")


@pytest.fixture
def as_manager(login):
    return login("manager@hrportal.local")


@pytest.fixture
def as_admin(login):
    return login("admin@hrportal.local")


def test_anonymous_calls_get_401_envelope(app):
    resp = app.test_client().get("/requests")
    assert resp.status_code == 401
    assert resp.get_json() == {"success": False, "error": "Unauthorized"}


def test_login_rejects_bad_password(app):
    resp = app.test_client().post("/auth/login", json={"email": "employee@hrportal.local", "password": "nope"})
    assert resp.status_code == 401
    assert resp.get_json()["success"] is False


def test_login_and_me(as_employee):
    body = as_employee.get("/auth/me").get_json()
    assert body["success"] is True
    assert body["data"]["user"]["role"] == "EMPLOYEE"
    assert body["data"]["user"]["employee_id"] == 3

    assert as_employee.post("/auth/logout").status_code == 200
    assert as_employee.get("/auth/me").status_code == 401


def test_schema_errors_are_400_with_details(as_employee):
    resp = as_employee.post("/requests", json={"title": "No category"})
    assert resp.status_code == 400
    body = resp.get_json()
    assert body["error"] == "Validation error"
    assert any(d["loc"] == ["category"] for d in body["details"])


def test_request_flow_over_http(as_employee, as_manager):
    created = as_employee.post(
        "/requests", json={"category": "PAYROLL", "title": "Payslip missing", "description": "March payslip"}
    )
    assert created.status_code == 201
    req = created.get_json()["data"]["request"]
    assert req["status"] == "OPEN"
    assert req["version"] == 1

    denied = as_employee.put(f"/requests/{req['request_id']}", json={"status": "IN_PROGRESS"})
    assert denied.status_code == 400

    started = as_manager.put(f"/requests/{req['request_id']}", json={"status": "IN_PROGRESS", "version": 1})
    assert started.status_code == 200
    assert started.get_json()["data"]["request"]["version"] == 2

    stale = as_manager.put(f"/requests/{req['request_id']}", json={"status": "RESOLVED", "version": 1})
    assert stale.status_code == 409
    assert stale.get_json()["success"] is False

    nxt = as_manager.get(f"/requests/{req['request_id']}/transitions").get_json()["data"]["next_statuses"]
    assert set(nxt) == {"WAITING_INFO", "RESOLVED"}


def test_missing_request_is_404(as_manager):
    resp = as_manager.get("/requests/999")
    assert resp.status_code == 404
    assert resp.get_json() == {"success": False, "error": "Request not found"}


def test_unknown_route_and_method(app):
    client = app.test_client()
    assert client.get("/nowhere").get_json() == {"success": False, "error": "Not found"}
    resp = client.delete("/dashboard/stats")
    assert resp.status_code == 405
    assert resp.get_json()["error"] == "Method not allowed"


def test_dashboard_is_management_only(as_employee, as_manager):
    assert as_employee.get("/dashboard/stats").status_code == 403

    data = as_manager.get("/dashboard/stats").get_json()["data"]
    assert data["headcount"]["total"] == 4
    assert data["leave"]["total"] == 0
    assert set(data) == {"headcount", "leave", "onboarding", "requests", "regularizations"}


def test_leave_dates_and_status_over_http(as_employee, as_manager):
    bad = as_employee.post(
        "/leave", json={"leave_type": "VACATION", "start_date": "2024-04-05", "end_date": "2024-04-01", "reason": "x"}
    )
    assert bad.status_code == 400

    created = as_employee.post(
        "/leave", json={"leave_type": "VACATION", "start_date": "2024-04-01", "end_date": "2024-04-03", "reason": "Trip"}
    )
    assert created.status_code == 201
    leave = created.get_json()["data"]["leave_request"]
    assert leave["start_date"] == "2024-04-01"

    approved = as_manager.put(f"/leave/{leave['leave_id']}", json={"status": "APPROVED", "version": leave["version"]})
    assert approved.status_code == 200
    assert approved.get_json()["message"] == "Leave request approved"

    fetched = as_employee.get(f"/leave/{leave['leave_id']}").get_json()["data"]["leave_request"]
    assert fetched["status"] == "APPROVED"


def test_payroll_money_is_serialized_as_strings(as_manager, as_employee):
    resp = as_manager.post("/payroll/calculate", json={"employee_id": 3, "month": 3, "year": 2024})
    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert data["calculation"]["net_salary"] == "23046.67"
    assert data["validation"]["is_valid"] is True

    assert as_employee.post("/payroll/calculate", json={"employee_id": 3, "month": 3, "year": 2024}).status_code == 403


def test_admin_runs_payroll_and_employee_downloads_payslip(as_admin, as_employee):
    run = as_admin.post("/payroll/process", json={"month": 3, "year": 2024, "employee_ids": [3]})
    assert run.status_code == 200
    payroll_id = run.get_json()["data"]["results"][0]["payroll_id"]

    slip = as_admin.post("/payroll/payslips", json={"payroll_id": payroll_id})
    assert slip.status_code == 201
    payslip_id = slip.get_json()["data"]["payslip"]["payslip_id"]

    downloaded = as_employee.post(f"/payroll/payslips/{payslip_id}/download")
    assert downloaded.status_code == 200
    assert downloaded.get_json()["data"]["payslip"]["status"] == "DOWNLOADED"


def test_check_in_then_out_over_http(as_employee, as_manager):
    first = as_employee.post("/attendance", json={"action": "checkin", "location": "Office"})
    assert first.status_code == 200
    assert first.get_json()["message"] == "Checked in"
    record = first.get_json()["data"]["attendance"]
    assert record["status"] == "PRESENT"
    assert record["check_in_location"] == "Office"

    again = as_employee.post("/attendance", json={"action": "checkin"})
    assert again.status_code == 400
    assert again.get_json()["error"] == "Already checked in today"

    out = as_employee.post("/attendance", json={"action": "checkout"})
    assert out.get_json()["message"] == "Checked out"
    assert out.get_json()["data"]["attendance"]["check_out"] is not None

    assert as_employee.post("/attendance", json={"action": "lunch"}).status_code == 400
    assert as_employee.delete(f"/attendance/{record['attendance_id']}").status_code == 403
    listed = as_manager.get("/attendance?employee_id=3").get_json()["data"]["attendance"]
    assert [r["attendance_id"] for r in listed] == [record["attendance_id"]]


def test_regularization_over_http(as_employee, as_manager):
    record = as_employee.post("/attendance", json={"action": "checkin"}).get_json()["data"]["attendance"]

    created = as_employee.post(
        "/attendance/regularization", json={"date": record["work_date"], "reason": "Badge reader was down"}
    )
    assert created.status_code == 201
    req = created.get_json()["data"]["regularization_request"]
    assert req["status"] == "PENDING"

    assert as_employee.put(f"/attendance/regularization/{req['request_id']}", json={"status": "APPROVED"}).status_code == 403
    approved = as_manager.put(f"/attendance/regularization/{req['request_id']}", json={"status": "APPROVED"})
    assert approved.status_code == 200
    assert approved.get_json()["message"] == "Request approved"

    fetched = as_employee.get(f"/attendance/{record['attendance_id']}").get_json()["data"]["attendance"]
    assert fetched["is_regularized"] is True
    assert as_manager.get("/attendance/regularization?status=BOGUS").status_code == 400


def test_employee_profile_update_over_http(as_employee, as_admin):
    resp = as_employee.put("/employees/3", json={"first_name": "Evander"})
    assert resp.status_code == 200
    assert resp.get_json()["data"]["employee"]["first_name"] == "Evander"

    assert as_employee.put("/employees/3", json={"salary": "99999"}).status_code == 403
    assert as_employee.put("/employees/4", json={"first_name": "Olga"}).status_code == 403

    raised = as_admin.put("/employees/3", json={"salary": "21000.00"})
    assert raised.get_json()["data"]["employee"]["salary"] == "21000.00"


def test_performance_cycle_review_and_goal_over_http(as_admin, as_manager, as_employee):
    cycle = as_admin.post(
        "/performance/cycles",
        json={"name": "2024 H1", "type": "MID_YEAR", "start_date": "2024-01-01", "end_date": "2024-06-30"},
    )
    assert cycle.status_code == 201
    cycle_id = cycle.get_json()["data"]["cycle"]["cycle_id"]
    assert as_manager.post(
        "/performance/cycles",
        json={"name": "Nope", "type": "ANNUAL", "start_date": "2024-01-01", "end_date": "2024-12-31"},
    ).status_code == 403

    review = as_manager.post(
        "/performance/reviews",
        json={"employee_id": 3, "cycle_id": cycle_id, "review_type": "MID_YEAR", "rating": "MEETS_EXPECTATIONS"},
    )
    assert review.status_code == 201
    review_id = review.get_json()["data"]["review"]["review_id"]

    mine = as_employee.get("/performance/reviews").get_json()["data"]["reviews"]
    assert [r["review_id"] for r in mine] == [review_id]
    assert as_employee.put(f"/performance/reviews/{review_id}", json={"rating": "EXCEEDS_EXPECTATIONS"}).status_code == 403
    answered = as_employee.put(f"/performance/reviews/{review_id}", json={"comments": "Thanks"})
    assert answered.get_json()["data"]["review"]["comments"] == "Thanks"

    assert as_admin.delete(f"/performance/cycles/{cycle_id}").status_code == 400

    goal = as_employee.post(
        "/performance/goals",
        json={
            "title": "Ship the API",
            "description": "Finish v1",
            "target": "All endpoints live",
            "category": "DEVELOPMENT",
            "start_date": "2024-01-01",
            "end_date": "2024-06-30",
        },
    )
    assert goal.status_code == 201
    goal_id = goal.get_json()["data"]["goal"]["goal_id"]
    progressed = as_employee.post(f"/performance/goals/{goal_id}/updates", json={"update_text": "Half done", "progress": 50})
    assert progressed.get_json()["data"]["goal"]["progress"] == 50
    assert as_manager.get(f"/performance/goals/{goal_id}").status_code == 404


def test_onboarding_step_accepts_post_and_put(container, admin, as_employee):
    submission = container.onboarding_service.create_submission(admin, employee_id=3)
    first, second = submission.steps[0], submission.steps[1]

    posted = as_employee.post(f"/onboarding/steps/{first.step_id}", json={"step_data": {"phone": "555-0100"}})
    assert posted.status_code == 200
    assert posted.get_json()["data"]["step"]["status"] == "SUBMITTED"

    put = as_employee.put(f"/onboarding/steps/{second.step_id}", json={"step_data": {"bank": "Acme"}})
    assert put.status_code == 200
