from datetime import date

import pytest

from src.hr_portal.hr_portal.core.enums import LeaveType, RequestCategory
from src.hr_portal.hr_portal.core.exceptions import AuthorizationError


def test_stats_roll_up_every_area(container, admin, manager, employee):
    container.leave_service.apply(
        employee, leave_type=LeaveType.SICK_LEAVE, start_date=date(2024, 4, 1), end_date=date(2024, 4, 1), reason="Flu"
    )
    container.request_service.create_request(
        employee, category=RequestCategory.QUERY, title="Holiday calendar", description="Where is it?"
    )
    container.onboarding_service.create_submission(admin, employee_id=4)

    stats = container.dashboard_service.stats(manager)

    assert stats["headcount"]["total"] == 4
    assert {r["department"]: r["count"] for r in stats["headcount"]["by_department"]} == {
        "Engineering": 2,
        "Human Resources": 2,
    }
    assert stats["leave"]["PENDING"] == 1
    assert stats["requests"]["OPEN"] == 1
    assert stats["onboarding"]["CREATED"] == 1
    assert stats["onboarding"]["COMPLETED"] == 0


def test_inactive_employees_leave_headcount(container, admin, manager):
    container.employee_service.deactivate_employee(admin, 4, exit_date=date(2024, 3, 31))
    assert container.dashboard_service.stats(admin)["headcount"]["total"] == 3


def test_employees_cannot_read_dashboard(container, employee):
    with pytest.raises(AuthorizationError):
        container.dashboard_service.stats(employee)
