from datetime import datetime

import pytest

from src.hr_portal.hr_portal.core.enums import AttendanceAction, AttendanceStatus
from src.hr_portal.hr_portal.core.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)

MORNING = datetime(2024, 3, 15, 9, 0)
EVENING = datetime(2024, 3, 15, 18, 30)


def _check_in(container, principal, now=MORNING, **kwargs):
    return container.attendance_service.mark(principal, action=AttendanceAction.CHECKIN, now=now, **kwargs)


def _check_out(container, principal, now=EVENING, **kwargs):
    return container.attendance_service.mark(principal, action=AttendanceAction.CHECKOUT, now=now, **kwargs)


def test_check_in_creates_the_day_and_check_out_completes_it(container, employee):
    record = _check_in(container, employee, location=" HQ ", notes="early start")
    assert record.status == AttendanceStatus.PRESENT
    assert record.work_date == MORNING.date()
    assert record.check_in == MORNING
    assert record.check_in_location == "HQ"
    assert record.check_out is None

    done = _check_out(container, employee, location="HQ")
    assert done.attendance_id == record.attendance_id
    assert done.check_out == EVENING
    assert done.notes == "early start"
    assert done.worked_hours == 9.5
    assert done.version == record.version + 1


def test_each_action_happens_once_a_day(container, employee):
    _check_in(container, employee)
    with pytest.raises(ValidationError, match="Already checked in today"):
        _check_in(container, employee, now=datetime(2024, 3, 15, 11, 0))
    _check_out(container, employee)
    with pytest.raises(ValidationError, match="Already checked out today"):
        _check_out(container, employee, now=datetime(2024, 3, 15, 19, 0))

    tomorrow = _check_in(container, employee, now=datetime(2024, 3, 16, 9, 0))
    assert tomorrow.check_in.date().day == 16


def test_check_out_without_check_in_still_opens_the_day(container, employee):
    record = _check_out(container, employee)
    assert record.check_in is None
    assert record.check_out == EVENING
    assert record.worked_hours == 0.0


def test_marking_needs_an_employee_record(container, manager):
    with pytest.raises(NotFoundError):
        _check_in(container, manager)


def test_losing_a_concurrent_write_is_a_conflict(container, repos, employee):
    record = _check_in(container, employee)

    def bump(_row_id):
        repos.attendance.table.before_write = None
        repos.attendance.update(attendance_id=record.attendance_id, expected_version=record.version, values={})

    repos.attendance.table.before_write = bump
    with pytest.raises(ConflictError):
        _check_out(container, employee)
    assert repos.attendance.get(attendance_id=record.attendance_id).check_out is None


def test_visibility(container, manager, employee, other_employee):
    mine = _check_in(container, employee)
    theirs = _check_in(container, other_employee)

    assert [r.attendance_id for r in container.attendance_service.list_records(employee)] == [mine.attendance_id]
    assert {r.attendance_id for r in container.attendance_service.list_records(manager)} == {
        mine.attendance_id,
        theirs.attendance_id,
    }
    only_theirs = container.attendance_service.list_records(manager, employee_id=other_employee.employee_id)
    assert [r.attendance_id for r in only_theirs] == [theirs.attendance_id]

    with pytest.raises(AuthorizationError):
        container.attendance_service.list_records(employee, employee_id=other_employee.employee_id)
    with pytest.raises(AuthorizationError):
        container.attendance_service.get_record(employee, theirs.attendance_id)
    assert container.attendance_service.get_record(manager, theirs.attendance_id) == theirs


def test_month_filter(container, employee):
    _check_in(container, employee)
    _check_in(container, employee, now=datetime(2024, 4, 2, 9, 0))

    march = container.attendance_service.list_records(employee, month=3, year=2024)
    assert [r.work_date.month for r in march] == [3]
    with pytest.raises(ValidationError):
        container.attendance_service.list_records(employee, month=13, year=2024)


def test_management_corrects_a_day(container, manager, employee):
    record = _check_in(container, employee)

    fixed = container.attendance_service.update_record(
        manager,
        record.attendance_id,
        expected_version=record.version,
        status="HALF_DAY",
        check_out=datetime(2024, 3, 15, 13, 0),
        notes="left at lunch",
    )
    assert fixed.status == AttendanceStatus.HALF_DAY
    assert fixed.worked_hours == 4.0
    assert fixed.notes == "left at lunch"

    with pytest.raises(ConflictError):
        container.attendance_service.update_record(manager, record.attendance_id, expected_version=record.version, notes="x")
    with pytest.raises(ValidationError):
        container.attendance_service.update_record(manager, record.attendance_id, check_out=datetime(2024, 3, 15, 8, 0))
    with pytest.raises(ValidationError):
        container.attendance_service.update_record(manager, record.attendance_id, status="ASLEEP")
    with pytest.raises(AuthorizationError):
        container.attendance_service.update_record(employee, record.attendance_id, notes="fine")


def test_only_admin_deletes(container, admin, manager, employee):
    record = _check_in(container, employee)
    with pytest.raises(AuthorizationError):
        container.attendance_service.delete_record(manager, record.attendance_id)

    container.attendance_service.delete_record(admin, record.attendance_id)
    with pytest.raises(NotFoundError):
        container.attendance_service.get_record(admin, record.attendance_id)
