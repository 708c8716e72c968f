from __future__ import annotations

import dataclasses
import threading
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Callable, Optional

import pytest
from werkzeug.security import generate_password_hash

from src.hr_portal.hr_portal.attendance.model import AttendanceRecord, RegularizationRequest
from src.hr_portal.hr_portal.container import Repositories, assemble
from src.hr_portal.hr_portal.core.enums import (
    CorrectionStatus,
    LeaveStatus,
    OnboardingStatus,
    OnboardingStepStatus,
    PayslipStatus,
    RegularizationStatus,
    RequestStatus,
    Role,
    VariablePayStatus,
)
from src.hr_portal.hr_portal.leave.model import LeaveRequest
from src.hr_portal.hr_portal.onboarding.model import OnboardingStep, OnboardingSubmission
from src.hr_portal.hr_portal.payroll.model import (
    CorrectionRequest,
    Payroll,
    PayrollInput,
    Payslip,
    VariablePayEntry,
)
from src.hr_portal.hr_portal.performance.model import GoalUpdate, PerformanceGoal, PerformanceReview, ReviewCycle
from src.hr_portal.hr_portal.requests.model import EmployeeRequest, RequestComment
from src.hr_portal.hr_portal.users.model import Department, Employee, Principal, User

FIXED_NOW = datetime(2024, 3, 15, 10, 0, 0)


class Rows:
    """Dict of frozen dataclasses with a version compare-and-set like the MySQL repos.

    ``before_write`` runs outside the lock right before each conditional write,
    so a test can park two threads there (e.g. on a ``threading.Barrier``).
    """

    def __init__(self, id_field: str):
        self.id_field = id_field
        self.rows: dict[int, Any] = {}
        self._next_id = 1
        self.lock = threading.Lock()
        self.before_write: Optional[Callable[[int], None]] = None

    def insert(self, build: Callable[[int], Any]) -> int:
        with self.lock:
            return self.insert_locked(build)

    def insert_locked(self, build: Callable[[int], Any]) -> int:
        row_id = self._next_id
        self._next_id += 1
        self.rows[row_id] = build(row_id)
        return row_id

    def get(self, row_id) -> Any:
        return self.rows.get(int(row_id))

    def notify(self, row_id) -> None:
        if self.before_write is not None:
            self.before_write(int(row_id))

    def current(self, row_id, expected_version: int) -> bool:
        row = self.rows.get(int(row_id))
        return row is not None and row.version == int(expected_version)

    def replace_locked(self, row_id, values: dict[str, Any]) -> None:
        row = self.rows[int(row_id)]
        self.rows[int(row_id)] = dataclasses.replace(row, version=row.version + 1, **values)

    def cas(self, row_id, expected_version: int, values: dict[str, Any]) -> bool:
        self.notify(row_id)
        with self.lock:
            if not self.current(row_id, expected_version):
                return False
            self.replace_locked(row_id, values)
            return True

    def delete(self, row_id, expected_version: Optional[int] = None) -> bool:
        with self.lock:
            row = self.rows.get(int(row_id))
            if row is None or (expected_version is not None and row.version != int(expected_version)):
                return False
            del self.rows[int(row_id)]
            return True

    def select(self, **filters) -> list:
        out = []
        for row in self.rows.values():
            if all(v is None or getattr(row, k) == v for k, v in filters.items()):
                out.append(row)
        return out


def _status_rows(items) -> list[dict]:
    counts: dict[str, int] = {}
    for item in items:
        counts[item.status.value] = counts.get(item.status.value, 0) + 1
    return [{"status": k, "count": v} for k, v in counts.items()]


class FakeUserRepo:
    def __init__(self):
        self.users: dict[int, User] = {}

    def add(self, user: User) -> User:
        self.users[user.user_id] = user
        return user

    def get_by_id(self, user_id):
        return self.users.get(int(user_id))

    def get_by_email(self, email):
        return next((u for u in self.users.values() if u.email == email), None)

    def set_active(self, user_id, *, is_active):
        user = self.users.get(int(user_id))
        if not user:
            return False
        self.users[user.user_id] = dataclasses.replace(user, is_active=is_active)
        return True


class FakeDepartmentRepo:
    def __init__(self):
        self.departments = {
            1: Department(1, "Engineering"),
            2: Department(2, "Human Resources"),
        }

    def list_all(self):
        return list(self.departments.values())

    def get_by_id(self, department_id):
        return self.departments.get(int(department_id))


class FakeEmployeeRepo:
    def __init__(self, departments: FakeDepartmentRepo, users: FakeUserRepo):
        self._departments = departments
        self._users = users
        self.employees: dict[int, Employee] = {}

    def add(self, employee: Employee) -> Employee:
        self.employees[employee.employee_id] = employee
        return employee

    def get_by_id(self, employee_id):
        return self.employees.get(int(employee_id))

    def get_by_user_id(self, user_id):
        return next((e for e in self.employees.values() if e.user_id == user_id), None)

    def get_by_email(self, email):
        return next((e for e in self.employees.values() if e.email == email), None)

    def list_employees(self, *, active_only=True, department_id=None, employee_ids=None):
        out = []
        for e in self.employees.values():
            if active_only and not e.is_active:
                continue
            if department_id is not None and e.department_id != department_id:
                continue
            if employee_ids is not None and e.employee_id not in employee_ids:
                continue
            out.append(e)
        return out

    def get_by_code(self, employee_code):
        return next((e for e in self.employees.values() if e.employee_code == employee_code), None)

    def _department_name(self, department_id):
        dept = self._departments.get_by_id(department_id) if department_id else None
        return dept.name if dept else None

    def create_with_login(self, *, user_values, employee_values):
        user_id = max(self._users.users, default=0) + 1
        employee_id = max(self.employees, default=0) + 1
        employee = Employee(
            employee_id=employee_id,
            user_id=user_id,
            department_name=self._department_name(employee_values.get("department_id")),
            **employee_values,
        )
        self._users.add(User(user_id=user_id, **user_values))
        self.employees[employee_id] = employee
        return user_id, employee_id

    def update_with_login(self, employee_id, *, user_id, employee_values, user_values):
        employee = self.employees[int(employee_id)]
        if "department_id" in employee_values:
            employee_values = {
                **employee_values,
                "department_name": self._department_name(employee_values["department_id"]),
            }
        updated = dataclasses.replace(employee, **employee_values)
        if user_values and user_id is not None:
            self._users.users[int(user_id)] = dataclasses.replace(self._users.users[int(user_id)], **user_values)
        self.employees[employee.employee_id] = updated

    def set_active(self, employee_id, *, is_active, exit_date=None):
        e = self.employees.get(int(employee_id))
        if not e:
            return False
        self.employees[e.employee_id] = dataclasses.replace(e, is_active=is_active, exit_date=exit_date)
        return True

    def headcount_by_department(self):
        counts: dict[str, int] = {}
        for e in self.employees.values():
            if e.is_active:
                name = e.department_name or "-"
                counts[name] = counts.get(name, 0) + 1
        return [{"department": k, "count": v} for k, v in counts.items()]


class FakeAttendanceRepo:
    def __init__(self, employees: FakeEmployeeRepo):
        self._employees = employees
        self.table = Rows("attendance_id")

    def list_for_employee_between(self, employee_id, start, end):
        return self.list_records(employee_id=employee_id, start=start, end=end)

    def get(self, *, attendance_id):
        return self.table.get(attendance_id)

    def find(self, *, employee_id, work_date):
        found = self.table.select(employee_id=employee_id, work_date=work_date)
        return found[0] if found else None

    def list_records(self, *, employee_id=None, start=None, end=None, limit=200):
        out = [
            r
            for r in self.table.select(employee_id=employee_id)
            if (start is None or r.work_date >= start) and (end is None or r.work_date <= end)
        ]
        return sorted(out, key=lambda r: r.work_date, reverse=True)[:limit]

    def create(self, *, employee_id, work_date, status, values):
        employee = self._employees.get_by_id(employee_id)
        return self.table.insert(
            lambda aid: AttendanceRecord(
                attendance_id=aid,
                employee_id=employee_id,
                work_date=work_date,
                status=status,
                employee_name=employee.full_name if employee else None,
                **values,
            )
        )

    def update(self, *, attendance_id, expected_version, values):
        return self.table.cas(attendance_id, expected_version, values)

    def delete(self, *, attendance_id, expected_version):
        return self.table.delete(attendance_id, expected_version)


class FakeRegularizationRepo:
    def __init__(self, attendance: FakeAttendanceRepo):
        self._attendance = attendance.table
        self.table = Rows("request_id")

    def create(self, *, employee_id, work_date, reason):
        return self.table.insert(
            lambda rid: RegularizationRequest(
                request_id=rid,
                employee_id=employee_id,
                work_date=work_date,
                reason=reason,
                status=RegularizationStatus.PENDING,
                requested_at=FIXED_NOW,
            )
        )

    def get(self, *, request_id):
        return self.table.get(request_id)

    def find(self, *, employee_id, work_date):
        found = self.table.select(employee_id=employee_id, work_date=work_date)
        return found[0] if found else None

    def list_requests(self, *, employee_id=None, status=None, limit=200):
        return self.table.select(employee_id=employee_id, status=status)[:limit]

    def review(
        self,
        *,
        request_id,
        expected_version,
        values,
        attendance_id=None,
        attendance_version=None,
        attendance_values=None,
    ):
        self.table.notify(request_id)
        with self.table.lock, self._attendance.lock:
            if not self.table.current(request_id, expected_version):
                return False
            if attendance_id is not None and not self._attendance.current(attendance_id, attendance_version):
                return False
            self.table.replace_locked(request_id, values)
            if attendance_id is not None:
                self._attendance.replace_locked(attendance_id, attendance_values)
            return True

    def count_by_status(self):
        return _status_rows(self.table.rows.values())


class FakeRequestRepo:
    def __init__(self):
        self.table = Rows("request_id")
        self.comments: list[RequestComment] = []

    def create(self, *, employee_id, category, title, description):
        return self.table.insert(
            lambda rid: EmployeeRequest(
                request_id=rid,
                employee_id=employee_id,
                category=category,
                title=title,
                description=description,
                status=RequestStatus.OPEN,
                created_at=FIXED_NOW,
            )
        )

    def get(self, *, request_id):
        req = self.table.get(request_id)
        if req is None:
            return None
        count = sum(1 for c in self.comments if c.request_id == req.request_id)
        return dataclasses.replace(req, comment_count=count)

    def list_requests(self, *, employee_id=None, status=None, assigned_to=None, limit=200):
        return self.table.select(employee_id=employee_id, status=status, assigned_to=assigned_to)[:limit]

    def update(self, *, request_id, expected_version, values):
        return self.table.cas(request_id, expected_version, values)

    def add_comment(self, *, request_id, user_id, comment):
        comment_id = len(self.comments) + 1
        self.comments.append(RequestComment(comment_id, request_id, user_id, comment, FIXED_NOW))
        return comment_id

    def list_comments(self, *, request_id):
        return [c for c in self.comments if c.request_id == request_id]

    def count_by_status(self, *, employee_id=None):
        return _status_rows(self.table.select(employee_id=employee_id))


class FakeOnboardingRepo:
    def __init__(self):
        self.submissions = Rows("submission_id")
        self.steps = Rows("step_id")

    def _decorate(self, sub):
        if sub is None:
            return None
        steps = self.list_steps(submission_id=sub.submission_id)
        return dataclasses.replace(
            sub,
            total_steps=len(steps),
            approved_steps=sum(1 for s in steps if s.status == OnboardingStepStatus.APPROVED),
        )

    def create_submission(self, *, employee_id, created_by, step_types):
        submission_id = self.submissions.insert(
            lambda sid: OnboardingSubmission(
                submission_id=sid,
                employee_id=employee_id,
                status=OnboardingStatus.CREATED,
                created_by=created_by,
                created_at=FIXED_NOW,
            )
        )
        for t in step_types:
            self.steps.insert(
                lambda step_id, t=t: OnboardingStep(
                    step_id=step_id, submission_id=submission_id, step_type=t, status=OnboardingStepStatus.PENDING
                )
            )
        return submission_id

    def get_submission(self, *, submission_id):
        return self._decorate(self.submissions.get(submission_id))

    def latest_for_employee(self, *, employee_id):
        subs = self.submissions.select(employee_id=employee_id)
        return self._decorate(max(subs, key=lambda s: s.submission_id)) if subs else None

    def list_submissions(self, *, status=None, limit=200):
        return [self._decorate(s) for s in self.submissions.select(status=status)][:limit]

    def update_submission(self, *, submission_id, expected_version, values):
        return self.submissions.cas(submission_id, expected_version, values)

    def get_step(self, *, step_id):
        return self.steps.get(step_id)

    def list_steps(self, *, submission_id):
        return sorted(self.steps.select(submission_id=submission_id), key=lambda s: s.step_id)

    def update_step(self, *, step_id, expected_version, values):
        return self.steps.cas(step_id, expected_version, values)

    def count_by_status(self):
        return _status_rows(self.submissions.rows.values())


class FakePayrollRepo:
    def __init__(self, employees: FakeEmployeeRepo, inputs: "FakePayrollInputRepo"):
        self._employees = employees
        self._inputs = inputs.table
        self.table = Rows("payroll_id")

    def get(self, *, payroll_id):
        return self.table.get(payroll_id)

    def find(self, *, employee_id, month, year):
        found = self.table.select(employee_id=employee_id, month=month, year=year)
        return found[0] if found else None

    def list_payrolls(self, *, employee_id=None, month=None, year=None, status=None, limit=200):
        return self.table.select(employee_id=employee_id, month=month, year=year, status=status)[:limit]

    def _build(self, payroll_id, values):
        employee = self._employees.get_by_id(values["employee_id"])
        return Payroll(
            payroll_id=payroll_id,
            created_at=FIXED_NOW,
            employee_name=employee.full_name if employee else None,
            department_name=employee.department_name if employee else None,
            **values,
        )

    def update(self, *, payroll_id, expected_version, values):
        return self.table.cas(payroll_id, expected_version, values)

    def save_with_input(
        self,
        *,
        payroll_values,
        input_values,
        payroll_id=None,
        payroll_version=None,
        input_id=None,
        input_version=None,
    ):
        if payroll_id is not None:
            self.table.notify(payroll_id)
        if input_id is not None:
            self._inputs.notify(input_id)
        with self.table.lock, self._inputs.lock:
            if payroll_id is not None and not self.table.current(payroll_id, payroll_version):
                return None
            if input_id is not None and not self._inputs.current(input_id, input_version):
                return None

            if payroll_id is None:
                payroll_id = self.table.insert_locked(lambda pid: self._build(pid, payroll_values))
            else:
                self.table.replace_locked(payroll_id, payroll_values)
            if input_id is None:
                input_id = self._inputs.insert_locked(
                    lambda iid: PayrollInput(input_id=iid, payroll_id=payroll_id, **input_values)
                )
            else:
                self._inputs.replace_locked(input_id, input_values)
            return payroll_id, input_id

    def count_by_status(self, *, month=None, year=None):
        return _status_rows(self.table.select(month=month, year=year))

    def net_by_department(self, *, month, year):
        return [
            {"department": p.department_name, "net_salary": p.net_salary, "status": p.status}
            for p in self.table.select(month=month, year=year)
        ]


class FakePayrollInputRepo:
    def __init__(self):
        self.table = Rows("input_id")

    def get(self, *, input_id):
        return self.table.get(input_id)

    def find(self, *, employee_id, month, year):
        found = self.table.select(employee_id=employee_id, month=month, year=year)
        return found[0] if found else None

    def list_inputs(self, *, employee_id=None, month=None, year=None, status=None, limit=200):
        return self.table.select(employee_id=employee_id, month=month, year=year, status=status)[:limit]

    def update(self, *, input_id, expected_version, values):
        return self.table.cas(input_id, expected_version, values)

    def delete(self, *, input_id):
        return self.table.delete(input_id)


class FakeVariablePayRepo:
    def __init__(self):
        self.table = Rows("entry_id")

    def get(self, *, entry_id):
        return self.table.get(entry_id)

    def list_entries(self, *, employee_id=None, month=None, year=None, status=None, limit=200):
        return self.table.select(employee_id=employee_id, month=month, year=year, status=status)[:limit]

    def create(self, *, employee_id, month, year, amount, pay_type, description, submitted_by):
        return self.table.insert(
            lambda eid: VariablePayEntry(
                entry_id=eid,
                employee_id=employee_id,
                month=month,
                year=year,
                amount=amount,
                pay_type=pay_type,
                description=description,
                status=VariablePayStatus.PENDING,
                submitted_by=submitted_by,
                created_at=FIXED_NOW,
            )
        )

    def update(self, *, entry_id, expected_version, values):
        return self.table.cas(entry_id, expected_version, values)

    def delete(self, *, entry_id):
        return self.table.delete(entry_id)

    def count_by_status(self):
        return _status_rows(self.table.rows.values())


class FakeCorrectionRepo:
    def __init__(self):
        self.table = Rows("correction_id")

    def get(self, *, correction_id):
        return self.table.get(correction_id)

    def list_corrections(self, *, employee_id=None, status=None, limit=200):
        return self.table.select(employee_id=employee_id, status=status)[:limit]

    def create(self, *, employee_id, payroll_id, month, year, correction_type, description, requested_amount, requested_by):
        return self.table.insert(
            lambda cid: CorrectionRequest(
                correction_id=cid,
                employee_id=employee_id,
                payroll_id=payroll_id,
                month=month,
                year=year,
                correction_type=correction_type,
                description=description,
                status=CorrectionStatus.PENDING,
                requested_by=requested_by,
                requested_amount=requested_amount,
                created_at=FIXED_NOW,
            )
        )

    def update(self, *, correction_id, expected_version, values):
        return self.table.cas(correction_id, expected_version, values)

    def count_by_status(self):
        return _status_rows(self.table.rows.values())


class FakePayslipRepo:
    def __init__(self):
        self.table = Rows("payslip_id")

    def get(self, *, payslip_id):
        return self.table.get(payslip_id)

    def find(self, *, employee_id, month, year):
        found = self.table.select(employee_id=employee_id, month=month, year=year)
        return found[0] if found else None

    def list_payslips(self, *, employee_id=None, month=None, year=None, limit=200):
        return self.table.select(employee_id=employee_id, month=month, year=year)[:limit]

    def create(self, *, payroll_id, employee_id, month, year, file_name, generated_by, snapshot):
        return self.table.insert(
            lambda sid: Payslip(
                payslip_id=sid,
                payroll_id=payroll_id,
                employee_id=employee_id,
                month=month,
                year=year,
                file_name=file_name,
                status=PayslipStatus.GENERATED,
                generated_by=generated_by,
                snapshot=snapshot,
                generated_at=FIXED_NOW,
            )
        )

    def update(self, *, payslip_id, expected_version, values):
        return self.table.cas(payslip_id, expected_version, values)


class FakeAuditLogRepo:
    def __init__(self):
        self.logs = []

    def add(self, log):
        self.logs.append(dataclasses.replace(log, log_id=len(self.logs) + 1, performed_at=FIXED_NOW))
        return len(self.logs)

    def list_for_payroll(self, *, payroll_id):
        return [log for log in self.logs if log.payroll_id == payroll_id]

    def actions(self) -> list[str]:
        return [log.action for log in self.logs]


class FakeLeaveRepo:
    def __init__(self):
        self.table = Rows("leave_id")

    def create(self, *, employee_id, leave_type, start_date, end_date, reason):
        return self.table.insert(
            lambda lid: LeaveRequest(
                leave_id=lid,
                employee_id=employee_id,
                leave_type=leave_type,
                start_date=start_date,
                end_date=end_date,
                reason=reason,
                status=LeaveStatus.PENDING,
                created_at=FIXED_NOW,
            )
        )

    def get(self, *, leave_id):
        return self.table.get(leave_id)

    def list_requests(self, *, employee_id=None, status=None, limit=200):
        return self.table.select(employee_id=employee_id, status=status)[:limit]

    def update(self, *, leave_id, expected_version, values):
        return self.table.cas(leave_id, expected_version, values)

    def delete(self, *, leave_id, expected_version):
        return self.table.delete(leave_id, expected_version)

    def count_by_status(self):
        return _status_rows(self.table.rows.values())


class FakeReviewRepo:
    def __init__(self, employees: FakeEmployeeRepo, cycles: "FakeReviewCycleRepo"):
        self._employees = employees
        self._cycles = cycles
        self.table = Rows("review_id")

    def _decorate(self, review):
        if review is None:
            return None
        employee = self._employees.get_by_id(review.employee_id)
        cycle = self._cycles.table.get(review.cycle_id)
        return dataclasses.replace(
            review,
            employee_name=employee.full_name if employee else None,
            cycle_name=cycle.name if cycle else None,
        )

    def create(self, *, values):
        return self.table.insert(lambda rid: PerformanceReview(review_id=rid, created_at=FIXED_NOW, **values))

    def get(self, *, review_id):
        return self._decorate(self.table.get(review_id))

    def list_reviews(self, *, employee_id=None, cycle_id=None, status=None, limit=200):
        rows = self.table.select(employee_id=employee_id, cycle_id=cycle_id, status=status)
        return [self._decorate(r) for r in rows][:limit]

    def update(self, *, review_id, expected_version, values):
        return self.table.cas(review_id, expected_version, values)

    def delete(self, *, review_id, expected_version):
        return self.table.delete(review_id, expected_version)


class FakeReviewCycleRepo:
    def __init__(self):
        self.table = Rows("cycle_id")
        self.reviews: Optional[FakeReviewRepo] = None

    def _decorate(self, cycle):
        if cycle is None:
            return None
        return dataclasses.replace(cycle, review_count=self._review_count(cycle.cycle_id))

    def _review_count(self, cycle_id) -> int:
        return len(self.reviews.table.select(cycle_id=cycle_id)) if self.reviews else 0

    def create(self, *, values):
        return self.table.insert(lambda cid: ReviewCycle(cycle_id=cid, created_at=FIXED_NOW, **values))

    def get(self, *, cycle_id):
        return self._decorate(self.table.get(cycle_id))

    def list_cycles(self, *, status=None, limit=200):
        return [self._decorate(c) for c in self.table.select(status=status)][:limit]

    def update(self, *, cycle_id, expected_version, values):
        return self.table.cas(cycle_id, expected_version, values)

    def delete(self, *, cycle_id, expected_version):
        if self._review_count(cycle_id):
            return False
        return self.table.delete(cycle_id, expected_version)


class FakeGoalRepo:
    def __init__(self):
        self.table = Rows("goal_id")
        self.updates: list[GoalUpdate] = []

    def create(self, *, employee_id, values):
        return self.table.insert(
            lambda gid: PerformanceGoal(goal_id=gid, employee_id=employee_id, created_at=FIXED_NOW, **values)
        )

    def get(self, *, goal_id):
        return self.table.get(goal_id)

    def list_goals(self, *, employee_id, status=None, category=None, limit=200):
        return self.table.select(employee_id=employee_id, status=status, category=category)[:limit]

    def update(self, *, goal_id, expected_version, values):
        return self.table.cas(goal_id, expected_version, values)

    def delete(self, *, goal_id, expected_version):
        return self.table.delete(goal_id, expected_version)

    def add_update(self, *, goal_id, expected_version, update_text, progress, created_by):
        self.table.notify(goal_id)
        with self.table.lock:
            if not self.table.current(goal_id, expected_version):
                return None
            self.table.replace_locked(goal_id, {"progress": progress})
            update_id = len(self.updates) + 1
            self.updates.append(GoalUpdate(update_id, int(goal_id), update_text, progress, created_by, FIXED_NOW))
            return update_id

    def list_updates(self, *, goal_id):
        return [u for u in self.updates if u.goal_id == int(goal_id)]


# Demo people: user ids match employee ids.
ADMIN = Principal(user_id=1, role=Role.ADMIN, name="Admin Demo", email="admin@hrportal.local")
MANAGER = Principal(user_id=2, role=Role.MANAGER, name="Maya Manager", email="manager@hrportal.local")
EMPLOYEE = Principal(user_id=3, role=Role.EMPLOYEE, employee_id=3, name="Evan Employee", email="employee@hrportal.local")
OTHER_EMPLOYEE = Principal(user_id=4, role=Role.EMPLOYEE, employee_id=4, name="Olga Other", email="olga@hrportal.local")

DEMO_PASSWORD = "secret123"


def _seed_people(users: FakeUserRepo, employees: FakeEmployeeRepo) -> None:
    people = [
        (ADMIN, "Admin", "Demo", 2, "95000.00"),
        (MANAGER, "Maya", "Manager", 1, "72000.00"),
        (EMPLOYEE, "Evan", "Employee", 1, "18000.00"),
        (OTHER_EMPLOYEE, "Olga", "Other", 2, "30000.00"),
    ]
    password_hash = generate_password_hash(DEMO_PASSWORD)
    for principal, first, last, dept_id, salary in people:
        users.add(User(principal.user_id, principal.name, principal.email, password_hash, principal.role))
        employees.add(
            Employee(
                employee_id=principal.user_id,
                user_id=principal.user_id,
                employee_code=f"EMP{principal.user_id:03d}",
                first_name=first,
                last_name=last,
                email=principal.email,
                department_id=dept_id,
                position=None,
                salary=Decimal(salary),
                hire_date=date(2020, 1, 6),
                department_name="Engineering" if dept_id == 1 else "Human Resources",
            )
        )


@pytest.fixture
def repos() -> Repositories:
    users = FakeUserRepo()
    departments = FakeDepartmentRepo()
    employees = FakeEmployeeRepo(departments, users)
    _seed_people(users, employees)
    payroll_inputs = FakePayrollInputRepo()
    attendance = FakeAttendanceRepo(employees)
    review_cycles = FakeReviewCycleRepo()
    reviews = FakeReviewRepo(employees, review_cycles)
    review_cycles.reviews = reviews
    return Repositories(
        users=users,
        employees=employees,
        departments=departments,
        attendance=attendance,
        regularizations=FakeRegularizationRepo(attendance),
        requests=FakeRequestRepo(),
        onboarding=FakeOnboardingRepo(),
        payrolls=FakePayrollRepo(employees, payroll_inputs),
        payroll_inputs=payroll_inputs,
        variable_pay=FakeVariablePayRepo(),
        corrections=FakeCorrectionRepo(),
        payslips=FakePayslipRepo(),
        audit_logs=FakeAuditLogRepo(),
        leaves=FakeLeaveRepo(),
        review_cycles=review_cycles,
        goals=FakeGoalRepo(),
        reviews=reviews,
    )


@pytest.fixture
def container(repos):
    return assemble(repos)


@pytest.fixture
def admin():
    return ADMIN


@pytest.fixture
def manager():
    return MANAGER


@pytest.fixture
def employee():
    return EMPLOYEE


@pytest.fixture
def other_employee():
    return OTHER_EMPLOYEE


@pytest.fixture
def demo_password():
    return DEMO_PASSWORD
