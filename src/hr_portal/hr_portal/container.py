from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository, MySQLRegularizationRepository
from .attendance.regularization_service import RegularizationService
from .attendance.repository import AttendanceRepository, RegularizationRepository
from .attendance.service import AttendanceService
from .dashboard.service import DashboardService
from .database.connection import DBConfig, DatabaseConnection
from .leave.mysql_leave_repository import MySQLLeaveRepository
from .leave.repository import LeaveRepository
from .leave.service import LeaveService
from .onboarding.mysql_onboarding_repository import MySQLOnboardingRepository
from .onboarding.repository import OnboardingRepository
from .onboarding.service import OnboardingService
from .payroll.audit import AuditTrail
from .payroll.correction_service import CorrectionService
from .payroll.mysql_payroll_repository import (
    MySQLAuditLogRepository,
    MySQLCorrectionRepository,
    MySQLPayrollInputRepository,
    MySQLPayrollRepository,
    MySQLPayslipRepository,
    MySQLVariablePayRepository,
)
from .payroll.payslip_service import PayslipService
from .payroll.repository import (
    AuditLogRepository,
    CorrectionRepository,
    PayrollInputRepository,
    PayrollRepository,
    PayslipRepository,
    VariablePayRepository,
)
from .payroll.service import PayrollInputService, PayrollService
from .payroll.variable_pay_service import VariablePayService
from .performance.cycle_service import ReviewCycleService
from .performance.goal_service import GoalService
from .performance.mysql_performance_repository import (
    MySQLGoalRepository,
    MySQLReviewCycleRepository,
    MySQLReviewRepository,
)
from .performance.repository import GoalRepository, ReviewCycleRepository, ReviewRepository
from .performance.review_service import ReviewService
from .requests.mysql_request_repository import MySQLRequestRepository
from .requests.repository import RequestRepository
from .requests.service import RequestService
from .users.mysql_user_repository import (
    MySQLDepartmentRepository,
    MySQLEmployeeRepository,
    MySQLUserRepository,
)
from .users.repository import DepartmentRepository, EmployeeRepository, UserRepository
from .users.service import AuthService, EmployeeService


@dataclass(frozen=True)
class Repositories:
    users: UserRepository
    employees: EmployeeRepository
    departments: DepartmentRepository
    attendance: AttendanceRepository
    regularizations: RegularizationRepository
    requests: RequestRepository
    onboarding: OnboardingRepository
    payrolls: PayrollRepository
    payroll_inputs: PayrollInputRepository
    variable_pay: VariablePayRepository
    corrections: CorrectionRepository
    payslips: PayslipRepository
    audit_logs: AuditLogRepository
    leaves: LeaveRepository
    review_cycles: ReviewCycleRepository
    goals: GoalRepository
    reviews: ReviewRepository


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]
    repos: Repositories

    auth_service: AuthService
    employee_service: EmployeeService
    attendance_service: AttendanceService
    regularization_service: RegularizationService
    request_service: RequestService
    onboarding_service: OnboardingService
    payroll_service: PayrollService
    payroll_input_service: PayrollInputService
    variable_pay_service: VariablePayService
    correction_service: CorrectionService
    payslip_service: PayslipService
    leave_service: LeaveService
    review_cycle_service: ReviewCycleService
    goal_service: GoalService
    review_service: ReviewService
    dashboard_service: DashboardService


def assemble(repos: Repositories, *, conn: Optional[DatabaseConnection] = None) -> Container:
    """Wire services over any set of repositories (MySQL in the app, in-memory in tests)."""
    audit = AuditTrail(repos.audit_logs)

    return Container(
        conn=conn,
        repos=repos,
        auth_service=AuthService(repos.users, repos.employees),
        employee_service=EmployeeService(repos.users, repos.employees, repos.departments),
        attendance_service=AttendanceService(repos.attendance),
        regularization_service=RegularizationService(repos.regularizations, repos.attendance),
        request_service=RequestService(repos.requests),
        onboarding_service=OnboardingService(repos.onboarding, repos.employees),
        payroll_service=PayrollService(
            repos.payrolls,
            repos.payroll_inputs,
            repos.variable_pay,
            repos.corrections,
            repos.employees,
            repos.attendance,
            audit,
        ),
        payroll_input_service=PayrollInputService(repos.payroll_inputs, repos.payrolls, audit),
        variable_pay_service=VariablePayService(repos.variable_pay, repos.employees, audit),
        correction_service=CorrectionService(repos.corrections, repos.payrolls, audit),
        payslip_service=PayslipService(repos.payslips, repos.payrolls, repos.payroll_inputs, repos.employees, audit),
        leave_service=LeaveService(repos.leaves),
        review_cycle_service=ReviewCycleService(repos.review_cycles),
        goal_service=GoalService(repos.goals),
        review_service=ReviewService(repos.reviews, repos.review_cycles, repos.goals, repos.employees),
        dashboard_service=DashboardService(
            repos.employees, repos.leaves, repos.onboarding, repos.requests, repos.regularizations
        ),
    )


def build_container(*, db_config: dict) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    repos = Repositories(
        users=MySQLUserRepository(conn),
        employees=MySQLEmployeeRepository(conn),
        departments=MySQLDepartmentRepository(conn),
        attendance=MySQLAttendanceRepository(conn),
        regularizations=MySQLRegularizationRepository(conn),
        requests=MySQLRequestRepository(conn),
        onboarding=MySQLOnboardingRepository(conn),
        payrolls=MySQLPayrollRepository(conn),
        payroll_inputs=MySQLPayrollInputRepository(conn),
        variable_pay=MySQLVariablePayRepository(conn),
        corrections=MySQLCorrectionRepository(conn),
        payslips=MySQLPayslipRepository(conn),
        audit_logs=MySQLAuditLogRepository(conn),
        leaves=MySQLLeaveRepository(conn),
        review_cycles=MySQLReviewCycleRepository(conn),
        goals=MySQLGoalRepository(conn),
        reviews=MySQLReviewRepository(conn),
    )
    return assemble(repos, conn=conn)
