from __future__ import annotations

from ..core.enums import (
    CorrectionStatus,
    CycleStatus,
    GoalStatus,
    LeaveStatus,
    OnboardingStatus,
    OnboardingStepStatus,
    PayrollInputStatus,
    PayrollStatus,
    PayslipStatus,
    RegularizationStatus,
    RequestStatus,
    ReviewStatus,
    Role,
    VariablePayStatus,
)
from .transitions import Workflow, rule

E = Role.EMPLOYEE
M = Role.MANAGER
A = Role.ADMIN


REQUEST_WORKFLOW = Workflow(
    name="employee_request",
    status_enum=RequestStatus,
    initial=RequestStatus.OPEN,
    terminal=frozenset({RequestStatus.CLOSED}),
    rules=(
        rule(RequestStatus.OPEN, RequestStatus.IN_PROGRESS, {M, A}, "Start working on request"),
        rule(RequestStatus.IN_PROGRESS, RequestStatus.WAITING_INFO, {M, A}, "Need more information"),
        rule(RequestStatus.IN_PROGRESS, RequestStatus.RESOLVED, {M, A}, "Request completed"),
        rule(RequestStatus.WAITING_INFO, RequestStatus.IN_PROGRESS, {M, A}, "Continue working"),
        rule(RequestStatus.WAITING_INFO, RequestStatus.RESOLVED, {M, A}, "Request completed"),
        rule(RequestStatus.RESOLVED, RequestStatus.CLOSED, {E, A}, "Resolution confirmed"),
        rule(RequestStatus.IN_PROGRESS, RequestStatus.CLOSED, {A}, "Admin closes request"),
        rule(RequestStatus.WAITING_INFO, RequestStatus.CLOSED, {A}, "Admin closes request"),
    ),
)

ONBOARDING_STEP_WORKFLOW = Workflow(
    name="onboarding_step",
    status_enum=OnboardingStepStatus,
    initial=OnboardingStepStatus.PENDING,
    terminal=frozenset({OnboardingStepStatus.APPROVED}),
    rules=(
        rule(OnboardingStepStatus.PENDING, OnboardingStepStatus.SUBMITTED, {E}, "Employee submits step"),
        rule(OnboardingStepStatus.REJECTED, OnboardingStepStatus.SUBMITTED, {E}, "Employee resubmits step"),
        rule(OnboardingStepStatus.CHANGES_REQUESTED, OnboardingStepStatus.SUBMITTED, {E}, "Employee resubmits step"),
        rule(OnboardingStepStatus.SUBMITTED, OnboardingStepStatus.APPROVED, {M, A}, "Reviewer approves"),
        rule(OnboardingStepStatus.SUBMITTED, OnboardingStepStatus.REJECTED, {M, A}, "Reviewer rejects"),
        rule(OnboardingStepStatus.SUBMITTED, OnboardingStepStatus.CHANGES_REQUESTED, {M, A}, "Reviewer asks for changes"),
    ),
)

ONBOARDING_SUBMISSION_WORKFLOW = Workflow(
    name="onboarding_submission",
    status_enum=OnboardingStatus,
    initial=OnboardingStatus.CREATED,
    terminal=frozenset({OnboardingStatus.COMPLETED, OnboardingStatus.CANCELLED}),
    rules=(
        rule(OnboardingStatus.CREATED, OnboardingStatus.CANCELLED, {A}, "Admin cancels onboarding"),
        rule(OnboardingStatus.IN_PROGRESS, OnboardingStatus.CANCELLED, {A}, "Admin cancels onboarding"),
    ),
)

VARIABLE_PAY_WORKFLOW = Workflow(
    name="variable_pay",
    status_enum=VariablePayStatus,
    initial=VariablePayStatus.PENDING,
    terminal=frozenset({VariablePayStatus.APPROVED, VariablePayStatus.REJECTED}),
    rules=(
        rule(VariablePayStatus.PENDING, VariablePayStatus.APPROVED, {M, A}, "Approve entry"),
        rule(VariablePayStatus.PENDING, VariablePayStatus.REJECTED, {M, A}, "Reject entry"),
    ),
)

PAYROLL_INPUT_WORKFLOW = Workflow(
    name="payroll_input",
    status_enum=PayrollInputStatus,
    initial=PayrollInputStatus.DRAFT,
    terminal=frozenset({PayrollInputStatus.PROCESSED}),
    rules=(
        rule(PayrollInputStatus.DRAFT, PayrollInputStatus.PENDING_APPROVAL, {M, A}, "Send for approval"),
        rule(PayrollInputStatus.PENDING_APPROVAL, PayrollInputStatus.APPROVED, {A}, "Approve input"),
        rule(PayrollInputStatus.PENDING_APPROVAL, PayrollInputStatus.REJECTED, {A}, "Reject input"),
        rule(PayrollInputStatus.REJECTED, PayrollInputStatus.DRAFT, {M, A}, "Rework input"),
        rule(PayrollInputStatus.APPROVED, PayrollInputStatus.PROCESSED, {A}, "Process input"),
    ),
)

PAYROLL_WORKFLOW = Workflow(
    name="payroll",
    status_enum=PayrollStatus,
    initial=PayrollStatus.PENDING,
    terminal=frozenset({PayrollStatus.PAID}),
    rules=(
        rule(PayrollStatus.PENDING, PayrollStatus.PROCESSED, {A}, "Process payroll"),
        rule(PayrollStatus.PROCESSED, PayrollStatus.PAID, {A}, "Mark as paid"),
    ),
)

CORRECTION_WORKFLOW = Workflow(
    name="payroll_correction",
    status_enum=CorrectionStatus,
    initial=CorrectionStatus.PENDING,
    terminal=frozenset({CorrectionStatus.RESOLVED, CorrectionStatus.REJECTED}),
    rules=(
        rule(CorrectionStatus.PENDING, CorrectionStatus.UNDER_REVIEW, {M, A}, "Start review"),
        rule(CorrectionStatus.PENDING, CorrectionStatus.APPROVED, {M, A}, "Approve correction"),
        rule(CorrectionStatus.PENDING, CorrectionStatus.REJECTED, {M, A}, "Reject correction"),
        rule(CorrectionStatus.UNDER_REVIEW, CorrectionStatus.APPROVED, {M, A}, "Approve correction"),
        rule(CorrectionStatus.UNDER_REVIEW, CorrectionStatus.REJECTED, {M, A}, "Reject correction"),
        rule(CorrectionStatus.APPROVED, CorrectionStatus.RESOLVED, {M, A}, "Correction applied"),
    ),
)

LEAVE_WORKFLOW = Workflow(
    name="leave_request",
    status_enum=LeaveStatus,
    initial=LeaveStatus.PENDING,
    terminal=frozenset({LeaveStatus.REJECTED, LeaveStatus.CANCELLED}),
    rules=(
        rule(LeaveStatus.PENDING, LeaveStatus.APPROVED, {M, A}, "Approve leave"),
        rule(LeaveStatus.PENDING, LeaveStatus.REJECTED, {M, A}, "Reject leave"),
        rule(LeaveStatus.PENDING, LeaveStatus.CANCELLED, {E, M, A}, "Withdraw leave"),
        rule(LeaveStatus.APPROVED, LeaveStatus.CANCELLED, {A}, "Revoke approved leave"),
    ),
)

PAYSLIP_WORKFLOW = Workflow(
    name="payslip",
    status_enum=PayslipStatus,
    initial=PayslipStatus.GENERATED,
    terminal=frozenset({PayslipStatus.ARCHIVED}),
    rules=(
        rule(PayslipStatus.GENERATED, PayslipStatus.DOWNLOADED, {E, M, A}, "Payslip downloaded"),
        rule(PayslipStatus.GENERATED, PayslipStatus.ARCHIVED, {A}, "Archive payslip"),
        rule(PayslipStatus.DOWNLOADED, PayslipStatus.ARCHIVED, {A}, "Archive payslip"),
    ),
)

REGULARIZATION_WORKFLOW = Workflow(
    name="attendance_regularization",
    status_enum=RegularizationStatus,
    initial=RegularizationStatus.PENDING,
    terminal=frozenset({RegularizationStatus.APPROVED, RegularizationStatus.REJECTED}),
    rules=(
        rule(RegularizationStatus.PENDING, RegularizationStatus.APPROVED, {M, A}, "Approve regularization"),
        rule(RegularizationStatus.PENDING, RegularizationStatus.REJECTED, {M, A}, "Reject regularization"),
    ),
)

REVIEW_CYCLE_WORKFLOW = Workflow(
    name="review_cycle",
    status_enum=CycleStatus,
    initial=CycleStatus.ACTIVE,
    terminal=frozenset({CycleStatus.COMPLETED, CycleStatus.CANCELLED}),
    rules=(
        rule(CycleStatus.DRAFT, CycleStatus.ACTIVE, {A}, "Open cycle"),
        rule(CycleStatus.DRAFT, CycleStatus.CANCELLED, {A}, "Cancel cycle"),
        rule(CycleStatus.ACTIVE, CycleStatus.COMPLETED, {A}, "Close cycle"),
        rule(CycleStatus.ACTIVE, CycleStatus.CANCELLED, {A}, "Cancel cycle"),
    ),
)

GOAL_WORKFLOW = Workflow(
    name="performance_goal",
    status_enum=GoalStatus,
    initial=GoalStatus.ACTIVE,
    terminal=frozenset({GoalStatus.COMPLETED, GoalStatus.CANCELLED}),
    rules=(
        rule(GoalStatus.ACTIVE, GoalStatus.COMPLETED, {E, M, A}, "Goal achieved"),
        rule(GoalStatus.ACTIVE, GoalStatus.ON_HOLD, {E, M, A}, "Pause goal"),
        rule(GoalStatus.ACTIVE, GoalStatus.CANCELLED, {E, M, A}, "Drop goal"),
        rule(GoalStatus.ON_HOLD, GoalStatus.ACTIVE, {E, M, A}, "Resume goal"),
        rule(GoalStatus.ON_HOLD, GoalStatus.CANCELLED, {E, M, A}, "Drop goal"),
    ),
)

PERFORMANCE_REVIEW_WORKFLOW = Workflow(
    name="performance_review",
    status_enum=ReviewStatus,
    initial=ReviewStatus.PENDING,
    terminal=frozenset({ReviewStatus.COMPLETED, ReviewStatus.CANCELLED}),
    rules=(
        rule(ReviewStatus.PENDING, ReviewStatus.IN_PROGRESS, {M, A}, "Start review"),
        rule(ReviewStatus.PENDING, ReviewStatus.COMPLETED, {M, A}, "Complete review"),
        rule(ReviewStatus.PENDING, ReviewStatus.CANCELLED, {M, A}, "Cancel review"),
        rule(ReviewStatus.IN_PROGRESS, ReviewStatus.COMPLETED, {M, A}, "Complete review"),
        rule(ReviewStatus.IN_PROGRESS, ReviewStatus.CANCELLED, {A}, "Admin cancels review"),
    ),
)

ALL_WORKFLOWS = (
    REQUEST_WORKFLOW,
    ONBOARDING_STEP_WORKFLOW,
    ONBOARDING_SUBMISSION_WORKFLOW,
    VARIABLE_PAY_WORKFLOW,
    PAYROLL_INPUT_WORKFLOW,
    PAYROLL_WORKFLOW,
    CORRECTION_WORKFLOW,
    LEAVE_WORKFLOW,
    PAYSLIP_WORKFLOW,
    REGULARIZATION_WORKFLOW,
    REVIEW_CYCLE_WORKFLOW,
    GOAL_WORKFLOW,
    PERFORMANCE_REVIEW_WORKFLOW,
)
