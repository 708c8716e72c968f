from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User role used for authorization."""

    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    EMPLOYEE = "EMPLOYEE"

    @property
    def is_management(self) -> bool:
        return self in MANAGEMENT_ROLES

    @property
    def is_admin(self) -> bool:
        return self is Role.ADMIN


MANAGEMENT_ROLES = frozenset({Role.MANAGER, Role.ADMIN})
ALL_ROLES = frozenset(Role)


class RequestStatus(str, Enum):
    """Employee service request lifecycle."""

    OPEN = "OPEN"
    IN_PROGRESS = "IN_PROGRESS"
    WAITING_INFO = "WAITING_INFO"
    RESOLVED = "RESOLVED"
    CLOSED = "CLOSED"


class RequestCategory(str, Enum):
    QUERY = "QUERY"
    IT_SUPPORT = "IT_SUPPORT"
    PAYROLL = "PAYROLL"
    GENERAL = "GENERAL"


class OnboardingStatus(str, Enum):
    CREATED = "CREATED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class OnboardingStepType(str, Enum):
    PERSONAL_INFORMATION = "PERSONAL_INFORMATION"
    DOCUMENTS = "DOCUMENTS"
    PREVIOUS_EMPLOYMENT = "PREVIOUS_EMPLOYMENT"
    BANKING_DETAILS = "BANKING_DETAILS"
    BACKGROUND_VERIFICATION = "BACKGROUND_VERIFICATION"


class OnboardingStepStatus(str, Enum):
    PENDING = "PENDING"
    SUBMITTED = "SUBMITTED"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    CHANGES_REQUESTED = "CHANGES_REQUESTED"


class PayrollStatus(str, Enum):
    PENDING = "PENDING"
    PROCESSED = "PROCESSED"
    PAID = "PAID"


class PayrollInputStatus(str, Enum):
    DRAFT = "DRAFT"
    PENDING_APPROVAL = "PENDING_APPROVAL"
    APPROVED = "APPROVED"
    PROCESSED = "PROCESSED"
    REJECTED = "REJECTED"


class VariablePayType(str, Enum):
    PERFORMANCE_BONUS = "PERFORMANCE_BONUS"
    COMMISSION = "COMMISSION"
    OVERTIME = "OVERTIME"
    INCENTIVE = "INCENTIVE"
    ARREARS = "ARREARS"
    RETROACTIVE = "RETROACTIVE"
    OTHER = "OTHER"


class VariablePayStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class PayslipStatus(str, Enum):
    GENERATED = "GENERATED"
    DOWNLOADED = "DOWNLOADED"
    ARCHIVED = "ARCHIVED"


class CorrectionType(str, Enum):
    SALARY_DISPUTE = "SALARY_DISPUTE"
    ATTENDANCE_DISPUTE = "ATTENDANCE_DISPUTE"
    DEDUCTION_ERROR = "DEDUCTION_ERROR"
    ALLOWANCE_MISSING = "ALLOWANCE_MISSING"
    OTHER = "OTHER"


class CorrectionStatus(str, Enum):
    PENDING = "PENDING"
    UNDER_REVIEW = "UNDER_REVIEW"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    RESOLVED = "RESOLVED"


class LeaveType(str, Enum):
    SICK_LEAVE = "SICK_LEAVE"
    VACATION = "VACATION"
    PERSONAL_LEAVE = "PERSONAL_LEAVE"
    MATERNITY_LEAVE = "MATERNITY_LEAVE"
    PATERNITY_LEAVE = "PATERNITY_LEAVE"
    EMERGENCY_LEAVE = "EMERGENCY_LEAVE"


class LeaveStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"


class AttendanceStatus(str, Enum):
    """Daily attendance status as stored in the attendance table."""

    PRESENT = "PRESENT"
    ABSENT = "ABSENT"
    LATE = "LATE"
    HALF_DAY = "HALF_DAY"
    HOLIDAY = "HOLIDAY"


class AttendanceAction(str, Enum):
    CHECKIN = "checkin"
    CHECKOUT = "checkout"


class RegularizationStatus(str, Enum):
    """Request to mark a past attendance day as corrected."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class CycleType(str, Enum):
    MID_YEAR = "MID_YEAR"
    ANNUAL = "ANNUAL"
    QUARTERLY = "QUARTERLY"
    PROJECT_BASED = "PROJECT_BASED"


class CycleStatus(str, Enum):
    DRAFT = "DRAFT"
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class GoalCategory(str, Enum):
    PERFORMANCE = "PERFORMANCE"
    DEVELOPMENT = "DEVELOPMENT"
    BEHAVIORAL = "BEHAVIORAL"
    PROJECT = "PROJECT"
    SKILL = "SKILL"
    OTHER = "OTHER"


class GoalPriority(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class GoalStatus(str, Enum):
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    ON_HOLD = "ON_HOLD"


class ReviewRating(str, Enum):
    EXCEEDS_EXPECTATIONS = "EXCEEDS_EXPECTATIONS"
    MEETS_EXPECTATIONS = "MEETS_EXPECTATIONS"
    BELOW_EXPECTATIONS = "BELOW_EXPECTATIONS"
    NEEDS_IMPROVEMENT = "NEEDS_IMPROVEMENT"


class ReviewStatus(str, Enum):
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
