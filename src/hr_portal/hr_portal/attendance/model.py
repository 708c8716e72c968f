from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus, RegularizationStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """One employee day, written by check-in/check-out and read by payroll."""

    attendance_id: int
    employee_id: int
    work_date: date
    status: AttendanceStatus
    check_in: Optional[datetime] = None
    check_out: Optional[datetime] = None
    check_in_location: Optional[str] = None
    check_out_location: Optional[str] = None
    notes: Optional[str] = None
    is_regularized: bool = False
    regularized_by: Optional[int] = None
    regularized_at: Optional[datetime] = None
    version: int = 1
    employee_name: Optional[str] = None

    @property
    def worked_hours(self) -> float:
        if not self.check_in or not self.check_out:
            return 0.0
        return max((self.check_out - self.check_in).total_seconds() / 3600, 0.0)


@dataclass(frozen=True)
class RegularizationRequest:
    request_id: int
    employee_id: int
    work_date: date
    reason: str
    status: RegularizationStatus
    version: int = 1
    requested_at: Optional[datetime] = None
    reviewed_by: Optional[int] = None
    reviewed_at: Optional[datetime] = None
    review_comments: Optional[str] = None
    employee_name: Optional[str] = None
