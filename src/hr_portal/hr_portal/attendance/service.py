from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional, Sequence

from ..common.datetime_utils import month_bounds, now_local
from ..common.validators import clean_optional, require_choice, require_month
from ..core.constants import DEFAULT_LIST_LIMIT, MAX_PAYROLL_YEAR, MIN_PAYROLL_YEAR
from ..core.enums import MANAGEMENT_ROLES, AttendanceAction, AttendanceStatus, Role
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..users.model import Principal
from ..workflow.gate import require_owner_or_management, require_roles
from .model import AttendanceRecord
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

_STALE = "Attendance record was modified by someone else, reload and retry"


class AttendanceService:
    """Daily check-in/check-out and the management view of attendance."""

    def __init__(self, attendance: AttendanceRepository):
        self._attendance = attendance

    def _load(self, attendance_id: int) -> AttendanceRecord:
        record = self._attendance.get(attendance_id=int(attendance_id))
        if not record:
            raise NotFoundError("Attendance record not found")
        return record

    def mark(
        self,
        principal: Principal,
        *,
        action: AttendanceAction,
        location: Optional[str] = None,
        notes: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> AttendanceRecord:
        """Check the caller in or out for today.

        The first action of the day creates the record; each of check-in and
        check-out can happen once per day.
        """
        if principal.employee_id is None:
            raise NotFoundError("Employee not found")
        action = AttendanceAction(action)
        moment = now or now_local()
        if action == AttendanceAction.CHECKIN:
            stamp, place = "check_in", "check_in_location"
        else:
            stamp, place = "check_out", "check_out_location"
        values: dict[str, Any] = {stamp: moment, place: clean_optional(location)}
        note = clean_optional(notes)
        if note is not None:
            values["notes"] = note

        record = self._attendance.find(employee_id=principal.employee_id, work_date=moment.date())
        if record is None:
            attendance_id = self._attendance.create(
                employee_id=principal.employee_id,
                work_date=moment.date(),
                status=AttendanceStatus.PRESENT,
                values=values,
            )
        else:
            if getattr(record, stamp) is not None:
                raise ValidationError(
                    "Already checked in today" if action == AttendanceAction.CHECKIN else "Already checked out today"
                )
            if not self._attendance.update(
                attendance_id=record.attendance_id, expected_version=record.version, values=values
            ):
                raise ConflictError(_STALE)
            attendance_id = record.attendance_id
        logger.info("Employee %s %s at %s", principal.employee_id, action.value, moment.isoformat(timespec="minutes"))
        return self._load(attendance_id)

    def list_records(
        self,
        principal: Principal,
        *,
        month: Optional[int] = None,
        year: Optional[int] = None,
        employee_id: Optional[int] = None,
    ) -> Sequence[AttendanceRecord]:
        """Employees see their own days; managers and admins see everyone or one person."""
        if employee_id is not None and not principal.owns(employee_id):
            require_roles(principal, MANAGEMENT_ROLES, "Forbidden")
        elif employee_id is None and not principal.is_management:
            if principal.employee_id is None:
                raise NotFoundError("Employee not found")
            employee_id = principal.employee_id

        start = end = None
        if month is not None and year is not None:
            month, year = require_month(month, year, min_year=MIN_PAYROLL_YEAR, max_year=MAX_PAYROLL_YEAR)
            start, end = month_bounds(month, year)
        return self._attendance.list_records(employee_id=employee_id, start=start, end=end, limit=DEFAULT_LIST_LIMIT)

    def get_record(self, principal: Principal, attendance_id: int) -> AttendanceRecord:
        record = self._load(attendance_id)
        require_owner_or_management(principal, record.employee_id)
        return record

    def update_record(
        self,
        principal: Principal,
        attendance_id: int,
        *,
        expected_version: Optional[int] = None,
        **changes: Any,
    ) -> AttendanceRecord:
        require_roles(principal, MANAGEMENT_ROLES, "Manager or Admin access required")
        record = self._load(attendance_id)
        if expected_version is not None and int(expected_version) != record.version:
            raise ConflictError(_STALE)

        values: dict[str, Any] = {}
        if "status" in changes:
            values["status"] = require_choice(changes["status"], AttendanceStatus, "Status")
        for name in ("check_in", "check_out"):
            if name in changes:
                values[name] = changes[name]
        if "notes" in changes:
            values["notes"] = clean_optional(changes["notes"])

        check_in = values.get("check_in", record.check_in)
        check_out = values.get("check_out", record.check_out)
        if check_in and check_out and check_out < check_in:
            raise ValidationError("Check-out must be after check-in")
        if not values:
            return record
        if not self._attendance.update(attendance_id=record.attendance_id, expected_version=record.version, values=values):
            raise ConflictError(_STALE)
        logger.info("Attendance %s edited by user %s (%s)", record.attendance_id, principal.user_id, ", ".join(sorted(values)))
        return self._load(record.attendance_id)

    def delete_record(self, principal: Principal, attendance_id: int) -> None:
        if principal.role != Role.ADMIN:
            raise AuthorizationError("Admin access required")
        record = self._load(attendance_id)
        if not self._attendance.delete(attendance_id=record.attendance_id, expected_version=record.version):
            raise ConflictError(_STALE)
        logger.info("Attendance %s deleted by user %s", record.attendance_id, principal.user_id)
