from __future__ import annotations

from datetime import date
from typing import Any, Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus, RegularizationStatus
from .model import AttendanceRecord, RegularizationRequest


class AttendanceRepository(Protocol):
    def list_for_employee_between(self, employee_id: int, start: date, end: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def get(self, *, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def find(self, *, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def list_records(
        self,
        *,
        employee_id: Optional[int] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
        limit: int = 200,
    ) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def create(self, *, employee_id: int, work_date: date, status: AttendanceStatus, values: dict[str, Any]) -> int:
        raise NotImplementedError

    def update(self, *, attendance_id: int, expected_version: int, values: dict[str, Any]) -> bool:
        raise NotImplementedError

    def delete(self, *, attendance_id: int, expected_version: int) -> bool:
        raise NotImplementedError


class RegularizationRepository(Protocol):
    def create(self, *, employee_id: int, work_date: date, reason: str) -> int:
        raise NotImplementedError

    def get(self, *, request_id: int) -> Optional[RegularizationRequest]:
        raise NotImplementedError

    def find(self, *, employee_id: int, work_date: date) -> Optional[RegularizationRequest]:
        raise NotImplementedError

    def list_requests(
        self,
        *,
        employee_id: Optional[int] = None,
        status: Optional[RegularizationStatus] = None,
        limit: int = 200,
    ) -> Sequence[RegularizationRequest]:
        raise NotImplementedError

    def review(
        self,
        *,
        request_id: int,
        expected_version: int,
        values: dict[str, Any],
        attendance_id: Optional[int] = None,
        attendance_version: Optional[int] = None,
        attendance_values: Optional[dict[str, Any]] = None,
    ) -> bool:
        """Decide a request, and on approval flag the attendance row, in one transaction.

        Both writes are version compare-and-set; False means nothing was written.
        """
        raise NotImplementedError

    def count_by_status(self) -> Sequence[dict]:
        raise NotImplementedError
