from __future__ import annotations

from datetime import date
from typing import Any, Optional, Protocol, Sequence

from ..core.enums import LeaveStatus, LeaveType
from .model import LeaveRequest


class LeaveRepository(Protocol):
    def create(
        self,
        *,
        employee_id: int,
        leave_type: LeaveType,
        start_date: date,
        end_date: date,
        reason: str,
    ) -> int:
        raise NotImplementedError

    def get(self, *, leave_id: int) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def list_requests(
        self,
        *,
        employee_id: Optional[int] = None,
        status: Optional[LeaveStatus] = None,
        limit: int = 200,
    ) -> Sequence[LeaveRequest]:
        raise NotImplementedError

    def update(self, *, leave_id: int, expected_version: int, values: dict[str, Any]) -> bool:
        raise NotImplementedError

    def delete(self, *, leave_id: int, expected_version: int) -> bool:
        """Delete only while the row is still at ``expected_version``."""

        raise NotImplementedError

    def count_by_status(self) -> Sequence[dict]:
        raise NotImplementedError
