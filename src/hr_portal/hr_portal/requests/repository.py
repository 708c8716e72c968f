from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence

from ..core.enums import RequestCategory, RequestStatus
from .model import EmployeeRequest, RequestComment


class RequestRepository(Protocol):
    def create(self, *, employee_id: int, category: RequestCategory, title: str, description: str) -> int:
        raise NotImplementedError

    def get(self, *, request_id: int) -> Optional[EmployeeRequest]:
        raise NotImplementedError

    def list_requests(
        self,
        *,
        employee_id: Optional[int] = None,
        status: Optional[RequestStatus] = None,
        assigned_to: Optional[int] = None,
        limit: int = 200,
    ) -> Sequence[EmployeeRequest]:
        raise NotImplementedError

    def update(self, *, request_id: int, expected_version: int, values: dict[str, Any]) -> bool:
        """Conditional update; False when ``expected_version`` is stale."""

        raise NotImplementedError

    def add_comment(self, *, request_id: int, user_id: int, comment: str) -> int:
        raise NotImplementedError

    def list_comments(self, *, request_id: int) -> Sequence[RequestComment]:
        raise NotImplementedError

    def count_by_status(self, *, employee_id: Optional[int] = None) -> Sequence[dict]:
        """Rows of ``{"status": ..., "count": n}``."""

        raise NotImplementedError
