from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import RequestCategory, RequestStatus


@dataclass(frozen=True)
class EmployeeRequest:
    request_id: int
    employee_id: int
    category: RequestCategory
    title: str
    description: str
    status: RequestStatus
    created_at: datetime
    version: int = 1
    assigned_to: Optional[int] = None
    updated_at: Optional[datetime] = None
    resolved_at: Optional[datetime] = None
    closed_at: Optional[datetime] = None
    employee_name: Optional[str] = None
    assignee_name: Optional[str] = None
    comment_count: int = 0


@dataclass(frozen=True)
class RequestComment:
    comment_id: int
    request_id: int
    user_id: int
    comment: str
    created_at: datetime
    author_name: Optional[str] = None
    author_role: Optional[str] = None
