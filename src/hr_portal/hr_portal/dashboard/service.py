"""Organisation-wide counters for the HR dashboard.

Everything is recomputed from the repositories on each call; nothing is cached.
"""
from __future__ import annotations

from typing import Any

from ..common.aggregation import count_by_status
from ..attendance.repository import RegularizationRepository
from ..core.enums import MANAGEMENT_ROLES, LeaveStatus, OnboardingStatus, RegularizationStatus, RequestStatus
from ..leave.repository import LeaveRepository
from ..onboarding.repository import OnboardingRepository
from ..requests.repository import RequestRepository
from ..users.model import Principal
from ..users.repository import EmployeeRepository
from ..workflow.gate import require_roles


class DashboardService:
    def __init__(
        self,
        employees: EmployeeRepository,
        leaves: LeaveRepository,
        onboarding: OnboardingRepository,
        requests: RequestRepository,
        regularizations: RegularizationRepository,
    ):
        self._employees = employees
        self._leaves = leaves
        self._onboarding = onboarding
        self._requests = requests
        self._regularizations = regularizations

    def stats(self, principal: Principal) -> dict[str, Any]:
        require_roles(principal, MANAGEMENT_ROLES, "Manager or Admin access required")
        headcount = [
            {"department": r.get("department") or "-", "count": int(r.get("count") or 0)}
            for r in self._employees.headcount_by_department()
        ]
        return {
            "headcount": {
                "total": sum(r["count"] for r in headcount),
                "by_department": headcount,
            },
            "leave": count_by_status(self._leaves.count_by_status(), LeaveStatus),
            "onboarding": count_by_status(self._onboarding.count_by_status(), OnboardingStatus),
            "requests": count_by_status(self._requests.count_by_status(), RequestStatus),
            "regularizations": count_by_status(self._regularizations.count_by_status(), RegularizationStatus),
        }
