from __future__ import annotations

from typing import Any, Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.validators import clean_optional, require_non_empty, require_positive_amount
from ..core.constants import DEFAULT_LIST_LIMIT
from ..core.enums import CorrectionStatus, CorrectionType
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError
from ..users.model import Principal
from ..workflow.definitions import CORRECTION_WORKFLOW
from ..workflow.gate import require_owner_or_management
from .audit import AuditTrail
from .model import CorrectionRequest
from .repository import CorrectionRepository, PayrollRepository

_STALE = "Correction request was modified by someone else, reload and retry"


class CorrectionService:
    def __init__(self, corrections: CorrectionRepository, payrolls: PayrollRepository, audit: AuditTrail):
        self._corrections = corrections
        self._payrolls = payrolls
        self._audit = audit

    def _load(self, correction_id: int) -> CorrectionRequest:
        item = self._corrections.get(correction_id=int(correction_id))
        if not item:
            raise NotFoundError("Correction request not found")
        return item

    def list_corrections(
        self, principal: Principal, *, status: Optional[CorrectionStatus] = None
    ) -> Sequence[CorrectionRequest]:
        if principal.is_management:
            return self._corrections.list_corrections(status=status, limit=DEFAULT_LIST_LIMIT)
        if principal.employee_id is None:
            return []
        return self._corrections.list_corrections(
            employee_id=principal.employee_id, status=status, limit=DEFAULT_LIST_LIMIT
        )

    def get_correction(self, principal: Principal, correction_id: int) -> CorrectionRequest:
        item = self._load(correction_id)
        require_owner_or_management(principal, item.employee_id)
        return item

    def create_correction(
        self,
        principal: Principal,
        *,
        payroll_id: int,
        correction_type: CorrectionType,
        description: str,
        requested_amount=None,
    ) -> CorrectionRequest:
        if principal.employee_id is None:
            raise AuthorizationError("Only employees can raise payroll corrections")
        payroll = self._payrolls.get(payroll_id=int(payroll_id))
        if not payroll or not principal.owns(payroll.employee_id):
            raise NotFoundError("Payroll record not found")

        correction_id = self._corrections.create(
            employee_id=payroll.employee_id,
            payroll_id=payroll.payroll_id,
            month=payroll.month,
            year=payroll.year,
            correction_type=CorrectionType(correction_type),
            description=require_non_empty(description, "Description"),
            requested_amount=require_positive_amount(requested_amount, "Requested amount")
            if requested_amount is not None
            else None,
            requested_by=principal.user_id,
        )
        return self._load(correction_id)

    def review(
        self,
        principal: Principal,
        correction_id: int,
        *,
        status: CorrectionStatus,
        review_comments: Optional[str] = None,
        resolution: Optional[str] = None,
        expected_version: Optional[int] = None,
    ) -> CorrectionRequest:
        item = self._load(correction_id)
        if expected_version is not None and int(expected_version) != item.version:
            raise ConflictError(_STALE)
        target = CorrectionStatus(status)
        CORRECTION_WORKFLOW.require_transition(item.status, target, principal.role)

        values: dict[str, Any] = {"status": target, "reviewed_by": principal.user_id, "reviewed_at": now_local()}
        if review_comments is not None:
            values["review_comments"] = clean_optional(review_comments)
        if resolution is not None:
            values["resolution"] = clean_optional(resolution)
        if not self._corrections.update(correction_id=item.correction_id, expected_version=item.version, values=values):
            raise ConflictError(_STALE)

        self._audit.record(
            principal,
            f"CORRECTION_{target.value}",
            payroll_id=item.payroll_id,
            employee_id=item.employee_id,
            correction_id=item.correction_id,
            previous_status=item.status,
        )
        return self._load(item.correction_id)
