from __future__ import annotations

import logging
from typing import Any, Optional

from ..users.model import Principal
from .model import AuditLog
from .repository import AuditLogRepository

logger = logging.getLogger(__name__)


class AuditTrail:
    """Writes one ``payroll_audit_logs`` row per payroll-side change."""

    def __init__(self, logs: AuditLogRepository):
        self._logs = logs

    def record(
        self,
        principal: Principal,
        action: str,
        *,
        payroll_id: Optional[int] = None,
        employee_id: Optional[int] = None,
        **details: Any,
    ) -> None:
        self._logs.add(
            AuditLog(
                action=action,
                performed_by=principal.user_id,
                details=details,
                payroll_id=payroll_id,
                employee_id=employee_id,
            )
        )
        logger.info("%s payroll=%s employee=%s by user %s", action, payroll_id, employee_id, principal.user_id)

    def history(self, payroll_id: int):
        return self._logs.list_for_payroll(payroll_id=int(payroll_id))
