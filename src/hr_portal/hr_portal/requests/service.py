from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from ..common.aggregation import count_by_status
from ..common.datetime_utils import now_local
from ..common.validators import require_max_length, require_non_empty
from ..core.constants import DEFAULT_LIST_LIMIT, MAX_TITLE_LENGTH
from ..core.enums import RequestCategory, RequestStatus
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..users.model import Principal
from ..workflow.definitions import REQUEST_WORKFLOW
from ..workflow.gate import RequestAction, principal_can, require
from .model import EmployeeRequest, RequestComment
from .repository import RequestRepository

logger = logging.getLogger(__name__)

_UNSET: Any = object()


class RequestService:
    """Employee self-service requests: create, work, close, discuss."""

    def __init__(self, requests: RequestRepository):
        self._requests = requests

    def _load(self, request_id: int) -> EmployeeRequest:
        req = self._requests.get(request_id=int(request_id))
        if not req:
            raise NotFoundError("Request not found")
        return req

    def create_request(self, principal: Principal, *, category: RequestCategory, title: str, description: str) -> int:
        if principal.employee_id is None:
            raise AuthorizationError("Only employees can raise requests")

        title = require_max_length(require_non_empty(title, "Title"), "Title", MAX_TITLE_LENGTH)
        description = require_non_empty(description, "Description")
        request_id = self._requests.create(
            employee_id=int(principal.employee_id),
            category=RequestCategory(category),
            title=title,
            description=description,
        )
        logger.info("Request %s opened by employee %s", request_id, principal.employee_id)
        return request_id

    def list_requests(
        self,
        principal: Principal,
        *,
        status: Optional[RequestStatus] = None,
        assigned_to_me: bool = False,
    ) -> Sequence[EmployeeRequest]:
        if principal.is_management:
            return self._requests.list_requests(
                status=status,
                assigned_to=principal.user_id if assigned_to_me else None,
                limit=DEFAULT_LIST_LIMIT,
            )
        if principal.employee_id is None:
            return []
        return self._requests.list_requests(employee_id=principal.employee_id, status=status, limit=DEFAULT_LIST_LIMIT)

    def get_request(self, principal: Principal, request_id: int) -> EmployeeRequest:
        req = self._load(request_id)
        require(principal, RequestAction.VIEW, req)
        return req

    def update_request(
        self,
        principal: Principal,
        request_id: int,
        *,
        title: Optional[str] = None,
        description: Optional[str] = None,
        status: Optional[RequestStatus] = None,
        assigned_to: Any = _UNSET,
        expected_version: Optional[int] = None,
    ) -> EmployeeRequest:
        """Apply field edits, an assignment and/or one status transition atomically.

        ``assigned_to`` distinguishes "not sent" from an explicit ``None`` (unassign).
        """
        req = self._load(request_id)
        require(principal, RequestAction.VIEW, req)
        if expected_version is not None and int(expected_version) != req.version:
            raise ConflictError("Request was modified by someone else, reload and retry")

        values: dict[str, Any] = {}

        if title is not None or description is not None:
            require(principal, RequestAction.EDIT, req)
            if title is not None:
                values["title"] = require_max_length(require_non_empty(title, "Title"), "Title", MAX_TITLE_LENGTH)
            if description is not None:
                values["description"] = require_non_empty(description, "Description")

        if assigned_to is not _UNSET:
            require(principal, RequestAction.ASSIGN, req)
            values["assigned_to"] = int(assigned_to) if assigned_to is not None else None

        if status is not None:
            target = RequestStatus(status)
            if target == RequestStatus.CLOSED:
                require(principal, RequestAction.CLOSE, req)
            REQUEST_WORKFLOW.require_transition(req.status, target, principal.role)
            values["status"] = target
            if target == RequestStatus.RESOLVED:
                values["resolved_at"] = now_local()
            elif target == RequestStatus.CLOSED:
                values["closed_at"] = now_local()

        if not values:
            raise ValidationError("No valid fields to update")

        if not self._requests.update(request_id=req.request_id, expected_version=req.version, values=values):
            raise ConflictError("Request was modified by someone else, reload and retry")

        if "status" in values:
            logger.info(
                "Request %s: %s -> %s by user %s (%s)",
                req.request_id,
                req.status.value,
                values["status"].value,
                principal.user_id,
                principal.role.value,
            )
        return self._load(req.request_id)

    def valid_next_statuses(self, principal: Principal, request_id: int) -> list[RequestStatus]:
        req = self.get_request(principal, request_id)
        out = []
        for target in REQUEST_WORKFLOW.valid_next_statuses(req.status, principal.role):
            if target == RequestStatus.CLOSED and not principal_can(principal, RequestAction.CLOSE, req):
                continue
            out.append(target)
        return out

    def add_comment(self, principal: Principal, request_id: int, *, comment: str) -> int:
        req = self._load(request_id)
        require(principal, RequestAction.COMMENT, req)
        text = require_non_empty(comment, "Comment")
        return self._requests.add_comment(request_id=req.request_id, user_id=principal.user_id, comment=text)

    def list_comments(self, principal: Principal, request_id: int) -> Sequence[RequestComment]:
        req = self.get_request(principal, request_id)
        return self._requests.list_comments(request_id=req.request_id)

    def stats(self, principal: Principal) -> dict[str, int]:
        if principal.is_management:
            rows = self._requests.count_by_status()
        elif principal.employee_id is not None:
            rows = self._requests.count_by_status(employee_id=principal.employee_id)
        else:
            rows = []
        return count_by_status(rows, RequestStatus)
