from __future__ import annotations

from datetime import date
from typing import Any, Optional, Protocol, Sequence

from .model import Department, Employee, User


class UserRepository(Protocol):
    """Repository interface for login accounts.

    Note (DIP): services depend on this interface, never on a concrete database.
    """

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    def set_active(self, user_id: int, *, is_active: bool) -> bool:
        raise NotImplementedError


class EmployeeRepository(Protocol):
    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        raise NotImplementedError

    def get_by_user_id(self, user_id: int) -> Optional[Employee]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[Employee]:
        raise NotImplementedError

    def list_employees(
        self,
        *,
        active_only: bool = True,
        department_id: Optional[int] = None,
        employee_ids: Optional[Sequence[int]] = None,
    ) -> Sequence[Employee]:
        raise NotImplementedError

    def get_by_code(self, employee_code: str) -> Optional[Employee]:
        raise NotImplementedError

    def create_with_login(self, *, user_values: dict[str, Any], employee_values: dict[str, Any]) -> tuple[int, int]:
        """Insert the login account and the employee row linked to it in one transaction."""

        raise NotImplementedError

    def update_with_login(
        self,
        employee_id: int,
        *,
        user_id: Optional[int],
        employee_values: dict[str, Any],
        user_values: dict[str, Any],
    ) -> None:
        """Update the employee row and its login account together; either may be empty."""

        raise NotImplementedError

    def set_active(self, employee_id: int, *, is_active: bool, exit_date: Optional[date] = None) -> bool:
        raise NotImplementedError

    def headcount_by_department(self) -> Sequence[dict]:
        """Rows of ``{"department": name, "count": n}`` for active employees."""

        raise NotImplementedError


class DepartmentRepository(Protocol):
    def list_all(self) -> Sequence[Department]:
        raise NotImplementedError

    def get_by_id(self, department_id: int) -> Optional[Department]:
        raise NotImplementedError
