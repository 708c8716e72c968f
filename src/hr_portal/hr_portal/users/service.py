from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Any, Optional, Sequence

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import clean_optional, require_choice, require_min_length, require_non_empty, require_positive_amount
from ..core.enums import MANAGEMENT_ROLES, Role
from ..core.exceptions import AuthenticationError, AuthorizationError, NotFoundError, ValidationError
from ..workflow.gate import require_owner_or_management, require_roles
from .model import Employee, Principal
from .repository import DepartmentRepository, EmployeeRepository, UserRepository

logger = logging.getLogger(__name__)

_SELF_EDITABLE = frozenset({"first_name", "last_name", "email"})
_MANAGER_EDITABLE = _SELF_EDITABLE | {"department_id", "position"}
_EDITABLE_FIELDS = {
    Role.EMPLOYEE: _SELF_EDITABLE,
    Role.MANAGER: _MANAGER_EDITABLE,
    Role.ADMIN: _MANAGER_EDITABLE | {"salary", "role"},
}


class AuthService:
    """Use case: authenticate user (login)."""

    def __init__(self, users: UserRepository, employees: EmployeeRepository):
        self._users = users
        self._employees = employees

    def authenticate(self, email: str, password: str) -> Principal:
        user = self._users.get_by_email((email or "").strip().lower())
        if not user or not user.is_active:
            raise AuthenticationError("Invalid email or password")

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except ValueError:
            # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
            ok = False

        if not ok:
            logger.info("Failed login for %s", user.email)
            raise AuthenticationError("Invalid email or password")

        employee_id = None
        if user.role == Role.EMPLOYEE:
            employee = self._employees.get_by_user_id(user.user_id)
            employee_id = employee.employee_id if employee else None

        return Principal(
            user_id=user.user_id,
            role=user.role,
            employee_id=employee_id,
            name=user.name,
            email=user.email,
        )


class EmployeeService:
    """Use case: employee records (admin creates, managers browse, employees see themselves)."""

    def __init__(self, users: UserRepository, employees: EmployeeRepository, departments: DepartmentRepository):
        self._users = users
        self._employees = employees
        self._departments = departments

    def list_employees(self, principal: Principal, *, department_id: Optional[int] = None, active_only: bool = True) -> Sequence[Employee]:
        require_roles(principal, MANAGEMENT_ROLES, "Manager or Admin access required")
        return self._employees.list_employees(active_only=active_only, department_id=department_id)

    def get_employee(self, principal: Principal, employee_id: int) -> Employee:
        employee = self._employees.get_by_id(int(employee_id))
        if not employee:
            raise NotFoundError("Employee not found")
        require_owner_or_management(principal, employee.employee_id)
        return employee

    def create_employee(
        self,
        principal: Principal,
        *,
        first_name: str,
        last_name: str,
        email: str,
        password: str,
        role: Role,
        employee_code: str,
        department_id: Optional[int],
        position: Optional[str],
        salary,
        hire_date: date,
    ) -> int:
        if principal.role != Role.ADMIN:
            raise AuthorizationError("Admin access required")

        first_name = require_non_empty(first_name, "First name")
        last_name = require_non_empty(last_name, "Last name")
        email = require_non_empty(email, "Email").lower()
        employee_code = require_non_empty(employee_code, "Employee code")
        require_min_length(password, "Password", 6)
        amount: Decimal = require_positive_amount(salary, "Salary")

        if self._users.get_by_email(email) or self._employees.get_by_email(email):
            raise ValidationError("Email already exists")
        if self._employees.get_by_code(employee_code):
            raise ValidationError("Employee code already exists")
        if department_id is not None and not self._departments.get_by_id(int(department_id)):
            raise ValidationError("Department does not exist")

        _, employee_id = self._employees.create_with_login(
            user_values={
                "name": f"{first_name} {last_name}",
                "email": email,
                "password_hash": generate_password_hash(password),
                "role": Role(role),
            },
            employee_values={
                "employee_code": employee_code,
                "first_name": first_name,
                "last_name": last_name,
                "email": email,
                "department_id": department_id,
                "position": clean_optional(position),
                "salary": amount,
                "hire_date": hire_date,
            },
        )
        logger.info("Employee %s created by user %s", employee_id, principal.user_id)
        return employee_id

    def update_employee(self, principal: Principal, employee_id: int, **changes: Any) -> Employee:
        """Partial update of an employee and the login account behind it.

        The employee may edit their own name and email, managers also move people
        between departments and positions, and only an admin changes salary or role.
        """
        employee = self.get_employee(principal, employee_id)
        denied = sorted(set(changes) - _EDITABLE_FIELDS[principal.role])
        if denied:
            raise AuthorizationError(f"Not allowed to change: {', '.join(denied)}")

        values: dict[str, Any] = {}
        for name in ("first_name", "last_name"):
            if name in changes:
                label = name.replace("_", " ").capitalize()
                values[name] = require_min_length(require_non_empty(changes[name], label), label, 2)
        if "email" in changes:
            email = require_non_empty(changes["email"], "Email").lower()
            if email != employee.email:
                user = self._users.get_by_email(email)
                other = self._employees.get_by_email(email)
                if (user and user.user_id != employee.user_id) or (other and other.employee_id != employee.employee_id):
                    raise ValidationError("Email already exists")
            values["email"] = email
        if "department_id" in changes:
            department_id = changes["department_id"]
            if department_id is not None and not self._departments.get_by_id(int(department_id)):
                raise ValidationError("Department does not exist")
            values["department_id"] = department_id
        if "position" in changes:
            values["position"] = clean_optional(changes["position"])
        if "salary" in changes:
            values["salary"] = require_positive_amount(changes["salary"], "Salary")

        user_values: dict[str, Any] = {}
        if "first_name" in values or "last_name" in values:
            first = values.get("first_name", employee.first_name)
            last = values.get("last_name", employee.last_name)
            user_values["name"] = f"{first} {last}"
        if "email" in values:
            user_values["email"] = values["email"]
        if "role" in changes:
            user_values["role"] = require_choice(changes["role"], Role, "Role")

        if not values and not user_values:
            return employee
        self._employees.update_with_login(
            employee.employee_id,
            user_id=employee.user_id,
            employee_values=values,
            user_values=user_values,
        )
        logger.info(
            "Employee %s updated by user %s (%s)",
            employee.employee_id,
            principal.user_id,
            ", ".join(sorted(set(values) | set(user_values))),
        )
        return self._employees.get_by_id(employee.employee_id)

    def deactivate_employee(self, principal: Principal, employee_id: int, *, exit_date: date) -> None:
        if principal.role != Role.ADMIN:
            raise AuthorizationError("Admin access required")

        employee = self._employees.get_by_id(int(employee_id))
        if not employee:
            raise NotFoundError("Employee not found")
        if not self._employees.set_active(employee.employee_id, is_active=False, exit_date=exit_date):
            raise ValidationError("Failed to deactivate employee")
        if employee.user_id:
            self._users.set_active(int(employee.user_id), is_active=False)

    def list_departments(self):
        return self._departments.list_all()
