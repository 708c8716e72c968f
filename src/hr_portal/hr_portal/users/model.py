from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Login account. Plain data object, no DB access here."""

    user_id: int
    name: str
    email: str
    password_hash: str
    role: Role
    is_active: bool = True


@dataclass(frozen=True)
class Department:
    department_id: int
    name: str
    description: Optional[str] = None


@dataclass(frozen=True)
class Employee:
    """HR record of a person; workflow entities reference it by ``employee_id``."""

    employee_id: int
    user_id: Optional[int]
    employee_code: str
    first_name: str
    last_name: str
    email: str
    department_id: Optional[int]
    position: Optional[str]
    salary: Decimal
    hire_date: date
    exit_date: Optional[date] = None
    is_active: bool = True
    department_name: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass(frozen=True)
class Principal:
    """The authenticated caller, rebuilt from the session on every request."""

    user_id: int
    role: Role
    employee_id: Optional[int] = None
    name: str = ""
    email: str = ""

    @property
    def is_management(self) -> bool:
        return self.role.is_management

    @property
    def is_admin(self) -> bool:
        return self.role.is_admin

    def owns(self, employee_id: Optional[int]) -> bool:
        return self.employee_id is not None and employee_id is not None and int(self.employee_id) == int(employee_id)
