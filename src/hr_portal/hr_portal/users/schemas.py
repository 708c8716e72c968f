from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from ..core.enums import Role


class LoginBody(BaseModel):
    email: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=1)
    remember_me: bool = False


class CreateEmployeeBody(BaseModel):
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    email: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=6)
    role: Role = Role.EMPLOYEE
    employee_code: str = Field(min_length=1, max_length=50)
    department_id: Optional[int] = None
    position: Optional[str] = Field(default=None, max_length=100)
    salary: Decimal = Field(gt=0)
    hire_date: date


class DeactivateEmployeeBody(BaseModel):
    exit_date: date


class UpdateEmployeeBody(BaseModel):
    """Only the fields present in the payload are changed."""

    first_name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    last_name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    email: Optional[str] = Field(default=None, min_length=3, max_length=255)
    department_id: Optional[int] = None
    position: Optional[str] = Field(default=None, max_length=100)
    salary: Optional[Decimal] = Field(default=None, gt=0)
    role: Optional[Role] = None
