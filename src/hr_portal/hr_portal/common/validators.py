from __future__ import annotations

from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Optional, TypeVar

from ..core.exceptions import ValidationError

EnumT = TypeVar("EnumT", bound=Enum)


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_min_length(value: str, field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value


def require_max_length(value: str, field_name: str, max_len: int) -> str:
    if value is not None and len(value) > max_len:
        raise ValidationError(f"{field_name} must be less than {max_len} characters")
    return value


def require_positive_amount(value, field_name: str) -> Decimal:
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f"{field_name} is not a valid amount")
    if not amount.is_finite() or amount <= 0:
        raise ValidationError(f"{field_name} must be positive")
    return amount


def require_month(month: int, year: int, *, min_year: int, max_year: int) -> tuple[int, int]:
    if not 1 <= int(month) <= 12:
        raise ValidationError("Month must be between 1 and 12")
    if not min_year <= int(year) <= max_year:
        raise ValidationError(f"Year must be between {min_year} and {max_year}")
    return int(month), int(year)


def clean_optional(value: Optional[str]) -> Optional[str]:
    return (value or "").strip() or None


def require_choice(value, enum_cls: type[EnumT], field_name: str) -> EnumT:
    try:
        return enum_cls(value)
    except ValueError:
        raise ValidationError(f"{field_name} must be one of: {', '.join(m.value for m in enum_cls)}")
