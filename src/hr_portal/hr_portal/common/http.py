"""JSON envelope, session principal and error mapping shared by all controllers."""
from __future__ import annotations

import dataclasses
import logging
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from functools import wraps
from typing import Any, Optional, TypeVar

from flask import g, jsonify, request, session
from flask.json.provider import DefaultJSONProvider
from pydantic import BaseModel
from pydantic import ValidationError as SchemaValidationError

from ..core.enums import Role
from ..core.exceptions import AuthenticationError, ConflictError, DomainError, ValidationError
from ..users.model import Principal

logger = logging.getLogger(__name__)

SchemaT = TypeVar("SchemaT", bound=BaseModel)
EnumT = TypeVar("EnumT", bound=Enum)


def _to_json(o: Any) -> Any:
    if isinstance(o, Enum):
        return o.value
    if isinstance(o, datetime):
        return o.isoformat(timespec="seconds")
    if isinstance(o, date):
        return o.isoformat()
    if isinstance(o, Decimal):
        return str(o)
    if dataclasses.is_dataclass(o) and not isinstance(o, type):
        return dataclasses.asdict(o)
    if isinstance(o, (set, frozenset)):
        return sorted(o)
    raise TypeError(f"Object of type {type(o).__name__} is not JSON serializable")


class HRJSONProvider(DefaultJSONProvider):
    """ISO dates and string decimals instead of Flask's HTTP-date defaults."""

    default = staticmethod(_to_json)


def ok(data: Any = None, *, message: Optional[str] = None, status: int = 200):
    body: dict[str, Any] = {"success": True}
    if data is not None:
        body["data"] = data
    if message:
        body["message"] = message
    return jsonify(body), status


def fail(error: str, status: int, *, details: Any = None):
    body: dict[str, Any] = {"success": False, "error": error}
    if details is not None:
        body["details"] = details
    return jsonify(body), status


def store_principal(principal: Principal) -> None:
    session["user_id"] = principal.user_id
    session["role"] = principal.role.value
    session["employee_id"] = principal.employee_id
    session["name"] = principal.name
    session["email"] = principal.email


def session_principal() -> Optional[Principal]:
    if "user_id" not in session:
        return None
    try:
        role = Role(session.get("role"))
    except ValueError:
        return None
    employee_id = session.get("employee_id")
    return Principal(
        user_id=int(session["user_id"]),
        role=role,
        employee_id=int(employee_id) if employee_id is not None else None,
        name=session.get("name") or "",
        email=session.get("email") or "",
    )


def current_principal() -> Principal:
    principal = getattr(g, "principal", None) or session_principal()
    if principal is None:
        raise AuthenticationError("Unauthorized")
    return principal


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        principal = session_principal()
        if principal is None:
            raise AuthenticationError("Unauthorized")
        g.principal = principal
        return view(*args, **kwargs)

    return wrapper


def parse_body(schema: type[SchemaT]) -> SchemaT:
    payload = request.get_json(silent=True)
    if payload is None:
        payload = {}
    return schema.model_validate(payload)


def query_int(name: str) -> Optional[int]:
    raw = request.args.get(name)
    if raw is None or raw == "":
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValidationError(f"{name} must be an integer")


def query_enum(name: str, enum_cls: type[EnumT]) -> Optional[EnumT]:
    raw = request.args.get(name)
    if not raw:
        return None
    try:
        return enum_cls(raw)
    except ValueError:
        raise ValidationError(f"Unknown {name} filter")


def api_view(view):
    """Run a view and turn every exception into the JSON envelope."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            return view(*args, **kwargs)
        except SchemaValidationError as e:
            return fail(
                "Validation error",
                400,
                details=e.errors(include_url=False, include_context=False, include_input=False),
            )
        except ConflictError as e:
            logger.warning("Conflict on %s %s: %s", request.method, request.path, e)
            return fail(str(e), e.http_status)
        except DomainError as e:
            return fail(str(e), e.http_status)
        except Exception:
            logger.exception("Unhandled error on %s %s", request.method, request.path)
            return fail("Internal server error", 500)

    return wrapper
