"""Declarative status-transition tables.

A workflow is a set of ``TransitionRule`` rows keyed by ``(from, to)``. The
evaluator is an exact-match lookup: there is no wildcard and no role
hierarchy, so ADMIN has to be listed on a rule to use it.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional

from ..core.enums import Role
from ..core.exceptions import InvalidTransitionError


@dataclass(frozen=True)
class TransitionRule:
    from_status: Enum
    to_status: Enum
    allowed_roles: frozenset[Role]
    description: str = ""

    def allows(self, role: Role) -> bool:
        return role in self.allowed_roles


def rule(from_status: Enum, to_status: Enum, roles: Iterable[Role], description: str = "") -> TransitionRule:
    return TransitionRule(from_status, to_status, frozenset(roles), description)


@dataclass(frozen=True)
class Workflow:
    name: str
    status_enum: type[Enum]
    initial: Enum
    terminal: frozenset[Enum]
    rules: tuple[TransitionRule, ...]
    _index: dict = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        index: dict[tuple[Enum, Enum], TransitionRule] = {}
        for r in self.rules:
            for s in (r.from_status, r.to_status):
                if not isinstance(s, self.status_enum):
                    raise ValueError(f"{self.name}: {s!r} is not a {self.status_enum.__name__}")
            if r.from_status == r.to_status:
                raise ValueError(f"{self.name}: self transition on {r.from_status.value}")
            if r.from_status in self.terminal:
                raise ValueError(f"{self.name}: terminal status {r.from_status.value} has an outgoing rule")
            key = (r.from_status, r.to_status)
            if key in index:
                raise ValueError(f"{self.name}: duplicate rule {r.from_status.value} -> {r.to_status.value}")
            index[key] = r
        object.__setattr__(self, "_index", index)

    def _coerce(self, status) -> Optional[Enum]:
        if isinstance(status, self.status_enum):
            return status
        try:
            return self.status_enum(status)
        except ValueError:
            return None

    def is_terminal(self, status) -> bool:
        return self._coerce(status) in self.terminal

    def rule_for(self, from_status, to_status) -> Optional[TransitionRule]:
        src = self._coerce(from_status)
        dst = self._coerce(to_status)
        if src is None or dst is None:
            return None
        return self._index.get((src, dst))

    def is_valid_transition(self, from_status, to_status, role: Role) -> bool:
        if from_status == to_status:
            return False
        r = self.rule_for(from_status, to_status)
        return bool(r and r.allows(role))

    def valid_next_statuses(self, current, role: Role) -> list:
        src = self._coerce(current)
        return [r.to_status for r in self.rules if r.from_status == src and r.allows(role)]

    def require_transition(self, from_status, to_status, role: Role) -> TransitionRule:
        if not self.is_valid_transition(from_status, to_status, role):
            raise InvalidTransitionError(
                self.name,
                getattr(from_status, "value", str(from_status)),
                getattr(to_status, "value", str(to_status)),
                role.value,
            )
        return self.rule_for(from_status, to_status)

    def as_table(self) -> list[dict]:
        """Plain rows for clients that preview allowed moves."""
        return [
            {
                "from": r.from_status.value,
                "to": r.to_status.value,
                "allowed_roles": sorted(role.value for role in r.allowed_roles),
                "description": r.description,
            }
            for r in self.rules
        ]
