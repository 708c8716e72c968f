"""Small roll-up helpers for dashboard reads."""
from __future__ import annotations

from enum import Enum
from decimal import Decimal
from typing import Any, Iterable, Mapping

from .money import ZERO, to_money


def count_by_status(rows: Iterable[Mapping[str, Any]], status_enum: type[Enum], *, key: str = "status", count_key: str = "count") -> dict[str, int]:
    """Turn ``GROUP BY status`` rows into a dict with a zero for every status."""
    out = {s.value: 0 for s in status_enum}
    for r in rows:
        status = r[key].value if isinstance(r[key], Enum) else str(r[key])
        if status in out:
            out[status] += int(r.get(count_key, 1) or 0)
    out["total"] = sum(out.values())
    return out


def sum_by(rows: Iterable[Mapping[str, Any]], *, key: str, value: str, default_label: str = "-") -> list[dict]:
    """Group rows by ``key`` and total ``value`` as money, largest first."""
    totals: dict[str, dict] = {}
    for r in rows:
        label = r.get(key) or default_label
        entry = totals.get(label)
        if entry is None:
            entry = {key: label, "total": ZERO, "count": 0}
            totals[label] = entry
        entry["total"] += to_money(r.get(value))
        entry["count"] += 1
    out = list(totals.values())
    out.sort(key=lambda x: x["total"], reverse=True)
    return out


def average(total, count: int) -> Decimal:
    if not count:
        return ZERO
    return to_money(to_money(total) / count)
