# shopboard/normalize.py
from __future__ import annotations

import math
from typing import Any, Dict, Iterable, List, Optional

from .model import HOUR_MS, RESULTS, STATUS_ACTIVE, STATUS_COMPLETED, Order
from .util.console import eprint, obs_enabled
from .util.timeparse import parse_timestamp_ms

DURATION_UNIT_KEY = "durationUnit"
DURATION_UNIT_HOURS = "hours"
DURATION_UNIT_MINUTES = "minutes"

# Untagged records above this value are assumed to be legacy minutes.
# A genuine job longer than 100 hours is misread; only the unit tag avoids that.
LEGACY_MINUTES_THRESHOLD = 100


def _as_float(v: Any) -> Optional[float]:
    if v is None or isinstance(v, bool):
        return None
    try:
        f = float(v)
    except (TypeError, ValueError):
        return None
    return f if math.isfinite(f) else None


def _as_bool(v: Any) -> bool:
    if isinstance(v, bool):
        return v
    if isinstance(v, str):
        return v.strip().lower() in {"true", "1", "yes"}
    if isinstance(v, (int, float)):
        return bool(v)
    return False


def migrate_duration_hours(raw: Dict[str, Any], start_ms: int, due_ms: int) -> float:
    """Return the stored duration in hours.

    Precedence:
      1) explicit durationUnit tag ("hours" | "minutes")
      2) legacy heuristic: value > 100 is minutes
      3) missing/non-numeric: derived from due - start
    """
    dur = _as_float(raw.get("duration"))
    if dur is None:
        return (due_ms - start_ms) / HOUR_MS

    unit = str(raw.get(DURATION_UNIT_KEY) or "").strip().lower()
    if unit == DURATION_UNIT_HOURS:
        return dur
    if unit == DURATION_UNIT_MINUTES:
        return dur / 60

    if dur > LEGACY_MINUTES_THRESHOLD:
        if obs_enabled():
            eprint(f"[shopboard.normalize] legacy minutes duration id={raw.get('id')!r} value={dur!r}")
        return dur / 60
    return dur


def order_from_record(raw: Dict[str, Any], tz: str | None = "local") -> Optional[Order]:
    if not isinstance(raw, dict):
        return None

    oid = str(raw.get("id") or "").strip()
    if not oid:
        return None

    start_ms = parse_timestamp_ms(raw.get("startTime"), tz)
    due_ms = parse_timestamp_ms(raw.get("dueTime"), tz)
    if start_ms is None or due_ms is None:
        if obs_enabled():
            eprint(
                f"[shopboard.normalize] WARN: invalid timestamps id={oid!r} "
                f"start={raw.get('startTime')!r} due={raw.get('dueTime')!r}"
            )
        return None

    status = STATUS_COMPLETED if raw.get("status") == STATUS_COMPLETED else STATUS_ACTIVE
    result = raw.get("result") if raw.get("result") in RESULTS else None

    return Order(
        id=oid,
        customer_name=str(raw.get("customerName") or ""),
        order_details=str(raw.get("orderDetails") or ""),
        resource=str(raw.get("resource") or ""),
        start_time=start_ms,
        due_time=due_ms,
        duration=migrate_duration_hours(raw, start_ms, due_ms),
        notified=_as_bool(raw.get("notified")),
        status=status,
        result=result,
    )


def orders_from_records(records: Iterable[Any], tz: str | None = "local") -> List[Order]:
    out: List[Order] = []
    skipped = 0
    for raw in records:
        o = order_from_record(raw, tz)
        if o is None:
            skipped += 1
            continue
        out.append(o)
    if skipped and obs_enabled():
        eprint(f"[shopboard.normalize] skipped {skipped} unreadable order record(s)")
    return out


def order_to_record(order: Order) -> Dict[str, Any]:
    rec: Dict[str, Any] = {
        "id": order.id,
        "customerName": order.customer_name,
        "orderDetails": order.order_details,
        "resource": order.resource,
        "startTime": int(order.start_time),
        "dueTime": int(order.due_time),
        "duration": order.duration,
        DURATION_UNIT_KEY: DURATION_UNIT_HOURS,
        "notified": bool(order.notified),
        "status": order.status,
    }
    if order.result is not None:
        rec["result"] = order.result
    return rec


def orders_to_records(orders: Iterable[Order]) -> List[Dict[str, Any]]:
    return [order_to_record(o) for o in orders]


def resources_from_value(v: Any) -> Optional[List[str]]:
    """Coerce a stored resource list; None when absent or not a list."""
    if not isinstance(v, list):
        return None
    return [str(x) for x in v if isinstance(x, str) and x.strip()]
