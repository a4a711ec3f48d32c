# shopboard/util/timeparse.py
from __future__ import annotations

import datetime as dt
import math
import time
from typing import Any, Optional

from .tz import resolve_tz


def now_ms() -> int:
    return int(time.time() * 1000)


def parse_date_yyyy_mm_dd(s: str) -> dt.date:
    return dt.datetime.strptime(s, "%Y-%m-%d").date()


def parse_iso_to_epoch_ms(s: str, tz: str | None = "local") -> Optional[int]:
    """Parse an ISO date/datetime string into epoch ms.

    Accepts a trailing "Z". Naive values are interpreted in `tz`.
    """
    if not s:
        return None
    try:
        d = dt.datetime.fromisoformat(s.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    if d.tzinfo is None:
        d = d.replace(tzinfo=resolve_tz(tz))
    return int(d.timestamp() * 1000)


def parse_timestamp_ms(value: Any, tz: str | None = "local") -> Optional[int]:
    """Coerce a stored timestamp into epoch ms.

    The remote store is not strictly typed: values arrive as numbers, numeric
    strings or ISO date strings. Numeric coercion is tried first.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            return None
        return int(value)
    if not isinstance(value, str):
        return None

    s = value.strip()
    if not s:
        return None
    try:
        f = float(s)
    except ValueError:
        return parse_iso_to_epoch_ms(s, tz)
    if not math.isfinite(f):
        return None
    return int(f)
