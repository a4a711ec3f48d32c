# shopboard/util/duration.py
from __future__ import annotations

import math
from typing import Any

from ..errors import InvalidInputError

NAN = float("nan")


def _to_number(s: str) -> float:
    # Blank components count as zero ("1:" is one hour).
    s = s.strip()
    if not s:
        return 0.0
    try:
        v = float(s)
    except ValueError:
        return NAN
    return v if math.isfinite(v) else NAN


def parse_duration(text: Any) -> float:
    """Parse "H:MM" or decimal hours into minutes.

    Empty input is 0; anything unparseable is NaN.
    """
    if text is None:
        return 0.0
    s = str(text).strip()
    if not s:
        return 0.0

    if ":" in s:
        h_s, _, m_s = s.partition(":")
        if ":" in m_s:
            return NAN
        return _to_number(h_s) * 60 + _to_number(m_s)

    return _to_number(s) * 60


def format_duration(minutes: float, colon_form: bool) -> str:
    if colon_form:
        total = int(round(minutes))
        h, m = divmod(total, 60)
        return f"{h}:{m:02d}"

    hours = minutes / 60
    truncated = math.trunc(hours * 100 + math.copysign(1e-9, hours)) / 100
    out = f"{truncated:.2f}".rstrip("0").rstrip(".")
    return out or "0"


def adjust_duration(current: Any, delta_hours: float) -> str:
    s = "" if current is None else str(current)
    minutes = parse_duration(s)
    if math.isnan(minutes):
        raise InvalidInputError(f"Invalid duration: {s!r}")
    minutes += delta_hours * 60
    if minutes < 1:
        minutes = 1
    return format_duration(minutes, ":" in s)


def require_duration_minutes(text: Any) -> float:
    """Parse a duration the way the add-order form does: zero is rejected too."""
    minutes = parse_duration(text)
    if math.isnan(minutes) or minutes <= 0:
        raise InvalidInputError(f"Enter a valid duration (e.g. 1.5 or 1:30); got {text!r}")
    return minutes


def format_hours(hours: float) -> str:
    return f"{round(float(hours), 1):g} h"
