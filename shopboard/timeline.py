# shopboard/timeline.py
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .model import DAY_MS, HOUR_MS, Order
from .util.tz import midnight_epoch_ms, normalize_tz_name, resolve_tz, today_date

GROUP_BY_RESOURCE = "resource"
GROUP_BY_CUSTOMER = "customer"
GROUP_BY_CHOICES = (GROUP_BY_RESOURCE, GROUP_BY_CUSTOMER)

ZOOM_MIN_HOURS = 4
ZOOM_MAX_HOURS = 24
ZOOM_DEFAULT_HOURS = 12


@dataclass(frozen=True)
class TimelineBlock:
    order_id: str
    label: str
    offset: float          # hours from local midnight, 0..24
    span: float            # hours, > 0
    start_ms: int          # unclipped order interval
    end_ms: int

    @property
    def end(self) -> float:
        return self.offset + self.span

    def time_range(self, tz: str | None = "local") -> str:
        return f"{format_clock(self.start_ms, tz)} - {format_clock(self.end_ms, tz)}"


@dataclass(frozen=True)
class TimelineRow:
    key: str
    blocks: Tuple[TimelineBlock, ...]
    registered: bool = True


@dataclass(frozen=True)
class TimelineLayout:
    day: dt.date
    day_start_ms: int
    group_by: str
    rows: Tuple[TimelineRow, ...] = field(default_factory=tuple)

    def row(self, key: str) -> Optional[TimelineRow]:
        for r in self.rows:
            if r.key == key:
                return r
        return None


def format_clock(ms: int, tz: str | None = "local") -> str:
    return dt.datetime.fromtimestamp(int(ms) / 1000.0, tz=resolve_tz(tz)).strftime("%H:%M")


def day_start_ms(day: dt.date, tz: str | None = "local") -> int:
    return midnight_epoch_ms(day, resolve_tz(tz))


def project_order(order: Order, day_start: int) -> Optional[TimelineBlock]:
    """Clip an order onto the [day_start, day_start + 24h) grid.

    The part outside the window is dropped; degenerate intervals yield None.
    """
    day_end = day_start + DAY_MS
    if order.due_time <= day_start or order.start_time >= day_end:
        return None

    start_hour = max(0.0, (order.start_time - day_start) / HOUR_MS)
    end_hour = min(24.0, (order.due_time - day_start) / HOUR_MS)
    span = end_hour - start_hour
    if span <= 0:
        return None

    return TimelineBlock(
        order_id=order.id,
        label=order.customer_name,
        offset=start_hour,
        span=span,
        start_ms=int(order.start_time),
        end_ms=int(order.due_time),
    )


def _group_key(order: Order, group_by: str) -> str:
    if group_by == GROUP_BY_CUSTOMER:
        return order.customer_name
    return order.resource


def layout_day(
    orders: Iterable[Order],
    day: dt.date,
    *,
    group_by: str = GROUP_BY_RESOURCE,
    resources: Optional[Sequence[str]] = None,
    tz: str | None = "local",
    include_completed: bool = False,
) -> TimelineLayout:
    """Project orders onto one calendar day and bucket them into rows.

    Rows:
      - resource: every registry resource in registry order, then resources
        referenced by orders but no longer registered (sorted)
      - customer: customers with at least one block, sorted
    Blocks keep the input order inside a row; overlaps are not resolved.
    """
    if group_by not in GROUP_BY_CHOICES:
        raise ValueError(f"group_by must be one of {GROUP_BY_CHOICES}; got {group_by!r}")

    start = day_start_ms(day, tz)
    buckets: Dict[str, List[TimelineBlock]] = {}
    for o in orders:
        if not include_completed and o.is_completed:
            continue
        b = project_order(o, start)
        if b is None:
            continue
        buckets.setdefault(_group_key(o, group_by), []).append(b)

    rows: List[TimelineRow] = []
    if group_by == GROUP_BY_RESOURCE:
        registered = list(resources or [])
        for name in registered:
            rows.append(TimelineRow(key=name, blocks=tuple(buckets.get(name, ()))))
        known = set(registered)
        for name in sorted(k for k in buckets if k not in known):
            rows.append(TimelineRow(key=name, blocks=tuple(buckets[name]), registered=False))
    else:
        for name in sorted(buckets):
            rows.append(TimelineRow(key=name, blocks=tuple(buckets[name])))

    return TimelineLayout(day=day, day_start_ms=start, group_by=group_by, rows=tuple(rows))


class TimelineView:
    """Selected day and zoom for the timeline panel."""

    def __init__(self, *, tz: str | None = "local", day: Optional[dt.date] = None, zoom_hours: int = ZOOM_DEFAULT_HOURS) -> None:
        self.tz = normalize_tz_name(tz)
        self.day = day or today_date(resolve_tz(self.tz))
        self.zoom_hours = ZOOM_DEFAULT_HOURS
        self.set_zoom(zoom_hours)

    @property
    def scale_factor(self) -> float:
        return 24 / self.zoom_hours

    def shift_day(self, delta: int) -> dt.date:
        self.day = self.day + dt.timedelta(days=int(delta))
        return self.day

    def go_to_today(self) -> dt.date:
        self.day = today_date(resolve_tz(self.tz))
        return self.day

    def set_zoom(self, hours: int) -> bool:
        """Clamp and apply; returns True when the zoom changed."""
        z = max(ZOOM_MIN_HOURS, min(ZOOM_MAX_HOURS, int(hours)))
        if z == self.zoom_hours:
            return False
        self.zoom_hours = z
        return True

    def change_zoom(self, delta: int) -> bool:
        return self.set_zoom(self.zoom_hours + int(delta))

    @staticmethod
    def hour_markers() -> List[str]:
        return [f"{i:02d}" for i in range(25)]
