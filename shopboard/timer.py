# shopboard/timer.py
from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional, Protocol, Tuple

from .model import Order
from .util.console import eprint

URGENT_THRESHOLD_MS = 5 * 60_000
TICK_PERIOD_S = 1.0

URGENCY_OVERDUE = "overdue"
URGENCY_URGENT = "urgent"
URGENCY_NORMAL = "normal"


class Notifier(Protocol):
    def permission_granted(self) -> bool: ...

    def deliver(self, title: str, body: str) -> None: ...


class ConsoleNotifier:
    """Writes notifications to stderr. Permission is always granted."""

    def permission_granted(self) -> bool:
        return True

    def deliver(self, title: str, body: str) -> None:
        eprint(f"[shopboard] NOTIFY: {title} - {body}")


@dataclass(frozen=True)
class TimerReading:
    order_id: str
    remaining_ms: int
    urgency: str
    label: str


@dataclass(frozen=True)
class NotificationEvent:
    order_id: str
    title: str
    body: str
    delivered: bool


@dataclass(frozen=True)
class TickResult:
    now_ms: int
    readings: Tuple[TimerReading, ...] = ()
    events: Tuple[NotificationEvent, ...] = ()
    errors: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def fired(self) -> bool:
        return bool(self.events)


def classify(remaining_ms: int) -> str:
    if remaining_ms < 0:
        return URGENCY_OVERDUE
    if remaining_ms < URGENT_THRESHOLD_MS:
        return URGENCY_URGENT
    return URGENCY_NORMAL


def decompose_ms(ms: int) -> Tuple[int, int, int, int]:
    """(days, hours, minutes, seconds) of abs(ms); plain modular arithmetic."""
    total_s = abs(int(ms)) // 1000
    days, rem = divmod(total_s, 86400)
    hours, rem = divmod(rem, 3600)
    minutes, seconds = divmod(rem, 60)
    return days, hours, minutes, seconds


def format_time_left(ms: int) -> str:
    if ms < 0:
        return "overdue " + format_time_left(-ms)

    days, hours, minutes, seconds = decompose_ms(ms)
    parts: List[str] = []
    if days > 0:
        parts.append(f"{days}d")
    if hours > 0:
        parts.append(f"{hours}h")
    parts.append(f"{minutes}m")
    parts.append(f"{seconds}s")
    return " ".join(parts)


def overdue_message(order: Order) -> Tuple[str, str]:
    return f"Order overdue: {order.customer_name}", f"{order.order_details} is due now!"


class TimerEngine:
    """Countdown readings plus the one-shot overdue notification.

    `notified` only ever goes False -> True here, so a missed stretch of ticks
    still yields exactly one notification on the next tick.
    """

    def __init__(self, notifier: Optional[Notifier] = None) -> None:
        self.notifier = notifier

    def _deliver(self, title: str, body: str) -> bool:
        n = self.notifier
        if n is None or not n.permission_granted():
            return False
        n.deliver(title, body)
        return True

    def _check(self, order: Order, now_ms: int) -> Tuple[TimerReading, Optional[NotificationEvent]]:
        remaining = int(order.due_time) - int(now_ms)
        reading = TimerReading(
            order_id=order.id,
            remaining_ms=remaining,
            urgency=classify(remaining),
            label=format_time_left(remaining),
        )
        if remaining > 0 or order.notified:
            return reading, None

        order.notified = True
        title, body = overdue_message(order)
        try:
            delivered = self._deliver(title, body)
        except Exception as ex:
            eprint(f"[shopboard.timer] WARN: notification delivery failed id={order.id!r}: {ex}")
            delivered = False
        return reading, NotificationEvent(order_id=order.id, title=title, body=body, delivered=delivered)

    def tick(self, orders: Iterable[Order], now_ms: int) -> TickResult:
        readings: List[TimerReading] = []
        events: List[NotificationEvent] = []
        errors: List[str] = []

        for o in orders:
            try:
                if not o.is_active:
                    continue
                reading, event = self._check(o, now_ms)
            except Exception as ex:
                msg = f"timer failed for order {getattr(o, 'id', '?')!r}: {ex}"
                eprint(f"[shopboard.timer] WARN: {msg}")
                errors.append(msg)
                continue
            readings.append(reading)
            if event is not None:
                events.append(event)

        return TickResult(now_ms=int(now_ms), readings=tuple(readings), events=tuple(events), errors=tuple(errors))


def run_ticks(
    tick: Callable[[], object],
    *,
    period_s: float = TICK_PERIOD_S,
    stop: Optional[threading.Event] = None,
    max_ticks: Optional[int] = None,
) -> int:
    """Call `tick` every `period_s` until `stop` is set; returns ticks run."""
    stop = stop or threading.Event()
    n = 0
    while not stop.is_set():
        try:
            tick()
        except Exception as ex:
            eprint(f"[shopboard.timer] WARN: tick failed: {ex}")
        n += 1
        if max_ticks is not None and n >= max_ticks:
            break
        stop.wait(period_s)
    return n
