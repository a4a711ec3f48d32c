# shopboard/board.py
from __future__ import annotations

import datetime as dt
import threading
from typing import Any, Callable, Dict, List, Optional, Protocol

from .errors import InvalidInputError, TransportError
from .model import Order
from .normalize import orders_from_records, orders_to_records, resources_from_value
from .resources import ResourceRegistry
from .store import OrderStore
from .sync import RESOURCES_SLOT, SyncGateway
from .timeline import GROUP_BY_RESOURCE, TimelineLayout, TimelineView, layout_day
from .timer import Notifier, TickResult, TimerEngine
from .util.console import eprint, obs_enabled, warn as _default_warn
from .util.duration import require_duration_minutes
from .util.timeparse import now_ms, parse_timestamp_ms
from .util.tz import normalize_tz_name


class KeyValueCache(Protocol):
    def get(self, key: str, default: Any = None) -> Any: ...

    def set(self, key: str, value: Any) -> None: ...


class Board:
    """Single owner of the board state.

    Every mutation runs under one lock and is followed by a whole-document
    save. Saves are optimistic: a failed save only warns and never rolls the
    local state back. Background saves are not ordered against each other.
    """

    def __init__(
        self,
        gateway: SyncGateway,
        *,
        cache: Optional[KeyValueCache] = None,
        notifier: Optional[Notifier] = None,
        tz: str | None = "local",
        clock: Callable[[], int] = now_ms,
        background_saves: bool = True,
        warn: Callable[[str], None] = _default_warn,
        resources: Optional[List[str]] = None,
    ) -> None:
        self.gateway = gateway
        self.cache = cache
        self.tz = normalize_tz_name(tz)
        self.clock = clock
        self.background_saves = background_saves
        self.warn = warn

        self.store = OrderStore(clock=clock)
        self.registry = ResourceRegistry(resources)
        self.view = TimelineView(tz=self.tz)
        self.engine = TimerEngine(notifier)

        self._lock = threading.RLock()
        self._save_threads: List[threading.Thread] = []

    # --- persistence ---------------------------------------------------------

    def _cached_resources(self) -> Optional[List[str]]:
        if self.cache is None:
            return None
        return resources_from_value(self.cache.get(RESOURCES_SLOT))

    def _mirror_resources(self) -> None:
        if self.cache is not None:
            self.cache.set(RESOURCES_SLOT, self.registry.names())

    def load(self) -> bool:
        """Replace local state from the remote store.

        On TransportError the orders are kept, the registry falls back to the
        cached resource list (if any), and False is returned.
        """
        try:
            snap = self.gateway.read()
        except TransportError as e:
            self.warn(f"Could not load orders: {e}")
            cached = self._cached_resources()
            if cached is not None:
                with self._lock:
                    self.registry.replace_all(cached)
            return False

        orders = orders_from_records(snap.orders, self.tz)
        resources = snap.resources
        if resources is None:
            resources = self._cached_resources()

        with self._lock:
            self.store.replace_all(orders)
            if resources is not None:
                self.registry.replace_all(resources)
                self._mirror_resources()

        if obs_enabled():
            eprint(f"[shopboard.board] load.ok orders={len(orders)} resources={len(self.registry)}")
        return True

    def _write(self, orders: List[Dict[str, Any]], resources: List[str]) -> bool:
        try:
            self.gateway.save(orders, resources)
        except TransportError as e:
            self.warn(f"Save failed: {e}")
            return False
        if obs_enabled():
            eprint(f"[shopboard.board] save.ok orders={len(orders)}")
        return True

    def save(self) -> Optional[threading.Thread]:
        with self._lock:
            orders = orders_to_records(self.store.snapshot())
            resources = self.registry.names()
            self._mirror_resources()

        if not self.background_saves:
            self._write(orders, resources)
            return None

        t = threading.Thread(target=self._write, args=(orders, resources), daemon=True)
        self._save_threads = [x for x in self._save_threads if x.is_alive()]
        self._save_threads.append(t)
        t.start()
        return t

    def wait_for_saves(self, timeout_s: Optional[float] = None) -> None:
        for t in list(self._save_threads):
            t.join(timeout_s)

    # --- order commands ------------------------------------------------------

    def add_order(
        self,
        *,
        customer_name: str,
        order_details: str,
        resource: str,
        start: Any,
        duration: Any,
    ) -> Order:
        """Create an order from form-style input.

        `start` is epoch ms or an ISO datetime string (naive means board tz);
        `duration` is "H:MM" or decimal hours.
        """
        minutes = require_duration_minutes(duration)
        start_ms = parse_timestamp_ms(start, self.tz)
        if start_ms is None:
            raise InvalidInputError(f"Invalid start time: {start!r}")

        with self._lock:
            order = self.store.create(
                customer_name=customer_name,
                order_details=order_details,
                resource=resource,
                start_time=start_ms,
                duration_minutes=minutes,
            )
        self.save()
        return order

    def extend_order(self, order_id: str, delta_hours: float) -> Order:
        with self._lock:
            order = self.store.extend(order_id, delta_hours)
        self.save()
        return order

    def complete_order(self, order_id: str, result: str) -> Order:
        with self._lock:
            order = self.store.complete(order_id, result)
        self.save()
        return order

    def restore_order(self, order_id: str) -> Order:
        with self._lock:
            order = self.store.restore(order_id)
        self.save()
        return order

    def delete_order(self, order_id: str) -> bool:
        with self._lock:
            removed = self.store.delete(order_id)
        if removed:
            self.save()
        return removed

    # --- resource commands ---------------------------------------------------

    def add_resource(self, name: str) -> bool:
        with self._lock:
            added = self.registry.add(name)
        if added:
            self.save()
        return added

    def remove_resource(self, name: str) -> bool:
        with self._lock:
            removed = self.registry.remove(name)
        if removed:
            self.save()
        return removed

    # --- derived views -------------------------------------------------------

    def tick(self, now: Optional[int] = None) -> TickResult:
        at = self.clock() if now is None else int(now)
        with self._lock:
            result = self.engine.tick(self.store.list_active(), at)
        if result.fired:
            self.save()
        return result

    def busy_status(self, now: Optional[int] = None) -> Dict[str, bool]:
        at = self.clock() if now is None else int(now)
        with self._lock:
            return self.registry.busy_status(at, self.store.list_active())

    def timeline(self, day: Optional[dt.date] = None, *, group_by: str = GROUP_BY_RESOURCE) -> TimelineLayout:
        with self._lock:
            return layout_day(
                self.store.list_active(),
                day or self.view.day,
                group_by=group_by,
                resources=self.registry.names(),
                tz=self.tz,
            )
