# shopboard/store.py
from __future__ import annotations

import math
from typing import Callable, Iterable, Iterator, List, Optional

from .errors import InvalidInputError, NotFoundError
from .model import HOUR_MS, MIN_MS, RESULTS, STATUS_ACTIVE, STATUS_COMPLETED, Order
from .util.timeparse import now_ms


def _is_number(v: object) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool)


class OrderStore:
    """In-memory order collection kept sorted ascending by due_time.

    The sort is re-applied after every operation that moves a due_time
    (create, extend, replace_all). Status-only changes keep the order as-is.
    """

    def __init__(self, orders: Optional[Iterable[Order]] = None, *, clock: Callable[[], int] = now_ms) -> None:
        self._orders: List[Order] = list(orders or [])
        self._clock = clock
        self._sort()

    def _sort(self) -> None:
        self._orders.sort(key=lambda o: o.due_time)

    def _next_id(self) -> str:
        taken = {o.id for o in self._orders}
        n = int(self._clock())
        while str(n) in taken:
            n += 1
        return str(n)

    # --- queries -------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._orders)

    def __iter__(self) -> Iterator[Order]:
        return iter(list(self._orders))

    def get(self, order_id: str) -> Optional[Order]:
        for o in self._orders:
            if o.id == order_id:
                return o
        return None

    def require(self, order_id: str) -> Order:
        o = self.get(order_id)
        if o is None:
            raise NotFoundError(order_id)
        return o

    def list_active(self) -> List[Order]:
        return [o for o in self._orders if o.is_active]

    def list_completed(self) -> List[Order]:
        return [o for o in self._orders if o.is_completed]

    def snapshot(self) -> List[Order]:
        return [o.copy() for o in self._orders]

    # --- lifecycle -----------------------------------------------------------

    def create(
        self,
        *,
        customer_name: str,
        order_details: str,
        resource: str,
        start_time: Optional[int],
        duration_minutes: float,
    ) -> Order:
        if not str(resource or "").strip():
            raise InvalidInputError("Select a resource for the order")
        if not _is_number(start_time):
            raise InvalidInputError("Order start time is required")
        if not _is_number(duration_minutes) or math.isnan(duration_minutes) or duration_minutes <= 0:
            raise InvalidInputError(f"Enter a valid duration; got {duration_minutes!r}")

        start = int(start_time)  # type: ignore[arg-type]
        order = Order(
            id=self._next_id(),
            customer_name=str(customer_name or ""),
            order_details=str(order_details or ""),
            resource=str(resource),
            start_time=start,
            due_time=start + int(round(duration_minutes * MIN_MS)),
            duration=duration_minutes / 60,
            notified=False,
            status=STATUS_ACTIVE,
        )
        self._orders.append(order)
        self._sort()
        return order

    def extend(self, order_id: str, delta_hours: float) -> Order:
        order = self.require(order_id)
        if not _is_number(delta_hours) or math.isnan(delta_hours) or math.isinf(delta_hours) or delta_hours == 0:
            raise InvalidInputError(f"Enter a valid non-zero number of hours; got {delta_hours!r}")

        order.duration += delta_hours
        order.due_time += int(round(delta_hours * HOUR_MS))
        self._sort()
        return order

    def complete(self, order_id: str, result: str) -> Order:
        order = self.require(order_id)
        if result not in RESULTS:
            raise InvalidInputError(f"result must be one of {', '.join(RESULTS)}; got {result!r}")
        order.status = STATUS_COMPLETED
        order.result = result
        return order

    def restore(self, order_id: str) -> Order:
        """Move a completed order back to active. `result` is left as it was."""
        order = self.require(order_id)
        if order.is_active:
            return order
        order.status = STATUS_ACTIVE
        return order

    def delete(self, order_id: str) -> bool:
        before = len(self._orders)
        self._orders = [o for o in self._orders if o.id != order_id]
        return len(self._orders) != before

    def replace_all(self, orders: Iterable[Order]) -> None:
        self._orders = list(orders)
        self._sort()
