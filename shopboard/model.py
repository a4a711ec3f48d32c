# shopboard/model.py
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional

STATUS_ACTIVE = "active"
STATUS_COMPLETED = "completed"

RESULT_SUCCESS = "success"
RESULT_FAIL = "fail"
RESULTS = (RESULT_SUCCESS, RESULT_FAIL)

MIN_MS = 60_000
HOUR_MS = 3_600_000
DAY_MS = 24 * HOUR_MS


@dataclass
class Order:
    id: str
    customer_name: str
    order_details: str
    resource: str

    start_time: int        # epoch ms
    due_time: int          # epoch ms
    duration: float        # hours

    notified: bool = False
    status: str = STATUS_ACTIVE
    result: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return self.status != STATUS_COMPLETED

    @property
    def is_completed(self) -> bool:
        return self.status == STATUS_COMPLETED

    def copy(self) -> "Order":
        return replace(self)


__all__ = [
    "Order",
    "STATUS_ACTIVE",
    "STATUS_COMPLETED",
    "RESULT_SUCCESS",
    "RESULT_FAIL",
    "RESULTS",
    "MIN_MS",
    "HOUR_MS",
    "DAY_MS",
]
