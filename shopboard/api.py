"""shopboard.api

Stable *library* entrypoint for shopboard.

Policy:
  - Only names listed in __all__ are considered public API.
  - Everything else is internal and may change without notice.
"""

from __future__ import annotations

from shopboard.board import Board
from shopboard.errors import InvalidInputError, NotFoundError, TransportError
from shopboard.model import (
    RESULT_FAIL,
    RESULT_SUCCESS,
    STATUS_ACTIVE,
    STATUS_COMPLETED,
    Order,
)
from shopboard.normalize import order_from_record, order_to_record, orders_from_records, orders_to_records
from shopboard.resources import DEFAULT_RESOURCES, ResourceRegistry
from shopboard.store import OrderStore
from shopboard.sync import FileSyncGateway, HttpSyncGateway, JsonFileCache, MemoryCache, RemoteSnapshot
from shopboard.timeline import TimelineBlock, TimelineLayout, TimelineRow, TimelineView, layout_day, project_order
from shopboard.timer import (
    ConsoleNotifier,
    NotificationEvent,
    TickResult,
    TimerEngine,
    TimerReading,
    classify,
    format_time_left,
)
from shopboard.util.duration import adjust_duration, format_duration, parse_duration

# --- Public API exports -------------------------------------------------------
_PUBLIC_EXPORTS = [
    "Board",
    "Order",
    "OrderStore",
    "ResourceRegistry",
    "DEFAULT_RESOURCES",
    "TimerEngine",
    "TimerReading",
    "TickResult",
    "NotificationEvent",
    "ConsoleNotifier",
    "classify",
    "format_time_left",
    "TimelineBlock",
    "TimelineRow",
    "TimelineLayout",
    "TimelineView",
    "layout_day",
    "project_order",
    "parse_duration",
    "format_duration",
    "adjust_duration",
    "order_from_record",
    "order_to_record",
    "orders_from_records",
    "orders_to_records",
    "RemoteSnapshot",
    "HttpSyncGateway",
    "FileSyncGateway",
    "JsonFileCache",
    "MemoryCache",
    "InvalidInputError",
    "NotFoundError",
    "TransportError",
    "STATUS_ACTIVE",
    "STATUS_COMPLETED",
    "RESULT_SUCCESS",
    "RESULT_FAIL",
]

__all__ = [n for n in _PUBLIC_EXPORTS if n in globals()]
# --- /Public API exports ------------------------------------------------------
