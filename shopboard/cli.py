from __future__ import annotations

import argparse
import os
import threading
from pathlib import Path
from typing import List

from .board import Board
from .errors import InvalidInputError, NotFoundError
from .model import RESULTS, Order
from .sync import FileSyncGateway, HttpSyncGateway, JsonFileCache
from .timeline import GROUP_BY_CHOICES, GROUP_BY_RESOURCE, format_clock
from .timer import TICK_PERIOD_S, ConsoleNotifier, format_time_left, run_ticks
from .util.duration import format_hours
from .util.timeparse import parse_date_yyyy_mm_dd
from .util.tz import normalize_tz_name, resolve_tz


def _default_cache_path() -> str:
    return os.getenv("SHOPBOARD_CACHE") or str(Path.home() / ".shopboard" / "cache.json")


def _build_board(args: argparse.Namespace, *, background_saves: bool) -> Board:
    if args.url:
        gateway = HttpSyncGateway(args.url)
    elif args.data:
        gateway = FileSyncGateway(Path(args.data))
    else:
        raise SystemExit("No order store configured: pass --url / --data or set SHOPBOARD_API_URL / SHOPBOARD_DATA.")

    notifier = ConsoleNotifier() if args.command == "watch" else None
    return Board(
        gateway,
        cache=JsonFileCache(Path(args.cache)),
        notifier=notifier,
        tz=args.tz,
        background_saves=background_saves,
    )


def _order_line(o: Order, now_ms: int, tz: str) -> str:
    due = format_clock(o.due_time, tz)
    if o.is_completed:
        state = f"completed/{o.result or '-'}"
    else:
        state = format_time_left(o.due_time - now_ms)
    return f"{o.id}  {o.customer_name} [{o.resource}]  {format_hours(o.duration)}  due {due}  {state}"


def _cmd_list(board: Board, args: argparse.Namespace) -> None:
    now = board.clock()
    orders = board.store.list_completed() if args.completed else board.store.list_active()
    if not orders:
        print("No orders.")
        return
    for o in orders:
        print(_order_line(o, now, board.tz))


def _cmd_add(board: Board, args: argparse.Namespace) -> None:
    start = args.start if args.start else board.clock()
    o = board.add_order(
        customer_name=args.customer,
        order_details=args.details,
        resource=args.resource,
        start=start,
        duration=args.duration,
    )
    print(o.id)


def _cmd_resources(board: Board, args: argparse.Namespace) -> None:
    for name in args.add or []:
        if not board.add_resource(name):
            print(f"skipped: {name!r} is empty or already registered")
    for name in args.remove or []:
        board.remove_resource(name)
    busy = board.busy_status()
    for name in board.registry:
        print(f"{name}\t{'busy' if busy.get(name) else 'idle'}")


def _cmd_timeline(board: Board, args: argparse.Namespace) -> None:
    day = parse_date_yyyy_mm_dd(args.date) if args.date else None
    layout = board.timeline(day, group_by=args.group)
    print(f"# {layout.day.isoformat()} ({layout.group_by})")
    for row in layout.rows:
        suffix = "" if row.registered else " (unregistered)"
        print(f"{row.key}{suffix}")
        for b in row.blocks:
            print(f"  {b.offset:5.2f}h +{b.span:5.2f}h  {b.label}  {b.time_range(board.tz)}")


def _cmd_watch(board: Board, args: argparse.Namespace) -> None:
    def _tick() -> None:
        res = board.tick()
        for ev in res.events:
            print(f"{ev.order_id}\t{ev.title}")

    stop = threading.Event()
    try:
        run_ticks(_tick, period_s=float(args.interval), stop=stop, max_ticks=args.ticks)
    except KeyboardInterrupt:
        stop.set()
    board.wait_for_saves(timeout_s=5.0)


def main(argv: List[str] | None = None) -> None:
    ap = argparse.ArgumentParser(description="Shop order scheduling board: orders, resources, timeline, countdowns.")
    ap.add_argument("--url", default=os.getenv("SHOPBOARD_API_URL"), help="Remote store URL (default: env SHOPBOARD_API_URL)")
    ap.add_argument("--data", default=os.getenv("SHOPBOARD_DATA"), help="Local JSON order store (default: env SHOPBOARD_DATA)")
    ap.add_argument("--cache", default=_default_cache_path(), help="Resource cache file (default: ~/.shopboard/cache.json)")
    ap.add_argument(
        "--tz",
        default=os.getenv("SHOPBOARD_TZ", "local"),
        help="Timezone for day boundaries and clock display (default: env SHOPBOARD_TZ or 'local')",
    )

    sub = ap.add_subparsers(dest="command", required=True)

    p = sub.add_parser("list", help="List active orders")
    p.add_argument("--completed", action="store_true", help="List completed orders instead")

    p = sub.add_parser("add", help="Add an order")
    p.add_argument("--customer", required=True)
    p.add_argument("--details", default="")
    p.add_argument("--resource", required=True)
    p.add_argument("--start", default=None, help="Start YYYY-MM-DDTHH:MM in --tz (default: now)")
    p.add_argument("--duration", default="1", help="Hours as 1.5 or 1:30 (default: 1)")

    p = sub.add_parser("extend", help="Extend an order by N hours")
    p.add_argument("id")
    p.add_argument("hours", type=float)

    p = sub.add_parser("complete", help="Mark an order completed")
    p.add_argument("id")
    p.add_argument("--result", choices=RESULTS, default="success")

    p = sub.add_parser("restore", help="Move a completed order back to active")
    p.add_argument("id")

    p = sub.add_parser("delete", help="Delete an order permanently")
    p.add_argument("id")

    p = sub.add_parser("resources", help="Show, add or remove resources")
    p.add_argument("--add", action="append", help="Resource name to add (repeatable)")
    p.add_argument("--remove", action="append", help="Resource name to remove (repeatable)")

    p = sub.add_parser("timeline", help="Print the day timeline")
    p.add_argument("--date", default=None, help="Day YYYY-MM-DD (default: today in --tz)")
    p.add_argument("--group", choices=GROUP_BY_CHOICES, default=GROUP_BY_RESOURCE)

    p = sub.add_parser("watch", help="Run the countdown loop and notify overdue orders")
    p.add_argument("--interval", type=float, default=TICK_PERIOD_S)
    p.add_argument("--ticks", type=int, default=None, help="Stop after N ticks (default: run until interrupted)")

    args = ap.parse_args(argv)

    args.tz = normalize_tz_name(args.tz)
    try:
        resolve_tz(args.tz)
    except ValueError as e:
        raise SystemExit(f"Invalid --tz value: {e}")

    board = _build_board(args, background_saves=args.command == "watch")
    if not board.load():
        raise SystemExit("Failed to load orders from the store.")

    try:
        if args.command == "list":
            _cmd_list(board, args)
        elif args.command == "add":
            _cmd_add(board, args)
        elif args.command == "extend":
            print(board.extend_order(args.id, args.hours).id)
        elif args.command == "complete":
            print(board.complete_order(args.id, args.result).id)
        elif args.command == "restore":
            print(board.restore_order(args.id).id)
        elif args.command == "delete":
            board.delete_order(args.id)
        elif args.command == "resources":
            _cmd_resources(board, args)
        elif args.command == "timeline":
            _cmd_timeline(board, args)
        elif args.command == "watch":
            _cmd_watch(board, args)
    except (InvalidInputError, NotFoundError) as e:
        raise SystemExit(f"[shopboard] ERROR: {e}")


if __name__ == "__main__":
    main()
