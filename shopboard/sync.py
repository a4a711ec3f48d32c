"""Persistence boundary: remote order store and local resource cache.

The remote store is an opaque document replaced wholesale on every save
(last write wins). Gateways raise TransportError for every failure so the
board can keep its optimistic local state.
"""

from __future__ import annotations

import json
import os
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol
from urllib import error, parse, request

from .errors import TransportError
from .normalize import resources_from_value
from .util.console import eprint, obs_enabled

RESOURCES_SLOT = "resources"
DEFAULT_HTTP_TIMEOUT_S = 30.0


@dataclass(frozen=True)
class RemoteSnapshot:
    orders: List[Dict[str, Any]]
    resources: Optional[List[str]] = None


class SyncGateway(Protocol):
    def read(self) -> RemoteSnapshot: ...

    def save(self, orders: List[Dict[str, Any]], resources: List[str]) -> None: ...


def http_timeout_s() -> float:
    raw = (os.getenv("SHOPBOARD_HTTP_TIMEOUT_S", "") or "").strip()
    try:
        v = float(raw)
        if v > 0:
            return v
    except ValueError:
        pass
    return DEFAULT_HTTP_TIMEOUT_S


def snapshot_from_document(doc: Any) -> RemoteSnapshot:
    """Accept either a bare order list or {"orders": [...], "resources": [...]}."""
    if isinstance(doc, list):
        return RemoteSnapshot(orders=[o for o in doc if isinstance(o, dict)])
    if isinstance(doc, dict):
        orders = doc.get("orders")
        if not isinstance(orders, list):
            raise TransportError("remote document has no order list")
        return RemoteSnapshot(
            orders=[o for o in orders if isinstance(o, dict)],
            resources=resources_from_value(doc.get("resources")),
        )
    raise TransportError(f"remote document must be a list or object; got {type(doc).__name__}")


class HttpSyncGateway:
    """Spreadsheet-script style endpoint: ?action=read / ?action=save."""

    def __init__(self, url: str, *, timeout_s: Optional[float] = None, orders_only: bool = False) -> None:
        if not url:
            raise ValueError("HttpSyncGateway requires a URL")
        self.url = url
        self.timeout_s = http_timeout_s() if timeout_s is None else float(timeout_s)
        self.orders_only = orders_only

    def _action_url(self, action: str) -> str:
        sep = "&" if parse.urlparse(self.url).query else "?"
        return f"{self.url}{sep}action={parse.quote(action)}"

    def _call(self, action: str, body: Any = None) -> Dict[str, Any]:
        url = self._action_url(action)
        if body is None:
            req = request.Request(url, method="GET")
        else:
            data = json.dumps(body, ensure_ascii=False).encode("utf-8")
            req = request.Request(url, data=data, method="POST")
            # text/plain keeps script endpoints from requiring a CORS preflight.
            req.add_header("Content-Type", "text/plain;charset=utf-8")

        t0 = time.monotonic()
        try:
            with request.urlopen(req, timeout=self.timeout_s) as resp:
                text = resp.read().decode("utf-8", errors="replace")
        except error.HTTPError as e:
            elapsed_ms = int((time.monotonic() - t0) * 1000)
            raise TransportError(f"{action} failed: HTTP {e.code} after {elapsed_ms}ms") from e
        except (error.URLError, OSError) as e:
            elapsed_ms = int((time.monotonic() - t0) * 1000)
            raise TransportError(f"{action} failed: connection error after {elapsed_ms}ms: {e}") from e

        elapsed_ms = int((time.monotonic() - t0) * 1000)
        try:
            obj = json.loads(text)
        except ValueError as e:
            raise TransportError(f"{action} failed: response is not JSON ({elapsed_ms}ms)") from e
        if not isinstance(obj, dict):
            raise TransportError(f"{action} failed: response must be a JSON object")
        if obj.get("status") != "success":
            raise TransportError(f"{action} failed: {obj.get('message') or 'Unknown error from server'}")

        if obs_enabled():
            eprint(f"[shopboard.sync] {action}.ok ms={elapsed_ms}")
        return obj

    def read(self) -> RemoteSnapshot:
        obj = self._call("read")
        snap = snapshot_from_document(obj.get("data"))
        if snap.resources is None:
            top = resources_from_value(obj.get("resources"))
            if top is not None:
                snap = RemoteSnapshot(orders=snap.orders, resources=top)
        return snap

    def save(self, orders: List[Dict[str, Any]], resources: List[str]) -> None:
        body: Any = orders if self.orders_only else {"orders": orders, "resources": resources}
        self._call("save", body)


class FileSyncGateway:
    """The remote document kept in a local JSON file."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()

    def read(self) -> RemoteSnapshot:
        if not self.path.exists():
            return RemoteSnapshot(orders=[])
        try:
            doc = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise TransportError(f"read failed: {self.path}: {e}") from e
        return snapshot_from_document(doc)

    def save(self, orders: List[Dict[str, Any]], resources: List[str]) -> None:
        doc = {"orders": orders, "resources": resources}
        with self._lock:
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                tmp = self.path.with_suffix(self.path.suffix + ".tmp")
                tmp.write_text(json.dumps(doc, ensure_ascii=False, indent=2), encoding="utf-8")
                tmp.replace(self.path)
            except OSError as e:
                raise TransportError(f"save failed: {self.path}: {e}") from e


class JsonFileCache:
    """Tiny key/value store in one JSON object file.

    Cache problems never fail the caller: a broken file reads as empty and a
    failed write only warns.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()

    def _load(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            obj = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            eprint(f"[shopboard] WARN: ignoring unreadable cache {self.path}: {e}")
            return {}
        return obj if isinstance(obj, dict) else {}

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            return self._load().get(key, default)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            data = self._load()
            data[key] = value
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                tmp = self.path.with_suffix(self.path.suffix + ".tmp")
                tmp.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
                tmp.replace(self.path)
            except OSError as e:
                eprint(f"[shopboard] WARN: cache write failed {self.path}: {e}")


class MemoryCache:
    def __init__(self) -> None:
        self._data: Dict[str, Any] = {}

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value
