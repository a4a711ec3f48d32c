# shopboard/resources.py
from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Optional

from .model import Order

DEFAULT_RESOURCES = ("Machine A", "Machine B", "Operator C")


class ResourceRegistry:
    """Ordered set of resource names (exact, case-sensitive uniqueness).

    Orders hold resource names as plain strings; removing a resource never
    touches them.
    """

    def __init__(self, names: Optional[Iterable[str]] = None) -> None:
        self._names: List[str] = []
        self.replace_all(DEFAULT_RESOURCES if names is None else names)

    def __len__(self) -> int:
        return len(self._names)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._names))

    def __contains__(self, name: object) -> bool:
        return name in self._names

    def names(self) -> List[str]:
        return list(self._names)

    def add(self, name: str) -> bool:
        n = str(name or "").strip()
        if not n or n in self._names:
            return False
        self._names.append(n)
        return True

    def remove(self, name: str) -> bool:
        if name not in self._names:
            return False
        self._names = [n for n in self._names if n != name]
        return True

    def replace_all(self, names: Iterable[str]) -> None:
        self._names = []
        for n in names:
            self.add(n)

    def busy_status(self, now_ms: int, orders: Iterable[Order]) -> Dict[str, bool]:
        running = {
            o.resource
            for o in orders
            if o.is_active and o.start_time <= now_ms < o.due_time
        }
        return {n: n in running for n in self._names}
