"""Error taxonomy shared by the board core (library-facing)."""

from __future__ import annotations


class InvalidInputError(ValueError):
    """Raised for unparseable durations, zero-delta extensions, missing resources."""


class NotFoundError(KeyError):
    """Raised when an operation references an order id that is not in the store."""

    def __init__(self, order_id: str) -> None:
        super().__init__(order_id)
        self.order_id = order_id

    def __str__(self) -> str:
        return f"order not found: {self.order_id!r}"


class TransportError(RuntimeError):
    """Raised by sync gateways when a read or save fails."""


__all__ = ["InvalidInputError", "NotFoundError", "TransportError"]
