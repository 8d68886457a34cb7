"""The order status machine shared by every caller.

pending -> confirmed -> preparing -> shipped -> delivered, and
pending -> cancelled. Nothing else is reachable.
"""

from originate.errors import TerminalState

ORDER_PENDING = "pending"
ORDER_CONFIRMED = "confirmed"
ORDER_PREPARING = "preparing"
ORDER_SHIPPED = "shipped"
ORDER_DELIVERED = "delivered"
ORDER_CANCELLED = "cancelled"

ORDER_STATUSES = (
    ORDER_PENDING,
    ORDER_CONFIRMED,
    ORDER_PREPARING,
    ORDER_SHIPPED,
    ORDER_DELIVERED,
    ORDER_CANCELLED,
)

NEXT_STATUS = {
    ORDER_PENDING: ORDER_CONFIRMED,
    ORDER_CONFIRMED: ORDER_PREPARING,
    ORDER_PREPARING: ORDER_SHIPPED,
    ORDER_SHIPPED: ORDER_DELIVERED,
}

CANCELLABLE_STATUSES = frozenset({ORDER_PENDING})
TERMINAL_STATUSES = frozenset({ORDER_DELIVERED, ORDER_CANCELLED})
ACTIVE_STATUSES = frozenset({ORDER_CONFIRMED, ORDER_PREPARING, ORDER_SHIPPED})


def is_terminal(status: str) -> bool:
    return status in TERMINAL_STATUSES


def is_cancellable(status: str) -> bool:
    return status in CANCELLABLE_STATUSES


def next_status(status: str) -> str:
    if is_terminal(status):
        raise TerminalState()
    try:
        return NEXT_STATUS[status]
    except KeyError:
        raise ValueError(f"unknown order status: {status}") from None
