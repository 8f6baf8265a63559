# backoffice/services/order_state.py
"""
Order status state machine.

    CREATED -> PAID -> ON_THE_WAY -> DELIVERED -> RETURNED
    CREATED -> CANCELED
    PAID    -> CANCELED

Every legality check (advance, update, cancel) reads TRANSITIONS.
DELIVERED is not final: its only successor is RETURNED, so advancing a
delivered order records a return.
"""
from datetime import datetime, timedelta, timezone

from backoffice.core.errors import InvalidArgumentError
from backoffice.models.enums import OrderStatus
from backoffice.models.order import Order

TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.CREATED: frozenset({OrderStatus.PAID, OrderStatus.CANCELED}),
    OrderStatus.PAID: frozenset({OrderStatus.ON_THE_WAY, OrderStatus.CANCELED}),
    OrderStatus.ON_THE_WAY: frozenset({OrderStatus.DELIVERED}),
    OrderStatus.DELIVERED: frozenset({OrderStatus.RETURNED}),
    OrderStatus.CANCELED: frozenset(),
    OrderStatus.RETURNED: frozenset(),
}

# Shipping details are frozen once the order leaves this state.
EDITABLE_STATUSES: frozenset[OrderStatus] = frozenset({OrderStatus.CREATED})


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def touch(order: Order) -> None:
    """Refresh updated_at, always moving it forward."""
    now = _utcnow()
    if order.updated_at is not None:
        previous = _as_utc(order.updated_at)
        if now <= previous:
            now = previous + timedelta(microseconds=1)
    order.updated_at = now


class OrderStateMachine:
    """
    Decides which status changes an order may take and applies them.

    Mutating methods change the in-memory Order only; persisting it is
    the caller's job.
    """

    def __init__(self, transitions: dict[OrderStatus, frozenset[OrderStatus]] = TRANSITIONS):
        self.transitions = transitions

    def allowed(self, status: OrderStatus) -> frozenset[OrderStatus]:
        return self.transitions.get(status, frozenset())

    def is_final(self, status: OrderStatus) -> bool:
        return not self.allowed(status)

    def next_status(self, status: OrderStatus) -> OrderStatus | None:
        """The single forward successor, or None for final statuses."""
        forward = self.allowed(status) - {OrderStatus.CANCELED}
        if not forward:
            return None
        (successor,) = forward
        return successor

    def can_update(self, order: Order) -> bool:
        return order.order_status in EDITABLE_STATUSES

    def can_cancel(self, order: Order) -> bool:
        return OrderStatus.CANCELED in self.allowed(order.order_status)

    # ---- guards ----

    def ensure_can_update(self, order: Order) -> None:
        if not self.can_update(order):
            raise InvalidArgumentError(
                f"Order with id: {order.id} is already in status "
                f"'{order.order_status.name}' and can not be updated."
            )

    def ensure_can_cancel(self, order: Order) -> None:
        if not self.can_cancel(order):
            raise InvalidArgumentError(
                f"Order with id: {order.id} is already in status "
                f"'{order.order_status.name}' and can not be canceled."
            )

    # ---- transitions ----

    def advance(self, order: Order) -> tuple[OrderStatus, OrderStatus]:
        """
        Move the order one step along the forward chain.

        Returns:
            (previous status, new status)

        Raises:
            InvalidArgumentError: if the order is in a final status.
        """
        current = order.order_status
        successor = self.next_status(current)
        if successor is None:
            raise InvalidArgumentError(
                f"Order with id: {order.id} is in final status {current.name} "
                "and the status can not be changed."
            )
        order.order_status = successor
        touch(order)
        return current, successor

    def cancel(self, order: Order) -> None:
        self.ensure_can_cancel(order)
        order.order_status = OrderStatus.CANCELED
        touch(order)
