"""
Legal order-status and payment-status transitions.
"""
from __future__ import annotations

from dataclasses import dataclass

from django.utils import timezone

from orders.domain.exceptions import InvalidTransition
from orders.domain.order import Order, OrderStatus, PaymentStatus


ORDER_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.CONFIRMED, OrderStatus.CANCELLED}),
    OrderStatus.CONFIRMED: frozenset({OrderStatus.PREPARING, OrderStatus.CANCELLED}),
    OrderStatus.PREPARING: frozenset({OrderStatus.READY, OrderStatus.CANCELLED}),
    OrderStatus.READY: frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELLED}),
    OrderStatus.COMPLETED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}

PAYMENT_TRANSITIONS: dict[PaymentStatus, frozenset[PaymentStatus]] = {
    PaymentStatus.PENDING: frozenset({PaymentStatus.COMPLETED, PaymentStatus.FAILED}),
    PaymentStatus.COMPLETED: frozenset({PaymentStatus.REFUNDED}),
    PaymentStatus.FAILED: frozenset({PaymentStatus.PENDING}),
    PaymentStatus.REFUNDED: frozenset(),
}


@dataclass(frozen=True)
class StatusChange:
    """One applied transition on a single status dimension."""
    dimension: str
    previous: str
    current: str


class OrderStateMachine:
    """Validates and applies status transitions on an Order aggregate."""

    ORDER_DIMENSION = "order_status"
    PAYMENT_DIMENSION = "payment_status"

    def allowed_targets(self, current: OrderStatus | PaymentStatus) -> frozenset:
        if isinstance(current, OrderStatus):
            return ORDER_TRANSITIONS[current]
        return PAYMENT_TRANSITIONS[current]

    def can_transition(self, current: OrderStatus | PaymentStatus, target: OrderStatus | PaymentStatus) -> bool:
        if type(current) is not type(target):
            return False
        return target in self.allowed_targets(current)

    def is_terminal(self, status: OrderStatus | PaymentStatus) -> bool:
        return not self.allowed_targets(status)

    def transition(self, order: Order, target: OrderStatus | PaymentStatus) -> StatusChange:
        """
        Move ``order`` to ``target`` on the dimension the target belongs to.

        Raises InvalidTransition when the edge does not exist. Entering
        ``completed`` on the order dimension stamps ``completed_at``.
        """
        if isinstance(target, OrderStatus):
            dimension = self.ORDER_DIMENSION
            current = order.order_status
        elif isinstance(target, PaymentStatus):
            dimension = self.PAYMENT_DIMENSION
            current = order.payment_status
        else:
            raise TypeError(f"Unsupported status type: {type(target).__name__}")

        if not self.can_transition(current, target):
            raise InvalidTransition(
                f"Order {order.id}: cannot change {dimension} "
                f"from '{current.value}' to '{target.value}'"
            )

        if dimension == self.ORDER_DIMENSION:
            order.order_status = target
            if target == OrderStatus.COMPLETED:
                order.completed_at = timezone.now()
        else:
            order.payment_status = target

        return StatusChange(dimension=dimension, previous=current.value, current=target.value)
