from orders.domain.order import (
    CustomerInfo,
    DeliveryMethod,
    Order,
    OrderItem,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
)
from orders.domain.state_machine import OrderStateMachine, StatusChange

__all__ = [
    "CustomerInfo",
    "DeliveryMethod",
    "Order",
    "OrderItem",
    "OrderStatus",
    "PaymentMethod",
    "PaymentStatus",
    "OrderStateMachine",
    "StatusChange",
]
