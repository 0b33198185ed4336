"""
Domain model for Order aggregate.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from uuid import UUID, uuid4

from orders.domain.exceptions import InvalidInput


CENT = Decimal("0.01")
ZERO = Decimal("0.00")
# Money columns are DECIMAL(10, 2)
MAX_AMOUNT = Decimal("100000000")


def to_money(value) -> Decimal:
    """Convert value to a non-negative two-decimal amount."""
    if isinstance(value, bool):
        raise InvalidInput(f"Invalid amount: {value!r}")
    try:
        amount = Decimal(str(value))
        if not amount.is_finite():
            raise InvalidInput(f"Invalid amount: {value!r}")
        amount = amount.quantize(CENT)
    except (InvalidOperation, ValueError, TypeError):
        raise InvalidInput(f"Invalid amount: {value!r}")
    if amount < 0:
        raise InvalidInput("Amount must be non-negative")
    if amount >= MAX_AMOUNT:
        raise InvalidInput(f"Amount exceeds the maximum of {MAX_AMOUNT - CENT}")
    return amount


class OrderStatus(str, Enum):
    """Fulfillment status enumeration."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    READY = "ready"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    """Payment status enumeration."""
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


class DeliveryMethod(str, Enum):
    PICKUP = "pickup"
    DELIVERY = "delivery"


class PaymentMethod(str, Enum):
    WAVE = "wave"
    ORANGE_MONEY = "orange_money"
    CASH = "cash"


def parse_choice(enum_cls, value, field: str):
    """Parse a raw value into ``enum_cls`` or raise InvalidInput."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise InvalidInput(f"Invalid {field}: {value!r}. Allowed values: {allowed}")


@dataclass(frozen=True)
class CustomerInfo:
    """Customer contact fields captured on the order."""
    name: str
    email: str
    phone: str
    delivery_address: str | None = None
    user_id: UUID | None = None
    notes: str = ""


class OrderItem:
    """Order line item: price/name snapshot of a catalog product."""

    def __init__(
        self,
        product_id: UUID,
        product_name: str,
        product_price: Decimal,
        quantity: int,
        id: UUID | None = None,
    ):
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            raise InvalidInput("Quantity must be a positive integer")

        self.id = id or uuid4()
        self.product_id = product_id
        self.product_name = product_name
        self.product_price = to_money(product_price)
        self.quantity = quantity

    @property
    def subtotal(self) -> Decimal:
        """Calculate item subtotal."""
        return (self.product_price * self.quantity).quantize(CENT)


class Order:
    """Order aggregate root."""

    def __init__(
        self,
        customer: CustomerInfo,
        id: UUID | None = None,
        items: list[OrderItem] | None = None,
        delivery_method: DeliveryMethod = DeliveryMethod.PICKUP,
        payment_method: PaymentMethod = PaymentMethod.CASH,
        delivery_fee: Decimal = ZERO,
        order_status: OrderStatus = OrderStatus.PENDING,
        payment_status: PaymentStatus = PaymentStatus.PENDING,
        payment_reference: str | None = None,
        admin_notes: str = "",
        created_at: datetime | None = None,
        updated_at: datetime | None = None,
        completed_at: datetime | None = None,
    ):
        self.id = id or uuid4()
        self.customer = customer
        self._items = items or []
        self.delivery_method = delivery_method
        self.payment_method = payment_method
        self.delivery_fee = to_money(delivery_fee)
        self.order_status = order_status
        self.payment_status = payment_status
        self.payment_reference = payment_reference
        self.admin_notes = admin_notes
        self.created_at = created_at
        self.updated_at = updated_at
        self.completed_at = completed_at

    @classmethod
    def place(
        cls,
        customer: CustomerInfo,
        delivery_method: DeliveryMethod,
        payment_method: PaymentMethod,
        items: list[OrderItem],
        delivery_fee: Decimal,
    ) -> "Order":
        """Build a new pending order, applying the delivery surcharge."""
        if not items:
            raise InvalidInput("Order must contain at least one item")
        if delivery_method == DeliveryMethod.DELIVERY and not customer.delivery_address:
            raise InvalidInput("delivery_address is required for delivery orders")

        fee = delivery_fee if delivery_method == DeliveryMethod.DELIVERY else ZERO
        order = cls(
            customer=customer,
            items=list(items),
            delivery_method=delivery_method,
            payment_method=payment_method,
            delivery_fee=fee,
        )
        if order.total_amount >= MAX_AMOUNT:
            raise InvalidInput(f"Order total exceeds the maximum of {MAX_AMOUNT - CENT}")
        return order

    @property
    def user_id(self) -> UUID | None:
        return self.customer.user_id

    @property
    def items(self) -> list[OrderItem]:
        """Get order items (immutable)."""
        return list(self._items)

    @property
    def subtotal(self) -> Decimal:
        """Sum of item subtotals."""
        return sum((item.subtotal for item in self._items), ZERO)

    @property
    def total_amount(self) -> Decimal:
        """Calculate total order amount."""
        return self.subtotal + self.delivery_fee

    @property
    def is_paid(self) -> bool:
        return self.payment_status == PaymentStatus.COMPLETED
