"""
Domain events recorded as the order status history.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from uuid import UUID


class EventVersion(str, Enum):
    """Event version for upcasting."""
    V1 = "1.0"


@dataclass
class DomainEvent:
    """Base domain event."""
    event_id: UUID
    aggregate_id: UUID
    event_type: str
    # version and occurred_at are set in subclasses to avoid dataclass field ordering issues


@dataclass
class OrderCreated(DomainEvent):
    """Order created with its stock reserved."""
    total_amount: Decimal
    items_count: int
    delivery_method: str
    version: EventVersion = EventVersion.V1
    occurred_at: str = ""


@dataclass
class OrderStatusChanged(DomainEvent):
    """Fulfillment status transition."""
    previous_status: str
    new_status: str
    source: str
    version: EventVersion = EventVersion.V1
    occurred_at: str = ""


@dataclass
class PaymentStatusChanged(DomainEvent):
    """Payment status transition."""
    previous_status: str
    new_status: str
    source: str
    reference: str | None = None
    version: EventVersion = EventVersion.V1
    occurred_at: str = ""


@dataclass
class PaymentInitiated(DomainEvent):
    """Payment session opened with a provider."""
    provider: str
    reference: str
    amount: Decimal
    version: EventVersion = EventVersion.V1
    occurred_at: str = ""
