"""
Status history recording shared by the order and payment services.
"""
from __future__ import annotations

from uuid import uuid4

from django.utils import timezone

from orders.domain.events import DomainEvent, OrderStatusChanged, PaymentStatusChanged
from orders.domain.order import Order
from orders.domain.state_machine import OrderStateMachine, StatusChange
from orders.infra.event_store import EventStoreRepository


def stamp(event: DomainEvent) -> DomainEvent:
    event.occurred_at = timezone.now().isoformat()
    return event


def record_status_change(
    event_store_repo: EventStoreRepository,
    order: Order,
    change: StatusChange,
    source: str,
) -> None:
    """Append one history entry for an applied transition."""
    if change.dimension == OrderStateMachine.ORDER_DIMENSION:
        event = OrderStatusChanged(
            event_id=uuid4(),
            aggregate_id=order.id,
            event_type="OrderStatusChanged",
            previous_status=change.previous,
            new_status=change.current,
            source=source,
        )
    else:
        event = PaymentStatusChanged(
            event_id=uuid4(),
            aggregate_id=order.id,
            event_type="PaymentStatusChanged",
            previous_status=change.previous,
            new_status=change.current,
            source=source,
            reference=order.payment_reference,
        )
    event_store_repo.save_event(stamp(event), "Order")
