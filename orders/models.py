"""
Expose ORM models for Django's auto-discovery while keeping real definitions
under the infrastructure module.
"""

from orders.infra.models import (  # noqa: F401
    IdempotencyKey,
    OrderItemORM,
    OrderORM,
    PaymentORM,
    ProductORM,
)
from orders.infra.event_store import EventStore  # noqa: F401
