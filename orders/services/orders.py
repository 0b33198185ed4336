"""
Application service for the order lifecycle.
"""
from __future__ import annotations

from decimal import Decimal
from uuid import UUID, uuid4

from django.conf import settings
from django.db import transaction

from orders.domain.events import OrderCreated
from orders.domain.exceptions import InvalidInput, NotFound
from orders.domain.order import (
    CustomerInfo,
    DeliveryMethod,
    Order,
    OrderItem,
    OrderStatus,
    PaymentMethod,
    parse_choice,
)
from orders.domain.state_machine import OrderStateMachine
from orders.infra.event_store import EventStoreRepository
from orders.infra.pii_masker import mask_pii_in_dict
from orders.infra.repositories import OrderRepository
from orders.infra.stock_ledger import StockLedger
from orders.services.history import record_status_change, stamp
import logging


logger = logging.getLogger(__name__)


def parse_uuid(value, field: str) -> UUID:
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except (ValueError, TypeError, AttributeError):
        raise InvalidInput(f"Invalid {field}: {value!r}")


def build_items(items: list[dict]) -> list[OrderItem]:
    """Turn raw cart lines into OrderItem snapshots."""
    if not isinstance(items, list) or not items:
        raise InvalidInput("Order must contain at least one item")

    order_items = []
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            raise InvalidInput(f"items[{index}] must be an object")
        missing = [
            key for key in ("product_id", "product_name", "product_price", "quantity")
            if item.get(key) in (None, "")
        ]
        if missing:
            raise InvalidInput(f"items[{index}] is missing: {', '.join(missing)}")

        order_items.append(OrderItem(
            product_id=parse_uuid(item["product_id"], f"items[{index}].product_id"),
            product_name=str(item["product_name"]),
            product_price=item["product_price"],
            quantity=item["quantity"],
        ))
    return order_items


class OrderService:
    """Service for order operations."""

    def __init__(
        self,
        order_repo: OrderRepository | None = None,
        stock_ledger: StockLedger | None = None,
        state_machine: OrderStateMachine | None = None,
        event_store_repo: EventStoreRepository | None = None,
        delivery_fee: Decimal | None = None,
    ):
        self.order_repo = order_repo or OrderRepository()
        self.stock_ledger = stock_ledger or StockLedger()
        self.state_machine = state_machine or OrderStateMachine()
        self.event_store_repo = event_store_repo or EventStoreRepository()
        self.delivery_fee = (
            delivery_fee if delivery_fee is not None else Decimal(str(settings.ORDERS["DELIVERY_FEE"]))
        )

    def create_order(
        self,
        customer: CustomerInfo,
        delivery_method: str,
        payment_method: str,
        items: list[dict],
    ) -> Order:
        """
        Place an order: reserve stock for every line and persist the order.

        Reservations, the order row, the item rows and the creation event
        commit together. If any reservation fails, the rollback releases the
        ones already taken and the error surfaces to the caller.
        """
        order = Order.place(
            customer=customer,
            delivery_method=parse_choice(DeliveryMethod, delivery_method, "delivery_method"),
            payment_method=parse_choice(PaymentMethod, payment_method, "payment_method"),
            items=build_items(items),
            delivery_fee=self.delivery_fee,
        )

        reserved = 0
        try:
            with transaction.atomic():
                # Fixed lock order keeps concurrent multi-line orders from deadlocking
                for item in sorted(order.items, key=lambda i: str(i.product_id)):
                    self.stock_ledger.reserve(item.product_id, item.quantity)
                    reserved += 1

                self.order_repo.save(order)

                event = OrderCreated(
                    event_id=uuid4(),
                    aggregate_id=order.id,
                    event_type="OrderCreated",
                    total_amount=order.total_amount,
                    items_count=len(order.items),
                    delivery_method=order.delivery_method.value,
                )
                self.event_store_repo.save_event(stamp(event), "Order")
        except Exception:
            if reserved:
                logger.info(
                    "order_reservations_rolled_back",
                    extra={"order_id": str(order.id), "quantity": reserved},
                )
            raise

        logger.info(
            "order_created",
            extra={
                "order_id": str(order.id),
                "status": order.order_status.value,
                "customer": mask_pii_in_dict({
                    "customer_name": customer.name,
                    "customer_phone": customer.phone,
                }),
            },
        )
        return self.get_order(order.id)

    def cancel_order(self, order_id: UUID) -> Order:
        """Cancel order and return every reserved unit to stock."""
        with transaction.atomic():
            order = self.order_repo.get_for_update(order_id)
            if not order:
                raise NotFound(f"Order {order_id} not found")

            change = self.state_machine.transition(order, OrderStatus.CANCELLED)

            for item in sorted(order.items, key=lambda i: str(i.product_id)):
                self.stock_ledger.release(item.product_id, item.quantity)

            self.order_repo.save(order)
            record_status_change(self.event_store_repo, order, change, source="cancel")

        logger.info("order_cancelled", extra={"order_id": str(order_id), "status": change.previous})
        return order

    def update_order_status(self, order_id: UUID, new_status: str) -> Order:
        """Move order to ``new_status``; cancellation goes through cancel_order."""
        target = parse_choice(OrderStatus, new_status, "status")
        if target == OrderStatus.CANCELLED:
            return self.cancel_order(order_id)

        with transaction.atomic():
            order = self.order_repo.get_for_update(order_id)
            if not order:
                raise NotFound(f"Order {order_id} not found")

            change = self.state_machine.transition(order, target)
            self.order_repo.save(order)
            record_status_change(self.event_store_repo, order, change, source="status_update")

        logger.info(
            "order_status_updated",
            extra={"order_id": str(order_id), "status": f"{change.previous}->{change.current}"},
        )
        return order

    def update_admin_notes(self, order_id: UUID, admin_notes: str) -> Order:
        """Replace the staff-only notes of an order."""
        if not isinstance(admin_notes, str):
            raise InvalidInput("admin_notes must be a string")

        with transaction.atomic():
            order = self.order_repo.get_for_update(order_id)
            if not order:
                raise NotFound(f"Order {order_id} not found")
            order.admin_notes = admin_notes
            self.order_repo.save(order)
        return order

    def get_order(self, order_id: UUID) -> Order:
        """Get order by ID."""
        order = self.order_repo.get_by_id(order_id)
        if not order:
            raise NotFound(f"Order {order_id} not found")
        return order

    def list_orders(
        self,
        status: str | None = None,
        user_id: str | UUID | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[Order]:
        """List orders with optional status/owner filters."""
        return self.order_repo.list(
            status=parse_choice(OrderStatus, status, "status") if status else None,
            user_id=parse_uuid(user_id, "user_id") if user_id else None,
            limit=limit,
            offset=offset,
        )
