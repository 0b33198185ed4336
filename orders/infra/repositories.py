"""
Infrastructure repositories for domain entities.
"""
from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from django.db import transaction

from orders.domain.order import (
    CustomerInfo,
    DeliveryMethod,
    Order,
    OrderItem,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
)
from orders.infra.models import OrderItemORM, OrderORM, PaymentORM
import logging


logger = logging.getLogger(__name__)


class OrderRepository:
    """Repository for Order aggregate."""

    def get_by_id(self, order_id: UUID) -> Order | None:
        """Get order by ID with items (optimized, no N+1)."""
        try:
            order_orm = OrderORM.objects.prefetch_related("items").get(id=order_id)
            return self._to_domain(order_orm)
        except OrderORM.DoesNotExist:
            return None

    def get_for_update(self, order_id: UUID) -> Order | None:
        """Get order with its row locked until the surrounding transaction ends."""
        try:
            order_orm = (
                OrderORM.objects
                .select_for_update()
                .prefetch_related("items")
                .get(id=order_id)
            )
            return self._to_domain(order_orm)
        except OrderORM.DoesNotExist:
            return None

    def list(
        self,
        status: OrderStatus | None = None,
        user_id: UUID | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[Order]:
        """List orders, newest first, with optional filters."""
        queryset = OrderORM.objects.prefetch_related("items")
        if status is not None:
            queryset = queryset.filter(order_status=status.value)
        if user_id is not None:
            queryset = queryset.filter(user_id=user_id)
        orders_orm = queryset.order_by("-created_at")[offset:offset + limit]
        return [self._to_domain(order_orm) for order_orm in orders_orm]

    @transaction.atomic
    def save(self, order: Order) -> UUID:
        """
        Save order aggregate.

        Items are written only when the order row is first created; they
        are immutable afterwards.
        """
        order_orm, created = OrderORM.objects.update_or_create(
            id=order.id,
            defaults={
                "user_id": order.user_id,
                "customer_name": order.customer.name,
                "customer_email": order.customer.email,
                "customer_phone": order.customer.phone,
                "delivery_address": order.customer.delivery_address,
                "customer_notes": order.customer.notes,
                "delivery_method": order.delivery_method.value,
                "payment_method": order.payment_method.value,
                "payment_status": order.payment_status.value,
                "payment_reference": order.payment_reference,
                "subtotal": order.subtotal,
                "delivery_fee": order.delivery_fee,
                "total_amount": order.total_amount,
                "order_status": order.order_status.value,
                "admin_notes": order.admin_notes,
                "completed_at": order.completed_at,
            },
        )

        if created:
            OrderItemORM.objects.bulk_create([
                OrderItemORM(
                    id=item.id,
                    order=order_orm,
                    product_id=item.product_id,
                    product_name=item.product_name,
                    product_price=item.product_price,
                    quantity=item.quantity,
                    subtotal=item.subtotal,
                )
                for item in order.items
            ])

        order.created_at = order_orm.created_at
        order.updated_at = order_orm.updated_at
        return order_orm.id

    def _to_domain(self, order_orm: OrderORM) -> Order:
        """Convert ORM model to domain entity."""
        items = [
            OrderItem(
                id=item_orm.id,
                product_id=item_orm.product_id,
                product_name=item_orm.product_name,
                product_price=item_orm.product_price,
                quantity=item_orm.quantity,
            )
            for item_orm in order_orm.items.all()
        ]

        customer = CustomerInfo(
            name=order_orm.customer_name,
            email=order_orm.customer_email,
            phone=order_orm.customer_phone,
            delivery_address=order_orm.delivery_address,
            user_id=order_orm.user_id,
            notes=order_orm.customer_notes,
        )

        return Order(
            id=order_orm.id,
            customer=customer,
            items=items,
            delivery_method=DeliveryMethod(order_orm.delivery_method),
            payment_method=PaymentMethod(order_orm.payment_method),
            delivery_fee=Decimal(order_orm.delivery_fee),
            order_status=OrderStatus(order_orm.order_status),
            payment_status=PaymentStatus(order_orm.payment_status),
            payment_reference=order_orm.payment_reference,
            admin_notes=order_orm.admin_notes,
            created_at=order_orm.created_at,
            updated_at=order_orm.updated_at,
            completed_at=order_orm.completed_at,
        )


class PaymentRepository:
    """Repository for payment initiation attempts."""

    def record_attempt(
        self,
        order_id: UUID,
        provider: str,
        reference: str,
        amount: Decimal,
        payment_url: str | None = None,
        session_token: str | None = None,
        simulated: bool = False,
    ) -> UUID:
        """Store one initiation attempt keyed by its reference."""
        payment = PaymentORM.objects.create(
            order_id=order_id,
            provider=provider,
            reference=reference,
            amount=amount,
            payment_url=payment_url,
            session_token=session_token,
            simulated=simulated,
        )
        return payment.id

    def get_by_reference(self, reference: str) -> PaymentORM | None:
        return PaymentORM.objects.filter(reference=reference).first()

    def latest_for_order(self, order_id: UUID) -> PaymentORM | None:
        return PaymentORM.objects.filter(order_id=order_id).order_by("-created_at").first()

    def set_transaction_id(self, reference: str, provider_transaction_id: str) -> None:
        PaymentORM.objects.filter(reference=reference).update(
            provider_transaction_id=provider_transaction_id,
        )
