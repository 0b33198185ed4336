"""
Webhook processing: apply asynchronous payment outcomes to orders exactly once.
"""
from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from django.db import transaction

from orders.domain.exceptions import InvalidTransition, MalformedWebhookEvent, NotFound
from orders.domain.order import OrderStatus, PaymentStatus
from orders.domain.state_machine import OrderStateMachine
from orders.infra.event_store import EventStoreRepository
from orders.infra.repositories import OrderRepository, PaymentRepository
from orders.services.history import record_status_change
from orders.services.providers import WebhookEvent, get_event_parser, parse_reference
import logging


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WebhookResult:
    """Outcome reported back to the provider endpoint (always acknowledged)."""
    applied: bool
    reason: str
    order_id: UUID | None = None
    acknowledged: bool = True

    def as_dict(self) -> dict:
        return {
            "success": self.acknowledged,
            "applied": self.applied,
            "reason": self.reason,
        }


class WebhookProcessor:
    """Maps provider events to canonical outcomes and applies them."""

    def __init__(
        self,
        order_repo: OrderRepository | None = None,
        payment_repo: PaymentRepository | None = None,
        state_machine: OrderStateMachine | None = None,
        event_store_repo: EventStoreRepository | None = None,
    ):
        self.order_repo = order_repo or OrderRepository()
        self.payment_repo = payment_repo or PaymentRepository()
        self.state_machine = state_machine or OrderStateMachine()
        self.event_store_repo = event_store_repo or EventStoreRepository()

    def handle(self, provider_name: str, payload) -> WebhookResult:
        """
        Process one provider delivery.

        Malformed payloads, unknown orders and transitions lost to a
        concurrent change are logged and acknowledged; a provider cannot fix
        them by retrying. Infrastructure errors propagate.
        """
        try:
            event = get_event_parser(provider_name)(payload)
        except MalformedWebhookEvent as e:
            logger.warning("webhook_malformed", extra={"provider": provider_name, "error": e.message})
            return WebhookResult(applied=False, reason="malformed")

        if event is None:
            logger.info("webhook_ignored", extra={"provider": provider_name})
            return WebhookResult(applied=False, reason="ignored")

        try:
            return self.apply(event)
        except NotFound as e:
            logger.warning(
                "webhook_order_not_found",
                extra={"provider": provider_name, "reference": event.reference, "error": e.message},
            )
            return WebhookResult(applied=False, reason="order_not_found")
        except InvalidTransition as e:
            logger.warning(
                "webhook_transition_rejected",
                extra={"provider": provider_name, "reference": event.reference, "error": e.message},
            )
            return WebhookResult(applied=False, reason="invalid_transition")

    def resolve_order_id(self, reference: str) -> UUID:
        """Find the order a reference belongs to."""
        payment = self.payment_repo.get_by_reference(reference)
        if payment is not None:
            return payment.order_id

        order_id = parse_reference(reference)
        if order_id is None:
            raise NotFound(f"No order matches payment reference {reference!r}")
        return order_id

    def apply(self, event: WebhookEvent) -> WebhookResult:
        """Apply a canonical outcome under the order row lock."""
        order_id = self.resolve_order_id(event.reference)

        with transaction.atomic():
            order = self.order_repo.get_for_update(order_id)
            if not order:
                raise NotFound(f"Order {order_id} not found")

            if event.succeeded:
                if order.payment_status == PaymentStatus.COMPLETED:
                    logger.info(
                        "webhook_duplicate",
                        extra={"order_id": str(order.id), "reference": event.reference},
                    )
                    return WebhookResult(applied=False, reason="already_completed", order_id=order.id)

                if order.order_status == OrderStatus.CANCELLED:
                    logger.warning(
                        "payment_for_cancelled_order",
                        extra={"order_id": str(order.id), "reference": event.reference},
                    )
                    raise InvalidTransition(f"Order {order.id} is cancelled; payment needs a manual refund")

                changes = []
                if order.payment_status == PaymentStatus.FAILED:
                    changes.append(self.state_machine.transition(order, PaymentStatus.PENDING))
                changes.append(self.state_machine.transition(order, PaymentStatus.COMPLETED))
                if order.order_status == OrderStatus.PENDING:
                    changes.append(self.state_machine.transition(order, OrderStatus.CONFIRMED))
            else:
                if order.payment_reference and order.payment_reference != event.reference:
                    logger.info(
                        "webhook_stale_attempt",
                        extra={
                            "order_id": str(order.id),
                            "reference": event.reference,
                            "current_reference": order.payment_reference,
                        },
                    )
                    return WebhookResult(applied=False, reason="stale_attempt", order_id=order.id)
                if order.payment_status != PaymentStatus.PENDING:
                    logger.info(
                        "webhook_failure_ignored",
                        extra={
                            "order_id": str(order.id),
                            "reference": event.reference,
                            "status": order.payment_status.value,
                        },
                    )
                    return WebhookResult(applied=False, reason="not_pending", order_id=order.id)
                changes = [self.state_machine.transition(order, PaymentStatus.FAILED)]

            order.payment_reference = event.reference
            self.order_repo.save(order)
            for change in changes:
                record_status_change(self.event_store_repo, order, change, source=f"webhook:{event.provider}")
            if event.provider_transaction_id:
                self.payment_repo.set_transaction_id(event.reference, event.provider_transaction_id)

        logger.info(
            "webhook_applied",
            extra={
                "order_id": str(order.id),
                "reference": event.reference,
                "provider": event.provider,
                "status": order.payment_status.value,
            },
        )
        return WebhookResult(applied=True, reason="applied", order_id=order.id)
