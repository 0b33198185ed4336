"""
Application service for payment initiation, status and simulation.
"""
from __future__ import annotations

from uuid import UUID, uuid4

from django.db import transaction

from orders.domain.events import PaymentInitiated
from orders.domain.exceptions import AlreadyPaid, InvalidTransition, NotFound, SimulationDisabled
from orders.domain.order import Order, OrderStatus, PaymentMethod, PaymentStatus, parse_choice
from orders.domain.state_machine import OrderStateMachine
from orders.infra.event_store import EventStoreRepository
from orders.infra.repositories import OrderRepository, PaymentRepository
from orders.services.history import record_status_change, stamp
from orders.services.providers import (
    PaymentInitiation,
    SimulationProvider,
    WebhookEvent,
    get_provider,
    simulation_enabled,
)
from orders.services.webhooks import WebhookProcessor
import logging


logger = logging.getLogger(__name__)


class PaymentService:
    """Service for payment operations."""

    def __init__(
        self,
        order_repo: OrderRepository | None = None,
        payment_repo: PaymentRepository | None = None,
        state_machine: OrderStateMachine | None = None,
        event_store_repo: EventStoreRepository | None = None,
        provider_factory=get_provider,
        webhook_processor: WebhookProcessor | None = None,
    ):
        self.order_repo = order_repo or OrderRepository()
        self.payment_repo = payment_repo or PaymentRepository()
        self.state_machine = state_machine or OrderStateMachine()
        self.event_store_repo = event_store_repo or EventStoreRepository()
        self.provider_factory = provider_factory
        self.webhook_processor = webhook_processor or WebhookProcessor(
            order_repo=self.order_repo,
            payment_repo=self.payment_repo,
            state_machine=self.state_machine,
            event_store_repo=self.event_store_repo,
        )

    def initiate_payment(
        self,
        order_id: UUID,
        payment_method: str,
        phone_number: str | None = None,
    ) -> PaymentInitiation:
        """
        Open a payment session with the provider of ``payment_method``.

        The provider call happens before any write; a gateway failure leaves
        the order untouched.
        """
        method = parse_choice(PaymentMethod, payment_method, "payment_method")
        order = self._get_payable(order_id)

        provider = self.provider_factory(method.value)
        initiation = provider.initiate(order, phone_number)

        with transaction.atomic():
            # Re-check under lock: a webhook may have confirmed in the meantime
            order = self._get_payable(order_id, for_update=True)

            if order.payment_status == PaymentStatus.FAILED:
                change = self.state_machine.transition(order, PaymentStatus.PENDING)
                record_status_change(self.event_store_repo, order, change, source="payment_retry")

            order.payment_method = method
            order.payment_reference = initiation.reference
            self.order_repo.save(order)

            self.payment_repo.record_attempt(
                order_id=order.id,
                provider=initiation.provider,
                reference=initiation.reference,
                amount=order.total_amount,
                payment_url=initiation.payment_url,
                session_token=initiation.session_token,
                simulated=initiation.simulated,
            )

            event = PaymentInitiated(
                event_id=uuid4(),
                aggregate_id=order.id,
                event_type="PaymentInitiated",
                provider=initiation.provider,
                reference=initiation.reference,
                amount=order.total_amount,
            )
            self.event_store_repo.save_event(stamp(event), "Order")

        logger.info(
            "payment_initiated",
            extra={
                "order_id": str(order_id),
                "provider": initiation.provider,
                "reference": initiation.reference,
            },
        )
        return initiation

    def get_payment_status(self, order_id: UUID) -> dict:
        """Payment-facing view of an order."""
        order = self.order_repo.get_by_id(order_id)
        if not order:
            raise NotFound(f"Order {order_id} not found")
        return {
            "order_id": order.id,
            "payment_status": order.payment_status.value,
            "payment_method": order.payment_method.value,
            "payment_reference": order.payment_reference,
            "order_status": order.order_status.value,
        }

    def simulate_success(self, order_id: UUID) -> Order:
        """Complete the payment of an order without a provider (development only)."""
        if not simulation_enabled():
            logger.warning("payment_simulation_refused", extra={"order_id": str(order_id)})
            raise SimulationDisabled()

        order = self.order_repo.get_by_id(order_id)
        if not order:
            raise NotFound(f"Order {order_id} not found")

        attempt = self.payment_repo.latest_for_order(order.id)
        if attempt is not None and attempt.simulated:
            reference = attempt.reference
        else:
            initiation = SimulationProvider(imitates=order.payment_method.value).initiate(order)
            self.payment_repo.record_attempt(
                order_id=order.id,
                provider=initiation.provider,
                reference=initiation.reference,
                amount=order.total_amount,
                payment_url=initiation.payment_url,
                session_token=initiation.session_token,
                simulated=True,
            )
            reference = initiation.reference

        self.webhook_processor.apply(
            WebhookEvent(reference=reference, succeeded=True, provider=SimulationProvider.name)
        )
        return self.order_repo.get_by_id(order.id)

    def _get_payable(self, order_id: UUID, for_update: bool = False) -> Order:
        if for_update:
            order = self.order_repo.get_for_update(order_id)
        else:
            order = self.order_repo.get_by_id(order_id)
        if not order:
            raise NotFound(f"Order {order_id} not found")
        if order.payment_status == PaymentStatus.COMPLETED:
            raise AlreadyPaid(order.id)
        if order.payment_status == PaymentStatus.REFUNDED:
            raise InvalidTransition(f"Order {order.id} was refunded and cannot be paid again")
        if order.order_status == OrderStatus.CANCELLED:
            raise InvalidTransition(f"Order {order.id} is cancelled and cannot be paid")
        return order
