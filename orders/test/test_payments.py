"""
Tests for payment initiation, status and simulation.
"""
from decimal import Decimal
from unittest import mock
from uuid import uuid4

from django.test import TestCase

from orders.domain.exceptions import (
    AlreadyPaid,
    InvalidInput,
    InvalidTransition,
    NotFound,
    PaymentGatewayError,
    SimulationDisabled,
)
from orders.domain.order import OrderStatus, PaymentStatus
from orders.infra.event_store import EventStoreRepository
from orders.infra.models import OrderORM, PaymentORM
from orders.services import OrderService, PaymentService
from orders.services.providers import PaymentInitiation, build_reference
from orders.test.helpers import cart_line, make_customer, make_product, payments


class PaymentServiceTest(TestCase):
    """Tests for PaymentService."""

    def setUp(self):
        self.product = make_product(price="1500.00", stock=10)
        self.order = OrderService(delivery_fee=Decimal("1000.00")).create_order(
            make_customer(), "pickup", "wave", [cart_line(self.product, 2)],
        )
        self.service = PaymentService()

    def test_initiate_simulated_payment(self):
        with self.settings(APP_ENV="development", PAYMENTS=payments(SIMULATION_ENABLED=True)):
            initiation = self.service.initiate_payment(self.order.id, "wave")

        self.assertTrue(initiation.simulated)
        self.assertEqual(initiation.provider, "simulation")

        stored = OrderORM.objects.get(id=self.order.id)
        self.assertEqual(stored.payment_reference, initiation.reference)
        self.assertEqual(stored.payment_status, "pending")

        attempt = PaymentORM.objects.get(reference=initiation.reference)
        self.assertEqual(attempt.order_id, self.order.id)
        self.assertEqual(attempt.amount, Decimal("3000.00"))
        self.assertTrue(attempt.simulated)

        events = EventStoreRepository().get_events(self.order.id)
        self.assertEqual(events[-1]["event_type"], "PaymentInitiated")

    def test_initiate_can_switch_method(self):
        initiation = self.service.initiate_payment(self.order.id, "cash")
        self.assertEqual(initiation.provider, "cash")
        self.assertEqual(self.service.get_payment_status(self.order.id)["payment_method"], "cash")

    def test_initiate_uses_provider_factory(self):
        provider = mock.Mock()
        provider.initiate.return_value = PaymentInitiation(
            reference=build_reference("DJOLOF", self.order.id),
            provider="wave",
            payment_url="https://pay.wave.com/c/1",
            session_token="cos-1",
        )
        service = PaymentService(provider_factory=lambda method: provider)

        initiation = service.initiate_payment(self.order.id, "wave", phone_number="+221770000000")

        provider.initiate.assert_called_once()
        self.assertEqual(provider.initiate.call_args.args[1], "+221770000000")
        self.assertEqual(PaymentORM.objects.get().session_token, "cos-1")
        self.assertEqual(initiation.payment_url, "https://pay.wave.com/c/1")

    def test_gateway_failure_leaves_order_untouched(self):
        provider = mock.Mock()
        provider.initiate.side_effect = PaymentGatewayError("wave down")
        service = PaymentService(provider_factory=lambda method: provider)

        with self.assertRaises(PaymentGatewayError):
            service.initiate_payment(self.order.id, "wave")

        stored = OrderORM.objects.get(id=self.order.id)
        self.assertIsNone(stored.payment_reference)
        self.assertFalse(PaymentORM.objects.exists())

    def test_initiate_rejects_paid_cancelled_and_unknown_orders(self):
        with self.assertRaises(NotFound):
            self.service.initiate_payment(uuid4(), "wave")
        with self.assertRaises(InvalidInput):
            self.service.initiate_payment(self.order.id, "paypal")

        OrderORM.objects.filter(id=self.order.id).update(payment_status="completed")
        with self.assertRaises(AlreadyPaid):
            self.service.initiate_payment(self.order.id, "cash")

        OrderORM.objects.filter(id=self.order.id).update(payment_status="pending", order_status="cancelled")
        with self.assertRaises(InvalidTransition):
            self.service.initiate_payment(self.order.id, "cash")

    def test_retry_after_failed_payment(self):
        OrderORM.objects.filter(id=self.order.id).update(payment_status="failed")

        self.service.initiate_payment(self.order.id, "cash")

        status = self.service.get_payment_status(self.order.id)
        self.assertEqual(status["payment_status"], "pending")
        events = EventStoreRepository().get_events(self.order.id)
        changes = [e["data"] for e in events if e["event_type"] == "PaymentStatusChanged"]
        self.assertEqual(changes[-1]["previous_status"], "failed")
        self.assertEqual(changes[-1]["new_status"], "pending")

    def test_get_payment_status(self):
        status = self.service.get_payment_status(self.order.id)
        self.assertEqual(status, {
            "order_id": self.order.id,
            "payment_status": "pending",
            "payment_method": "wave",
            "payment_reference": None,
            "order_status": "pending",
        })
        with self.assertRaises(NotFound):
            self.service.get_payment_status(uuid4())

    def test_simulate_success_confirms_order(self):
        with self.settings(APP_ENV="development", PAYMENTS=payments(SIMULATION_ENABLED=True)):
            initiation = self.service.initiate_payment(self.order.id, "wave")
            order = self.service.simulate_success(self.order.id)

        self.assertEqual(order.payment_status, PaymentStatus.COMPLETED)
        self.assertEqual(order.order_status, OrderStatus.CONFIRMED)
        self.assertEqual(order.payment_reference, initiation.reference)
        self.assertEqual(PaymentORM.objects.count(), 1)

    def test_simulate_success_without_prior_initiation(self):
        with self.settings(APP_ENV="development", PAYMENTS=payments(SIMULATION_ENABLED=True)):
            order = self.service.simulate_success(self.order.id)

        self.assertTrue(order.is_paid)
        attempt = PaymentORM.objects.get()
        self.assertTrue(attempt.simulated)
        self.assertEqual(order.payment_reference, attempt.reference)

    def test_simulate_success_twice_is_a_no_op(self):
        with self.settings(APP_ENV="development", PAYMENTS=payments(SIMULATION_ENABLED=True)):
            first = self.service.simulate_success(self.order.id)
            history = len(EventStoreRepository().get_events(self.order.id))
            second = self.service.simulate_success(self.order.id)

        self.assertEqual(second.updated_at, first.updated_at)
        self.assertEqual(len(EventStoreRepository().get_events(self.order.id)), history)

    def test_simulate_success_disabled(self):
        for env, enabled in (("production", True), ("development", False)):
            with self.subTest(env=env, enabled=enabled):
                with self.settings(APP_ENV=env, PAYMENTS=payments(SIMULATION_ENABLED=enabled)):
                    with self.assertRaises(SimulationDisabled):
                        self.service.simulate_success(self.order.id)
        self.assertEqual(self.service.get_payment_status(self.order.id)["payment_status"], "pending")

    def test_simulate_success_on_cancelled_order(self):
        OrderService().cancel_order(self.order.id)
        with self.settings(APP_ENV="development", PAYMENTS=payments(SIMULATION_ENABLED=True)):
            with self.assertRaises(InvalidTransition):
                self.service.simulate_success(self.order.id)
