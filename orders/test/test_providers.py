"""
Tests for payment providers and reference handling.
"""
from decimal import Decimal
from unittest import mock
from uuid import UUID, uuid4

import requests
from django.test import SimpleTestCase

from orders.domain.exceptions import (
    InvalidInput,
    MalformedWebhookEvent,
    PaymentGatewayError,
    SimulationDisabled,
)
from orders.domain.order import Order, OrderItem
from orders.infra.retry import retry_with_backoff
from orders.services.providers import (
    CashProvider,
    OrangeMoneyProvider,
    SimulationProvider,
    WaveProvider,
    build_reference,
    get_event_parser,
    get_provider,
    parse_reference,
    simulation_enabled,
)
from orders.test.helpers import make_customer, payments


def make_order():
    item = OrderItem(product_id=uuid4(), product_name="Fromage Artisanal (250g)", product_price="3500", quantity=1)
    return Order(customer=make_customer(), items=[item])


def json_response(body, status_code=200):
    response = mock.Mock(status_code=status_code)
    response.json.return_value = body
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status_code} error")
    else:
        response.raise_for_status.return_value = None
    return response


class ReferenceTest(SimpleTestCase):
    """Tests for payment reference format."""

    def test_build_and_parse(self):
        order_id = uuid4()
        reference = build_reference("DJOLOF", order_id)
        namespace, middle, timestamp = reference.split("_")
        self.assertEqual(namespace, "DJOLOF")
        self.assertEqual(UUID(middle), order_id)
        self.assertTrue(timestamp.isdigit())
        self.assertEqual(parse_reference(reference), order_id)

    def test_references_are_unique(self):
        order_id = uuid4()
        self.assertEqual(len({build_reference("SIM", order_id) for _ in range(50)}), 50)

    def test_parse_rejects_garbage(self):
        for reference in ("", "DJOLOF", "DJOLOF_not-a-uuid_123", f"A_{uuid4()}_1_extra", None):
            with self.subTest(reference=reference):
                self.assertIsNone(parse_reference(reference))


class ProviderResolutionTest(SimpleTestCase):
    """Tests for get_provider and simulation gating."""

    def test_online_methods_simulated_outside_production(self):
        with self.settings(APP_ENV="development", PAYMENTS=payments(SIMULATION_ENABLED=True)):
            self.assertTrue(simulation_enabled())
            provider = get_provider("wave")
            self.assertIsInstance(provider, SimulationProvider)
            self.assertEqual(provider.imitates, "wave")
            self.assertIsInstance(get_provider("orange_money"), SimulationProvider)
            self.assertIsInstance(get_provider("cash"), CashProvider)

    def test_real_providers_when_simulation_off(self):
        with self.settings(APP_ENV="development", PAYMENTS=payments(SIMULATION_ENABLED=False)):
            self.assertIsInstance(get_provider("wave"), WaveProvider)
            self.assertIsInstance(get_provider("orange_money"), OrangeMoneyProvider)

    def test_production_never_simulates(self):
        with self.settings(APP_ENV="production", PAYMENTS=payments(SIMULATION_ENABLED=True)):
            self.assertFalse(simulation_enabled())
            self.assertIsInstance(get_provider("wave"), WaveProvider)
            with self.assertRaises(SimulationDisabled):
                SimulationProvider()

    def test_unknown_method(self):
        with self.assertRaises(InvalidInput):
            get_provider("paypal")

    def test_unknown_webhook_provider(self):
        with self.assertRaises(MalformedWebhookEvent):
            get_event_parser("stripe")


class CashProviderTest(SimpleTestCase):

    def test_cash_has_reference_and_no_url(self):
        order = make_order()
        initiation = CashProvider().initiate(order)
        self.assertTrue(initiation.reference.startswith(f"CASH_{order.id}_"))
        self.assertIsNone(initiation.payment_url)
        self.assertFalse(initiation.simulated)


class SimulationProviderTest(SimpleTestCase):

    def test_initiate(self):
        order = make_order()
        with self.settings(APP_ENV="development", PAYMENTS=payments(SIMULATION_ENABLED=True)):
            initiation = SimulationProvider(imitates="orange_money").initiate(order)

        self.assertTrue(initiation.simulated)
        self.assertEqual(initiation.provider, "simulation")
        self.assertTrue(initiation.reference.startswith(f"SIM_{order.id}_"))
        self.assertIn("/payment-simulation/orange_money/", initiation.payment_url)
        self.assertTrue(initiation.session_token.startswith("sim_"))

    def test_parse_event(self):
        event = SimulationProvider.parse_event({"reference": "SIM_x_1", "status": "failed"})
        self.assertFalse(event.succeeded)
        self.assertEqual(event.provider, "simulation")


class WaveProviderTest(SimpleTestCase):
    """Tests for WaveProvider."""

    def setUp(self):
        self.session = mock.Mock()
        self.provider = WaveProvider(
            config={"API_KEY": "wave-key", "BASE_URL": "https://wave.test/v1/"},
            session=self.session,
        )
        self.order = make_order()

    def test_initiate_posts_checkout_session(self):
        self.session.post.return_value = json_response(
            {"id": "cos-123", "wave_launch_url": "https://pay.wave.com/c/cos-123"}
        )

        initiation = self.provider.initiate(self.order, phone_number="+221770000000")

        self.assertEqual(initiation.payment_url, "https://pay.wave.com/c/cos-123")
        self.assertEqual(initiation.session_token, "cos-123")
        self.assertEqual(parse_reference(initiation.reference), self.order.id)

        args, kwargs = self.session.post.call_args
        self.assertEqual(args[0], "https://wave.test/v1/checkout/sessions")
        self.assertEqual(kwargs["headers"]["Authorization"], "Bearer wave-key")
        self.assertEqual(kwargs["json"]["amount"], "3500.00")
        self.assertEqual(kwargs["json"]["currency"], "XOF")
        self.assertEqual(kwargs["json"]["merchant_reference"], initiation.reference)
        self.assertEqual(kwargs["json"]["restrict_payer_mobile"], "+221770000000")

    @mock.patch("orders.infra.retry.time.sleep")
    def test_transport_errors_are_retried(self, sleep):
        self.session.post.side_effect = [
            requests.ConnectionError("reset"),
            json_response({"id": "cos-1", "wave_launch_url": "https://pay.wave.com/c/cos-1"}),
        ]
        initiation = self.provider.initiate(self.order)
        self.assertEqual(initiation.session_token, "cos-1")
        self.assertEqual(self.session.post.call_count, 2)
        sleep.assert_called_once()

    @mock.patch("orders.infra.retry.time.sleep")
    def test_gives_up_after_max_retries(self, sleep):
        self.session.post.side_effect = requests.Timeout("slow")
        with self.assertRaises(PaymentGatewayError):
            self.provider.initiate(self.order)
        self.assertEqual(self.session.post.call_count, self.provider.max_retries + 1)

    def test_http_error_is_not_retried(self):
        self.session.post.return_value = json_response({"message": "bad key"}, status_code=401)
        with self.assertRaises(PaymentGatewayError):
            self.provider.initiate(self.order)
        self.assertEqual(self.session.post.call_count, 1)

    def test_incomplete_response(self):
        self.session.post.return_value = json_response({"id": "cos-1"})
        with self.assertRaises(PaymentGatewayError):
            self.provider.initiate(self.order)

    def test_invalid_json_response(self):
        response = json_response(None)
        response.json.side_effect = ValueError("no json")
        self.session.post.return_value = response
        with self.assertRaises(PaymentGatewayError):
            self.provider.initiate(self.order)

    def test_parse_events(self):
        reference = build_reference("DJOLOF", self.order.id)
        completed = WaveProvider.parse_event({
            "event": "checkout.completed",
            "data": {"status": "success", "merchant_reference": reference, "id": "T1"},
        })
        self.assertTrue(completed.succeeded)
        self.assertEqual(completed.reference, reference)
        self.assertEqual(completed.provider_transaction_id, "T1")

        failed = WaveProvider.parse_event({
            "event": "checkout.expired",
            "data": {"merchant_reference": reference},
        })
        self.assertFalse(failed.succeeded)

        self.assertIsNone(WaveProvider.parse_event({"event": "merchant.updated", "data": {}}))

    def test_parse_malformed_events(self):
        for payload in (None, [], {"data": {}}, {"event": "checkout.completed"},
                        {"event": "checkout.completed", "data": {"status": "success"}}):
            with self.subTest(payload=payload):
                with self.assertRaises(MalformedWebhookEvent):
                    WaveProvider.parse_event(payload)


class OrangeMoneyProviderTest(SimpleTestCase):
    """Tests for OrangeMoneyProvider."""

    def setUp(self):
        self.session = mock.Mock()
        self.provider = OrangeMoneyProvider(
            config={"MERCHANT_KEY": "om-key", "BASE_URL": "https://om.test/v1"},
            session=self.session,
        )
        self.order = make_order()

    def test_initiate_posts_webpayment(self):
        self.session.post.return_value = json_response(
            {"payment_url": "https://om.test/pay/abc", "payment_token": "tok-abc"}
        )
        with self.settings(PAYMENTS=payments(APP_URL="https://api.djolof.test")):
            provider = OrangeMoneyProvider(
                config={"MERCHANT_KEY": "om-key", "BASE_URL": "https://om.test/v1"},
                session=self.session,
            )
            initiation = provider.initiate(self.order)

        self.assertEqual(initiation.payment_url, "https://om.test/pay/abc")
        self.assertEqual(initiation.session_token, "tok-abc")

        args, kwargs = self.session.post.call_args
        self.assertEqual(args[0], "https://om.test/v1/webpayment")
        self.assertEqual(kwargs["json"]["merchant_key"], "om-key")
        self.assertEqual(kwargs["json"]["order_id"], initiation.reference)
        self.assertEqual(kwargs["json"]["amount"], str(Decimal("3500.00")))
        self.assertEqual(kwargs["json"]["notif_url"], "https://api.djolof.test/api/payments/orange/callback")

    def test_parse_events(self):
        success = OrangeMoneyProvider.parse_event({"status": "SUCCESS", "order_id": "REF", "txnid": "MP1"})
        self.assertTrue(success.succeeded)
        self.assertEqual(success.provider_transaction_id, "MP1")

        for status in ("FAILED", "CANCELLED", "expired"):
            with self.subTest(status=status):
                self.assertFalse(OrangeMoneyProvider.parse_event({"status": status, "order_id": "REF"}).succeeded)

        self.assertIsNone(OrangeMoneyProvider.parse_event({"status": "INITIATED", "order_id": "REF"}))

    def test_parse_malformed_events(self):
        for payload in (None, {"order_id": "REF"}, {"status": "SUCCESS"}):
            with self.subTest(payload=payload):
                with self.assertRaises(MalformedWebhookEvent):
                    OrangeMoneyProvider.parse_event(payload)


class RetryWithBackoffTest(SimpleTestCase):
    """Tests for the retry decorator used around provider calls."""

    @mock.patch("orders.infra.retry.time.sleep")
    def test_reraises_last_error_once_retries_are_exhausted(self, sleep):
        errors = [requests.ConnectionError("first"), requests.ConnectionError("last")]
        call = mock.Mock(side_effect=errors, __name__="call")

        with self.assertRaises(requests.ConnectionError) as context:
            retry_with_backoff(max_retries=1, jitter=False, exceptions=(requests.ConnectionError,))(call)()

        self.assertIs(context.exception, errors[1])
        self.assertEqual(call.call_count, 2)
        sleep.assert_called_once_with(0.5)

    @mock.patch("orders.infra.retry.time.sleep")
    def test_unlisted_errors_propagate_immediately(self, sleep):
        call = mock.Mock(side_effect=ValueError("bad"), __name__="call")

        with self.assertRaises(ValueError):
            retry_with_backoff(max_retries=3, exceptions=(requests.ConnectionError,))(call)()

        self.assertEqual(call.call_count, 1)
        sleep.assert_not_called()
