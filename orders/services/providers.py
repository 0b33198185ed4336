"""
Payment providers: one implementation per payment-method tag.

Every provider opens a payment session for an order and returns a
``PaymentInitiation`` whose ``reference`` is the correlation key used later by
the webhook processor. Every provider also knows how to map its own webhook
body to a canonical ``WebhookEvent``.
"""
from __future__ import annotations

import logging
import threading
import time
from dataclasses import asdict, dataclass
from uuid import UUID

import requests
from django.conf import settings

from orders.domain.exceptions import (
    InvalidInput,
    MalformedWebhookEvent,
    PaymentGatewayError,
    SimulationDisabled,
)
from orders.domain.order import Order, PaymentMethod
from orders.infra.retry import retry_with_backoff


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PaymentInitiation:
    """Result of opening a payment session."""
    reference: str
    provider: str
    payment_url: str | None = None
    session_token: str | None = None
    simulated: bool = False

    def as_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class WebhookEvent:
    """Provider-neutral payment outcome."""
    reference: str
    succeeded: bool
    provider: str
    provider_transaction_id: str | None = None


_reference_lock = threading.Lock()
_last_timestamp = 0


def _unique_timestamp() -> int:
    """Microsecond timestamp, strictly increasing within the process."""
    global _last_timestamp
    with _reference_lock:
        _last_timestamp = max(time.time_ns() // 1000, _last_timestamp + 1)
        return _last_timestamp


def build_reference(namespace: str, order_id: UUID) -> str:
    """``<namespace>_<order_id>_<timestamp>``; the timestamp is in microseconds."""
    return f"{namespace}_{order_id}_{_unique_timestamp()}"


def parse_reference(reference: str) -> UUID | None:
    """Recover the order id from a reference built by ``build_reference``."""
    if not isinstance(reference, str):
        return None
    parts = reference.split("_")
    if len(parts) != 3:
        return None
    try:
        return UUID(parts[1])
    except ValueError:
        return None


def simulation_enabled() -> bool:
    if settings.APP_ENV == "production":
        return False
    return bool(settings.PAYMENTS.get("SIMULATION_ENABLED", False))


def _require_str(payload: dict, key: str) -> str:
    value = payload.get(key)
    if not isinstance(value, str) or not value:
        raise MalformedWebhookEvent(f"Missing or invalid '{key}' in webhook payload")
    return value


class PaymentProvider:
    """Base payment provider."""

    name: str = ""

    def initiate(self, order: Order, phone_number: str | None = None) -> PaymentInitiation:
        raise NotImplementedError

    @classmethod
    def parse_event(cls, payload: dict) -> WebhookEvent | None:
        """Map a webhook body to a WebhookEvent; None when it is not a payment outcome."""
        raise MalformedWebhookEvent(f"Provider '{cls.name}' does not send webhooks")

    def _namespace(self) -> str:
        return settings.PAYMENTS["REFERENCE_NAMESPACE"]


class CashProvider(PaymentProvider):
    """Cash collected by staff at pickup or delivery; confirmed out-of-band."""

    name = PaymentMethod.CASH.value

    def initiate(self, order: Order, phone_number: str | None = None) -> PaymentInitiation:
        return PaymentInitiation(
            reference=build_reference("CASH", order.id),
            provider=self.name,
        )


class HttpPaymentProvider(PaymentProvider):
    """Base class for providers reached over HTTPS."""

    config_key: str = ""

    def __init__(self, config: dict | None = None, session: requests.Session | None = None):
        payments = settings.PAYMENTS
        self.config = config if config is not None else payments[self.config_key]
        self.session = session or requests.Session()
        self.timeout = payments.get("TIMEOUT", 10)
        self.max_retries = payments.get("MAX_RETRIES", 2)
        self.currency = payments.get("CURRENCY", "XOF")
        self.frontend_url = payments.get("FRONTEND_URL", "").rstrip("/")
        self.app_url = payments.get("APP_URL", "").rstrip("/")

    def _post(self, url: str, payload: dict, headers: dict | None = None) -> dict:
        """POST JSON and return the decoded body, or raise PaymentGatewayError."""
        send = retry_with_backoff(
            max_retries=self.max_retries,
            exceptions=(requests.ConnectionError, requests.Timeout),
        )(self.session.post)

        try:
            response = send(url, json=payload, headers=headers or {}, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except requests.RequestException as e:
            logger.error(
                "payment_gateway_error",
                extra={"provider": self.name, "error": str(e), "error_type": type(e).__name__},
            )
            raise PaymentGatewayError(f"{self.name} payment initiation failed: {e}") from e
        except ValueError as e:
            logger.error("payment_gateway_bad_response", extra={"provider": self.name, "error": str(e)})
            raise PaymentGatewayError(f"{self.name} returned an invalid response") from e

    @staticmethod
    def _field(body: dict, key: str, provider: str) -> str:
        value = body.get(key) if isinstance(body, dict) else None
        if not value:
            raise PaymentGatewayError(f"{provider} response is missing '{key}'")
        return str(value)


class WaveProvider(HttpPaymentProvider):
    """Wave checkout sessions."""

    name = PaymentMethod.WAVE.value
    config_key = "WAVE"

    SUCCESS_EVENTS = {"checkout.completed"}
    FAILURE_EVENTS = {"checkout.failed", "checkout.expired", "checkout.cancelled"}

    def initiate(self, order: Order, phone_number: str | None = None) -> PaymentInitiation:
        reference = build_reference(self._namespace(), order.id)
        payload = {
            "amount": str(order.total_amount),
            "currency": self.currency,
            "error_url": f"{self.frontend_url}/orders/{order.id}/payment-error",
            "success_url": f"{self.frontend_url}/orders/{order.id}/payment-success",
            "customer_name": order.customer.name,
            "customer_email": order.customer.email or "",
            "merchant_reference": reference,
        }
        if phone_number:
            payload["restrict_payer_mobile"] = phone_number

        body = self._post(
            f"{self.config['BASE_URL'].rstrip('/')}/checkout/sessions",
            payload,
            headers={"Authorization": f"Bearer {self.config['API_KEY']}"},
        )
        return PaymentInitiation(
            reference=reference,
            provider=self.name,
            payment_url=self._field(body, "wave_launch_url", "Wave"),
            session_token=self._field(body, "id", "Wave"),
        )

    @classmethod
    def parse_event(cls, payload: dict) -> WebhookEvent | None:
        if not isinstance(payload, dict):
            raise MalformedWebhookEvent("Wave webhook body must be an object")
        event = _require_str(payload, "event")
        data = payload.get("data")
        if not isinstance(data, dict):
            raise MalformedWebhookEvent("Wave webhook is missing 'data'")

        if event in cls.SUCCESS_EVENTS:
            succeeded = data.get("status") == "success"
        elif event in cls.FAILURE_EVENTS:
            succeeded = False
        else:
            return None

        return WebhookEvent(
            reference=_require_str(data, "merchant_reference"),
            succeeded=succeeded,
            provider=cls.name,
            provider_transaction_id=data.get("id") or data.get("transaction_id"),
        )


class OrangeMoneyProvider(HttpPaymentProvider):
    """Orange Money web payments."""

    name = PaymentMethod.ORANGE_MONEY.value
    config_key = "ORANGE_MONEY"

    FAILURE_STATUSES = {"FAILED", "CANCELLED", "EXPIRED"}

    def initiate(self, order: Order, phone_number: str | None = None) -> PaymentInitiation:
        reference = build_reference(self._namespace(), order.id)
        payload = {
            "merchant_key": self.config["MERCHANT_KEY"],
            "currency": self.currency,
            "order_id": reference,
            "amount": str(order.total_amount),
            "return_url": f"{self.frontend_url}/orders/{order.id}/payment-success",
            "cancel_url": f"{self.frontend_url}/orders/{order.id}/payment-cancel",
            "notif_url": f"{self.app_url}/api/payments/orange/callback",
            "lang": "fr",
            "reference": str(order.id),
        }

        body = self._post(f"{self.config['BASE_URL'].rstrip('/')}/webpayment", payload)
        return PaymentInitiation(
            reference=reference,
            provider=self.name,
            payment_url=self._field(body, "payment_url", "Orange Money"),
            session_token=self._field(body, "payment_token", "Orange Money"),
        )

    @classmethod
    def parse_event(cls, payload: dict) -> WebhookEvent | None:
        if not isinstance(payload, dict):
            raise MalformedWebhookEvent("Orange Money webhook body must be an object")
        status = _require_str(payload, "status").upper()

        if status == "SUCCESS":
            succeeded = True
        elif status in cls.FAILURE_STATUSES:
            succeeded = False
        else:
            return None

        transaction_id = payload.get("txnid") or payload.get("reference")
        return WebhookEvent(
            reference=_require_str(payload, "order_id"),
            succeeded=succeeded,
            provider=cls.name,
            provider_transaction_id=str(transaction_id) if transaction_id else None,
        )


class SimulationProvider(PaymentProvider):
    """Local stand-in for online providers; never available in production."""

    name = "simulation"

    def __init__(self, imitates: str = PaymentMethod.WAVE.value):
        if not simulation_enabled():
            raise SimulationDisabled()
        self.imitates = imitates

    def initiate(self, order: Order, phone_number: str | None = None) -> PaymentInitiation:
        reference = build_reference("SIM", order.id)
        frontend_url = settings.PAYMENTS.get("FRONTEND_URL", "").rstrip("/")
        logger.info(
            "payment_simulated",
            extra={"order_id": str(order.id), "provider": self.imitates, "reference": reference},
        )
        return PaymentInitiation(
            reference=reference,
            provider=self.name,
            payment_url=f"{frontend_url}/payment-simulation/{self.imitates}/{reference}",
            session_token=f"sim_{time.time_ns() // 1000}",
            simulated=True,
        )

    @classmethod
    def parse_event(cls, payload: dict) -> WebhookEvent | None:
        if not isinstance(payload, dict):
            raise MalformedWebhookEvent("Simulation event must be an object")
        return WebhookEvent(
            reference=_require_str(payload, "reference"),
            succeeded=payload.get("status", "success") == "success",
            provider=cls.name,
        )


PROVIDERS: dict[str, type[PaymentProvider]] = {
    PaymentMethod.WAVE.value: WaveProvider,
    PaymentMethod.ORANGE_MONEY.value: OrangeMoneyProvider,
    PaymentMethod.CASH.value: CashProvider,
    SimulationProvider.name: SimulationProvider,
}

ONLINE_METHODS = {PaymentMethod.WAVE.value, PaymentMethod.ORANGE_MONEY.value}


def get_provider(payment_method: str) -> PaymentProvider:
    """
    Resolve the provider for a stored payment-method tag.

    Outside production, with simulation enabled, online methods resolve to
    the simulation provider.
    """
    method = getattr(payment_method, "value", payment_method)
    if method in ONLINE_METHODS and simulation_enabled():
        return SimulationProvider(imitates=method)
    if method == SimulationProvider.name:
        return SimulationProvider()
    try:
        provider_cls = PROVIDERS[method]
    except KeyError:
        raise InvalidInput(f"Unsupported payment method: {payment_method!r}")
    return provider_cls()


def get_event_parser(provider_name: str):
    """Return the webhook parser of ``provider_name``."""
    try:
        return PROVIDERS[provider_name].parse_event
    except KeyError:
        raise MalformedWebhookEvent(f"Unknown payment provider: {provider_name!r}")
