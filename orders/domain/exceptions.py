"""
Domain exceptions for the order lifecycle and payment reconciliation.

Raised by the domain and service layers. The API layer translates them into
HTTP responses through ``orders.api.middleware.ErrorHandler``; the webhook
processor absorbs the ones a provider cannot fix by retrying.
"""
from __future__ import annotations

from uuid import UUID


class DomainError(Exception):
    """Base domain error with a machine-readable code."""

    code = "DOMAIN_ERROR"

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class InvalidInput(DomainError):
    """Missing or malformed input."""

    code = "VALIDATION_ERROR"


class NotFound(DomainError):
    """Order or product does not exist."""

    code = "NOT_FOUND"


class Conflict(DomainError):
    """Duplicate unique key or replayed request with a different body."""

    code = "CONFLICT"


class InvalidTransition(DomainError):
    """Illegal order or payment status change."""

    code = "INVALID_STATE"


class AlreadyPaid(InvalidTransition):
    """Payment was already completed for the order."""

    code = "ALREADY_PAID"

    def __init__(self, order_id: UUID):
        self.order_id = order_id
        super().__init__(f"Order {order_id} is already paid")


class InsufficientStock(DomainError):
    """Not enough stock to reserve the requested quantity."""

    code = "INSUFFICIENT_STOCK"

    def __init__(self, product_id: UUID, requested: int, available: int, product_name: str = ""):
        self.product_id = product_id
        self.requested = requested
        self.available = available
        self.product_name = product_name
        label = product_name or str(product_id)
        super().__init__(
            f"Insufficient stock for product {label}. "
            f"Available: {available}, requested: {requested}"
        )


class StockInconsistency(DomainError):
    """Stock release would drive sales_count below zero."""

    code = "STOCK_INCONSISTENCY"


class PaymentGatewayError(DomainError):
    """Transport or provider failure while initiating a payment."""

    code = "PAYMENT_GATEWAY_ERROR"


class MalformedWebhookEvent(DomainError):
    """Webhook payload could not be mapped to a payment outcome."""

    code = "MALFORMED_WEBHOOK"


class Unauthorized(DomainError):
    """No caller identity on the request."""

    code = "UNAUTHORIZED"


class Forbidden(DomainError):
    """Caller identity lacks the required role."""

    code = "FORBIDDEN"


class SimulationDisabled(Forbidden):
    """Simulation mode was requested outside a non-production configuration."""

    code = "SIMULATION_DISABLED"

    def __init__(self, message: str = "Payment simulation is only available in development"):
        super().__init__(message)
