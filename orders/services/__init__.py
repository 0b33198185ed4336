from orders.services.orders import OrderService
from orders.services.payments import PaymentService
from orders.services.webhooks import WebhookProcessor, WebhookResult

__all__ = ["OrderService", "PaymentService", "WebhookProcessor", "WebhookResult"]
