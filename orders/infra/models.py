from __future__ import annotations

from uuid import uuid4

from django.db import models
from django.db.models import Q


DELIVERY_METHOD = (
    ("pickup", "Retrait à la ferme"),
    ("delivery", "Livraison"),
)

PAYMENT_METHOD = (
    ("wave", "Wave"),
    ("orange_money", "Orange Money"),
    ("cash", "Espèces"),
)

PAYMENT_PROVIDER = PAYMENT_METHOD + (
    ("simulation", "Simulation"),
)

PAYMENT_STATUS = (
    ("pending", "En attente"),
    ("completed", "Payé"),
    ("failed", "Échoué"),
    ("refunded", "Remboursé"),
)

ORDER_STATUS = (
    ("pending", "En attente"),
    ("confirmed", "Confirmée"),
    ("preparing", "En préparation"),
    ("ready", "Prête"),
    ("completed", "Terminée"),
    ("cancelled", "Annulée"),
)

OPERATION_TYPE = (
    ("CREATE_ORDER", "Création de commande"),
    ("INITIATE_PAYMENT", "Initiation de paiement"),
)


class TimeStampedModel(models.Model):
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class ProductORM(TimeStampedModel):
    id = models.UUIDField(primary_key=True, default=uuid4, editable=False)
    name = models.CharField(max_length=200)
    slug = models.SlugField(max_length=200, unique=True)
    price = models.DecimalField(max_digits=10, decimal_places=2)
    unit = models.CharField(max_length=50, default="unité")
    # Written only through orders.infra.stock_ledger.StockLedger
    stock_quantity = models.IntegerField(default=0)
    sales_count = models.IntegerField(default=0)
    is_available = models.BooleanField(default=True)

    class Meta:
        db_table = "products"
        constraints = [
            models.CheckConstraint(condition=Q(stock_quantity__gte=0), name="product_stock_non_negative"),
            models.CheckConstraint(condition=Q(sales_count__gte=0), name="product_sales_non_negative"),
            models.CheckConstraint(condition=Q(price__gte=0), name="product_price_non_negative"),
        ]

    def __str__(self):
        return self.name


class OrderORM(TimeStampedModel):
    id = models.UUIDField(primary_key=True, default=uuid4, editable=False)
    user_id = models.UUIDField(null=True, blank=True)
    customer_name = models.CharField(max_length=200)
    customer_email = models.CharField(max_length=255)
    customer_phone = models.CharField(max_length=20)
    delivery_address = models.TextField(null=True, blank=True)
    delivery_method = models.CharField(max_length=50, choices=DELIVERY_METHOD, default="pickup")
    payment_method = models.CharField(max_length=50, choices=PAYMENT_METHOD)
    payment_status = models.CharField(max_length=50, choices=PAYMENT_STATUS, default="pending")
    payment_reference = models.CharField(max_length=200, null=True, blank=True)
    subtotal = models.DecimalField(max_digits=10, decimal_places=2)
    delivery_fee = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    total_amount = models.DecimalField(max_digits=10, decimal_places=2)
    order_status = models.CharField(max_length=50, choices=ORDER_STATUS, default="pending")
    customer_notes = models.TextField(blank=True, default="")
    admin_notes = models.TextField(blank=True, default="")
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "orders"
        indexes = [
            models.Index(fields=("user_id",), name="idx_orders_user"),
            models.Index(fields=("order_status",), name="idx_orders_status"),
            models.Index(fields=("-created_at",), name="idx_orders_date"),
        ]
        constraints = [
            models.CheckConstraint(condition=Q(subtotal__gte=0), name="order_subtotal_non_negative"),
            models.CheckConstraint(condition=Q(delivery_fee__gte=0), name="order_delivery_fee_non_negative"),
            models.CheckConstraint(condition=Q(total_amount__gte=0), name="order_total_non_negative"),
        ]

    def __str__(self):
        return f"Order {self.id} ({self.order_status}/{self.payment_status})"


class OrderItemORM(TimeStampedModel):
    id = models.UUIDField(primary_key=True, default=uuid4, editable=False)
    order = models.ForeignKey(
        OrderORM,
        on_delete=models.CASCADE,
        related_name="items",
    )
    product = models.ForeignKey(
        ProductORM,
        on_delete=models.PROTECT,
        related_name="order_items",
    )
    product_name = models.CharField(max_length=200)
    product_price = models.DecimalField(max_digits=10, decimal_places=2)
    quantity = models.IntegerField()
    subtotal = models.DecimalField(max_digits=10, decimal_places=2)

    class Meta:
        db_table = "order_items"
        indexes = [
            models.Index(fields=("order",), name="idx_order_items_order"),
        ]
        constraints = [
            models.CheckConstraint(condition=Q(quantity__gt=0), name="order_item_quantity_positive"),
        ]


class PaymentORM(TimeStampedModel):
    """One row per payment initiation attempt."""

    id = models.UUIDField(primary_key=True, default=uuid4, editable=False)
    order = models.ForeignKey(
        OrderORM,
        on_delete=models.PROTECT,
        related_name="payments",
    )
    provider = models.CharField(max_length=50, choices=PAYMENT_PROVIDER)
    reference = models.CharField(max_length=200, unique=True)
    amount = models.DecimalField(max_digits=10, decimal_places=2)
    payment_url = models.CharField(max_length=500, null=True, blank=True)
    session_token = models.CharField(max_length=200, null=True, blank=True)
    provider_transaction_id = models.CharField(max_length=200, null=True, blank=True)
    simulated = models.BooleanField(default=False)

    class Meta:
        db_table = "payments"
        indexes = [
            models.Index(fields=("order",), name="idx_payments_order"),
        ]


class IdempotencyKey(TimeStampedModel):
    key = models.CharField(max_length=255)
    user_id = models.UUIDField(null=True, blank=True)
    operation = models.CharField(max_length=50, choices=OPERATION_TYPE)
    request_hash = models.CharField(max_length=255)
    status_code = models.IntegerField(default=200)
    response_payload = models.JSONField()

    class Meta:
        db_table = "idempotency_keys"
        unique_together = [("key", "user_id", "operation")]
        indexes = [
            models.Index(fields=("request_hash",), name="idx_idempotency_hash"),
        ]
