from django.contrib import admin

from orders.infra.models import (
    IdempotencyKey,
    OrderItemORM,
    OrderORM,
    PaymentORM,
    ProductORM,
)
from orders.infra.event_store import EventStore


@admin.register(ProductORM)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("name", "price", "unit", "stock_quantity", "sales_count", "is_available")
    list_filter = ("is_available",)
    search_fields = ("name", "slug")
    # Stock moves only through order placement and cancellation
    readonly_fields = ("id", "stock_quantity", "sales_count")


class OrderItemInline(admin.TabularInline):
    model = OrderItemORM
    extra = 0
    can_delete = False
    readonly_fields = ("product", "product_name", "product_price", "quantity", "subtotal")


@admin.register(OrderORM)
class OrderAdmin(admin.ModelAdmin):
    list_display = ("id", "customer_name", "order_status", "payment_status", "total_amount", "created_at")
    list_filter = ("order_status", "payment_status", "delivery_method", "created_at")
    search_fields = ("id", "customer_name", "payment_reference")
    readonly_fields = (
        "id", "user_id", "order_status", "payment_status", "payment_reference",
        "subtotal", "delivery_fee", "total_amount", "completed_at",
    )
    inlines = (OrderItemInline,)


@admin.register(PaymentORM)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ("reference", "order", "provider", "amount", "simulated", "created_at")
    list_filter = ("provider", "simulated", "created_at")
    search_fields = ("reference", "provider_transaction_id")


@admin.register(IdempotencyKey)
class IdempotencyAdmin(admin.ModelAdmin):
    list_display = ("key", "user_id", "operation", "status_code", "created_at")
    list_filter = ("operation", "created_at")
    search_fields = ("key", "user_id")


@admin.register(EventStore)
class EventStoreAdmin(admin.ModelAdmin):
    list_display = ("id", "aggregate_id", "aggregate_type", "event_type", "sequence_number", "created_at")
    list_filter = ("aggregate_type", "event_type", "created_at")
    readonly_fields = ("id", "aggregate_id", "aggregate_type", "event_type", "event_version", "event_data", "sequence_number")
