"""
Order → JSON-ready dict conversion for the REST endpoints.

Decimals, UUIDs and datetimes are left as-is; ``JsonResponse`` renders them
through ``DjangoJSONEncoder``.
"""
from orders.domain.order import Order, OrderItem


def serialize_item(item: OrderItem) -> dict:
    return {
        "id": item.id,
        "product_id": item.product_id,
        "product_name": item.product_name,
        "product_price": item.product_price,
        "quantity": item.quantity,
        "subtotal": item.subtotal,
    }


def serialize_order(order: Order, include_admin: bool = False, include_items: bool = True) -> dict:
    data = {
        "id": order.id,
        "user_id": order.user_id,
        "customer_name": order.customer.name,
        "customer_email": order.customer.email,
        "customer_phone": order.customer.phone,
        "delivery_address": order.customer.delivery_address,
        "delivery_method": order.delivery_method.value,
        "payment_method": order.payment_method.value,
        "payment_status": order.payment_status.value,
        "payment_reference": order.payment_reference,
        "subtotal": order.subtotal,
        "delivery_fee": order.delivery_fee,
        "total_amount": order.total_amount,
        "order_status": order.order_status.value,
        "customer_notes": order.customer.notes,
        "created_at": order.created_at,
        "updated_at": order.updated_at,
        "completed_at": order.completed_at,
    }
    if include_admin:
        data["admin_notes"] = order.admin_notes
    if include_items:
        data["items"] = [serialize_item(item) for item in order.items]
    else:
        data["items_count"] = len(order.items)
    return data
