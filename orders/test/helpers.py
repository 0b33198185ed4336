"""
Shared fixtures for order tests.
"""
from decimal import Decimal
from uuid import uuid4

from django.conf import settings

from orders.domain.order import CustomerInfo
from orders.infra.models import ProductORM


def make_product(name="Œufs Bio Fermiers (boîte de 6)", price="1500.00", stock=10, sales=0):
    return ProductORM.objects.create(
        name=name,
        slug=f"product-{uuid4().hex[:12]}",
        price=Decimal(price),
        stock_quantity=stock,
        sales_count=sales,
    )


def cart_line(product, quantity=1):
    return {
        "product_id": str(product.id),
        "product_name": product.name,
        "product_price": str(product.price),
        "quantity": quantity,
    }


def make_customer(user_id=None, delivery_address=None):
    return CustomerInfo(
        name="Awa Diop",
        email="awa@example.sn",
        phone="+221771234567",
        delivery_address=delivery_address,
        user_id=user_id,
    )


def payments(**overrides):
    """Current PAYMENTS settings with ``overrides`` applied."""
    return {**settings.PAYMENTS, **overrides}
