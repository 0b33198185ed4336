"""
Stock ledger: the single write path for product stock and sales counters.

Both operations are one conditional UPDATE, so the non-negativity check and
the write happen atomically in the database row, whatever the interleaving of
concurrent orders. The ``products`` check constraints back this up.
"""
from __future__ import annotations

import logging
from uuid import UUID

from django.db.models import F
from django.utils import timezone

from orders.domain.exceptions import InsufficientStock, InvalidInput, NotFound, StockInconsistency
from orders.infra.models import ProductORM


logger = logging.getLogger(__name__)


class StockLedger:
    """Reserve and release product stock."""

    def reserve(self, product_id: UUID, quantity: int) -> None:
        """Take ``quantity`` units out of stock and count them as sold."""
        self._check_quantity(quantity)

        updated = (
            ProductORM.objects
            .filter(id=product_id, stock_quantity__gte=quantity)
            .update(
                stock_quantity=F("stock_quantity") - quantity,
                sales_count=F("sales_count") + quantity,
                updated_at=timezone.now(),
            )
        )
        if updated:
            logger.debug("stock_reserved", extra={"product_id": str(product_id), "quantity": quantity})
            return

        product = ProductORM.objects.filter(id=product_id).values("name", "stock_quantity").first()
        if product is None:
            raise NotFound(f"Product {product_id} not found")

        logger.info(
            "stock_insufficient",
            extra={
                "product_id": str(product_id),
                "quantity": quantity,
                "available": product["stock_quantity"],
            },
        )
        raise InsufficientStock(
            product_id=product_id,
            requested=quantity,
            available=product["stock_quantity"],
            product_name=product["name"],
        )

    def release(self, product_id: UUID, quantity: int) -> None:
        """Return ``quantity`` previously reserved units to stock."""
        self._check_quantity(quantity)

        updated = (
            ProductORM.objects
            .filter(id=product_id, sales_count__gte=quantity)
            .update(
                stock_quantity=F("stock_quantity") + quantity,
                sales_count=F("sales_count") - quantity,
                updated_at=timezone.now(),
            )
        )
        if updated:
            logger.debug("stock_released", extra={"product_id": str(product_id), "quantity": quantity})
            return

        product = ProductORM.objects.filter(id=product_id).values("sales_count").first()
        if product is None:
            raise NotFound(f"Product {product_id} not found")

        logger.error(
            "stock_release_inconsistent",
            extra={
                "product_id": str(product_id),
                "quantity": quantity,
                "sales_count": product["sales_count"],
            },
        )
        raise StockInconsistency(
            f"Cannot release {quantity} units of product {product_id}: "
            f"only {product['sales_count']} recorded as sold"
        )

    def _check_quantity(self, quantity: int) -> None:
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            raise InvalidInput("Quantity must be a positive integer")
