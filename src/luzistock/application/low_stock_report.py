"""Application service: Low-Stock report (query) and vendor alerts."""

from __future__ import annotations

import logging

from luzistock.application.dto import LowStockLineDTO
from luzistock.domain.exceptions import ValidationError
from luzistock.domain.repository.collaborators import Notifier
from luzistock.domain.repository.product_repository import ProductRepository
from luzistock.domain.service.reservation_manager import DEFAULT_LOW_STOCK_THRESHOLD

logger = logging.getLogger(__name__)


class LowStockReportHandler:

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    def handle(self, threshold: int = DEFAULT_LOW_STOCK_THRESHOLD) -> list[LowStockLineDTO]:
        """Active products at or below ``threshold``, lowest stock first."""
        if threshold < 0:
            raise ValidationError("Low-stock threshold cannot be negative")
        return [
            LowStockLineDTO(
                product_id=entry.product_id,
                product_name=entry.product_name,
                stock=entry.stock,
                vendor_name=entry.vendor.business_name if entry.vendor else "",
                vendor_email=entry.vendor.email if entry.vendor else "",
                category_name=entry.category.name if entry.category else "",
            )
            for entry in self._product_repo.list_low_stock(threshold)
        ]


class LowStockAlerter:
    """Sends vendors a heads-up when their products run low.

    Alerts are a courtesy: a failed alert is logged and never interrupts
    the stock operation that triggered it.
    """

    def __init__(
        self,
        product_repo: ProductRepository,
        notifier: Notifier,
        threshold: int = DEFAULT_LOW_STOCK_THRESHOLD,
    ) -> None:
        self._product_repo = product_repo
        self._notifier = notifier
        self._threshold = threshold

    def notify_all(self) -> int:
        sent = 0
        for entry in self._product_repo.list_low_stock(self._threshold):
            if entry.vendor is None:
                continue
            if self._send(entry.vendor, entry.product_id, entry.product_name, entry.stock):
                sent += 1
        return sent

    def notify_product(self, product_id: str) -> bool:
        product = self._product_repo.get_by_id(product_id)
        if product is None or product.vendor_id is None:
            logger.warning(f"Product {product_id} or its vendor not found")
            return False
        if product.stock > self._threshold:
            return False
        vendor = self._product_repo.get_vendor(product.vendor_id)
        if vendor is None:
            logger.warning(f"Vendor {product.vendor_id} of product {product_id} not found")
            return False
        return self._send(vendor, product.id, product.name, product.stock)

    def _send(self, vendor, product_id: str, product_name: str, stock: int) -> bool:
        try:
            self._notifier.low_stock(vendor, product_id, product_name, stock)
        except Exception:
            logger.exception(f"Error notifying vendor {vendor.id} about low stock")
            return False
        logger.info(f"Low stock notification sent for product {product_name} ({stock} units)")
        return True
