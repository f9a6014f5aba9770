"""Application service: Set Stock use case (admin correction)."""

from __future__ import annotations

from luzistock.application.low_stock_report import LowStockAlerter
from luzistock.domain.exceptions import ValidationError
from luzistock.domain.repository.product_repository import ProductRepository


class SetStockHandler:

    def __init__(
        self,
        product_repo: ProductRepository,
        alerter: LowStockAlerter | None = None,
    ) -> None:
        self._product_repo = product_repo
        self._alerter = alerter

    def handle(self, product_id: str, quantity: int) -> None:
        """Overwrite a product's ledger stock and alert its vendor if it is low."""
        if quantity < 0:
            raise ValidationError("Stock cannot be negative")
        self._product_repo.set_stock(product_id, quantity)
        if self._alerter is not None:
            self._alerter.notify_product(product_id)
