"""Domain service: Cart Stock Validator.

Reports, for a whole cart, every line whose requested quantity exceeds
available stock (ledger minus active reservations).  Shortfalls and
missing or inactive products are returned as data; a failure to read
the store is raised, because "could not determine availability" must
never be mistaken for "nothing available".
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from luzistock.domain.model.stock import (
    CartItem,
    ProductStockCheck,
    StockShortfall,
    StockValidationResult,
)
from luzistock.domain.repository.product_repository import ProductRepository

if TYPE_CHECKING:
    from luzistock.domain.service.reservation_manager import ReservationManager


class CartStockValidator:

    def __init__(
        self,
        reservations: ReservationManager,
        product_repo: ProductRepository,
    ) -> None:
        self._reservations = reservations
        self._product_repo = product_repo

    def validate(
        self,
        items: list[CartItem],
        exclude_session_id: str | None = None,
    ) -> StockValidationResult:
        """Check every product in the cart, in order, against available stock.

        Lines for the same product are summed first and reported once,
        under the first line's name.

        Args:
            items: Requested lines.
            exclude_session_id: Ignore this session's own active holds, so
                re-validating a cart that is already reserved does not
                count against itself.
        """
        self._reservations.cleanup_expired()

        errors: list[StockShortfall] = []
        for item in self._combine(items):
            product = self._product_repo.get_active(item.product_id)
            if product is None:
                errors.append(
                    StockShortfall(
                        product_id=item.product_id,
                        product_name=item.name or item.product_id,
                        requested_quantity=item.quantity,
                        available_stock=0,
                    )
                )
                continue

            available = self._reservations.available_for(product, exclude_session_id)
            if available < item.quantity:
                errors.append(
                    StockShortfall(
                        product_id=item.product_id,
                        product_name=product.name,
                        requested_quantity=item.quantity,
                        available_stock=available,
                    )
                )

        return StockValidationResult(errors=errors)

    @staticmethod
    def _combine(items: list[CartItem]) -> list[CartItem]:
        combined: dict[str, CartItem] = {}
        for item in items:
            seen = combined.get(item.product_id)
            if seen is None:
                combined[item.product_id] = item
            else:
                combined[item.product_id] = CartItem(
                    item.product_id, seen.quantity + item.quantity, seen.name
                )
        return list(combined.values())

    def check_product(self, product_id: str, quantity: int = 1) -> ProductStockCheck:
        """Single-product variant used by product pages and cart badges."""
        self._reservations.cleanup_expired()
        product = self._product_repo.get_active(product_id)
        if product is None:
            return ProductStockCheck(
                product_id=product_id,
                product_name="",
                requested_quantity=quantity,
                available_stock=0,
                found=False,
            )
        return ProductStockCheck(
            product_id=product.id,
            product_name=product.name,
            requested_quantity=quantity,
            available_stock=self._reservations.available_for(product),
        )
