"""Abstract repository for products (the stock ledger).

Defined in the domain layer so the domain never depends on
infrastructure.  Stock mutations are expressed as single atomic
operations (clamped decrement, additive increment) rather than
get-then-save, because several request handlers may touch the same
product row at once.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from luzistock.domain.model.product import LowStockProduct, Product, Vendor
from luzistock.domain.model.stock import StockChange


class ProductRepository(ABC):

    @abstractmethod
    def get_by_id(self, product_id: str) -> Product | None:
        """Return a product whether active or not, or None."""

    @abstractmethod
    def get_active(self, product_id: str) -> Product | None:
        """Return the product only if it exists and is active."""

    @abstractmethod
    def list_all(self) -> list[Product]:
        """Return every product in the catalog."""

    @abstractmethod
    def save(self, product: Product) -> None:
        """Persist a new or updated product (catalog data and stock)."""

    @abstractmethod
    def decrement_clamped(self, product_id: str, quantity: int) -> StockChange:
        """Atomically apply ``stock = max(0, stock - quantity)``.

        Raises EntityNotFoundError if the product row does not exist.
        """

    @abstractmethod
    def increment(self, product_id: str, quantity: int) -> StockChange:
        """Atomically apply ``stock = stock + quantity``.

        Raises EntityNotFoundError if the product row does not exist.
        """

    @abstractmethod
    def set_stock(self, product_id: str, stock: int) -> None:
        """Overwrite ledger stock (admin correction)."""

    @abstractmethod
    def list_low_stock(self, threshold: int) -> list[LowStockProduct]:
        """Active products with ``0 <= stock <= threshold``, lowest first."""

    @abstractmethod
    def get_vendor(self, vendor_id: str) -> Vendor | None:
        """Return the vendor that owns products, or None."""
