"""Product stock record and the read models built around it.

A product's ``stock`` column is the ledger: the single source of truth
for sellable units.  Reservations never write to it.
"""

from __future__ import annotations

from dataclasses import dataclass

from luzistock.domain.exceptions import ValidationError
from luzistock.domain.model.value_objects import Money


@dataclass
class Product:
    """A product in the catalog together with its ledger stock.

    Invariant: ``stock`` is never negative.
    """

    id: str
    name: str
    price: Money
    stock: int = 0
    is_active: bool = True
    vendor_id: str | None = None
    category_id: str | None = None

    def __post_init__(self) -> None:
        if self.stock < 0:
            raise ValidationError(
                f"Stock for {self.name} cannot be negative, got {self.stock}"
            )


@dataclass(frozen=True)
class Vendor:
    id: str
    business_name: str
    email: str


@dataclass(frozen=True)
class Category:
    id: str
    name: str


@dataclass(frozen=True)
class LowStockProduct:
    """A row of the admin low-stock dashboard."""

    product_id: str
    product_name: str
    stock: int
    vendor: Vendor | None
    category: Category | None
