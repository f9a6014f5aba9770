"""Stock read models: cart requests, validation results, adjustment reports.

Insufficient stock and inactive products are reported through these
types rather than raised, so a caller can show every shortfall at once.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from luzistock.domain.exceptions import ValidationError


@dataclass(frozen=True)
class CartItem:
    """One requested line: product, quantity and the name the shopper saw."""

    product_id: str
    quantity: int
    name: str = ""

    def __post_init__(self) -> None:
        if self.quantity <= 0:
            raise ValidationError(
                f"Quantity for '{self.name or self.product_id}' must be positive"
            )


@dataclass(frozen=True)
class StockShortfall:
    product_id: str
    product_name: str
    requested_quantity: int
    available_stock: int


@dataclass(frozen=True)
class StockValidationResult:
    errors: list[StockShortfall] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


@dataclass(frozen=True)
class ProductStockCheck:
    """Single-product availability answer."""

    product_id: str
    product_name: str
    requested_quantity: int
    available_stock: int
    found: bool = True

    @property
    def is_available(self) -> bool:
        return self.found and self.available_stock >= self.requested_quantity


@dataclass(frozen=True)
class StockInfo:
    """Ledger, held and available units for one product."""

    product_id: str
    product_name: str
    total: int
    reserved: int
    available: int
    threshold: int

    @property
    def is_low_stock(self) -> bool:
        return self.available <= self.threshold


@dataclass(frozen=True)
class StockChange:
    """Ledger value seen inside the update transaction, and the value written."""

    product_id: str
    previous: int
    current: int


class AdjustmentOutcome(Enum):
    APPLIED = "applied"
    FAILED = "failed"


@dataclass(frozen=True)
class LineAdjustment:
    product_id: str
    quantity: int
    outcome: AdjustmentOutcome
    change: StockChange | None = None
    error: str | None = None

    @property
    def oversold(self) -> bool:
        return self.change is not None and self.change.previous < self.quantity


@dataclass(frozen=True)
class AdjustmentReport:
    """Per-line results of reducing or restoring an order's stock.

    Successfully applied lines are never rolled back when another line
    fails; ``ok`` tells the caller whether reconciliation is needed.
    """

    order_id: int
    lines: list[LineAdjustment]

    @property
    def failures(self) -> list[LineAdjustment]:
        return [line for line in self.lines if line.outcome is AdjustmentOutcome.FAILED]

    @property
    def ok(self) -> bool:
        return bool(self.lines) and not self.failures
