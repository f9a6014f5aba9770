"""Data Transfer Objects: plain containers that cross layer boundaries.

DTOs carry data between the CLI and application layers without
exposing domain internals to the outside world.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class CartLineSpec:
    """Input: what the shopper asked for (product id + quantity)."""

    product_id: str
    quantity: int
    name: str = ""


@dataclass(frozen=True)
class ShortfallDTO:
    product_id: str
    product_name: str
    requested_quantity: int
    available_stock: int


@dataclass(frozen=True)
class CheckoutResultDTO:
    """Output: either a created order, a shortfall list, or a retry message."""

    success: bool
    order_id: int | None = None
    order_number: str | None = None
    total: str | None = None
    reserved_until: str | None = None
    shortfalls: list[ShortfallDTO] = field(default_factory=list)
    message: str | None = None


@dataclass(frozen=True)
class PaymentResultDTO:
    order_id: int
    order_number: str
    status: str
    payment_status: str
    stock_adjusted: bool


@dataclass(frozen=True)
class StockInfoDTO:
    product_id: str
    product_name: str
    total: int
    reserved: int
    available: int
    is_low_stock: bool
    threshold: int


@dataclass(frozen=True)
class LowStockLineDTO:
    product_id: str
    product_name: str
    stock: int
    vendor_name: str
    vendor_email: str
    category_name: str


@dataclass(frozen=True)
class HoldResultDTO:
    """Output of a direct hold: expiry on success, else shortfalls or a message."""

    success: bool
    held_until: str | None = None
    shortfalls: list[ShortfallDTO] = field(default_factory=list)
    message: str | None = None


@dataclass(frozen=True)
class ReservationDTO:
    product_id: str
    quantity: int
    reservation_type: str
    holder_id: str | None
    expires_at: str
    state: str  # "active", "expired" or "released"
