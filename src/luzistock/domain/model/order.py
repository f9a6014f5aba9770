"""Order aggregate: the unit of work for stock adjustments.

The Order owns its line items.  Line items are immutable once the order
is placed; the Stock Adjuster reads them but never changes them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from luzistock.domain.exceptions import ValidationError
from luzistock.domain.model.value_objects import DEFAULT_CURRENCY, Money, Quantity


class OrderStatus(Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    CANCELLED = "cancelled"


class PaymentStatus(Enum):
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    REFUNDED = "refunded"


@dataclass(frozen=True)
class OrderLineItem:
    """Captures the product, vendor and price at order-creation time.

    ``stock_committed`` is set once this line's units have been taken
    from the ledger, so a later restore gives back only those lines.
    """

    product_id: str
    product_name: str
    quantity: Quantity
    price: Money  # locked at order-creation time
    vendor_id: str | None = None
    order_id: int | None = None
    id: int | None = None
    stock_committed: bool = False

    @property
    def line_total(self) -> Money:
        return self.price * self.quantity.value


MAX_LINE_ITEMS = 50


@dataclass
class Order:
    """Aggregate root for marketplace orders.

    ``stock_committed`` records whether any of its lines took units from
    the ledger; each line item tracks its own share.
    """

    id: int | None
    order_number: str
    customer_email: str
    items: list[OrderLineItem]
    checkout_session_id: str | None = None
    holder_id: str | None = None
    status: OrderStatus = OrderStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.PENDING
    payment_intent_id: str | None = None
    stock_committed: bool = False
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def create(
        order_number: str,
        customer_email: str,
        items: list[OrderLineItem],
        checkout_session_id: str | None = None,
        holder_id: str | None = None,
    ) -> Order:
        if not customer_email or not customer_email.strip():
            raise ValidationError("Customer email is required")
        if not items:
            raise ValidationError("Order must contain at least one item")
        if len(items) > MAX_LINE_ITEMS:
            raise ValidationError(f"Maximum {MAX_LINE_ITEMS} items per order")
        return Order(
            id=None,
            order_number=order_number,
            customer_email=customer_email.strip(),
            items=list(items),
            checkout_session_id=checkout_session_id,
            holder_id=holder_id,
        )

    # --- State transitions ----------------------------------------------------

    def mark_paid(self, payment_intent_id: str) -> None:
        """PENDING -> PROCESSING once the provider reports success."""
        if self.status == OrderStatus.CANCELLED:
            raise ValidationError(
                f"Cannot mark order {self.order_number} paid, it is cancelled"
            )
        if self.payment_status == PaymentStatus.SUCCEEDED:
            raise ValidationError(f"Order {self.order_number} is already paid")
        self.status = OrderStatus.PROCESSING
        self.payment_status = PaymentStatus.SUCCEEDED
        self.payment_intent_id = payment_intent_id

    def mark_payment_failed(self) -> None:
        if self.payment_status == PaymentStatus.SUCCEEDED:
            raise ValidationError(
                f"Order {self.order_number} was already paid; refund it instead"
            )
        self.status = OrderStatus.CANCELLED
        self.payment_status = PaymentStatus.FAILED

    def cancel(self) -> None:
        """Cancel a pending or paid order (a paid order becomes refunded)."""
        if self.status == OrderStatus.CANCELLED:
            raise ValidationError(f"Order {self.order_number} is already cancelled")
        if self.payment_status == PaymentStatus.SUCCEEDED:
            self.payment_status = PaymentStatus.REFUNDED
        self.status = OrderStatus.CANCELLED

    # --- Computed properties --------------------------------------------------

    @property
    def total(self) -> Money:
        currency = self.items[0].price.currency if self.items else DEFAULT_CURRENCY
        return Money.total((item.line_total for item in self.items), currency)

    def totals_by_vendor(self) -> dict[str, Money]:
        """Sum line totals per vendor, skipping items with no vendor."""
        totals: dict[str, Money] = {}
        for item in self.items:
            if item.vendor_id is None:
                continue
            current = totals.get(item.vendor_id, Money.zero(item.price.currency))
            totals[item.vendor_id] = current + item.line_total
        return totals
