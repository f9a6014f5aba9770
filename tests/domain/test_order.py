"""Unit tests for the Order aggregate and its payment transitions."""

import pytest

from luzistock.domain.exceptions import ValidationError
from luzistock.domain.model.order import (
    MAX_LINE_ITEMS,
    Order,
    OrderLineItem,
    OrderStatus,
    PaymentStatus,
)
from luzistock.domain.model.value_objects import Money, Quantity


def _make_item(
    product_id: str = "p1",
    qty: int = 1,
    price: str = "15.00",
    vendor_id: str | None = "v1",
) -> OrderLineItem:
    """Helper to build a valid line item."""
    return OrderLineItem(
        product_id=product_id,
        product_name=f"Product {product_id}",
        quantity=Quantity(qty),
        price=Money.of(price),
        vendor_id=vendor_id,
    )


def _order(*items: OrderLineItem) -> Order:
    return Order.create("LM-1", "ana@example.com", list(items) or [_make_item()], "cs_1")


class TestOrderCreation:

    def test_happy_path(self):
        order = _order(_make_item(qty=2, price="10.00"))
        assert order.id is None  # assigned by repository
        assert order.status == OrderStatus.PENDING
        assert order.payment_status == PaymentStatus.PENDING
        assert order.checkout_session_id == "cs_1"
        assert order.stock_committed is False
        assert order.total == Money.of("20.00")

    def test_requires_items(self):
        with pytest.raises(ValidationError, match="at least one item"):
            Order.create("LM-1", "ana@example.com", [])

    def test_requires_email(self):
        with pytest.raises(ValidationError, match="email is required"):
            Order.create("LM-1", "  ", [_make_item()])

    def test_too_many_items_rejected(self):
        items = [_make_item(product_id=str(i)) for i in range(MAX_LINE_ITEMS + 1)]
        with pytest.raises(ValidationError, match="Maximum"):
            Order.create("LM-1", "ana@example.com", items)


class TestOrderTotals:

    def test_total_is_sum_of_line_items(self):
        order = _order(_make_item("a", 3, "15.00"), _make_item("b", 5, "25.00"))
        assert order.total == Money.of("170.00")

    def test_totals_by_vendor(self):
        order = _order(
            _make_item("a", 2, "10.00", vendor_id="v1"),
            _make_item("b", 1, "5.00", vendor_id="v2"),
            _make_item("c", 1, "1.00", vendor_id="v1"),
            _make_item("d", 1, "99.00", vendor_id=None),
        )
        assert order.totals_by_vendor() == {
            "v1": Money.of("21.00"),
            "v2": Money.of("5.00"),
        }


class TestPaymentTransitions:

    def test_mark_paid(self):
        order = _order()
        order.mark_paid("pi_1")
        assert order.status == OrderStatus.PROCESSING
        assert order.payment_status == PaymentStatus.SUCCEEDED
        assert order.payment_intent_id == "pi_1"

    def test_cannot_pay_twice(self):
        order = _order()
        order.mark_paid("pi_1")
        with pytest.raises(ValidationError, match="already paid"):
            order.mark_paid("pi_2")

    def test_cannot_pay_cancelled_order(self):
        order = _order()
        order.cancel()
        with pytest.raises(ValidationError, match="cancelled"):
            order.mark_paid("pi_1")

    def test_payment_failed_cancels(self):
        order = _order()
        order.mark_payment_failed()
        assert order.status == OrderStatus.CANCELLED
        assert order.payment_status == PaymentStatus.FAILED

    def test_payment_failed_after_success_rejected(self):
        order = _order()
        order.mark_paid("pi_1")
        with pytest.raises(ValidationError, match="refund"):
            order.mark_payment_failed()


class TestCancel:

    def test_cancel_pending(self):
        order = _order()
        order.cancel()
        assert order.status == OrderStatus.CANCELLED
        assert order.payment_status == PaymentStatus.PENDING

    def test_cancel_paid_order_refunds(self):
        order = _order()
        order.mark_paid("pi_1")
        order.cancel()
        assert order.payment_status == PaymentStatus.REFUNDED

    def test_cancel_twice_rejected(self):
        order = _order()
        order.cancel()
        with pytest.raises(ValidationError, match="already cancelled"):
            order.cancel()
