"""Unit tests for StockReservation and the stock read models."""

from datetime import datetime, timedelta, timezone

import pytest

from luzistock.domain.exceptions import ValidationError
from luzistock.domain.model.product import Product
from luzistock.domain.model.reservation import ReservationType, StockReservation
from luzistock.domain.model.stock import (
    AdjustmentOutcome,
    AdjustmentReport,
    CartItem,
    LineAdjustment,
    StockChange,
    StockInfo,
)
from luzistock.domain.model.value_objects import Money

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


class TestHold:

    def test_expires_after_ttl(self):
        r = StockReservation.hold("p1", 2, "cs_1", timedelta(minutes=15), NOW)
        assert r.expires_at == NOW + timedelta(minutes=15)
        assert r.reservation_type is ReservationType.CHECKOUT
        assert r.is_active(NOW)
        assert not r.is_active(NOW + timedelta(minutes=15))

    def test_zero_quantity_rejected(self):
        with pytest.raises(ValidationError, match="must be positive"):
            StockReservation.hold("p1", 0, "cs_1", timedelta(minutes=15), NOW)

    def test_session_required(self):
        with pytest.raises(ValidationError, match="session id"):
            StockReservation.hold("p1", 1, "", timedelta(minutes=15), NOW)

    def test_ttl_must_be_positive(self):
        with pytest.raises(ValidationError, match="TTL"):
            StockReservation.hold("p1", 1, "cs_1", timedelta(0), NOW)

    def test_release_is_idempotent(self):
        r = StockReservation.hold("p1", 1, "cs_1", timedelta(minutes=15), NOW)
        r.release(NOW + timedelta(minutes=1))
        r.release(NOW + timedelta(minutes=5))
        assert r.released_at == NOW + timedelta(minutes=1)
        assert not r.is_active(NOW + timedelta(minutes=2))


class TestReadModels:

    def test_negative_product_stock_rejected(self):
        with pytest.raises(ValidationError, match="cannot be negative"):
            Product(id="p1", name="Mug", price=Money.of("1"), stock=-1)

    def test_cart_item_quantity_must_be_positive(self):
        with pytest.raises(ValidationError, match="must be positive"):
            CartItem("p1", 0, "Mug")

    def test_low_stock_uses_available(self):
        info = StockInfo("p1", "Mug", total=10, reserved=6, available=4, threshold=5)
        assert info.is_low_stock

    def test_oversold_line(self):
        line = LineAdjustment(
            "p1", 5, AdjustmentOutcome.APPLIED, change=StockChange("p1", 3, 0)
        )
        assert line.oversold

    def test_empty_report_is_not_ok(self):
        assert not AdjustmentReport(order_id=1, lines=[]).ok

    def test_report_with_failure_is_not_ok(self):
        report = AdjustmentReport(
            order_id=1,
            lines=[
                LineAdjustment("p1", 1, AdjustmentOutcome.APPLIED, StockChange("p1", 5, 4)),
                LineAdjustment("p2", 1, AdjustmentOutcome.FAILED, error="locked"),
            ],
        )
        assert not report.ok
        assert [line.product_id for line in report.failures] == ["p2"]
