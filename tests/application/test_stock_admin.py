"""Integration tests for stock administration use cases."""

from datetime import timedelta

import pytest

from luzistock.application.add_product import AddProductHandler
from luzistock.application.dto import CartLineSpec
from luzistock.application.low_stock_report import LowStockAlerter, LowStockReportHandler
from luzistock.application.manage_reservations import (
    CleanupReservationsHandler,
    HoldStockHandler,
    ListReservationsHandler,
    ReleaseReservationsHandler,
)
from luzistock.application.set_stock import SetStockHandler
from luzistock.application.show_stock import ShowStockHandler
from luzistock.domain.exceptions import EntityNotFoundError, ValidationError
from luzistock.domain.model.product import Product, Vendor
from luzistock.domain.model.reservation import ReservationType, utcnow
from luzistock.domain.model.stock import CartItem
from luzistock.domain.model.value_objects import Money
from luzistock.domain.service.reservation_manager import RETRY_MESSAGE, ReservationManager
from tests.fakes import FakeNotifier, FakeProductRepository, FakeReservationRepository


def _products() -> FakeProductRepository:
    return FakeProductRepository(
        [
            Product(id="mug", name="Mug", price=Money.of("120"), stock=2, vendor_id="v1"),
            Product(id="rug", name="Rug", price=Money.of("900"), stock=40, vendor_id="v1"),
            Product(id="cup", name="Cup", price=Money.of("60"), stock=0),
            Product(id="old", name="Old", price=Money.of("1"), stock=1, is_active=False),
        ],
        vendors=[Vendor(id="v1", business_name="Barro Vivo", email="barro@example.com")],
    )


class TestLowStockReport:

    def test_lists_active_products_at_or_below_threshold(self):
        lines = LowStockReportHandler(_products()).handle(threshold=2)
        assert [(line.product_id, line.stock) for line in lines] == [("cup", 0), ("mug", 2)]
        assert lines[1].vendor_name == "Barro Vivo"
        assert lines[0].vendor_name == ""

    def test_negative_threshold_rejected(self):
        with pytest.raises(ValidationError):
            LowStockReportHandler(_products()).handle(threshold=-1)


class TestLowStockAlerter:

    def test_notify_all_skips_products_without_vendor(self):
        notifier = FakeNotifier()
        sent = LowStockAlerter(_products(), notifier, threshold=5).notify_all()
        assert sent == 1
        assert notifier.sent == [("low_stock", "mug")]

    def test_notify_product_above_threshold(self):
        notifier = FakeNotifier()
        assert not LowStockAlerter(_products(), notifier).notify_product("rug")
        assert notifier.sent == []

    def test_failed_alert_is_logged_not_raised(self):
        alerter = LowStockAlerter(_products(), FakeNotifier(fail=True))
        assert not alerter.notify_product("mug")


class TestSetStock:

    def test_overwrites_ledger_and_alerts(self):
        products = _products()
        notifier = FakeNotifier()
        SetStockHandler(products, LowStockAlerter(products, notifier)).handle("rug", 3)
        assert products.get_by_id("rug").stock == 3
        assert notifier.sent == [("low_stock", "rug")]

    def test_negative_rejected(self):
        with pytest.raises(ValidationError):
            SetStockHandler(_products()).handle("rug", -1)

    def test_unknown_product(self):
        with pytest.raises(EntityNotFoundError):
            SetStockHandler(_products()).handle("nope", 1)


class TestShowStock:

    def test_reports_reserved_units(self):
        products = _products()
        manager = ReservationManager(products, FakeReservationRepository(products))
        manager.reserve([CartItem("rug", 10)], None, "cs_1")
        info = ShowStockHandler(manager).handle("rug")
        assert (info.total, info.reserved, info.available) == (40, 10, 30)
        assert not info.is_low_stock

    def test_reserved_units_above_ledger(self):
        products = _products()
        manager = ReservationManager(products, FakeReservationRepository(products))
        manager.reserve([CartItem("rug", 10)], None, "cs_1")
        products.set_stock("rug", 4)
        info = ShowStockHandler(manager).handle("rug")
        assert (info.total, info.reserved, info.available) == (4, 10, 0)

    def test_unknown_product(self):
        products = _products()
        manager = ReservationManager(products, FakeReservationRepository(products))
        with pytest.raises(EntityNotFoundError):
            ShowStockHandler(manager).handle("nope")


class TestReservationHousekeeping:

    def test_release_by_type(self):
        products = _products()
        manager = ReservationManager(products, FakeReservationRepository(products))
        manager.reserve([CartItem("rug", 5)], "u1", "cs_1", ReservationType.CART)
        handler = ReleaseReservationsHandler(manager)
        assert handler.handle("cs_1", reservation_type="checkout") == 0
        assert handler.handle("cs_1", reservation_type="cart") == 1

    def test_cleanup_with_nothing_expired(self):
        products = _products()
        manager = ReservationManager(products, FakeReservationRepository(products))
        assert CleanupReservationsHandler(manager).handle() == 0

    def test_hold_for_cart(self):
        products = _products()
        manager = ReservationManager(products, FakeReservationRepository(products))
        result = HoldStockHandler(manager).handle([CartLineSpec("rug", 5)], "cs_1", "u1")
        assert result.success
        assert result.held_until is not None
        assert manager.get_available_stock("rug") == 35
        assert ReleaseReservationsHandler(manager).handle("cs_1", reservation_type="cart") == 1

    def test_hold_shortfall(self):
        products = _products()
        manager = ReservationManager(products, FakeReservationRepository(products))
        result = HoldStockHandler(manager).handle(
            [CartLineSpec("mug", 2), CartLineSpec("mug", 1)], "cs_1", reservation_type="checkout"
        )
        assert not result.success
        assert [(s.product_id, s.requested_quantity) for s in result.shortfalls] == [("mug", 3)]
        assert result.message is None

    def test_hold_store_failure_is_a_retry_message(self):
        products = _products()
        reservation_repo = FakeReservationRepository(products)
        reservation_repo.fail = True
        result = HoldStockHandler(ReservationManager(products, reservation_repo)).handle(
            [CartLineSpec("rug", 1)], "cs_1"
        )
        assert not result.success
        assert result.message == RETRY_MESSAGE

    def test_list_shows_each_hold_state(self):
        products = _products()
        manager = ReservationManager(products, FakeReservationRepository(products))
        manager.reserve([CartItem("mug", 1)], "u1", "cs_1", ReservationType.CART)
        manager.reserve([CartItem("rug", 5)], "u1", "cs_1")

        holds = ListReservationsHandler(manager).handle("cs_1")
        assert [(h.product_id, h.reservation_type, h.state) for h in holds] == [
            ("mug", "cart", "released"),
            ("rug", "checkout", "active"),
        ]
        later = ListReservationsHandler(manager, clock=lambda: utcnow() + timedelta(hours=1))
        assert [h.state for h in later.handle("cs_1")] == ["released", "expired"]


class TestAddProduct:

    def test_adds_with_generated_id(self):
        products = FakeProductRepository()
        product = AddProductHandler(products).handle("Vase", "350.00", stock=4)
        assert products.get_by_id(product.id).stock == 4
        assert product.price == Money.of("350.00")

    def test_duplicate_id_rejected(self):
        products = _products()
        with pytest.raises(ValidationError, match="already exists"):
            AddProductHandler(products).handle("Mug", "1", product_id="mug")

    def test_blank_name_rejected(self):
        with pytest.raises(ValidationError, match="name is required"):
            AddProductHandler(FakeProductRepository()).handle("  ", "1")
