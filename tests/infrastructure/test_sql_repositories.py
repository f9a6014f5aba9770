"""Integration tests for the SQL repositories against SQLite."""

import threading
from datetime import datetime, timedelta, timezone

import pytest

from luzistock.domain.exceptions import EntityNotFoundError, ValidationError
from luzistock.domain.model.order import Order, OrderLineItem, PaymentStatus
from luzistock.domain.model.product import Category, Product, Vendor
from luzistock.domain.model.reservation import ReservationType, StockReservation
from luzistock.domain.model.value_objects import Money, Quantity
from luzistock.infrastructure.persistence.database import (
    build_engine,
    create_schema,
    session_factory,
)
from luzistock.infrastructure.persistence.sql_catalog_repository import (
    SqlCatalogRepository,
    SqlVendorLedger,
)
from luzistock.infrastructure.persistence.sql_order_repository import SqlOrderRepository
from luzistock.infrastructure.persistence.sql_product_repository import SqlProductRepository
from luzistock.infrastructure.persistence.sql_reservation_repository import (
    SqlReservationRepository,
)

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
TTL = timedelta(minutes=15)


def _factory(url: str = "sqlite://"):
    engine = build_engine(url)
    create_schema(engine)
    return session_factory(engine)


@pytest.fixture
def factory():
    factory = _factory()
    catalog = SqlCatalogRepository(factory)
    catalog.add_vendor(Vendor(id="v1", business_name="Barro Vivo", email="barro@example.com"))
    catalog.add_category(Category(id="c1", name="Ceramics"))
    products = SqlProductRepository(factory)
    products.save(Product(id="mug", name="Mug", price=Money.of("120.00"), stock=10,
                          vendor_id="v1", category_id="c1"))
    products.save(Product(id="rug", name="Rug", price=Money.of("900.00"), stock=2))
    products.save(Product(id="old", name="Old", price=Money.of("1.00"), stock=1, is_active=False))
    return factory


def _hold(product_id: str, qty: int, session_id: str = "cs_1", now: datetime = NOW, **kwargs):
    return StockReservation.hold(product_id, qty, session_id, TTL, now, **kwargs)


class TestSqlProductRepository:

    def test_round_trip(self, factory):
        product = SqlProductRepository(factory).get_by_id("mug")
        assert product.price == Money.of("120.00")
        assert (product.stock, product.vendor_id, product.category_id) == (10, "v1", "c1")

    def test_get_active_skips_inactive(self, factory):
        repo = SqlProductRepository(factory)
        assert repo.get_active("old") is None
        assert repo.get_by_id("old") is not None

    def test_decrement(self, factory):
        change = SqlProductRepository(factory).decrement_clamped("mug", 3)
        assert (change.previous, change.current) == (10, 7)

    def test_decrement_clamps_at_zero(self, factory):
        repo = SqlProductRepository(factory)
        change = repo.decrement_clamped("rug", 5)
        assert (change.previous, change.current) == (2, 0)
        assert repo.get_by_id("rug").stock == 0

    def test_increment(self, factory):
        change = SqlProductRepository(factory).increment("rug", 4)
        assert change.current == 6

    def test_adjust_unknown_product(self, factory):
        with pytest.raises(EntityNotFoundError):
            SqlProductRepository(factory).increment("nope", 1)

    def test_set_stock(self, factory):
        repo = SqlProductRepository(factory)
        repo.set_stock("mug", 1)
        assert repo.get_by_id("mug").stock == 1
        with pytest.raises(EntityNotFoundError):
            repo.set_stock("nope", 1)
        with pytest.raises(ValidationError):
            repo.set_stock("mug", -1)

    def test_low_stock_joins_vendor_and_category(self, factory):
        repo = SqlProductRepository(factory)
        repo.set_stock("mug", 1)
        low = repo.list_low_stock(2)
        assert [p.product_id for p in low] == ["mug", "rug"]
        assert low[0].vendor.email == "barro@example.com"
        assert low[0].category.name == "Ceramics"
        assert low[1].vendor is None


class TestSqlReservationRepository:

    def test_hold_and_count(self, factory):
        repo = SqlReservationRepository(factory)
        holds = [_hold("mug", 3), _hold("rug", 1)]
        assert repo.hold_batch(holds, NOW)
        assert all(h.id is not None for h in holds)
        assert repo.reserved_quantity("mug", NOW) == 3
        assert repo.reserved_quantity("mug", NOW, exclude_session_id="cs_1") == 0

    def test_expired_holds_not_counted(self, factory):
        repo = SqlReservationRepository(factory)
        repo.hold_batch([_hold("mug", 3)], NOW)
        assert repo.reserved_quantity("mug", NOW + TTL) == 0
        assert repo.release_expired(NOW + TTL) == 1
        assert repo.list_for_session("cs_1")[0].released_at == NOW + TTL

    def test_batch_is_all_or_nothing(self, factory):
        repo = SqlReservationRepository(factory)
        assert repo.hold_batch([_hold("rug", 2, "cs_1")], NOW)
        assert not repo.hold_batch([_hold("mug", 1, "cs_2"), _hold("rug", 1, "cs_2")], NOW)
        assert repo.list_for_session("cs_2") == []
        assert repo.reserved_quantity("mug", NOW) == 0

    def test_inactive_product_cannot_be_held(self, factory):
        assert not SqlReservationRepository(factory).hold_batch([_hold("old", 1)], NOW)

    def test_rehold_replaces_earlier_holds_of_any_type(self, factory):
        repo = SqlReservationRepository(factory)
        repo.hold_batch([_hold("mug", 2, reservation_type=ReservationType.CART)], NOW)
        repo.hold_batch([_hold("mug", 5)], NOW)
        repo.hold_batch([_hold("mug", 4)], NOW)
        assert repo.reserved_quantity("mug", NOW) == 4

    def test_failed_rehold_keeps_earlier_holds(self, factory):
        repo = SqlReservationRepository(factory)
        repo.hold_batch([_hold("rug", 1, reservation_type=ReservationType.CART)], NOW)
        repo.hold_batch([_hold("rug", 1, "cs_2")], NOW)

        assert not repo.hold_batch([_hold("rug", 2)], NOW)
        assert repo.reserved_quantity("rug", NOW) == 2
        [cart] = repo.list_for_session("cs_1")
        assert cart.reservation_type is ReservationType.CART
        assert cart.released_at is None

    def test_release_filters_and_is_idempotent(self, factory):
        repo = SqlReservationRepository(factory)
        repo.hold_batch([_hold("mug", 2, holder_id="u1")], NOW)
        assert repo.release("cs_1", NOW, holder_id="u2") == 0
        assert repo.release("cs_1", NOW, reservation_type=ReservationType.CART) == 0
        assert repo.release("cs_1", NOW, holder_id="u1") == 1
        assert repo.release("cs_1", NOW) == 0

    def test_reservation_round_trip(self, factory):
        repo = SqlReservationRepository(factory)
        repo.hold_batch([_hold("mug", 2, holder_id="u1")], NOW)
        stored = repo.list_for_session("cs_1")[0]
        assert stored.holder_id == "u1"
        assert stored.reservation_type is ReservationType.CHECKOUT
        assert stored.expires_at == NOW + TTL


class TestSqlOrderRepository:

    def _order(self) -> Order:
        return Order.create(
            "LM-1",
            "ana@example.com",
            [
                OrderLineItem("mug", "Mug", Quantity(2), Money.of("120.00"), vendor_id="v1"),
                OrderLineItem("rug", "Rug", Quantity(1), Money.of("900.00")),
            ],
            checkout_session_id="cs_1",
        )

    def test_save_assigns_id_and_items(self, factory):
        repo = SqlOrderRepository(factory)
        order = self._order()
        repo.save(order)
        assert order.id is not None

        items = repo.get_line_items(order.id)
        assert [(i.product_id, i.quantity.value, i.order_id) for i in items] == [
            ("mug", 2, order.id),
            ("rug", 1, order.id),
        ]
        assert [i.id for i in order.items] == [i.id for i in items]
        assert all(i.id is not None and not i.stock_committed for i in items)

    def test_mark_line_committed(self, factory):
        repo = SqlOrderRepository(factory)
        order = self._order()
        repo.save(order)
        mug, rug = order.items

        repo.mark_line_committed(mug.id, True)
        assert [i.stock_committed for i in repo.get_line_items(order.id)] == [True, False]
        repo.mark_line_committed(mug.id, False)
        assert not repo.get_by_id(order.id).items[0].stock_committed

    def test_mark_unknown_line(self, factory):
        with pytest.raises(EntityNotFoundError, match="Order line 99"):
            SqlOrderRepository(factory).mark_line_committed(99, True)

    def test_status_update(self, factory):
        repo = SqlOrderRepository(factory)
        order = self._order()
        repo.save(order)
        order.mark_paid("pi_1")
        order.stock_committed = True
        repo.save(order)

        loaded = repo.get_by_id(order.id)
        assert loaded.payment_status is PaymentStatus.SUCCEEDED
        assert loaded.stock_committed
        assert loaded.total == Money.of("1140.00")

    def test_missing_order(self, factory):
        repo = SqlOrderRepository(factory)
        assert repo.get_by_id(42) is None
        assert repo.get_line_items(42) == []


class TestSqlCatalog:

    def test_credit_sale_accumulates(self, factory):
        ledger = SqlVendorLedger(factory)
        ledger.credit_sale("v1", Money.of("100.00"), 1)
        ledger.credit_sale("v1", Money.of("20.50"), 2)
        assert ledger.balance("v1") == Money.of("120.50")

    def test_credit_unknown_vendor_is_logged(self, factory, caplog):
        SqlVendorLedger(factory).credit_sale("nope", Money.of("1.00"), 1)
        assert "Vendor balance not found" in caplog.text

    def test_duplicate_vendor_rejected(self, factory):
        with pytest.raises(ValidationError, match="already exists"):
            SqlCatalogRepository(factory).add_vendor(
                Vendor(id="v1", business_name="Again", email="a@example.com")
            )


class TestConcurrentAdjustments:

    def test_parallel_restores_lose_no_update(self, tmp_path):
        factory = _factory(f"sqlite:///{tmp_path / 'stock.db'}")
        repo = SqlProductRepository(factory)
        repo.save(Product(id="mug", name="Mug", price=Money.of("1.00"), stock=0))

        def restore():
            for _ in range(5):
                repo.increment("mug", 1)

        threads = [threading.Thread(target=restore) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert repo.get_by_id("mug").stock == 40

    def test_parallel_decrements_never_go_negative(self, tmp_path):
        factory = _factory(f"sqlite:///{tmp_path / 'stock.db'}")
        repo = SqlProductRepository(factory)
        repo.save(Product(id="rug", name="Rug", price=Money.of("1.00"), stock=10))

        threads = [
            threading.Thread(target=repo.decrement_clamped, args=("rug", 3))
            for _ in range(6)
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert repo.get_by_id("rug").stock == 0
