"""Integration tests for the BeginCheckout use case.

Uses in-memory fake repositories, no database.
"""

import pytest

from luzistock.application.begin_checkout import BeginCheckoutHandler
from luzistock.application.dto import CartLineSpec
from luzistock.domain.exceptions import PersistenceError, ValidationError
from luzistock.domain.model.product import Product
from luzistock.domain.model.reservation import ReservationType
from luzistock.domain.model.stock import CartItem
from luzistock.domain.model.value_objects import Money
from luzistock.domain.service.reservation_manager import RETRY_MESSAGE, ReservationManager
from tests.fakes import FakeOrderRepository, FakeProductRepository, FakeReservationRepository


def _setup() -> tuple[
    BeginCheckoutHandler, FakeOrderRepository, ReservationManager, FakeReservationRepository
]:
    product_repo = FakeProductRepository([
        Product(id="mug", name="Mug", price=Money.of("120.00"), stock=5, vendor_id="v1"),
        Product(id="rug", name="Rug", price=Money.of("900.00"), stock=1, vendor_id="v2"),
    ])
    order_repo = FakeOrderRepository()
    reservation_repo = FakeReservationRepository(product_repo)
    manager = ReservationManager(product_repo, reservation_repo)
    handler = BeginCheckoutHandler(
        product_repo, order_repo, manager, order_number=lambda: "LM-TEST"
    )
    return handler, order_repo, manager, reservation_repo


class TestBeginCheckout:

    def test_creates_pending_order_and_holds_stock(self):
        handler, order_repo, manager, _ = _setup()
        result = handler.handle(
            "ana@example.com",
            [CartLineSpec("mug", 2), CartLineSpec("rug", 1)],
            session_id="cs_1",
            holder_id="u1",
        )
        assert result.success
        assert result.order_number == "LM-TEST"
        assert result.total == "$1140.00 MXN"
        assert result.reserved_until is not None

        order = order_repo.get_by_id(result.order_id)
        assert order.checkout_session_id == "cs_1"
        assert order.items[0].price == Money.of("120.00")
        assert manager.get_available_stock("mug") == 3
        assert manager.get_available_stock("rug") == 0

    def test_shortfall_lists_every_short_line(self):
        handler, order_repo, _, reservation_repo = _setup()
        result = handler.handle(
            "ana@example.com",
            [CartLineSpec("mug", 9), CartLineSpec("rug", 2), CartLineSpec("gone", 1, "Lamp")],
            session_id="cs_1",
        )
        assert not result.success
        assert [(s.product_name, s.available_stock) for s in result.shortfalls] == [
            ("Mug", 5),
            ("Rug", 1),
            ("Lamp", 0),
        ]
        assert order_repo.get_by_id(1) is None
        assert reservation_repo.rows == []

    def test_second_shopper_blocked_by_hold(self):
        handler, *_ = _setup()
        handler.handle("ana@example.com", [CartLineSpec("rug", 1)], session_id="cs_1")
        result = handler.handle("bo@example.com", [CartLineSpec("rug", 1)], session_id="cs_2")
        assert not result.success
        assert result.shortfalls[0].available_stock == 0

    def test_unreadable_store_raises(self):
        handler, _, _, reservation_repo = _setup()
        reservation_repo.fail = True
        with pytest.raises(PersistenceError):
            handler.handle("ana@example.com", [CartLineSpec("mug", 1)], session_id="cs_1")

    def test_lost_hold_race_returns_retry_message(self):
        handler, order_repo, _, reservation_repo = _setup()
        reservation_repo.hold_batch = lambda reservations, now: False
        result = handler.handle("ana@example.com", [CartLineSpec("mug", 1)], session_id="cs_1")
        assert not result.success
        assert result.message == RETRY_MESSAGE
        assert result.shortfalls == []
        assert order_repo.get_by_id(1) is None

    def test_bad_email_releases_holds(self):
        handler, _, manager, _ = _setup()
        with pytest.raises(ValidationError, match="email"):
            handler.handle("", [CartLineSpec("mug", 2)], session_id="cs_1")
        assert manager.get_available_stock("mug") == 5

    def test_checkout_takes_over_own_cart_holds(self):
        handler, _, manager, reservation_repo = _setup()
        assert manager.reserve([CartItem("rug", 1)], "u1", "cs_1", ReservationType.CART).success

        result = handler.handle(
            "ana@example.com", [CartLineSpec("rug", 1)], session_id="cs_1", holder_id="u1"
        )
        assert result.success
        active = [r for r in reservation_repo.rows if r.released_at is None]
        assert [(r.product_id, r.reservation_type) for r in active] == [
            ("rug", ReservationType.CHECKOUT)
        ]
        assert manager.get_available_stock("rug") == 0

    def test_repeated_product_lines_are_checked_together(self):
        handler, order_repo, _, reservation_repo = _setup()
        result = handler.handle(
            "ana@example.com",
            [CartLineSpec("mug", 3), CartLineSpec("mug", 3)],
            session_id="cs_1",
        )
        assert not result.success
        assert [(s.product_id, s.requested_quantity, s.available_stock) for s in result.shortfalls] == [
            ("mug", 6, 5)
        ]
        assert reservation_repo.rows == []
        assert order_repo.get_by_id(1) is None
