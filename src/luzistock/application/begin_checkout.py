"""Application service: Begin Checkout use case.

Runs before a payment-provider session is created:

1. Validate the cart against available stock (ledger minus holds).
2. Hold the stock for the checkout window.
3. Create a pending order that remembers the checkout session, so the
   payment webhooks can later commit or give back the stock.

Shortfalls come back as data for the page to list; a failed hold comes
back as a generic retry message.  A store that cannot be read raises.
"""

from __future__ import annotations

import logging
import uuid
from typing import Callable

from luzistock.application.dto import CartLineSpec, CheckoutResultDTO, ShortfallDTO
from luzistock.domain.exceptions import DomainException, PersistenceError
from luzistock.domain.model.order import Order, OrderLineItem
from luzistock.domain.model.stock import CartItem, StockShortfall
from luzistock.domain.model.value_objects import Quantity
from luzistock.domain.repository.order_repository import OrderRepository
from luzistock.domain.repository.product_repository import ProductRepository
from luzistock.domain.service.cart_stock_validator import CartStockValidator
from luzistock.domain.service.reservation_manager import RETRY_MESSAGE, ReservationManager

logger = logging.getLogger(__name__)


def _new_order_number() -> str:
    return f"LM-{uuid.uuid4().hex[:10].upper()}"


class BeginCheckoutHandler:

    def __init__(
        self,
        product_repo: ProductRepository,
        order_repo: OrderRepository,
        reservations: ReservationManager,
        order_number: Callable[[], str] = _new_order_number,
    ) -> None:
        self._product_repo = product_repo
        self._order_repo = order_repo
        self._reservations = reservations
        self._order_number = order_number

    def handle(
        self,
        customer_email: str,
        lines: list[CartLineSpec],
        session_id: str,
        holder_id: str | None = None,
    ) -> CheckoutResultDTO:
        cart = [CartItem(line.product_id, line.quantity, line.name) for line in lines]

        validator = CartStockValidator(self._reservations, self._product_repo)
        validation = validator.validate(cart, exclude_session_id=session_id)
        if not validation.is_valid:
            return self._shortfall_result(validation.errors)

        outcome = self._reservations.convert_to_checkout(cart, holder_id, session_id)
        if not outcome.success:
            if outcome.shortfalls:
                return self._shortfall_result(outcome.shortfalls)
            return CheckoutResultDTO(success=False, message=outcome.error or RETRY_MESSAGE)

        try:
            order = self._place_order(customer_email, cart, session_id, holder_id)
        except (DomainException, PersistenceError):
            # Do not leave stock held behind a checkout that has no order.
            self._reservations.release(session_id)
            raise
        if order is None:
            self._reservations.release(session_id)
            return CheckoutResultDTO(success=False, message=RETRY_MESSAGE)

        logger.info(
            f"Checkout {session_id} opened order {order.order_number} "
            f"with {len(order.items)} item(s)"
        )
        return CheckoutResultDTO(
            success=True,
            order_id=order.id,
            order_number=order.order_number,
            total=str(order.total),
            reserved_until=outcome.reservations[0].expires_at.isoformat(),
        )

    # --- Internal helpers -----------------------------------------------------

    def _place_order(
        self,
        customer_email: str,
        cart: list[CartItem],
        session_id: str,
        holder_id: str | None,
    ) -> Order | None:
        items: list[OrderLineItem] = []
        for entry in cart:
            product = self._product_repo.get_active(entry.product_id)
            if product is None:
                logger.warning(
                    f"Product {entry.product_id} was deactivated during checkout {session_id}"
                )
                return None
            items.append(
                OrderLineItem(
                    product_id=product.id,
                    product_name=product.name,
                    quantity=Quantity(entry.quantity),
                    price=product.price,  # <-- price snapshot
                    vendor_id=product.vendor_id,
                )
            )

        order = Order.create(
            order_number=self._order_number(),
            customer_email=customer_email,
            items=items,
            checkout_session_id=session_id,
            holder_id=holder_id,
        )
        self._order_repo.save(order)
        return order

    @staticmethod
    def _shortfall_result(shortfalls: list[StockShortfall]) -> CheckoutResultDTO:
        return CheckoutResultDTO(
            success=False,
            shortfalls=[
                ShortfallDTO(
                    product_id=s.product_id,
                    product_name=s.product_name,
                    requested_quantity=s.requested_quantity,
                    available_stock=s.available_stock,
                )
                for s in shortfalls
            ],
        )
