"""Application services: payment webhook outcomes.

Success: mark the order paid, credit the vendors, commit the stock
decrement, release the checkout holds, notify.  A stock decrement that
only partly succeeds is logged for reconciliation; it never undoes the
payment confirmation, because the customer has already paid.

Failure: mark the order failed and give its stock back.
"""

from __future__ import annotations

import logging

from luzistock.application.dto import PaymentResultDTO
from luzistock.application.low_stock_report import LowStockAlerter
from luzistock.application.order_stock import give_back_stock
from luzistock.domain.exceptions import EntityNotFoundError, PersistenceError
from luzistock.domain.model.order import Order
from luzistock.domain.model.stock import AdjustmentOutcome
from luzistock.domain.repository.collaborators import Notifier, VendorLedger
from luzistock.domain.repository.order_repository import OrderRepository
from luzistock.domain.service.reservation_manager import ReservationManager
from luzistock.domain.service.stock_adjuster import StockAdjuster

logger = logging.getLogger(__name__)


class PaymentSucceededHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        adjuster: StockAdjuster,
        reservations: ReservationManager,
        vendor_ledger: VendorLedger,
        notifier: Notifier,
        alerter: LowStockAlerter | None = None,
    ) -> None:
        self._order_repo = order_repo
        self._adjuster = adjuster
        self._reservations = reservations
        self._vendor_ledger = vendor_ledger
        self._notifier = notifier
        self._alerter = alerter

    def handle(self, order_id: int, payment_intent_id: str) -> PaymentResultDTO:
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order #{order_id} not found")

        # 1. Confirm the payment; everything after this is best-effort.
        order.mark_paid(payment_intent_id)
        self._order_repo.save(order)

        # 2. Vendor earnings
        self._credit_vendors(order)

        # 3. Stock, then holds: decrementing first means the brief overlap
        #    understates availability rather than overstating it.
        stock_ok = self._commit_stock(order)
        if order.checkout_session_id:
            try:
                self._reservations.release(order.checkout_session_id)
            except PersistenceError:
                logger.exception(f"Could not release holds for order {order.order_number}")

        # 4. Notifications
        self._notify(order)

        return PaymentResultDTO(
            order_id=order.id,
            order_number=order.order_number,
            status=order.status.value,
            payment_status=order.payment_status.value,
            stock_adjusted=stock_ok,
        )

    # --- Internal helpers -----------------------------------------------------

    def _credit_vendors(self, order: Order) -> None:
        for vendor_id, amount in order.totals_by_vendor().items():
            try:
                self._vendor_ledger.credit_sale(vendor_id, amount, order.id)
            except PersistenceError:
                logger.exception(
                    f"Could not credit vendor {vendor_id} for order {order.order_number}"
                )

    def _commit_stock(self, order: Order) -> bool:
        try:
            report = self._adjuster.reduce_stock(order.id)
        except PersistenceError:
            logger.exception(f"Failed to reduce stock for order {order.order_number}")
            return False

        if any(line.outcome is AdjustmentOutcome.APPLIED for line in report.lines):
            order.stock_committed = True
            self._order_repo.save(order)
        if not report.ok:
            # Continue processing; caught by inventory reconciliation.
            logger.warning(
                f"Failed to reduce stock for order {order.order_number}; "
                f"flagged for inventory reconciliation"
            )
        return report.ok

    def _notify(self, order: Order) -> None:
        try:
            self._notifier.order_confirmed(order)
        except Exception:
            logger.exception(f"Failed to send payment notifications for {order.order_number}")

        if self._alerter is None:
            return
        for product_id in {item.product_id for item in order.items}:
            try:
                self._alerter.notify_product(product_id)
            except PersistenceError:
                logger.exception(f"Low-stock check failed for product {product_id}")


class PaymentFailedHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        adjuster: StockAdjuster,
        reservations: ReservationManager,
        notifier: Notifier,
    ) -> None:
        self._order_repo = order_repo
        self._adjuster = adjuster
        self._reservations = reservations
        self._notifier = notifier

    def handle(self, order_id: int) -> PaymentResultDTO:
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order #{order_id} not found")

        order.mark_payment_failed()
        self._order_repo.save(order)

        report = give_back_stock(order, self._order_repo, self._adjuster, self._reservations)

        try:
            self._notifier.payment_failed(order)
        except Exception:
            logger.exception(f"Failed to send payment-failed email for {order.order_number}")

        return PaymentResultDTO(
            order_id=order.id,
            order_number=order.order_number,
            status=order.status.value,
            payment_status=order.payment_status.value,
            stock_adjusted=report is None or report.ok,
        )
