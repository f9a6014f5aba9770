"""Giving stock back when an order will not be fulfilled.

Shared by the payment-failure webhook and the cancellation action.
"""

from __future__ import annotations

import logging

from luzistock.domain.exceptions import PersistenceError
from luzistock.domain.model.order import Order
from luzistock.domain.model.stock import AdjustmentReport
from luzistock.domain.repository.order_repository import OrderRepository
from luzistock.domain.service.reservation_manager import ReservationManager
from luzistock.domain.service.stock_adjuster import StockAdjuster

logger = logging.getLogger(__name__)


def give_back_stock(
    order: Order,
    order_repo: OrderRepository,
    adjuster: StockAdjuster,
    reservations: ReservationManager,
) -> AdjustmentReport | None:
    """Restore committed ledger stock and drop any remaining holds.

    Stock is only restored when this order actually decremented it;
    an unpaid order only ever held units through its reservation.
    """
    report = None
    if order.stock_committed:
        report = adjuster.restore_stock(order.id, committed_only=True)
        if report.ok:
            order.stock_committed = False
            order_repo.save(order)
        else:
            logger.warning(
                f"Stock restore for order {order.order_number} incomplete; "
                f"flagged for inventory reconciliation"
            )
    else:
        logger.info(f"Order {order.order_number} never committed stock; nothing to restore")

    if order.checkout_session_id:
        try:
            reservations.release(order.checkout_session_id)
        except PersistenceError:
            # Holds lapse on their own at expiry.
            logger.exception(f"Could not release holds for order {order.order_number}")
    return report
