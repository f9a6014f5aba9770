"""Application service: Cancel Order use case.

A paid order gives its committed units back to the ledger; a pending
order only had reservations, which are released.
"""

from __future__ import annotations

from luzistock.application.dto import PaymentResultDTO
from luzistock.application.order_stock import give_back_stock
from luzistock.domain.exceptions import EntityNotFoundError
from luzistock.domain.repository.order_repository import OrderRepository
from luzistock.domain.service.reservation_manager import ReservationManager
from luzistock.domain.service.stock_adjuster import StockAdjuster


class CancelOrderHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        adjuster: StockAdjuster,
        reservations: ReservationManager,
    ) -> None:
        self._order_repo = order_repo
        self._adjuster = adjuster
        self._reservations = reservations

    def handle(self, order_id: int) -> PaymentResultDTO:
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order #{order_id} not found")

        order.cancel()
        self._order_repo.save(order)

        report = give_back_stock(order, self._order_repo, self._adjuster, self._reservations)
        return PaymentResultDTO(
            order_id=order.id,
            order_number=order.order_number,
            status=order.status.value,
            payment_status=order.payment_status.value,
            stock_adjusted=report is None or report.ok,
        )
