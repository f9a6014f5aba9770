"""Application service: Show Stock use case (query)."""

from __future__ import annotations

from luzistock.application.dto import StockInfoDTO
from luzistock.domain.exceptions import EntityNotFoundError
from luzistock.domain.service.reservation_manager import ReservationManager


class ShowStockHandler:

    def __init__(self, reservations: ReservationManager) -> None:
        self._reservations = reservations

    def handle(self, product_id: str) -> StockInfoDTO:
        info = self._reservations.stock_info(product_id)
        if info is None:
            raise EntityNotFoundError(f"Product '{product_id}' not found")
        return StockInfoDTO(
            product_id=info.product_id,
            product_name=info.product_name,
            total=info.total,
            reserved=info.reserved,
            available=info.available,
            is_low_stock=info.is_low_stock,
            threshold=info.threshold,
        )
