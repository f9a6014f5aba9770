"""Application services: direct holds and reservation housekeeping."""

from __future__ import annotations

from datetime import datetime
from typing import Callable

from luzistock.application.dto import (
    CartLineSpec,
    HoldResultDTO,
    ReservationDTO,
    ShortfallDTO,
)
from luzistock.domain.model.reservation import ReservationType, utcnow
from luzistock.domain.model.stock import CartItem
from luzistock.domain.service.reservation_manager import RETRY_MESSAGE, ReservationManager


class HoldStockHandler:
    """Hold a cart's stock for a session without opening an order."""

    def __init__(self, reservations: ReservationManager) -> None:
        self._reservations = reservations

    def handle(
        self,
        lines: list[CartLineSpec],
        session_id: str,
        holder_id: str | None = None,
        reservation_type: str = "cart",
    ) -> HoldResultDTO:
        items = [CartItem(line.product_id, line.quantity, line.name) for line in lines]
        outcome = self._reservations.reserve(
            items, holder_id, session_id, ReservationType(reservation_type)
        )
        if outcome.success:
            return HoldResultDTO(
                success=True,
                held_until=outcome.reservations[0].expires_at.isoformat(),
            )
        return HoldResultDTO(
            success=False,
            shortfalls=[
                ShortfallDTO(
                    product_id=s.product_id,
                    product_name=s.product_name,
                    requested_quantity=s.requested_quantity,
                    available_stock=s.available_stock,
                )
                for s in outcome.shortfalls
            ],
            message=None if outcome.shortfalls else (outcome.error or RETRY_MESSAGE),
        )


class ListReservationsHandler:

    def __init__(
        self,
        reservations: ReservationManager,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._reservations = reservations
        self._clock = clock

    def handle(self, session_id: str) -> list[ReservationDTO]:
        now = self._clock()
        result = []
        for r in self._reservations.holds_for(session_id):
            if r.released_at is not None:
                state = "released"
            elif r.is_active(now):
                state = "active"
            else:
                state = "expired"
            result.append(
                ReservationDTO(
                    product_id=r.product_id,
                    quantity=r.quantity,
                    reservation_type=r.reservation_type.value,
                    holder_id=r.holder_id,
                    expires_at=r.expires_at.isoformat(),
                    state=state,
                )
            )
        return result


class ReleaseReservationsHandler:

    def __init__(self, reservations: ReservationManager) -> None:
        self._reservations = reservations

    def handle(
        self,
        session_id: str,
        holder_id: str | None = None,
        reservation_type: str | None = None,
    ) -> int:
        rtype = ReservationType(reservation_type) if reservation_type else None
        return self._reservations.release(session_id, holder_id, rtype)


class CleanupReservationsHandler:

    def __init__(self, reservations: ReservationManager) -> None:
        self._reservations = reservations

    def handle(self) -> int:
        return self._reservations.cleanup_expired()
