"""Abstract repository for stock reservations."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from luzistock.domain.model.reservation import ReservationType, StockReservation


class ReservationRepository(ABC):

    @abstractmethod
    def reserved_quantity(
        self,
        product_id: str,
        now: datetime,
        exclude_session_id: str | None = None,
    ) -> int:
        """Sum of quantities of *active* holds on a product.

        Active means ``released_at IS NULL AND expires_at > now``; the
        filter lives in the query so a stale hold is never counted even
        if no cleanup pass has run yet.
        """

    @abstractmethod
    def hold_batch(
        self,
        reservations: list[StockReservation],
        now: datetime,
    ) -> bool:
        """Insert all holds or none of them.

        Within one transaction: release all of the session's earlier
        active holds (cart or checkout), re-check every product's available stock
        under a row lock, then insert.  Returns False without writing
        anything when availability no longer covers the request.
        """

    @abstractmethod
    def release(
        self,
        session_id: str,
        now: datetime,
        holder_id: str | None = None,
        reservation_type: ReservationType | None = None,
    ) -> int:
        """Mark the session's active holds released; return how many."""

    @abstractmethod
    def release_expired(self, now: datetime) -> int:
        """Mark expired, unreleased holds released; return how many."""

    @abstractmethod
    def list_for_session(self, session_id: str) -> list[StockReservation]:
        """Every hold (active or not) recorded for a session."""
