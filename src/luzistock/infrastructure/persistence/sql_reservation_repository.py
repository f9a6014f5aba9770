"""SQL implementation of ReservationRepository."""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import datetime

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session, sessionmaker

from luzistock.domain.model.reservation import ReservationType, StockReservation
from luzistock.domain.repository.reservation_repository import ReservationRepository
from luzistock.infrastructure.persistence.database import transaction
from luzistock.infrastructure.persistence.tables import ProductRow, StockReservationRow

logger = logging.getLogger(__name__)


class _Unavailable(Exception):
    """Raised inside a hold transaction to roll it back."""


class SqlReservationRepository(ReservationRepository):

    def __init__(self, factory: sessionmaker[Session]) -> None:
        self._factory = factory

    # --- ReservationRepository interface --------------------------------------

    def reserved_quantity(
        self,
        product_id: str,
        now: datetime,
        exclude_session_id: str | None = None,
    ) -> int:
        with transaction(self._factory) as session:
            return self._reserved(session, product_id, now, exclude_session_id)

    def hold_batch(self, reservations: list[StockReservation], now: datetime) -> bool:
        needed: dict[str, int] = defaultdict(int)
        for reservation in reservations:
            needed[reservation.product_id] += reservation.quantity

        try:
            with transaction(self._factory) as session:
                # A session holds one set of units at a time: new holds replace
                # its earlier ones of any type, restored if this rolls back.
                for session_id in {r.session_id for r in reservations}:
                    session.execute(self._release_statement(session_id, now, None, None))

                # Lock products in a stable order to avoid deadlocks.
                for product_id in sorted(needed):
                    stock = session.scalars(
                        select(ProductRow.stock)
                        .where(ProductRow.id == product_id, ProductRow.is_active.is_(True))
                        .with_for_update()
                    ).first()
                    reserved = self._reserved(session, product_id, now, None)
                    if stock is None or stock - reserved < needed[product_id]:
                        raise _Unavailable(product_id)

                rows = [self._to_row(r) for r in reservations]
                session.add_all(rows)
                session.flush()
                for reservation, row in zip(reservations, rows):
                    reservation.id = row.id
        except _Unavailable as exc:
            logger.debug(f"Hold rolled back, product {exc} no longer available")
            return False
        return True

    def release(
        self,
        session_id: str,
        now: datetime,
        holder_id: str | None = None,
        reservation_type: ReservationType | None = None,
    ) -> int:
        with transaction(self._factory) as session:
            result = session.execute(
                self._release_statement(session_id, now, holder_id, reservation_type)
            )
            return result.rowcount

    def release_expired(self, now: datetime) -> int:
        with transaction(self._factory) as session:
            result = session.execute(
                update(StockReservationRow)
                .where(
                    StockReservationRow.expires_at <= now,
                    StockReservationRow.released_at.is_(None),
                )
                .values(released_at=now)
                .execution_options(synchronize_session=False)
            )
            return result.rowcount

    def list_for_session(self, session_id: str) -> list[StockReservation]:
        with transaction(self._factory) as session:
            rows = session.scalars(
                select(StockReservationRow)
                .where(StockReservationRow.session_id == session_id)
                .order_by(StockReservationRow.id)
            )
            return [self._to_domain(row) for row in rows]

    # --- Queries --------------------------------------------------------------

    @staticmethod
    def _reserved(
        session: Session,
        product_id: str,
        now: datetime,
        exclude_session_id: str | None,
    ) -> int:
        query = select(func.coalesce(func.sum(StockReservationRow.quantity), 0)).where(
            StockReservationRow.product_id == product_id,
            StockReservationRow.released_at.is_(None),
            StockReservationRow.expires_at > now,
        )
        if exclude_session_id is not None:
            query = query.where(StockReservationRow.session_id != exclude_session_id)
        return int(session.scalar(query) or 0)

    @staticmethod
    def _release_statement(
        session_id: str,
        now: datetime,
        holder_id: str | None,
        reservation_type: ReservationType | None,
    ):
        stmt = update(StockReservationRow).where(
            StockReservationRow.session_id == session_id,
            StockReservationRow.released_at.is_(None),
        )
        if holder_id is not None:
            stmt = stmt.where(StockReservationRow.user_id == holder_id)
        if reservation_type is not None:
            stmt = stmt.where(StockReservationRow.reservation_type == reservation_type.value)
        return stmt.values(released_at=now).execution_options(synchronize_session=False)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_row(reservation: StockReservation) -> StockReservationRow:
        return StockReservationRow(
            product_id=reservation.product_id,
            quantity=reservation.quantity,
            user_id=reservation.holder_id,
            session_id=reservation.session_id,
            reservation_type=reservation.reservation_type.value,
            expires_at=reservation.expires_at,
            released_at=reservation.released_at,
            created_at=reservation.created_at,
        )

    @staticmethod
    def _to_domain(row: StockReservationRow) -> StockReservation:
        return StockReservation(
            id=row.id,
            product_id=row.product_id,
            quantity=row.quantity,
            session_id=row.session_id,
            holder_id=row.user_id,
            reservation_type=ReservationType(row.reservation_type),
            expires_at=row.expires_at,
            released_at=row.released_at,
            created_at=row.created_at,
        )
