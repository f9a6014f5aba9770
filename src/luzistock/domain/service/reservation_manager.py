"""Domain service: Reservation Manager.

Creates, releases and expires time-bounded holds on stock tied to a
cart or checkout session.  Holds reduce *available* stock only; the
ledger is left alone until the Stock Adjuster commits an order.

Expiry is lazy: there is no background timer.  ``cleanup_expired`` runs
at the start of every availability computation, and the reservation
query filters out stale rows on its own, so an abandoned checkout can
never suppress availability past its TTL.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable

from luzistock.domain.exceptions import PersistenceError
from luzistock.domain.model.product import Product
from luzistock.domain.model.reservation import (
    ReservationType,
    StockReservation,
    utcnow,
)
from luzistock.domain.model.stock import CartItem, StockInfo, StockShortfall
from luzistock.domain.repository.product_repository import ProductRepository
from luzistock.domain.repository.reservation_repository import ReservationRepository
from luzistock.domain.service.cart_stock_validator import CartStockValidator

logger = logging.getLogger(__name__)

DEFAULT_TTL = timedelta(minutes=15)
DEFAULT_LOW_STOCK_THRESHOLD = 5
RETRY_MESSAGE = "Unable to hold stock right now, please retry."


@dataclass(frozen=True)
class ReservationOutcome:
    success: bool
    reservations: list[StockReservation] = field(default_factory=list)
    shortfalls: list[StockShortfall] = field(default_factory=list)
    error: str | None = None


class ReservationManager:

    def __init__(
        self,
        product_repo: ProductRepository,
        reservation_repo: ReservationRepository,
        clock: Callable[[], datetime] = utcnow,
        checkout_ttl: timedelta = DEFAULT_TTL,
        cart_ttl: timedelta = DEFAULT_TTL,
        low_stock_threshold: int = DEFAULT_LOW_STOCK_THRESHOLD,
    ) -> None:
        self._product_repo = product_repo
        self._reservation_repo = reservation_repo
        self._clock = clock
        self._ttls = {
            ReservationType.CHECKOUT: checkout_ttl,
            ReservationType.CART: cart_ttl,
        }
        self._low_stock_threshold = low_stock_threshold

    # --- Holds ----------------------------------------------------------------

    def reserve(
        self,
        items: list[CartItem],
        holder_id: str | None,
        session_id: str,
        reservation_type: ReservationType = ReservationType.CHECKOUT,
        ttl_minutes: int | None = None,
    ) -> ReservationOutcome:
        """Hold every item for the session, or nothing at all.

        Never raises for infrastructure faults: a failed hold is reported
        as an unsuccessful outcome so checkout can ask the shopper to
        retry.
        """
        if not items:
            return ReservationOutcome(success=False, error="Nothing to reserve")

        try:
            validation = CartStockValidator(self, self._product_repo).validate(
                items, exclude_session_id=session_id
            )
            if not validation.is_valid:
                logger.info(
                    f"Reservation refused for session {session_id}: "
                    f"{len(validation.errors)} item(s) short"
                )
                return ReservationOutcome(success=False, shortfalls=validation.errors)

            now = self._clock()
            ttl = self._ttl_for(reservation_type, ttl_minutes)
            holds = [
                StockReservation.hold(
                    product_id=item.product_id,
                    quantity=item.quantity,
                    session_id=session_id,
                    ttl=ttl,
                    now=now,
                    reservation_type=reservation_type,
                    holder_id=holder_id,
                )
                for item in items
            ]

            # Availability is re-checked under row locks by the repository;
            # another checkout may have taken the units since validation.
            if not self._reservation_repo.hold_batch(holds, now):
                logger.warning(
                    f"Stock for session {session_id} was taken by a concurrent "
                    f"reservation between validation and insert"
                )
                return ReservationOutcome(success=False, error=RETRY_MESSAGE)
        except PersistenceError:
            logger.exception(f"Error reserving stock for session {session_id}")
            return ReservationOutcome(success=False, error=RETRY_MESSAGE)

        logger.info(
            f"Reserved {len(holds)} item(s) for session {session_id} "
            f"until {holds[0].expires_at.isoformat()}"
        )
        return ReservationOutcome(success=True, reservations=holds)

    def convert_to_checkout(
        self,
        items: list[CartItem],
        holder_id: str | None,
        session_id: str,
    ) -> ReservationOutcome:
        """Swap the session's cart holds for checkout holds.

        The swap happens inside ``hold_batch``: if the checkout holds cannot
        be placed the cart holds stay in force.
        """
        return self.reserve(items, holder_id, session_id, ReservationType.CHECKOUT)

    def release(
        self,
        session_id: str,
        holder_id: str | None = None,
        reservation_type: ReservationType | None = None,
    ) -> int:
        """Release the session's active holds.  Idempotent."""
        count = self._reservation_repo.release(
            session_id, self._clock(), holder_id=holder_id, reservation_type=reservation_type
        )
        if count:
            logger.info(f"Released {count} reservation(s) for session {session_id}")
        return count

    def holds_for(self, session_id: str) -> list[StockReservation]:
        """Every hold recorded for the session, released and lapsed ones included."""
        return self._reservation_repo.list_for_session(session_id)

    def cleanup_expired(self) -> int:
        count = self._reservation_repo.release_expired(self._clock())
        if count:
            logger.info(f"Expired {count} stale reservation(s)")
        return count

    # --- Availability ---------------------------------------------------------

    def get_available_stock(
        self, product_id: str, exclude_session_id: str | None = None
    ) -> int:
        """Ledger stock minus active holds, floored at zero (0 if unknown)."""
        self.cleanup_expired()
        product = self._product_repo.get_by_id(product_id)
        if product is None:
            return 0
        return self.available_for(product, exclude_session_id)

    def available_for(
        self, product: Product, exclude_session_id: str | None = None
    ) -> int:
        reserved = self._reservation_repo.reserved_quantity(
            product.id, self._clock(), exclude_session_id=exclude_session_id
        )
        return max(0, product.stock - reserved)

    def stock_info(self, product_id: str) -> StockInfo | None:
        self.cleanup_expired()
        product = self._product_repo.get_by_id(product_id)
        if product is None:
            return None
        reserved = self._reservation_repo.reserved_quantity(product.id, self._clock())
        return StockInfo(
            product_id=product.id,
            product_name=product.name,
            total=product.stock,
            reserved=reserved,
            available=max(0, product.stock - reserved),
            threshold=self._low_stock_threshold,
        )

    # --- Internal helpers -----------------------------------------------------

    def _ttl_for(self, reservation_type: ReservationType, ttl_minutes: int | None) -> timedelta:
        if ttl_minutes is not None:
            return timedelta(minutes=ttl_minutes)
        return self._ttls[reservation_type]
