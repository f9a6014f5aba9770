"""StockReservation: a temporary, expiring hold against availability.

Reservations lower *available* stock as computed at read time; they never
touch the ledger.  A hold lapses on its own once ``expires_at`` passes,
which is how abandoned carts give their units back without any timer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum

from luzistock.domain.exceptions import ValidationError


class ReservationType(Enum):
    CART = "cart"
    CHECKOUT = "checkout"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class StockReservation:
    """A hold of ``quantity`` units of one product for one session.

    ``holder_id`` is usually a user id but is advisory only: guests hold
    stock by ``session_id`` alone.
    """

    product_id: str
    quantity: int
    session_id: str
    expires_at: datetime
    reservation_type: ReservationType = ReservationType.CHECKOUT
    holder_id: str | None = None
    released_at: datetime | None = None
    created_at: datetime = field(default_factory=utcnow)
    id: int | None = None

    @staticmethod
    def hold(
        product_id: str,
        quantity: int,
        session_id: str,
        ttl: timedelta,
        now: datetime,
        reservation_type: ReservationType = ReservationType.CHECKOUT,
        holder_id: str | None = None,
    ) -> StockReservation:
        """Create a new hold expiring ``ttl`` from ``now``."""
        if quantity <= 0:
            raise ValidationError("Reservation quantity must be positive")
        if not session_id:
            raise ValidationError("A session id is required to hold stock")
        if ttl <= timedelta(0):
            raise ValidationError("Reservation TTL must be positive")
        return StockReservation(
            product_id=product_id,
            quantity=quantity,
            session_id=session_id,
            expires_at=now + ttl,
            reservation_type=reservation_type,
            holder_id=holder_id,
            created_at=now,
        )

    def is_active(self, now: datetime) -> bool:
        return self.released_at is None and self.expires_at > now

    def release(self, now: datetime) -> None:
        if self.released_at is None:
            self.released_at = now
