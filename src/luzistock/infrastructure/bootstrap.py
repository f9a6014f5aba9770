"""Composition root: wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

from datetime import timedelta
from functools import lru_cache

from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from luzistock.domain.service.reservation_manager import ReservationManager
from luzistock.domain.service.stock_adjuster import StockAdjuster
from luzistock.infrastructure.config import Settings, get_settings
from luzistock.infrastructure.notifications import LoggingNotifier
from luzistock.infrastructure.persistence.database import (
    build_engine,
    create_schema,
    session_factory,
)
from luzistock.infrastructure.persistence.sql_catalog_repository import (
    SqlCatalogRepository,
    SqlVendorLedger,
)
from luzistock.infrastructure.persistence.sql_order_repository import SqlOrderRepository
from luzistock.infrastructure.persistence.sql_product_repository import (
    SqlProductRepository,
)
from luzistock.infrastructure.persistence.sql_reservation_repository import (
    SqlReservationRepository,
)


@lru_cache
def _engine() -> Engine:
    settings = get_settings()
    return build_engine(settings.database_url, echo=settings.sql_echo)


@lru_cache
def _factory() -> sessionmaker[Session]:
    return session_factory(_engine())


def init_database() -> None:
    create_schema(_engine())


def product_repository() -> SqlProductRepository:
    return SqlProductRepository(_factory())


def reservation_repository() -> SqlReservationRepository:
    return SqlReservationRepository(_factory())


def order_repository() -> SqlOrderRepository:
    return SqlOrderRepository(_factory())


def catalog_repository() -> SqlCatalogRepository:
    return SqlCatalogRepository(_factory())


def vendor_ledger() -> SqlVendorLedger:
    return SqlVendorLedger(_factory())


def notifier() -> LoggingNotifier:
    return LoggingNotifier()


def reservation_manager(settings: Settings | None = None) -> ReservationManager:
    settings = settings or get_settings()
    return ReservationManager(
        product_repo=product_repository(),
        reservation_repo=reservation_repository(),
        checkout_ttl=timedelta(minutes=settings.checkout_reservation_minutes),
        cart_ttl=timedelta(minutes=settings.cart_reservation_minutes),
        low_stock_threshold=settings.low_stock_threshold,
    )


def stock_adjuster() -> StockAdjuster:
    return StockAdjuster(order_repo=order_repository(), product_repo=product_repository())
