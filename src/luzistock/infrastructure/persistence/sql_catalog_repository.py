"""SQL-backed vendor ledger and catalog reference data.

The vendor balance is credited with a single additive UPDATE; the full
payout/transaction history is owned by another system.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import update
from sqlalchemy.orm import Session, sessionmaker

from luzistock.domain.exceptions import ValidationError
from luzistock.domain.model.product import Category, Vendor
from luzistock.domain.model.value_objects import Money
from luzistock.domain.repository.collaborators import VendorLedger
from luzistock.infrastructure.persistence.database import transaction
from luzistock.infrastructure.persistence.tables import (
    CategoryRow,
    VendorBalanceRow,
    VendorRow,
)

logger = logging.getLogger(__name__)


class SqlVendorLedger(VendorLedger):

    def __init__(self, factory: sessionmaker[Session]) -> None:
        self._factory = factory

    def credit_sale(self, vendor_id: str, amount: Money, order_id: int) -> None:
        with transaction(self._factory) as session:
            result = session.execute(
                update(VendorBalanceRow)
                .where(VendorBalanceRow.vendor_id == vendor_id)
                .values(
                    available_balance=VendorBalanceRow.available_balance + amount.amount,
                    last_updated=datetime.now(timezone.utc),
                )
                .execution_options(synchronize_session=False)
            )
        if result.rowcount == 0:
            logger.error(f"Vendor balance not found for vendor {vendor_id} (order {order_id})")
            return
        logger.info(f"Credited {amount} to vendor {vendor_id} for order {order_id}")

    def balance(self, vendor_id: str) -> Money | None:
        with transaction(self._factory) as session:
            row = session.get(VendorBalanceRow, vendor_id)
            return Money(row.available_balance, row.currency) if row is not None else None


class SqlCatalogRepository:
    """Vendors and categories, written by onboarding and admin tools."""

    def __init__(self, factory: sessionmaker[Session]) -> None:
        self._factory = factory

    def add_vendor(self, vendor: Vendor, currency: str = "MXN") -> None:
        with transaction(self._factory) as session:
            if session.get(VendorRow, vendor.id) is not None:
                raise ValidationError(f"Vendor '{vendor.id}' already exists")
            session.add(
                VendorRow(id=vendor.id, business_name=vendor.business_name, email=vendor.email)
            )
            session.add(
                VendorBalanceRow(
                    vendor_id=vendor.id,
                    available_balance=Decimal("0.00"),
                    currency=currency,
                )
            )

    def add_category(self, category: Category) -> None:
        with transaction(self._factory) as session:
            if session.get(CategoryRow, category.id) is not None:
                raise ValidationError(f"Category '{category.id}' already exists")
            session.add(CategoryRow(id=category.id, name=category.name))
