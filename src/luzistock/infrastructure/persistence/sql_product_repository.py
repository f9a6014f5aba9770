"""SQL implementation of ProductRepository (the stock ledger).

Decrement and restore are single UPDATE statements evaluated by the
database, so concurrent adjustments of one product never lose an update.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import case, select, update
from sqlalchemy.orm import Session, joinedload, sessionmaker

from luzistock.domain.exceptions import EntityNotFoundError, ValidationError
from luzistock.domain.model.product import Category, LowStockProduct, Product, Vendor
from luzistock.domain.model.stock import StockChange
from luzistock.domain.model.value_objects import Money
from luzistock.domain.repository.product_repository import ProductRepository
from luzistock.infrastructure.persistence.database import transaction
from luzistock.infrastructure.persistence.tables import ProductRow, VendorRow


class SqlProductRepository(ProductRepository):

    def __init__(self, factory: sessionmaker[Session]) -> None:
        self._factory = factory

    # --- ProductRepository interface ------------------------------------------

    def get_by_id(self, product_id: str) -> Product | None:
        with transaction(self._factory) as session:
            row = session.get(ProductRow, product_id)
            return self._to_domain(row) if row is not None else None

    def get_active(self, product_id: str) -> Product | None:
        with transaction(self._factory) as session:
            row = session.scalars(
                select(ProductRow).where(
                    ProductRow.id == product_id,
                    ProductRow.is_active.is_(True),
                )
            ).first()
            return self._to_domain(row) if row is not None else None

    def list_all(self) -> list[Product]:
        with transaction(self._factory) as session:
            rows = session.scalars(select(ProductRow).order_by(ProductRow.name))
            return [self._to_domain(row) for row in rows]

    def save(self, product: Product) -> None:
        with transaction(self._factory) as session:
            row = session.get(ProductRow, product.id)
            if row is None:
                row = ProductRow(id=product.id)
                session.add(row)
            row.name = product.name
            row.price = product.price.amount
            row.currency = product.price.currency
            row.stock = product.stock
            row.is_active = product.is_active
            row.vendor_id = product.vendor_id
            row.category_id = product.category_id
            row.updated_at = _now()

    def decrement_clamped(self, product_id: str, quantity: int) -> StockChange:
        return self._adjust(
            product_id,
            case((ProductRow.stock < quantity, 0), else_=ProductRow.stock - quantity),
        )

    def increment(self, product_id: str, quantity: int) -> StockChange:
        return self._adjust(product_id, ProductRow.stock + quantity)

    def set_stock(self, product_id: str, stock: int) -> None:
        if stock < 0:
            raise ValidationError("Stock cannot be negative")
        with transaction(self._factory) as session:
            result = session.execute(
                update(ProductRow)
                .where(ProductRow.id == product_id)
                .values(stock=stock, updated_at=_now())
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                raise EntityNotFoundError(f"Product '{product_id}' not found")

    def list_low_stock(self, threshold: int) -> list[LowStockProduct]:
        with transaction(self._factory) as session:
            rows = session.scalars(
                select(ProductRow)
                .options(joinedload(ProductRow.vendor), joinedload(ProductRow.category))
                .where(
                    ProductRow.is_active.is_(True),
                    ProductRow.stock >= 0,
                    ProductRow.stock <= threshold,
                )
                .order_by(ProductRow.stock, ProductRow.name)
            )
            return [
                LowStockProduct(
                    product_id=row.id,
                    product_name=row.name,
                    stock=row.stock,
                    vendor=self._vendor_to_domain(row.vendor) if row.vendor else None,
                    category=(
                        Category(id=row.category.id, name=row.category.name)
                        if row.category
                        else None
                    ),
                )
                for row in rows
            ]

    def get_vendor(self, vendor_id: str) -> Vendor | None:
        with transaction(self._factory) as session:
            row = session.get(VendorRow, vendor_id)
            return self._vendor_to_domain(row) if row is not None else None

    # --- Internal helpers -----------------------------------------------------

    def _adjust(self, product_id: str, new_value) -> StockChange:
        """Lock the row, then let the database compute and write the new stock."""
        with transaction(self._factory) as session:
            previous = session.scalars(
                select(ProductRow.stock)
                .where(ProductRow.id == product_id)
                .with_for_update()
            ).first()
            if previous is None:
                raise EntityNotFoundError(f"Product '{product_id}' not found")

            current = session.scalars(
                update(ProductRow)
                .where(ProductRow.id == product_id)
                .values(stock=new_value, updated_at=_now())
                .returning(ProductRow.stock)
                .execution_options(synchronize_session=False)
            ).one()
            return StockChange(product_id=product_id, previous=previous, current=current)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_domain(row: ProductRow) -> Product:
        return Product(
            id=row.id,
            name=row.name,
            price=Money(row.price, row.currency),
            stock=row.stock,
            is_active=row.is_active,
            vendor_id=row.vendor_id,
            category_id=row.category_id,
        )

    @staticmethod
    def _vendor_to_domain(row: VendorRow) -> Vendor:
        return Vendor(id=row.id, business_name=row.business_name, email=row.email)


def _now() -> datetime:
    return datetime.now(timezone.utc)
