"""SQL implementation of OrderRepository."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.orm import Session, selectinload, sessionmaker

from luzistock.domain.exceptions import EntityNotFoundError
from luzistock.domain.model.order import Order, OrderLineItem, OrderStatus, PaymentStatus
from luzistock.domain.model.value_objects import Money, Quantity
from luzistock.domain.repository.order_repository import OrderRepository
from luzistock.infrastructure.persistence.database import transaction
from luzistock.infrastructure.persistence.tables import OrderItemRow, OrderRow


class SqlOrderRepository(OrderRepository):

    def __init__(self, factory: sessionmaker[Session]) -> None:
        self._factory = factory

    # --- OrderRepository interface --------------------------------------------

    def get_by_id(self, order_id: int) -> Order | None:
        with transaction(self._factory) as session:
            row = session.scalars(
                select(OrderRow)
                .options(selectinload(OrderRow.items))
                .where(OrderRow.id == order_id)
            ).first()
            return self._to_domain(row) if row is not None else None

    def get_line_items(self, order_id: int) -> list[OrderLineItem]:
        with transaction(self._factory) as session:
            rows = session.scalars(
                select(OrderItemRow)
                .where(OrderItemRow.order_id == order_id)
                .order_by(OrderItemRow.id)
            )
            return [self._item_to_domain(row) for row in rows]

    def save(self, order: Order) -> None:
        with transaction(self._factory) as session:
            if order.id is None:
                row = OrderRow(
                    order_number=order.order_number,
                    customer_email=order.customer_email,
                    checkout_session_id=order.checkout_session_id,
                    holder_id=order.holder_id,
                    created_at=order.created_at,
                    items=[
                        OrderItemRow(
                            product_id=item.product_id,
                            product_name=item.product_name,
                            vendor_id=item.vendor_id,
                            quantity=item.quantity.value,
                            price=item.price.amount,
                            currency=item.price.currency,
                        )
                        for item in order.items
                    ],
                )
                session.add(row)
            else:
                # Line items are immutable once placed; only status fields change.
                row = session.get(OrderRow, order.id)
                if row is None:
                    raise EntityNotFoundError(f"Order #{order.id} not found")

            row.status = order.status.value
            row.payment_status = order.payment_status.value
            row.payment_intent_id = order.payment_intent_id
            row.stock_committed = order.stock_committed
            row.updated_at = datetime.now(timezone.utc)
            session.flush()
            if order.id is None:
                order.id = row.id
                order.items = [
                    replace(item, id=item_row.id, order_id=row.id)
                    for item, item_row in zip(order.items, row.items)
                ]

    def mark_line_committed(self, line_id: int, committed: bool) -> None:
        with transaction(self._factory) as session:
            result = session.execute(
                update(OrderItemRow)
                .where(OrderItemRow.id == line_id)
                .values(stock_committed=committed)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                raise EntityNotFoundError(f"Order line {line_id} not found")

    # --- Serialization --------------------------------------------------------

    @classmethod
    def _to_domain(cls, row: OrderRow) -> Order:
        return Order(
            id=row.id,
            order_number=row.order_number,
            customer_email=row.customer_email,
            items=[cls._item_to_domain(item) for item in row.items],
            checkout_session_id=row.checkout_session_id,
            holder_id=row.holder_id,
            status=OrderStatus(row.status),
            payment_status=PaymentStatus(row.payment_status),
            payment_intent_id=row.payment_intent_id,
            stock_committed=row.stock_committed,
            created_at=row.created_at,
        )

    @staticmethod
    def _item_to_domain(row: OrderItemRow) -> OrderLineItem:
        return OrderLineItem(
            id=row.id,
            order_id=row.order_id,
            product_id=row.product_id,
            product_name=row.product_name,
            vendor_id=row.vendor_id,
            quantity=Quantity(row.quantity),
            price=Money(row.price, row.currency),
            stock_committed=row.stock_committed,
        )
