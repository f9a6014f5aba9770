"""Domain service: Stock Adjuster.

Commits an order's line items against the ledger (decrement on payment
success) or gives them back (increment on cancellation/refund).

Each line item is adjusted independently.  One bad line (a deleted
product, a locked row) must not block the rest of the order, so
failures are collected rather than raised and applied lines are never
rolled back.  Each applied line is marked on the order so a later
restore gives back exactly what was taken.  The caller gets an
AdjustmentReport and decides whether the order needs manual
reconciliation.
"""

from __future__ import annotations

import logging

from luzistock.domain.exceptions import EntityNotFoundError, PersistenceError
from luzistock.domain.model.order import OrderLineItem
from luzistock.domain.model.stock import (
    AdjustmentOutcome,
    AdjustmentReport,
    LineAdjustment,
    StockChange,
)
from luzistock.domain.repository.order_repository import OrderRepository
from luzistock.domain.repository.product_repository import ProductRepository

logger = logging.getLogger(__name__)


class StockAdjuster:

    def __init__(
        self,
        order_repo: OrderRepository,
        product_repo: ProductRepository,
    ) -> None:
        self._order_repo = order_repo
        self._product_repo = product_repo

    def reduce_stock(self, order_id: int) -> AdjustmentReport:
        """Decrement stock for every line item, clamping at zero.

        Requesting more than the ledger holds is an oversell: the row is
        clamped to zero and a warning is logged for reconciliation, but
        the line still counts as applied.
        """
        items = self._order_repo.get_line_items(order_id)
        if not items:
            logger.warning(f"No items found for order {order_id}")
            return AdjustmentReport(order_id=order_id, lines=[])

        lines = [
            self._apply(item, self._product_repo.decrement_clamped)
            for item in items
        ]
        self._record_commits(items, lines, committed=True)
        for line in lines:
            if line.oversold:
                logger.warning(
                    f"Insufficient stock for product {line.product_id} in order "
                    f"{order_id}. Requested: {line.quantity}, "
                    f"Available: {line.change.previous}; clamped to 0"
                )

        return self._summarize(order_id, lines, "reduce")

    def restore_stock(self, order_id: int, committed_only: bool = False) -> AdjustmentReport:
        """Add line item quantities back to the ledger.

        With ``committed_only`` only lines whose units were actually taken
        by ``reduce_stock`` are restored; lines that failed to decrement
        are left alone.
        """
        items = self._order_repo.get_line_items(order_id)
        if committed_only:
            items = [item for item in items if item.stock_committed]
        if not items:
            kind = "committed items" if committed_only else "items"
            logger.warning(f"No {kind} found for order {order_id}")
            return AdjustmentReport(order_id=order_id, lines=[])

        lines = [self._apply(item, self._product_repo.increment) for item in items]
        self._record_commits(items, lines, committed=False)
        return self._summarize(order_id, lines, "restore")

    # --- Internal helpers -----------------------------------------------------

    @staticmethod
    def _apply(item: OrderLineItem, operation) -> LineAdjustment:
        qty = item.quantity.value
        try:
            change: StockChange = operation(item.product_id, qty)
        except (EntityNotFoundError, PersistenceError) as exc:
            return LineAdjustment(
                product_id=item.product_id,
                quantity=qty,
                outcome=AdjustmentOutcome.FAILED,
                error=str(exc),
            )
        return LineAdjustment(
            product_id=item.product_id,
            quantity=qty,
            outcome=AdjustmentOutcome.APPLIED,
            change=change,
        )

    def _record_commits(
        self,
        items: list[OrderLineItem],
        lines: list[LineAdjustment],
        committed: bool,
    ) -> None:
        for item, line in zip(items, lines):
            if line.outcome is not AdjustmentOutcome.APPLIED or item.id is None:
                continue
            try:
                self._order_repo.mark_line_committed(item.id, committed)
            except (EntityNotFoundError, PersistenceError):
                logger.exception(
                    f"Stock for product {item.product_id} in order {item.order_id} "
                    f"was adjusted but the line could not be marked; reconcile manually"
                )

    @staticmethod
    def _summarize(order_id: int, lines: list[LineAdjustment], verb: str) -> AdjustmentReport:
        report = AdjustmentReport(order_id=order_id, lines=lines)
        if report.failures:
            logger.error(
                f"Failed to {verb} stock for {len(report.failures)} of "
                f"{len(lines)} items in order {order_id}"
            )
            for line in report.failures:
                logger.error(f"  product {line.product_id} x{line.quantity}: {line.error}")
        else:
            logger.info(f"Successfully {verb}d stock for {len(lines)} items in order {order_id}")
        return report
