"""Abstract repository for Order aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from luzistock.domain.model.order import Order, OrderLineItem


class OrderRepository(ABC):

    @abstractmethod
    def get_by_id(self, order_id: int) -> Order | None:
        """Return an order by its ID, or None if not found."""

    @abstractmethod
    def get_line_items(self, order_id: int) -> list[OrderLineItem]:
        """Return the order's line items (empty if the order has none)."""

    @abstractmethod
    def save(self, order: Order) -> None:
        """Persist a new order with its items, or an updated order's status."""

    @abstractmethod
    def mark_line_committed(self, line_id: int, committed: bool) -> None:
        """Record whether a line item's units are currently taken from the ledger."""
