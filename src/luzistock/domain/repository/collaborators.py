"""Ports for the collaborators the payment flow calls but does not own.

Email delivery and the vendor payout ledger live outside this system;
the payment handlers only need these two narrow seams.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from luzistock.domain.model.order import Order
from luzistock.domain.model.product import Vendor
from luzistock.domain.model.value_objects import Money


class VendorLedger(ABC):

    @abstractmethod
    def credit_sale(self, vendor_id: str, amount: Money, order_id: int) -> None:
        """Add a sale's earnings to the vendor's available balance."""


class Notifier(ABC):

    @abstractmethod
    def order_confirmed(self, order: Order) -> None:
        """Tell the customer their payment went through."""

    @abstractmethod
    def payment_failed(self, order: Order) -> None:
        """Tell the customer their payment did not go through."""

    @abstractmethod
    def low_stock(self, vendor: Vendor, product_id: str, product_name: str, stock: int) -> None:
        """Warn a vendor that one of their products is running out."""
