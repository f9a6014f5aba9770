"""Notifier that records outgoing messages in the application log.

Email rendering and delivery belong to the marketplace's mail service;
this adapter stands at the same seam for the CLI and local runs.
"""

from __future__ import annotations

import logging

from luzistock.domain.model.order import Order
from luzistock.domain.model.product import Vendor
from luzistock.domain.repository.collaborators import Notifier

logger = logging.getLogger(__name__)


class LoggingNotifier(Notifier):

    def order_confirmed(self, order: Order) -> None:
        logger.info(
            f"[mail] to={order.customer_email} order={order.order_number} "
            f"confirmed total={order.total}"
        )

    def payment_failed(self, order: Order) -> None:
        logger.info(
            f"[mail] to={order.customer_email} order={order.order_number} payment failed"
        )

    def low_stock(self, vendor: Vendor, product_id: str, product_name: str, stock: int) -> None:
        logger.info(
            f"[mail] to={vendor.email} low stock: {product_name} ({product_id}) "
            f"has {stock} unit(s) left"
        )
