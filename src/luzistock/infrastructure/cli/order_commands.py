"""CLI commands for payment outcomes and order cancellation."""

from __future__ import annotations

import click

from luzistock.application.cancel_order import CancelOrderHandler
from luzistock.application.low_stock_report import LowStockAlerter
from luzistock.application.process_payment import (
    PaymentFailedHandler,
    PaymentSucceededHandler,
)
from luzistock.infrastructure.bootstrap import (
    notifier,
    order_repository,
    product_repository,
    reservation_manager,
    stock_adjuster,
    vendor_ledger,
)
from luzistock.infrastructure.cli.errors import cli_errors
from luzistock.infrastructure.config import get_settings


@click.command("succeeded")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
@click.option("--intent", "payment_intent_id", required=True, help="Provider payment intent ID.")
@cli_errors
def payment_succeeded(order_id: int, payment_intent_id: str) -> None:
    """Record a successful payment (commits stock)."""
    handler = PaymentSucceededHandler(
        order_repo=order_repository(),
        adjuster=stock_adjuster(),
        reservations=reservation_manager(),
        vendor_ledger=vendor_ledger(),
        notifier=notifier(),
        alerter=LowStockAlerter(product_repository(), notifier(), get_settings().low_stock_threshold),
    )
    result = handler.handle(order_id, payment_intent_id)

    click.echo(f"Order #{result.order_id} paid (status={result.status}).")
    if not result.stock_adjusted:
        click.echo("Warning: stock was not fully reduced; order flagged for reconciliation.")


@click.command("failed")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
@cli_errors
def payment_failed(order_id: int) -> None:
    """Record a failed payment (gives stock back)."""
    handler = PaymentFailedHandler(
        order_repo=order_repository(),
        adjuster=stock_adjuster(),
        reservations=reservation_manager(),
        notifier=notifier(),
    )
    result = handler.handle(order_id)

    click.echo(f"Order #{result.order_id} payment failed (status={result.status}).")


@click.command("cancel")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to cancel.")
@cli_errors
def order_cancel(order_id: int) -> None:
    """Cancel an order (restores committed stock, releases holds)."""
    handler = CancelOrderHandler(
        order_repo=order_repository(),
        adjuster=stock_adjuster(),
        reservations=reservation_manager(),
    )
    result = handler.handle(order_id)

    click.echo(f"Order #{result.order_id} cancelled (payment={result.payment_status}).")
    if not result.stock_adjusted:
        click.echo("Warning: stock was not fully restored; order flagged for reconciliation.")
