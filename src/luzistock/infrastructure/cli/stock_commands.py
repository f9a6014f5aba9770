"""CLI commands for ledger stock."""

from __future__ import annotations

import click

from luzistock.application.low_stock_report import LowStockAlerter, LowStockReportHandler
from luzistock.application.set_stock import SetStockHandler
from luzistock.application.show_stock import ShowStockHandler
from luzistock.infrastructure.bootstrap import notifier, product_repository, reservation_manager
from luzistock.infrastructure.cli.errors import cli_errors
from luzistock.infrastructure.config import get_settings


@click.command("show")
@click.option("--product", "product_id", required=True, help="Product ID.")
@cli_errors
def stock_show(product_id: str) -> None:
    """Show ledger, reserved and available stock for a product."""
    info = ShowStockHandler(reservation_manager()).handle(product_id)

    click.echo(f"{'Product':<20} {'Total':>8} {'Reserved':>10} {'Available':>10}")
    click.echo("-" * 50)
    click.echo(f"{info.product_name:<20} {info.total:>8} {info.reserved:>10} {info.available:>10}")
    if info.is_low_stock:
        click.echo(f"Low stock (threshold {info.threshold})")


@click.command("set")
@click.option("--product", "product_id", required=True, help="Product ID.")
@click.option("--quantity", required=True, type=int, help="New ledger stock.")
@cli_errors
def stock_set(product_id: str, quantity: int) -> None:
    """Overwrite the stock level for a product (admin correction)."""
    repo = product_repository()
    alerter = LowStockAlerter(repo, notifier(), get_settings().low_stock_threshold)
    SetStockHandler(product_repo=repo, alerter=alerter).handle(product_id, quantity)

    click.echo(f"Stock for '{product_id}' set to {quantity}")


@click.command("low")
@click.option("--threshold", type=int, default=None, help="Report stock at or below this (default from settings).")
@click.option("--notify", is_flag=True, default=False, help="Also alert each vendor.")
@cli_errors
def stock_low(threshold: int | None, notify: bool) -> None:
    """List active products running low on stock."""
    if threshold is None:
        threshold = get_settings().low_stock_threshold
    repo = product_repository()
    lines = LowStockReportHandler(repo).handle(threshold)

    if not lines:
        click.echo(f"No active products at or below {threshold} units.")
        return

    click.echo(f"{'Product':<20} {'Stock':>6}  {'Vendor':<20} {'Category':<15}")
    click.echo("-" * 65)
    for line in lines:
        click.echo(
            f"{line.product_name:<20} {line.stock:>6}  {line.vendor_name:<20} {line.category_name:<15}"
        )

    if notify:
        sent = LowStockAlerter(repo, notifier(), threshold).notify_all()
        click.echo(f"{sent} vendor alert(s) sent.")
