"""CLI commands for the checkout flow."""

from __future__ import annotations

import click

from luzistock.application.begin_checkout import BeginCheckoutHandler
from luzistock.application.dto import CartLineSpec
from luzistock.infrastructure.bootstrap import (
    order_repository,
    product_repository,
    reservation_manager,
)
from luzistock.infrastructure.cli.errors import cli_errors


def parse_items(raw: str) -> list[CartLineSpec]:
    """Parse 'prod-1:3,prod-2:5' into CartLineSpec list."""
    specs: list[CartLineSpec] = []
    for pair in raw.split(","):
        pair = pair.strip()
        if ":" not in pair:
            raise click.BadParameter(
                f"Invalid item format '{pair}'. Expected 'ProductId:Quantity'."
            )
        product_id, qty_str = pair.rsplit(":", 1)
        try:
            qty = int(qty_str)
        except ValueError:
            raise click.BadParameter(
                f"Invalid quantity '{qty_str}' for product '{product_id}'."
            )
        specs.append(CartLineSpec(product_id=product_id.strip(), quantity=qty))
    return specs


@click.command("start")
@click.option("--email", required=True, help="Customer email.")
@click.option("--session", "session_id", required=True, help="Checkout session ID.")
@click.option("--user", "holder_id", default=None, help="Signed-in user ID, if any.")
@click.option("--items", required=True, help="Items as 'ProductId:Qty,ProductId:Qty'.")
@cli_errors
def checkout_start(email: str, session_id: str, holder_id: str | None, items: str) -> None:
    """Validate the cart, hold its stock and open a pending order."""
    specs = parse_items(items)

    handler = BeginCheckoutHandler(
        product_repo=product_repository(),
        order_repo=order_repository(),
        reservations=reservation_manager(),
    )
    result = handler.handle(email, specs, session_id, holder_id)

    if result.shortfalls:
        click.echo("Not enough stock for:")
        click.echo(f"  {'Product':<20} {'Requested':>10} {'Available':>10}")
        for s in result.shortfalls:
            click.echo(f"  {s.product_name:<20} {s.requested_quantity:>10} {s.available_stock:>10}")
        raise SystemExit(1)
    if not result.success:
        raise click.ClickException(result.message or "Checkout failed")

    click.echo(f"Order #{result.order_id} ({result.order_number}) pending payment")
    click.echo(f"Total: {result.total}")
    click.echo(f"Stock held until {result.reserved_until}")
