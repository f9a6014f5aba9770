"""CLI commands for stock reservations."""

from __future__ import annotations

import click

from luzistock.application.manage_reservations import (
    CleanupReservationsHandler,
    HoldStockHandler,
    ListReservationsHandler,
    ReleaseReservationsHandler,
)
from luzistock.infrastructure.bootstrap import reservation_manager
from luzistock.infrastructure.cli.checkout_commands import parse_items
from luzistock.infrastructure.cli.errors import cli_errors


@click.command("hold")
@click.option("--session", "session_id", required=True, help="Cart or checkout session ID.")
@click.option("--user", "holder_id", default=None, help="Signed-in user ID, if any.")
@click.option("--type", "reservation_type", type=click.Choice(["cart", "checkout"]), default="cart",
              show_default=True)
@click.option("--items", required=True, help="Items as 'ProductId:Qty,ProductId:Qty'.")
@cli_errors
def reservation_hold(
    session_id: str, holder_id: str | None, reservation_type: str, items: str
) -> None:
    """Hold stock for a session, replacing its earlier holds."""
    result = HoldStockHandler(reservation_manager()).handle(
        parse_items(items), session_id, holder_id, reservation_type
    )
    if result.shortfalls:
        click.echo("Not enough stock for:")
        for s in result.shortfalls:
            click.echo(f"  {s.product_name}: requested {s.requested_quantity}, available {s.available_stock}")
        raise SystemExit(1)
    if not result.success:
        raise click.ClickException(result.message or "Hold failed")
    click.echo(f"Stock held for session {session_id} until {result.held_until}")


@click.command("list")
@click.option("--session", "session_id", required=True, help="Cart or checkout session ID.")
@cli_errors
def reservation_list(session_id: str) -> None:
    """Show every hold recorded for a session."""
    holds = ListReservationsHandler(reservation_manager()).handle(session_id)
    if not holds:
        click.echo(f"No reservations for session {session_id}.")
        return

    click.echo(f"{'Product':<38} {'Qty':>5} {'Type':<9} {'State':<9} Expires")
    for h in holds:
        click.echo(
            f"{h.product_id:<38} {h.quantity:>5} {h.reservation_type:<9} {h.state:<9} {h.expires_at}"
        )


@click.command("cleanup")
@cli_errors
def reservation_cleanup() -> None:
    """Mark expired reservations released."""
    count = CleanupReservationsHandler(reservation_manager()).handle()
    click.echo(f"{count} expired reservation(s) released.")


@click.command("release")
@click.option("--session", "session_id", required=True, help="Checkout/cart session ID.")
@click.option("--holder", "holder_id", default=None, help="Only holds of this user.")
@click.option("--type", "reservation_type", type=click.Choice(["cart", "checkout"]), default=None)
@cli_errors
def reservation_release(session_id: str, holder_id: str | None, reservation_type: str | None) -> None:
    """Release a session's active reservations."""
    count = ReleaseReservationsHandler(reservation_manager()).handle(
        session_id, holder_id, reservation_type
    )
    click.echo(f"{count} reservation(s) released for session {session_id}.")
