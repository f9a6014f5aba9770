import logging

import click

from luzistock.infrastructure.bootstrap import init_database
from luzistock.infrastructure.cli.catalog_commands import (
    category_add,
    product_add,
    product_list,
    vendor_add,
    vendor_balance,
)
from luzistock.infrastructure.cli.checkout_commands import checkout_start
from luzistock.infrastructure.cli.errors import cli_errors
from luzistock.infrastructure.cli.order_commands import (
    order_cancel,
    payment_failed,
    payment_succeeded,
)
from luzistock.infrastructure.cli.reservation_commands import (
    reservation_cleanup,
    reservation_hold,
    reservation_list,
    reservation_release,
)
from luzistock.infrastructure.cli.stock_commands import stock_low, stock_set, stock_show
from luzistock.infrastructure.config import get_settings


@click.group()
def cli() -> None:
    """LuziMarket stock: reservations and stock adjustments."""
    logging.basicConfig(
        level=get_settings().log_level.upper(),
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
    )


@cli.group()
def db() -> None:
    """Manage the database."""


@cli.group()
def catalog() -> None:
    """Manage vendors and categories."""


@cli.group()
def product() -> None:
    """Manage products."""


@cli.group()
def stock() -> None:
    """Inspect and correct stock."""


@cli.group()
def reservation() -> None:
    """Manage stock reservations."""


@cli.group()
def checkout() -> None:
    """Checkout flow."""


@cli.group()
def payment() -> None:
    """Payment provider outcomes."""


@cli.group()
def order() -> None:
    """Manage orders."""


@db.command("init")
@cli_errors
def db_init() -> None:
    """Create the tables."""
    init_database()
    click.echo("Database ready.")


# Register subcommands
catalog.add_command(vendor_add)
catalog.add_command(vendor_balance)
catalog.add_command(category_add)
product.add_command(product_add)
product.add_command(product_list)
stock.add_command(stock_show)
stock.add_command(stock_set)
stock.add_command(stock_low)
reservation.add_command(reservation_hold)
reservation.add_command(reservation_list)
reservation.add_command(reservation_cleanup)
reservation.add_command(reservation_release)
checkout.add_command(checkout_start)
payment.add_command(payment_succeeded)
payment.add_command(payment_failed)
order.add_command(order_cancel)
