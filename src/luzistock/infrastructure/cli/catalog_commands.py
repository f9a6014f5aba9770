"""CLI commands for vendors, categories and products."""

from __future__ import annotations

import click

from luzistock.application.add_product import AddProductHandler
from luzistock.domain.model.product import Category, Vendor
from luzistock.domain.exceptions import EntityNotFoundError
from luzistock.infrastructure.bootstrap import (
    catalog_repository,
    product_repository,
    vendor_ledger,
)
from luzistock.infrastructure.cli.errors import cli_errors


@click.command("vendor-add")
@click.option("--id", "vendor_id", required=True, help="Vendor ID.")
@click.option("--name", required=True, help="Business name.")
@click.option("--email", required=True, help="Contact email for alerts.")
@cli_errors
def vendor_add(vendor_id: str, name: str, email: str) -> None:
    """Register a vendor (with an empty balance)."""
    catalog_repository().add_vendor(Vendor(id=vendor_id, business_name=name, email=email))
    click.echo(f"Vendor '{vendor_id}' added")


@click.command("vendor-balance")
@click.option("--id", "vendor_id", required=True, help="Vendor ID.")
@cli_errors
def vendor_balance(vendor_id: str) -> None:
    """Show what a vendor has earned from paid orders."""
    balance = vendor_ledger().balance(vendor_id)
    if balance is None:
        raise EntityNotFoundError(f"No balance for vendor '{vendor_id}'")
    click.echo(f"Vendor '{vendor_id}' balance: {balance}")


@click.command("category-add")
@click.option("--id", "category_id", required=True, help="Category ID.")
@click.option("--name", required=True, help="Category name.")
@cli_errors
def category_add(category_id: str, name: str) -> None:
    """Register a product category."""
    catalog_repository().add_category(Category(id=category_id, name=name))
    click.echo(f"Category '{category_id}' added")


@click.command("add")
@click.option("--name", required=True, help="Product name.")
@click.option("--price", required=True, help="Price (e.g. 15.00).")
@click.option("--stock", default=0, show_default=True, type=int, help="Opening stock.")
@click.option("--vendor", "vendor_id", default=None, help="Owning vendor ID.")
@click.option("--category", "category_id", default=None, help="Category ID.")
@click.option("--id", "product_id", default=None, help="Explicit product ID (default: random UUID).")
@cli_errors
def product_add(
    name: str,
    price: str,
    stock: int,
    vendor_id: str | None,
    category_id: str | None,
    product_id: str | None,
) -> None:
    """Add a new product to the catalog."""
    handler = AddProductHandler(product_repo=product_repository())
    product = handler.handle(
        name=name,
        price=price,
        stock=stock,
        vendor_id=vendor_id,
        category_id=category_id,
        product_id=product_id,
    )
    click.echo(f"Product {product.id} '{product.name}' added at {product.price} ({product.stock} in stock)")


@click.command("list")
@cli_errors
def product_list() -> None:
    """List all products in the catalog."""
    products = product_repository().list_all()

    if not products:
        click.echo("No products found.")
        return

    click.echo(f"{'ID':<38} {'Name':<20} {'Price':>14} {'Stock':>6} {'Active':>7}")
    click.echo("-" * 89)
    for p in products:
        click.echo(
            f"{p.id:<38} {p.name:<20} {str(p.price):>14} {p.stock:>6} {'yes' if p.is_active else 'no':>7}"
        )
