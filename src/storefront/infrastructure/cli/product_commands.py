"""CLI commands for the product catalog."""

from __future__ import annotations

import click

from storefront.domain.exceptions import DomainException
from storefront.infrastructure.cli.app_context import current_app


@click.command("add")
@click.option("--name", required=True, help="Product name.")
@click.option("--price", required=True, help="Unit price (e.g. 85000).")
@click.option("--stock", default=0, type=int, show_default=True, help="Units in stock.")
@click.option("--id", "product_id", default=None, help="Product ID (generated if omitted).")
def product_add(name: str, price: str, stock: int, product_id: str | None) -> None:
    """Add a new product to the catalog."""
    app = current_app()

    try:
        product = app.add_product.handle(
            name=name, price=price, stock=stock, product_id=product_id
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Product {product.id} '{product.name}' added at {product.price} ({product.stock} in stock)")


@click.command("list")
def product_list() -> None:
    """List all products in the catalog."""
    products = current_app().product_repo.list_all()

    if not products:
        click.echo("No products found.")
        return

    click.echo(f"{'ID':<34} {'Name':<20} {'Price':>14} {'Stock':>6}")
    click.echo("-" * 77)
    for p in products:
        click.echo(f"{p.id:<34} {p.name:<20} {str(p.price):>14} {p.stock:>6}")


@click.command("update")
@click.option("--id", "product_id", required=True, help="Product ID.")
@click.option("--price", default=None, help="New unit price.")
@click.option("--stock", default=None, type=int, help="New stock level.")
def product_update(product_id: str, price: str | None, stock: int | None) -> None:
    """Update a product's price and/or stock."""
    app = current_app()

    try:
        product = app.update_product.handle(
            product_id=product_id, new_price=price, new_stock=stock
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Product {product.id} now {product.price} with {product.stock} in stock")


@click.command("delete")
@click.option("--id", "product_id", required=True, help="Product ID.")
def product_delete(product_id: str) -> None:
    """Delete a product that no order refers to."""
    app = current_app()

    try:
        app.delete_product.handle(product_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Product {product_id} deleted")
