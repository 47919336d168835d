"""CLI commands for the availability index."""

from __future__ import annotations

import click

from storefront.domain.exceptions import DomainException
from storefront.infrastructure.cli.app_context import current_app


@click.command("show")
def inventory_show() -> None:
    """Show the stock levels checkout currently sees."""
    records = sorted(current_app().index.snapshot(), key=lambda p: (p.name, p.id))

    if not records:
        click.echo("No products indexed.")
        return

    click.echo(f"{'Product':<20} {'ID':<34} {'Available':>10}")
    click.echo("-" * 66)
    for record in records:
        click.echo(f"{record.name:<20} {record.id:<34} {record.stock:>10}")


@click.command("rebuild")
def inventory_rebuild() -> None:
    """Reload the availability index from the database."""
    try:
        count = current_app().rebuild_index.handle()
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Availability index rebuilt ({count} products)")
