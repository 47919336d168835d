"""CLI commands for database setup and customer records."""

from __future__ import annotations

import click

from storefront.domain.exceptions import DomainException
from storefront.domain.model.customer import Customer, Role
from storefront.infrastructure.cli.app_context import current_app


@click.command("init")
def db_init() -> None:
    """Create the database schema (safe to run twice)."""
    app = current_app()
    click.echo(f"Database ready at {app.store.path}")


@click.command("add")
@click.option("--id", "customer_id", required=True, help="Customer ID.")
@click.option("--name", required=True, help="Customer name.")
@click.option("--email", required=True, help="Contact e-mail for notifications.")
@click.option("--admin", is_flag=True, default=False, help="Grant the admin role.")
def customer_add(customer_id: str, name: str, email: str, admin: bool) -> None:
    """Add or update a customer."""
    app = current_app()
    record = Customer(
        id=customer_id,
        name=name,
        email=email,
        role=Role.ADMIN if admin else Role.CUSTOMER,
    )
    try:
        app.customer_repo.save(record)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Customer '{record.id}' saved ({record.role.value})")
