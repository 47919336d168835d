"""CLI commands for checkout and the order lifecycle.

Every command acts as an identity: ``--as`` names the caller and
``--admin`` gives it the admin role.  Results come back through the
OrderService envelope.
"""

from __future__ import annotations

from datetime import datetime, time, timedelta, timezone
from decimal import Decimal

import click

from storefront.application.dto import CartItemSpec, OrderDTO
from storefront.application.order_service import Result
from storefront.domain.model.order import OrderStatus, ShippingMode
from storefront.infrastructure.cli.app_context import current_app, identity_from


def _identity_options(command):
    command = click.option(
        "--admin", is_flag=True, default=False, help="Act with the admin role."
    )(command)
    return click.option("--as", "actor", required=True, help="ID of the acting user.")(command)


def _parse_items(raw: str) -> list[CartItemSpec]:
    """Parse 'p-1:2,p-2:1' into a CartItemSpec list."""
    specs: list[CartItemSpec] = []
    for pair in raw.split(","):
        pair = pair.strip()
        if ":" not in pair:
            raise click.BadParameter(
                f"Invalid item format '{pair}'. Expected 'ProductID:Quantity'."
            )
        product_id, qty_str = pair.rsplit(":", 1)
        try:
            qty = int(qty_str)
        except ValueError:
            raise click.BadParameter(
                f"Invalid quantity '{qty_str}' for product '{product_id}'."
            )
        specs.append(CartItemSpec(product_id=product_id.strip(), quantity=qty))
    return specs


def _unwrap(result: Result):
    if not result.ok:
        raise click.ClickException(f"[{result.error_kind}] {result.message}")
    return result.value


def _money(amount: Decimal) -> str:
    return f"${amount:,.2f}"


@click.command("checkout")
@_identity_options
@click.option("--items", required=True, help="Items as 'ProductID:Qty,ProductID:Qty'.")
@click.option(
    "--shipping",
    type=click.Choice([m.value for m in ShippingMode]),
    default=ShippingMode.STANDARD.value,
    show_default=True,
    help="Shipping mode.",
)
@click.option("--address", required=True, help="Shipping address.")
def order_checkout(actor: str, admin: bool, items: str, shipping: str, address: str) -> None:
    """Turn a cart into an order."""
    specs = _parse_items(items)
    app = current_app()
    dto = _unwrap(
        app.service.checkout(identity_from(actor, admin), specs, shipping, address)
    )

    click.echo(f"Order {dto.order_id} placed  (status={dto.status})")
    click.echo(f"  {'Subtotal':<32} {_money(dto.subtotal):>16}")
    for discount in dto.discounts:
        click.echo(f"  {discount.name:<32} {'-' + _money(discount.amount):>16}")
    click.echo(f"  {'Shipping (' + dto.shipping_mode + ')':<32} {_money(dto.shipping_cost):>16}")
    click.echo(f"  {'-'*49}")
    click.echo(f"  {'Total':<32} {_money(dto.total):>16}")


def _display_order(dto: OrderDTO) -> None:
    """Shared formatting for displaying an order."""
    click.echo(f"Order {dto.id}  (status={dto.status})")
    click.echo(f"Customer: {dto.customer_id}")
    click.echo(f"Created:  {dto.created_at}")
    click.echo(f"Ship to:  {dto.shipping_address} ({dto.shipping_mode})")
    click.echo()
    click.echo(f"  {'Product':<20} {'Qty':>5} {'Price':>14} {'Total':>14}")
    click.echo(f"  {'-'*56}")
    for item in dto.items:
        click.echo(
            f"  {item.product_name:<20} {item.quantity:>5} "
            f"{_money(item.unit_price):>14} {_money(item.line_total):>14}"
        )
    click.echo(f"  {'-'*56}")
    click.echo(f"  {'Subtotal':<27} {_money(dto.subtotal):>28}")
    click.echo(f"  {'Discounts':<27} {'-' + _money(dto.discount_total):>28}")
    click.echo(f"  {'Shipping':<27} {_money(dto.shipping_cost):>28}")
    click.echo(f"  {'Order Total':<27} {_money(dto.total):>28}")


@click.command("show")
@_identity_options
@click.option("--id", "order_id", required=True, help="Order ID to display.")
def order_show(actor: str, admin: bool, order_id: str) -> None:
    """Show details of an existing order."""
    app = current_app()
    _display_order(_unwrap(app.service.get_order(order_id, identity_from(actor, admin))))


@click.command("list")
@_identity_options
@click.option("--customer", "customer_id", default=None, help="Customer ID (defaults to --as).")
def order_list(actor: str, admin: bool, customer_id: str | None) -> None:
    """List a customer's orders, newest first."""
    app = current_app()
    summaries = _unwrap(
        app.service.list_orders_for_customer(customer_id or actor, identity_from(actor, admin))
    )

    if not summaries:
        click.echo("No orders found.")
        return

    click.echo(f"{'ID':<34} {'Status':<11} {'Items':>5} {'Total':>16}  Created")
    click.echo("-" * 100)
    for s in summaries:
        click.echo(f"{s.id:<34} {s.status:<11} {s.total_items:>5} {_money(s.total):>16}  {s.created_at}")


@click.command("status")
@_identity_options
@click.option("--id", "order_id", required=True, help="Order ID.")
@click.option(
    "--to",
    "new_status",
    required=True,
    type=click.Choice([s.value for s in OrderStatus]),
    help="Target status.",
)
def order_status(actor: str, admin: bool, order_id: str, new_status: str) -> None:
    """Move an order to a new status (admins only)."""
    app = current_app()
    dto = _unwrap(app.service.update_status(order_id, new_status, identity_from(actor, admin)))
    click.echo(f"Order {dto.id} is now {dto.status}.")


@click.command("history")
@_identity_options
@click.option("--id", "order_id", required=True, help="Order ID.")
def order_history(actor: str, admin: bool, order_id: str) -> None:
    """Show an order's status history, oldest first."""
    app = current_app()
    history = _unwrap(app.service.get_status_history(order_id, identity_from(actor, admin)))
    for change in history:
        click.echo(f"{change.changed_at}  {change.status:<11} {change.actor or 'system'}")


_DATE_FORMATS = ["%Y-%m-%d", "%Y-%m-%dT%H:%M:%S", "%Y-%m-%d %H:%M:%S"]


def _as_utc(value: datetime | None, end_of_day: bool = False) -> datetime | None:
    """Naive CLI input is UTC; a bare date used as an upper bound covers the day."""
    if value is None:
        return None
    if end_of_day and value.time() == time.min:
        value = value + timedelta(days=1) - timedelta(microseconds=1)
    return value.replace(tzinfo=timezone.utc)


@click.command("all")
@_identity_options
@click.option(
    "--status",
    default=None,
    type=click.Choice([s.value for s in OrderStatus]),
    help="Only orders in this status.",
)
@click.option(
    "--shipping",
    default=None,
    type=click.Choice([m.value for m in ShippingMode]),
    help="Only orders with this shipping mode.",
)
@click.option(
    "--from",
    "created_from",
    type=click.DateTime(_DATE_FORMATS),
    default=None,
    help="Placed on or after (UTC).",
)
@click.option(
    "--to",
    "created_to",
    type=click.DateTime(_DATE_FORMATS),
    default=None,
    help="Placed on or before (UTC); a bare date includes the whole day.",
)
def order_all(
    actor: str,
    admin: bool,
    status: str | None,
    shipping: str | None,
    created_from: datetime | None,
    created_to: datetime | None,
) -> None:
    """List every order, newest first (admins only)."""
    app = current_app()
    summaries = _unwrap(
        app.service.list_all_orders(
            identity_from(actor, admin),
            status=status,
            shipping_mode=shipping,
            created_from=_as_utc(created_from),
            created_to=_as_utc(created_to, end_of_day=True),
        )
    )

    if not summaries:
        click.echo("No orders found.")
        return

    click.echo(f"{'ID':<34} {'Customer':<12} {'Status':<11} {'Shipping':<9} {'Total':>16}  Created")
    click.echo("-" * 120)
    for s in summaries:
        click.echo(
            f"{s.id:<34} {s.customer_id:<12} {s.status:<11} {s.shipping_mode:<9} "
            f"{_money(s.total):>16}  {s.created_at}"
        )


@click.command("stats")
@_identity_options
def order_stats(actor: str, admin: bool) -> None:
    """Show store-wide order totals (admins only)."""
    app = current_app()
    stats = _unwrap(app.service.get_stats(identity_from(actor, admin)))

    click.echo(f"Orders:       {stats.total_orders}")
    click.echo(f"Sales:        {_money(stats.total_sales)}  (cancelled orders excluded)")
    for status, count in stats.by_status.items():
        click.echo(f"  {status:<11} {count:>6}")
    if stats.top_product is None:
        click.echo("Top product:  none")
    else:
        top = stats.top_product
        click.echo(f"Top product:  {top.product_name} ({top.product_id}), {top.units} units")
