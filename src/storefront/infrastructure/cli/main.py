import click

from storefront.domain.exceptions import ConfigurationError
from storefront.infrastructure.cli.admin_commands import customer_add, db_init
from storefront.infrastructure.cli.inventory_commands import inventory_rebuild, inventory_show
from storefront.infrastructure.cli.notification_commands import notifications_drain
from storefront.infrastructure.cli.order_commands import (
    order_all,
    order_checkout,
    order_history,
    order_list,
    order_show,
    order_status,
    order_stats,
)
from storefront.infrastructure.cli.product_commands import (
    product_add,
    product_delete,
    product_list,
    product_update,
)
from storefront.infrastructure.config import Settings
from storefront.infrastructure.log_config import configure_logging


@click.group()
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Storefront checkout and order lifecycle."""
    if ctx.obj is None:
        try:
            ctx.obj = Settings.from_env()
        except ConfigurationError as exc:
            raise click.ClickException(str(exc))
    configure_logging(ctx.obj.log_level, ctx.obj.log_json)


@cli.group()
def db() -> None:
    """Manage the database."""


@cli.group()
def customer() -> None:
    """Manage customers."""


@cli.group()
def product() -> None:
    """Manage products."""


@cli.group()
def inventory() -> None:
    """Inspect the availability index."""


@cli.group()
def order() -> None:
    """Check out and manage orders."""


@cli.group()
def notifications() -> None:
    """Deliver queued notifications."""


# Register subcommands
db.add_command(db_init)
customer.add_command(customer_add)
product.add_command(product_add)
product.add_command(product_delete)
product.add_command(product_list)
product.add_command(product_update)
inventory.add_command(inventory_rebuild)
inventory.add_command(inventory_show)
order.add_command(order_all)
order.add_command(order_checkout)
order.add_command(order_history)
order.add_command(order_list)
order.add_command(order_show)
order.add_command(order_stats)
order.add_command(order_status)
notifications.add_command(notifications_drain)
