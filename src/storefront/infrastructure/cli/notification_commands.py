"""CLI command for the notification queue."""

from __future__ import annotations

import click

from storefront.infrastructure.cli.app_context import current_app


@click.command("drain")
def notifications_drain() -> None:
    """Deliver every queued notification now."""
    app = current_app()
    delivered = app.dispatcher.tick()
    click.echo(f"Delivered {delivered} notification(s), {app.dispatcher.failed} failed")
