"""Per-invocation application container for the CLI.

The root group stores the Settings on ``ctx.obj``; the first command that
needs the app builds it once and closes it when the invocation ends.
"""

from __future__ import annotations

import click

from storefront.domain.exceptions import DomainException
from storefront.domain.model.customer import Identity
from storefront.infrastructure.bootstrap import App, build_app

_APP_KEY = "storefront.app"


def current_app() -> App:
    root = click.get_current_context().find_root()
    app = root.meta.get(_APP_KEY)
    if app is None:
        try:
            app = build_app(root.obj)
        except DomainException as exc:
            raise click.ClickException(str(exc))
        root.meta[_APP_KEY] = app
        root.call_on_close(app.close)
    return app


def identity_from(actor: str, admin: bool) -> Identity:
    return Identity.admin(actor) if admin else Identity.customer(actor)
