"""CLI error handling helpers."""

import click

from smartspend.app import App
from smartspend.domain.errors import DomainError


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    ctx.exit(1)


def require_user(ctx: click.Context) -> str:
    """Return the signed-in user ID or exit with an error."""
    app: App = ctx.obj["app"]
    user_id = app.session.get_current_user_id()
    if user_id is None:
        click.echo("Error: Not signed in. Run 'smartspend login USER_ID' or pass --user.", err=True)
        ctx.exit(1)
    return user_id
