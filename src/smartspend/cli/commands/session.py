"""Sign-in, sign-out and sync commands."""

import asyncio

import click

from smartspend.cli.error_handling import require_user


@click.command("login")
@click.argument("user_id")
@click.pass_context
def login(ctx, user_id: str):
    """Sign in as USER_ID and reload all data from the backend."""
    app = ctx.obj["app"]
    asyncio.run(app.session.sign_in(user_id))
    app.remember_user(user_id)

    store = app.store
    click.echo(f"Signed in as {user_id}")
    click.echo(
        f"  Loaded {len(store.transactions)} transactions, "
        f"{len(store.budgets)} budget items, {len(store.goals)} savings goals"
    )


@click.command("logout")
@click.pass_context
def logout(ctx):
    """Sign out and clear all local data."""
    app = ctx.obj["app"]
    asyncio.run(app.session.sign_out())
    app.remember_user(None)
    click.echo("Signed out. Local data cleared.")


@click.command("sync")
@click.pass_context
def sync(ctx):
    """Reload the signed-in user's data from the backend."""
    require_user(ctx)
    store = ctx.obj["app"].store
    asyncio.run(store.sync_data())
    click.echo(
        f"Synced {len(store.transactions)} transactions, "
        f"{len(store.budgets)} budget items, {len(store.goals)} savings goals"
    )


def register_commands(cli):
    """Register session commands with main CLI."""
    cli.add_command(login)
    cli.add_command(logout)
    cli.add_command(sync)
