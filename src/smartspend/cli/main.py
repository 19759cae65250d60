"""Main CLI entry point."""

import asyncio
from pathlib import Path

import click

from smartspend.app import create_app
from smartspend.gateway.factories import create_gateway, default_data_dir
from smartspend.logging_config import setup_logging

# Import and register all commands at module level
from smartspend.cli.commands import (
    session,
    add,
    transaction,
    budget,
    goal,
    import_cmd,
    export,
    summary,
)


@click.group()
@click.option(
    "--data-dir",
    type=click.Path(file_okay=False),
    help="Directory for the local snapshot (overrides SMARTSPEND_DATA_DIR)",
    envvar="SMARTSPEND_DATA_DIR",
)
@click.option(
    "--db-path",
    type=click.Path(dir_okay=False),
    help="SQLite gateway database (overrides SMARTSPEND_DB_PATH)",
    envvar="SMARTSPEND_DB_PATH",
)
@click.option(
    "--gateway-url",
    help="REST gateway base URL; when set, the REST gateway is used instead of SQLite",
    envvar="SMARTSPEND_GATEWAY_URL",
)
@click.option("--api-key", help="REST gateway API key", envvar="SMARTSPEND_API_KEY")
@click.option("--user", "user_id", help="Signed-in user ID", envvar="SMARTSPEND_USER_ID")
@click.option("--verbose", "-v", is_flag=True, help="Show informational log output")
@click.option("--log-file", type=click.Path(dir_okay=False), help="Write a rotating debug log to this file")
@click.pass_context
def cli(
    ctx,
    data_dir: str | None,
    db_path: str | None,
    gateway_url: str | None,
    api_key: str | None,
    user_id: str | None,
    verbose: bool,
    log_file: str | None,
):
    """SmartSpend - personal finance tracking.

    Keeps a local copy of your transactions, budgets and savings goals and
    writes every change through to the configured backend.
    """
    ctx.ensure_object(dict)

    # Build the application only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is None:
        return

    setup_logging(verbose=verbose, log_file=Path(log_file) if log_file else None)

    directory = default_data_dir(data_dir)
    gateway = create_gateway(gateway_url=gateway_url, api_key=api_key, database_path=db_path)
    app = create_app(gateway, directory, user_id=user_id)

    def report_failure(operation: str, error: Exception) -> None:
        click.echo(f"Warning: {operation} did not reach the server: {error}", err=True)

    app.store.add_error_listener(report_failure)
    ctx.obj["app"] = app
    ctx.call_on_close(lambda: asyncio.run(gateway.close()))


# Register all commands
session.register_commands(cli)
add.register_commands(cli)
transaction.register_commands(cli)
budget.register_commands(cli)
goal.register_commands(cli)
import_cmd.register_commands(cli)
export.register_commands(cli)
summary.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
