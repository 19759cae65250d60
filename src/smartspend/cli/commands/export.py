"""CSV export command."""

from pathlib import Path

import click

from smartspend.domain.csv_export import EXPORT_KINDS, default_filename, export_kind


@click.command("export")
@click.argument("kind", type=click.Choice(EXPORT_KINDS, case_sensitive=False))
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False),
    help="Output file (default: <kind>.csv in the current directory; '-' for stdout)",
)
@click.pass_context
def export_csv(ctx, kind: str, output: str | None):
    """Export local data as CSV.

    KIND is one of transactions, budget, goals or all.

    Examples:
        smartspend export transactions
        smartspend export all -o backup.csv
        smartspend export budget -o -
    """
    store = ctx.obj["app"].store
    kind = kind.lower()
    content = export_kind(kind, store.transactions, store.budgets, store.goals)

    if output == "-":
        click.echo(content, nl=False)
        return

    path = Path(output or default_filename(kind))
    try:
        path.write_text(content, encoding="utf-8")
    except OSError as e:
        click.echo(f"Error: Could not write {path}: {e}", err=True)
        ctx.exit(1)
    click.echo(f"Exported {kind} to {path}")


def register_commands(cli):
    """Register export command with main CLI."""
    cli.add_command(export_csv)
