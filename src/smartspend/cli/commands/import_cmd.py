"""CSV import commands."""

from pathlib import Path

import click

from smartspend.cli.error_handling import require_user
from smartspend.domain.csv_import import CSVImportService


def _read_csv(ctx, csv_file: str) -> str:
    try:
        # utf-8-sig drops a leading byte-order mark
        return Path(csv_file).read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as e:
        click.echo(f"Error: Could not read {csv_file}: {e}", err=True)
        ctx.exit(1)


def _report(ctx, result) -> None:
    if result.success:
        click.echo(result.message)
    else:
        click.echo(f"Error: {result.message}", err=True)
        ctx.exit(1)


@click.group("import")
def import_group():
    """Import transactions or budget items from CSV files."""
    pass


@import_group.command("transactions")
@click.argument("csv_file", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def import_transactions(ctx, csv_file: str):
    """Import transactions from CSV_FILE.

    The header row may name the columns description, amount, category, date
    and type (or their common synonyms); otherwise columns are read in that
    order.
    """
    require_user(ctx)
    service = CSVImportService(ctx.obj["app"].store)
    _report(ctx, service.import_transactions(_read_csv(ctx, csv_file)))


@import_group.command("budget")
@click.argument("csv_file", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def import_budgets(ctx, csv_file: str):
    """Import budget items from CSV_FILE (category, budgeted, spent, month)."""
    require_user(ctx)
    service = CSVImportService(ctx.obj["app"].store)
    _report(ctx, service.import_budgets(_read_csv(ctx, csv_file)))


def register_commands(cli):
    """Register import commands with main CLI."""
    cli.add_command(import_group, name="import")
