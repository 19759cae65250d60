"""Add transaction command."""

import click

from smartspend.cli.error_handling import handle_domain_error, require_user
from smartspend.utils.amount_parser import parse_amount
from smartspend.utils.date_parser import parse_date


@click.command("add")
@click.option("--description", required=True, help="Transaction description")
@click.option("--amount", required=True, help="Transaction amount; the sign is taken from --type")
@click.option("--category", required=True, help="Category label (e.g., 'Food')")
@click.option(
    "--date",
    default="today",
    show_default=True,
    help="Transaction date (YYYY-MM-DD or relative like 'today', 'yesterday')",
)
@click.option(
    "--type",
    "txn_type",
    type=click.Choice(["income", "expense"], case_sensitive=False),
    required=True,
    help="Transaction type",
)
@click.pass_context
def add_transaction(ctx, description: str, amount: str, category: str, date: str, txn_type: str):
    """Add a transaction.

    Examples:
        smartspend add --description "Coffee" --amount 4.50 --category Food --type expense
        smartspend add --description "Salary" --amount 2500 --category Work --type income --date 2025-01-31
    """
    require_user(ctx)
    store = ctx.obj["app"].store

    try:
        txn_date = parse_date(date)
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)

    try:
        txn_amount = parse_amount(amount)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)

    # Expenses are stored negative, income positive, matching CSV import
    txn_amount = -abs(txn_amount) if txn_type.lower() == "expense" else abs(txn_amount)

    try:
        txn = store.add_transaction(
            description=description,
            amount=txn_amount,
            category=category,
            date=txn_date,
            type=txn_type.lower(),
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Created transaction {txn.id}")
    click.echo(f"  Date: {txn.date}")
    click.echo(f"  Amount: ${abs(txn.amount):,.2f} ({txn.type.value})")
    click.echo(f"  Description: {txn.description}")
    click.echo(f"  Category: {txn.category}")


def register_commands(cli):
    """Register add command with main CLI."""
    cli.add_command(add_transaction)
