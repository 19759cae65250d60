"""Transaction management commands."""

import click

from smartspend.cli.error_handling import handle_domain_error, require_user
from smartspend.cli.id_resolution import resolve_id_or_exit
from smartspend.utils.amount_parser import parse_amount
from smartspend.utils.date_parser import normalize_month, parse_date


@click.group()
def transaction_group():
    """Manage transactions."""
    pass


@transaction_group.command("update")
@click.argument("transaction_id")
@click.option("--description", help="Transaction description")
@click.option("--amount", help="Transaction amount (e.g., 12.50 or -12.50)")
@click.option("--category", help="Category label")
@click.option("--date", help="Transaction date (YYYY-MM-DD or relative like 'today', 'yesterday')")
@click.option(
    "--type",
    "txn_type",
    type=click.Choice(["income", "expense"], case_sensitive=False),
    help="Transaction type",
)
@click.pass_context
def update_transaction(
    ctx,
    transaction_id: str,
    description: str | None,
    amount: str | None,
    category: str | None,
    date: str | None,
    txn_type: str | None,
) -> None:
    """Update a transaction.

    Updates only the fields that are provided. TRANSACTION_ID may be a unique
    prefix of the full ID.

    Examples:
        smartspend transaction update 3f2a --amount 5.25
        smartspend transaction update 3f2a --category Groceries --type expense
    """
    require_user(ctx)
    store = ctx.obj["app"].store
    txn = resolve_id_or_exit(ctx, store.transactions, transaction_id, "Transaction")

    changes = {}
    if description is not None:
        changes["description"] = description
    if category is not None:
        changes["category"] = category
    if txn_type is not None:
        changes["type"] = txn_type.lower()

    if date is not None:
        try:
            changes["date"] = parse_date(date)
        except ValueError as e:
            click.echo(f"Error: Invalid date format: {e}", err=True)
            ctx.exit(1)

    if amount is not None:
        try:
            changes["amount"] = parse_amount(amount)
        except ValueError as e:
            click.echo(f"Error: Invalid amount format: {e}", err=True)
            ctx.exit(1)

    if not changes:
        click.echo("Error: Nothing to update. Pass at least one option.", err=True)
        ctx.exit(1)

    # Keep the stored sign in line with the (possibly new) type
    if "amount" in changes or "type" in changes:
        magnitude = abs(changes.get("amount", txn.amount))
        is_expense = changes.get("type", txn.type.value) == "expense"
        changes["amount"] = -magnitude if is_expense else magnitude

    try:
        store.update_transaction(txn.id, **changes)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Updated transaction {txn.id}")


@transaction_group.command("list")
@click.option("--month", help="Only transactions in this month (YYYY-MM)")
@click.option("--category", help="Only transactions in this category")
@click.option(
    "--type",
    "txn_type",
    type=click.Choice(["income", "expense"], case_sensitive=False),
    help="Only income or only expenses",
)
@click.pass_context
def list_transactions(ctx, month: str | None, category: str | None, txn_type: str | None):
    """View transactions, newest first, with optional filters."""
    store = ctx.obj["app"].store

    period = None
    if month:
        try:
            period = normalize_month(month)
        except ValueError as e:
            click.echo(f"Error: {e}", err=True)
            ctx.exit(1)

    transactions = [
        txn
        for txn in store.transactions
        if (period is None or txn.date.isoformat().startswith(period))
        and (category is None or txn.category == category)
        and (txn_type is None or txn.type.value == txn_type.lower())
    ]

    if not transactions:
        click.echo("No transactions found.")
        return

    click.echo(f"\nFound {len(transactions)} transaction(s):")
    click.echo("-" * 100)
    click.echo(f"{'ID':<10} {'Date':<12} {'Type':<8} {'Amount':<14} {'Category':<20} {'Description':<30}")
    click.echo("-" * 100)

    for txn in transactions:
        amount_str = f"${abs(txn.amount):,.2f}"
        click.echo(
            f"{txn.id[:8]:<10} {txn.date.isoformat():<12} {txn.type.value:<8} {amount_str:<14} "
            f"{txn.category[:20]:<20} {txn.description[:30]:<30}"
        )

    income = sum((abs(t.amount) for t in transactions if t.type.value == "income"), 0)
    expenses = sum((abs(t.amount) for t in transactions if t.type.value == "expense"), 0)
    click.echo("-" * 100)
    click.echo(f"Income: ${income:,.2f} | Expenses: ${expenses:,.2f} | Count: {len(transactions)}")


@transaction_group.command("delete")
@click.argument("transaction_id")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_transaction(ctx, transaction_id: str, yes: bool) -> None:
    """Delete a transaction.

    Examples:
        smartspend transaction delete 3f2a
    """
    require_user(ctx)
    store = ctx.obj["app"].store
    txn = resolve_id_or_exit(ctx, store.transactions, transaction_id, "Transaction")

    if not yes and not click.confirm(f"Are you sure you want to delete transaction '{txn.description}'?"):
        click.echo("Deletion cancelled.")
        return

    store.delete_transaction(txn.id)
    click.echo(f"Deleted transaction {txn.id}")


def register_commands(cli):
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
