"""Budget management commands."""

import click

from smartspend.cli.error_handling import handle_domain_error, require_user
from smartspend.cli.id_resolution import resolve_id_or_exit
from smartspend.utils.amount_parser import parse_amount
from smartspend.utils.date_parser import normalize_month


@click.group()
def budget_group():
    """Manage monthly budget items."""
    pass


@budget_group.command("add")
@click.argument("category")
@click.argument("budgeted")
@click.option("--spent", default="0", show_default=True, help="Amount already spent")
@click.option("--month", help="Budget month (YYYY-MM); defaults to the current month")
@click.pass_context
def add_budget(ctx, category: str, budgeted: str, spent: str, month: str | None):
    """Create a budget of BUDGETED for CATEGORY.

    Examples:
        smartspend budget add Food 300
        smartspend budget add Rent 1200 --spent 1200 --month 2025-01
    """
    require_user(ctx)
    store = ctx.obj["app"].store

    try:
        budgeted_amount = parse_amount(budgeted)
        spent_amount = parse_amount(spent)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)

    try:
        budget = store.add_budget(category, budgeted_amount, spent_amount, month)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Created budget {budget.id}")
    click.echo(f"  {budget.category} ({budget.month}): ${budget.spent:,.2f} of ${budget.budgeted:,.2f}")


@budget_group.command("list")
@click.option("--month", help="Only budget items for this month (YYYY-MM)")
@click.pass_context
def list_budgets(ctx, month: str | None):
    """List budget items with the spending recorded by transactions."""
    store = ctx.obj["app"].store

    period = None
    if month:
        try:
            period = normalize_month(month)
        except ValueError as e:
            click.echo(f"Error: {e}", err=True)
            ctx.exit(1)

    budgets = [b for b in store.budgets if period is None or b.month == period]
    if not budgets:
        click.echo("No budget items found.")
        return

    click.echo(f"\n{'ID':<10} {'Month':<8} {'Category':<20} {'Budgeted':>12} {'Spent':>12} {'Actual':>12}")
    click.echo("-" * 80)
    for budget in budgets:
        actual = store.get_actual_spending(budget.category, budget.month)
        click.echo(
            f"{budget.id[:8]:<10} {budget.month:<8} {budget.category[:20]:<20} "
            f"{f'${budget.budgeted:,.2f}':>12} {f'${budget.spent:,.2f}':>12} {f'${actual:,.2f}':>12}"
        )


@budget_group.command("update")
@click.argument("budget_id")
@click.option("--category", help="Category label")
@click.option("--budgeted", help="Budgeted amount")
@click.option("--spent", help="Amount spent")
@click.option("--month", help="Budget month (YYYY-MM)")
@click.pass_context
def update_budget(
    ctx, budget_id: str, category: str | None, budgeted: str | None, spent: str | None, month: str | None
):
    """Update only the provided fields of a budget item."""
    require_user(ctx)
    store = ctx.obj["app"].store
    budget = resolve_id_or_exit(ctx, store.budgets, budget_id, "Budget")

    changes = {}
    if category is not None:
        changes["category"] = category
    if month is not None:
        changes["month"] = month
    try:
        if budgeted is not None:
            changes["budgeted"] = parse_amount(budgeted)
        if spent is not None:
            changes["spent"] = parse_amount(spent)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)

    if not changes:
        click.echo("Error: Nothing to update. Pass at least one option.", err=True)
        ctx.exit(1)

    try:
        store.update_budget(budget.id, **changes)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Updated budget {budget.id}")


@budget_group.command("delete")
@click.argument("budget_id")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_budget(ctx, budget_id: str, yes: bool):
    """Delete a budget item."""
    require_user(ctx)
    store = ctx.obj["app"].store
    budget = resolve_id_or_exit(ctx, store.budgets, budget_id, "Budget")

    if not yes and not click.confirm(f"Delete the {budget.month} budget for '{budget.category}'?"):
        click.echo("Deletion cancelled.")
        return

    store.delete_budget(budget.id)
    click.echo(f"Deleted budget {budget.id}")


def register_commands(cli):
    """Register budget commands with main CLI."""
    cli.add_command(budget_group, name="budget")
