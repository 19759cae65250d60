"""Summary command."""

import click

from smartspend.domain.summary import BUDGET_ALERT_RATIO
from smartspend.utils.date_parser import normalize_month


def _money(value) -> str:
    return f"${value:,.2f}"


@click.command("summary")
@click.option("--month", help="Budget month to report on (YYYY-MM); all months when omitted")
@click.pass_context
def summary(ctx, month: str | None):
    """Show totals, spending by category, budget status, savings progress and alerts."""
    store = ctx.obj["app"].store

    period = None
    if month:
        try:
            period = normalize_month(month)
        except ValueError as e:
            click.echo(f"Error: {e}", err=True)
            ctx.exit(1)

    click.echo("\nOverview")
    click.echo("-" * 40)
    click.echo(f"{'Total income':<24} {_money(store.get_total_income()):>15}")
    click.echo(f"{'Total expenses':<24} {_money(store.get_total_expenses()):>15}")
    click.echo(f"{'Balance':<24} {_money(store.get_balance()):>15}")

    spending = store.get_spending_by_category()
    if spending:
        click.echo("\nSpending by category")
        click.echo("-" * 40)
        for category, amount in sorted(spending.items(), key=lambda item: item[1], reverse=True):
            click.echo(f"{category[:24]:<24} {_money(amount):>15}")

    status = store.get_budget_status(month=period)
    if status:
        heading = f"Budget status ({period})" if period else "Budget status"
        click.echo(f"\n{heading}")
        click.echo("-" * 64)
        click.echo(f"{'Category':<24} {'Spent':>12} {'Budgeted':>12} {'Remaining':>12}")
        for category, values in sorted(status.items()):
            click.echo(
                f"{category[:24]:<24} {_money(values['spent']):>12} "
                f"{_money(values['budgeted']):>12} {_money(values['remaining']):>12}"
            )

    if store.budgets:
        remaining = store.get_budget_remaining(month=period)
        if remaining < 0:
            click.echo(f"\nOver budget by {_money(-remaining)}")
        else:
            click.echo(f"\nBudget remaining: {_money(remaining)}")

    if store.goals:
        click.echo(f"\nSavings progress: {store.get_savings_progress():.1f}% across {len(store.goals)} goal(s)")

    alerts = []
    if store.get_budget_alert(month=period):
        alerts.append(f"You've spent {BUDGET_ALERT_RATIO:.0%} of your monthly budget")
    for goal, progress in store.get_goal_alerts():
        alerts.append(f"You're {progress:.0f}% towards your {goal.name} goal!")
    if alerts:
        click.echo("\nAlerts")
        click.echo("-" * 40)
        for alert in alerts:
            click.echo(alert)


def register_commands(cli):
    """Register summary command with main CLI."""
    cli.add_command(summary)
