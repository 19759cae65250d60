"""Savings goal commands."""

import click

from smartspend.cli.error_handling import handle_domain_error, require_user
from smartspend.cli.id_resolution import resolve_id_or_exit
from smartspend.utils.amount_parser import parse_amount
from smartspend.utils.date_parser import parse_date


@click.group()
def goal_group():
    """Manage savings goals."""
    pass


@goal_group.command("add")
@click.argument("name")
@click.option("--target", required=True, help="Target amount")
@click.option("--current", default="0", show_default=True, help="Amount saved so far")
@click.option("--deadline", required=True, help="Deadline (YYYY-MM-DD)")
@click.option("--description", default="", help="Free-form description")
@click.pass_context
def add_goal(ctx, name: str, target: str, current: str, deadline: str, description: str):
    """Create a savings goal.

    Examples:
        smartspend goal add "Emergency fund" --target 5000 --deadline 2026-12-31
    """
    require_user(ctx)
    store = ctx.obj["app"].store

    try:
        target_amount = parse_amount(target)
        current_amount = parse_amount(current)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)

    try:
        deadline_date = parse_date(deadline)
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)

    try:
        goal = store.add_goal(name, target_amount, current_amount, deadline_date, description)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Created goal {goal.id}")
    click.echo(f"  {goal.name}: ${goal.current_amount:,.2f} of ${goal.target_amount:,.2f} by {goal.deadline}")


@goal_group.command("list")
@click.pass_context
def list_goals(ctx):
    """List savings goals with their progress."""
    store = ctx.obj["app"].store

    if not store.goals:
        click.echo("No savings goals found.")
        return

    click.echo(f"\n{'ID':<10} {'Name':<24} {'Saved':>12} {'Target':>12} {'Progress':>9} {'Deadline':<12}")
    click.echo("-" * 84)
    for goal in store.goals:
        progress = f"{goal.current_amount / goal.target_amount:.0%}" if goal.target_amount else "-"
        click.echo(
            f"{goal.id[:8]:<10} {goal.name[:24]:<24} {f'${goal.current_amount:,.2f}':>12} "
            f"{f'${goal.target_amount:,.2f}':>12} {progress:>9} {goal.deadline.isoformat():<12}"
        )


@goal_group.command("update")
@click.argument("goal_id")
@click.option("--name", help="Goal name")
@click.option("--target", help="Target amount")
@click.option("--current", help="Amount saved so far")
@click.option("--deadline", help="Deadline (YYYY-MM-DD)")
@click.option("--description", help="Free-form description")
@click.pass_context
def update_goal(
    ctx,
    goal_id: str,
    name: str | None,
    target: str | None,
    current: str | None,
    deadline: str | None,
    description: str | None,
):
    """Update only the provided fields of a savings goal.

    Examples:
        smartspend goal update 9c1e --current 1250
    """
    require_user(ctx)
    store = ctx.obj["app"].store
    goal = resolve_id_or_exit(ctx, store.goals, goal_id, "Goal")

    changes = {}
    if name is not None:
        changes["name"] = name
    if description is not None:
        changes["description"] = description
    try:
        if target is not None:
            changes["target_amount"] = parse_amount(target)
        if current is not None:
            changes["current_amount"] = parse_amount(current)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)
    if deadline is not None:
        try:
            changes["deadline"] = parse_date(deadline)
        except ValueError as e:
            click.echo(f"Error: Invalid date format: {e}", err=True)
            ctx.exit(1)

    if not changes:
        click.echo("Error: Nothing to update. Pass at least one option.", err=True)
        ctx.exit(1)

    try:
        store.update_goal(goal.id, **changes)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Updated goal {goal.id}")


@goal_group.command("delete")
@click.argument("goal_id")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_goal(ctx, goal_id: str, yes: bool):
    """Delete a savings goal."""
    require_user(ctx)
    store = ctx.obj["app"].store
    goal = resolve_id_or_exit(ctx, store.goals, goal_id, "Goal")

    if not yes and not click.confirm(f"Delete savings goal '{goal.name}'?"):
        click.echo("Deletion cancelled.")
        return

    store.delete_goal(goal.id)
    click.echo(f"Deleted goal {goal.id}")


def register_commands(cli):
    """Register goal commands with main CLI."""
    cli.add_command(goal_group, name="goal")
