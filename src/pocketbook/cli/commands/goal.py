"""Savings goal commands."""

import click

from pocketbook.cli.error_handling import handle_domain_error
from pocketbook.cli.resolution import (
    parse_amount_or_exit,
    parse_date_or_exit,
    resolve_account_or_exit,
    resolve_by_id_or_exit,
    short_id,
)
from pocketbook.domain.entities import PaymentMethod
from pocketbook.domain.errors import DomainError
from pocketbook.domain.goal import GoalService

SOURCES = {"bank": PaymentMethod.BANK_TRANSFER, "cash": PaymentMethod.CASH}


@click.group()
def goal_group():
    """Track savings goals."""
    pass


@goal_group.command("create")
@click.argument("name")
@click.argument("target")
@click.option("--deadline", "deadline_str", help="Target date")
@click.pass_context
def create_goal(ctx, name: str, target: str, deadline_str: str | None):
    """Create a savings goal with a TARGET amount."""
    book = ctx.obj["book"]
    value = parse_amount_or_exit(ctx, target)
    deadline = parse_date_or_exit(ctx, book, deadline_str) if deadline_str else None
    try:
        goal = GoalService(book).create_goal(name, value, deadline)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created goal '{name}' (ID: {short_id(goal.id)}) targeting {value:,.2f}")


@goal_group.command("list")
@click.pass_context
def list_goals(ctx):
    """List goals and their progress."""
    goals = GoalService(ctx.obj["book"]).list_goals()
    if not goals:
        click.echo("No goals found.")
        return
    for goal in goals:
        percent = goal.current_amount / goal.target_amount * 100 if goal.target_amount else 0
        line = (
            f"{short_id(goal.id)} | {goal.name:20s} | {goal.current_amount:>12,.2f} of "
            f"{goal.target_amount:>12,.2f} ({percent:.0f}%)"
        )
        if goal.achieved_date:
            line += f" | achieved {goal.achieved_date}"
        elif goal.deadline:
            line += f" | deadline {goal.deadline}"
        click.echo(line)


@goal_group.command("contribute")
@click.argument("goal")
@click.argument("amount")
@click.option("--from", "source", type=click.Choice(sorted(SOURCES)), help="Take the money from a bank account or cash")
@click.option("--account", help="Bank account for --from bank")
@click.option("--date", "date_str", help="Contribution date (defaults to today)")
@click.pass_context
def contribute(ctx, goal: str, amount: str, source: str | None, account: str | None, date_str: str | None):
    """Add a contribution to a goal.

    Without --from the contribution is only tracked on the goal; with it,
    a matching expense is recorded in the ledger.
    """
    book = ctx.obj["book"]
    service = GoalService(book)
    target = resolve_by_id_or_exit(ctx, service.list_goals(), goal, "Goal", lambda g: g.name)
    value = parse_amount_or_exit(ctx, amount)
    when = parse_date_or_exit(ctx, book, date_str)
    account_id = resolve_account_or_exit(ctx, book, account).id if account else None
    try:
        service.add_contribution(
            target.id,
            value,
            when,
            payment_method=SOURCES[source] if source else None,
            bank_account_id=account_id,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    updated = service.get_goal(target.id)
    click.echo(f"Added {value:,.2f} to '{target.name}' ({updated.current_amount:,.2f} saved)")
    if updated.achieved_date and not target.achieved_date:
        click.echo("Goal reached!")


@goal_group.command("delete")
@click.argument("goal")
@click.pass_context
def delete_goal(ctx, goal: str):
    """Delete a goal."""
    service = GoalService(ctx.obj["book"])
    target = resolve_by_id_or_exit(ctx, service.list_goals(), goal, "Goal", lambda g: g.name)
    try:
        service.delete_goal(target.id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted goal '{target.name}'")


def register_commands(cli):
    """Register goal commands with main CLI."""
    cli.add_command(goal_group, name="goal")
