"""Monthly budget commands."""

import click

from pocketbook.cli.error_handling import handle_domain_error
from pocketbook.cli.resolution import (
    parse_amount_or_exit,
    parse_month_or_exit,
    resolve_by_id_or_exit,
    resolve_category_or_exit,
    short_id,
)
from pocketbook.domain.budget import BudgetService
from pocketbook.domain.errors import DomainError


@click.group()
def budget_group():
    """Set monthly spending limits per category."""
    pass


@budget_group.command("set")
@click.argument("category")
@click.argument("limit")
@click.option("--month", help="Budget month, e.g. 2024-03 or 'next month' (defaults to this month)")
@click.option("--rollover", is_flag=True, help="Carry last month's surplus or deficit forward")
@click.pass_context
def set_budget(ctx, category: str, limit: str, month: str | None, rollover: bool):
    """Set a budget LIMIT for CATEGORY in a month."""
    book = ctx.obj["book"]
    category_obj = resolve_category_or_exit(ctx, book, category)
    value = parse_amount_or_exit(ctx, limit)
    start = parse_month_or_exit(ctx, book, month)
    try:
        budget = BudgetService(book).create_budget(category_obj.id, value, start, rollover)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(
        f"Budget {short_id(budget.id)}: {category_obj.name} limited to {value:,.2f} in {start:%Y-%m}"
    )


@budget_group.command("list")
@click.option("--month", help="Only show this month")
@click.pass_context
def list_budgets(ctx, month: str | None):
    """Show budgets with spending so far."""
    book = ctx.obj["book"]
    service = BudgetService(book)
    budgets = service.list_budgets(parse_month_or_exit(ctx, book, month) if month else None)
    if not budgets:
        click.echo("No budgets found.")
        return

    categories = {c.id: c.name for c in book.collection("categories")}
    click.echo(f"{'ID':<9} {'Month':<8} {'Category':<24} {'Spent':>12} {'Limit':>12} {'Left':>12}  Status")
    click.echo("-" * 96)
    for budget in budgets:
        usage = service.budget_usage(budget.id)
        click.echo(
            f"{short_id(budget.id):<9} {budget.start_date:%Y-%m}  "
            f"{categories.get(budget.category_id, budget.category_id)[:24]:<24} "
            f"{usage.spent:>12,.2f} {usage.effective_limit:>12,.2f} {usage.remaining:>12,.2f}  "
            f"{usage.status}"
        )


@budget_group.command("delete")
@click.argument("budget")
@click.pass_context
def delete_budget(ctx, budget: str):
    """Delete a budget."""
    service = BudgetService(ctx.obj["book"])
    target = resolve_by_id_or_exit(ctx, service.list_budgets(), budget, "Budget", lambda b: b.id)
    service.delete_budget(target.id)
    click.echo(f"Deleted budget {short_id(target.id)}")


def register_commands(cli):
    """Register budget commands with main CLI."""
    cli.add_command(budget_group, name="budget")
