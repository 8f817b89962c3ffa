"""Recurring transaction commands."""

import click

from pocketbook.cli.commands.add import METHODS
from pocketbook.cli.error_handling import handle_domain_error
from pocketbook.cli.resolution import (
    parse_amount_or_exit,
    parse_date_or_exit,
    resolve_account_or_exit,
    resolve_by_id_or_exit,
    resolve_card_or_exit,
    resolve_category_or_exit,
    short_id,
)
from pocketbook.domain.entities import RecurringFrequency, TransactionType
from pocketbook.domain.errors import DomainError
from pocketbook.domain.recurrence import RecurringTransactionService

FREQUENCIES = {f.value.lower(): f for f in RecurringFrequency}
WEEKDAYS = ["sun", "mon", "tue", "wed", "thu", "fri", "sat"]


@click.group()
def recurring_group():
    """Manage recurring bills and income."""
    pass


@recurring_group.command("add")
@click.argument("kind", type=click.Choice(["income", "expense"]))
@click.argument("amount")
@click.argument("description")
@click.option("--every", "frequency", type=click.Choice(sorted(FREQUENCIES)), required=True)
@click.option("--start", "start_str", help="First possible date (defaults to today)")
@click.option("--end", "end_str", help="Last date")
@click.option("--weekday", type=click.Choice(WEEKDAYS), help="Day of week for weekly rules")
@click.option("--day", type=click.IntRange(1, 31), help="Day of month for monthly and yearly rules")
@click.option("--method", type=click.Choice(sorted(METHODS)), default="bank", show_default=True)
@click.option("--account", help="Bank account name or ID")
@click.option("--card", help="Credit card name or ID")
@click.option("--category", help="Category name or ID")
@click.pass_context
def add_rule(
    ctx,
    kind: str,
    amount: str,
    description: str,
    frequency: str,
    start_str: str | None,
    end_str: str | None,
    weekday: str | None,
    day: int | None,
    method: str,
    account: str | None,
    card: str | None,
    category: str | None,
):
    """Add a recurring rule.

    Examples:
        pocketbook recurring add expense 3500 "Internet" --every monthly --day 5 --account Salary
        pocketbook recurring add income 150000 "Salary" --every monthly --day 25 --account Salary
    """
    book = ctx.obj["book"]
    try:
        rule = RecurringTransactionService(book).add_rule(
            description=description,
            amount=parse_amount_or_exit(ctx, amount),
            type=TransactionType.INCOME if kind == "income" else TransactionType.EXPENSE,
            payment_method=METHODS[method],
            frequency=FREQUENCIES[frequency],
            start_date=parse_date_or_exit(ctx, book, start_str),
            category_id=resolve_category_or_exit(ctx, book, category).id if category else None,
            bank_account_id=resolve_account_or_exit(ctx, book, account).id if account else None,
            credit_card_id=resolve_card_or_exit(ctx, book, card).id if card else None,
            end_date=parse_date_or_exit(ctx, book, end_str) if end_str else None,
            day_of_week=WEEKDAYS.index(weekday) if weekday else None,
            day_of_month=day,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Added rule {short_id(rule.id)}, next due {rule.next_due_date}")


@recurring_group.command("list")
@click.pass_context
def list_rules(ctx):
    """List recurring rules by next due date."""
    rules = RecurringTransactionService(ctx.obj["book"]).list_rules()
    if not rules:
        click.echo("No recurring rules found.")
        return
    for rule in rules:
        state = "" if rule.is_active else " (inactive)"
        click.echo(
            f"{short_id(rule.id)} | {rule.description:24s} | {rule.type.value:7s} {rule.amount:>12,.2f} | "
            f"{rule.frequency.value:7s} | next {rule.next_due_date}{state}"
        )


@recurring_group.command("process")
@click.option("--all", "process_all", is_flag=True, help="Process every due rule without asking")
@click.pass_context
def process_rules(ctx, process_all: bool):
    """Create transactions for rules that are due.

    Each due rule produces one transaction dated on its due date and moves
    on to its next date. Run again to catch up rules that are several
    periods behind.
    """
    book = ctx.obj["book"]
    service = RecurringTransactionService(book)
    due = service.due_rules()
    if not due:
        click.echo("No recurring transactions are due.")
        return

    selected = []
    for rule in due:
        if process_all or click.confirm(
            f"Process '{rule.description}' ({rule.amount:,.2f}) due {rule.next_due_date}?", default=True
        ):
            selected.append(rule.id)

    try:
        created = service.process_recurring_transactions(selected)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created {len(created)} transaction(s).")


@recurring_group.command("pause")
@click.argument("rule")
@click.option("--resume", is_flag=True, help="Resume instead of pausing")
@click.pass_context
def pause_rule(ctx, rule: str, resume: bool):
    """Pause or resume a rule."""
    service = RecurringTransactionService(ctx.obj["book"])
    target = resolve_by_id_or_exit(ctx, service.list_rules(), rule, "Rule", lambda r: r.description)
    service.set_active(target.id, resume)
    click.echo(f"{'Resumed' if resume else 'Paused'} '{target.description}'")


@recurring_group.command("delete")
@click.argument("rule")
@click.pass_context
def delete_rule(ctx, rule: str):
    """Delete a rule. Transactions it created are kept."""
    service = RecurringTransactionService(ctx.obj["book"])
    target = resolve_by_id_or_exit(ctx, service.list_rules(), rule, "Rule", lambda r: r.description)
    service.delete_rule(target.id)
    click.echo(f"Deleted rule '{target.description}'")


def register_commands(cli):
    """Register recurring commands with main CLI."""
    cli.add_command(recurring_group, name="recurring")
