"""Receivable commands: money owed to you."""

import click

from pocketbook.cli.error_handling import handle_domain_error
from pocketbook.cli.resolution import (
    parse_amount_or_exit,
    parse_date_or_exit,
    resolve_account_or_exit,
    resolve_by_id_or_exit,
    short_id,
)
from pocketbook.domain.debt import ReceivableService
from pocketbook.domain.entities import PaymentMethod
from pocketbook.domain.errors import DomainError

RECEIVE_METHODS = {
    "cash": PaymentMethod.CASH,
    "bank": PaymentMethod.BANK_TRANSFER,
    "cheque": PaymentMethod.CHEQUE,
    "other": PaymentMethod.OTHER,
}


@click.group()
def receivable_group():
    """Track money other people owe you."""
    pass


@receivable_group.command("create")
@click.argument("debtor")
@click.argument("amount")
@click.option("--description", default="", help="What the money is for")
@click.option("--due", "due_str", required=True, help="Due date")
@click.pass_context
def create_receivable(ctx, debtor: str, amount: str, description: str, due_str: str):
    """Record that DEBTOR owes you AMOUNT.

    Examples:
        pocketbook receivable create "Nimal" 25000 --due "2024-07-01" --description "Loan"
    """
    book = ctx.obj["book"]
    value = parse_amount_or_exit(ctx, amount)
    due = parse_date_or_exit(ctx, book, due_str)
    try:
        receivable = ReceivableService(book).create(debtor, description, value, due)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(
        f"Created receivable {short_id(receivable.id)}: {debtor} owes {value:,.2f} "
        f"by {due} ({receivable.status.value})"
    )


@receivable_group.command("list")
@click.pass_context
def list_receivables(ctx):
    """List receivables with what is still owed."""
    service = ReceivableService(ctx.obj["book"])
    receivables = service.list_debts()
    if not receivables:
        click.echo("No receivables found.")
        return
    for r in receivables:
        stats = service.stats(r.id)
        click.echo(
            f"{short_id(r.id)} | {r.debtor_name:20s} | due {r.due_date} | total {r.total_amount:>12,.2f} | "
            f"remaining {stats.remaining:>12,.2f} | {stats.status.value}"
        )


@receivable_group.command("pay")
@click.argument("receivable")
@click.argument("amount")
@click.option("--method", type=click.Choice(sorted(RECEIVE_METHODS)), default="cash", show_default=True)
@click.option("--account", help="Bank account the money went into")
@click.option("--date", "date_str", help="Payment date (defaults to today)")
@click.pass_context
def receive_payment(ctx, receivable: str, amount: str, method: str, account: str | None, date_str: str | None):
    """Record money received against a receivable."""
    book = ctx.obj["book"]
    service = ReceivableService(book)
    target = resolve_by_id_or_exit(ctx, service.list_debts(), receivable, "Receivable", lambda r: r.debtor_name)
    value = parse_amount_or_exit(ctx, amount)
    when = parse_date_or_exit(ctx, book, date_str)
    account_id = resolve_account_or_exit(ctx, book, account).id if account else None
    try:
        service.add_payment(target.id, value, when, RECEIVE_METHODS[method], account_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    stats = service.stats(target.id)
    click.echo(
        f"Recorded {value:,.2f} from {target.debtor_name}. "
        f"Remaining {stats.remaining:,.2f} ({stats.status.value})"
    )


@receivable_group.command("delete")
@click.argument("receivable")
@click.pass_context
def delete_receivable(ctx, receivable: str):
    """Delete a receivable with no payments."""
    service = ReceivableService(ctx.obj["book"])
    target = resolve_by_id_or_exit(ctx, service.list_debts(), receivable, "Receivable", lambda r: r.debtor_name)
    try:
        service.delete(target.id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted receivable {short_id(target.id)}")


def register_commands(cli):
    """Register receivable commands with main CLI."""
    cli.add_command(receivable_group, name="receivable")
