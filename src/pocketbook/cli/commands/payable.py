"""Payable commands: money you owe."""

import click

from pocketbook.cli.error_handling import handle_domain_error
from pocketbook.cli.resolution import (
    parse_amount_or_exit,
    parse_date_or_exit,
    resolve_account_or_exit,
    resolve_by_id_or_exit,
    resolve_card_or_exit,
    short_id,
)
from pocketbook.cli.commands.add import METHODS
from pocketbook.domain.debt import PayableService
from pocketbook.domain.errors import DomainError


@click.group()
def payable_group():
    """Track money you owe."""
    pass


@payable_group.command("create")
@click.argument("creditor")
@click.argument("amount")
@click.option("--description", default="", help="What the money is for")
@click.option("--due", "due_str", required=True, help="Due date")
@click.pass_context
def create_payable(ctx, creditor: str, amount: str, description: str, due_str: str):
    """Record that you owe CREDITOR the given AMOUNT."""
    book = ctx.obj["book"]
    value = parse_amount_or_exit(ctx, amount)
    due = parse_date_or_exit(ctx, book, due_str)
    try:
        payable = PayableService(book).create(creditor, description, value, due)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(
        f"Created payable {short_id(payable.id)}: you owe {creditor} {value:,.2f} "
        f"by {due} ({payable.status.value})"
    )


@payable_group.command("list")
@click.pass_context
def list_payables(ctx):
    """List payables with what is still owed."""
    service = PayableService(ctx.obj["book"])
    payables = service.list_debts()
    if not payables:
        click.echo("No payables found.")
        return
    for p in payables:
        stats = service.stats(p.id)
        click.echo(
            f"{short_id(p.id)} | {p.creditor_name:20s} | due {p.due_date} | total {p.total_amount:>12,.2f} | "
            f"remaining {stats.remaining:>12,.2f} | {stats.status.value}"
        )


@payable_group.command("pay")
@click.argument("payable")
@click.argument("amount")
@click.option("--method", type=click.Choice(sorted(METHODS)), default="cash", show_default=True)
@click.option("--account", help="Paying bank account")
@click.option("--card", help="Paying credit card")
@click.option("--date", "date_str", help="Payment date (defaults to today)")
@click.pass_context
def pay_payable(
    ctx, payable: str, amount: str, method: str, account: str | None, card: str | None, date_str: str | None
):
    """Record a payment towards a payable. An expense transaction is always created."""
    book = ctx.obj["book"]
    service = PayableService(book)
    target = resolve_by_id_or_exit(ctx, service.list_debts(), payable, "Payable", lambda p: p.creditor_name)
    value = parse_amount_or_exit(ctx, amount)
    when = parse_date_or_exit(ctx, book, date_str)
    account_id = resolve_account_or_exit(ctx, book, account).id if account else None
    card_id = resolve_card_or_exit(ctx, book, card).id if card else None
    try:
        service.add_payment(target.id, value, when, METHODS[method], account_id, card_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    stats = service.stats(target.id)
    click.echo(
        f"Paid {value:,.2f} to {target.creditor_name}. "
        f"Remaining {stats.remaining:,.2f} ({stats.status.value})"
    )


@payable_group.command("delete")
@click.argument("payable")
@click.pass_context
def delete_payable(ctx, payable: str):
    """Delete a payable with no payments."""
    service = PayableService(ctx.obj["book"])
    target = resolve_by_id_or_exit(ctx, service.list_debts(), payable, "Payable", lambda p: p.creditor_name)
    try:
        service.delete(target.id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted payable {short_id(target.id)}")


def register_commands(cli):
    """Register payable commands with main CLI."""
    cli.add_command(payable_group, name="payable")
