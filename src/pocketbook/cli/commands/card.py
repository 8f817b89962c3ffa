"""Credit card commands."""

import click

from pocketbook.cli.error_handling import handle_domain_error
from pocketbook.cli.resolution import (
    parse_amount_or_exit,
    parse_date_or_exit,
    resolve_account_or_exit,
    resolve_card_or_exit,
    short_id,
)
from pocketbook.domain.credit_card import CreditCardService
from pocketbook.domain.entities import PaymentMethod
from pocketbook.domain.errors import DomainError

PAY_METHODS = {
    "bank": PaymentMethod.BANK_TRANSFER,
    "cheque": PaymentMethod.CHEQUE,
    "cash": PaymentMethod.CASH,
}


@click.group()
def card_group():
    """Manage credit cards."""
    pass


@card_group.command("create")
@click.argument("name")
@click.option("--bank", help="Issuing bank (defaults to card name)")
@click.option("--limit", "limit_str", required=True, help="Credit limit")
@click.option("--available", help="Available balance (defaults to the full limit)")
@click.option("--statement-day", type=click.IntRange(1, 31), help="Statement day of month")
@click.option("--due-day", type=click.IntRange(1, 31), help="Payment due day of month")
@click.pass_context
def create_card(
    ctx,
    name: str,
    bank: str | None,
    limit_str: str,
    available: str | None,
    statement_day: int | None,
    due_day: int | None,
):
    """Add a credit card.

    Examples:
        pocketbook card create "Visa Gold" --bank "HNB" --limit 300000
    """
    limit = parse_amount_or_exit(ctx, limit_str)
    available_amount = parse_amount_or_exit(ctx, available) if available is not None else None
    try:
        card = CreditCardService(ctx.obj["book"]).create_card(
            name,
            bank or name,
            limit,
            available_balance=available_amount,
            statement_day=statement_day,
            due_day=due_day,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created card '{name}' (ID: {short_id(card.id)}) with limit {limit:,.2f}")


@card_group.command("list")
@click.pass_context
def list_cards(ctx):
    """List credit cards with available and outstanding balances."""
    cards = CreditCardService(ctx.obj["book"]).list_cards()
    if not cards:
        click.echo("No credit cards found.")
        return
    for card in cards:
        click.echo(
            f"ID: {short_id(card.id)} | {card.name:20s} | limit {card.credit_limit:>12,.2f} | "
            f"available {card.available_balance:>12,.2f} | outstanding {card.outstanding:>12,.2f}"
        )


@card_group.command("pay")
@click.argument("card")
@click.argument("amount")
@click.option("--from-account", help="Paying bank account (required unless paying by cash)")
@click.option("--method", type=click.Choice(sorted(PAY_METHODS)), default="bank", show_default=True)
@click.option("--date", "date_str", help="Payment date (defaults to today)")
@click.pass_context
def pay_card(ctx, card: str, amount: str, from_account: str | None, method: str, date_str: str | None):
    """Pay off a credit card balance.

    The amount applied is capped at the outstanding balance.

    Examples:
        pocketbook card pay "Visa Gold" 25000 --from-account "Salary Account"
        pocketbook card pay "Visa Gold" 5000 --method cash
    """
    book = ctx.obj["book"]
    target = resolve_card_or_exit(ctx, book, card)
    value = parse_amount_or_exit(ctx, amount)
    when = parse_date_or_exit(ctx, book, date_str)
    account_id = resolve_account_or_exit(ctx, book, from_account).id if from_account else None
    try:
        txn = CreditCardService(book).record_payment(
            target.id,
            value,
            payment_method=PAY_METHODS[method],
            bank_account_id=account_id,
            payment_date=when,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Paid {txn.amount:,.2f} to '{target.name}'")


@card_group.command("delete")
@click.argument("card")
@click.pass_context
def delete_card(ctx, card: str):
    """Delete a card nothing refers to."""
    book = ctx.obj["book"]
    target = resolve_card_or_exit(ctx, book, card)
    try:
        CreditCardService(book).delete_card(target.id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted card '{target.name}'")


def register_commands(cli):
    """Register card commands with main CLI."""
    cli.add_command(card_group, name="card")
