"""Add transaction command."""

import click

from pocketbook.cli.error_handling import handle_domain_error
from pocketbook.cli.resolution import (
    parse_amount_or_exit,
    parse_date_or_exit,
    resolve_account_or_exit,
    resolve_card_or_exit,
    resolve_category_or_exit,
    short_id,
)
from pocketbook.domain.entities import PaymentMethod, TaxRelevance, TransactionType
from pocketbook.domain.errors import DomainError
from pocketbook.domain.transaction import TransactionService

METHODS = {
    "cash": PaymentMethod.CASH,
    "cheque": PaymentMethod.CHEQUE,
    "bank": PaymentMethod.BANK_TRANSFER,
    "card": PaymentMethod.CREDIT_CARD,
    "other": PaymentMethod.OTHER,
}


@click.command("add")
@click.argument("kind", type=click.Choice(["income", "expense"]))
@click.argument("amount")
@click.argument("description")
@click.option(
    "--date",
    "date_str",
    help="Transaction date (YYYY-MM-DD or relative like 'today', 'yesterday'); defaults to today",
)
@click.option("--method", type=click.Choice(sorted(METHODS)), default="cash", show_default=True)
@click.option("--account", help="Bank account name or ID")
@click.option("--card", help="Credit card name or ID")
@click.option("--category", help="Category name or ID")
@click.option("--payee", help="Payee or payer")
@click.option("--notes", help="Notes")
@click.pass_context
def add_transaction(
    ctx,
    kind: str,
    amount: str,
    description: str,
    date_str: str | None,
    method: str,
    account: str | None,
    card: str | None,
    category: str | None,
    payee: str | None,
    notes: str | None,
):
    """Add a transaction to the ledger.

    Bank income and bank or cheque expenses update the account balance;
    card expenses use up the card's available balance.

    Examples:
        pocketbook add expense 1250 "Groceries" --category Groceries
        pocketbook add income 150000 "Salary" --method bank --account "Salary Account"
        pocketbook add expense 4500 "Dinner" --method card --card "Visa Gold"
    """
    book = ctx.obj["book"]
    value = parse_amount_or_exit(ctx, amount)
    when = parse_date_or_exit(ctx, book, date_str)
    bank_account = resolve_account_or_exit(ctx, book, account) if account else None
    credit_card = resolve_card_or_exit(ctx, book, card) if card else None
    category_obj = resolve_category_or_exit(ctx, book, category) if category else None

    try:
        txn = TransactionService(book).create_transaction(
            date=when,
            description=description,
            amount=value,
            type=TransactionType.INCOME if kind == "income" else TransactionType.EXPENSE,
            payment_method=METHODS[method],
            category_id=category_obj.id if category_obj else None,
            bank_account_id=bank_account.id if bank_account else None,
            credit_card_id=credit_card.id if credit_card else None,
            payee=payee,
            notes=notes,
            is_tax_relevant=bool(
                category_obj and category_obj.default_tax_relevance != TaxRelevance.NONE
            ),
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Created transaction {short_id(txn.id)}")
    click.echo(f"  Date: {txn.date}")
    click.echo(f"  Amount: {txn.amount:,.2f} ({txn.type.value})")
    click.echo(f"  Method: {txn.payment_method.value}")
    if category_obj:
        click.echo(f"  Category: {category_obj.name}")


def register_commands(cli):
    """Register add command with main CLI."""
    cli.add_command(add_transaction)
