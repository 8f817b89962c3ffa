"""Transaction management commands."""

from dataclasses import replace

import click

from pocketbook.cli.error_handling import handle_domain_error
from pocketbook.cli.resolution import (
    parse_amount_or_exit,
    parse_date_or_exit,
    resolve_account_or_exit,
    resolve_by_id_or_exit,
    resolve_category_or_exit,
    short_id,
)
from pocketbook.domain.entities import TransactionType
from pocketbook.domain.errors import DomainError
from pocketbook.domain.stats import ZERO
from pocketbook.domain.transaction import TransactionService
from pocketbook.utils.date_parser import get_date_range


def _resolve_transaction(ctx, book, reference: str):
    return resolve_by_id_or_exit(
        ctx, book.collection("transactions"), reference, "Transaction", lambda t: t.id
    )


@click.group()
def transaction_group():
    """Manage transactions."""
    pass


@transaction_group.command("list")
@click.option("--start-date", help="Start date (YYYY-MM-DD or relative like 'last month')")
@click.option("--end-date", help="End date (YYYY-MM-DD or relative like 'today')")
@click.option(
    "--period",
    help="Named period: this-week, this-month, this-year, last-week, last-month, last-year",
)
@click.option("--category", help="Category name or ID")
@click.option("--account", help="Bank account name or ID")
@click.option("--type", "kind", type=click.Choice(["income", "expense"]), help="Only income or expenses")
@click.option("--limit", type=int, help="Show at most this many transactions")
@click.pass_context
def list_transactions(
    ctx,
    start_date: str | None,
    end_date: str | None,
    period: str | None,
    category: str | None,
    account: str | None,
    kind: str | None,
    limit: int | None,
):
    """View transactions, newest first, with optional filters."""
    book = ctx.obj["book"]

    start = parse_date_or_exit(ctx, book, start_date) if start_date else None
    end = parse_date_or_exit(ctx, book, end_date) if end_date else None
    if period:
        try:
            start, end = get_date_range(period, today=book.today())
        except ValueError as e:
            handle_domain_error(ctx, e)

    category_obj = resolve_category_or_exit(ctx, book, category) if category else None
    account_obj = resolve_account_or_exit(ctx, book, account) if account else None

    transactions = TransactionService(book).list_transactions(
        start_date=start,
        end_date=end,
        category_id=category_obj.id if category_obj else None,
        bank_account_id=account_obj.id if account_obj else None,
        type=TransactionType(kind.capitalize()) if kind else None,
        limit=limit,
    )
    if not transactions:
        click.echo("No transactions found.")
        return

    categories = {c.id: c.name for c in book.collection("categories")}
    click.echo(f"\nFound {len(transactions)} transaction(s):")
    click.echo("-" * 100)
    click.echo(f"{'ID':<9} {'Date':<11} {'Amount':>13} {'Method':<14} {'Category':<24} Description")
    click.echo("-" * 100)
    for txn in transactions:
        sign = "+" if txn.type == TransactionType.INCOME else "-"
        category_name = "Split" if txn.is_split else categories.get(txn.category_id, "")
        click.echo(
            f"{short_id(txn.id):<9} {str(txn.date):<11} {sign + format(txn.amount, ',.2f'):>13} "
            f"{txn.payment_method.value:<14} {category_name[:24]:<24} {txn.description[:40]}"
        )

    income = sum((t.amount for t in transactions if t.type == TransactionType.INCOME), ZERO)
    expenses = sum((t.amount for t in transactions if t.type == TransactionType.EXPENSE), ZERO)
    click.echo("-" * 100)
    click.echo(f"Income: {income:,.2f} | Expenses: {expenses:,.2f} | Count: {len(transactions)}")


@transaction_group.command("update")
@click.argument("transaction_id")
@click.option("--date", "date_str", help="New date")
@click.option("--amount", help="New amount")
@click.option("--description", help="New description")
@click.option("--category", help="Category name or ID, or empty string to clear")
@click.option("--notes", help="Notes")
@click.pass_context
def update_transaction(
    ctx,
    transaction_id: str,
    date_str: str | None,
    amount: str | None,
    description: str | None,
    category: str | None,
    notes: str | None,
) -> None:
    """Update a transaction.

    Updates only the fields that are provided. Account and card balances
    are moved from the old version to the new one.

    Examples:
        pocketbook transaction update 3fa9 --amount 1500
        pocketbook transaction update 3fa9 --category ""
    """
    book = ctx.obj["book"]
    txn = _resolve_transaction(ctx, book, transaction_id)

    changes = {}
    if date_str is not None:
        changes["date"] = parse_date_or_exit(ctx, book, date_str)
    if amount is not None:
        changes["amount"] = parse_amount_or_exit(ctx, amount)
    if description is not None:
        changes["description"] = description
    if category is not None:
        changes["category_id"] = resolve_category_or_exit(ctx, book, category).id if category else None
    if notes is not None:
        changes["notes"] = notes
    if not changes:
        click.echo("Nothing to update.")
        return

    try:
        TransactionService(book).update_transaction(replace(txn, **changes))
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated transaction {short_id(txn.id)}")


@transaction_group.command("delete")
@click.argument("transaction_id")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_transaction(ctx, transaction_id: str, yes: bool) -> None:
    """Delete a transaction.

    Balances are restored, and any debt payment or goal contribution that
    the transaction recorded is removed as well.
    """
    book = ctx.obj["book"]
    txn = _resolve_transaction(ctx, book, transaction_id)

    if not yes and not click.confirm(
        f"Are you sure you want to delete transaction {short_id(txn.id)} ({txn.description})?"
    ):
        click.echo("Deletion cancelled.")
        return

    try:
        report = TransactionService(book).delete_transaction(txn.id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted transaction {short_id(txn.id)}")
    if report.touched:
        click.echo("Also removed linked payments from:")
        for label, ids in (
            ("receivables", report.receivable_ids),
            ("payables", report.payable_ids),
            ("short-term liabilities", report.short_term_liability_ids),
            ("long-term liabilities", report.long_term_liability_ids),
            ("goals", report.goal_ids),
        ):
            if ids:
                click.echo(f"  {label}: {', '.join(short_id(i) for i in ids)}")


def register_commands(cli: click.Group) -> None:
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
