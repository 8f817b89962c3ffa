"""Bank account and transfer commands."""

from decimal import Decimal

import click

from pocketbook.cli.error_handling import handle_domain_error
from pocketbook.cli.resolution import (
    parse_amount_or_exit,
    parse_date_or_exit,
    resolve_account_or_exit,
    short_id,
)
from pocketbook.domain.account import AccountService
from pocketbook.domain.errors import DomainError
from pocketbook.domain.net_worth import cash_balance


@click.group()
def account_group():
    """Manage bank accounts and move money between them."""
    pass


@account_group.command("create")
@click.argument("name", metavar="ACCOUNT_NAME")
@click.option("--bank", help="Bank name (defaults to account name if not provided)")
@click.option("--balance", help="Opening balance (defaults to 0)")
@click.option("--notes", help="Notes")
@click.pass_context
def create_account(ctx, name: str, bank: str | None, balance: str | None, notes: str | None):
    """Create a new bank account.

    Examples:
        pocketbook account create "Salary Account" --bank "Commercial Bank" --balance 50000
        pocketbook account create "Savings"
    """
    service = AccountService(ctx.obj["book"])
    bank_name = bank if bank is not None else name

    opening = Decimal("0")
    if balance is not None:
        opening = parse_amount_or_exit(ctx, balance)

    try:
        account = service.create_account(name, bank_name, current_balance=opening, notes=notes)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created account '{name}' (ID: {short_id(account.id)})")
    if bank is None:
        click.echo(f"Bank name set to '{bank_name}'")


@account_group.command("list")
@click.pass_context
def list_accounts(ctx):
    """List bank accounts and the cash balance."""
    book = ctx.obj["book"]
    accounts = AccountService(book).list_accounts()

    click.echo("\nAccounts:")
    click.echo("-" * 70)
    for acc in accounts:
        click.echo(
            f"ID: {short_id(acc.id)} | {acc.account_name:20s} | {acc.bank_name:20s} | "
            f"{acc.current_balance:>12,.2f}"
        )
    if not accounts:
        click.echo("No accounts found.")
    click.echo(f"Cash in hand: {cash_balance(book.collection('transactions')):,.2f}")


@account_group.command("rename")
@click.argument("account", metavar="ACCOUNT")
@click.argument("new_name", metavar="NEW_NAME")
@click.option("--bank", help="New bank name (optional)")
@click.pass_context
def rename_account(ctx, account: str, new_name: str, bank: str | None) -> None:
    """Rename an account. ACCOUNT can be an account name or ID."""
    book = ctx.obj["book"]
    target = resolve_account_or_exit(ctx, book, account)
    try:
        AccountService(book).update_account(target.id, account_name=new_name, bank_name=bank)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Renamed account to '{new_name}'")


@account_group.command("delete")
@click.argument("account", metavar="ACCOUNT")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_account(ctx, account: str, yes: bool) -> None:
    """Delete an account nothing refers to.

    Accounts used by transactions, recurring rules, payments or the
    emergency fund settings cannot be deleted.
    """
    book = ctx.obj["book"]
    target = resolve_account_or_exit(ctx, book, account)

    if not yes and not click.confirm(f"Are you sure you want to delete account '{target.account_name}'?"):
        click.echo("Deletion cancelled.")
        return

    try:
        AccountService(book).delete_account(target.id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted account '{target.account_name}'")


@account_group.command("deposit-cash")
@click.argument("account", metavar="ACCOUNT")
@click.argument("amount")
@click.option("--date", "date_str", help="Transfer date (defaults to today)")
@click.option("--notes", help="Notes")
@click.pass_context
def deposit_cash(ctx, account: str, amount: str, date_str: str | None, notes: str | None):
    """Deposit cash in hand into a bank account."""
    book = ctx.obj["book"]
    target = resolve_account_or_exit(ctx, book, account)
    value = parse_amount_or_exit(ctx, amount)
    when = parse_date_or_exit(ctx, book, date_str)
    try:
        AccountService(book).transfer_cash_to_bank(target.id, value, when, notes)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deposited {value:,.2f} cash into '{target.account_name}'")


@account_group.command("transfer")
@click.argument("from_account", metavar="FROM")
@click.argument("to_account", metavar="TO")
@click.argument("amount")
@click.option("--date", "date_str", help="Transfer date (defaults to today)")
@click.option("--notes", help="Notes")
@click.pass_context
def transfer(ctx, from_account: str, to_account: str, amount: str, date_str: str | None, notes: str | None):
    """Transfer money between two bank accounts."""
    book = ctx.obj["book"]
    source = resolve_account_or_exit(ctx, book, from_account)
    target = resolve_account_or_exit(ctx, book, to_account)
    value = parse_amount_or_exit(ctx, amount)
    when = parse_date_or_exit(ctx, book, date_str)
    try:
        AccountService(book).inter_bank_transfer(source.id, target.id, value, when, notes)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Transferred {value:,.2f} from '{source.account_name}' to '{target.account_name}'")


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")
