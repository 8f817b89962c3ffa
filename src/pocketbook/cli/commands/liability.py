"""Loan and liability commands."""

from decimal import Decimal

import click

from pocketbook.cli.commands.add import METHODS
from pocketbook.cli.error_handling import handle_domain_error
from pocketbook.cli.resolution import (
    parse_amount_or_exit,
    parse_date_or_exit,
    resolve_account_or_exit,
    resolve_by_id_or_exit,
    resolve_card_or_exit,
    short_id,
)
from pocketbook.domain.entities import LiabilityType, PaymentStructure
from pocketbook.domain.errors import DomainError
from pocketbook.domain.liability import LiabilityService, PayoffStrategy


def _parse_rate(ctx, rate: str | None) -> Decimal | None:
    if rate is None:
        return None
    try:
        return Decimal(rate.rstrip("%"))
    except ArithmeticError:
        click.echo(f"Error: Invalid interest rate '{rate}'", err=True)
        ctx.exit(1)


@click.group()
def liability_group():
    """Track loans, leases and short-term debts."""
    pass


@liability_group.command("add-loan")
@click.argument("name")
@click.argument("amount")
@click.option("--lender", required=True, help="Lender name")
@click.option("--monthly", required=True, help="Monthly repayment")
@click.option(
    "--type",
    "loan_type",
    type=click.Choice([t.value for t in LiabilityType]),
    default=LiabilityType.PERSONAL_LOAN.value,
    show_default=True,
)
@click.option("--start", "start_str", help="Start date (defaults to today)")
@click.option("--end", "end_str", help="End date")
@click.option("--rate", help="Annual interest rate in percent")
@click.pass_context
def add_loan(
    ctx,
    name: str,
    amount: str,
    lender: str,
    monthly: str,
    loan_type: str,
    start_str: str | None,
    end_str: str | None,
    rate: str | None,
):
    """Add a long-term liability.

    Examples:
        pocketbook liability add-loan "Car loan" 2500000 --lender "Bank" --monthly 65000 --rate 14
    """
    book = ctx.obj["book"]
    try:
        liability = LiabilityService(book).add_long_term(
            name=name,
            type=LiabilityType(loan_type),
            lender=lender,
            original_amount=parse_amount_or_exit(ctx, amount),
            monthly_payment=parse_amount_or_exit(ctx, monthly),
            start_date=parse_date_or_exit(ctx, book, start_str),
            end_date=parse_date_or_exit(ctx, book, end_str) if end_str else None,
            interest_rate=_parse_rate(ctx, rate),
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Added loan '{name}' (ID: {short_id(liability.id)})")


@liability_group.command("add-short")
@click.argument("name")
@click.argument("amount")
@click.option("--lender", required=True, help="Lender name")
@click.option("--due", "due_str", required=True, help="Final due date")
@click.option("--installments", type=int, help="Number of monthly installments")
@click.option("--payment-day", type=click.IntRange(1, 31), help="Installment day of month")
@click.option("--rate", help="Interest rate in percent")
@click.pass_context
def add_short(
    ctx,
    name: str,
    amount: str,
    lender: str,
    due_str: str,
    installments: int | None,
    payment_day: int | None,
    rate: str | None,
):
    """Add a short-term liability, paid at once or in installments."""
    book = ctx.obj["book"]
    structure = PaymentStructure.INSTALLMENTS if installments else PaymentStructure.SINGLE
    try:
        liability = LiabilityService(book).add_short_term(
            name=name,
            lender=lender,
            original_amount=parse_amount_or_exit(ctx, amount),
            due_date=parse_date_or_exit(ctx, book, due_str),
            payment_structure=structure,
            number_of_installments=installments,
            payment_day_of_month=payment_day,
            interest_rate=_parse_rate(ctx, rate),
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Added short-term liability '{name}' (ID: {short_id(liability.id)})")


@liability_group.command("list")
@click.option(
    "--strategy",
    type=click.Choice([s.value for s in PayoffStrategy]),
    default=PayoffStrategy.DEFAULT.value,
    show_default=True,
    help="snowball: smallest balance first; avalanche: highest interest first",
)
@click.pass_context
def list_liabilities(ctx, strategy: str):
    """List liabilities with their repayment progress."""
    service = LiabilityService(ctx.obj["book"])
    order = PayoffStrategy(strategy)

    loans = service.list_long_term(order)
    click.echo("\nLong-term liabilities:")
    click.echo("-" * 90)
    if not loans:
        click.echo("None.")
    for loan in loans:
        stats = service.long_term_stats(loan.id)
        state = "paid off" if stats.is_paid_off else f"~{stats.estimated_months_to_payoff} month(s) left"
        click.echo(
            f"{short_id(loan.id)} | {loan.name:20s} | remaining {stats.remaining_balance:>14,.2f} | "
            f"paid {stats.total_paid:>12,.2f} | {state}"
        )

    short = service.list_short_term(order)
    click.echo("\nShort-term liabilities:")
    click.echo("-" * 90)
    if not short:
        click.echo("None.")
    for item in short:
        stats = service.short_term_stats(item.id)
        line = (
            f"{short_id(item.id)} | {item.name:20s} | remaining {stats.remaining:>14,.2f} | "
            f"due {item.due_date} | {stats.status.value}"
        )
        if stats.next_installment_due_date is not None:
            line += f" | next installment {stats.monthly_installment_amount:,.2f} on {stats.next_installment_due_date}"
            if stats.is_installment_overdue:
                line += " (overdue)"
        click.echo(line)


@liability_group.command("pay")
@click.argument("liability")
@click.argument("amount")
@click.option("--method", type=click.Choice(sorted(METHODS)), default="bank", show_default=True)
@click.option("--account", help="Paying bank account")
@click.option("--card", help="Paying credit card")
@click.option("--date", "date_str", help="Payment date (defaults to today)")
@click.pass_context
def pay_liability(
    ctx, liability: str, amount: str, method: str, account: str | None, card: str | None, date_str: str | None
):
    """Record a repayment. LIABILITY can be a name or ID of either kind."""
    book = ctx.obj["book"]
    service = LiabilityService(book)
    candidates = book.collection("long_term_liabilities") + book.collection("short_term_liabilities")
    target = resolve_by_id_or_exit(ctx, candidates, liability, "Liability", lambda l: l.name)
    value = parse_amount_or_exit(ctx, amount)
    when = parse_date_or_exit(ctx, book, date_str)
    account_id = resolve_account_or_exit(ctx, book, account).id if account else None
    card_id = resolve_card_or_exit(ctx, book, card).id if card else None

    pay = service.add_long_term_payment
    if service.get_short_term(target.id) is not None:
        pay = service.add_short_term_payment
    try:
        pay(target.id, value, when, METHODS[method], account_id, card_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Paid {value:,.2f} towards '{target.name}'")


@liability_group.command("delete")
@click.argument("liability")
@click.pass_context
def delete_liability(ctx, liability: str):
    """Delete a liability with no payments."""
    book = ctx.obj["book"]
    service = LiabilityService(book)
    candidates = book.collection("long_term_liabilities") + book.collection("short_term_liabilities")
    target = resolve_by_id_or_exit(ctx, candidates, liability, "Liability", lambda l: l.name)
    try:
        if service.get_short_term(target.id) is not None:
            service.delete_short_term(target.id)
        else:
            service.delete_long_term(target.id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted liability '{target.name}'")


def register_commands(cli):
    """Register liability commands with main CLI."""
    cli.add_command(liability_group, name="liability")
