"""CLI helpers for turning option values into entities, dates and amounts.

Each helper prints a consistent error and exits when the value is invalid.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import click

from pocketbook.cli.error_handling import handle_domain_error
from pocketbook.domain.entities import BankAccount, Category, CreditCard
from pocketbook.domain.state import Book
from pocketbook.utils.amount_parser import parse_amount
from pocketbook.utils.date_parser import parse_date, parse_month
from pocketbook.utils.resolver import resolve_entity


def resolve_account_or_exit(ctx: click.Context, book: Book, reference: str) -> BankAccount:
    """Resolve a bank account by name, ID or ID prefix, or exit with a CLI error."""
    try:
        return resolve_entity(
            book.collection("bank_accounts"), reference, lambda a: a.account_name, "Account"
        )
    except ValueError as exc:
        handle_domain_error(ctx, exc)


def resolve_card_or_exit(ctx: click.Context, book: Book, reference: str) -> CreditCard:
    """Resolve a credit card by name, ID or ID prefix, or exit with a CLI error."""
    try:
        return resolve_entity(book.collection("credit_cards"), reference, lambda c: c.name, "Card")
    except ValueError as exc:
        handle_domain_error(ctx, exc)


def resolve_category_or_exit(ctx: click.Context, book: Book, reference: str) -> Category:
    """Resolve a category by name or ID, or exit with a CLI error."""
    try:
        return resolve_entity(book.collection("categories"), reference, lambda c: c.name, "Category")
    except ValueError as exc:
        handle_domain_error(ctx, exc)


def resolve_by_id_or_exit(ctx: click.Context, entities: list, reference: str, kind: str, name_of):
    """Resolve any entity with an ``id`` by ID, prefix or display name."""
    try:
        return resolve_entity(entities, reference, name_of, kind)
    except ValueError as exc:
        handle_domain_error(ctx, exc)


def parse_date_or_exit(ctx: click.Context, book: Book, value: str | None) -> date:
    """Parse a date option, defaulting to the book's today."""
    if value is None:
        return book.today()
    try:
        return parse_date(value, today=book.today())
    except ValueError as exc:
        click.echo(f"Error: Invalid date format: {exc}", err=True)
        ctx.exit(1)


def parse_month_or_exit(ctx: click.Context, book: Book, value: str | None) -> date:
    """Parse a month option into its first day, defaulting to this month."""
    if value is None:
        return book.today().replace(day=1)
    try:
        return parse_month(value, today=book.today())
    except ValueError as exc:
        click.echo(f"Error: Invalid month: {exc}", err=True)
        ctx.exit(1)


def parse_amount_or_exit(ctx: click.Context, value: str) -> Decimal:
    try:
        return parse_amount(value)
    except ValueError as exc:
        click.echo(f"Error: Invalid amount format: {exc}", err=True)
        ctx.exit(1)


def short_id(entity_id: str) -> str:
    """Shortened ID for listings; any unique prefix resolves back to the entity."""
    return entity_id[:8]
