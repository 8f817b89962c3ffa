"""Category management commands."""

import click

from pocketbook.cli.error_handling import handle_domain_error
from pocketbook.cli.resolution import resolve_category_or_exit
from pocketbook.domain.category import SYSTEM_CATEGORY_IDS, CategoryService
from pocketbook.domain.entities import TaxRelevance
from pocketbook.domain.errors import DomainError

TAX_CHOICES = [t.value for t in TaxRelevance]


@click.group()
def category_group():
    """Manage categories."""
    pass


@category_group.command("list")
@click.option("--no-system", is_flag=True, help="Hide built-in transfer and payment categories")
@click.pass_context
def list_categories(ctx, no_system: bool):
    """List categories."""
    service = CategoryService(ctx.obj["book"])
    categories = service.list_categories(include_system=not no_system)
    if not categories:
        click.echo("No categories found.")
        return
    for cat in categories:
        marker = " (system)" if cat.id in SYSTEM_CATEGORY_IDS else ""
        click.echo(f"{cat.id:34s} {cat.name}{marker} [tax: {cat.default_tax_relevance.value}]")


@category_group.command("create")
@click.argument("name")
@click.option("--tax", type=click.Choice(TAX_CHOICES), default="none", help="Default tax relevance")
@click.pass_context
def create_category(ctx, name: str, tax: str):
    """Create a category.

    Examples:
        pocketbook category create "Pet Care"
        pocketbook category create "Consulting" --tax income
    """
    service = CategoryService(ctx.obj["book"])
    try:
        category = service.create_category(name, TaxRelevance(tax))
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created category '{category.name}' (ID: {category.id})")


@category_group.command("delete")
@click.argument("category")
@click.pass_context
def delete_category(ctx, category: str):
    """Delete an unused category. CATEGORY can be a name or ID."""
    book = ctx.obj["book"]
    target = resolve_category_or_exit(ctx, book, category)
    try:
        CategoryService(book).delete_category(target.id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted category '{target.name}'")


def register_commands(cli):
    """Register category commands with main CLI."""
    cli.add_command(category_group, name="category")
