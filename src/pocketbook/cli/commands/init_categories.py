"""Initialize default categories."""

import click

from pocketbook.domain.category import CategoryService
from pocketbook.domain.defaults import DEFAULT_CATEGORIES


@click.command("init-categories")
@click.pass_context
def init_categories(ctx):
    """Add the default category set.

    System categories used by transfers and payments always exist. This
    adds the everyday income and expense categories; running it again only
    adds ones that are missing.
    """
    book = ctx.obj["book"]
    service = CategoryService(book)

    added = service.init_default_categories()
    if added == 0:
        click.echo("Default categories already exist.")
    else:
        click.echo(f"Added {added} of {len(DEFAULT_CATEGORIES)} default categories.")


def register_commands(cli):
    """Register init-categories command with main CLI."""
    cli.add_command(init_categories)
