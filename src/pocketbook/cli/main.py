"""Main CLI entry point."""

import click

from pocketbook.database.factories import create_sqlite_store
from pocketbook.domain.state import Book
from pocketbook.logging_config import DEFAULT_LEVEL, setup_logging

# Import and register all commands at module level
from pocketbook.cli.commands import (
    account,
    add,
    backup,
    budget,
    card,
    category,
    forecast,
    goal,
    init_categories,
    liability,
    networth,
    payable,
    receivable,
    recurring,
    transaction,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides POCKETBOOK_DB_PATH environment variable)",
    envvar="POCKETBOOK_DB_PATH",
)
@click.option(
    "--log-level",
    default=DEFAULT_LEVEL,
    show_default=True,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Log level (overrides POCKETBOOK_LOG_LEVEL environment variable)",
    envvar="POCKETBOOK_LOG_LEVEL",
)
@click.option("--log-json", is_flag=True, help="Write log records as JSON lines")
@click.pass_context
def cli(ctx, db_path: str | None, log_level: str, log_json: bool):
    """Pocketbook - personal finance tracker.

    Keep a ledger of income and expenses across cash, bank accounts and
    credit cards, and track debts, loans, goals, budgets and recurring
    bills with derived balances and statuses.
    """
    ctx.ensure_object(dict)

    # Open the store only when actually running a command (not when showing help)
    if ctx.invoked_subcommand is not None:
        setup_logging(log_level, json_format=log_json)
        store = create_sqlite_store(database_path=db_path)
        store.connect()
        ctx.call_on_close(store.disconnect)
        ctx.obj["book"] = Book(store)


# Register all commands
init_categories.register_commands(cli)
account.register_commands(cli)
card.register_commands(cli)
category.register_commands(cli)
add.register_commands(cli)
transaction.register_commands(cli)
receivable.register_commands(cli)
payable.register_commands(cli)
liability.register_commands(cli)
goal.register_commands(cli)
recurring.register_commands(cli)
budget.register_commands(cli)
forecast.register_commands(cli)
networth.register_commands(cli)
backup.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
