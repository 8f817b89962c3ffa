"""Cash-flow forecast command."""

import click

from pocketbook.cli.error_handling import handle_domain_error
from pocketbook.cli.resolution import resolve_account_or_exit
from pocketbook.domain.errors import DomainError
from pocketbook.domain.projection import CASH_ACCOUNT, INFLOW, ProjectionService


def register_commands(cli):
    """Register forecast command with main CLI."""

    @cli.command("forecast")
    @click.option("--days", type=int, default=30, show_default=True, help="Number of days to project")
    @click.option(
        "--account",
        "accounts",
        multiple=True,
        help="Bank account name or ID, or 'cash'. Repeat to combine. Defaults to all accounts and cash.",
    )
    @click.option("--all-days", is_flag=True, help="Show days without any activity")
    @click.pass_context
    def forecast(ctx, days: int, accounts: tuple[str, ...], all_days: bool):
        """Project balances from recurring rules and open debts.

        Examples:
            pocketbook forecast --days 60
            pocketbook forecast --account Salary --account cash
        """
        book = ctx.obj["book"]
        if accounts:
            account_ids = [
                CASH_ACCOUNT if ref.lower() == CASH_ACCOUNT else resolve_account_or_exit(ctx, book, ref).id
                for ref in accounts
            ]
        else:
            account_ids = [a.id for a in book.collection("bank_accounts")] + [CASH_ACCOUNT]

        try:
            projection = ProjectionService(book).for_accounts(days, account_ids)
        except DomainError as e:
            handle_domain_error(ctx, e)

        if not projection:
            click.echo("Nothing to project.")
            return

        click.echo(f"Starting balance: {projection[0].start_balance:,.2f}")
        lowest = min(projection, key=lambda d: d.end_balance)
        for day in projection:
            if not day.events and not all_days:
                continue
            click.echo(f"\n{day.date} (closing {day.end_balance:,.2f})")
            for event in day.events:
                sign = "+" if event.type == INFLOW else "-"
                click.echo(f"  {sign}{event.amount:,.2f}  {event.description}")
        click.echo(f"\nClosing balance after {days} day(s): {projection[-1].end_balance:,.2f}")
        click.echo(f"Lowest balance: {lowest.end_balance:,.2f} on {lowest.date}")
