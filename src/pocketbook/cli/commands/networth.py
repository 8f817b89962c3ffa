"""Net worth commands."""

import click

from pocketbook.domain.net_worth import NetWorthService


@click.group(invoke_without_command=True)
@click.pass_context
def networth_group(ctx):
    """Show net worth. Use a subcommand to record or list snapshots."""
    if ctx.invoked_subcommand is not None:
        return
    service = NetWorthService(ctx.obj["book"])
    summary = service.compute_net_worth()
    click.echo(f"Cash in hand:      {service.cash_balance():>14,.2f}")
    click.echo(f"Total assets:      {summary.total_assets:>14,.2f}")
    click.echo(f"Total liabilities: {summary.total_liabilities:>14,.2f}")
    click.echo("-" * 34)
    click.echo(f"Net worth:         {summary.net_worth:>14,.2f}")


@networth_group.command("snapshot")
@click.pass_context
def snapshot(ctx):
    """Record today's net worth in the history."""
    recorded = NetWorthService(ctx.obj["book"]).record_snapshot()
    click.echo(f"Recorded net worth {recorded.net_worth:,.2f} for {recorded.date}")


@networth_group.command("history")
@click.pass_context
def history(ctx):
    """List recorded snapshots, oldest first."""
    snapshots = NetWorthService(ctx.obj["book"]).history()
    if not snapshots:
        click.echo("No snapshots recorded.")
        return
    for item in snapshots:
        click.echo(
            f"{item.date}  assets {item.assets:>14,.2f}  liabilities {item.liabilities:>14,.2f}  "
            f"net {item.net_worth:>14,.2f}"
        )


def register_commands(cli):
    """Register net worth commands with main CLI."""
    cli.add_command(networth_group, name="networth")
