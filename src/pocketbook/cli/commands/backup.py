"""Backup export and restore commands."""

from pathlib import Path

import click

from pocketbook.cli.error_handling import handle_domain_error
from pocketbook.domain.backup import BackupService
from pocketbook.domain.errors import DomainError


@click.group()
def backup_group():
    """Export or restore the whole book as JSON."""
    pass


@backup_group.command("export")
@click.argument("path", type=click.Path(dir_okay=False, path_type=Path))
@click.pass_context
def export_backup(ctx, path: Path):
    """Write every collection to PATH."""
    written = BackupService(ctx.obj["book"]).export_to_file(path)
    click.echo(f"Backup written to {written}")


@backup_group.command("import")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def import_backup(ctx, path: Path, yes: bool):
    """Replace all data with the contents of PATH."""
    if not yes and not click.confirm("This replaces all existing data. Continue?"):
        click.echo("Import cancelled.")
        return
    try:
        BackupService(ctx.obj["book"]).import_from_file(path)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Restored backup from {path}")


def register_commands(cli):
    """Register backup commands with main CLI."""
    cli.add_command(backup_group, name="backup")
