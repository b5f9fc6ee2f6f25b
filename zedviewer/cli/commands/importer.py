"""
Import command.

Syncs Zed conversation exports and agent threads into the local entry store.
Also installed on its own as ``zed-import``.
"""
import logging
from pathlib import Path

import click

from zedviewer.core.config import get_default_datasources_path, get_default_db_path
from zedviewer.core.errors import SetupError
from zedviewer.core.models import CollectionStats, SyncMode
from zedviewer.services.importer import SyncEngine


def _echo_stats(label: str, stats: CollectionStats) -> None:
    if stats.skipped_source:
        click.secho(f"  {label}: source not found, skipped", fg='yellow')
        return
    click.echo(
        f"  {label}: {stats.added} added, {stats.updated} updated, "
        f"{stats.deleted} deleted, {stats.unchanged} unchanged"
    )
    if stats.errors:
        click.secho(f"    {stats.errors} failed", fg='yellow')


@click.command('import')
@click.argument('source_path', required=False, type=click.Path(file_okay=False))
@click.argument('destination_path', required=False, type=click.Path(dir_okay=False))
@click.option(
    '--full',
    is_flag=True,
    help='Rebuild the destination from scratch instead of syncing incrementally'
)
@click.pass_context
def import_command(ctx, source_path, destination_path, full):
    """Import Zed conversations and threads into the entry store.

    SOURCE_PATH is the datasources directory holding conversations/ and
    threads/threads.db (default: ./datasources). DESTINATION_PATH is the
    entry store (default: ./datasources/unified.db).
    """
    if ctx.obj is None:
        # Standalone ``zed-import`` has no parent group to set up logging
        logging.basicConfig(
            level=logging.INFO,
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        )

    source = Path(source_path) if source_path else get_default_datasources_path()
    if destination_path:
        destination = Path(destination_path)
    elif ctx.obj is not None and ctx.obj.db_path:
        destination = Path(ctx.obj.db_path)
    else:
        destination = get_default_db_path()

    mode = SyncMode.FULL if full else SyncMode.INCREMENTAL
    click.echo(f"Importing from {source} into {destination} ({mode.value} mode)...")

    try:
        report = SyncEngine(source, destination).run(mode)
    except SetupError as e:
        click.secho(f"Import failed: {e}", fg='red', err=True)
        raise click.Abort()

    click.echo("\nImport complete!")
    if report.mode != mode:
        click.secho(f"  Ran as {report.mode.value} import", fg='yellow')
    _echo_stats("Conversations", report.conversations)
    _echo_stats("Threads", report.threads)

    for failure in report.failures:
        click.secho(
            f"Warning: skipped {failure.collection.value} {failure.key}: {failure.message}",
            fg='yellow',
            err=True
        )
