"""
Click-based command line interface.

Usage::

    zedviewer import [SOURCE_PATH] [DESTINATION_PATH] [--full]
    zedviewer search QUERY [--starred] [--limit N]
    zedviewer rebuild-index
    zedviewer web [--host HOST] [--port PORT]
"""
import logging
from pathlib import Path

import click

from zedviewer import __version__
from zedviewer.cli.context import CLIContext
from zedviewer.cli.commands.database import rebuild_index, search
from zedviewer.cli.commands.importer import import_command
from zedviewer.cli.commands.web import web


@click.group()
@click.version_option(__version__, prog_name='zedviewer')
@click.option(
    '--db-path',
    type=click.Path(dir_okay=False),
    help='Path to the entry store (default: ./datasources/unified.db)'
)
@click.option('-v', '--verbose', is_flag=True, help='Enable debug logging')
@click.pass_context
def main(ctx, db_path, verbose):
    """Browse and search archived Zed AI conversations and threads."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )
    ctx.obj = CLIContext(Path(db_path) if db_path else None, verbose)
    ctx.call_on_close(ctx.obj.close)


main.add_command(import_command)
main.add_command(search)
main.add_command(rebuild_index)
main.add_command(web)
