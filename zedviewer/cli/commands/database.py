"""
Entry store CLI commands.

Commands for searching the entry store from the terminal and repairing its
full-text index.
"""
import sqlite3
from pathlib import Path

import click

from zedviewer.cli.common import db_option, starred_option
from zedviewer.core.errors import SetupError
from zedviewer.services.browser import EntryService


@click.command()
@click.argument('query')
@click.option(
    '--limit',
    default=20,
    help='Maximum number of results'
)
@starred_option
@db_option
@click.pass_context
def search(ctx, query, limit, starred, db_path):
    """Search entries in the local store."""
    if db_path:
        ctx.obj.db_path = Path(db_path)

    try:
        db = ctx.obj.get_db()
        results = EntryService(db).search(query, starred_only=starred, limit=limit)
    except (SetupError, sqlite3.Error) as e:
        click.secho(f"Error during search: {e}", fg='red', err=True)
        raise click.Abort()

    if not results:
        click.echo(f"No entries found matching '{query}'")
        return

    click.secho(f"\nFound {len(results)} entries matching '{query}':\n", fg='green')
    for entry in results:
        star = '* ' if entry['starred'] else ''
        click.echo(f"{entry['id']:>6}  {star}{entry['display_title']}")


@click.command('rebuild-index')
@db_option
@click.pass_context
def rebuild_index(ctx, db_path):
    """Rebuild the full-text search index.

    Run this if search results seem incomplete. The index covers entry
    titles, content and project labels.
    """
    click.echo("Rebuilding search index...")

    if db_path:
        ctx.obj.db_path = Path(db_path)

    try:
        db = ctx.obj.get_db()
        with db.conn.transaction():
            count = db.rebuild_search_index()
    except (SetupError, sqlite3.Error) as e:
        click.secho(f"Error rebuilding index: {e}", fg='red', err=True)
        raise click.Abort()

    click.secho(f"Search index rebuilt with {count} entries", fg='green')
