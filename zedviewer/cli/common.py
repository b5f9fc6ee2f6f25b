"""
Options shared between CLI commands.
"""
import click


def db_option(func):
    """Add ``--db-path`` to a command."""
    return click.option(
        '--db-path',
        type=click.Path(dir_okay=False),
        help='Path to the entry store (default: ./datasources/unified.db)'
    )(func)


def starred_option(func):
    """Add ``--starred`` to a command."""
    return click.option(
        '--starred',
        is_flag=True,
        help='Only include starred entries'
    )(func)
