"""
Web server command.

Starts the FastAPI app with uvicorn.
"""
import os

import click

from zedviewer.core.config import DATASOURCES_ENV, DB_PATH_ENV


@click.command()
@click.option(
    '--host',
    default='127.0.0.1',
    help='Host to bind to (default: 127.0.0.1)'
)
@click.option(
    '--port',
    type=int,
    default=5000,
    help='Port to bind to (default: 5000)'
)
@click.option(
    '--db-path',
    type=click.Path(dir_okay=False),
    help='Path to the entry store (default: ./datasources/unified.db)'
)
@click.option(
    '--datasources',
    type=click.Path(file_okay=False),
    help='Datasources directory used by the reload endpoint'
)
@click.option(
    '--reload',
    is_flag=True,
    help='Auto-reload on code changes'
)
def web(host, port, db_path, datasources, reload):
    """Start the API server for browsing imported entries."""
    # The app reads its paths from the environment so reload workers see them
    if db_path:
        os.environ[DB_PATH_ENV] = str(db_path)
    if datasources:
        os.environ[DATASOURCES_ENV] = str(datasources)

    import uvicorn

    click.echo(f"Starting zedviewer server on http://{host}:{port}")
    if reload:
        click.echo("  Auto-reload: enabled (server restarts on code changes)")
    click.echo("\nPress Ctrl+C to stop\n")

    uvicorn.run(
        "zedviewer.api.main:app",
        host=host,
        port=port,
        reload=reload
    )
