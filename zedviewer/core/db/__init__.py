"""
Database module for the unified entry store.

Provides SQLite database with FTS5 full-text search capabilities
using a repository pattern architecture.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from zedviewer.core.config import get_default_db_path, get_stars_db_path
from zedviewer.core.errors import StoreNotReadyError
from .connection import DatabaseConnection
from .schema import SchemaManager, StarSchemaManager, needs_full_rebuild
from .repositories.entry import EntryRepository
from .repositories.star import StarRepository
from .search.fts import FTSManager


class Database:
    """
    Main database facade combining all repositories.

    One instance is created per process (or per request in the web server)
    and handed to the components that need it.

    Example
    -------
    >>> db = Database("datasources/unified.db")
    >>> rows = db.entries.search("python")
    >>> db.stars.toggle(rows[0]["id"])
    """

    def __init__(
        self,
        db_path: Optional[Union[str, Path]] = None,
        stars_path: Optional[Union[str, Path]] = None,
        ensure_schema: bool = True,
    ):
        """
        Initialize database connection and repositories.

        Parameters
        ----------
        db_path : str or Path, optional
            Path to the entry store. If None, uses the configured default.
        stars_path : str or Path, optional
            Path to the star store. Defaults to ``stars.db`` beside ``db_path``.
        ensure_schema : bool
            Create and migrate the entry store. Read-only callers pass False:
            the store is then opened as it is and never written.

        Raises
        ------
        StoreNotReadyError
            If ``ensure_schema`` is False and the store is missing or predates
            the current layout.
        """
        if db_path is None:
            db_path = get_default_db_path()
        if not ensure_schema and needs_full_rebuild(db_path):
            raise StoreNotReadyError(
                f"Entry store {db_path} is missing or outdated; run a full import first"
            )

        self.conn = DatabaseConnection(str(db_path))
        if stars_path is None:
            stars_path = get_stars_db_path(Path(self.conn.db_path))
        self.stars_path = str(stars_path)

        if ensure_schema:
            SchemaManager(self.conn).ensure()
        self.conn.attach(self.stars_path, "stars")
        StarSchemaManager(self.conn).ensure()

        # Search
        self.fts = FTSManager(self.conn)

        # Repositories
        self.entries = EntryRepository(self.conn)
        self.stars = StarRepository(self.conn, self.entries)

    @property
    def db_path(self) -> str:
        return self.conn.db_path

    def close(self):
        """Close the database connection."""
        self.conn.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, *args):
        """Context manager exit."""
        self.close()

    # --- Convenience delegates used by the CLI and web layer ---

    def list_entries(self, starred_only: bool = False) -> List[Dict[str, Any]]:
        """Delegate to EntryRepository.list()."""
        return self.entries.list(starred_only=starred_only)

    def search(self, query: str, starred_only: bool = False) -> List[Dict[str, Any]]:
        """Delegate to EntryRepository.search()."""
        return self.entries.search(query, starred_only=starred_only)

    def toggle_star(self, entry_id: int) -> Optional[bool]:
        """Delegate to StarRepository.toggle()."""
        return self.stars.toggle(entry_id)

    def rebuild_search_index(self) -> int:
        """Delegate to FTSManager.rebuild_index()."""
        return self.fts.rebuild_index()


__all__ = [
    "Database",
    "DatabaseConnection",
    "EntryRepository",
    "FTSManager",
    "SchemaManager",
    "StarRepository",
    "StarSchemaManager",
    "needs_full_rebuild",
]
