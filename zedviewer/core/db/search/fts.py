"""
FTS5 index management for entry search.

The index is normally kept in step by the triggers created in
``SchemaManager``; this module covers the bulk paths (full rebuilds and
repairing an empty index).
"""

import logging
from typing import TYPE_CHECKING

from ..schema import FTS_TABLE

if TYPE_CHECKING:
    from ..connection import DatabaseConnection

logger = logging.getLogger(__name__)


class FTSManager:
    """
    Manages the entries FTS5 index.

    Handles rebuilding the full-text search index over entry titles,
    content and project labels.
    """

    def __init__(self, conn: "DatabaseConnection"):
        """
        Initialize FTS manager.

        Parameters
        ----------
        conn : DatabaseConnection
            Database connection
        """
        self._conn = conn

    def cursor(self):
        """Get a database cursor."""
        return self._conn.cursor()

    def indexed_count(self) -> int:
        """
        Number of rows held by the index itself.

        ``SELECT COUNT(*) FROM entries_fts`` would read through to the
        ``entries`` content table, so this counts the docsize shadow table.
        """
        cursor = self.cursor()
        cursor.execute(f"SELECT COUNT(*) FROM {FTS_TABLE}_docsize")
        return cursor.fetchone()[0]

    def rebuild_index(self) -> int:
        """
        Rebuild the FTS index from all existing entries.

        Discards whatever the index currently holds and repopulates it from
        the entries table in one pass.

        Returns
        -------
        int
            Number of entries indexed
        """
        cursor = self.cursor()
        cursor.execute(f"INSERT INTO {FTS_TABLE}({FTS_TABLE}) VALUES ('rebuild')")
        cursor.execute("SELECT COUNT(*) FROM entries")
        count = cursor.fetchone()[0]
        logger.info("Rebuilt FTS index with %d entries", count)
        return count

