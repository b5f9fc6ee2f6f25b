"""
Database connection management for the entry store.

Provides a DatabaseConnection class that handles SQLite connection
lifecycle, WAL mode configuration, explicit transactions, and context
manager support.
"""

import logging
import sqlite3
from contextlib import contextmanager
from typing import Iterator, Optional

from zedviewer.core.config import get_default_db_path
from zedviewer.core.errors import SetupError

logger = logging.getLogger(__name__)


class DatabaseConnection:
    """
    SQLite database connection with WAL mode and context manager support.

    The connection runs in autocommit mode; units of work are opened
    explicitly with ``transaction()`` and nested with ``savepoint()``.
    """

    def __init__(self, db_path: Optional[str] = None):
        """
        Initialize database connection.

        Parameters
        ----------
        db_path : str, optional
            Path to database file. If None, uses the configured default.

        Raises
        ------
        SetupError
            If the database file cannot be opened.
        """
        if db_path is None:
            db_path = str(get_default_db_path())

        self.db_path = str(db_path)
        self._conn: Optional[sqlite3.Connection] = None
        self._connect()

    def _connect(self) -> None:
        """Establish database connection with WAL mode."""
        try:
            self._conn = sqlite3.connect(
                self.db_path, check_same_thread=False, isolation_level=None
            )
            self._conn.row_factory = sqlite3.Row

            # The importer (writer) and the web server (reader) may share the file
            cursor = self._conn.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.fetchone()
        except sqlite3.Error as e:
            raise SetupError(f"Cannot open database {self.db_path}: {e}") from e

        logger.debug("Database connection established: %s", self.db_path)

    @property
    def connection(self) -> sqlite3.Connection:
        """Get the underlying SQLite connection."""
        if self._conn is None:
            self._connect()
        return self._conn

    def cursor(self) -> sqlite3.Cursor:
        """Get a new cursor for the database connection."""
        return self.connection.cursor()

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Cursor]:
        """
        Run a block as one unit of work.

        Commits when the block exits normally and rolls back when it raises,
        leaving the store as it was before the block.
        """
        cursor = self.cursor()
        cursor.execute("BEGIN")
        try:
            yield cursor
        except BaseException:
            self.connection.rollback()
            raise
        else:
            self.connection.commit()

    @contextmanager
    def savepoint(self, name: str = "record") -> Iterator[sqlite3.Cursor]:
        """
        Run a block inside a savepoint of the current transaction.

        A failing block is rolled back on its own; the enclosing transaction
        stays open.
        """
        cursor = self.cursor()
        cursor.execute(f"SAVEPOINT {name}")
        try:
            yield cursor
        except BaseException:
            cursor.execute(f"ROLLBACK TO {name}")
            cursor.execute(f"RELEASE {name}")
            raise
        else:
            cursor.execute(f"RELEASE {name}")

    def attach(self, path: str, alias: str) -> None:
        """Attach another SQLite file under ``alias``."""
        try:
            self.connection.execute(f"ATTACH DATABASE ? AS {alias}", (str(path),))
        except sqlite3.Error as e:
            raise SetupError(f"Cannot attach database {path}: {e}") from e
        logger.debug("Attached %s as %s", path, alias)

    def close(self) -> None:
        """Close the database connection."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None
            logger.debug("Database connection closed: %s", self.db_path)

    def __enter__(self) -> "DatabaseConnection":
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit - close connection."""
        self.close()
