"""
Base repository class providing common database operations.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..connection import DatabaseConnection


class BaseRepository:
    """
    Base class for all repository implementations.

    Provides common database access patterns and utilities. Repositories do
    not commit on their own when called inside ``DatabaseConnection.transaction()``;
    outside a transaction every statement is committed as it runs.
    """

    def __init__(self, conn: "DatabaseConnection"):
        """
        Initialize repository with database connection.

        Parameters
        ----------
        conn : DatabaseConnection
            Database connection to use for operations.
        """
        self._conn = conn

    def cursor(self):
        """Get a new cursor for database operations."""
        return self._conn.cursor()
