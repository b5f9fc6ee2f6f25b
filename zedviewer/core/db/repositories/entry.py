"""
Entry repository for database operations on conversations and threads.
"""

import logging
import sqlite3
from typing import Any, Dict, List, Optional, Tuple

from zedviewer.core.models import Entry, EntryType
from ..search.query import build_match_query
from .base import BaseRepository

logger = logging.getLogger(__name__)

BUSINESS_KEY_COLUMNS = {
    EntryType.CONVERSATION: "file_path",
    EntryType.THREAD: "original_id",
}

ENTRY_COLUMNS = (
    "id",
    "type",
    "title",
    "content",
    "full_json",
    "file_path",
    "workspace_path",
    "project",
    "original_id",
    "timestamp",
    "file_mtime",
    "created_at",
)

_SELECT_COLUMNS = ", ".join(f"e.{column}" for column in ENTRY_COLUMNS)

# Stars are matched by business key so they survive surrogate id changes
_STAR_JOIN = """
    LEFT JOIN stars.stars s
        ON s.entry_type = e.type
        AND s.business_key = COALESCE(e.file_path, e.original_id)
"""


def _row_to_dict(row: sqlite3.Row) -> Dict[str, Any]:
    data = dict(row)
    if "starred" in data:
        data["starred"] = bool(data["starred"])
    return data


class EntryRepository(BaseRepository):
    """
    Repository for entry CRUD operations.

    Write methods are used by the import pipeline and address rows by
    business key; read methods back the serving layer.
    """

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def insert(self, entry: Entry) -> int:
        """
        Insert a new entry.

        Parameters
        ----------
        entry : Entry
            Entry to insert (its ``id`` is ignored)

        Returns
        -------
        int
            Surrogate id assigned by the store
        """
        row = entry.to_dict()
        columns = ", ".join(row.keys())
        placeholders = ", ".join("?" for _ in row)
        cursor = self.cursor()
        cursor.execute(
            f"INSERT INTO entries ({columns}) VALUES ({placeholders})",
            tuple(row.values()),
        )
        return cursor.lastrowid

    def update(self, entry: Entry) -> bool:
        """
        Overwrite the derived fields of the entry with the same business key.

        The surrogate ``id`` and ``created_at`` of the existing row are kept.

        Parameters
        ----------
        entry : Entry
            Freshly extracted entry

        Returns
        -------
        bool
            True if a row was updated
        """
        key_column = BUSINESS_KEY_COLUMNS[entry.type]
        cursor = self.cursor()
        cursor.execute(
            f"""
            UPDATE entries
            SET title = ?, content = ?, full_json = ?, workspace_path = ?,
                project = ?, timestamp = ?, file_mtime = ?
            WHERE type = ? AND {key_column} = ?
        """,
            (
                entry.title,
                entry.content,
                entry.full_json,
                entry.workspace_path,
                entry.project,
                entry.timestamp,
                entry.file_mtime,
                entry.type.value,
                entry.business_key,
            ),
        )
        return cursor.rowcount > 0

    def delete_by_business_key(self, entry_type: EntryType, key: str) -> int:
        """
        Delete the entries of one type with the given business key.

        Returns
        -------
        int
            Number of rows deleted
        """
        key_column = BUSINESS_KEY_COLUMNS[entry_type]
        cursor = self.cursor()
        cursor.execute(
            f"DELETE FROM entries WHERE type = ? AND {key_column} = ?",
            (entry_type.value, key),
        )
        return cursor.rowcount

    # ------------------------------------------------------------------
    # Change-detection lookups
    # ------------------------------------------------------------------

    def conversation_mtimes(self) -> Dict[str, Optional[float]]:
        """Map each conversation's file path to its last observed mtime."""
        cursor = self.cursor()
        cursor.execute(
            "SELECT file_path, file_mtime FROM entries WHERE type = ?",
            (EntryType.CONVERSATION.value,),
        )
        return {row[0]: row[1] for row in cursor.fetchall()}

    def thread_timestamps(self) -> Dict[str, Optional[str]]:
        """Map each thread's original id to its source ``updated_at``."""
        cursor = self.cursor()
        cursor.execute(
            "SELECT original_id, timestamp FROM entries WHERE type = ?",
            (EntryType.THREAD.value,),
        )
        return {row[0]: row[1] for row in cursor.fetchall()}

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list(
        self, starred_only: bool = False, limit: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        """
        List entries, newest first.

        Parameters
        ----------
        starred_only : bool
            Only return entries whose business key is starred
        limit : int, optional
            Maximum number of entries

        Returns
        -------
        List[Dict[str, Any]]
            Entry rows with all columns plus ``starred``
        """
        where = "WHERE s.business_key IS NOT NULL" if starred_only else ""
        limit_clause = "LIMIT ?" if limit is not None else ""
        params: Tuple = (limit,) if limit is not None else ()

        cursor = self.cursor()
        cursor.execute(
            f"""
            SELECT {_SELECT_COLUMNS}, s.business_key IS NOT NULL AS starred
            FROM entries e
            {_STAR_JOIN}
            {where}
            ORDER BY e.timestamp DESC, e.id DESC
            {limit_clause}
        """,
            params,
        )
        return [_row_to_dict(row) for row in cursor.fetchall()]

    def search(
        self, query: str, starred_only: bool = False, limit: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        """
        Full-text search over title, content and project.

        The last query term is prefix-matched. Results use the same ordering
        as ``list``. Malformed FTS syntax returns no results.

        Parameters
        ----------
        query : str
            Search text
        starred_only : bool
            Only return starred entries
        limit : int, optional
            Maximum number of entries

        Returns
        -------
        List[Dict[str, Any]]
            Matching entry rows with all columns plus ``starred``
        """
        fts_query = build_match_query(query)
        if fts_query is None:
            return []

        star_filter = "AND s.business_key IS NOT NULL" if starred_only else ""
        limit_clause = "LIMIT ?" if limit is not None else ""
        params: Tuple = (fts_query,) + ((limit,) if limit is not None else ())

        cursor = self.cursor()
        try:
            cursor.execute(
                f"""
                SELECT {_SELECT_COLUMNS}, s.business_key IS NOT NULL AS starred
                FROM entries e
                JOIN entries_fts ON entries_fts.rowid = e.id
                {_STAR_JOIN}
                WHERE entries_fts MATCH ?
                {star_filter}
                ORDER BY e.timestamp DESC, e.id DESC
                {limit_clause}
            """,
                params,
            )
        except sqlite3.OperationalError as e:
            logger.debug("FTS query error for '%s': %s", query, e)
            return []
        return [_row_to_dict(row) for row in cursor.fetchall()]

    def get(self, entry_id: int) -> Optional[Dict[str, Any]]:
        """
        Get one entry by surrogate id.

        Returns
        -------
        Optional[Dict[str, Any]]
            All columns plus ``starred``, or None if not found
        """
        cursor = self.cursor()
        cursor.execute(
            f"""
            SELECT {_SELECT_COLUMNS}, s.business_key IS NOT NULL AS starred
            FROM entries e
            {_STAR_JOIN}
            WHERE e.id = ?
        """,
            (entry_id,),
        )
        row = cursor.fetchone()
        if not row:
            return None
        return _row_to_dict(row)

    def get_business_key(self, entry_id: int) -> Optional[Tuple[EntryType, str]]:
        """Resolve a surrogate id to ``(type, business_key)``."""
        cursor = self.cursor()
        cursor.execute(
            "SELECT type, COALESCE(file_path, original_id) FROM entries WHERE id = ?",
            (entry_id,),
        )
        row = cursor.fetchone()
        if not row or row[1] is None:
            return None
        return EntryType(row[0]), row[1]

    def count_by_type(self) -> Dict[str, int]:
        """Count entries per type."""
        cursor = self.cursor()
        cursor.execute("SELECT type, COUNT(*) FROM entries GROUP BY type")
        return {row[0]: row[1] for row in cursor.fetchall()}
