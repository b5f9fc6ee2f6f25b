"""
Database schema management for the entry store.

Provides SchemaManager class that handles table creation, additive
migrations, indexes, and the FTS5 virtual table with its sync triggers,
plus ``needs_full_rebuild`` which decides whether an existing store can be
reconciled incrementally at all.
"""

import logging
import sqlite3
from pathlib import Path
from typing import TYPE_CHECKING, List, Union

if TYPE_CHECKING:
    from .connection import DatabaseConnection

logger = logging.getLogger(__name__)

FTS_TABLE = "entries_fts"
FTS_COLUMNS = ("title", "content", "project")
FTS_TRIGGERS = ("entries_ai", "entries_ad", "entries_au")
BUSINESS_KEY_INDEXES = (
    ("idx_entries_conversation_key", "conversation", "file_path"),
    ("idx_entries_thread_key", "thread", "original_id"),
)


def _table_columns(cursor, table: str) -> List[str]:
    cursor.execute(f"PRAGMA table_info({table})")
    return [row[1] for row in cursor.fetchall()]


def needs_full_rebuild(db_path: Union[str, Path]) -> bool:
    """
    Check whether the destination store must be rebuilt from scratch.

    A store that does not exist yet, or one whose ``entries`` table predates
    the ``project`` column, cannot be reconciled incrementally.

    Parameters
    ----------
    db_path : str or Path
        Destination store path

    Returns
    -------
    bool
        True if the caller must discard the store and run a full import
    """
    path = Path(db_path)
    if not path.exists():
        return True

    conn = sqlite3.connect(str(path))
    try:
        columns = _table_columns(conn.cursor(), "entries")
    except sqlite3.DatabaseError as e:
        logger.warning("Cannot inspect %s (%s); treating it as unusable", path, e)
        return True
    finally:
        conn.close()

    return "project" not in columns


class SchemaManager:
    """
    Manages database schema creation and migrations.

    This class handles:
    - Initial table creation
    - Column migrations for existing tables
    - FTS5 virtual table setup
    - Index creation, including unique business keys
    - Trigger setup for FTS sync
    """

    def __init__(self, conn: "DatabaseConnection"):
        """
        Initialize schema manager.

        Parameters
        ----------
        conn : DatabaseConnection
            Database connection to use for schema operations.
        """
        self._conn = conn

    def ensure(self) -> None:
        """Ensure all database schema exists and is up to date."""
        cursor = self._conn.cursor()

        self._create_entries_table(cursor)
        self._migrate_entries_table(cursor)
        self._create_indexes(cursor)
        self._create_business_key_indexes(cursor)

        rebuilt = self._migrate_entries_fts(cursor)
        self._create_entries_fts(cursor)
        self._create_fts_triggers(cursor)

        if rebuilt:
            self._rebuild_entries_fts(cursor)
        else:
            self._check_entries_fts_populated(cursor)

        logger.debug("Database schema initialized at %s", self._conn.db_path)

    def _create_entries_table(self, cursor) -> None:
        """Create entries table."""
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS entries (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                type TEXT NOT NULL,
                title TEXT NOT NULL,
                content TEXT NOT NULL,
                full_json TEXT NOT NULL,
                file_path TEXT,
                workspace_path TEXT,
                project TEXT,
                original_id TEXT,
                timestamp TEXT,
                file_mtime REAL,
                created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
            )
        """)

    def _migrate_entries_table(self, cursor) -> None:
        """Apply migrations for entries table."""
        columns = _table_columns(cursor, "entries")

        if "file_mtime" not in columns:
            cursor.execute("ALTER TABLE entries ADD COLUMN file_mtime REAL")
            logger.info("Added file_mtime column to entries table")

        if "project" not in columns:
            cursor.execute("ALTER TABLE entries ADD COLUMN project TEXT")
            cursor.execute(
                "CREATE INDEX IF NOT EXISTS idx_entries_project ON entries(project)"
            )
            logger.info("Added project column to entries table")

    def _create_indexes(self, cursor) -> None:
        """Create performance indexes."""
        indexes = [
            ("idx_entries_type", "entries", "type"),
            ("idx_entries_title", "entries", "title"),
            ("idx_entries_file_path", "entries", "file_path"),
            ("idx_entries_original_id", "entries", "original_id"),
            ("idx_entries_project", "entries", "project"),
            ("idx_entries_timestamp", "entries", "timestamp"),
        ]

        for idx_name, table, column in indexes:
            cursor.execute(
                f"CREATE INDEX IF NOT EXISTS {idx_name} ON {table}({column})"
            )

    def _create_business_key_indexes(self, cursor) -> None:
        """
        Enforce one entry per business key.

        Stores written before these indexes existed may hold duplicates; all
        but the oldest row per key are removed before the index is created.
        """
        for idx_name, entry_type, column in BUSINESS_KEY_INDEXES:
            cursor.execute(
                "SELECT 1 FROM sqlite_master WHERE type = 'index' AND name = ?",
                (idx_name,),
            )
            if cursor.fetchone() is not None:
                continue

            cursor.execute(
                f"""
                DELETE FROM entries
                WHERE type = ? AND {column} IS NOT NULL AND id NOT IN (
                    SELECT MIN(id) FROM entries
                    WHERE type = ? AND {column} IS NOT NULL
                    GROUP BY {column}
                )
            """,
                (entry_type, entry_type),
            )
            if cursor.rowcount > 0:
                logger.info(
                    "Removed %d duplicate %s entries before adding %s",
                    cursor.rowcount,
                    entry_type,
                    idx_name,
                )
            cursor.execute(
                f"CREATE UNIQUE INDEX {idx_name} ON entries({column}) "
                f"WHERE type = '{entry_type}'"
            )

    def _migrate_entries_fts(self, cursor) -> bool:
        """
        Drop an FTS table from an older layout so it is recreated.

        Returns True when the index was dropped and must be repopulated.
        """
        cursor.execute(
            "SELECT name FROM sqlite_master WHERE type = 'table' AND name = ?",
            (FTS_TABLE,),
        )
        if cursor.fetchone() is None:
            return False

        columns = _table_columns(cursor, FTS_TABLE)
        if tuple(columns) == FTS_COLUMNS:
            return False

        for trigger in FTS_TRIGGERS:
            cursor.execute(f"DROP TRIGGER IF EXISTS {trigger}")
        cursor.execute(f"DROP TABLE {FTS_TABLE}")
        logger.info(
            "Dropped %s with columns %s; recreating with %s",
            FTS_TABLE,
            columns,
            list(FTS_COLUMNS),
        )
        return True

    def _create_entries_fts(self, cursor) -> None:
        """Create FTS5 virtual table mirroring title, content and project."""
        cursor.execute(f"""
            CREATE VIRTUAL TABLE IF NOT EXISTS {FTS_TABLE} USING fts5(
                title,
                content,
                project,
                content='entries',
                content_rowid='id',
                tokenize='porter unicode61'
            )
        """)

    def _create_fts_triggers(self, cursor) -> None:
        """Create triggers to keep FTS in sync with entries table."""
        cursor.execute(f"""
            CREATE TRIGGER IF NOT EXISTS entries_ai AFTER INSERT ON entries BEGIN
                INSERT INTO {FTS_TABLE}(rowid, title, content, project)
                VALUES (new.id, new.title, new.content, new.project);
            END
        """)

        cursor.execute(f"""
            CREATE TRIGGER IF NOT EXISTS entries_ad AFTER DELETE ON entries BEGIN
                INSERT INTO {FTS_TABLE}({FTS_TABLE}, rowid, title, content, project)
                VALUES ('delete', old.id, old.title, old.content, old.project);
            END
        """)

        cursor.execute(f"""
            CREATE TRIGGER IF NOT EXISTS entries_au AFTER UPDATE ON entries BEGIN
                INSERT INTO {FTS_TABLE}({FTS_TABLE}, rowid, title, content, project)
                VALUES ('delete', old.id, old.title, old.content, old.project);
                INSERT INTO {FTS_TABLE}(rowid, title, content, project)
                VALUES (new.id, new.title, new.content, new.project);
            END
        """)

    def _check_entries_fts_populated(self, cursor) -> None:
        """Rebuild the FTS index if it is empty while entries exist."""
        cursor.execute(f"SELECT COUNT(*) FROM {FTS_TABLE}_docsize")
        indexed_count = cursor.fetchone()[0]
        cursor.execute("SELECT COUNT(*) FROM entries")
        entry_count = cursor.fetchone()[0]

        if entry_count > 0 and indexed_count == 0:
            logger.info("Rebuilding FTS index for %d entries...", entry_count)
            self._rebuild_entries_fts(cursor)

    def _rebuild_entries_fts(self, cursor) -> None:
        """Rebuild the FTS index from the entries table."""
        cursor.execute(f"INSERT INTO {FTS_TABLE}({FTS_TABLE}) VALUES ('rebuild')")
        logger.info("Rebuilt %s from entries", FTS_TABLE)


class StarSchemaManager:
    """Creates the star table in the (attached) star store."""

    def __init__(self, conn: "DatabaseConnection", schema: str = "stars"):
        self._conn = conn
        self._schema = schema

    def ensure(self) -> None:
        cursor = self._conn.cursor()
        cursor.execute(f"""
            CREATE TABLE IF NOT EXISTS {self._schema}.stars (
                entry_type TEXT NOT NULL,
                business_key TEXT NOT NULL,
                starred_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
                PRIMARY KEY (entry_type, business_key)
            )
        """)
