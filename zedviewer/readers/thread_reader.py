"""
Reader for the Zed agent thread store.

Threads are rows of ``<datasources>/threads/threads.db``::

    threads(id TEXT, summary TEXT, updated_at TEXT, data BLOB[, data_type TEXT])

``data`` is usually a zstd-compressed JSON document; newer stores record the
encoding in ``data_type`` (``"zstd"`` or ``"json"``).
"""

import logging
import sqlite3
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional, Tuple, Union

from zedviewer.core.errors import SourceStoreError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ThreadRow:
    """One raw row of the thread store."""

    id: str
    summary: Optional[str]
    data: bytes
    updated_at: Optional[str]
    data_type: Optional[str] = None


class ThreadStoreReader:
    """
    Read-only access to the thread store.

    ``iter_versions`` only reads ids and ``updated_at`` so unchanged threads
    can be skipped without touching their blobs; ``read_thread`` loads one
    full row on demand.

    Example
    -------
    >>> with ThreadStoreReader("datasources/threads/threads.db") as reader:
    ...     for thread_id, updated_at in reader.iter_versions():
    ...         row = reader.read_thread(thread_id)
    """

    def __init__(self, db_path: Union[str, Path]):
        self.db_path = Path(db_path)
        self._conn: Optional[sqlite3.Connection] = None
        self._has_data_type = False

    def exists(self) -> bool:
        return self.db_path.is_file()

    def open(self) -> None:
        """
        Open the store read-only.

        Raises
        ------
        SourceStoreError
            If the file cannot be opened or has no ``threads`` table
        """
        uri = self.db_path.resolve().as_uri() + "?mode=ro"
        try:
            self._conn = sqlite3.connect(uri, uri=True)
            cursor = self._conn.cursor()
            cursor.execute("PRAGMA table_info(threads)")
            columns = {row[1] for row in cursor.fetchall()}
        except sqlite3.Error as e:
            self.close()
            raise SourceStoreError(f"Cannot read thread store {self.db_path}: {e}") from e

        missing = {"id", "summary", "data", "updated_at"} - columns
        if missing:
            self.close()
            raise SourceStoreError(
                f"Thread store {self.db_path} lacks columns: {', '.join(sorted(missing))}"
            )
        self._has_data_type = "data_type" in columns
        logger.debug("Opened thread store %s", self.db_path)

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def __enter__(self) -> "ThreadStoreReader":
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    @property
    def _row_columns(self) -> str:
        columns = "id, summary, data, updated_at"
        if self._has_data_type:
            columns += ", data_type"
        return columns

    def _to_row(self, row) -> ThreadRow:
        data = row[2]
        if isinstance(data, str):
            data = data.encode("utf-8")
        return ThreadRow(
            id=str(row[0]),
            summary=row[1],
            data=bytes(data) if data is not None else b"",
            updated_at=row[3],
            data_type=row[4] if self._has_data_type else None,
        )

    def _execute(self, sql: str, params: Tuple = ()) -> sqlite3.Cursor:
        if self._conn is None:
            raise SourceStoreError("Thread store is not open")
        try:
            return self._conn.execute(sql, params)
        except sqlite3.Error as e:
            raise SourceStoreError(f"Cannot query thread store {self.db_path}: {e}") from e

    def iter_versions(self) -> Iterator[Tuple[str, Optional[str]]]:
        """Yield ``(thread_id, updated_at)`` for every thread."""
        cursor = self._execute("SELECT id, updated_at FROM threads ORDER BY id")
        for row in cursor:
            yield str(row[0]), row[1]

    def read_thread(self, thread_id: str) -> Optional[ThreadRow]:
        """Load one full row, or None if it disappeared."""
        cursor = self._execute(
            f"SELECT {self._row_columns} FROM threads WHERE id = ?", (thread_id,)
        )
        row = cursor.fetchone()
        if row is None:
            return None
        return self._to_row(row)

