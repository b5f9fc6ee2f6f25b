"""
Star repository for the user's starred entries.

Stars are stored in a separate SQLite file attached as ``stars`` and keyed
by ``(entry_type, business_key)``, never by surrogate entry id.
"""

import logging
from typing import Optional, Set, Tuple

from zedviewer.core.models import EntryType
from .base import BaseRepository
from .entry import EntryRepository

logger = logging.getLogger(__name__)


class StarRepository(BaseRepository):
    """
    Repository for star operations.

    Handles starring, unstarring and querying entries by business key.
    """

    def __init__(self, conn, entries: EntryRepository):
        """
        Initialize star repository.

        Parameters
        ----------
        conn : DatabaseConnection
            Connection with the star store attached as ``stars``
        entries : EntryRepository
            Used to resolve surrogate ids to business keys
        """
        super().__init__(conn)
        self._entries = entries

    def is_starred(self, entry_type: EntryType, key: str) -> bool:
        cursor = self.cursor()
        cursor.execute(
            "SELECT 1 FROM stars.stars WHERE entry_type = ? AND business_key = ?",
            (entry_type.value, key),
        )
        return cursor.fetchone() is not None

    def star(self, entry_type: EntryType, key: str) -> None:
        cursor = self.cursor()
        cursor.execute(
            "INSERT OR IGNORE INTO stars.stars (entry_type, business_key) VALUES (?, ?)",
            (entry_type.value, key),
        )

    def unstar(self, entry_type: EntryType, key: str) -> None:
        cursor = self.cursor()
        cursor.execute(
            "DELETE FROM stars.stars WHERE entry_type = ? AND business_key = ?",
            (entry_type.value, key),
        )

    def toggle(self, entry_id: int) -> Optional[bool]:
        """
        Flip the star state of an entry.

        Parameters
        ----------
        entry_id : int
            Surrogate id of the entry

        Returns
        -------
        Optional[bool]
            New star state, or None if the entry does not exist
        """
        resolved = self._entries.get_business_key(entry_id)
        if resolved is None:
            return None
        entry_type, key = resolved

        with self._conn.transaction():
            if self.is_starred(entry_type, key):
                self.unstar(entry_type, key)
                starred = False
            else:
                self.star(entry_type, key)
                starred = True

        logger.info(
            "%s %s %s", "Starred" if starred else "Unstarred", entry_type.value, key
        )
        return starred

    def all_keys(self) -> Set[Tuple[str, str]]:
        """Return every starred ``(entry_type, business_key)`` pair."""
        cursor = self.cursor()
        cursor.execute("SELECT entry_type, business_key FROM stars.stars")
        return {(row[0], row[1]) for row in cursor.fetchall()}
