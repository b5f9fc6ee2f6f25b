"""
Entry browsing service for the CLI and web layer.

Wraps the entry store reads with the list formatting used by the viewer:
``[YYYY-MM-DD] 𝐀 [project] title`` for threads and the same with ``𝐓`` for
conversations.
"""
import json
import logging
import re
from datetime import datetime
from typing import Any, Dict, List, Optional

from zedviewer.core.db import Database
from zedviewer.core.models import EntryType

logger = logging.getLogger(__name__)

THREAD_SYMBOL = "𝐀"
CONVERSATION_SYMBOL = "𝐓"
_LEADING_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}")


def format_entry_date(timestamp: Optional[str]) -> Optional[str]:
    """
    Calendar date of an ISO-8601 timestamp, or None if it cannot be parsed.

    >>> format_entry_date("2024-05-01T09:30:00Z")
    '2024-05-01'
    """
    if not timestamp:
        return None
    value = timestamp.strip()
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(value).strftime("%Y-%m-%d")
    except ValueError:
        pass
    # Nanosecond fractions and other variants still lead with the date
    match = _LEADING_DATE.match(value)
    if match:
        return match.group(0)
    logger.debug("Unparseable entry timestamp: %r", timestamp)
    return None


def format_display_title(entry: Dict[str, Any]) -> str:
    """
    List label of an entry.

    Parameters
    ----------
    entry : Dict[str, Any]
        Entry row with at least ``type``, ``title``, ``project`` and ``timestamp``

    Returns
    -------
    str
        Label such as ``[2024-05-01] 𝐓 [myapp] Refactor the parser``
    """
    symbol = THREAD_SYMBOL if entry.get("type") == EntryType.THREAD.value else CONVERSATION_SYMBOL
    parts = []
    date = format_entry_date(entry.get("timestamp"))
    if date:
        parts.append(f"[{date}]")
    parts.append(symbol)
    if entry.get("project"):
        parts.append(f"[{entry['project']}]")
    parts.append(entry.get("title") or "")
    return " ".join(parts)


class EntryService:
    """
    Read-side operations over the entry store.

    Parameters
    ----------
    db : Database
        Open store handle; the service does not close it
    """

    def __init__(self, db: Database):
        self.db = db

    def _summaries(self, rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        return [
            {
                "id": row["id"],
                "type": row["type"],
                "title": row["title"],
                "display_title": format_display_title(row),
                "project": row["project"],
                "timestamp": row["timestamp"],
                "starred": row["starred"],
            }
            for row in rows
        ]

    def list_titles(self, starred_only: bool = False, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """All entries, newest first, as list summaries."""
        return self._summaries(self.db.entries.list(starred_only=starred_only, limit=limit))

    def search(
        self, query: str, starred_only: bool = False, limit: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        """
        Full-text search returning list summaries.

        Blank queries return nothing rather than every entry.
        """
        if not query or not query.strip():
            return []
        rows = self.db.entries.search(query, starred_only=starred_only, limit=limit)
        logger.debug("Search %r matched %d entries", query, len(rows))
        return self._summaries(rows)

    def get_detail(self, entry_id: int) -> Optional[Dict[str, Any]]:
        """Full entry row with ``display_title``, or None if missing."""
        entry = self.db.entries.get(entry_id)
        if entry is None:
            return None
        entry["display_title"] = format_display_title(entry)
        return entry

    def get_json(self, entry_id: int) -> Optional[Any]:
        """
        Parsed source document of an entry.

        Returns None if the entry does not exist. A document that no longer
        parses is returned as its raw text.
        """
        entry = self.db.entries.get(entry_id)
        if entry is None:
            return None
        try:
            return json.loads(entry["full_json"])
        except (TypeError, json.JSONDecodeError):
            logger.warning("Entry %d holds unparseable JSON", entry_id)
            return entry["full_json"]

    def toggle_star(self, entry_id: int) -> Optional[bool]:
        """New star state of the entry, or None if it does not exist."""
        return self.db.stars.toggle(entry_id)

    def counts(self) -> Dict[str, int]:
        """Number of entries per type, including zero counts."""
        counts = self.db.entries.count_by_type()
        return {entry_type.value: counts.get(entry_type.value, 0) for entry_type in EntryType}
