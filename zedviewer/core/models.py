"""
Domain models for the unified entry store.

These models represent conversations and threads after normalization,
independent of the Zed on-disk formats they were imported from, plus the
bookkeeping produced by an import run.

All models use Pydantic for validation, serialization, and type safety.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

UNTITLED_CONVERSATION = "Untitled Conversation"
UNTITLED_THREAD = "Untitled Thread"


class EntryType(str, Enum):
    """Kind of source record an entry was imported from."""

    CONVERSATION = "conversation"
    THREAD = "thread"


class SyncMode(str, Enum):
    """Import run modes."""

    FULL = "full"
    INCREMENTAL = "incremental"


class Entry(BaseModel):
    """
    One conversation or thread in the destination store.

    Conversations are identified by ``file_path``, threads by ``original_id``;
    ``id`` is a surrogate key assigned by the store.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    id: Optional[int] = None
    type: EntryType
    title: str
    content: str = ""
    full_json: str
    file_path: Optional[str] = None
    workspace_path: Optional[str] = None
    project: Optional[str] = None
    original_id: Optional[str] = None
    timestamp: Optional[str] = None
    file_mtime: Optional[float] = None
    created_at: Optional[str] = None

    @property
    def business_key(self) -> Optional[str]:
        """Natural key used to reconcile the entry with its source record."""
        if self.type == EntryType.CONVERSATION:
            return self.file_path
        return self.original_id

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to dictionary for database storage.

        The surrogate ``id`` and ``created_at`` are assigned by the store and
        are not part of the written row.
        """
        return {
            "type": self.type.value,
            "title": self.title,
            "content": self.content,
            "full_json": self.full_json,
            "file_path": self.file_path,
            "workspace_path": self.workspace_path,
            "project": self.project,
            "original_id": self.original_id,
            "timestamp": self.timestamp,
            "file_mtime": self.file_mtime,
        }


class RecordFailure(BaseModel):
    """A source record that could not be extracted or written."""

    collection: EntryType
    key: str
    message: str


class CollectionStats(BaseModel):
    """Per-collection counters for one import run."""

    added: int = 0
    updated: int = 0
    deleted: int = 0
    unchanged: int = 0
    skipped_source: bool = False
    failures: List[RecordFailure] = Field(default_factory=list)

    @property
    def errors(self) -> int:
        return len(self.failures)


class SyncReport(BaseModel):
    """Outcome of one import run."""

    mode: SyncMode
    conversations: CollectionStats = Field(default_factory=CollectionStats)
    threads: CollectionStats = Field(default_factory=CollectionStats)
    started_at: datetime = Field(default_factory=datetime.now)
    finished_at: Optional[datetime] = None

    @property
    def failures(self) -> List[RecordFailure]:
        return self.conversations.failures + self.threads.failures

    def stats_for(self, entry_type: EntryType) -> CollectionStats:
        """Return the counters for one collection."""
        if entry_type == EntryType.CONVERSATION:
            return self.conversations
        return self.threads
