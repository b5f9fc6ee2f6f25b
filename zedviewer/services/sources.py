"""
Source collections consumed by the sync engine.

Each collection exposes the same small surface so the engine can reconcile
them with one loop:

- ``iter_versions()`` yields ``(business_key, change_value, handle)`` cheaply
- ``load(key, handle)`` fetches the raw record for extraction
- ``lookup(entries)`` returns ``business_key -> change_value`` for what the
  destination store already holds
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Iterator, Optional, Tuple

from zedviewer.core.config import (
    CONVERSATIONS_DIR,
    THREADS_DB_NAME,
    THREADS_DIR,
)
from zedviewer.core.db.repositories.entry import EntryRepository
from zedviewer.core.errors import ExtractionError
from zedviewer.core.models import EntryType
from zedviewer.extractors.base import BaseExtractor
from zedviewer.extractors.conversation import ConversationExtractor
from zedviewer.extractors.thread import ThreadExtractor
from zedviewer.readers.conversation_reader import ConversationFile, ConversationFileReader
from zedviewer.readers.thread_reader import ThreadStoreReader

logger = logging.getLogger(__name__)


class SourceCollection(ABC):
    """Common behavior of the two source collections."""

    entry_type: EntryType
    extractor: BaseExtractor

    @abstractmethod
    def exists(self) -> bool:
        """Whether the collection is present on disk."""

    @property
    @abstractmethod
    def location(self) -> Path:
        """Path of the collection, for log messages."""

    def __enter__(self) -> "SourceCollection":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        pass

    @abstractmethod
    def iter_versions(self) -> Iterator[Tuple[str, Any, Any]]:
        """Yield ``(business_key, change_value, handle)`` for every record."""

    def load(self, key: str, handle: Any) -> Any:
        return handle

    @abstractmethod
    def lookup(self, entries: EntryRepository) -> Dict[str, Any]:
        """Map business keys already in the store to their change values."""


class ConversationSource(SourceCollection):
    """Conversation export files, keyed by absolute path, versioned by mtime."""

    entry_type = EntryType.CONVERSATION

    def __init__(self, datasources_path: Path):
        self.reader = ConversationFileReader(Path(datasources_path) / CONVERSATIONS_DIR)
        self.extractor = ConversationExtractor()

    @property
    def location(self) -> Path:
        return self.reader.conversations_path

    def exists(self) -> bool:
        return self.reader.exists()

    def iter_versions(self) -> Iterator[Tuple[str, float, ConversationFile]]:
        for conversation_file in self.reader.iter_files():
            yield conversation_file.path, conversation_file.mtime, conversation_file

    def lookup(self, entries: EntryRepository) -> Dict[str, Optional[float]]:
        return entries.conversation_mtimes()


class ThreadSource(SourceCollection):
    """Thread store rows, keyed by thread id, versioned by ``updated_at``."""

    entry_type = EntryType.THREAD

    def __init__(self, datasources_path: Path):
        self.reader = ThreadStoreReader(
            Path(datasources_path) / THREADS_DIR / THREADS_DB_NAME
        )
        self.extractor = ThreadExtractor()

    @property
    def location(self) -> Path:
        return self.reader.db_path

    def exists(self) -> bool:
        return self.reader.exists()

    def __enter__(self) -> "ThreadSource":
        self.reader.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.reader.close()

    def iter_versions(self) -> Iterator[Tuple[str, Optional[str], str]]:
        # Materialized so the cursor is not held open while rows are loaded
        for thread_id, updated_at in list(self.reader.iter_versions()):
            yield thread_id, updated_at, thread_id

    def load(self, key: str, handle: str):
        row = self.reader.read_thread(handle)
        if row is None:
            raise ExtractionError(key, "thread disappeared from the source store")
        return row

    def lookup(self, entries: EntryRepository) -> Dict[str, Optional[str]]:
        return entries.thread_timestamps()
