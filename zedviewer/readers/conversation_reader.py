"""
Reader for Zed conversation export files.

Conversations are stored as ``<datasources>/conversations/*.zed.json``.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Union

from zedviewer.core.config import CONVERSATION_GLOB

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConversationFile:
    """A conversation file on disk and its modification time."""

    path: str
    mtime: float

    @property
    def name(self) -> str:
        return os.path.basename(self.path)

    def read_text(self) -> str:
        return Path(self.path).read_text(encoding="utf-8")


class ConversationFileReader:
    """
    Enumerates conversation export files.

    Paths are resolved to absolute strings; they are the business key of the
    resulting entries, so the same file maps to the same key no matter how the
    datasources root was spelled on the command line.
    """

    def __init__(self, conversations_path: Union[str, Path]):
        self.conversations_path = Path(conversations_path)

    def exists(self) -> bool:
        return self.conversations_path.is_dir()

    def iter_files(self) -> Iterator[ConversationFile]:
        """
        Yield every ``*.zed.json`` file with its current mtime.

        Files removed between listing and ``stat`` are skipped.
        """
        for path in sorted(self.conversations_path.glob(CONVERSATION_GLOB)):
            if not path.is_file():
                continue
            try:
                mtime = path.stat().st_mtime
            except FileNotFoundError:
                logger.debug("Conversation file vanished during scan: %s", path)
                continue
            yield ConversationFile(path=str(path.resolve()), mtime=mtime)
