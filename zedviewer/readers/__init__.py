"""
Readers for the Zed data sources.

Readers enumerate raw source records; they do not parse or normalize them.
"""

from .conversation_reader import ConversationFile, ConversationFileReader
from .thread_reader import ThreadRow, ThreadStoreReader

__all__ = [
    "ConversationFile",
    "ConversationFileReader",
    "ThreadRow",
    "ThreadStoreReader",
]
