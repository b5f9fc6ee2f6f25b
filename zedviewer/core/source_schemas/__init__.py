"""
Source schema models for ingestion.

These Pydantic models represent the raw Zed data structures (conversation
exports and thread records) before normalization into entries.
"""

from .conversation import (
    ConversationExport,
    SectionRange,
    SlashCommandOutputSection,
)
from .thread import (
    THREAD_SCHEMAS,
    THREAD_VERSION_CURRENT,
    THREAD_VERSION_LEGACY,
    MessageBodyV3,
    ProjectSnapshot,
    SegmentV2,
    ThreadMessageV2,
    ThreadMessageV3,
    ThreadRecord,
    ThreadRecordUnknown,
    ThreadRecordV2,
    ThreadRecordV3,
    WorktreeSnapshot,
    parse_thread_record,
)

__all__ = [
    # Conversation models
    "ConversationExport",
    "SectionRange",
    "SlashCommandOutputSection",
    # Thread models
    "THREAD_SCHEMAS",
    "THREAD_VERSION_CURRENT",
    "THREAD_VERSION_LEGACY",
    "MessageBodyV3",
    "ProjectSnapshot",
    "SegmentV2",
    "ThreadMessageV2",
    "ThreadMessageV3",
    "ThreadRecord",
    "ThreadRecordUnknown",
    "ThreadRecordV2",
    "ThreadRecordV3",
    "WorktreeSnapshot",
    "parse_thread_record",
]
