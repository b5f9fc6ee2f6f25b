"""
Extractors turning raw Zed records into unified entries.
"""

from .base import BaseExtractor, common_path_prefix, project_label
from .conversation import (
    ConversationExtractor,
    extract_conversation_title,
    extract_conversation_workspace,
)
from .thread import (
    ThreadExtractor,
    decompress_thread_data,
    extract_thread_title,
    extract_thread_workspace,
    render_thread_content,
)

__all__ = [
    "BaseExtractor",
    "ConversationExtractor",
    "ThreadExtractor",
    "common_path_prefix",
    "decompress_thread_data",
    "extract_conversation_title",
    "extract_conversation_workspace",
    "extract_thread_title",
    "extract_thread_workspace",
    "project_label",
    "render_thread_content",
]
