"""
Thread extractor.

Turns one row of the thread store into an ``Entry``: decompresses the
record, validates it against the model for its schema version and renders
its messages as markdown paragraphs.
"""

import json
import logging
from typing import Any, Callable, Dict, List, Optional

import zstandard
from pydantic import ValidationError

from zedviewer.core.errors import ExtractionError
from zedviewer.core.models import UNTITLED_THREAD, Entry, EntryType
from zedviewer.core.source_schemas.thread import (
    THREAD_VERSION_CURRENT,
    THREAD_VERSION_LEGACY,
    MessageBodyV3,
    ThreadRecord,
    ThreadRecordV2,
    ThreadRecordV3,
    parse_thread_record,
)
from zedviewer.readers.thread_reader import ThreadRow
from .base import BaseExtractor, project_label

logger = logging.getLogger(__name__)

DATA_TYPE_JSON = "json"


def decompress_thread_data(blob: bytes, data_type: Optional[str] = None) -> str:
    """
    Decode the ``data`` column of a thread row to JSON text.

    Rows are zstd-compressed unless the store marks them as plain JSON. The
    streaming decompressor is used because Zed does not always write the
    content size into the frame header.
    """
    if data_type == DATA_TYPE_JSON:
        return blob.decode("utf-8")
    decompressor = zstandard.ZstdDecompressor().decompressobj()
    return decompressor.decompress(blob).decode("utf-8")


def extract_thread_title(record: ThreadRecord, row_summary: Optional[str] = None) -> str:
    """
    Title of a thread.

    Current records carry ``title``, legacy ones ``summary``; the store's own
    ``summary`` column is the last resort before the placeholder.
    """
    for candidate in (record.title, record.summary, row_summary):
        if candidate:
            return candidate
    return UNTITLED_THREAD


def extract_thread_workspace(record: ThreadRecord) -> Optional[str]:
    """First worktree path of the thread's initial project snapshot."""
    snapshot = record.initial_project_snapshot
    if snapshot is None or not snapshot.worktree_snapshots:
        return None
    return snapshot.worktree_snapshots[0].worktree_path


def _render_content_item(item: Any) -> str:
    if isinstance(item, dict):
        if "Text" in item:
            return str(item["Text"] or "")
        if "ToolUse" in item:
            tool_use = item["ToolUse"] or {}
            name = tool_use.get("name") if isinstance(tool_use, dict) else None
            return f"`[Tool: {name or 'unknown'}]`"
        return ""
    if item is None:
        return ""
    return str(item)


def _render_body_v3(body: MessageBodyV3) -> str:
    # Items without text (Thinking, images) still take a slot in the join
    return " ".join(_render_content_item(item) for item in body.content)


def _render_v3(record: ThreadRecordV3) -> List[str]:
    paragraphs = []
    for message in record.messages:
        if isinstance(message, str):
            continue
        if message.User is not None:
            text = _render_body_v3(message.User)
            if text:
                paragraphs.append(f"**User:** {text}")
        elif message.Agent is not None:
            text = _render_body_v3(message.Agent)
            if text:
                paragraphs.append(f"**Agent:** {text}")
    return paragraphs


def _render_v2(record: ThreadRecordV2) -> List[str]:
    paragraphs = []
    for message in record.messages:
        role = message.role or "unknown"
        text = "".join(segment.text or "" for segment in message.segments)
        text = text.replace("\\n", "\n")
        if text:
            paragraphs.append(f"**{role.capitalize()}:** {text}")
    return paragraphs


CONTENT_RENDERERS: Dict[str, Callable[[Any], List[str]]] = {
    THREAD_VERSION_CURRENT: _render_v3,
    THREAD_VERSION_LEGACY: _render_v2,
}


def render_thread_content(record: ThreadRecord) -> str:
    """
    Render a thread's messages as markdown.

    Each non-empty message becomes one paragraph prefixed with a bold role
    label. Versions without a renderer produce an empty string.
    """
    renderer = CONTENT_RENDERERS.get(record.version)
    if renderer is None:
        logger.debug("No content renderer for thread version %r", record.version)
        return ""
    return "\n\n".join(renderer(record))


class ThreadExtractor(BaseExtractor):
    """Extractor for thread store rows."""

    @property
    def entry_type(self) -> EntryType:
        return EntryType.THREAD

    def extract(self, record: ThreadRow) -> Entry:
        """
        Decompress and normalize one thread row.

        Parameters
        ----------
        record : ThreadRow
            Raw row from the thread store

        Returns
        -------
        Entry
            Thread entry; ``full_json`` is the decompressed document verbatim

        Raises
        ------
        ExtractionError
            If the row cannot be decompressed, decoded or validated
        """
        try:
            json_text = decompress_thread_data(record.data, record.data_type)
        except (zstandard.ZstdError, UnicodeDecodeError) as e:
            raise ExtractionError(record.id, f"cannot decompress data: {e}", e) from e

        try:
            thread = parse_thread_record(json.loads(json_text))
        except json.JSONDecodeError as e:
            raise ExtractionError(record.id, f"invalid JSON: {e}", e) from e
        except (ValidationError, TypeError) as e:
            raise ExtractionError(record.id, f"unexpected shape: {e}", e) from e

        workspace_path = extract_thread_workspace(thread)
        return Entry(
            type=EntryType.THREAD,
            title=extract_thread_title(thread, record.summary),
            content=render_thread_content(thread),
            full_json=json_text,
            original_id=record.id,
            workspace_path=workspace_path,
            project=project_label(workspace_path),
            timestamp=record.updated_at,
        )
