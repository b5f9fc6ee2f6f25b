"""
Conversation extractor.

Turns a ``*.zed.json`` conversation export into an ``Entry``. The export
already carries its rendered text, so content is taken as-is; the title and
workspace are derived from the summary, the filename and the slash-command
sections.
"""

import json
import logging
import os
import re
from datetime import datetime
from typing import List, Optional

from pydantic import ValidationError

from zedviewer.core.errors import ExtractionError
from zedviewer.core.models import UNTITLED_CONVERSATION, Entry, EntryType
from zedviewer.core.source_schemas.conversation import ConversationExport
from zedviewer.readers.conversation_reader import ConversationFile
from .base import BaseExtractor, common_path_prefix, project_label

logger = logging.getLogger(__name__)

CONVERSATION_SUFFIX = ".zed.json"
_LEADING_DASH = re.compile(r"^\s*-\s*")


def extract_conversation_title(data: ConversationExport, file_path: str) -> str:
    """
    Title of a conversation.

    Uses the export's own summary when present, otherwise the filename
    without its ``.zed.json`` suffix and leading ``"- "``.

    >>> extract_conversation_title(ConversationExport(summary=""), "/x/- foo.zed.json")
    'foo'
    """
    if data.summary:
        return data.summary

    name = os.path.basename(file_path)
    if name.endswith(CONVERSATION_SUFFIX):
        name = name[: -len(CONVERSATION_SUFFIX)]
    title = _LEADING_DASH.sub("", name).strip()
    return title or UNTITLED_CONVERSATION


def extract_conversation_workspace(data: ConversationExport) -> Optional[str]:
    """
    Workspace root inferred from the paths slash commands inserted.

    One distinct path is used as-is; several collapse to their common prefix.
    """
    paths: List[str] = []
    for section in data.slash_command_output_sections:
        path = section.path
        if path and path not in paths:
            paths.append(path)

    if not paths:
        return None
    if len(paths) == 1:
        return paths[0]
    return common_path_prefix(paths)


def format_mtime(mtime: float) -> str:
    """Render a file mtime as local ISO-8601 with UTC offset."""
    return datetime.fromtimestamp(mtime).astimezone().isoformat(timespec="seconds")


class ConversationExtractor(BaseExtractor):
    """Extractor for conversation export files."""

    @property
    def entry_type(self) -> EntryType:
        return EntryType.CONVERSATION

    def extract(self, record: ConversationFile) -> Entry:
        """
        Read and normalize one conversation file.

        Parameters
        ----------
        record : ConversationFile
            File path and the mtime observed when it was listed

        Returns
        -------
        Entry
            Conversation entry; ``full_json`` is the file text verbatim

        Raises
        ------
        ExtractionError
            If the file cannot be read or is not a valid export
        """
        try:
            raw_text = record.read_text()
            data = ConversationExport.model_validate(json.loads(raw_text))
        except (OSError, UnicodeDecodeError) as e:
            raise ExtractionError(record.path, f"cannot read file: {e}", e) from e
        except json.JSONDecodeError as e:
            raise ExtractionError(record.path, f"invalid JSON: {e}", e) from e
        except ValidationError as e:
            raise ExtractionError(record.path, f"unexpected shape: {e}", e) from e

        workspace_path = extract_conversation_workspace(data)
        return Entry(
            type=EntryType.CONVERSATION,
            title=extract_conversation_title(data, record.path),
            content=data.text or "",
            full_json=raw_text,
            file_path=record.path,
            workspace_path=workspace_path,
            project=project_label(workspace_path),
            timestamp=format_mtime(record.mtime),
            file_mtime=record.mtime,
        )
