"""
Pydantic models for Zed agent thread records.

Threads live in ``threads/threads.db``; each row holds a zstd-compressed JSON
document whose message layout depends on its ``version`` field:

- ``0.2.0`` (legacy): ``{"role": "user", "segments": [{"text": ...}]}``
- ``0.3.0`` (current): ``{"User": {"content": [...]}}`` or
  ``{"Agent": {"content": [...]}}`` where content items are ``{"Text": str}``,
  ``{"ToolUse": {"name": ...}}`` or other tagged variants.

Records are parsed into one model per version. ``parse_thread_record`` picks
the model from the ``version`` value through ``THREAD_SCHEMAS``; versions we
do not know are kept as ``ThreadRecordUnknown`` so their title and workspace
can still be read.
"""

from typing import Any, Dict, List, Literal, Optional, Type, Union

from pydantic import BaseModel, ConfigDict, Field

THREAD_VERSION_LEGACY = "0.2.0"
THREAD_VERSION_CURRENT = "0.3.0"


class WorktreeSnapshot(BaseModel):
    """One worktree captured when the thread started."""

    model_config = ConfigDict(extra="allow")

    worktree_path: Optional[str] = None


class ProjectSnapshot(BaseModel):
    """Project state captured when the thread started."""

    model_config = ConfigDict(extra="allow")

    worktree_snapshots: List[WorktreeSnapshot] = Field(default_factory=list)


class ThreadRecordBase(BaseModel):
    """Fields shared by every thread schema version."""

    model_config = ConfigDict(extra="allow")

    version: Optional[str] = None
    title: Optional[str] = None
    summary: Optional[str] = None
    initial_project_snapshot: Optional[ProjectSnapshot] = None


# --- 0.2.0 ---


class SegmentV2(BaseModel):
    """Text segment of a legacy message."""

    model_config = ConfigDict(extra="allow")

    type: Optional[str] = None
    text: Optional[str] = None


class ThreadMessageV2(BaseModel):
    """Legacy role-tagged message."""

    model_config = ConfigDict(extra="allow")

    role: Optional[str] = None
    segments: List[SegmentV2] = Field(default_factory=list)


class ThreadRecordV2(ThreadRecordBase):
    """Thread document in the legacy ``0.2.0`` layout."""

    version: Literal["0.2.0"]
    messages: List[ThreadMessageV2] = Field(default_factory=list)


# --- 0.3.0 ---


class MessageBodyV3(BaseModel):
    """Body of a ``User`` or ``Agent`` message."""

    model_config = ConfigDict(extra="allow")

    id: Optional[Any] = None
    content: List[Any] = Field(default_factory=list)


class ThreadMessageV3(BaseModel):
    """Externally tagged message: exactly one of ``User``/``Agent`` is set."""

    model_config = ConfigDict(extra="allow")

    User: Optional[MessageBodyV3] = None
    Agent: Optional[MessageBodyV3] = None


class ThreadRecordV3(ThreadRecordBase):
    """Thread document in the current ``0.3.0`` layout."""

    version: Literal["0.3.0"]
    # Unit variants such as "Resume" serialize as bare strings.
    messages: List[Union[ThreadMessageV3, str]] = Field(default_factory=list)


class ThreadRecordUnknown(ThreadRecordBase):
    """Thread document with a version this importer has no renderer for."""

    messages: List[Any] = Field(default_factory=list)


ThreadRecord = Union[ThreadRecordV2, ThreadRecordV3, ThreadRecordUnknown]

THREAD_SCHEMAS: Dict[str, Type[ThreadRecordBase]] = {
    THREAD_VERSION_LEGACY: ThreadRecordV2,
    THREAD_VERSION_CURRENT: ThreadRecordV3,
}


def parse_thread_record(data: Dict[str, Any]) -> ThreadRecord:
    """
    Validate a decoded thread document against the model for its version.

    Parameters
    ----------
    data : Dict[str, Any]
        Decoded JSON document

    Returns
    -------
    ThreadRecord
        ``ThreadRecordV2``, ``ThreadRecordV3`` or ``ThreadRecordUnknown``

    Raises
    ------
    pydantic.ValidationError
        If the document does not match the model for its declared version
    TypeError
        If the document is not a JSON object
    """
    if not isinstance(data, dict):
        raise TypeError(f"thread document must be an object, got {type(data).__name__}")
    schema = THREAD_SCHEMAS.get(data.get("version"), ThreadRecordUnknown)
    return schema.model_validate(data)
