"""
Pydantic models for Zed assistant conversation exports.

Conversations are stored by Zed as ``conversations/<title>.zed.json`` files.
The models only pin down the fields the importer reads; everything else is
kept through ``extra="allow"`` and survives verbatim in ``full_json``.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class SectionRange(BaseModel):
    """Byte range a slash-command output occupies in the conversation text."""

    model_config = ConfigDict(extra="allow")

    start: int = Field(..., description="Start offset (inclusive)")
    end: int = Field(..., description="End offset (exclusive)")


class SlashCommandOutputSection(BaseModel):
    """Output inserted by a slash command such as ``/file`` or ``/tab``."""

    model_config = ConfigDict(extra="allow")

    range: Optional[SectionRange] = None
    label: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None

    @property
    def path(self) -> Optional[str]:
        """Filesystem path the section refers to, if the command recorded one."""
        if not self.metadata:
            return None
        path = self.metadata.get("path")
        if isinstance(path, str) and path:
            return path
        return None


class ConversationExport(BaseModel):
    """Top-level conversation export document."""

    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    version: Optional[str] = None
    summary: Optional[str] = None
    text: Optional[str] = None
    messages: List[Dict[str, Any]] = Field(default_factory=list)
    slash_command_output_sections: List[SlashCommandOutputSection] = Field(
        default_factory=list
    )
    initial_project_snapshot: Optional[Dict[str, Any]] = None
