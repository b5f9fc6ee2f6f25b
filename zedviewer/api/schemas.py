"""
Pydantic schemas for API request/response models.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict


class EntrySummary(BaseModel):
    """Entry as shown in list and search views."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    type: str
    title: str
    display_title: str
    project: Optional[str] = None
    timestamp: Optional[str] = None
    starred: bool = False


class EntryDetail(EntrySummary):
    """Entry with its rendered content and provenance."""

    content: str = ""
    file_path: Optional[str] = None
    workspace_path: Optional[str] = None
    original_id: Optional[str] = None
    created_at: Optional[str] = None


class StarResponse(BaseModel):
    """Star state after a toggle."""

    id: int
    starred: bool


class HealthResponse(BaseModel):
    status: str
    conversations: int = 0
    threads: int = 0
