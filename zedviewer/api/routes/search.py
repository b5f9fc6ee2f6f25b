"""
Search API routes.
"""
from typing import List

from fastapi import APIRouter, Depends, Query

from zedviewer.api.deps import get_db
from zedviewer.api.schemas import EntrySummary
from zedviewer.core.db import Database
from zedviewer.services.browser import EntryService

router = APIRouter()


@router.get("/search", response_model=List[EntrySummary])
def search(
    q: str = Query(""),
    starred: bool = Query(False),
    limit: int = Query(200, ge=1, le=1000),
    db: Database = Depends(get_db),
):
    """
    Full-text search over titles, content and project labels.

    The last word of ``q`` is prefix-matched. An empty query returns no
    results.
    """
    return EntryService(db).search(q, starred_only=starred, limit=limit)
