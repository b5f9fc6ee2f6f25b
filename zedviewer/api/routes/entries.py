"""
Entry API routes: listing, detail, raw JSON and star toggling.
"""

from typing import Any, List

from fastapi import APIRouter, Depends, HTTPException, Query

from zedviewer.api.deps import get_db
from zedviewer.api.schemas import EntryDetail, EntrySummary, StarResponse
from zedviewer.core.db import Database
from zedviewer.services.browser import EntryService

router = APIRouter()


@router.get("/titles", response_model=List[EntrySummary])
def list_titles(
    starred: bool = Query(False),
    db: Database = Depends(get_db),
):
    """
    List every entry, newest first.

    Parameters
    ----------
    starred : bool
        Only return starred entries
    """
    return EntryService(db).list_titles(starred_only=starred)


@router.get("/entries/{entry_id}", response_model=EntryDetail)
def get_entry(entry_id: int, db: Database = Depends(get_db)):
    """
    Get one entry with its markdown content.

    Raises
    ------
    HTTPException
        404 if the entry does not exist
    """
    entry = EntryService(db).get_detail(entry_id)
    if entry is None:
        raise HTTPException(status_code=404, detail="Entry not found")
    return entry


@router.get("/entries/{entry_id}/json")
def get_entry_json(entry_id: int, db: Database = Depends(get_db)) -> Any:
    """Get the source document an entry was imported from."""
    data = EntryService(db).get_json(entry_id)
    if data is None:
        raise HTTPException(status_code=404, detail="Entry not found")
    return data


@router.post("/entries/{entry_id}/star", response_model=StarResponse)
def toggle_star(entry_id: int, db: Database = Depends(get_db)):
    """Flip the star state of an entry."""
    starred = EntryService(db).toggle_star(entry_id)
    if starred is None:
        raise HTTPException(status_code=404, detail="Entry not found")
    return StarResponse(id=entry_id, starred=starred)
