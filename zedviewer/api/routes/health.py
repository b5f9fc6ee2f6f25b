"""
Health check API route.
"""
from fastapi import APIRouter

from zedviewer.api.schemas import HealthResponse
from zedviewer.core.config import get_default_db_path
from zedviewer.core.db import Database
from zedviewer.core.errors import StoreNotReadyError
from zedviewer.services.browser import EntryService

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
def health():
    """Server status and entry counts; ``needs_import`` until a full import ran."""
    try:
        db = Database(get_default_db_path(), ensure_schema=False)
    except StoreNotReadyError:
        return HealthResponse(status="needs_import")

    try:
        counts = EntryService(db).counts()
    finally:
        db.close()
    return HealthResponse(
        status="ready",
        conversations=counts["conversation"],
        threads=counts["thread"],
    )
