"""
Reload API route: runs an import in-process.
"""
import logging

from fastapi import APIRouter, HTTPException, Query

from zedviewer.core.config import get_default_datasources_path, get_default_db_path
from zedviewer.core.errors import SetupError
from zedviewer.core.models import SyncMode, SyncReport
from zedviewer.services.importer import SyncEngine

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/reload", response_model=SyncReport)
def reload(full: bool = Query(False)):
    """
    Import new and changed records from the datasources directory.

    Blocks until the import finishes. Records that fail to import are listed
    in the report and do not fail the request.

    Raises
    ------
    HTTPException
        500 if the import cannot start (missing sources, unwritable store)
    """
    engine = SyncEngine(get_default_datasources_path(), get_default_db_path())
    try:
        return engine.run(SyncMode.FULL if full else SyncMode.INCREMENTAL)
    except SetupError as e:
        logger.error("Reload failed: %s", e)
        raise HTTPException(status_code=500, detail=str(e))
