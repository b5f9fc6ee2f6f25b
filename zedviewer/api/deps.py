"""
FastAPI dependencies for shared resources.

Provides dependency injection for the entry store handle.
"""

from typing import Generator

from fastapi import HTTPException

from zedviewer.core.config import get_default_db_path
from zedviewer.core.db import Database
from zedviewer.core.errors import StoreNotReadyError


def get_db() -> Generator[Database, None, None]:
    """
    Dependency that provides a read-only store handle and ensures cleanup.

    The handle never creates or migrates the entry store; that is left to
    the importer.

    Yields
    ------
    Database
        Database instance, closed after the request

    Raises
    ------
    HTTPException
        503 if the store has not been imported yet or needs a full import
    """
    try:
        db = Database(get_default_db_path(), ensure_schema=False)
    except StoreNotReadyError as e:
        raise HTTPException(status_code=503, detail=str(e))
    try:
        yield db
    finally:
        db.close()
