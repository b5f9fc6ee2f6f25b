"""
Shared state handed to every CLI command through ``ctx.obj``.
"""
from pathlib import Path
from typing import Optional

from zedviewer.core.config import get_default_db_path
from zedviewer.core.db import Database


class CLIContext:
    """
    Lazily opened read-only store handle plus global CLI flags.

    Commands that override the destination set ``db_path`` before calling
    ``get_db``; the group closes the handle when the command returns.
    """

    def __init__(self, db_path: Optional[Path] = None, verbose: bool = False):
        self.db_path = db_path
        self.verbose = verbose
        self._db: Optional[Database] = None

    def get_db(self) -> Database:
        if self._db is None:
            self._db = Database(
                self.db_path or get_default_db_path(), ensure_schema=False
            )
        return self._db

    def close(self) -> None:
        if self._db is not None:
            self._db.close()
            self._db = None
