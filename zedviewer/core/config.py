"""
Default locations for the import sources and the local stores.

Every default can be overridden through an environment variable, and CLI
arguments take precedence over the environment.
"""

import os
from pathlib import Path
from typing import Optional

DATASOURCES_ENV = "ZEDVIEWER_DATASOURCES"
DB_PATH_ENV = "ZEDVIEWER_DB_PATH"
STARS_PATH_ENV = "ZEDVIEWER_STARS_PATH"

DEFAULT_DATASOURCES = Path("./datasources")
DEFAULT_DB_NAME = "unified.db"
DEFAULT_STARS_NAME = "stars.db"

CONVERSATIONS_DIR = "conversations"
CONVERSATION_GLOB = "*.zed.json"
THREADS_DIR = "threads"
THREADS_DB_NAME = "threads.db"


def get_default_datasources_path() -> Path:
    """Return the datasources root (``conversations/`` and ``threads/`` live here)."""
    env_value = os.getenv(DATASOURCES_ENV)
    if env_value:
        return Path(env_value).expanduser()
    return DEFAULT_DATASOURCES


def get_default_db_path() -> Path:
    """Return the destination store path."""
    env_value = os.getenv(DB_PATH_ENV)
    if env_value:
        return Path(env_value).expanduser()
    return get_default_datasources_path() / DEFAULT_DB_NAME


def get_stars_db_path(db_path: Optional[Path] = None) -> Path:
    """
    Return the star store path.

    Stars live beside the destination store, in their own file, so a full
    rebuild of the destination never drops them.
    """
    env_value = os.getenv(STARS_PATH_ENV)
    if env_value:
        return Path(env_value).expanduser()
    if db_path is None:
        db_path = get_default_db_path()
    return Path(db_path).with_name(DEFAULT_STARS_NAME)
