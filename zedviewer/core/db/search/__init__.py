"""
Search module for full-text search functionality.
"""

from .fts import FTSManager
from .query import build_match_query

__all__ = [
    "FTSManager",
    "build_match_query",
]
