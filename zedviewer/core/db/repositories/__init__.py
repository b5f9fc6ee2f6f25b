"""
Repository classes for database operations.

Each repository handles CRUD operations for a specific domain entity.
"""

from .base import BaseRepository
from .entry import EntryRepository
from .star import StarRepository

__all__ = [
    "BaseRepository",
    "EntryRepository",
    "StarRepository",
]
