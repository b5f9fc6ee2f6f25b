"""
Services built on top of the entry store: importing and browsing.
"""

from .browser import EntryService, format_display_title
from .importer import SyncEngine

__all__ = ["EntryService", "SyncEngine", "format_display_title"]
