"""
Exception types shared across the import pipeline and the serving layer.
"""

from typing import Optional


class ZedViewerError(Exception):
    """Base class for all zedviewer errors."""


class SetupError(ZedViewerError):
    """Raised when an import run cannot start or must abort as a whole."""


class SourceStoreError(SetupError):
    """Raised when the thread source store cannot be opened or queried."""


class StoreNotReadyError(SetupError):
    """Raised when a read-only handle is opened on a store that needs a full import."""



class ExtractionError(ZedViewerError):
    """
    Raised when a single source record cannot be turned into an entry.

    Parameters
    ----------
    key : str
        Business key of the failing record (file path or thread id)
    message : str
        Human-readable reason
    """

    def __init__(self, key: str, message: str, cause: Optional[Exception] = None):
        super().__init__(f"{key}: {message}")
        self.key = key
        self.message = message
        self.cause = cause
