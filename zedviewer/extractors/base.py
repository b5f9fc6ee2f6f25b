"""
Base extractor interface.

Extractors turn one raw source record into an ``Entry``. They are pure apart
from reading the record itself and never touch the destination store.
"""

import logging
import os
from abc import ABC, abstractmethod
from typing import Any, Iterable, Optional

from zedviewer.core.models import Entry, EntryType

logger = logging.getLogger(__name__)


def project_label(workspace_path: Optional[str]) -> Optional[str]:
    """
    Short project label for a workspace path: its final component.

    >>> project_label("/home/me/code/zed")
    'zed'
    """
    if not workspace_path:
        return None
    label = os.path.basename(workspace_path.rstrip("/"))
    return label or None


def common_path_prefix(paths: Iterable[str]) -> Optional[str]:
    """
    Longest common path prefix, compared component by component.

    Stops at the first mismatching component. Returns None when nothing
    beyond the filesystem root is shared.

    >>> common_path_prefix(["/a/b/c", "/a/b/d"])
    '/a/b'
    """
    paths = list(paths)
    if not paths:
        return None

    common = paths[0].split("/")
    for path in paths[1:]:
        parts = path.split("/")
        shared = []
        for left, right in zip(common, parts):
            if left != right:
                break
            shared.append(left)
        common = shared

    prefix = "/".join(common)
    return prefix or None


class BaseExtractor(ABC):
    """
    Abstract base class for record extractors.

    Attributes
    ----------
    entry_type : EntryType
        Type of the entries this extractor produces
    """

    @property
    @abstractmethod
    def entry_type(self) -> EntryType:
        """Entry type produced by this extractor."""

    @abstractmethod
    def extract(self, record: Any) -> Entry:
        """
        Turn one raw source record into an entry.

        Raises
        ------
        ExtractionError
            If the record cannot be parsed or has an unexpected shape
        """
