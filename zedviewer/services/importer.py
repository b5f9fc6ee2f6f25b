"""
Import service: reconciles the Zed sources with the entry store.

Two modes are supported:

- full: a fresh store is built beside the destination and swapped in once
  every record has been imported and the FTS index bulk-populated
- incremental: each collection is diffed against the store by business key
  inside its own transaction; new records are inserted, changed ones updated
  in place, unchanged ones skipped without extraction, and entries whose
  source record is gone are deleted

A single record that cannot be extracted or written is logged and recorded
in the report; it never aborts the run. Only setup failures escape ``run``.
"""

import logging
import os
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Any, Optional, Union

from zedviewer.core.config import get_default_datasources_path, get_default_db_path
from zedviewer.core.db import Database, needs_full_rebuild
from zedviewer.core.errors import ExtractionError, SetupError
from zedviewer.core.models import (
    CollectionStats,
    Entry,
    RecordFailure,
    SyncMode,
    SyncReport,
)
from zedviewer.services.sources import ConversationSource, SourceCollection, ThreadSource

logger = logging.getLogger(__name__)

BUILD_SUFFIX = ".building"
SQLITE_SIDE_FILES = ("-wal", "-shm", "-journal")


def _remove_store_files(path: Path, include_main: bool = True) -> None:
    candidates = [Path(str(path) + suffix) for suffix in SQLITE_SIDE_FILES]
    if include_main:
        candidates.insert(0, path)
    for candidate in candidates:
        try:
            candidate.unlink()
        except FileNotFoundError:
            pass


class SyncEngine:
    """
    Orchestrates import runs from a datasources root into the entry store.

    Parameters
    ----------
    datasources_path : str or Path, optional
        Root holding ``conversations/`` and ``threads/threads.db``
    db_path : str or Path, optional
        Destination entry store
    stars_path : str or Path, optional
        Star store attached to the destination (never rebuilt)

    Example
    -------
    >>> engine = SyncEngine("./datasources", "./datasources/unified.db")
    >>> report = engine.run(SyncMode.INCREMENTAL)
    >>> report.conversations.added
    3
    """

    def __init__(
        self,
        datasources_path: Optional[Union[str, Path]] = None,
        db_path: Optional[Union[str, Path]] = None,
        stars_path: Optional[Union[str, Path]] = None,
    ):
        self.datasources_path = Path(
            datasources_path if datasources_path is not None
            else get_default_datasources_path()
        )
        self.db_path = Path(db_path if db_path is not None else get_default_db_path())
        self.stars_path = stars_path

    def _sources(self):
        return [ConversationSource(self.datasources_path), ThreadSource(self.datasources_path)]

    def _open(self, path: Path) -> Database:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            return Database(path, stars_path=self.stars_path)
        except (OSError, sqlite3.Error) as e:
            raise SetupError(f"Cannot open destination store {path}: {e}") from e

    def run(self, mode: SyncMode = SyncMode.INCREMENTAL) -> SyncReport:
        """
        Run one import.

        Parameters
        ----------
        mode : SyncMode
            Requested mode. Incremental runs against a missing or pre-``project``
            store are promoted to full runs.

        Returns
        -------
        SyncReport
            Counts and per-record failures for both collections

        Raises
        ------
        SetupError
            If the datasources root is missing, the destination cannot be
            opened, or the thread store cannot be read
        """
        if not self.datasources_path.is_dir():
            raise SetupError(f"Datasources directory not found: {self.datasources_path}")

        mode = SyncMode(mode)
        if mode == SyncMode.INCREMENTAL and needs_full_rebuild(self.db_path):
            logger.info(
                "Destination %s is missing or predates the current schema; "
                "running a full rebuild",
                self.db_path,
            )
            mode = SyncMode.FULL

        logger.info(
            "Starting %s import from %s into %s",
            mode.value,
            self.datasources_path,
            self.db_path,
        )
        report = SyncReport(mode=mode)

        if mode == SyncMode.FULL:
            self._run_full(report)
        else:
            self._run_incremental(report)

        report.finished_at = datetime.now()
        self._log_report(report)
        return report

    def _run_full(self, report: SyncReport) -> None:
        build_path = Path(str(self.db_path) + BUILD_SUFFIX)
        _remove_store_files(build_path)

        db = self._open(build_path)
        try:
            with db.conn.transaction():
                for source in self._sources():
                    self._sync_collection(db, source, report.stats_for(source.entry_type))
                db.fts.rebuild_index()
        except BaseException:
            db.close()
            _remove_store_files(build_path)
            raise
        db.close()

        # Stale WAL/SHM files would be replayed against the new file
        _remove_store_files(self.db_path)
        _remove_store_files(build_path, include_main=False)
        os.replace(build_path, self.db_path)
        logger.info("Replaced %s with freshly built store", self.db_path)

    def _run_incremental(self, report: SyncReport) -> None:
        db = self._open(self.db_path)
        try:
            for source in self._sources():
                with db.conn.transaction():
                    self._sync_collection(db, source, report.stats_for(source.entry_type))
        finally:
            db.close()

    def _sync_collection(
        self, db: Database, source: SourceCollection, stats: CollectionStats
    ) -> None:
        """
        Reconcile one source collection with the store.

        The outcome depends only on the set of source records, not on the
        order they are enumerated in: rows are matched by business key.
        """
        collection = source.entry_type.value
        if not source.exists():
            logger.warning(
                "No %s source at %s; leaving existing %s entries untouched",
                collection,
                source.location,
                collection,
            )
            stats.skipped_source = True
            return

        logger.info("Syncing %ss from %s", collection, source.location)
        existing = source.lookup(db.entries)
        seen = set()

        with source:
            for key, change_value, handle in source.iter_versions():
                if key in seen:
                    logger.error("Skipping duplicate %s %s in source", collection, key)
                    stats.failures.append(RecordFailure(
                        collection=source.entry_type,
                        key=key,
                        message="duplicate key in source; first record kept",
                    ))
                    continue
                seen.add(key)
                if key in existing and existing[key] == change_value:
                    stats.unchanged += 1
                    continue

                result = self._extract(source, key, handle)
                if isinstance(result, RecordFailure):
                    stats.failures.append(result)
                    continue

                if key in existing:
                    failure = self._write(db, source, key, db.entries.update, result)
                    if failure is None:
                        stats.updated += 1
                        logger.debug("Updated %s %s", collection, key)
                else:
                    failure = self._write(db, source, key, db.entries.insert, result)
                    if failure is None:
                        stats.added += 1
                        logger.debug("Added %s %s", collection, key)
                if failure is not None:
                    stats.failures.append(failure)

        for key in sorted(set(existing) - seen):
            db.entries.delete_by_business_key(source.entry_type, key)
            stats.deleted += 1
            logger.debug("Deleted %s %s (source removed)", collection, key)

    def _extract(
        self, source: SourceCollection, key: str, handle: Any
    ) -> Union[Entry, RecordFailure]:
        try:
            record = source.load(key, handle)
            return source.extractor.extract(record)
        except ExtractionError as e:
            logger.error("Skipping %s %s: %s", source.entry_type.value, key, e.message)
            return RecordFailure(collection=source.entry_type, key=key, message=e.message)

    def _write(
        self, db: Database, source: SourceCollection, key: str, operation, entry: Entry
    ) -> Optional[RecordFailure]:
        try:
            with db.conn.savepoint():
                operation(entry)
        except sqlite3.Error as e:
            logger.error("Cannot write %s %s: %s", source.entry_type.value, key, e)
            return RecordFailure(collection=source.entry_type, key=key, message=str(e))
        return None

    def _log_report(self, report: SyncReport) -> None:
        for name, stats in (("Conversations", report.conversations), ("Threads", report.threads)):
            logger.info(
                "%s: %d added, %d updated, %d deleted, %d unchanged, %d errors",
                name,
                stats.added,
                stats.updated,
                stats.deleted,
                stats.unchanged,
                stats.errors,
            )
        for failure in report.failures:
            logger.warning("  %s %s: %s", failure.collection.value, failure.key, failure.message)
