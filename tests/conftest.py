"""
Shared fixtures: a throwaway datasources directory and helpers to populate
its conversation files and thread store.
"""
import json
import os
import shutil
import sqlite3
import tempfile
from pathlib import Path

import pytest
import zstandard

from zedviewer.core.config import DATASOURCES_ENV, DB_PATH_ENV, STARS_PATH_ENV


def make_conversation(summary="", text="", paths=(), **extra):
    """Build a conversation export document."""
    sections = []
    offset = 0
    for path in paths:
        sections.append({
            "range": {"start": offset, "end": offset + 10},
            "icon": "File",
            "label": os.path.basename(path),
            "metadata": {"path": path},
        })
        offset += 10
    data = {
        "id": "conv-id",
        "version": "0.4.0",
        "summary": summary,
        "text": text,
        "messages": [],
        "slash_command_output_sections": sections,
    }
    data.update(extra)
    return data


def make_thread_v3(title="", messages=(), worktree=None, summary=None):
    """Build a current-schema thread document from ``(role, text)`` pairs."""
    data = {
        "version": "0.3.0",
        "title": title,
        "messages": [
            {role: {"id": index, "content": [{"Text": text}]}}
            for index, (role, text) in enumerate(messages)
        ],
        "initial_project_snapshot": None,
    }
    if summary is not None:
        data["summary"] = summary
    if worktree:
        data["initial_project_snapshot"] = {
            "worktree_snapshots": [{"worktree_path": worktree}]
        }
    return data


def make_thread_v2(summary="", messages=()):
    """Build a legacy thread document from ``(role, text)`` pairs."""
    return {
        "version": "0.2.0",
        "summary": summary,
        "messages": [
            {"id": index, "role": role, "segments": [{"type": "text", "text": text}]}
            for index, (role, text) in enumerate(messages)
        ],
    }


def compress(document, write_content_size=True) -> bytes:
    raw = json.dumps(document).encode("utf-8")
    return zstandard.ZstdCompressor(write_content_size=write_content_size).compress(raw)


class Datasources:
    """Helper around a datasources directory used by the tests."""

    def __init__(self, root: Path):
        self.root = root
        self.conversations = root / "conversations"
        self.threads_db = root / "threads" / "threads.db"

    def write_conversation(self, name, document=None, raw_text=None, mtime=None) -> Path:
        self.conversations.mkdir(parents=True, exist_ok=True)
        path = self.conversations / name
        if raw_text is None:
            raw_text = json.dumps(document if document is not None else make_conversation())
        path.write_text(raw_text, encoding="utf-8")
        if mtime is not None:
            os.utime(path, (mtime, mtime))
        return path

    def create_thread_store(self, with_data_type=False):
        self.threads_db.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(str(self.threads_db))
        data_type = ", data_type TEXT" if with_data_type else ""
        conn.execute(f"""
            CREATE TABLE IF NOT EXISTS threads (
                id TEXT PRIMARY KEY,
                summary TEXT NOT NULL,
                updated_at TEXT NOT NULL,
                data BLOB NOT NULL{data_type}
            )
        """)
        conn.commit()
        conn.close()

    def put_thread(self, thread_id, document=None, updated_at="2024-05-01T10:00:00Z",
                   summary="", data=None, data_type=None):
        if not self.threads_db.exists():
            self.create_thread_store(with_data_type=data_type is not None)
        if data is None:
            data = compress(document)
        conn = sqlite3.connect(str(self.threads_db))
        if data_type is None:
            conn.execute(
                "INSERT OR REPLACE INTO threads (id, summary, updated_at, data) VALUES (?, ?, ?, ?)",
                (thread_id, summary, updated_at, data),
            )
        else:
            conn.execute(
                "INSERT OR REPLACE INTO threads (id, summary, updated_at, data, data_type) "
                "VALUES (?, ?, ?, ?, ?)",
                (thread_id, summary, updated_at, data, data_type),
            )
        conn.commit()
        conn.close()

    def delete_thread(self, thread_id):
        conn = sqlite3.connect(str(self.threads_db))
        conn.execute("DELETE FROM threads WHERE id = ?", (thread_id,))
        conn.commit()
        conn.close()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's environment from redirecting test stores."""
    for name in (DATASOURCES_ENV, DB_PATH_ENV, STARS_PATH_ENV):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def workdir():
    """Temporary directory removed after the test."""
    path = tempfile.mkdtemp()
    yield Path(path)
    shutil.rmtree(path, ignore_errors=True)


@pytest.fixture
def sources(workdir):
    """Empty datasources directory."""
    root = workdir / "datasources"
    root.mkdir()
    return Datasources(root)


@pytest.fixture
def db_path(workdir):
    """Destination store path (not created yet)."""
    return workdir / "store" / "unified.db"


def write_legacy_store(path, threads=()):
    """
    Entry store in the layout used before the ``project`` column existed.

    ``threads`` holds ``(original_id, title, content, timestamp)`` rows.
    """
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path))
    conn.executescript("""
        CREATE TABLE entries (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            type TEXT NOT NULL, title TEXT NOT NULL, content TEXT NOT NULL,
            full_json TEXT NOT NULL, file_path TEXT, workspace_path TEXT,
            original_id TEXT, timestamp TEXT,
            created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
        );
    """)
    conn.executemany(
        "INSERT INTO entries (type, title, content, full_json, original_id, timestamp) "
        "VALUES ('thread', ?, ?, '{}', ?, ?)",
        [(title, content, original_id, timestamp) for original_id, title, content, timestamp in threads],
    )
    conn.commit()
    conn.close()
