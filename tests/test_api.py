"""
Tests for the FastAPI routes.
"""
import pytest
from fastapi.testclient import TestClient

from conftest import make_conversation, make_thread_v3, write_legacy_store
from zedviewer.api.main import app


@pytest.fixture
def client(sources, db_path, monkeypatch):
    monkeypatch.setenv("ZEDVIEWER_DATASOURCES", str(sources.root))
    monkeypatch.setenv("ZEDVIEWER_DB_PATH", str(db_path))
    db_path.parent.mkdir(parents=True, exist_ok=True)
    return TestClient(app)


@pytest.fixture
def loaded(client, sources):
    """Client whose store has been filled through the reload endpoint."""
    sources.write_conversation(
        "Koala.zed.json",
        make_conversation(summary="Koala talk", text="koala facts"),
        mtime=1_700_000_000,
    )
    sources.put_thread(
        "thread-1",
        make_thread_v3(title="Wombat thread", messages=[("User", "wombat burrows")], worktree="/w/zoo"),
        updated_at="2024-06-01T00:00:00Z",
    )
    response = client.post("/api/reload")
    assert response.status_code == 200
    return client


def _id_of(client, title):
    return next(item["id"] for item in client.get("/api/titles").json() if item["title"] == title)


def test_health_before_first_import(client, db_path):
    response = client.get("/api/health")

    assert response.status_code == 200
    assert response.json() == {"status": "needs_import", "conversations": 0, "threads": 0}
    assert not db_path.exists()


def test_reads_before_first_import_are_unavailable(client, db_path):
    response = client.get("/api/titles")

    assert response.status_code == 503
    assert "run a full import first" in response.json()["detail"]
    assert not db_path.exists()


def test_legacy_store_is_not_migrated_by_reads(client, sources, db_path):
    sources.put_thread(
        "thread-1",
        make_thread_v3(title="Wombat thread", messages=[("User", "wombat burrows")], worktree="/w/zoo"),
        updated_at="2024-06-01T00:00:00Z",
    )
    write_legacy_store(db_path, [("thread-1", "Wombat thread", "x", "2024-06-01T00:00:00Z")])

    assert client.get("/api/titles").status_code == 503
    assert client.get("/api/health").json()["status"] == "needs_import"

    report = client.post("/api/reload").json()
    assert report["mode"] == "full"

    titles = client.get("/api/titles").json()
    assert [item["project"] for item in titles] == ["zoo"]
    assert client.get("/api/health").json()["status"] == "ready"


def test_reload_report(client, sources):
    sources.write_conversation("A.zed.json", make_conversation(text="a"))

    first = client.post("/api/reload").json()
    second = client.post("/api/reload").json()

    assert first["mode"] == "full"
    assert first["conversations"]["added"] == 1
    assert first["threads"]["skipped_source"] is True
    assert second["mode"] == "incremental"
    assert second["conversations"]["unchanged"] == 1


def test_reload_full_flag(loaded):
    response = loaded.post("/api/reload", params={"full": "true"})

    assert response.status_code == 200
    assert response.json()["mode"] == "full"


def test_reload_missing_datasources(client, sources, monkeypatch):
    monkeypatch.setenv("ZEDVIEWER_DATASOURCES", str(sources.root / "missing"))

    response = client.post("/api/reload")

    assert response.status_code == 500
    assert "Datasources directory not found" in response.json()["detail"]


def test_titles(loaded):
    titles = loaded.get("/api/titles").json()

    assert [item["display_title"] for item in titles][0] == "[2024-06-01] 𝐀 [zoo] Wombat thread"
    assert {item["type"] for item in titles} == {"conversation", "thread"}
    assert all(item["starred"] is False for item in titles)


def test_search(loaded):
    results = loaded.get("/api/search", params={"q": "koal"}).json()

    assert [item["title"] for item in results] == ["Koala talk"]
    assert loaded.get("/api/search", params={"q": ""}).json() == []


def test_entry_detail_and_json(loaded):
    entry_id = _id_of(loaded, "Wombat thread")

    detail = loaded.get(f"/api/entries/{entry_id}").json()
    assert detail["content"] == "**User:** wombat burrows"
    assert detail["original_id"] == "thread-1"
    assert detail["workspace_path"] == "/w/zoo"

    document = loaded.get(f"/api/entries/{entry_id}/json").json()
    assert document["title"] == "Wombat thread"
    assert document["version"] == "0.3.0"


def test_missing_entry_is_404(loaded):
    for response in (
        loaded.get("/api/entries/9999"),
        loaded.get("/api/entries/9999/json"),
        loaded.post("/api/entries/9999/star"),
    ):
        assert response.status_code == 404
        assert response.json()["detail"] == "Entry not found"


def test_star_toggle_and_filter(loaded):
    entry_id = _id_of(loaded, "Koala talk")

    assert loaded.post(f"/api/entries/{entry_id}/star").json() == {"id": entry_id, "starred": True}
    starred = loaded.get("/api/titles", params={"starred": "true"}).json()
    assert [item["id"] for item in starred] == [entry_id]
    assert loaded.get("/api/search", params={"q": "wombat", "starred": "true"}).json() == []

    assert loaded.post(f"/api/entries/{entry_id}/star").json()["starred"] is False
    assert loaded.get("/api/titles", params={"starred": "true"}).json() == []


def test_star_survives_full_reload(loaded):
    entry_id = _id_of(loaded, "Wombat thread")
    loaded.post(f"/api/entries/{entry_id}/star")

    loaded.post("/api/reload", params={"full": "true"})

    starred = loaded.get("/api/titles", params={"starred": "true"}).json()
    assert [item["title"] for item in starred] == ["Wombat thread"]
