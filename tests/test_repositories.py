"""
Tests for the entry and star repositories and the browsing service.
"""
import pytest

from zedviewer.core.db import Database
from zedviewer.core.db.search.query import build_match_query
from zedviewer.core.models import Entry, EntryType
from zedviewer.services.browser import EntryService, format_display_title, format_entry_date


@pytest.fixture
def temp_db(workdir):
    db = Database(workdir / "unified.db")
    yield db
    db.close()


@pytest.fixture
def seeded(temp_db):
    """One conversation and two threads with distinct timestamps."""
    ids = {
        "conv": temp_db.entries.insert(Entry(
            type=EntryType.CONVERSATION,
            title="Parser rewrite",
            content="we discussed tokenizers at length",
            full_json='{"summary": "Parser rewrite"}',
            file_path="/data/conversations/Parser rewrite.zed.json",
            workspace_path="/code/parser",
            project="parser",
            timestamp="2024-03-01T12:00:00+01:00",
            file_mtime=1709290800.0,
        )),
        "old": temp_db.entries.insert(Entry(
            type=EntryType.THREAD,
            title="Old thread",
            content="**User:** about databases",
            full_json='{"version": "0.2.0"}',
            original_id="t-old",
            timestamp="2024-01-01T00:00:00Z",
        )),
        "new": temp_db.entries.insert(Entry(
            type=EntryType.THREAD,
            title="New thread",
            content="**User:** tokenization again",
            full_json='{"version": "0.3.0"}',
            original_id="t-new",
            workspace_path="/code/zed",
            project="zed",
            timestamp="2024-06-01T00:00:00Z",
        )),
    }
    return temp_db, ids


class TestEntryRepository:

    def test_list_newest_first(self, seeded):
        db, ids = seeded
        assert [row["id"] for row in db.entries.list()] == [ids["new"], ids["conv"], ids["old"]]

    def test_list_limit(self, seeded):
        db, ids = seeded
        assert [row["id"] for row in db.entries.list(limit=1)] == [ids["new"]]

    def test_get_all_columns_and_starred(self, seeded):
        db, ids = seeded
        row = db.entries.get(ids["conv"])
        assert row["file_path"] == "/data/conversations/Parser rewrite.zed.json"
        assert row["full_json"] == '{"summary": "Parser rewrite"}'
        assert row["file_mtime"] == 1709290800.0
        assert row["created_at"]
        assert row["starred"] is False

    def test_get_missing(self, temp_db):
        assert temp_db.entries.get(999) is None

    def test_search_matches_stemmed_terms(self, seeded):
        db, ids = seeded
        assert [row["id"] for row in db.entries.search("token")] == [ids["new"], ids["conv"]]

    def test_search_prefix_on_last_term(self, seeded):
        db, ids = seeded
        assert [row["id"] for row in db.entries.search("databa")] == [ids["old"]]
        assert db.entries.search("databa rewrite") == []

    def test_search_project_column(self, seeded):
        db, ids = seeded
        assert [row["id"] for row in db.entries.search("parser")] == [ids["conv"]]

    def test_search_malformed_query_returns_nothing(self, seeded):
        db, _ = seeded
        assert db.entries.search('"unbalanced') == []
        assert db.entries.search("   ") == []

    def test_search_punctuated_terms(self, temp_db):
        entry_id = temp_db.entries.insert(Entry(
            type=EntryType.THREAD,
            title="Refactor",
            content="**User:** please clean up foo.py and setup.cfg",
            full_json="{}",
            original_id="t-punct",
            workspace_path="/work/my-app",
            project="my-app",
        ))
        assert [row["id"] for row in temp_db.entries.search("my-app")] == [entry_id]
        assert [row["id"] for row in temp_db.entries.search("foo.py")] == [entry_id]
        assert [row["id"] for row in temp_db.entries.search("clean setup.c")] == [entry_id]
        assert temp_db.entries.search('foo.py "bar') == []

    def test_build_match_query(self):
        assert build_match_query("hello wor") == '"hello" "wor"*'
        assert build_match_query("my-app foo.py") == '"my-app" "foo.py"*'
        assert build_match_query('say "hi') == '"say" """hi"*'
        assert build_match_query("wor*") == '"wor"*'
        assert build_match_query(" * ") is None

    def test_business_key_lookups(self, seeded):
        db, ids = seeded
        assert db.entries.conversation_mtimes() == {
            "/data/conversations/Parser rewrite.zed.json": 1709290800.0
        }
        assert db.entries.thread_timestamps() == {
            "t-old": "2024-01-01T00:00:00Z",
            "t-new": "2024-06-01T00:00:00Z",
        }
        assert db.entries.get_business_key(ids["old"]) == (EntryType.THREAD, "t-old")
        assert db.entries.get_business_key(999) is None

    def test_delete_by_business_key_is_type_scoped(self, seeded):
        db, _ = seeded
        assert db.entries.delete_by_business_key(EntryType.CONVERSATION, "t-old") == 0
        assert db.entries.delete_by_business_key(EntryType.THREAD, "t-old") == 1
        assert db.entries.count_by_type() == {"conversation": 1, "thread": 1}


class TestStarRepository:

    def test_toggle(self, seeded):
        db, ids = seeded
        assert db.toggle_star(ids["old"]) is True
        assert db.entries.get(ids["old"])["starred"] is True
        assert db.stars.all_keys() == {("thread", "t-old")}

        assert db.toggle_star(ids["old"]) is False
        assert db.entries.get(ids["old"])["starred"] is False
        assert db.stars.all_keys() == set()

    def test_toggle_missing_entry(self, temp_db):
        assert temp_db.toggle_star(42) is None

    def test_starred_filter(self, seeded):
        db, ids = seeded
        db.toggle_star(ids["conv"])
        db.toggle_star(ids["new"])

        assert [row["id"] for row in db.list_entries(starred_only=True)] == [ids["new"], ids["conv"]]
        assert [row["id"] for row in db.entries.search("token", starred_only=True)] == [
            ids["new"], ids["conv"]
        ]
        assert db.entries.search("databases", starred_only=True) == []

    def test_star_follows_business_key(self, seeded):
        db, ids = seeded
        db.toggle_star(ids["new"])
        db.entries.delete_by_business_key(EntryType.THREAD, "t-new")
        assert db.list_entries(starred_only=True) == []

        new_id = db.entries.insert(Entry(
            type=EntryType.THREAD, title="Back", full_json="{}", original_id="t-new",
        ))
        assert new_id != ids["new"]
        assert db.entries.get(new_id)["starred"] is True

    def test_stars_live_in_separate_file(self, seeded, workdir):
        db, ids = seeded
        db.toggle_star(ids["old"])
        assert (workdir / "stars.db").exists()
        with Database(workdir / "other.db", stars_path=workdir / "stars.db") as other:
            assert other.stars.is_starred(EntryType.THREAD, "t-old")


class TestEntryService:

    def test_display_title(self):
        assert format_display_title({
            "type": "thread", "title": "Add caching", "project": "zed",
            "timestamp": "2024-06-01T00:00:00Z",
        }) == "[2024-06-01] 𝐀 [zed] Add caching"
        assert format_display_title({
            "type": "conversation", "title": "Notes", "project": None, "timestamp": None,
        }) == "𝐓 Notes"

    def test_entry_date_variants(self):
        assert format_entry_date("2024-03-01T12:00:00+01:00") == "2024-03-01"
        assert format_entry_date("2024-03-01T12:00:00.123456789Z") == "2024-03-01"
        assert format_entry_date("yesterday") is None

    def test_list_and_search(self, seeded):
        db, ids = seeded
        service = EntryService(db)

        titles = service.list_titles()
        assert titles[0]["display_title"] == "[2024-06-01] 𝐀 [zed] New thread"
        assert titles[1]["display_title"] == "[2024-03-01] 𝐓 [parser] Parser rewrite"

        assert [r["id"] for r in service.search("databases")] == [ids["old"]]
        assert service.search("") == []

    def test_detail_json_and_counts(self, seeded):
        db, ids = seeded
        service = EntryService(db)

        detail = service.get_detail(ids["new"])
        assert detail["content"] == "**User:** tokenization again"
        assert detail["display_title"].endswith("New thread")
        assert service.get_json(ids["new"]) == {"version": "0.3.0"}
        assert service.get_detail(999) is None
        assert service.get_json(999) is None
        assert service.counts() == {"conversation": 1, "thread": 2}
