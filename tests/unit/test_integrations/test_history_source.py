"""
Unit tests for the Chromium history source.
Builds a small History database with the same `urls` table layout.
"""

import sqlite3
import pytest
from datetime import datetime, timedelta, timezone
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent.parent.parent))

from newtab.core.errors import HistorySourceUnavailable
from newtab.integrations.browser_history import ChromeHistorySource
from newtab.integrations.browser_history.history_source import (
    from_webkit_timestamp,
    to_webkit_timestamp,
)


NOW = datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def history_db(tmp_path):
    path = tmp_path / "History"
    conn = sqlite3.connect(path)
    conn.execute(
        "CREATE TABLE urls (id INTEGER PRIMARY KEY, url TEXT, title TEXT, last_visit_time INTEGER)"
    )
    rows = [
        ("https://chatgpt.com/c/1", "Plan - ChatGPT", NOW - timedelta(hours=1)),
        ("https://claude.ai/chat/2", "Review - Claude", NOW - timedelta(hours=2)),
        ("https://example.com/", "", NOW - timedelta(minutes=5)),
        ("https://chatgpt.com/c/old", "Old", NOW - timedelta(days=30)),
    ]
    conn.executemany(
        "INSERT INTO urls (url, title, last_visit_time) VALUES (?, ?, ?)",
        [(url, title, to_webkit_timestamp(when)) for url, title, when in rows],
    )
    conn.commit()
    conn.close()
    return path


class TestTimestamps:
    def test_epoch(self):
        assert from_webkit_timestamp(0) == datetime(1601, 1, 1, tzinfo=timezone.utc)

    def test_conversion_inverse(self):
        assert from_webkit_timestamp(to_webkit_timestamp(NOW)) == NOW


class TestSearch:
    def test_newest_first(self, history_db):
        entries = ChromeHistorySource(history_db).search()

        assert [e.url for e in entries] == [
            "https://example.com/",
            "https://chatgpt.com/c/1",
            "https://claude.ai/chat/2",
            "https://chatgpt.com/c/old",
        ]
        assert entries[1].last_visit_time == NOW - timedelta(hours=1)

    def test_empty_title_is_none(self, history_db):
        entries = ChromeHistorySource(history_db).search()

        assert entries[0].title is None

    def test_since_and_limit(self, history_db):
        entries = ChromeHistorySource(history_db).search(since=NOW - timedelta(days=7), max_results=2)

        assert [e.url for e in entries] == ["https://example.com/", "https://chatgpt.com/c/1"]

    def test_text_filter(self, history_db):
        entries = ChromeHistorySource(history_db).search("claude")

        assert [e.url for e in entries] == ["https://claude.ai/chat/2"]

    def test_live_file_untouched(self, history_db):
        before = history_db.read_bytes()

        ChromeHistorySource(history_db).search()

        assert history_db.read_bytes() == before


class TestUnavailable:
    def test_missing_file(self, tmp_path):
        with pytest.raises(HistorySourceUnavailable):
            ChromeHistorySource(tmp_path / "missing").search()

    def test_not_a_database(self, tmp_path):
        path = tmp_path / "History"
        path.write_text("definitely not sqlite")

        with pytest.raises(HistorySourceUnavailable):
            ChromeHistorySource(path).search()

    def test_wrong_schema(self, tmp_path):
        path = tmp_path / "History"
        conn = sqlite3.connect(path)
        conn.execute("CREATE TABLE visits (id INTEGER)")
        conn.commit()
        conn.close()

        with pytest.raises(HistorySourceUnavailable):
            ChromeHistorySource(path).search()
