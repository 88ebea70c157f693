"""Read-only access to a Chromium browser's History database.

The browser keeps the live database locked while running, so every search
works on a snapshot copy opened in read-only mode.
"""

import logging
import shutil
import sqlite3
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import List, Optional

from newtab.core.errors import HistorySourceUnavailable
from newtab.core.models import HistoryEntry

logger = logging.getLogger(__name__)

# Chromium stores visit times as microseconds since 1601-01-01 UTC
WEBKIT_EPOCH = datetime(1601, 1, 1, tzinfo=timezone.utc)

SEARCH_QUERY = """
    SELECT url, title, last_visit_time
    FROM urls
    WHERE last_visit_time >= ?
    AND (url LIKE ? OR title LIKE ?)
    ORDER BY last_visit_time DESC
    LIMIT ?
"""


def to_webkit_timestamp(dt: datetime) -> int:
    return (dt - WEBKIT_EPOCH) // timedelta(microseconds=1)


def from_webkit_timestamp(value: int) -> datetime:
    return WEBKIT_EPOCH + timedelta(microseconds=int(value))


class ChromeHistorySource:
    """History log source over a Chromium `History` file.

    Usage:
        source = ChromeHistorySource(config.get_history_db_path())
        entries = source.search("", since=week_ago, max_results=1000)
    """

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)

    def search(
        self,
        text_filter: str = "",
        since: Optional[datetime] = None,
        max_results: int = 100,
    ) -> List[HistoryEntry]:
        """Return history entries newest-first.

        Args:
            text_filter: Substring matched against URL or title ("" matches all)
            since: Only entries last visited at or after this instant
            max_results: Maximum number of rows to read

        Raises:
            HistorySourceUnavailable: the database is missing or unreadable
        """
        if not self.db_path.exists():
            raise HistorySourceUnavailable(f"History database not found: {self.db_path}")

        min_visit = to_webkit_timestamp(since) if since else 0
        pattern = f"%{text_filter}%"

        with tempfile.TemporaryDirectory() as tmpdir:
            snapshot = Path(tmpdir) / "History"
            try:
                shutil.copyfile(self.db_path, snapshot)
            except OSError as e:
                raise HistorySourceUnavailable(f"Cannot copy {self.db_path}: {e}") from e

            conn = None
            try:
                conn = sqlite3.connect(f"{snapshot.as_uri()}?mode=ro", uri=True)
                rows = conn.execute(
                    SEARCH_QUERY, (min_visit, pattern, pattern, max_results)
                ).fetchall()
            except sqlite3.Error as e:
                raise HistorySourceUnavailable(f"Cannot read {self.db_path}: {e}") from e
            finally:
                if conn is not None:
                    conn.close()

        entries = []
        for url, title, last_visit in rows:
            try:
                entries.append(HistoryEntry(
                    url=str(url),
                    title=title or None,
                    last_visit_time=from_webkit_timestamp(last_visit),
                ))
            except (TypeError, ValueError, OverflowError) as e:
                logger.debug("Skipping history row %r: %s", url, e)

        logger.debug("Read %d history entries", len(entries))
        return entries
