"""CRUD operations for the ``crawled_pages`` table.

Pages are an audit/cache record of what was extracted; the URL is the
lookup key and the most recent crawl of a URL wins.
"""

from __future__ import annotations

import sqlite3
import uuid
from time import time
from typing import Optional

from faqsmith.db.models import CrawledPage


def _row_to_page(row: sqlite3.Row) -> CrawledPage:
    return CrawledPage(
        id=row["id"],
        url=row["url"],
        title=row["title"],
        raw_text=row["raw_text"],
        cleaned_text=row["cleaned_text"],
        created_at=row["created_at"],
    )


def create_page(
    conn: sqlite3.Connection,
    url: str,
    raw_text: str,
    cleaned_text: str,
    title: str = "",
) -> CrawledPage:
    """Insert a crawled page record and return it."""
    page_id = str(uuid.uuid4())
    with conn:
        conn.execute(
            """
            INSERT INTO crawled_pages (id, url, title, raw_text, cleaned_text, created_at)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (page_id, url.strip(), title, raw_text, cleaned_text, int(time())),
        )
    return get_page(conn, page_id)  # type: ignore[return-value]


def get_page(conn: sqlite3.Connection, page_id: str) -> Optional[CrawledPage]:
    """Fetch a single page by its UUID.  Returns ``None`` if not found."""
    row = conn.execute("SELECT * FROM crawled_pages WHERE id = ?", (page_id,)).fetchone()
    return _row_to_page(row) if row else None


def get_page_by_url(conn: sqlite3.Connection, url: str) -> Optional[CrawledPage]:
    """Return the most recent crawl of *url*, or ``None``."""
    row = conn.execute(
        "SELECT * FROM crawled_pages WHERE url = ? "
        "ORDER BY created_at DESC, rowid DESC LIMIT 1",
        (url.strip(),),
    ).fetchone()
    return _row_to_page(row) if row else None


def list_pages(conn: sqlite3.Connection) -> list[CrawledPage]:
    """Return all crawled pages, newest first."""
    rows = conn.execute(
        "SELECT * FROM crawled_pages ORDER BY created_at DESC, rowid DESC"
    ).fetchall()
    return [_row_to_page(r) for r in rows]
