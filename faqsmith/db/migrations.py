"""Database initialisation.

``init_db(conn)`` is idempotent and safe to call on an existing database.
"""

from __future__ import annotations

import sqlite3

from faqsmith.config import settings


def init_db(conn: sqlite3.Connection) -> None:
    """Create all tables and indexes if they do not exist yet."""
    sql = settings.schema_path.read_text(encoding="utf-8")
    # executescript() issues an implicit COMMIT first, which is fine for DDL.
    conn.executescript(sql)
