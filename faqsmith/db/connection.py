"""SQLite connection factory.

Usage::

    from faqsmith.db.connection import get_connection

    conn = get_connection()
    page = conn.execute("SELECT * FROM crawled_pages LIMIT 1").fetchone()
"""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Optional, Union

from faqsmith.config import settings

_MEMORY = ":memory:"


def get_connection(db_path: Optional[Union[Path, str]] = None) -> sqlite3.Connection:
    """Open a connection to the faqsmith database.

    Args:
        db_path: Defaults to ``settings.db_path`` inside the workspace, which
            is created on first use.  ``":memory:"`` opens a private
            in-memory database (used by the tests).

    Returns:
        A connection whose rows are :class:`sqlite3.Row`.  It is not bound to
        the opening thread, since the API may open it and use it from
        different worker threads within one request.  File databases run in
        WAL mode.
    """
    target = str(db_path or settings.db_path)
    in_memory = target == _MEMORY
    if not in_memory:
        settings.ensure_workspace()

    conn = sqlite3.connect(target, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    if not in_memory:
        conn.execute("PRAGMA journal_mode = WAL")
    return conn
