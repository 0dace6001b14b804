"""Request-scoped dependencies shared by the routers."""

from __future__ import annotations

import sqlite3
from typing import Iterator

from fastapi import Request

from faqsmith.db import get_connection


def get_db(request: Request) -> Iterator[sqlite3.Connection]:
    """Yield a connection owned by the current request and close it afterwards.

    Connections are never shared between requests, so their ``with conn:``
    transactions stay independent.
    """
    conn = get_connection(request.app.state.db_path)
    try:
        yield conn
    finally:
        conn.close()
