"""CRUD operations for the ``faqs`` table."""

from __future__ import annotations

import sqlite3
import uuid
from time import time
from typing import Any, Iterable, Optional

from faqsmith.db.models import FAQRecord
from faqsmith.faq.models import FAQItem, FAQStatus

_STATUSES = {status.value for status in FAQStatus}


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _row_to_faq(row: sqlite3.Row) -> FAQRecord:
    return FAQRecord(
        id=row["id"],
        question=row["question"],
        answer=row["answer"],
        source_url=row["source_url"],
        status=row["status"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _check_status(status: str) -> str:
    if status not in _STATUSES:
        raise ValueError('Status must be either "draft" or "published"')
    return status


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def save_faqs(
    conn: sqlite3.Connection,
    entries: Iterable[tuple[FAQItem, str]],
    source_url: str,
) -> list[FAQRecord]:
    """Insert ``(item, status)`` pairs in one transaction, in order.

    Either every entry is stored or none is.

    Raises:
        ValueError: If any status is not ``draft`` or ``published``.
    """
    rows = [(item, _check_status(status)) for item, status in entries]
    now = int(time())
    ids: list[str] = []
    with conn:
        for item, status in rows:
            faq_id = str(uuid.uuid4())
            conn.execute(
                """
                INSERT INTO faqs (id, question, answer, source_url, status, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    faq_id,
                    item.question.strip(),
                    item.answer.strip(),
                    source_url.strip(),
                    status,
                    now,
                    now,
                ),
            )
            ids.append(faq_id)
    return [get_faq(conn, faq_id) for faq_id in ids]  # type: ignore[misc]


def create_faqs(
    conn: sqlite3.Connection,
    items: Iterable[FAQItem],
    source_url: str,
    status: str = FAQStatus.DRAFT.value,
) -> list[FAQRecord]:
    """Insert *items* with one shared *status* (see :func:`save_faqs`)."""
    _check_status(status)
    return save_faqs(conn, ((item, status) for item in items), source_url)


def get_faq(conn: sqlite3.Connection, faq_id: str) -> Optional[FAQRecord]:
    """Fetch a single FAQ by its UUID.  Returns ``None`` if not found."""
    row = conn.execute("SELECT * FROM faqs WHERE id = ?", (faq_id,)).fetchone()
    return _row_to_faq(row) if row else None


def list_faqs(
    conn: sqlite3.Connection,
    status: Optional[str] = None,
) -> list[FAQRecord]:
    """Return all FAQs newest first, optionally filtered by ``status``."""
    if status:
        rows = conn.execute(
            "SELECT * FROM faqs WHERE status = ? ORDER BY created_at DESC, rowid DESC",
            (_check_status(status),),
        ).fetchall()
    else:
        rows = conn.execute(
            "SELECT * FROM faqs ORDER BY created_at DESC, rowid DESC"
        ).fetchall()
    return [_row_to_faq(r) for r in rows]


def update_faq(conn: sqlite3.Connection, faq_id: str, **kwargs: Any) -> FAQRecord:
    """Update one or more fields on a FAQ.

    Allowed keyword arguments: ``question``, ``answer``, ``source_url``,
    ``status``.  ``None`` values are ignored.  ``updated_at`` is always
    refreshed automatically.

    Raises:
        LookupError: If ``faq_id`` does not exist.
        ValueError: On an unknown field, an empty question/answer or an
            invalid status.
    """
    if get_faq(conn, faq_id) is None:
        raise LookupError(f"FAQ not found: {faq_id!r}")

    allowed = {"question", "answer", "source_url", "status"}
    updates: dict[str, Any] = {}
    for key, value in kwargs.items():
        if key not in allowed:
            raise ValueError(f"Cannot update field {key!r}")
        if value is None:
            continue
        if key == "status":
            updates[key] = _check_status(value)
            continue
        value = str(value).strip()
        if not value:
            raise ValueError(f"{key} cannot be empty")
        updates[key] = value

    updates["updated_at"] = int(time())
    set_clause = ", ".join(f"{col} = ?" for col in updates)
    values = list(updates.values()) + [faq_id]

    with conn:
        conn.execute(f"UPDATE faqs SET {set_clause} WHERE id = ?", values)  # noqa: S608

    return get_faq(conn, faq_id)  # type: ignore[return-value]


def publish_faq(conn: sqlite3.Connection, faq_id: str) -> FAQRecord:
    """Mark a FAQ as published.

    Raises:
        LookupError: If ``faq_id`` does not exist.
    """
    return update_faq(conn, faq_id, status=FAQStatus.PUBLISHED.value)
