"""Dataclass models representing DB rows.

These are plain Python objects – not ORM models.  The DB layer serialises /
deserialises to and from these types.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone


def iso_timestamp(epoch: int) -> str:
    """Render a stored epoch-seconds value as an ISO-8601 UTC string."""
    return datetime.fromtimestamp(epoch, tz=timezone.utc).isoformat()


@dataclass
class CrawledPage:
    id: str
    url: str
    title: str
    raw_text: str
    cleaned_text: str
    created_at: int


@dataclass
class FAQRecord:
    id: str
    question: str
    answer: str
    source_url: str
    status: str
    created_at: int
    updated_at: int
