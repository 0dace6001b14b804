"""Caller-side wiring of the extractor, the synthesizer and the store.

The extractor and the synthesizer never call each other; these functions
do, and they own the policies that sit between them:

    extract → require_content → store page → synthesize → store drafts

They are shared by the HTTP API and the CLI.
"""

from __future__ import annotations

import csv
import io
import logging
import sqlite3
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

import httpx

from faqsmith.config import settings
from faqsmith.db import faqs as faq_store
from faqsmith.db import pages as page_store
from faqsmith.db.models import CrawledPage, FAQRecord, iso_timestamp
from faqsmith.faq.prompt import DEFAULT_FAQ_COUNT
from faqsmith.faq.synthesizer import FAQSynthesizer
from faqsmith.scraper import ContentError, ExtractedDocument, extract

logger = logging.getLogger(__name__)

CSV_HEADER = ["Question", "Answer", "Source URL", "Created At"]


def require_content(doc: ExtractedDocument, minimum: Optional[int] = None) -> ExtractedDocument:
    """Reject documents whose raw or cleaned text is too short to use.

    Raises:
        ContentError: If either text is shorter than *minimum* characters
            (``settings.min_content_length`` by default).
    """
    limit = settings.min_content_length if minimum is None else minimum
    length = min(len(doc.raw_text.strip()), len(doc.cleaned_text.strip()))
    if length < limit:
        raise ContentError(doc.url, length, limit)
    return doc


def crawl(
    conn: sqlite3.Connection,
    url: str,
    client: Optional[httpx.Client] = None,
) -> tuple[ExtractedDocument, CrawledPage]:
    """Extract *url*, check it has usable text, and record the crawl.

    Raises:
        FetchError: If the page could not be fetched.
        ContentError: If the page holds too little text.
    """
    doc = require_content(extract(url, client=client))
    page = page_store.create_page(
        conn,
        url=doc.url,
        raw_text=doc.raw_text,
        cleaned_text=doc.cleaned_text,
        title=doc.title,
    )
    logger.info("Crawled %s (%d chars)", doc.url, len(doc.cleaned_text))
    return doc, page


def generate_for_url(
    conn: sqlite3.Connection,
    url: str,
    synthesizer: FAQSynthesizer,
    count: Any = DEFAULT_FAQ_COUNT,
    client: Optional[httpx.Client] = None,
) -> tuple[CrawledPage, list[FAQRecord]]:
    """Crawl *url*, generate FAQs from it, and store them as drafts.

    An existing crawl record for the URL is reused rather than duplicated;
    the page itself is always fetched fresh.

    Raises:
        FetchError, ContentError: From the crawl step.
        InputError, UpstreamError, ParseError, CountError: From synthesis.
    """
    doc = require_content(extract(url, client=client))

    page = page_store.get_page_by_url(conn, doc.url)
    if page is None:
        page = page_store.create_page(
            conn,
            url=doc.url,
            raw_text=doc.raw_text,
            cleaned_text=doc.cleaned_text,
            title=doc.title,
        )

    items = synthesizer.generate(doc.cleaned_text, count)
    records = faq_store.create_faqs(conn, items, source_url=doc.url)
    logger.info("Stored %d draft FAQs for %s", len(records), doc.url)
    return page, records


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------

def _export_row(record: FAQRecord) -> dict[str, str]:
    return {
        "question": record.question,
        "answer": record.answer,
        "source_url": record.source_url,
        "created_at": iso_timestamp(record.created_at),
    }


def export_faqs_json(records: Iterable[FAQRecord]) -> dict[str, Any]:
    """Return the JSON export document for *records*."""
    rows = [_export_row(r) for r in records]
    return {
        "export_date": datetime.now(timezone.utc).isoformat(),
        "count": len(rows),
        "faqs": rows,
    }


def export_faqs_csv(records: Iterable[FAQRecord]) -> str:
    """Return *records* as CSV text with a header row."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for record in records:
        row = _export_row(record)
        writer.writerow(
            [row["question"], row["answer"], row["source_url"], row["created_at"]]
        )
    return buffer.getvalue()
