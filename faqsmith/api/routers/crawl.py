"""Crawl endpoint.

Routes
------
POST /crawl    Body: {"url": "example.com/page"}    → structured content
"""

from __future__ import annotations

import sqlite3
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from faqsmith.api.deps import get_db
from faqsmith.api.errors import http_error
from faqsmith.errors import FaqsmithError
from faqsmith.pipeline import crawl

router = APIRouter()


class CrawlRequest(BaseModel):
    # Plain string: a missing scheme is allowed and defaults to https.
    url: str = Field(..., min_length=1)


@router.post("", status_code=200)
def crawl_endpoint(
    body: CrawlRequest, conn: sqlite3.Connection = Depends(get_db)
) -> dict[str, Any]:
    """Fetch *url*, extract its content and record the crawl.

    Returns the full extracted document plus the stored crawl record.
    """
    if not body.url.strip():
        raise HTTPException(status_code=400, detail="URL is required")

    try:
        doc, page = crawl(conn, body.url)
    except FaqsmithError as exc:
        raise http_error(exc) from exc

    return {
        "message": "Website crawled successfully",
        "data": doc.to_dict(),
        "crawled_page": {
            "id": page.id,
            "url": page.url,
            "text_length": len(page.cleaned_text),
            "created_at": page.created_at,
        },
    }
