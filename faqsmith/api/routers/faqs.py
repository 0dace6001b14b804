"""FAQ endpoints.

Routes
------
POST /faqs/generate          Body: {"text", "count"}      → FAQs (not stored)
POST /faqs/generate-faqs     Body: {"url", "count"}       → crawl + stored drafts
POST /faqs/save              Body: {"faqs", "source_url"} → stored FAQs
GET  /faqs                   ?status=draft|published      → list
GET  /faqs/export            ?format=json|csv             → published FAQs
PUT  /faqs/{faq_id}          Body: any of question/answer/source_url/status
POST /faqs/{faq_id}/publish                               → mark published
"""

from __future__ import annotations

import sqlite3
from typing import Any, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from pydantic import BaseModel, Field

from faqsmith.api.deps import get_db
from faqsmith.api.errors import http_error
from faqsmith.db import faqs as faq_store
from faqsmith.db.models import FAQRecord
from faqsmith.errors import FaqsmithError
from faqsmith.faq import FAQItem, FAQStatus, FAQSynthesizer
from faqsmith.pipeline import export_faqs_csv, export_faqs_json, generate_for_url

router = APIRouter()


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------

class GenerateRequest(BaseModel):
    text: str
    count: Optional[Any] = None


class GenerateFromUrlRequest(BaseModel):
    url: str = Field(..., min_length=1)
    count: Optional[Any] = None


class FAQIn(BaseModel):
    question: str
    answer: str
    status: Optional[Literal["draft", "published"]] = None


class SaveRequest(BaseModel):
    faqs: list[FAQIn]
    source_url: str = Field(..., min_length=1)


class FAQUpdate(BaseModel):
    question: Optional[str] = None
    answer: Optional[str] = None
    source_url: Optional[str] = None
    status: Optional[str] = None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _faq_response(record: FAQRecord) -> dict[str, Any]:
    return {
        "id": record.id,
        "question": record.question,
        "answer": record.answer,
        "source_url": record.source_url,
        "status": record.status,
        "created_at": record.created_at,
        "updated_at": record.updated_at,
    }


def _synthesizer(request: Request) -> FAQSynthesizer:
    synthesizer = getattr(request.app.state, "synthesizer", None)
    if synthesizer is None:
        reason = getattr(request.app.state, "synthesizer_error", None)
        raise HTTPException(
            status_code=503,
            detail=f"FAQ generation is not configured: {reason or 'no provider'}",
        )
    return synthesizer


# ---------------------------------------------------------------------------
# Generation
# ---------------------------------------------------------------------------

@router.post("/generate")
def generate_endpoint(body: GenerateRequest, request: Request) -> dict[str, Any]:
    """Generate FAQs from raw text without storing them."""
    if not body.text.strip():
        raise HTTPException(status_code=400, detail="Text is required")

    synthesizer = _synthesizer(request)
    try:
        items = synthesizer.generate(body.text, body.count)
    except FaqsmithError as exc:
        raise http_error(exc) from exc

    return {
        "message": "FAQs generated successfully",
        "count": len(items),
        "faqs": [item.to_dict() for item in items],
    }


@router.post("/generate-faqs", status_code=201)
def generate_from_url_endpoint(
    body: GenerateFromUrlRequest,
    request: Request,
    conn: sqlite3.Connection = Depends(get_db),
) -> dict[str, Any]:
    """Crawl *url*, generate FAQs from its text and store them as drafts."""
    if not body.url.strip():
        raise HTTPException(status_code=400, detail="URL is required")

    synthesizer = _synthesizer(request)
    try:
        page, records = generate_for_url(conn, body.url, synthesizer, body.count)
    except FaqsmithError as exc:
        raise http_error(exc) from exc

    return {
        "message": "FAQs generated and saved successfully",
        "crawled_page": {
            "id": page.id,
            "url": page.url,
            "text_length": len(page.cleaned_text),
        },
        "faqs": {
            "count": len(records),
            "items": [_faq_response(r) for r in records],
        },
    }


# ---------------------------------------------------------------------------
# Storage
# ---------------------------------------------------------------------------

@router.post("/save", status_code=201)
def save_endpoint(
    body: SaveRequest, conn: sqlite3.Connection = Depends(get_db)
) -> dict[str, Any]:
    """Store caller-supplied FAQs (e.g. after editing generated ones).

    The batch is written in one transaction.
    """
    for faq in body.faqs:
        if not faq.question.strip() or not faq.answer.strip():
            raise HTTPException(
                status_code=400,
                detail="Each FAQ must have question and answer properties",
            )

    records = faq_store.save_faqs(
        conn,
        [
            (FAQItem(question=faq.question, answer=faq.answer), faq.status or FAQStatus.DRAFT.value)
            for faq in body.faqs
        ],
        source_url=body.source_url,
    )

    return {
        "message": "FAQs saved successfully",
        "count": len(records),
        "faqs": [_faq_response(r) for r in records],
    }


@router.get("")
def list_endpoint(
    status: Optional[str] = None, conn: sqlite3.Connection = Depends(get_db)
) -> dict[str, Any]:
    """List FAQs newest first; an unrecognised ``status`` filter is ignored."""
    if status not in {s.value for s in FAQStatus}:
        status = None
    records = faq_store.list_faqs(conn, status=status)
    return {"count": len(records), "faqs": [_faq_response(r) for r in records]}


@router.get("/export")
def export_endpoint(
    format: str = "json", conn: sqlite3.Connection = Depends(get_db)
) -> Any:
    """Export published FAQs as JSON (default) or CSV."""
    records = faq_store.list_faqs(conn, status=FAQStatus.PUBLISHED.value)
    if format == "csv":
        return Response(
            content=export_faqs_csv(records),
            media_type="text/csv",
            headers={"Content-Disposition": "attachment; filename=faqs-export.csv"},
        )
    return export_faqs_json(records)


# ---------------------------------------------------------------------------
# Editing
# ---------------------------------------------------------------------------

@router.put("/{faq_id}")
def update_endpoint(
    faq_id: str, body: FAQUpdate, conn: sqlite3.Connection = Depends(get_db)
) -> dict[str, Any]:
    """Edit a FAQ's question, answer, source URL or status."""
    try:
        record = faq_store.update_faq(
            conn,
            faq_id,
            question=body.question,
            answer=body.answer,
            source_url=body.source_url,
            status=body.status,
        )
    except LookupError as exc:
        raise HTTPException(status_code=404, detail="FAQ not found") from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    return {"message": "FAQ updated successfully", "faq": _faq_response(record)}


@router.post("/{faq_id}/publish")
def publish_endpoint(
    faq_id: str, conn: sqlite3.Connection = Depends(get_db)
) -> dict[str, Any]:
    """Mark a FAQ as published."""
    try:
        record = faq_store.publish_faq(conn, faq_id)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail="FAQ not found") from exc

    return {"message": "FAQ published successfully", "faq": _faq_response(record)}
