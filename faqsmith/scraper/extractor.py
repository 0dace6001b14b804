"""Content extraction: turns a :class:`RawPage` into an :class:`ExtractedDocument`."""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

import httpx
from bs4 import BeautifulSoup, CData, NavigableString, Tag

from faqsmith.scraper.fetcher import fetch_url
from faqsmith.scraper.models import (
    HEADING_LEVELS,
    ExtractedDocument,
    ExtractionMetadata,
    RawPage,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Noise removal
# ---------------------------------------------------------------------------
_NOISE_TAGS = [
    "script",
    "style",
    "nav",
    "footer",
    "header",
    "aside",
    "noscript",
    "iframe",
    "svg",
]
_NOISE_SELECTORS = [
    ".nav",
    ".navbar",
    ".footer",
    ".header",
    ".sidebar",
    ".menu",
    '[role="navigation"]',
    '[role="banner"]',
    '[role="contentinfo"]',
]

# Paragraphs this short are almost always bylines, buttons or cookie blurbs.
_MIN_PARAGRAPH_LENGTH = 20

_WHITESPACE_RUN = re.compile(r"\s+")

# Elements whose edges separate words in rendered text.
_BLOCK_TAGS = frozenset(
    {
        "address", "article", "aside", "blockquote", "br", "caption", "dd",
        "details", "div", "dl", "dt", "figcaption", "figure", "footer", "form",
        "h1", "h2", "h3", "h4", "h5", "h6", "header", "hr", "li", "main", "nav",
        "ol", "p", "pre", "section", "summary", "table", "tbody", "td", "tfoot",
        "th", "thead", "tr", "ul",
    }
)

# get_text() reads these string types; comments and doctypes are skipped.
_TEXT_TYPES = (NavigableString, CData)

_BOUNDARY = object()


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def clean_text(text: Optional[str]) -> str:
    """Collapse every whitespace run (newlines, tabs, CRs included) to one space.

    Idempotent: ``clean_text(clean_text(s)) == clean_text(s)``.
    """
    if not text:
        return ""
    return _WHITESPACE_RUN.sub(" ", text).strip()


def _strip_noise(soup: BeautifulSoup) -> None:
    """Remove navigation, chrome and non-text subtrees in place."""
    for tag in soup(_NOISE_TAGS):
        # Children of an already-removed subtree come back from the same query.
        if not tag.decomposed:
            tag.decompose()
    for selector in _NOISE_SELECTORS:
        for tag in soup.select(selector):
            if not tag.decomposed:
                tag.decompose()


def _meta_content(soup: BeautifulSoup, **attrs: str) -> Optional[str]:
    tag = soup.find("meta", attrs=attrs)
    if tag is None:
        return None
    content = tag.get("content")
    if isinstance(content, list):
        content = " ".join(content)
    return content.strip() if content and content.strip() else None


def _extract_title(soup: BeautifulSoup) -> str:
    """Page title → first ``<h1>`` → ``og:title`` → ``"Untitled"``."""
    title_tag = soup.find("title")
    if title_tag is not None and title_tag.get_text().strip():
        return title_tag.get_text().strip()

    first_h1 = soup.find("h1")
    if first_h1 is not None and first_h1.get_text().strip():
        return first_h1.get_text().strip()

    og_title = _meta_content(soup, property="og:title")
    if og_title:
        return og_title

    return "Untitled"


def _extract_description(soup: BeautifulSoup) -> Optional[str]:
    return _meta_content(soup, name="description") or _meta_content(
        soup, property="og:description"
    )


def _extract_headings(soup: BeautifulSoup) -> Dict[str, List[str]]:
    headings: Dict[str, List[str]] = {}
    for level in HEADING_LEVELS:
        texts = (tag.get_text().strip() for tag in soup.find_all(level))
        headings[level] = [text for text in texts if text]
    return headings


def _extract_paragraphs(soup: BeautifulSoup) -> List[str]:
    paragraphs: List[str] = []
    for tag in soup.find_all("p"):
        text = clean_text(tag.get_text())
        if len(text) > _MIN_PARAGRAPH_LENGTH:
            paragraphs.append(text)
    return paragraphs


def _outermost(tags: Iterable[Tag], name: str) -> List[Tag]:
    """Drop tags nested inside another tag of the same *name*."""
    return [tag for tag in tags if tag.find_parent(name) is None]


def _block_text(root: Tag) -> str:
    """Text of *root* with a space at every block boundary.

    Inline markup (``<a>``, ``<b>``, ``<span>`` ...) is joined as written, so
    ``Read the <a>docs</a>.`` stays ``Read the docs.`` while adjacent
    ``<p>`` or ``<li>`` elements never fuse into one word.
    """
    parts: List[str] = []
    stack: List[object] = [root]
    while stack:
        node = stack.pop()
        if node is _BOUNDARY:
            parts.append(" ")
        elif isinstance(node, Tag):
            if node.name in _BLOCK_TAGS:
                parts.append(" ")
                stack.append(_BOUNDARY)
            stack.extend(reversed(node.contents))
        elif type(node) in _TEXT_TYPES:
            parts.append(str(node))
    return "".join(parts)


def _main_region_text(soup: BeautifulSoup) -> str:
    """Text of every ``<article>``, else every ``<main>``, else ``<body>``."""
    for name in ("article", "main"):
        regions = _outermost(soup.find_all(name), name)
        if regions:
            return " ".join(_block_text(region) for region in regions)

    return _block_text(soup.body or soup)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def extract_document(raw: RawPage) -> ExtractedDocument:
    """Extract a structured, denoised document from *raw*.

    Noise subtrees are removed before anything is read, so script, style and
    navigation text never reaches the title, headings, paragraphs or body
    text.  An empty or text-free page yields an empty document rather than
    an error; judging whether there is *enough* text is up to the caller.
    """
    soup = BeautifulSoup(raw.html or "", "html.parser")
    _strip_noise(soup)

    title = _extract_title(soup)
    description = _extract_description(soup)
    headings = _extract_headings(soup)
    paragraphs = _extract_paragraphs(soup)

    raw_text = _main_region_text(soup)
    cleaned_text = clean_text(raw_text)

    cleaned_headings = {
        level: [clean_text(h) for h in items] for level, items in headings.items()
    }
    cleaned_paragraphs = [clean_text(p) for p in paragraphs]

    metadata = ExtractionMetadata(
        total_headings=sum(len(items) for items in headings.values()),
        total_paragraphs=len(paragraphs),
        text_length=len(cleaned_text),
        raw_text_length=len(raw_text),
        crawled_at=datetime.now(timezone.utc).isoformat(),
    )
    logger.debug(
        "Extracted %s: %d headings, %d paragraphs, %d chars",
        raw.url,
        metadata.total_headings,
        metadata.total_paragraphs,
        metadata.text_length,
    )

    return ExtractedDocument(
        url=raw.url,
        title=clean_text(title) or "Untitled",
        description=clean_text(description) if description else None,
        headings=cleaned_headings,
        paragraphs=cleaned_paragraphs,
        raw_text=raw_text,
        cleaned_text=cleaned_text,
        metadata=metadata,
    )


def extract(url: str, client: Optional[httpx.Client] = None) -> ExtractedDocument:
    """Fetch *url* and extract it in one step.

    Raises:
        FetchError: If the page could not be fetched (see :func:`fetch_url`).
    """
    return extract_document(fetch_url(url, client=client))
