"""Data models for the scraper pipeline."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional

HEADING_LEVELS = ("h1", "h2", "h3", "h4", "h5", "h6")


@dataclass
class RawPage:
    """The raw HTTP response for a single URL fetch."""

    url: str
    html: str
    status_code: int
    final_url: Optional[str] = None


@dataclass
class ExtractionMetadata:
    total_headings: int
    total_paragraphs: int
    text_length: int
    raw_text_length: int
    crawled_at: str


@dataclass
class ExtractedDocument:
    """Structured, denoised content of a single page.

    ``headings`` maps each level (``"h1"`` … ``"h6"``) to its headings in
    document order; every level is always present, possibly empty.
    """

    url: str
    title: str
    description: Optional[str]
    headings: Dict[str, List[str]]
    paragraphs: List[str]
    raw_text: str
    cleaned_text: str
    metadata: ExtractionMetadata

    def to_dict(self) -> dict[str, Any]:
        """Return the caller-facing JSON-serialisable shape."""
        return asdict(self)
