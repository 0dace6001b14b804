"""Scraper package: web fetch and structured content extraction."""

from faqsmith.scraper.errors import ContentError, FetchError, FetchErrorKind
from faqsmith.scraper.extractor import clean_text, extract, extract_document
from faqsmith.scraper.fetcher import fetch_url, normalize_url
from faqsmith.scraper.models import ExtractedDocument, ExtractionMetadata, RawPage

__all__ = [
    "extract",
    "extract_document",
    "fetch_url",
    "normalize_url",
    "clean_text",
    "ExtractedDocument",
    "ExtractionMetadata",
    "RawPage",
    "FetchError",
    "FetchErrorKind",
    "ContentError",
]
