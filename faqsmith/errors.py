"""Base exception shared by the scraper and FAQ pipelines."""

from __future__ import annotations


class FaqsmithError(Exception):
    """Root of every error raised by faqsmith components.

    ``detail`` is a human-readable message safe to show to API clients.
    """

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail
