"""Translate pipeline errors into client-facing HTTP errors.

This is the only place that decides status codes; the components raise
typed errors and never pick one themselves.
"""

from __future__ import annotations

from fastapi import HTTPException

from faqsmith.errors import FaqsmithError
from faqsmith.faq.errors import CountError, InputError, ParseError, UpstreamError
from faqsmith.scraper.errors import ContentError, FetchError, FetchErrorKind

# The source URL itself is unusable; retrying the same request will not help.
_CLIENT_FETCH_KINDS = {
    FetchErrorKind.INVALID_URL,
    FetchErrorKind.FORBIDDEN,
    FetchErrorKind.NOT_FOUND,
    FetchErrorKind.DNS_FAILURE,
    FetchErrorKind.TLS_FAILURE,
    FetchErrorKind.OTHER_HTTP,
}


def status_for(exc: FaqsmithError) -> int:
    """Return the HTTP status code for *exc*."""
    if isinstance(exc, FetchError):
        if exc.kind is FetchErrorKind.RATE_LIMITED:
            return 429
        return 400 if exc.kind in _CLIENT_FETCH_KINDS else 502
    if isinstance(exc, ContentError):
        return 422
    if isinstance(exc, InputError):
        return 400
    if isinstance(exc, UpstreamError):
        return 429 if exc.rate_limited else 502
    if isinstance(exc, (ParseError, CountError)):
        return 502
    return 500


def http_error(exc: FaqsmithError) -> HTTPException:
    """Build the :class:`HTTPException` to raise for *exc*."""
    headers = None
    if isinstance(exc, UpstreamError) and exc.retry_after is not None:
        headers = {"Retry-After": f"{exc.retry_after:.0f}"}
    return HTTPException(status_code=status_for(exc), detail=exc.detail, headers=headers)
