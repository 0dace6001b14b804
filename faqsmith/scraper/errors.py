"""Error types raised while fetching and extracting web pages."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from faqsmith.errors import FaqsmithError


class FetchErrorKind(str, Enum):
    """Why a fetch failed, precise enough for the caller to pick a response."""

    INVALID_URL = "invalid_url"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    RATE_LIMITED = "rate_limited"
    SERVER_ERROR = "server_error"
    OTHER_HTTP = "other_http"
    NETWORK_UNREACHABLE = "network_unreachable"
    DNS_FAILURE = "dns_failure"
    CONNECTION_REFUSED = "connection_refused"
    TIMEOUT = "timeout"
    TLS_FAILURE = "tls_failure"
    UNKNOWN = "unknown"


_DEFAULT_MESSAGES: dict[FetchErrorKind, str] = {
    FetchErrorKind.INVALID_URL: "A valid URL is required.",
    FetchErrorKind.FORBIDDEN: (
        "HTTP 403: Access forbidden. The website is blocking automated "
        "requests (bot protection, rate limiting, IP blocking or required "
        "authentication)."
    ),
    FetchErrorKind.NOT_FOUND: (
        "HTTP 404: Page not found. The URL does not exist or has been removed."
    ),
    FetchErrorKind.RATE_LIMITED: (
        "HTTP 429: Too many requests. The website is rate limiting requests; "
        "please try again later."
    ),
    FetchErrorKind.SERVER_ERROR: (
        "Server error: the website server is experiencing issues. "
        "Please try again later."
    ),
    FetchErrorKind.OTHER_HTTP: "Failed to fetch website.",
    FetchErrorKind.NETWORK_UNREACHABLE: (
        "Network error: no response from server. Please check the URL and "
        "your internet connection."
    ),
    FetchErrorKind.DNS_FAILURE: (
        "DNS error: could not resolve hostname. Please check the URL is correct."
    ),
    FetchErrorKind.CONNECTION_REFUSED: (
        "Connection refused: the server is not responding or the port is blocked."
    ),
    FetchErrorKind.TIMEOUT: (
        "Request timeout: the server took too long to respond."
    ),
    FetchErrorKind.TLS_FAILURE: (
        "SSL certificate error: the website has an invalid or expired certificate."
    ),
    FetchErrorKind.UNKNOWN: "Failed to crawl website.",
}


class FetchError(FaqsmithError):
    """Any network, protocol or HTTP-status failure while fetching a page."""

    def __init__(
        self,
        kind: FetchErrorKind,
        detail: Optional[str] = None,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(detail or _DEFAULT_MESSAGES[kind])
        self.kind = kind
        self.status_code = status_code

    def __repr__(self) -> str:
        return f"FetchError(kind={self.kind.value!r}, status_code={self.status_code!r})"


class ContentError(FaqsmithError):
    """The page was fetched but holds too little readable text to use."""

    def __init__(self, url: str, length: int, minimum: int) -> None:
        super().__init__(
            f"Website does not contain enough readable content "
            f"({length} characters, need at least {minimum})."
        )
        self.url = url
        self.length = length
        self.minimum = minimum
