"""HTTP fetcher that classifies every failure into a :class:`FetchError`.

The fetcher never retries: a blocked crawl rarely succeeds on the second
attempt and hammering the site only makes bot defences more likely to trip.
"""

from __future__ import annotations

import logging
import socket
import ssl
from typing import Iterator, Optional

import httpx

from faqsmith.config import settings
from faqsmith.scraper.errors import FetchError, FetchErrorKind
from faqsmith.scraper.models import RawPage

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Browser-like request headers (plain bot user agents get blocked far more
# often than a desktop Chrome fingerprint)
# ---------------------------------------------------------------------------
_BROWSER_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": (
        "text/html,application/xhtml+xml,application/xml;q=0.9,"
        "image/avif,image/webp,image/apng,*/*;q=0.8"
    ),
    "Accept-Language": "en-US,en;q=0.9",
    "Accept-Encoding": "gzip, deflate",
    "Connection": "keep-alive",
    "Upgrade-Insecure-Requests": "1",
    "Sec-Fetch-Dest": "document",
    "Sec-Fetch-Mode": "navigate",
    "Sec-Fetch-Site": "none",
    "Sec-Fetch-User": "?1",
    "Cache-Control": "max-age=0",
    "DNT": "1",
    "Referer": "https://www.google.com/",
}

_DNS_MARKERS = (
    "name or service not known",
    "nodename nor servname",
    "getaddrinfo failed",
    "temporary failure in name resolution",
    "no address associated with hostname",
)
_TLS_MARKERS = ("certificate_verify_failed", "certificate has expired", "[ssl")


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def normalize_url(url: str) -> str:
    """Trim *url* and default its scheme to ``https://``.

    Raises:
        FetchError: ``invalid_url`` if nothing is left after trimming.
    """
    if not isinstance(url, str) or not url.strip():
        raise FetchError(FetchErrorKind.INVALID_URL)
    candidate = url.strip()
    if not candidate.lower().startswith(("http://", "https://")):
        candidate = f"https://{candidate}"
    return candidate


def _causes(exc: BaseException) -> Iterator[BaseException]:
    """Yield *exc* and every exception chained beneath it."""
    seen: set[int] = set()
    current: Optional[BaseException] = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = current.__cause__ or current.__context__


def _classify_status(status: int) -> FetchErrorKind:
    if status == 403:
        return FetchErrorKind.FORBIDDEN
    if status == 404:
        return FetchErrorKind.NOT_FOUND
    if status == 429:
        return FetchErrorKind.RATE_LIMITED
    if status >= 500:
        return FetchErrorKind.SERVER_ERROR
    return FetchErrorKind.OTHER_HTTP


def _classify_connect_error(exc: httpx.TransportError) -> FetchErrorKind:
    """Tell DNS, refused-connection and TLS failures apart.

    httpx wraps all of them in ``ConnectError``; the underlying socket/ssl
    exception survives in the chain, and the message is the fallback.
    """
    for cause in _causes(exc):
        if isinstance(cause, socket.gaierror):
            return FetchErrorKind.DNS_FAILURE
        if isinstance(cause, ConnectionRefusedError):
            return FetchErrorKind.CONNECTION_REFUSED
        if isinstance(cause, ssl.SSLError):
            return FetchErrorKind.TLS_FAILURE

    message = str(exc).lower()
    if any(marker in message for marker in _DNS_MARKERS):
        return FetchErrorKind.DNS_FAILURE
    if "connection refused" in message or "errno 111" in message:
        return FetchErrorKind.CONNECTION_REFUSED
    if any(marker in message for marker in _TLS_MARKERS):
        return FetchErrorKind.TLS_FAILURE
    return FetchErrorKind.NETWORK_UNREACHABLE


def _status_error(url: str, response: httpx.Response) -> FetchError:
    status = response.status_code
    kind = _classify_status(status)
    detail = None
    if kind in (FetchErrorKind.SERVER_ERROR, FetchErrorKind.OTHER_HTTP):
        reason = response.reason_phrase or "Failed to fetch website"
        detail = f"HTTP {status}: {reason}"
    logger.warning("Fetch of %s failed with HTTP %s (%s)", url, status, kind.value)
    return FetchError(kind, detail, status_code=status)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def fetch_url(url: str, client: Optional[httpx.Client] = None) -> RawPage:
    """Fetch *url* and return a :class:`RawPage`.

    Any 2xx or 3xx final status counts as success.  Redirects are followed up
    to ``settings.max_redirects`` and the whole request is bounded by
    ``settings.request_timeout``.

    Args:
        url: Address to fetch; the scheme defaults to ``https://``.
        client: Optional pre-configured client (its own headers, timeout and
            redirect policy are then used as-is).

    Raises:
        FetchError: On every network, protocol or HTTP-status failure.
    """
    target = normalize_url(url)
    logger.debug("Fetching %s", target)

    try:
        if client is not None:
            response = client.get(target)
        else:
            with httpx.Client(
                headers=_BROWSER_HEADERS,
                timeout=settings.request_timeout,
                follow_redirects=True,
                max_redirects=settings.max_redirects,
            ) as own_client:
                response = own_client.get(target)
    except httpx.TooManyRedirects as exc:
        raise FetchError(
            FetchErrorKind.OTHER_HTTP,
            f"Too many redirects (limit {settings.max_redirects}).",
        ) from exc
    except httpx.TimeoutException as exc:
        raise FetchError(FetchErrorKind.TIMEOUT) from exc
    except (httpx.UnsupportedProtocol, httpx.InvalidURL) as exc:
        raise FetchError(FetchErrorKind.INVALID_URL, f"Invalid URL: {target}") from exc
    except httpx.ConnectError as exc:
        kind = _classify_connect_error(exc)
        logger.warning("Could not connect to %s (%s): %s", target, kind.value, exc)
        raise FetchError(kind) from exc
    except httpx.TransportError as exc:
        raise FetchError(FetchErrorKind.NETWORK_UNREACHABLE) from exc
    except httpx.HTTPError as exc:
        raise FetchError(
            FetchErrorKind.UNKNOWN, f"Failed to crawl website: {exc}"
        ) from exc

    if not 200 <= response.status_code < 400:
        raise _status_error(target, response)

    return RawPage(
        url=target,
        html=response.text,
        status_code=response.status_code,
        final_url=str(response.url),
    )
