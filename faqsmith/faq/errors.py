"""Error types raised by the FAQ synthesizer."""

from __future__ import annotations

from typing import Optional

from faqsmith.errors import FaqsmithError


class InputError(FaqsmithError):
    """Bad arguments or configuration: empty text, missing credential, unknown provider."""


class UpstreamError(FaqsmithError):
    """The generator provider failed.

    ``retriable`` marks transient failures (server errors, timeouts, dropped
    connections) that are worth another attempt; client-side failures such
    as a bad credential or a malformed request are not.
    """

    def __init__(
        self,
        detail: str,
        *,
        retriable: bool,
        status_code: Optional[int] = None,
        provider: Optional[str] = None,
        retry_after: Optional[float] = None,
    ) -> None:
        super().__init__(detail)
        self.retriable = retriable
        self.status_code = status_code
        self.provider = provider
        self.retry_after = retry_after

    @property
    def rate_limited(self) -> bool:
        return self.status_code == 429

    def __repr__(self) -> str:
        return (
            f"UpstreamError(provider={self.provider!r}, status_code={self.status_code!r}, "
            f"retriable={self.retriable!r})"
        )


class ParseError(FaqsmithError):
    """The generator output could not be decoded into well-formed FAQ items.

    Only the length of the offending fragment is kept, never its content.
    """

    def __init__(
        self,
        detail: str,
        *,
        fragment_length: Optional[int] = None,
        index: Optional[int] = None,
    ) -> None:
        super().__init__(detail)
        self.fragment_length = fragment_length
        self.index = index


class CountError(FaqsmithError):
    """The generator returned fewer FAQ items than requested."""

    def __init__(self, expected: int, received: int) -> None:
        super().__init__(
            f"Failed to generate exactly {expected} FAQs. "
            f"Only received {received}. Please try again."
        )
        self.expected = expected
        self.received = received
