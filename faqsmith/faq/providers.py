"""Generator backends behind one ``submit(prompt, params) -> str`` interface.

Providers
---------
``openai`` (default)
    Chat Completions API with ``response_format={"type": "json_object"}``.
    Requires ``OPENAI_API_KEY``; model via ``OPENAI_CHAT_MODEL``.

``anthropic``
    Messages API (no JSON mode; the prompt alone constrains the shape).
    Requires ``ANTHROPIC_API_KEY``; model via ``ANTHROPIC_MODEL``.

``gemini``
    ``generateContent`` with ``responseMimeType="application/json"``.
    Requires ``GEMINI_API_KEY``; model via ``GEMINI_MODEL``.

Every HTTP or transport failure leaves a provider as an
:class:`~faqsmith.faq.errors.UpstreamError` tagged retriable or not; the
retry policy itself lives in the synthesizer.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from faqsmith.faq.errors import InputError, UpstreamError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GenerationParams:
    temperature: float = 0.7
    max_tokens: int = 4000
    json_mode: bool = True
    timeout: float = 60.0


# ---------------------------------------------------------------------------
# Error classification
# ---------------------------------------------------------------------------

def _error_message(response: httpx.Response) -> str:
    """Best-effort extraction of the provider's own error message."""
    try:
        body = response.json()
    except ValueError:
        return response.text[:200] or response.reason_phrase
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if body.get("message"):
            return str(body["message"])
    return response.reason_phrase


def _retry_after(response: httpx.Response) -> Optional[float]:
    value = response.headers.get("retry-after")
    try:
        return float(value) if value is not None else None
    except ValueError:
        return None


def classify_http_error(exc: httpx.HTTPError, provider: str) -> UpstreamError:
    """Map an httpx failure to a retriable or non-retriable :class:`UpstreamError`.

    Server errors (5xx), request timeouts (408) and transport failures are
    retriable.  Every other 4xx is not, including 429, which keeps its
    ``Retry-After`` hint.
    """
    if isinstance(exc, httpx.HTTPStatusError):
        response = exc.response
        status = response.status_code
        message = _error_message(response)
        if status == 429:
            retry_after = _retry_after(response)
            wait = f"{retry_after:.0f}" if retry_after is not None else "60"
            return UpstreamError(
                f"Rate limit exceeded. Please try again after {wait} seconds.",
                retriable=False,
                status_code=status,
                provider=provider,
                retry_after=retry_after,
            )
        if status >= 500 or status == 408:
            return UpstreamError(
                f"{provider} API server error ({status}): Please try again later.",
                retriable=True,
                status_code=status,
                provider=provider,
            )
        return UpstreamError(
            f"{provider} API error ({status}): {message}",
            retriable=False,
            status_code=status,
            provider=provider,
        )

    if isinstance(exc, httpx.TimeoutException):
        return UpstreamError(
            f"{provider} API request timed out.", retriable=True, provider=provider
        )
    return UpstreamError(
        f"{provider} API request failed: {exc}", retriable=True, provider=provider
    )


# ---------------------------------------------------------------------------
# Abstract base
# ---------------------------------------------------------------------------

class GeneratorProvider(ABC):
    """A remote text generator reachable over authenticated HTTPS."""

    base_url: str = ""

    def __init__(self, api_key: str, model: str, base_url: Optional[str] = None) -> None:
        self.api_key = api_key
        self.model = model
        if base_url:
            self.base_url = base_url.rstrip("/")

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable provider name."""

    @abstractmethod
    def _request(self, prompt: str, params: GenerationParams) -> tuple[str, dict[str, str], dict[str, Any]]:
        """Return ``(url, headers, json_body)`` for one generation request."""

    @abstractmethod
    def _extract_text(self, data: dict[str, Any]) -> str:
        """Pull the generated text out of a decoded response body."""

    def submit(self, prompt: str, params: GenerationParams) -> str:
        """Send *prompt* and return the raw generated text.

        Raises:
            UpstreamError: On any HTTP/transport failure or an unexpected
                response envelope.
        """
        url, headers, body = self._request(prompt, params)
        try:
            with httpx.Client(timeout=params.timeout) as client:
                response = client.post(url, headers=headers, json=body)
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as exc:
            raise classify_http_error(exc, self.name) from exc
        except ValueError as exc:
            raise UpstreamError(
                f"{self.name} API returned a non-JSON response.",
                retriable=True,
                provider=self.name,
            ) from exc

        try:
            text = self._extract_text(data)
        except (KeyError, IndexError, TypeError, AttributeError) as exc:
            raise UpstreamError(
                f"{self.name} API returned an unexpected response shape.",
                retriable=False,
                provider=self.name,
            ) from exc

        usage = data.get("usage") or data.get("usageMetadata")
        logger.debug("%s generation finished (%d chars, usage=%s)", self.name, len(text), usage)
        return text


# ---------------------------------------------------------------------------
# Concrete providers
# ---------------------------------------------------------------------------

class OpenAIProvider(GeneratorProvider):
    base_url = "https://api.openai.com/v1"

    @property
    def name(self) -> str:
        return "OpenAI"

    def _request(self, prompt, params):
        body: dict[str, Any] = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": params.max_tokens,
            "temperature": params.temperature,
        }
        if params.json_mode:
            body["response_format"] = {"type": "json_object"}
        headers = {"Authorization": f"Bearer {self.api_key}"}
        return f"{self.base_url}/chat/completions", headers, body

    def _extract_text(self, data):
        return data["choices"][0]["message"]["content"] or ""


class AnthropicProvider(GeneratorProvider):
    base_url = "https://api.anthropic.com/v1"
    api_version = "2023-06-01"

    @property
    def name(self) -> str:
        return "Claude"

    def _request(self, prompt, params):
        body = {
            "model": self.model,
            "max_tokens": params.max_tokens,
            "temperature": params.temperature,
            "messages": [{"role": "user", "content": prompt}],
        }
        headers = {
            "x-api-key": self.api_key,
            "anthropic-version": self.api_version,
        }
        return f"{self.base_url}/messages", headers, body

    def _extract_text(self, data):
        return "".join(
            block["text"] for block in data["content"] if block.get("type") == "text"
        )


class GeminiProvider(GeneratorProvider):
    base_url = "https://generativelanguage.googleapis.com/v1beta"

    @property
    def name(self) -> str:
        return "Gemini"

    def _request(self, prompt, params):
        generation_config: dict[str, Any] = {
            "temperature": params.temperature,
            "topK": 40,
            "topP": 0.95,
            "maxOutputTokens": params.max_tokens,
        }
        if params.json_mode:
            generation_config["responseMimeType"] = "application/json"
        body = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": generation_config,
        }
        headers = {"x-goog-api-key": self.api_key}
        return f"{self.base_url}/models/{self.model}:generateContent", headers, body

    def _extract_text(self, data):
        parts = data["candidates"][0]["content"]["parts"]
        return "".join(part.get("text", "") for part in parts)


PROVIDERS: dict[str, type[GeneratorProvider]] = {
    "openai": OpenAIProvider,
    "anthropic": AnthropicProvider,
    "gemini": GeminiProvider,
}


def build_provider(name: str, api_key: str, model: str) -> GeneratorProvider:
    """Instantiate the provider registered under *name*.

    Raises:
        InputError: If *name* is not a known provider.
    """
    try:
        provider_cls = PROVIDERS[name.lower()]
    except KeyError:
        raise InputError(
            f"Unknown LLM provider {name!r}. Use one of: {', '.join(PROVIDERS)}"
        ) from None
    return provider_cls(api_key=api_key, model=model)
