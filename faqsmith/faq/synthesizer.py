"""FAQ synthesis: cleaned page text in, exactly N validated FAQ items out.

``FAQSynthesizer.generate`` runs the whole contract:

    validate → clamp count → truncate → prompt → submit (with retry)
    → parse → validate items → reconcile count

Configuration is captured once in a :class:`SynthesizerConfig` and checked
when the synthesizer is constructed; nothing reads the environment mid-call.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

from faqsmith.config import Settings
from faqsmith.faq.errors import InputError, UpstreamError
from faqsmith.faq.models import FAQItem
from faqsmith.faq.parsing import parse_faq_response, reconcile_count, validate_items
from faqsmith.faq.prompt import (
    DEFAULT_FAQ_COUNT,
    build_prompt,
    clamp_count,
    truncate_text,
)
from faqsmith.faq.providers import (
    PROVIDERS,
    GenerationParams,
    GeneratorProvider,
    build_provider,
)

logger = logging.getLogger(__name__)

_API_KEY_ENV = {
    "openai": "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
    "gemini": "GEMINI_API_KEY",
}


@dataclass(frozen=True)
class SynthesizerConfig:
    provider: str
    api_key: str
    model: str
    temperature: float = 0.7
    max_tokens: int = 4000
    timeout: float = 60.0
    max_retries: int = 2
    retry_base_delay: float = 1.0
    max_text_length: int = 10_000

    @classmethod
    def from_settings(cls, settings: Settings) -> "SynthesizerConfig":
        """Snapshot the generator section of *settings* for the active provider."""
        provider = settings.llm_provider.lower()
        credentials = {
            "openai": (settings.openai_api_key, settings.openai_chat_model),
            "anthropic": (settings.anthropic_api_key, settings.anthropic_model),
            "gemini": (settings.gemini_api_key, settings.gemini_model),
        }
        api_key, model = credentials.get(provider, ("", ""))
        return cls(
            provider=provider,
            api_key=api_key,
            model=model,
            temperature=settings.llm_temperature,
            max_tokens=settings.llm_max_tokens,
            timeout=settings.llm_timeout,
            max_retries=settings.llm_max_retries,
            retry_base_delay=settings.llm_retry_base_delay,
            max_text_length=settings.max_text_length,
        )

    def validate(self) -> None:
        """Raise :class:`InputError` if the provider is unknown or has no credential."""
        if self.provider not in PROVIDERS:
            raise InputError(
                f"Unknown LLM provider {self.provider!r}. "
                f"Use one of: {', '.join(PROVIDERS)}"
            )
        if not self.api_key or not self.api_key.strip():
            raise InputError(
                f"{_API_KEY_ENV[self.provider]} is not defined in environment variables"
            )
        if self.max_retries < 0:
            raise InputError("max_retries must be zero or greater")

    @property
    def params(self) -> GenerationParams:
        return GenerationParams(
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            json_mode=True,
            timeout=self.timeout,
        )


class FAQSynthesizer:
    """Generate a fixed-count FAQ set from page text via an external LLM.

    Args:
        config: Validated on construction.
        provider: Generator backend; built from *config* when omitted.
        sleep: Called with the backoff delay between attempts.
        clock: Monotonic clock used to honour ``deadline`` in :meth:`generate`.

    Raises:
        InputError: If *config* is invalid.
    """

    def __init__(
        self,
        config: SynthesizerConfig,
        provider: Optional[GeneratorProvider] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        config.validate()
        self.config = config
        self.provider = provider or build_provider(config.provider, config.api_key, config.model)
        self._sleep = sleep
        self._clock = clock

    # ------------------------------------------------------------------
    # Retry
    # ------------------------------------------------------------------
    def _submit_with_retry(self, prompt: str, deadline: Optional[float]) -> str:
        """Submit *prompt*, retrying retriable failures with exponential backoff.

        Delays are ``retry_base_delay * 2**attempt`` (1 s, 2 s with the
        defaults).  A retry is abandoned early when its backoff would end
        past *deadline*.
        """
        attempts = self.config.max_retries + 1
        for attempt in range(attempts):
            try:
                return self.provider.submit(prompt, self.config.params)
            except UpstreamError as exc:
                if not exc.retriable or attempt == attempts - 1:
                    raise
                delay = self.config.retry_base_delay * (2 ** attempt)
                if deadline is not None and self._clock() + delay >= deadline:
                    logger.warning(
                        "%s failed (%s); deadline leaves no room for another attempt",
                        self.provider.name,
                        exc.detail,
                    )
                    raise
                logger.warning(
                    "%s failed (attempt %d/%d): %s; retrying in %.0fs",
                    self.provider.name,
                    attempt + 1,
                    attempts,
                    exc.detail,
                    delay,
                )
                self._sleep(delay)
        raise AssertionError("unreachable: the final attempt either returns or raises")

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def generate(
        self,
        text: str,
        count: Any = DEFAULT_FAQ_COUNT,
        deadline: Optional[float] = None,
    ) -> List[FAQItem]:
        """Return exactly ``clamp_count(count)`` FAQ items generated from *text*.

        Args:
            text: Cleaned page text; silently truncated to
                ``config.max_text_length`` characters.
            count: Requested number of FAQs; clamped to 5–10.
            deadline: Optional ``clock()`` value after which no further
                retry is started.

        Raises:
            InputError: If *text* is empty or whitespace-only.
            UpstreamError: If the provider fails (after retries when retriable).
            ParseError: If the output cannot be decoded or an item is malformed.
            CountError: If fewer than the requested number of items came back.
        """
        if not isinstance(text, str) or not text.strip():
            raise InputError("Text content is required and cannot be empty")

        faq_count = clamp_count(count)
        prompt = build_prompt(truncate_text(text, self.config.max_text_length), faq_count)

        logger.info(
            "Generating %d FAQs with %s (%d chars of text)",
            faq_count,
            self.provider.name,
            min(len(text), self.config.max_text_length),
        )
        raw = self._submit_with_retry(prompt, deadline)

        items = validate_items(parse_faq_response(raw))
        return reconcile_count(items, faq_count)
