"""Tests for FAQSynthesizer: configuration, retry policy and count contract.

A scripted fake provider stands in for the remote generator, and the
synthesizer's ``sleep`` hook records backoff delays instead of sleeping.
"""

from __future__ import annotations

import json
from typing import Union

import pytest

from faqsmith.config import Settings
from faqsmith.faq import (
    CountError,
    FAQItem,
    FAQSynthesizer,
    InputError,
    ParseError,
    SynthesizerConfig,
    UpstreamError,
)
from faqsmith.faq.providers import GenerationParams, OpenAIProvider


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

Step = Union[str, Exception]


class ScriptedProvider:
    """Returns (or raises) the next scripted step on each ``submit`` call."""

    name = "Scripted"

    def __init__(self, *steps: Step) -> None:
        self.steps = list(steps)
        self.prompts: list[str] = []
        self.params: list[GenerationParams] = []

    def submit(self, prompt: str, params: GenerationParams) -> str:
        self.prompts.append(prompt)
        self.params.append(params)
        step = self.steps.pop(0)
        if isinstance(step, Exception):
            raise step
        return step

    @property
    def calls(self) -> int:
        return len(self.prompts)


def _faqs_json(n: int) -> str:
    return json.dumps(
        {"faqs": [{"question": f" Question {i}? ", "answer": f" Answer {i}. "} for i in range(n)]}
    )


def _server_error() -> UpstreamError:
    return UpstreamError("server error (500)", retriable=True, status_code=500)


def _config(**overrides) -> SynthesizerConfig:
    values = {"provider": "openai", "api_key": "sk-test", "model": "gpt-4o-mini"}
    values.update(overrides)
    return SynthesizerConfig(**values)


def _synth(provider: ScriptedProvider, sleeps: list[float] | None = None, **kwargs) -> FAQSynthesizer:
    recorded = sleeps if sleeps is not None else []
    return FAQSynthesizer(
        _config(**kwargs.pop("config", {})),
        provider=provider,  # type: ignore[arg-type]
        sleep=recorded.append,
        **kwargs,
    )


_TEXT = "Solar panels convert sunlight into electricity using photovoltaic cells."


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

class TestSynthesizerConfig:
    def test_missing_api_key_rejected_at_construction(self) -> None:
        with pytest.raises(InputError, match="OPENAI_API_KEY"):
            FAQSynthesizer(_config(api_key=""))

    def test_whitespace_api_key_rejected(self) -> None:
        with pytest.raises(InputError, match="ANTHROPIC_API_KEY"):
            FAQSynthesizer(_config(provider="anthropic", api_key="   "))

    def test_unknown_provider_rejected(self) -> None:
        with pytest.raises(InputError, match="Unknown LLM provider"):
            FAQSynthesizer(_config(provider="mystery"))

    def test_builds_provider_from_config(self) -> None:
        synth = FAQSynthesizer(_config())
        assert isinstance(synth.provider, OpenAIProvider)
        assert synth.provider.api_key == "sk-test"

    def test_from_settings_picks_active_provider(self) -> None:
        settings = Settings()
        settings.llm_provider = "Gemini"
        settings.gemini_api_key = "gk"
        settings.gemini_model = "gemini-test"
        settings.llm_max_retries = 4

        config = SynthesizerConfig.from_settings(settings)

        assert config.provider == "gemini"
        assert config.api_key == "gk"
        assert config.model == "gemini-test"
        assert config.max_retries == 4

    def test_params_request_json_mode(self) -> None:
        params = _config(temperature=0.5, max_tokens=1234).params
        assert params.json_mode is True
        assert params.temperature == 0.5
        assert params.max_tokens == 1234


# ---------------------------------------------------------------------------
# Input handling
# ---------------------------------------------------------------------------

class TestInput:
    @pytest.mark.parametrize("text", ["", "   \n\t "])
    def test_empty_text_rejected_without_calling_provider(self, text: str) -> None:
        provider = ScriptedProvider()
        with pytest.raises(InputError):
            _synth(provider).generate(text, 5)
        assert provider.calls == 0

    def test_long_text_truncated_in_prompt(self) -> None:
        provider = ScriptedProvider(_faqs_json(5))
        synth = _synth(provider, config={"max_text_length": 50})

        synth.generate("word " * 100, 5)

        prompt = provider.prompts[0]
        assert ("word " * 10) + "..." in prompt
        assert ("word " * 11) not in prompt

    def test_requested_count_appears_in_prompt(self) -> None:
        provider = ScriptedProvider(_faqs_json(8))
        _synth(provider).generate(_TEXT, 8)
        assert "EXACTLY 8" in provider.prompts[0]


# ---------------------------------------------------------------------------
# Count contract
# ---------------------------------------------------------------------------

class TestCountContract:
    def test_exact_count_trimmed_items(self) -> None:
        result = _synth(ScriptedProvider(_faqs_json(5))).generate(_TEXT, 5)

        assert len(result) == 5
        assert result[0] == FAQItem(question="Question 0?", answer="Answer 0.")

    def test_excess_trimmed_to_first_requested(self) -> None:
        result = _synth(ScriptedProvider(_faqs_json(9))).generate(_TEXT, 7)

        assert len(result) == 7
        assert [item.question for item in result] == [f"Question {i}?" for i in range(7)]

    def test_deficit_raises_count_error(self) -> None:
        with pytest.raises(CountError) as excinfo:
            _synth(ScriptedProvider(_faqs_json(4))).generate(_TEXT, 7)

        assert excinfo.value.expected == 7
        assert excinfo.value.received == 4

    @pytest.mark.parametrize("requested, expected", [(1, 5), (3, 5), (12, 10), (50, 10)])
    def test_out_of_range_counts_are_clamped(self, requested: int, expected: int) -> None:
        result = _synth(ScriptedProvider(_faqs_json(12))).generate(_TEXT, requested)
        assert len(result) == expected

    def test_fenced_response_parsed(self) -> None:
        raw = "```json\n" + json.dumps(
            {"faqs": [{"question": "Q", "answer": "A"}] * 5}
        ) + "\n```"
        result = _synth(ScriptedProvider(raw)).generate(_TEXT, 5)

        assert len(result) == 5
        assert all(item == FAQItem("Q", "A") for item in result)

    def test_malformed_item_fails_whole_call(self) -> None:
        items = [{"question": "Q", "answer": "A"}] * 4 + [{"question": "Q"}]
        with pytest.raises(ParseError) as excinfo:
            _synth(ScriptedProvider(json.dumps(items))).generate(_TEXT, 5)
        assert excinfo.value.index == 4

    def test_unparseable_response(self) -> None:
        with pytest.raises(ParseError):
            _synth(ScriptedProvider("Sorry, I can't do that.")).generate(_TEXT, 5)

    def test_parse_errors_are_not_retried(self) -> None:
        provider = ScriptedProvider("not json", _faqs_json(5))
        with pytest.raises(ParseError):
            _synth(provider).generate(_TEXT, 5)
        assert provider.calls == 1


# ---------------------------------------------------------------------------
# Retry policy
# ---------------------------------------------------------------------------

class TestRetry:
    def test_two_server_errors_then_success(self) -> None:
        sleeps: list[float] = []
        provider = ScriptedProvider(_server_error(), _server_error(), _faqs_json(5))

        result = _synth(provider, sleeps).generate(_TEXT, 5)

        assert len(result) == 5
        assert provider.calls == 3
        assert sleeps == [1.0, 2.0]

    def test_exhausted_retries_surface_retriable_error(self) -> None:
        sleeps: list[float] = []
        provider = ScriptedProvider(_server_error(), _server_error(), _server_error())

        with pytest.raises(UpstreamError) as excinfo:
            _synth(provider, sleeps).generate(_TEXT, 5)

        assert excinfo.value.retriable is True
        assert provider.calls == 3
        assert sleeps == [1.0, 2.0]

    def test_client_error_not_retried(self) -> None:
        sleeps: list[float] = []
        provider = ScriptedProvider(
            UpstreamError("bad key", retriable=False, status_code=401), _faqs_json(5)
        )

        with pytest.raises(UpstreamError) as excinfo:
            _synth(provider, sleeps).generate(_TEXT, 5)

        assert excinfo.value.retriable is False
        assert provider.calls == 1
        assert sleeps == []

    def test_zero_retries_configured(self) -> None:
        provider = ScriptedProvider(_server_error(), _faqs_json(5))
        with pytest.raises(UpstreamError):
            _synth(provider, config={"max_retries": 0}).generate(_TEXT, 5)
        assert provider.calls == 1

    def test_deadline_stops_backoff(self) -> None:
        sleeps: list[float] = []
        provider = ScriptedProvider(_server_error(), _faqs_json(5))
        synth = _synth(provider, sleeps, clock=lambda: 100.0)

        with pytest.raises(UpstreamError):
            synth.generate(_TEXT, 5, deadline=100.5)

        assert provider.calls == 1
        assert sleeps == []

    def test_deadline_with_room_still_retries(self) -> None:
        sleeps: list[float] = []
        provider = ScriptedProvider(_server_error(), _faqs_json(5))
        synth = _synth(provider, sleeps, clock=lambda: 100.0)

        result = synth.generate(_TEXT, 5, deadline=130.0)

        assert len(result) == 5
        assert sleeps == [1.0]
