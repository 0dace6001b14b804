"""Tests for the generator providers and HTTP error classification.

``respx`` patches ``httpx`` at the transport layer; each test asserts on the
request a provider builds and on how its failures are classified.
"""

from __future__ import annotations

import json

import httpx
import pytest
import respx

from faqsmith.faq.errors import InputError, UpstreamError
from faqsmith.faq.providers import (
    AnthropicProvider,
    GeminiProvider,
    GenerationParams,
    OpenAIProvider,
    build_provider,
    classify_http_error,
)

_PARAMS = GenerationParams(temperature=0.7, max_tokens=4000, json_mode=True, timeout=5.0)
_OPENAI_URL = "https://api.openai.com/v1/chat/completions"


def _status_error(status: int, body: dict | None = None, headers: dict | None = None):
    request = httpx.Request("POST", "https://llm.example.com/")
    response = httpx.Response(status, json=body or {}, headers=headers, request=request)
    return httpx.HTTPStatusError("boom", request=request, response=response)


# ===========================================================================
# classify_http_error
# ===========================================================================

class TestClassifyHttpError:
    @pytest.mark.parametrize("status", [500, 502, 503, 529, 408])
    def test_server_errors_are_retriable(self, status: int) -> None:
        err = classify_http_error(_status_error(status), "OpenAI")
        assert err.retriable is True
        assert err.status_code == status

    @pytest.mark.parametrize("status", [400, 401, 403, 404, 422])
    def test_client_errors_are_not_retriable(self, status: int) -> None:
        err = classify_http_error(
            _status_error(status, {"error": {"message": "Incorrect API key"}}), "OpenAI"
        )
        assert err.retriable is False
        assert "Incorrect API key" in err.detail

    def test_rate_limit_keeps_retry_after(self) -> None:
        err = classify_http_error(
            _status_error(429, headers={"Retry-After": "30"}), "Claude"
        )
        assert err.rate_limited is True
        assert err.retriable is False
        assert err.retry_after == 30.0
        assert "30 seconds" in err.detail

    def test_timeout_is_retriable(self) -> None:
        err = classify_http_error(httpx.ReadTimeout("slow"), "Gemini")
        assert err.retriable is True
        assert err.status_code is None

    def test_connection_failure_is_retriable(self) -> None:
        err = classify_http_error(httpx.ConnectError("reset"), "Gemini")
        assert err.retriable is True


# ===========================================================================
# OpenAIProvider
# ===========================================================================

class TestOpenAIProvider:
    def test_builds_json_mode_request(self) -> None:
        provider = OpenAIProvider(api_key="sk-test", model="gpt-4o-mini")
        with respx.mock:
            route = respx.post(_OPENAI_URL).mock(
                return_value=httpx.Response(
                    200,
                    json={
                        "choices": [{"message": {"content": '{"faqs": []}'}}],
                        "usage": {"total_tokens": 12},
                    },
                )
            )
            text = provider.submit("PROMPT", _PARAMS)

        assert text == '{"faqs": []}'
        request = route.calls.last.request
        assert request.headers["Authorization"] == "Bearer sk-test"
        body = json.loads(request.content)
        assert body["model"] == "gpt-4o-mini"
        assert body["messages"] == [{"role": "user", "content": "PROMPT"}]
        assert body["temperature"] == 0.7
        assert body["max_tokens"] == 4000
        assert body["response_format"] == {"type": "json_object"}

    def test_null_content_becomes_empty_string(self) -> None:
        provider = OpenAIProvider(api_key="k", model="m")
        with respx.mock:
            respx.post(_OPENAI_URL).mock(
                return_value=httpx.Response(
                    200, json={"choices": [{"message": {"content": None}}]}
                )
            )
            assert provider.submit("p", _PARAMS) == ""

    def test_500_raises_retriable(self) -> None:
        provider = OpenAIProvider(api_key="k", model="m")
        with respx.mock:
            respx.post(_OPENAI_URL).mock(return_value=httpx.Response(500))
            with pytest.raises(UpstreamError) as excinfo:
                provider.submit("p", _PARAMS)

        assert excinfo.value.retriable is True
        assert excinfo.value.provider == "OpenAI"

    def test_401_raises_non_retriable(self) -> None:
        provider = OpenAIProvider(api_key="bad", model="m")
        with respx.mock:
            respx.post(_OPENAI_URL).mock(
                return_value=httpx.Response(
                    401, json={"error": {"message": "Incorrect API key provided"}}
                )
            )
            with pytest.raises(UpstreamError) as excinfo:
                provider.submit("p", _PARAMS)

        assert excinfo.value.retriable is False
        assert excinfo.value.status_code == 401

    def test_unexpected_shape(self) -> None:
        provider = OpenAIProvider(api_key="k", model="m")
        with respx.mock:
            respx.post(_OPENAI_URL).mock(return_value=httpx.Response(200, json={"choices": []}))
            with pytest.raises(UpstreamError) as excinfo:
                provider.submit("p", _PARAMS)

        assert excinfo.value.retriable is False

    def test_non_json_body_is_retriable(self) -> None:
        provider = OpenAIProvider(api_key="k", model="m")
        with respx.mock:
            respx.post(_OPENAI_URL).mock(return_value=httpx.Response(200, text="<html>"))
            with pytest.raises(UpstreamError) as excinfo:
                provider.submit("p", _PARAMS)

        assert excinfo.value.retriable is True


# ===========================================================================
# AnthropicProvider / GeminiProvider
# ===========================================================================

class TestAnthropicProvider:
    def test_request_and_text_blocks(self) -> None:
        provider = AnthropicProvider(api_key="ak", model="claude-test")
        with respx.mock:
            route = respx.post("https://api.anthropic.com/v1/messages").mock(
                return_value=httpx.Response(
                    200,
                    json={
                        "content": [
                            {"type": "text", "text": '{"faqs": '},
                            {"type": "text", "text": "[]}"},
                        ]
                    },
                )
            )
            text = provider.submit("PROMPT", _PARAMS)

        assert text == '{"faqs": []}'
        request = route.calls.last.request
        assert request.headers["x-api-key"] == "ak"
        assert request.headers["anthropic-version"] == "2023-06-01"
        body = json.loads(request.content)
        assert body["model"] == "claude-test"
        assert "response_format" not in body


class TestGeminiProvider:
    def test_request_uses_json_mime_type(self) -> None:
        provider = GeminiProvider(api_key="gk", model="gemini-test")
        url = (
            "https://generativelanguage.googleapis.com/v1beta/models/"
            "gemini-test:generateContent"
        )
        with respx.mock:
            route = respx.post(url).mock(
                return_value=httpx.Response(
                    200,
                    json={"candidates": [{"content": {"parts": [{"text": "[]"}]}}]},
                )
            )
            text = provider.submit("PROMPT", _PARAMS)

        assert text == "[]"
        request = route.calls.last.request
        assert request.headers["x-goog-api-key"] == "gk"
        config = json.loads(request.content)["generationConfig"]
        assert config["responseMimeType"] == "application/json"
        assert config["maxOutputTokens"] == 4000


# ===========================================================================
# build_provider
# ===========================================================================

class TestBuildProvider:
    @pytest.mark.parametrize(
        "name, cls",
        [("openai", OpenAIProvider), ("Anthropic", AnthropicProvider), ("gemini", GeminiProvider)],
    )
    def test_known_providers(self, name, cls) -> None:
        provider = build_provider(name, "key", "model")
        assert isinstance(provider, cls)
        assert provider.model == "model"

    def test_unknown_provider(self) -> None:
        with pytest.raises(InputError):
            build_provider("mystery", "key", "model")


# ===========================================================================
# Malformed response envelopes
# ===========================================================================

class TestMalformedEnvelope:
    def test_anthropic_non_object_block(self) -> None:
        provider = AnthropicProvider(api_key="ak", model="claude-test")
        with respx.mock:
            respx.post("https://api.anthropic.com/v1/messages").mock(
                return_value=httpx.Response(200, json={"content": ["oops"]})
            )
            with pytest.raises(UpstreamError) as excinfo:
                provider.submit("p", _PARAMS)

        assert excinfo.value.retriable is False
        assert excinfo.value.provider == "Claude"

    def test_gemini_non_object_part(self) -> None:
        provider = GeminiProvider(api_key="gk", model="gemini-test")
        url = (
            "https://generativelanguage.googleapis.com/v1beta/models/"
            "gemini-test:generateContent"
        )
        with respx.mock:
            respx.post(url).mock(
                return_value=httpx.Response(
                    200, json={"candidates": [{"content": {"parts": ["x"]}}]}
                )
            )
            with pytest.raises(UpstreamError) as excinfo:
                provider.submit("p", _PARAMS)

        assert excinfo.value.retriable is False

    def test_top_level_array(self) -> None:
        provider = OpenAIProvider(api_key="k", model="m")
        with respx.mock:
            respx.post(_OPENAI_URL).mock(return_value=httpx.Response(200, json=["x"]))
            with pytest.raises(UpstreamError):
                provider.submit("p", _PARAMS)
