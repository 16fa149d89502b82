"""Tests for LLM provider implementations.

Shared behaviour (complete(), empty-response handling, pass-through of
codepulse errors) lives in BaseProvider and is tested once via a lightweight
stub. Provider-specific tests cover only what differs: the SDK call shape and
the mapping of SDK exceptions onto the codepulse error taxonomy.
"""

from unittest.mock import MagicMock, patch

import anthropic
import httpx
import openai
import pytest

from codepulse_core import errors
from codepulse_core.models import Completion, Usage
from codepulse_core.providers.anthropic import AnthropicProvider
from codepulse_core.providers.base import BaseProvider
from codepulse_core.providers.openai import OpenAIProvider
from codepulse_core.providers.registry import get_provider


class _StubProvider(BaseProvider):
    def __init__(self, result=None, error=None):
        self.result = result if result is not None else Completion(text="ok", usage=Usage(1, 2))
        self.error = error
        self.calls = []

    def _call_api(self, prompt, max_tokens, temperature, system):
        self.calls.append((prompt, max_tokens, temperature, system))
        if self.error is not None:
            raise self.error
        return self.result


def _response(status, url="https://api.example.com/v1"):
    return httpx.Response(status, request=httpx.Request("POST", url))


# ---------------------------------------------------------------------------
# Shared behaviour, tested once through the stub, not per provider
# ---------------------------------------------------------------------------


class TestBaseProvider:
    def test_returns_completion(self):
        provider = _StubProvider()
        completion = provider.complete("prompt", max_tokens=10)
        assert completion.text == "ok"
        assert completion.usage.output_tokens == 2

    def test_passes_arguments_through(self):
        provider = _StubProvider()
        provider.complete("prompt", max_tokens=123, temperature=0, system="be strict")
        assert provider.calls == [("prompt", 123, 0, "be strict")]

    def test_empty_text_is_provider_error(self):
        provider = _StubProvider(result=Completion(text=""))
        with pytest.raises(errors.ProviderError):
            provider.complete("prompt", max_tokens=10)

    def test_codepulse_errors_pass_through_unchanged(self):
        original = errors.RateLimitError("slow down")
        provider = _StubProvider(error=original)
        with pytest.raises(errors.RateLimitError) as exc_info:
            provider.complete("prompt", max_tokens=10)
        assert exc_info.value is original

    def test_unknown_errors_become_provider_error(self):
        provider = _StubProvider(error=RuntimeError("boom"))
        with pytest.raises(errors.ProviderError, match="boom"):
            provider.complete("prompt", max_tokens=10)

    def test_no_retry_on_failure(self):
        provider = _StubProvider(error=RuntimeError("boom"))
        with pytest.raises(errors.ProviderError):
            provider.complete("prompt", max_tokens=10)
        assert len(provider.calls) == 1


# ---------------------------------------------------------------------------
# Anthropic
# ---------------------------------------------------------------------------


class TestAnthropicProvider:
    def _provider(self):
        provider = AnthropicProvider(api_key="key")
        provider.client = MagicMock()
        return provider

    def test_raises_import_error_without_sdk(self):
        with patch.dict("sys.modules", {"anthropic": None}):
            with pytest.raises(ImportError):
                AnthropicProvider(api_key="key")

    def test_sdk_retries_disabled(self):
        assert AnthropicProvider(api_key="key").client.max_retries == 0

    def test_model_is_claude(self):
        assert "claude" in AnthropicProvider.MODEL

    def test_model_override(self):
        assert AnthropicProvider(api_key="key", model="claude-x").MODEL == "claude-x"

    def test_call_returns_text_and_usage(self):
        from anthropic.types import TextBlock

        provider = self._provider()
        response = MagicMock()
        response.content = [TextBlock(type="text", text='{"summary": "ok"}')]
        response.usage.input_tokens = 120
        response.usage.output_tokens = 30
        provider.client.messages.create.return_value = response

        completion = provider.complete("review this", max_tokens=4096, temperature=0, system="sys")

        assert completion.text == '{"summary": "ok"}'
        assert completion.usage == Usage(input_tokens=120, output_tokens=30)
        kwargs = provider.client.messages.create.call_args.kwargs
        assert kwargs["temperature"] == 0
        assert kwargs["max_tokens"] == 4096
        assert kwargs["system"] == "sys"
        assert kwargs["messages"] == [{"role": "user", "content": "review this"}]

    def test_system_omitted_when_not_given(self):
        from anthropic.types import TextBlock

        provider = self._provider()
        response = MagicMock()
        response.content = [TextBlock(type="text", text="fixed")]
        response.usage.input_tokens = 1
        response.usage.output_tokens = 1
        provider.client.messages.create.return_value = response

        provider.complete("fix this", max_tokens=8192)

        assert "system" not in provider.client.messages.create.call_args.kwargs

    def _raise(self, error):
        provider = self._provider()
        provider.client.messages.create.side_effect = error
        return provider

    def test_auth_error(self):
        provider = self._raise(anthropic.AuthenticationError("bad key", response=_response(401), body=None))
        with pytest.raises(errors.AuthError):
            provider.complete("p", max_tokens=1)

    def test_rate_limit_error(self):
        provider = self._raise(anthropic.RateLimitError("slow", response=_response(429), body=None))
        with pytest.raises(errors.RateLimitError):
            provider.complete("p", max_tokens=1)

    def test_credit_balance_is_budget_error(self):
        body = {"type": "error", "error": {"type": "invalid_request_error", "message": "Your credit balance is too low"}}
        provider = self._raise(anthropic.BadRequestError("bad", response=_response(400), body=body))
        with pytest.raises(errors.BudgetError):
            provider.complete("p", max_tokens=1)

    def test_other_bad_request_is_provider_error(self):
        body = {"type": "error", "error": {"type": "invalid_request_error", "message": "max_tokens too large"}}
        provider = self._raise(anthropic.BadRequestError("bad", response=_response(400), body=body))
        with pytest.raises(errors.ProviderError, match="max_tokens too large"):
            provider.complete("p", max_tokens=1)

    def test_connection_error_is_network_error(self):
        request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
        provider = self._raise(anthropic.APIConnectionError(request=request))
        with pytest.raises(errors.NetworkError):
            provider.complete("p", max_tokens=1)

    def test_server_error_is_provider_error(self):
        provider = self._raise(anthropic.InternalServerError("down", response=_response(503), body=None))
        with pytest.raises(errors.ProviderError, match="temporarily unavailable"):
            provider.complete("p", max_tokens=1)


# ---------------------------------------------------------------------------
# OpenAI
# ---------------------------------------------------------------------------


class TestOpenAIProvider:
    def _provider(self):
        provider = OpenAIProvider(api_key="key")
        provider.client = MagicMock()
        return provider

    def test_raises_import_error_without_sdk(self):
        import codepulse_core.providers.openai as openai_mod

        real_openai = openai_mod._OpenAI
        openai_mod._OpenAI = None
        try:
            with pytest.raises(ImportError):
                OpenAIProvider(api_key="key")
        finally:
            openai_mod._OpenAI = real_openai

    def test_sdk_retries_disabled(self):
        assert OpenAIProvider(api_key="key").client.max_retries == 0

    def test_model_is_gpt(self):
        assert "gpt" in OpenAIProvider.MODEL

    def test_call_returns_text_and_usage(self):
        provider = self._provider()
        response = MagicMock()
        response.choices[0].message.content = "fixed"
        response.usage.prompt_tokens = 10
        response.usage.completion_tokens = 5
        provider.client.chat.completions.create.return_value = response

        completion = provider.complete("p", max_tokens=100, system="sys")

        assert completion.text == "fixed"
        assert completion.usage == Usage(input_tokens=10, output_tokens=5)
        messages = provider.client.chat.completions.create.call_args.kwargs["messages"]
        assert messages[0] == {"role": "system", "content": "sys"}
        assert messages[1] == {"role": "user", "content": "p"}

    def test_auth_error(self):
        provider = self._provider()
        provider.client.chat.completions.create.side_effect = openai.AuthenticationError(
            "bad key", response=_response(401), body=None
        )
        with pytest.raises(errors.AuthError):
            provider.complete("p", max_tokens=1)

    def test_insufficient_quota_is_budget_error(self):
        provider = self._provider()
        provider.client.chat.completions.create.side_effect = openai.RateLimitError(
            "quota", response=_response(429), body={"code": "insufficient_quota", "message": "quota"}
        )
        with pytest.raises(errors.BudgetError):
            provider.complete("p", max_tokens=1)

    def test_rate_limit_error(self):
        provider = self._provider()
        provider.client.chat.completions.create.side_effect = openai.RateLimitError(
            "slow", response=_response(429), body={"code": "rate_limit_exceeded", "message": "slow"}
        )
        with pytest.raises(errors.RateLimitError):
            provider.complete("p", max_tokens=1)


class TestGetProvider:
    def test_anthropic(self):
        provider = get_provider({"model": "anthropic", "anthropic_api_key": "key"})
        assert isinstance(provider, AnthropicProvider)

    def test_openai(self):
        provider = get_provider({"model": "openai", "openai_api_key": "key"})
        assert isinstance(provider, OpenAIProvider)

    def test_unknown_model_raises(self):
        with pytest.raises(ValueError, match="Unknown model provider"):
            get_provider({"model": "llama"})
